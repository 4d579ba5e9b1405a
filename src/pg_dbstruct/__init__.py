"""Generate Go struct definitions from PostgreSQL table metadata."""

from pg_dbstruct.config import ConfigError, Settings, SettingsBuilder, Tag, load_settings
from pg_dbstruct.generator import GenerationReport, generate
from pg_dbstruct.naming import CasingMode, format_name
from pg_dbstruct.render import NameCollisionError, RenderError
from pg_dbstruct.typemap import map_type

__version__ = "0.1.0"

__all__ = [
    "CasingMode",
    "ConfigError",
    "GenerationReport",
    "NameCollisionError",
    "RenderError",
    "Settings",
    "SettingsBuilder",
    "Tag",
    "__version__",
    "format_name",
    "generate",
    "load_settings",
    "map_type",
]
