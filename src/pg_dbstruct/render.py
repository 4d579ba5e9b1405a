"""Go struct rendering for a single table."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Final, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from pg_dbstruct.config import Settings, Tag
from pg_dbstruct.db.introspect import Column
from pg_dbstruct.naming import format_name
from pg_dbstruct.typemap import TIME_IMPORT, TIME_TYPE, map_type

GO_FILE_EXTENSION = ".go"


class RenderError(RuntimeError):
    """Raised when a table cannot be rendered into a struct."""


class NameCollisionError(RenderError):
    """Raised when two tables or two columns would produce the same name."""


TEMPLATE_DIR: Final[Path] = Path(__file__).parent / "templates"
DEFAULT_RECEIVER: Final = "t"


@lru_cache(maxsize=1)
def _template_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        auto_reload=False,
    )


@dataclass(frozen=True)
class GenerationResult:
    """Rendered struct for one table."""

    table_name: str
    type_name: str
    file_name: str
    content: str
    needs_time_import: bool = False


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def type_name_for(table: str, settings: Settings) -> str:
    return format_name(table, settings.struct_case) + settings.struct_suffix


def file_name_for(table: str, settings: Settings) -> str:
    stem = format_name(table, settings.file_case) + settings.file_suffix
    return stem + GO_FILE_EXTENSION


def render_tag_clause(column_name: str, tags: Sequence[Tag]) -> str:
    """Build ``json:"userName" orm:"user_name"`` for a column; empty without tags."""
    return " ".join(
        f"{tag.name}:{_quote(format_name(column_name, tag.case))}" for tag in tags
    )


def _comment_lines(comment: str) -> list[str]:
    return [f"// {line}".rstrip() for line in comment.strip().splitlines()]


def receiver_name(type_name: str) -> str:
    """Lower-cased first letter of the type, or ``t`` when it is not a letter."""
    first = type_name[:1]
    return first.lower() if first.isalpha() else DEFAULT_RECEIVER


def render_table(
    table: str,
    columns: Sequence[Column],
    settings: Settings,
    tags: Sequence[Tag] | None = None,
) -> GenerationResult:
    """Render the struct (and optional accessor) for one table.

    ``tags`` defaults to ``settings.effective_tags()``; the coordinator
    passes the list once so every table uses the same one.
    """
    if tags is None:
        tags = settings.effective_tags()

    type_name = type_name_for(table, settings)
    if not type_name:
        raise RenderError(f"Table '{table}' produced an empty type name.")

    needs_time_import = False
    seen: dict[str, str] = {}
    fields: list[dict[str, Any]] = []
    for column in columns:
        field_name = format_name(column.name, settings.field_case)
        if not field_name:
            raise RenderError(
                f"Column '{table}.{column.name}' produced an empty field name."
            )
        if field_name in seen:
            raise NameCollisionError(
                f"Columns '{table}.{seen[field_name]}' and '{table}.{column.name}' "
                f"both produce field name '{field_name}'."
            )
        seen[field_name] = column.name

        go_type = map_type(column.data_type)
        if go_type == TIME_TYPE:
            needs_time_import = True

        tag_clause = render_tag_clause(column.name, tags)
        fields.append(
            {
                "name": field_name,
                "type": go_type,
                "tag_clause": f" `{tag_clause}`" if tag_clause else "",
                "comment_lines": (
                    _comment_lines(column.comment)
                    if column.comment and not settings.suppress_comments
                    else []
                ),
            }
        )

    accessor = None
    if settings.accessor_enabled:
        accessor = {
            "receiver": receiver_name(type_name),
            "method": settings.accessor_name,
            "table_literal": _quote(table),
        }

    content = (
        _template_env()
        .get_template("struct.go.j2")
        .render(type_name=type_name, fields=fields, accessor=accessor)
    )
    return GenerationResult(
        table_name=table,
        type_name=type_name,
        file_name=file_name_for(table, settings),
        content=content,
        needs_time_import=needs_time_import,
    )


def render_file(
    package_name: str, fragments: Sequence[str], needs_time_import: bool
) -> str:
    """Assemble a complete Go source file from rendered fragments."""
    return (
        _template_env()
        .get_template("file.go.j2")
        .render(
            package_name=package_name,
            imports=[_quote(TIME_IMPORT)] if needs_time_import else [],
            fragments=[fragment.rstrip("\n") for fragment in fragments],
        )
    )
