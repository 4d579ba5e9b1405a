"""Schema-to-struct generation pipeline."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Sequence

from pg_dbstruct.config import Settings
from pg_dbstruct.db.introspect import (
    Column,
    PostgresSchemaSource,
    SchemaSource,
    fetch_schema,
)
from pg_dbstruct.output import format_file, write_file
from pg_dbstruct.render import (
    GenerationResult,
    NameCollisionError,
    RenderError,
    render_file,
    render_table,
)

logger = logging.getLogger(__name__)

WriteSink = Callable[[Path, str], None]
FormatSink = Callable[[Path, Sequence[str]], None]


@dataclass(frozen=True)
class GenerationReport:
    """Files written by a generation run."""

    tables: list[str] = field(default_factory=list)
    files: list[Path] = field(default_factory=list)


def render_tables(
    schema: Mapping[str, Sequence[Column]], settings: Settings
) -> list[GenerationResult]:
    """Render every table concurrently, returning results in table-name order."""
    if not schema:
        return []

    tags = settings.effective_tags()
    table_names = sorted(schema)
    results: list[GenerationResult] = []
    with ThreadPoolExecutor(max_workers=len(table_names)) as executor:
        futures = {
            table: executor.submit(render_table, table, schema[table], settings, tags)
            for table in table_names
        }
        for table in table_names:
            try:
                results.append(futures[table].result())
            except RenderError:
                raise
            except Exception as exc:
                raise RenderError(
                    f"Failed to render struct for table '{table}': {exc}"
                ) from exc

    _check_collisions(results, "type_name", "struct")
    if not settings.single_file:
        _check_collisions(results, "file_name", "file")
    return results


def _check_collisions(
    results: Sequence[GenerationResult], attribute: str, label: str
) -> None:
    seen: dict[str, str] = {}
    for result in results:
        name = getattr(result, attribute)
        if name in seen:
            raise NameCollisionError(
                f"Tables '{seen[name]}' and '{result.table_name}' both produce "
                f"{label} name '{name}'."
            )
        seen[name] = result.table_name


def _write_single_file(
    results: Sequence[GenerationResult],
    settings: Settings,
    write: WriteSink,
) -> list[Path]:
    path = settings.resolved_output_path()
    content = render_file(
        settings.package_name,
        [result.content for result in results],
        any(result.needs_time_import for result in results),
    )
    write(path, content)
    return [path]


def _write_many_files(
    results: Sequence[GenerationResult],
    settings: Settings,
    write: WriteSink,
) -> list[Path]:
    if not results:
        return []

    directory = settings.resolved_output_path()
    jobs = [
        (
            directory / result.file_name,
            render_file(
                settings.package_name, [result.content], result.needs_time_import
            ),
        )
        for result in results
    ]
    with ThreadPoolExecutor(max_workers=len(jobs)) as executor:
        futures = [executor.submit(write, path, content) for path, content in jobs]
    # The executor has joined every write; surface the first failure.
    for future in futures:
        future.result()
    return [path for path, _content in jobs]


def generate(
    settings: Settings,
    source: SchemaSource | None = None,
    write: WriteSink = write_file,
    fmt: FormatSink = format_file,
) -> GenerationReport:
    """Read the schema, render one struct per table, and write the output.

    Raises:
        ConfigError: No DSN configured.
        DatabaseConnectionError, SchemaQueryError: The catalog could not be read.
        RenderError, NameCollisionError: A table could not be rendered.
        OutputError: A file could not be written.
    """
    started = time.perf_counter()
    settings.require_dsn()

    if source is None:
        with PostgresSchemaSource(settings.dsn, settings.db_schema) as pg_source:
            schema = fetch_schema(pg_source, settings.tables)
    else:
        schema = fetch_schema(source, settings.tables)

    results = render_tables(schema, settings)

    if settings.single_file:
        files = _write_single_file(results, settings, write)
    else:
        files = _write_many_files(results, settings, write)

    for path in files:
        try:
            fmt(path, settings.formatter)
        except Exception as exc:
            logger.debug("Formatting %s failed: %s", path, exc)

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "Generated %d struct(s) into %d file(s) in %.0f ms",
        len(results),
        len(files),
        elapsed_ms,
    )
    return GenerationReport(tables=list(schema), files=files)
