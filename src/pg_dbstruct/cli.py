"""Command-line entrypoint for pg-dbstruct."""

from __future__ import annotations

import argparse
import logging
import re
import sys
from typing import Any

from pg_dbstruct import __version__
from pg_dbstruct.config import ConfigError, Settings, Tag, load_settings
from pg_dbstruct.db import (
    DatabaseConnectionError,
    PostgresSchemaSource,
    SchemaQueryError,
    fetch_schema,
)
from pg_dbstruct.generator import generate
from pg_dbstruct.naming import CasingMode
from pg_dbstruct.output import OutputError
from pg_dbstruct.render import RenderError

_URL_PASSWORD = re.compile(r"(://[^:/@]+:)[^@]*@")
_KV_PASSWORD = re.compile(r"(password\s*=\s*)\S+", re.IGNORECASE)

CASE_CHOICES = [mode.value for mode in CasingMode]


def redact_dsn(dsn: str) -> str:
    if not dsn:
        return "(not set)"
    return _KV_PASSWORD.sub(r"\1***", _URL_PASSWORD.sub(r"\1***@", dsn))


def parse_tag(value: str) -> Tag:
    """Parse ``NAME[:CASE]`` into a tag, e.g. ``json:snake_to_lower_camel``."""
    name, _, case = value.partition(":")
    try:
        return Tag(name=name, case=case or CasingMode.AS_IS)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"invalid tag '{value}', expected NAME[:CASE] with CASE one of "
            f"{', '.join(CASE_CHOICES)}"
        ) from exc


def _add_connection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dsn",
        default=None,
        help="PostgreSQL DSN (default: $DBSTRUCT_DSN or $POSTGRES_DSN).",
    )
    parser.add_argument(
        "--schema",
        default=None,
        help="Database schema to read (default: the session's current schema).",
    )
    parser.add_argument(
        "--table",
        action="append",
        default=None,
        help="Only include this table. Repeat the flag to include multiple tables.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pg-dbstruct",
        description="Generate Go structs from PostgreSQL table metadata.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    subparsers = parser.add_subparsers(dest="command")
    check_parser = subparsers.add_parser(
        "config-check",
        help="Validate configuration without touching the database.",
    )
    _add_connection_args(check_parser)

    introspect_parser = subparsers.add_parser(
        "introspect",
        help="List tables and column counts that generation would use.",
    )
    _add_connection_args(introspect_parser)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate Go structs for the selected tables.",
    )
    _add_connection_args(generate_parser)
    generate_parser.add_argument(
        "--tag",
        action="append",
        type=parse_tag,
        default=None,
        help="Struct tag as NAME[:CASE], e.g. json:snake_to_lower_camel. Repeatable.",
    )
    generate_parser.add_argument(
        "--json-tag", action="store_true", default=None, help="Add a json tag."
    )
    generate_parser.add_argument(
        "--orm-tag", action="store_true", default=None, help="Add an orm tag."
    )
    for option, dest in (
        ("--field-case", "field_case"),
        ("--struct-case", "struct_case"),
        ("--file-case", "file_case"),
    ):
        generate_parser.add_argument(
            option,
            dest=dest,
            choices=CASE_CHOICES,
            default=None,
            help="Casing rule (default: as_is).",
        )
    generate_parser.add_argument(
        "--accessor",
        dest="gen_accessor",
        action="store_true",
        default=None,
        help="Generate a method returning the table name.",
    )
    generate_parser.add_argument(
        "--accessor-name",
        default=None,
        help="Name of the table-name method (default: TableName).",
    )
    generate_parser.add_argument(
        "--output",
        dest="output_path",
        default=None,
        help="Output file (single-file mode) or directory.",
    )
    generate_parser.add_argument(
        "--single-file",
        action="store_true",
        default=None,
        help="Write all structs into one file.",
    )
    generate_parser.add_argument(
        "--package", dest="package_name", default=None, help="Go package name."
    )
    generate_parser.add_argument(
        "--struct-suffix", default=None, help="Suffix appended to struct names."
    )
    generate_parser.add_argument(
        "--file-suffix", default=None, help="Suffix appended to file names."
    )
    generate_parser.add_argument(
        "--no-comments",
        dest="suppress_comments",
        action="store_true",
        default=None,
        help="Do not emit column comments.",
    )
    generate_parser.add_argument(
        "--no-format",
        action="store_true",
        help="Skip running gofmt on generated files.",
    )
    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides: dict[str, Any] = {
        "dsn": args.dsn,
        "db_schema": args.schema,
        "tables": args.table,
    }
    if args.command == "generate":
        overrides.update(
            tags=args.tag,
            tag_json=args.json_tag,
            tag_orm=args.orm_tag,
            field_case=args.field_case,
            struct_case=args.struct_case,
            file_case=args.file_case,
            gen_accessor=args.gen_accessor,
            accessor_name=args.accessor_name,
            output_path=args.output_path,
            single_file=args.single_file,
            package_name=args.package_name,
            struct_suffix=args.struct_suffix,
            file_suffix=args.file_suffix,
            suppress_comments=args.suppress_comments,
            formatter=() if args.no_format else None,
        )
    return load_settings(**overrides)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = _settings_from_args(args)
        settings.require_dsn()
    except ConfigError as exc:
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        return 2

    if args.command == "config-check":
        print("Configuration loaded successfully:")
        print(f"- dsn: {redact_dsn(settings.dsn)}")
        print(f"- schema: {settings.db_schema or '(current schema)'}")
        print(f"- tables: {', '.join(settings.tables) or '(all)'}")
        return 0

    if args.command == "introspect":
        try:
            with PostgresSchemaSource(settings.dsn, settings.db_schema) as source:
                schema = fetch_schema(source, settings.tables)
        except (DatabaseConnectionError, SchemaQueryError) as exc:
            print(f"Schema introspection failed:\n{exc}", file=sys.stderr)
            return 1

        print(f"Tables: {len(schema)}")
        for table, columns in schema.items():
            print(f"- {table} ({len(columns)} columns)")
        return 0

    try:
        report = generate(settings)
    except ConfigError as exc:
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        return 2
    except (DatabaseConnectionError, SchemaQueryError) as exc:
        print(f"Schema introspection failed:\n{exc}", file=sys.stderr)
        return 1
    except RenderError as exc:
        print(f"Struct rendering failed:\n{exc}", file=sys.stderr)
        return 1
    except OutputError as exc:
        print(f"Writing generated code failed:\n{exc}", file=sys.stderr)
        return 1

    print("Generation succeeded:")
    print(f"- tables: {len(report.tables)}")
    for path in report.files:
        print(f"- wrote {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
