"""CLI entrypoint for bq-ddl."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from bq_ddl.config import DdlConfig, discover_config, load_config, resolve_dialect
from bq_ddl.dialect import Dialect
from bq_ddl.generate import render_alter_document, render_document, render_resource
from bq_ddl.hydrate import load_document
from bq_ddl.writers import render_script, write_script


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Write the script to this file (default: stdout).",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to bq_ddl.toml (default: auto-discover from CWD).",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with ``create`` and ``alter`` subcommands."""
    parser = argparse.ArgumentParser(
        prog="bq-ddl",
        description="Render BigQuery DDL from a schema document.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- create ---
    create_parser = subparsers.add_parser(
        "create",
        help="Render CREATE statements for datasets, tables and views.",
    )
    create_parser.add_argument(
        "document",
        type=str,
        help="JSON schema document.",
    )
    create_parser.add_argument(
        "--resource",
        action="store_true",
        help="Treat the document as a BigQuery table resource "
        "(bq show --format=json).",
    )
    _add_common_arguments(create_parser)

    # --- alter ---
    alter_parser = subparsers.add_parser(
        "alter",
        help="Render ALTER/DROP statements for classified changes.",
    )
    alter_parser.add_argument(
        "document",
        type=str,
        help="JSON document with a 'changes' list.",
    )
    _add_common_arguments(alter_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint.

    Args:
        argv: Command-line arguments.  Defaults to ``sys.argv[1:]``.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )

    config, dialect = _resolve_config(args)

    try:
        document = load_document(Path(args.document))
        if args.command == "create":
            statements = _handle_create(args, document, config, dialect)
        else:
            statements = render_alter_document(document, config.project.id, dialect)
    except (OSError, KeyError, ValueError) as exc:
        logging.error("%s", exc)
        sys.exit(1)

    script = render_script(statements, config.render.terminator)

    if args.output:
        dest = Path(args.output)
        write_script(dest, script)
        logging.info("Saved %s", dest)
    else:
        sys.stdout.write(script)


def _resolve_config(args: argparse.Namespace) -> tuple[DdlConfig, Dialect]:
    """Load config from CLI args, falling back to defaults.

    Args:
        args: Parsed CLI namespace (must have a ``config`` attribute).

    Returns:
        Tuple of (DdlConfig, Dialect).
    """
    config_path: Path | None
    if args.config:
        config_path = Path(args.config).resolve()
    else:
        try:
            config_path = discover_config()
        except FileNotFoundError:
            logging.debug("No config file found, using defaults")
            config_path = None

    try:
        config = load_config(config_path) if config_path else DdlConfig()
        return config, resolve_dialect(config, config_path)
    except (OSError, KeyError, ValueError) as exc:
        logging.error("%s", exc)
        sys.exit(1)


def _handle_create(
    args: argparse.Namespace,
    document: dict,
    config: DdlConfig,
    dialect: Dialect,
) -> list[str]:
    """Handle the ``create`` subcommand."""
    if args.resource:
        return render_resource(document, dialect)
    return render_document(document, config.project.id, dialect)
