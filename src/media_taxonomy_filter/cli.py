"""CLI entrypoint for media taxonomy depth filters."""

import argparse
import json
import sys
from pathlib import Path

from media_taxonomy_filter.config.loader import (
    DEFAULT_FILTERS_PATH,
    get_filter_config,
    get_reference_fields,
    load_filters_config,
)
from media_taxonomy_filter.database.sqlite_client import session_context
from media_taxonomy_filter.filters.argument import DepthArgument, term_title
from media_taxonomy_filter.filters.errors import MediaTaxonomyFilterError
from media_taxonomy_filter.filters.models import HandlerKind
from media_taxonomy_filter.filters.service import evaluate
from media_taxonomy_filter.ingestion import load_fixture, read_fixture
from media_taxonomy_filter.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

DEFAULT_DB_PATH = "media_taxonomy.db"


def _reference_fields(args: argparse.Namespace) -> list[str]:
    """Reference fields from the filters config, or none if it is absent."""
    try:
        return get_reference_fields(load_filters_config(Path(args.config)))
    except FileNotFoundError:
        logger.warning(f"Filters config not found: {args.config}; creating base tables only")
        return []


def cmd_init_db(args: argparse.Namespace) -> None:
    fields = _reference_fields(args)
    with session_context(args.db, fields):
        pass
    print(f"Initialized {args.db} (reference fields: {', '.join(fields) or 'none'})")


def cmd_load(args: argparse.Namespace) -> None:
    fixture = read_fixture(Path(args.fixture))
    fields = _reference_fields(args)
    if fixture["reference_field"] not in fields:
        fields.append(fixture["reference_field"])
    with session_context(args.db, fields) as session:
        counts = load_fixture(fixture, session)
    print(
        f"Loaded {counts['terms']} terms, {counts['edges']} hierarchy edges, "
        f"{counts['media']} media, {counts['references']} references"
    )


def cmd_query(args: argparse.Namespace) -> None:
    config = load_filters_config(Path(args.config))
    filter_config = get_filter_config(args.filter, config)
    if args.depth is not None:
        filter_config = filter_config.model_copy(update={"depth": args.depth})

    if filter_config.handler == HandlerKind.ARGUMENT:
        raw = " ".join(args.values)
    else:
        raw = args.values

    with session_context(args.db, [filter_config.reference_field]) as session:
        mids = evaluate(session, filter_config, raw)
        label = None
        if filter_config.handler == HandlerKind.ARGUMENT and len(args.values) == 1:
            label = DepthArgument(filter_config).title(session, args.values[0])

    if args.format == "json":
        print(json.dumps({"filter": filter_config.id, "depth": filter_config.depth, "title": label, "media": mids}))
        return
    if label:
        print(f"# {label}")
    for mid in mids:
        print(mid)


def cmd_title(args: argparse.Namespace) -> None:
    with session_context(args.db) as session:
        print(term_title(session, args.tid))


def main() -> None:
    parser = argparse.ArgumentParser(description="Media taxonomy depth filters")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default: INFO)")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    def add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--db", type=str, default=DEFAULT_DB_PATH, help=f"SQLite path (default: {DEFAULT_DB_PATH})")
        sub.add_argument(
            "--config",
            type=str,
            default=str(DEFAULT_FILTERS_PATH),
            help=f"Filters config path (default: {DEFAULT_FILTERS_PATH})",
        )

    # init-db command
    init_parser = subparsers.add_parser("init-db", help="Create tables for configured reference fields")
    add_common(init_parser)
    init_parser.set_defaults(func=cmd_init_db)

    # load command
    load_parser = subparsers.add_parser("load", help="Load terms, media and references from a YAML fixture")
    add_common(load_parser)
    load_parser.add_argument("--fixture", type=str, required=True, help="Fixture YAML path")
    load_parser.set_defaults(func=cmd_load)

    # query command
    query_parser = subparsers.add_parser("query", help="List media ids matching a configured filter")
    add_common(query_parser)
    query_parser.add_argument("--filter", type=str, required=True, help="Filter id from the filters config")
    query_parser.add_argument("--depth", type=int, default=None, help="Override the configured depth")
    query_parser.add_argument(
        "--format",
        type=str,
        choices=["text", "json"],
        default="text",
        help="Output format: text or json (default: text)",
    )
    query_parser.add_argument("values", nargs="*", help="Term ids (argument handlers accept 1+2+3)")
    query_parser.set_defaults(func=cmd_query)

    # title command
    title_parser = subparsers.add_parser("title", help="Print the label of a term id")
    add_common(title_parser)
    title_parser.add_argument("tid", type=str, help="Term id")
    title_parser.set_defaults(func=cmd_title)

    args = parser.parse_args()
    configure_logging(args.log_level)

    if not args.command:
        parser.print_help()
        return

    try:
        args.func(args)
    except (MediaTaxonomyFilterError, FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(2)
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
