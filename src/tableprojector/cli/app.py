import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from tableprojector.cli.commands.columns import handle as handle_columns
from tableprojector.cli.commands.show import handle as handle_show
from tableprojector.config.options import OUTPUT_FORMATS, VALID_LOG_LEVELS
from tableprojector.config.workspace import load_workspace_context
from tableprojector.cli.utils import error_exit


def build_parser() -> argparse.ArgumentParser:
    # Common options shared by top-level and subcommands
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--log-level",
        choices=list(VALID_LOG_LEVELS),
        type=str.upper,
        help="set logging level (default: WARNING)",
    )
    common.add_argument(
        "--mapping",
        "-m",
        help="column mapping YAML (defaults to the workspace mapping or the built-in Payee Association columns)",
    )

    parser = argparse.ArgumentParser(
        prog="tableprojector",
        description="Project JSON record arrays into table columns and rows.",
        parents=[common],
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_show = sub.add_parser(
        "show",
        help="render a JSON payload as a table",
        parents=[common],
    )
    p_show.add_argument(
        "payload",
        nargs="?",
        help="path to a JSON payload file, or '-' for stdin (omit to fetch via --record-id)",
    )
    p_show.add_argument(
        "--record-id",
        "-r",
        help="record id to fetch through the workspace record source",
    )
    p_show.add_argument(
        "--format",
        "-f",
        choices=list(OUTPUT_FORMATS),
        default=None,
        help="output format: table (default) or json",
    )
    p_show.add_argument(
        "--strict",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="fail the whole payload when an element is not an object",
    )
    p_show.add_argument(
        "--link-base-url",
        help="prefix for link column targets (e.g. https://example.my.site.com)",
    )

    sub.add_parser(
        "columns",
        help="print the column descriptors for a mapping as JSON",
        parents=[common],
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        workspace_context = load_workspace_context(Path.cwd())
    except (FileNotFoundError, TypeError, ValueError) as exc:
        logging.basicConfig(level=logging.WARNING, format="%(message)s")
        error_exit(f"Invalid workspace config: {exc}")

    cli_level_arg = getattr(args, "log_level", None)
    shared_defaults = workspace_context.config.shared if workspace_context else None
    default_level_name = (
        shared_defaults.log_level
        if shared_defaults and shared_defaults.log_level
        else "WARNING"
    )
    base_level_name = (cli_level_arg or default_level_name).upper()
    base_level = logging.getLevelName(base_level_name)
    if not isinstance(base_level, int):
        base_level = logging.WARNING

    logging.basicConfig(level=base_level, format="%(message)s")

    if args.cmd == "show":
        handle_show(
            payload=getattr(args, "payload", None),
            record_id=getattr(args, "record_id", None),
            mapping_path=getattr(args, "mapping", None),
            output_format=getattr(args, "format", None),
            strict=getattr(args, "strict", None),
            link_base_url=getattr(args, "link_base_url", None),
            workspace=workspace_context,
        )
        return
    if args.cmd == "columns":
        handle_columns(
            mapping_path=getattr(args, "mapping", None),
            workspace=workspace_context,
        )
        return


if __name__ == "__main__":
    main()
