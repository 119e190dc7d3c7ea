from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from .commands import scan as cmd_scan
from .commands import show as cmd_show
from .commands import watch as cmd_watch
from .config import Settings, find_config

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

C_RESET = "\033[0m"
LEVEL_STYLES = {
    logging.DEBUG: "\033[2m",  # Dim
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[1;31m",  # Bold red
}


class ConsoleFormatter(logging.Formatter):
    """Shows NSF paths relative to their library root, coloured by level on a terminal."""

    def __init__(self, roots: list[Path], *, color: bool = False) -> None:
        super().__init__(LOG_FORMAT)
        # Longest first so a nested root is stripped before its parent.
        self.prefixes = sorted((f"{root}{os.sep}" for root in roots), key=len, reverse=True)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for prefix in self.prefixes:
            message = message.replace(prefix, "")
        style = LEVEL_STYLES.get(record.levelno) if self.color else None
        if not style:
            return message
        return f"{style}{message}{C_RESET}"


class FailureSummary(logging.Handler):
    """Keeps every warning so skipped files can be listed once the command is done."""

    def __init__(self, formatter: logging.Formatter) -> None:
        super().__init__(level=logging.WARNING)
        self.setFormatter(formatter)
        self.lines: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.lines.append(self.format(record))
        except Exception:
            self.handleError(record)

    def render(self) -> list[str]:
        if not self.lines:
            return []
        return [f"{len(self.lines)} warning(s):", *(f" - {line}" for line in self.lines)]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="NSF header metadata reader")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")
    parser.add_argument(
        "--json",
        action="store_true",
        default=None,
        help="Emit one JSON object per file instead of text",
    )
    # SUPPRESS: a --json given before the subcommand must survive subparser defaults.
    output_options = argparse.ArgumentParser(add_help=False)
    output_options.add_argument(
        "--json",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Emit one JSON object per file instead of text",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    show_parser = subparsers.add_parser(
        "show", parents=[output_options], help="Print every header field of the given files"
    )
    show_parser.add_argument("files", nargs="+", type=Path, help="NSF files to decode")
    scan_parser = subparsers.add_parser(
        "scan",
        parents=[output_options],
        help="Summarise every NSF file under the given paths or the library roots",
    )
    scan_parser.add_argument(
        "paths", nargs="*", type=Path, help="Files or directories (default: library roots)"
    )
    subparsers.add_parser(
        "watch",
        parents=[output_options],
        help="Scan the library roots, then decode files as they are added or changed",
    )
    return parser


def load_settings(parser: argparse.ArgumentParser, explicit: Optional[Path]) -> Settings:
    config_path = find_config(explicit)
    if config_path is None:
        return Settings()
    try:
        return Settings.load(config_path)
    except OSError as exc:
        parser.error(f"cannot read config {config_path}: {exc.strerror or exc}")
    except (yaml.YAMLError, ValidationError) as exc:
        parser.error(f"invalid config {config_path}: {exc}")


def configure_logging(level_name: str, roots: list[Path]) -> FailureSummary:
    log_level = getattr(logging, level_name.upper(), logging.WARNING)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    console = logging.StreamHandler()
    console.setFormatter(ConsoleFormatter(roots, color=sys.stderr.isatty()))
    root_logger.addHandler(console)

    failures = FailureSummary(ConsoleFormatter(roots))
    root_logger.addHandler(failures)

    logging.getLogger("watchdog").setLevel(logging.WARNING)
    return failures


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings(parser, args.config)
    json_output = settings.output.json_lines if args.json is None else args.json
    failures = configure_logging(args.log_level, list(settings.library.roots))

    ok = True
    try:
        match args.command:
            case "show":
                report = cmd_show.run(settings, args.files, json_output=json_output)
            case "scan":
                paths = args.paths or None
                if paths is None and not settings.library.roots:
                    parser.error("scan needs paths or library.roots in config.yaml")
                report = cmd_scan.run(settings, paths, json_output=json_output)
            case "watch":
                if not settings.library.roots:
                    parser.error("watch needs library.roots in config.yaml")
                cmd_watch.run(settings, json_output=json_output)
                report = None
            case _:
                parser.error("Unknown command")
        if report is not None:
            for line in report.lines:
                print(line)
            ok = report.ok
    finally:
        for line in failures.render():
            print(line, file=sys.stderr)
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
