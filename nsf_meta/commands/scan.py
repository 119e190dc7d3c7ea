from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from ..config import Settings
from ..models import DecodeError
from ..reader import read_song
from ..scanner import LibraryScanner
from .output import CommandReport, as_json, summary

logger = logging.getLogger(__name__)


def run(
    settings: Settings,
    paths: Optional[Iterable[Path]] = None,
    *,
    json_output: bool = False,
) -> CommandReport:
    report = CommandReport()
    scanner = LibraryScanner(settings.library)
    for path in scanner.iter_files(paths):
        try:
            meta = read_song(path, settings.decoder)
        except DecodeError as exc:
            logger.warning("Skipping %s", exc)
            report.failed.append(str(path))
            continue
        report.decoded += 1
        report.lines.append(as_json(path, meta) if json_output else summary(path, meta))
    if not json_output:
        report.lines.append(f"Decoded {report.decoded} file(s), {len(report.failed)} failed")
    logger.info("Scan complete: %d decoded, %d failed", report.decoded, len(report.failed))
    return report
