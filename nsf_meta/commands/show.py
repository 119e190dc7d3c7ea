from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from ..config import Settings
from ..models import DecodeError
from ..reader import read_song
from .output import CommandReport, as_json, describe

logger = logging.getLogger(__name__)


def run(settings: Settings, paths: Iterable[Path], *, json_output: bool = False) -> CommandReport:
    report = CommandReport()
    for path in paths:
        try:
            meta = read_song(path, settings.decoder)
        except DecodeError as exc:
            logger.warning("%s", exc)
            report.failed.append(str(path))
            continue
        report.decoded += 1
        if json_output:
            report.lines.append(as_json(path, meta))
            continue
        if report.lines:
            report.lines.append("")
        report.lines.append(f"== {path}")
        report.lines.extend(describe(meta))
    return report
