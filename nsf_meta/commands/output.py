from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..models import SongMetadata


@dataclass(frozen=True, slots=True)
class FieldLine:
    label: str
    value: object
    detail: Optional[str] = None

    def render(self) -> str:
        if self.detail:
            return f"{self.label}: {self.value} ({self.detail})"
        return f"{self.label}: {self.value}"


@dataclass(slots=True)
class CommandReport:
    lines: list[str] = field(default_factory=list)
    decoded: int = 0
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def describe(meta: SongMetadata) -> list[str]:
    magic_detail = None if meta.has_valid_magic else "unrecognized"
    chips = ", ".join(meta.expansion_chips) or "none"
    lines = [
        FieldLine("Magic", repr(meta.header_magic), magic_detail),
        FieldLine("Version", meta.version_number),
        FieldLine("Songs", meta.total_songs, f"starting at {meta.starting_song}"),
        FieldLine("Load address", f"0x{meta.load_address:04X}"),
        FieldLine("Init address", f"0x{meta.init_address:04X}"),
        FieldLine("Play address", f"0x{meta.play_address:04X}"),
        FieldLine("Song name", meta.song_name),
        FieldLine("Artist", meta.artist_name),
        FieldLine("Copyright", meta.copyright),
        FieldLine("Region", meta.region, "dual NTSC/PAL" if meta.is_dual_supportive else None),
        FieldLine("Speed", f"{meta.song_ticks} ticks"),
        FieldLine("Expansion audio", chips),
    ]
    return [line.render() for line in lines]


def summary(path: Path, meta: SongMetadata) -> str:
    chips = "+".join(meta.expansion_chips)
    suffix = f" [{chips}]" if chips else ""
    return (
        f"{path}: {meta.song_name} - {meta.artist_name} "
        f"({meta.total_songs} song(s), {meta.region}){suffix}"
    )


def as_json(path: Path, meta: SongMetadata) -> str:
    record = {"path": str(path), **meta.to_record()}
    return json.dumps(record, ensure_ascii=False)
