from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Optional

from .layout import CHIP_FLAGS, CHIP_NAMES, NSF_MAGIC


@dataclass(frozen=True, slots=True)
class SongMetadata:
    """Everything the NSF header says about a file, as read from its first 124 bytes."""

    header_magic: str
    version_number: int
    total_songs: int
    starting_song: int
    load_address: int
    init_address: int
    play_address: int
    song_name: str
    artist_name: str
    copyright: str
    song_ticks: int
    uses_ntsc: bool
    is_dual_supportive: bool
    using_vrc6: bool = False
    using_vrc7: bool = False
    using_fds: bool = False
    using_mmc5: bool = False
    using_namco: bool = False
    using_sunsoft: bool = False

    @property
    def has_valid_magic(self) -> bool:
        return self.header_magic == NSF_MAGIC

    @property
    def region(self) -> str:
        return "NTSC" if self.uses_ntsc else "PAL"

    @property
    def expansion_chips(self) -> list[str]:
        return [CHIP_NAMES[name] for _, name in CHIP_FLAGS if getattr(self, name)]

    def to_record(self) -> Dict[str, object]:
        payload: Dict[str, object] = {f.name: getattr(self, f.name) for f in fields(self)}
        for key in ("load_address", "init_address", "play_address"):
            payload[key] = f"0x{payload[key]:04X}"
        payload["region"] = self.region
        payload["expansion_chips"] = self.expansion_chips
        return payload


class DecodeError(Exception):
    """Raised when an NSF header cannot be decoded."""


class TruncatedHeaderError(DecodeError):
    """A field lies (partly) past the end of the supplied buffer."""

    def __init__(
        self,
        field: str,
        offset: int,
        width: int,
        available: int,
        *,
        path: Optional[Path] = None,
    ) -> None:
        self.field = field
        self.offset = offset
        self.width = width
        self.available = available
        self.path = path
        super().__init__(self._describe())

    def _describe(self) -> str:
        message = (
            f"header truncated reading {self.field}: needs bytes "
            f"0x{self.offset:02X}-0x{self.offset + self.width - 1:02X}, "
            f"only {self.available} available"
        )
        if self.path is not None:
            return f"{self.path}: {message}"
        return message

    def with_path(self, path: Path) -> "TruncatedHeaderError":
        return TruncatedHeaderError(
            self.field, self.offset, self.width, self.available, path=path
        )


class HeaderIOError(DecodeError):
    """The NSF file could not be opened or read."""

    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        reason = cause.strerror or str(cause)
        super().__init__(f"error opening NSF file {path}: {reason}")
