from __future__ import annotations

import logging
import struct
from typing import Dict, Iterable, Optional, Tuple

from . import layout
from .config import DecoderSettings
from .models import SongMetadata, TruncatedHeaderError

logger = logging.getLogger(__name__)

_U16 = struct.Struct("<H")


class HeaderDecoder:
    """Reads the fixed-offset NSF header fields out of an immutable buffer.

    Every read names its own offset; there is no cursor, so fields can be
    read in any order and a short buffer fails on the first field that
    does not fit rather than yielding zeros.
    """

    def __init__(
        self,
        data: bytes | bytearray | memoryview,
        settings: Optional[DecoderSettings] = None,
    ) -> None:
        self.data = bytes(data)
        self.settings = settings if settings is not None else DecoderSettings()

    def decode(self) -> SongMetadata:
        magic = self._read_at(layout.MAGIC, layout.MAGIC_WIDTH, "header_magic")
        version_number = self.read_u8(layout.VERSION, "version_number")
        total_songs = self.read_u8(layout.TOTAL_SONGS, "total_songs")
        starting_song = self.read_u8(layout.STARTING_SONG, "starting_song")
        load_address = self.read_u16(layout.LOAD_ADDRESS, "load_address")
        init_address = self.read_u16(layout.INIT_ADDRESS, "init_address")
        play_address = self.read_u16(layout.PLAY_ADDRESS, "play_address")
        song_name = self.read_text(layout.SONG_NAME, "song_name")
        artist_name = self.read_text(layout.ARTIST_NAME, "artist_name")
        copyright = self.read_text(layout.COPYRIGHT, "copyright")

        playback = self.read_u8(layout.PLAYBACK_MODE, "playback_mode")
        uses_ntsc = not playback & (1 << layout.PAL_BIT)
        is_dual_supportive = not playback & (1 << layout.SINGLE_REGION_BIT)
        if uses_ntsc:
            song_ticks = self.read_u16(layout.NTSC_TICKS, "ntsc_ticks")
        else:
            song_ticks = self.read_u16(layout.PAL_TICKS, "pal_ticks")
        chips = self.read_u8(layout.CHIP_SUPPORT, "chip_support")

        meta = SongMetadata(
            header_magic=magic.decode("latin-1"),
            version_number=version_number,
            total_songs=total_songs,
            starting_song=starting_song,
            load_address=load_address,
            init_address=init_address,
            play_address=play_address,
            song_name=song_name,
            artist_name=artist_name,
            copyright=copyright,
            song_ticks=song_ticks,
            uses_ntsc=uses_ntsc,
            is_dual_supportive=is_dual_supportive,
            **flags(chips, layout.CHIP_FLAGS),
        )
        logger.debug(
            "Decoded NSF header: %r, %d song(s), %s", meta.song_name, meta.total_songs, meta.region
        )
        return meta

    def read_u8(self, offset: int, field: str) -> int:
        return self._read_at(offset, 1, field)[0]

    def read_u16(self, offset: int, field: str) -> int:
        return _U16.unpack(self._read_at(offset, _U16.size, field))[0]

    def read_text(self, offset: int, field: str) -> str:
        raw = self._read_at(offset, layout.TEXT_WIDTH, field)
        text = raw.split(b"\0", 1)[0].decode(self.settings.text_encoding, errors="replace").rstrip(" ")
        if not text and self.settings.missing_text_placeholder is not None:
            return self.settings.missing_text_placeholder
        return text

    def _read_at(self, offset: int, width: int, field: str) -> bytes:
        if offset + width > len(self.data):
            raise TruncatedHeaderError(field, offset, width, len(self.data))
        return self.data[offset : offset + width]


def flags(value: int, table: Iterable[Tuple[int, str]]) -> Dict[str, bool]:
    return {name: bool(value & (1 << bit)) for bit, name in table}


def decode_header(
    data: bytes | bytearray | memoryview, settings: Optional[DecoderSettings] = None
) -> SongMetadata:
    return HeaderDecoder(data, settings).decode()
