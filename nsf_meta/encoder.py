from __future__ import annotations

import struct
from typing import Optional

from . import layout
from .config import DecoderSettings
from .models import SongMetadata

_U16 = struct.Struct("<H")


class HeaderEncoder:
    """Writes a SongMetadata back into a 128-byte NSF header.

    Bank-switch and reserved bytes are left zero. Text equal to the
    configured placeholder is written as an empty block so that decoding
    the result yields the same value again. That round trip is exact for
    latin-1, the default, which maps every byte. With other encodings a
    character the decoder replaced is written as the codec's replacement
    byte, and a field that no longer fits in 32 bytes raises ValueError.
    """

    def __init__(self, settings: Optional[DecoderSettings] = None) -> None:
        self.settings = settings if settings is not None else DecoderSettings()

    def encode(self, meta: SongMetadata) -> bytes:
        header = bytearray(layout.HEADER_SIZE)
        magic = meta.header_magic.encode("latin-1")
        if len(magic) != layout.MAGIC_WIDTH:
            raise ValueError(f"header magic must be {layout.MAGIC_WIDTH} bytes, got {len(magic)}")
        header[layout.MAGIC : layout.MAGIC + layout.MAGIC_WIDTH] = magic
        header[layout.VERSION] = self._u8(meta.version_number, "version_number")
        header[layout.TOTAL_SONGS] = self._u8(meta.total_songs, "total_songs")
        header[layout.STARTING_SONG] = self._u8(meta.starting_song, "starting_song")
        self._put_u16(header, layout.LOAD_ADDRESS, meta.load_address, "load_address")
        self._put_u16(header, layout.INIT_ADDRESS, meta.init_address, "init_address")
        self._put_u16(header, layout.PLAY_ADDRESS, meta.play_address, "play_address")
        self._put_text(header, layout.SONG_NAME, meta.song_name, "song_name")
        self._put_text(header, layout.ARTIST_NAME, meta.artist_name, "artist_name")
        self._put_text(header, layout.COPYRIGHT, meta.copyright, "copyright")

        tempo_offset = layout.NTSC_TICKS if meta.uses_ntsc else layout.PAL_TICKS
        self._put_u16(header, tempo_offset, meta.song_ticks, "song_ticks")

        playback = 0
        if not meta.uses_ntsc:
            playback |= 1 << layout.PAL_BIT
        if not meta.is_dual_supportive:
            playback |= 1 << layout.SINGLE_REGION_BIT
        header[layout.PLAYBACK_MODE] = playback

        chips = 0
        for bit, name in layout.CHIP_FLAGS:
            if getattr(meta, name):
                chips |= 1 << bit
        header[layout.CHIP_SUPPORT] = chips
        return bytes(header)

    @staticmethod
    def _u8(value: int, field: str) -> int:
        if not 0 <= value <= 0xFF:
            raise ValueError(f"{field} out of range for one byte: {value}")
        return value

    @staticmethod
    def _put_u16(header: bytearray, offset: int, value: int, field: str) -> None:
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"{field} out of range for two bytes: {value}")
        _U16.pack_into(header, offset, value)

    def _put_text(self, header: bytearray, offset: int, value: str, field: str) -> None:
        if value == self.settings.missing_text_placeholder:
            return
        raw = value.encode(self.settings.text_encoding, errors="replace")
        if len(raw) > layout.TEXT_WIDTH:
            raise ValueError(f"{field} is {len(raw)} bytes, at most {layout.TEXT_WIDTH} fit")
        header[offset : offset + len(raw)] = raw


def encode_header(meta: SongMetadata, settings: Optional[DecoderSettings] = None) -> bytes:
    return HeaderEncoder(settings).encode(meta)
