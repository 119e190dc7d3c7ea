from __future__ import annotations

# Fixed byte layout of the NSF header.
# Keep these centralized so decoder and encoder never disagree on an offset.

NSF_MAGIC = "NESM\x1a"
HEADER_SIZE = 0x80
# Everything the decoder reads lies below this offset.
MIN_HEADER_SIZE = 0x7C
TEXT_WIDTH = 32

MAGIC = 0x00
MAGIC_WIDTH = 5
VERSION = 0x05
TOTAL_SONGS = 0x06
STARTING_SONG = 0x07
LOAD_ADDRESS = 0x08
INIT_ADDRESS = 0x0A
PLAY_ADDRESS = 0x0C
SONG_NAME = 0x0E
ARTIST_NAME = 0x2E
COPYRIGHT = 0x4E
NTSC_TICKS = 0x6E
PAL_TICKS = 0x78
PLAYBACK_MODE = 0x7A
CHIP_SUPPORT = 0x7B

PAL_BIT = 0
SINGLE_REGION_BIT = 1

# (bit, field) pairs applied to the chip-support byte, in header order.
CHIP_FLAGS: tuple[tuple[int, str], ...] = (
    (0, "using_vrc6"),
    (1, "using_vrc7"),
    (2, "using_fds"),
    (3, "using_mmc5"),
    (4, "using_namco"),
    (5, "using_sunsoft"),
)

CHIP_NAMES = {
    "using_vrc6": "VRC6",
    "using_vrc7": "VRC7",
    "using_fds": "FDS",
    "using_mmc5": "MMC5",
    "using_namco": "Namco 163",
    "using_sunsoft": "Sunsoft 5B",
}
