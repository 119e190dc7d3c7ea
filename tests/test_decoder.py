import struct
import unittest

from nsf_meta.config import DecoderSettings
from nsf_meta.decoder import HeaderDecoder, decode_header
from nsf_meta.layout import CHIP_FLAGS, MIN_HEADER_SIZE
from nsf_meta.models import DecodeError, TruncatedHeaderError


def _text(value: bytes) -> bytes:
    return value + b"\0" * (32 - len(value))


def build_header(
    *,
    magic: bytes = b"NESM\x1a",
    version: int = 1,
    total_songs: int = 34,
    starting_song: int = 1,
    addresses: tuple[int, int, int] = (0x8000, 0x8800, 0x8000),
    name: bytes = b"Super Mario Bros. 2",
    artist: bytes = b"",
    copyright: bytes = b"1988 Nintendo",
    ntsc_ticks: int = 16666,
    pal_ticks: int = 19997,
    playback: int = 0x00,
    chips: int = 0x00,
) -> bytearray:
    header = bytearray(128)
    header[0:5] = magic
    header[5] = version
    header[6] = total_songs
    header[7] = starting_song
    header[8:14] = struct.pack("<HHH", *addresses)
    header[0x0E:0x2E] = _text(name)
    header[0x2E:0x4E] = _text(artist)
    header[0x4E:0x6E] = _text(copyright)
    header[0x6E:0x70] = struct.pack("<H", ntsc_ticks)
    header[0x78:0x7A] = struct.pack("<H", pal_ticks)
    header[0x7A] = playback
    header[0x7B] = chips
    return header


class TestHeaderDecoder(unittest.TestCase):
    def test_super_mario_bros_2_header(self) -> None:
        meta = decode_header(build_header())
        self.assertEqual(meta.header_magic, "NESM\x1a")
        self.assertTrue(meta.has_valid_magic)
        self.assertEqual(meta.version_number, 1)
        self.assertEqual(meta.total_songs, 34)
        self.assertEqual(meta.starting_song, 1)
        self.assertEqual(meta.load_address, 32768)
        self.assertEqual(meta.init_address, 34816)
        self.assertEqual(meta.play_address, 32768)
        self.assertEqual(meta.song_name, "Super Mario Bros. 2")
        self.assertEqual(meta.artist_name, "<?>")
        self.assertEqual(meta.copyright, "1988 Nintendo")
        self.assertEqual(meta.song_ticks, 16666)
        self.assertTrue(meta.uses_ntsc)
        self.assertTrue(meta.is_dual_supportive)
        for _, name in CHIP_FLAGS:
            self.assertFalse(getattr(meta, name), name)
        self.assertEqual(meta.expansion_chips, [])

    def test_all_chip_bits_set(self) -> None:
        meta = decode_header(build_header(chips=0x3F))
        for _, name in CHIP_FLAGS:
            self.assertTrue(getattr(meta, name), name)
        self.assertEqual(
            meta.expansion_chips,
            ["VRC6", "VRC7", "FDS", "MMC5", "Namco 163", "Sunsoft 5B"],
        )

    def test_bits_above_five_are_ignored(self) -> None:
        self.assertEqual(decode_header(build_header(chips=0xC0)), decode_header(build_header()))

    def test_each_chip_bit_toggles_only_its_flag(self) -> None:
        base = decode_header(build_header(chips=0x00))
        for bit, name in CHIP_FLAGS:
            with self.subTest(chip=name):
                toggled = decode_header(build_header(chips=1 << bit))
                for _, other in CHIP_FLAGS:
                    expected = other == name
                    self.assertEqual(getattr(toggled, other), expected, other)
                self.assertEqual(toggled.song_ticks, base.song_ticks)
                self.assertEqual(toggled.uses_ntsc, base.uses_ntsc)

    def test_pal_single_region_reads_pal_tempo(self) -> None:
        meta = decode_header(build_header(playback=0x03, ntsc_ticks=16666, pal_ticks=20000))
        self.assertFalse(meta.uses_ntsc)
        self.assertFalse(meta.is_dual_supportive)
        self.assertEqual(meta.song_ticks, 20000)
        self.assertEqual(meta.region, "PAL")

    def test_region_bit_changes_only_region_and_tempo(self) -> None:
        ntsc = decode_header(build_header(playback=0x00, pal_ticks=20000))
        pal = decode_header(build_header(playback=0x01, pal_ticks=20000))
        self.assertTrue(ntsc.uses_ntsc)
        self.assertFalse(pal.uses_ntsc)
        self.assertEqual(ntsc.song_ticks, 16666)
        self.assertEqual(pal.song_ticks, 20000)
        self.assertEqual(ntsc.is_dual_supportive, pal.is_dual_supportive)

    def test_dual_support_bit_changes_only_dual_flag(self) -> None:
        dual = decode_header(build_header(playback=0x00))
        single = decode_header(build_header(playback=0x02))
        self.assertTrue(dual.is_dual_supportive)
        self.assertFalse(single.is_dual_supportive)
        self.assertEqual(dual.uses_ntsc, single.uses_ntsc)
        self.assertEqual(dual.song_ticks, single.song_ticks)

    def test_decoding_is_deterministic(self) -> None:
        data = bytes(build_header(chips=0x15, playback=0x02))
        self.assertEqual(decode_header(data), decode_header(data))

    def test_bytes_past_header_are_not_read(self) -> None:
        data = build_header()
        with_program = bytes(data[:MIN_HEADER_SIZE]) + b"\xff" * 4096
        self.assertEqual(decode_header(with_program), decode_header(data))

    def test_minimum_length_buffer_decodes(self) -> None:
        meta = decode_header(bytes(build_header()[:MIN_HEADER_SIZE]))
        self.assertEqual(meta.total_songs, 34)

    def test_every_short_buffer_is_truncated(self) -> None:
        data = bytes(build_header())
        for length in range(MIN_HEADER_SIZE):
            with self.subTest(length=length):
                with self.assertRaises(TruncatedHeaderError) as ctx:
                    decode_header(data[:length])
                self.assertEqual(ctx.exception.available, length)
                self.assertIsInstance(ctx.exception, DecodeError)

    def test_truncation_names_the_field(self) -> None:
        with self.assertRaises(TruncatedHeaderError) as ctx:
            decode_header(bytes(build_header()[:3]))
        self.assertEqual(ctx.exception.field, "header_magic")
        with self.assertRaises(TruncatedHeaderError) as ctx:
            decode_header(bytes(build_header()[:0x7B]))
        self.assertEqual(ctx.exception.field, "chip_support")
        self.assertIn("chip_support", str(ctx.exception))

    def test_unrecognized_magic_is_reported_not_rejected(self) -> None:
        meta = decode_header(build_header(magic=b"NESM "))
        self.assertEqual(meta.header_magic, "NESM ")
        self.assertFalse(meta.has_valid_magic)

    def test_out_of_range_values_pass_through(self) -> None:
        meta = decode_header(build_header(total_songs=0, starting_song=0, addresses=(0x0000, 0x1234, 0x7FFF)))
        self.assertEqual(meta.total_songs, 0)
        self.assertEqual(meta.starting_song, 0)
        self.assertEqual(meta.load_address, 0x0000)
        self.assertEqual(meta.init_address, 0x1234)
        self.assertEqual(meta.play_address, 0x7FFF)

    def test_text_is_cut_at_nul_and_space_padding_trimmed(self) -> None:
        meta = decode_header(build_header(name=b"Title\0junk", copyright=b"1988 Nintendo" + b" " * 19))
        self.assertEqual(meta.song_name, "Title")
        self.assertEqual(meta.copyright, "1988 Nintendo")

    def test_all_space_text_gets_placeholder(self) -> None:
        meta = decode_header(build_header(artist=b" " * 32))
        self.assertEqual(meta.artist_name, "<?>")

    def test_placeholder_can_be_disabled(self) -> None:
        settings = DecoderSettings(missing_text_placeholder=None)
        meta = decode_header(build_header(), settings)
        self.assertEqual(meta.artist_name, "")

    def test_text_encoding_is_configurable(self) -> None:
        name = "ドラクエ".encode("shift_jis")
        meta = decode_header(build_header(name=name), DecoderSettings(text_encoding="shift_jis"))
        self.assertEqual(meta.song_name, "ドラクエ")

    def test_decoder_copies_mutable_input(self) -> None:
        data = build_header()
        decoder = HeaderDecoder(data)
        data[6] = 99
        self.assertEqual(decoder.decode().total_songs, 34)

    def test_read_primitives(self) -> None:
        decoder = HeaderDecoder(build_header())
        self.assertEqual(decoder.read_u8(0x06, "total_songs"), 34)
        self.assertEqual(decoder.read_u16(0x0A, "init_address"), 0x8800)
        self.assertEqual(decoder.read_text(0x4E, "copyright"), "1988 Nintendo")
        with self.assertRaises(TruncatedHeaderError):
            decoder.read_u16(0x7F, "past_end")


if __name__ == "__main__":
    unittest.main()
