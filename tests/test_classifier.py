"""Tests for content classification and category default settings."""

import lzma

import pytest

from xzadvisor.analysis.classifier import (
    CompressionSettings,
    ContentCategory,
    analyze_file,
    default_settings,
    detect_content_category,
    is_text,
)
from xzadvisor.codec.xz import FilterId
from xzadvisor.config import MIB, AdvisorConfig


class TestSignatures:
    @pytest.mark.parametrize("head,expected", [
        (b"\x89PNG\r\n\x1a\n", ContentCategory.IMAGE),
        (b"\xff\xd8\xff\xe0", ContentCategory.IMAGE),
        (b"GIF87a", ContentCategory.IMAGE),
        (b"GIF89a", ContentCategory.IMAGE),
        (b"\x7fELF\x02\x01\x01", ContentCategory.EXECUTABLE),
        (b"MZ\x90\x00", ContentCategory.EXECUTABLE),
        (b"PK\x03\x04", ContentCategory.ARCHIVE),
        (b"ustar", ContentCategory.ARCHIVE),
    ])
    def test_signature_prefix(self, head, expected):
        """A signature prefix classifies regardless of what follows it."""
        assert detect_content_category(head) is expected
        assert detect_content_category(head + bytes(range(256)) * 4) is expected
        assert detect_content_category(head + b"plain text " * 50) is expected

    def test_png_header(self):
        png = bytes([0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A])
        assert detect_content_category(png) is ContentCategory.IMAGE

    def test_image_wins_over_text(self):
        """Signatures are checked before the text heuristic."""
        assert detect_content_category(b"GIF89a" + b"a" * 600) is ContentCategory.IMAGE

    def test_mz_prefix_in_text(self):
        """A text file starting with 'MZ' is classified as an executable."""
        assert detect_content_category(b"MZ is a plain sentence.\n" * 10) is ContentCategory.EXECUTABLE

    def test_tar_magic_at_offset_zero_only(self):
        data = b"x" * 257 + b"ustar" + b"y" * 300
        assert detect_content_category(data) is ContentCategory.TEXT


class TestTextHeuristic:
    def test_plain_text(self):
        assert detect_content_category(b"hello world\n" * 100) is ContentCategory.TEXT

    def test_nul_means_binary(self):
        data = b"hello world " * 40 + b"\x00"
        assert detect_content_category(data) is ContentCategory.BINARY

    def test_threshold_is_strict(self):
        """Exactly 90% printable is not text; just above is."""
        at_threshold = b"a" * 90 + b"\x01" * 10
        assert not is_text(at_threshold)
        above = b"a" * 91 + b"\x01" * 9
        assert is_text(above)

    def test_only_window_is_inspected(self):
        """Bytes past the first 512 do not affect the text decision."""
        data = b"a" * 512 + b"\x00" * 1000
        assert detect_content_category(data) is ContentCategory.TEXT

    def test_whitespace_counts_as_printable(self):
        assert is_text(b"\t\n\r\x0b\x0c " * 20)

    def test_custom_window(self):
        config = AdvisorConfig(classifier_window=4)
        assert detect_content_category(b"abcd\x00", config) is ContentCategory.TEXT

    def test_random_bytes_are_binary(self):
        data = bytes((i * 37 + 11) % 256 for i in range(1024))
        assert detect_content_category(b"\x01" + data) is ContentCategory.BINARY


class TestEdgeCases:
    def test_empty_is_unknown(self):
        assert detect_content_category(b"") is ContentCategory.UNKNOWN

    def test_accepts_memoryview_and_bytearray(self):
        data = bytearray(b"\x89PNG rest")
        assert detect_content_category(data) is ContentCategory.IMAGE
        assert detect_content_category(memoryview(data)) is ContentCategory.IMAGE

    def test_xz_stream_is_binary(self):
        assert detect_content_category(lzma.compress(b"abc" * 100)) is ContentCategory.BINARY


class TestDefaultSettings:
    def test_text(self):
        s = default_settings(ContentCategory.TEXT)
        assert (s.preset, s.dict_size, s.filters) == (7, 8 * MIB, (FilterId.LZMA2,))

    def test_executable_uses_bcj(self):
        s = default_settings(ContentCategory.EXECUTABLE)
        assert s.preset == 6
        assert s.dict_size == 16 * MIB
        assert s.filters == (FilterId.X86, FilterId.LZMA2)

    def test_image_and_archive(self):
        assert default_settings(ContentCategory.IMAGE).preset == 3
        assert default_settings(ContentCategory.IMAGE).dict_size == 4 * MIB
        assert default_settings(ContentCategory.ARCHIVE).preset == 6
        assert default_settings(ContentCategory.ARCHIVE).dict_size == 8 * MIB

    @pytest.mark.parametrize("category", [
        ContentCategory.UNKNOWN, ContentCategory.BINARY, ContentCategory.AUDIO,
        ContentCategory.VIDEO, ContentCategory.DATABASE,
    ])
    def test_fallback(self, category):
        s = default_settings(category)
        assert (s.preset, s.dict_size, s.filters) == (6, 0, (FilterId.LZMA2,))

    def test_settings_are_independent_copies(self):
        a = default_settings(ContentCategory.TEXT)
        a.preset = 1
        assert default_settings(ContentCategory.TEXT).preset == 7

    def test_filter_chain_compresses(self):
        s = CompressionSettings(ContentCategory.EXECUTABLE, 6, 1 * MIB, (FilterId.X86, FilterId.LZMA2))
        chain = s.to_filter_chain()
        data = b"\x7fELF" + bytes(range(256)) * 8
        packed = lzma.compress(data, format=lzma.FORMAT_XZ, filters=chain)
        assert lzma.decompress(packed) == data

    def test_as_dict(self):
        d = default_settings(ContentCategory.TEXT).as_dict()
        assert d == {"category": "text", "preset": 7, "dict_size": 8 * MIB, "filters": ["LZMA2"]}


class TestAnalyzeFile:
    def test_classifies_file(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_bytes(b"some notes\n" * 100)
        assert analyze_file(path).category is ContentCategory.TEXT

    def test_missing_file_is_unknown(self, tmp_path, caplog):
        settings = analyze_file(tmp_path / "missing.bin")
        assert settings.category is ContentCategory.UNKNOWN
        assert settings.preset == 6
        assert "Cannot read" in caplog.text
