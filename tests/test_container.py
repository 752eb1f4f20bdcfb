"""Tests for .xz container parsing and check stripping."""

import lzma

import pytest

from xzadvisor.codec.container import check_size, parse_stream, strip_checks


@pytest.fixture
def payload():
    return b"".join(b"container row %05d\n" % i for i in range(3000))


class TestCheckSize:
    def test_sizes(self):
        assert check_size(lzma.CHECK_NONE) == 0
        assert check_size(lzma.CHECK_CRC32) == 4
        assert check_size(lzma.CHECK_CRC64) == 8
        assert check_size(lzma.CHECK_SHA256) == 32


class TestParseStream:
    def test_layout(self, payload):
        stream = lzma.compress(payload, check=lzma.CHECK_CRC64)
        layout = parse_stream(stream)
        assert layout is not None
        assert layout.check_id == lzma.CHECK_CRC64
        assert layout.stream_end == len(stream)
        assert layout.uncompressed_size == len(payload)
        assert len(layout.records) == 1

    def test_stream_end_before_trailing_data(self, payload):
        stream = lzma.compress(payload)
        layout = parse_stream(stream + lzma.compress(b"next"))
        assert layout.stream_end == len(stream)

    def test_truncated(self, payload):
        assert parse_stream(lzma.compress(payload)[:-12]) is None

    def test_not_xz(self):
        assert parse_stream(b"definitely not an xz stream") is None


class TestStripChecks:
    @pytest.mark.parametrize("check", [lzma.CHECK_CRC32, lzma.CHECK_CRC64, lzma.CHECK_SHA256])
    def test_rebuilt_stream_decodes(self, payload, check):
        stream = lzma.compress(payload, check=check)
        rebuilt, length = strip_checks(stream)
        assert length == len(stream)
        assert len(rebuilt) < len(stream)
        assert lzma.decompress(rebuilt) == payload
        assert parse_stream(rebuilt).check_id == lzma.CHECK_NONE

    def test_no_checks_to_strip(self, payload):
        assert strip_checks(lzma.compress(payload, check=lzma.CHECK_NONE)) is None

    def test_garbage(self):
        assert strip_checks(b"\xfd7zXZ\x00" + b"\x00" * 40) is None
