""".xz container parsing, just enough to drop integrity checks.

STREAM:
    header: magic bytes[6] = FD 37 7A 58 5A 00
            flags: bytes[2]        # flags[1] & 0x0F = check id
            crc32: uint32          # over flags
    blocks: block header, compressed data, padding to 4, check field
    index:  0x00, count (varint), count * (unpadded size, uncompressed size)
            (varints), padding to 4, crc32: uint32
    footer: crc32: uint32          # over backward size + flags
            backward_size: uint32  # index size / 4 - 1
            flags: bytes[2]        # same as the header flags
            magic: bytes[2] = b"YZ"

``strip_checks`` rewrites one stream with check id 0 (no check fields) so
liblzma decodes it without verifying the block checks. Only the header,
index and footer are parsed; block contents are copied as they are.
"""

import struct
import zlib
from dataclasses import dataclass
from typing import Optional

XZ_MAGIC = b"\xfd7zXZ\x00"
FOOTER_MAGIC = b"YZ"
HEADER_SIZE = 12
FOOTER_SIZE = 12


def check_size(check_id: int) -> int:
    """Size in bytes of the check field for a check id."""
    if check_id == 0:
        return 0
    return 4 << ((check_id + 2) // 3 - 1)


def _crc32(data: bytes) -> bytes:
    return struct.pack("<I", zlib.crc32(data) & 0xFFFFFFFF)


def _read_varint(data: bytes, pos: int) -> tuple[int, int]:
    value = 0
    for i in range(9):
        if pos + i >= len(data):
            raise ValueError("truncated varint")
        byte = data[pos + i]
        value |= (byte & 0x7F) << (7 * i)
        if not byte & 0x80:
            return value, pos + i + 1
    raise ValueError("varint too long")


def _varint(value: int) -> bytes:
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def _pad4(n: int) -> int:
    return (4 - n % 4) % 4


@dataclass
class IndexRecord:
    unpadded_size: int
    uncompressed_size: int


@dataclass
class StreamLayout:
    """Where the parts of one stream sit inside a buffer."""
    check_id: int
    records: list
    index_start: int
    stream_end: int

    @property
    def uncompressed_size(self) -> int:
        return sum(r.uncompressed_size for r in self.records)


def _parse_index(data: bytes, start: int, end: int) -> Optional[list]:
    index = data[start:end]
    if len(index) < 8 or index[0] != 0 or _crc32(index[:-4]) != index[-4:]:
        return None
    try:
        count, pos = _read_varint(index, 1)
        records = []
        for _ in range(count):
            unpadded, pos = _read_varint(index, pos)
            uncompressed, pos = _read_varint(index, pos)
            records.append(IndexRecord(unpadded, uncompressed))
    except ValueError:
        return None
    if pos + _pad4(pos) + 4 != len(index):
        return None
    return records


def parse_stream(data: bytes) -> Optional[StreamLayout]:
    """Locate the index and footer of the stream starting at ``data[0]``.

    Returns None when the header is damaged or no footer with a matching
    index follows it in ``data``.
    """
    if len(data) < HEADER_SIZE + FOOTER_SIZE or not data.startswith(XZ_MAGIC):
        return None
    flags = data[6:8]
    if flags[0] != 0 or _crc32(flags) != data[8:12]:
        return None

    pos = data.find(FOOTER_MAGIC, HEADER_SIZE + FOOTER_SIZE - 2)
    while pos >= 0:
        footer_start = pos - 10
        footer = data[footer_start:pos + 2]
        if footer[8:10] == flags and _crc32(footer[4:10]) == footer[:4]:
            backward = (struct.unpack("<I", footer[4:8])[0] + 1) * 4
            index_start = footer_start - backward
            if index_start >= HEADER_SIZE:
                records = _parse_index(data, index_start, footer_start)
                if records is not None:
                    return StreamLayout(
                        check_id=flags[1] & 0x0F,
                        records=records,
                        index_start=index_start,
                        stream_end=pos + 2,
                    )
        pos = data.find(FOOTER_MAGIC, pos + 1)
    return None


def strip_checks(data: bytes) -> Optional[tuple[bytes, int]]:
    """Rebuild the stream at ``data[0]`` without block checks.

    Returns:
        (rebuilt stream, length of the original stream), or None when the
        stream cannot be parsed or carries no checks.
    """
    layout = parse_stream(data)
    if layout is None or layout.check_id == 0:
        return None
    size = check_size(layout.check_id)

    blocks = []
    records = []
    pos = HEADER_SIZE
    for record in layout.records:
        body = record.unpadded_size - size
        if body <= 0:
            return None
        blocks.append(data[pos:pos + body + _pad4(body)])
        records.append(_varint(body) + _varint(record.uncompressed_size))
        pos += body + _pad4(body) + size
    if pos != layout.index_start:
        return None

    flags = b"\x00\x00"
    index = b"\x00" + _varint(len(records)) + b"".join(records)
    index += b"\x00" * _pad4(len(index))
    index += _crc32(index)
    backward = struct.pack("<I", len(index) // 4 - 1)

    rebuilt = b"".join([
        XZ_MAGIC, flags, _crc32(flags),
        *blocks,
        index,
        _crc32(backward + flags), backward, flags, FOOTER_MAGIC,
    ])
    return rebuilt, layout.stream_end
