"""
Binary reader for Steam packet payloads

Steam packets use little-endian numbers and null-terminated strings. The only
big-endian values are the ports inside master server batches.
"""

import struct

from ..exceptions import PacketFormatError


class BinaryReader:
    """Sequential reader over a packet payload"""

    def __init__(self, data: bytes, pos: int = 0):
        self.data = bytes(data)
        self.pos = pos

    def remaining(self) -> int:
        """Bytes remaining to read"""
        return len(self.data) - self.pos

    def has_remaining(self) -> bool:
        return self.pos < len(self.data)

    def read_bytes(self, size: int) -> bytes:
        """Read exactly size bytes"""
        if size < 0 or self.remaining() < size:
            raise PacketFormatError(
                f"Packet too short: need {size} bytes at offset {self.pos}, "
                f"{self.remaining()} left"
            )
        chunk = self.data[self.pos:self.pos + size]
        self.pos += size
        return chunk

    def read_remaining(self) -> bytes:
        """Read everything up to the end of the payload"""
        chunk = self.data[self.pos:]
        self.pos = len(self.data)
        return chunk

    def _unpack(self, fmt: str, size: int):
        return struct.unpack(fmt, self.read_bytes(size))[0]

    def read_byte(self) -> int:
        """Read a single unsigned byte"""
        return self.read_bytes(1)[0]

    def read_bool(self) -> bool:
        """Read a byte flag (only 1 counts as set)"""
        return self.read_byte() == 1

    def read_short(self) -> int:
        """Read an unsigned 16-bit little-endian integer"""
        return self._unpack('<H', 2)

    def read_short_be(self) -> int:
        """Read an unsigned 16-bit big-endian integer"""
        return self._unpack('>H', 2)

    def read_long(self) -> int:
        """Read a signed 32-bit little-endian integer"""
        return self._unpack('<i', 4)

    def read_unsigned_long(self) -> int:
        """Read an unsigned 32-bit little-endian integer"""
        return self._unpack('<I', 4)

    def read_long_long(self) -> int:
        """Read an unsigned 64-bit little-endian integer"""
        return self._unpack('<Q', 8)

    def read_float(self) -> float:
        """Read a 32-bit little-endian float"""
        return self._unpack('<f', 4)

    def read_string(self) -> str:
        """Read a null-terminated string"""
        end = self.data.find(b"\x00", self.pos)
        if end == -1:
            raise PacketFormatError(f"Unterminated string at offset {self.pos}")
        value = self.data[self.pos:end].decode('utf-8', errors='replace')
        self.pos = end + 1
        return value
