"""
Base classes for Steam packets

Outgoing packets are built from a header byte and a payload. Incoming packets
with a fixed field prefix are described declaratively with PacketStructure and
read field by field, in order, from a BinaryReader.
"""

from enum import IntEnum
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from ..protocol.binary_reader import BinaryReader
from ..protocol.constants import CONNECTIONLESS_PREFIX, MIN_QUERY_PACKET_SIZE


class PacketFieldType(IntEnum):
    """Field types in packet structures"""
    BYTE = 1           # unsigned byte
    BOOL = 2           # byte, set when equal to 1
    SHORT = 3          # unsigned 16-bit little-endian
    LONG = 4           # signed 32-bit little-endian
    LONG_LONG = 5      # unsigned 64-bit little-endian
    FLOAT = 6          # 32-bit little-endian float
    STRING = 7         # null-terminated string
    CHAR = 8           # single byte read as a character


FIELD_READERS: Dict[PacketFieldType, Callable[[BinaryReader], Any]] = {
    PacketFieldType.BYTE: BinaryReader.read_byte,
    PacketFieldType.BOOL: BinaryReader.read_bool,
    PacketFieldType.SHORT: BinaryReader.read_short,
    PacketFieldType.LONG: BinaryReader.read_long,
    PacketFieldType.LONG_LONG: BinaryReader.read_long_long,
    PacketFieldType.FLOAT: BinaryReader.read_float,
    PacketFieldType.STRING: BinaryReader.read_string,
    PacketFieldType.CHAR: lambda reader: chr(reader.read_byte()),
}


@dataclass
class PacketField:
    """Definition of a field within a packet"""
    name: str
    field_type: PacketFieldType
    description: str = ""


@dataclass
class PacketStructure:
    """Fixed field prefix of an incoming packet type"""
    header: int
    name: str
    fields: List[PacketField]
    description: str = ""

    def __post_init__(self):
        if not self.name.startswith(("S2A_", "S2C_", "M2A_")):
            raise ValueError(f"Packet name '{self.name}' should start with S2A_, S2C_ or M2A_")

        if self.header < 0 or self.header > 255:
            raise ValueError(f"Packet header {self.header} must be 0-255")

    def read(self, reader: BinaryReader) -> Dict[str, Any]:
        """Read all fields of this structure in declaration order"""
        values = {}
        for field in self.fields:
            values[field.name] = FIELD_READERS[field.field_type](reader)
        return values


# Common field factory functions for consistency
def byte_field(name: str, description: str = "") -> PacketField:
    return PacketField(name, PacketFieldType.BYTE, description)


def bool_field(name: str, description: str = "") -> PacketField:
    return PacketField(name, PacketFieldType.BOOL, description)


def short_field(name: str, description: str = "") -> PacketField:
    return PacketField(name, PacketFieldType.SHORT, description)


def long_field(name: str, description: str = "") -> PacketField:
    return PacketField(name, PacketFieldType.LONG, description)


def string_field(name: str, description: str = "") -> PacketField:
    return PacketField(name, PacketFieldType.STRING, description)


def char_field(name: str, description: str = "") -> PacketField:
    return PacketField(name, PacketFieldType.CHAR, description)


# =============================================================================
# Outgoing packets
# =============================================================================

class SteamPacket:
    """A connectionless packet: 0xFFFFFFFF, one header byte, the payload"""

    def __init__(self, header: int, content: bytes = b""):
        self.header = header
        self.content = content

    def to_bytes(self) -> bytes:
        return CONNECTIONLESS_PREFIX + bytes([self.header]) + self.content

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} header=0x{self.header:02X} size={len(self.content)}>"


class QueryPacket(SteamPacket):
    """Query request that servers only answer when it is at least 1200 bytes

    Shorter packets are zero padded at the end. Longer packets are sent as is.
    """

    def to_bytes(self) -> bytes:
        data = super().to_bytes()
        if len(data) < MIN_QUERY_PACKET_SIZE:
            data += b"\x00" * (MIN_QUERY_PACKET_SIZE - len(data))
        return data
