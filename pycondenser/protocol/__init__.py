"""
Wire level protocol helpers
"""

from .binary_reader import BinaryReader
from .constants import (
    CONNECTIONLESS_PREFIX, EDF, GOLDSRC_MASTER_SERVER, PacketHeader,
    RCONPacketType, Region, SOURCE_MASTER_SERVER,
)

__all__ = [
    'BinaryReader', 'CONNECTIONLESS_PREFIX', 'EDF', 'GOLDSRC_MASTER_SERVER',
    'PacketHeader', 'RCONPacketType', 'Region', 'SOURCE_MASTER_SERVER',
]
