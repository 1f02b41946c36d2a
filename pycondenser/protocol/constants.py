"""
Protocol constants for the Steam query, master server and RCON protocols
"""

from enum import IntEnum


# =============================================================================
# Connectionless packet framing
# =============================================================================

CONNECTIONLESS_PREFIX = b"\xff\xff\xff\xff"

SINGLE_PACKET_HEADER = -1   # 0xFFFFFFFF as signed int32
SPLIT_PACKET_HEADER = -2    # 0xFFFFFFFE as signed int32

# Query requests are zero padded up to this size (header included)
MIN_QUERY_PACKET_SIZE = 1200
# Largest UDP datagram a client sends or expects from a game server
MAX_QUERY_PACKET_SIZE = 1400
# Master server replies may be a little bigger
MASTER_PACKET_SIZE = 1500

# Bit 31 of a split packet request id marks bzip2 compressed payloads
COMPRESSED_FLAG = 0x80000000


# =============================================================================
# Packet headers
# =============================================================================

class PacketHeader(IntEnum):
    """Header bytes following the connectionless prefix"""
    # Client -> server
    A2M_GET_SERVERS_BATCH2 = 0x31
    A2S_INFO = 0x54
    A2S_PLAYER = 0x55
    A2S_RULES = 0x56

    # Server -> client
    M2A_SERVER_BATCH = 0x66
    RCON_GOLDSRC_CHALLENGE = 0x63
    RCON_GOLDSRC_NO_CHALLENGE = 0x39
    RCON_GOLDSRC_RESPONSE = 0x6C
    S2A_INFO_DETAILED = 0x6D
    S2A_INFO2 = 0x49
    S2A_PLAYER = 0x44
    S2A_RULES = 0x45
    S2C_CHALLENGE = 0x41


class RCONPacketType:
    """Type codes of Source RCON packets"""
    # Client -> server
    SERVERDATA_AUTH = 3
    SERVERDATA_EXECCOMMAND = 2

    # Server -> client
    SERVERDATA_AUTH_RESPONSE = 2
    SERVERDATA_RESPONSE_VALUE = 0


# =============================================================================
# Extra data flags (S2A_INFO2)
# =============================================================================

class EDF:
    """Bits of the extra data flag byte, listed in wire order"""
    GAME_PORT = 0x80
    SERVER_ID = 0x10
    SOURCE_TV = 0x40
    TAGS = 0x20
    GAME_ID = 0x01


# =============================================================================
# Master server
# =============================================================================

class Region:
    """Region codes understood by the master servers"""
    US_EAST_COAST = 0x00
    US_WEST_COAST = 0x01
    SOUTH_AMERICA = 0x02
    EUROPE = 0x03
    ASIA = 0x04
    AUSTRALIA = 0x05
    MIDDLE_EAST = 0x06
    AFRICA = 0x07
    ALL = 0xFF

    @classmethod
    def values(cls):
        return [
            cls.US_EAST_COAST, cls.US_WEST_COAST, cls.SOUTH_AMERICA,
            cls.EUROPE, cls.ASIA, cls.AUSTRALIA, cls.MIDDLE_EAST,
            cls.AFRICA, cls.ALL,
        ]


GOLDSRC_MASTER_SERVER = "hl1master.steampowered.com:27010"
SOURCE_MASTER_SERVER = "hl2master.steampowered.com:27011"

# Seed of the first batch request and terminator of the last batch reply
SERVER_LIST_SENTINEL = "0.0.0.0:0"

# First content byte of every master server batch reply
SERVER_BATCH_MARKER = 0x0A


# =============================================================================
# GoldSrc RCON replies
# =============================================================================

GOLDSRC_BANNED_MESSAGE = "You have been banned from this server."
GOLDSRC_BAD_PASSWORD_MESSAGE = "Bad rcon_password."
