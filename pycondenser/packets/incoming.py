"""
Incoming packets and their decoders

Each reply type is a small dataclass. Decoders receive the payload that
follows the header byte and read it strictly in wire order; reading past the
end of the payload raises PacketFormatError, trailing bytes are ignored.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .base import (
    PacketStructure, bool_field, byte_field, char_field, short_field,
    string_field,
)
from ..exceptions import PacketFormatError
from ..models.player import SteamPlayer
from ..protocol.binary_reader import BinaryReader
from ..protocol.constants import EDF, PacketHeader, SERVER_BATCH_MARKER


# =============================================================================
# Packet types
# =============================================================================

@dataclass
class ServerInfoPacket:
    """S2A_INFO2 or S2A_INFO_DETAILED reply"""
    header: int
    info: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PlayersPacket:
    """S2A_PLAYER reply, players keyed by name"""
    header: int
    players: Dict[str, SteamPlayer] = field(default_factory=dict)


@dataclass
class RulesPacket:
    """S2A_RULES reply"""
    header: int
    rules: Dict[str, str] = field(default_factory=dict)


@dataclass
class ChallengePacket:
    """S2C_CHALLENGE reply"""
    header: int
    challenge: int


@dataclass
class ServerBatchPacket:
    """M2A_SERVER_BATCH reply, addresses as ``ip:port`` strings"""
    header: int
    servers: List[str] = field(default_factory=list)


@dataclass
class GoldSrcRCONResponsePacket:
    """Text reply to a GoldSrc RCON request"""
    header: int
    response: str


# =============================================================================
# Server info layouts
# =============================================================================

S2A_INFO2_STRUCTURE = PacketStructure(
    header=PacketHeader.S2A_INFO2,
    name="S2A_INFO2",
    description="Server info reply of Source and newer GoldSrc servers",
    fields=[
        byte_field("network_version"),
        string_field("server_name"),
        string_field("map_name"),
        string_field("game_dir"),
        string_field("game_description"),
        short_field("app_id"),
        byte_field("number_of_players"),
        byte_field("max_players"),
        byte_field("number_of_bots"),
        char_field("dedicated", "'d' dedicated, 'l' listen, 'p' SourceTV"),
        char_field("operating_system", "'l' Linux, 'w' Windows, 'm' Mac"),
        bool_field("password_needed"),
        bool_field("secure", "VAC secured"),
        string_field("game_version"),
    ],
)

S2A_INFO_DETAILED_STRUCTURE = PacketStructure(
    header=PacketHeader.S2A_INFO_DETAILED,
    name="S2A_INFO_DETAILED",
    description="Legacy server info reply of old GoldSrc servers",
    fields=[
        string_field("server_ip"),
        string_field("server_name"),
        string_field("map_name"),
        string_field("game_dir"),
        string_field("game_description"),
        byte_field("number_of_players"),
        byte_field("max_players"),
        byte_field("network_version"),
        char_field("dedicated"),
        char_field("operating_system"),
        bool_field("password_needed"),
        bool_field("is_mod"),
    ],
)

# Size of the mod details block (version, size, server only, client dll)
# followed by the secure flag and the bot count
MOD_DETAILS_SIZE = 12


def decode_info2(header: int, content: bytes) -> ServerInfoPacket:
    reader = BinaryReader(content)
    info = S2A_INFO2_STRUCTURE.read(reader)

    if reader.has_remaining():
        edf = reader.read_byte()
        info['extra_data_flag'] = edf

        if edf & EDF.GAME_PORT:
            info['server_port'] = reader.read_short()
        if edf & EDF.SERVER_ID:
            info['server_id'] = reader.read_long_long()
        if edf & EDF.SOURCE_TV:
            info['tv_port'] = reader.read_short()
            info['tv_name'] = reader.read_string()
        if edf & EDF.TAGS:
            info['server_tags'] = reader.read_string()
        if edf & EDF.GAME_ID:
            info['game_id'] = reader.read_long_long()

    return ServerInfoPacket(header, info)


def decode_info_detailed(header: int, content: bytes) -> ServerInfoPacket:
    reader = BinaryReader(content)
    info = S2A_INFO_DETAILED_STRUCTURE.read(reader)

    if info['is_mod']:
        mod_info = {
            'url_info': reader.read_string(),
            'url_dl': reader.read_string(),
        }
        reader.read_byte()
        if reader.remaining() == MOD_DETAILS_SIZE:
            mod_info['mod_version'] = reader.read_long()
            mod_info['mod_size'] = reader.read_long()
            mod_info['sv_only'] = reader.read_bool()
            mod_info['cl_dll'] = reader.read_bool()
            info['secure'] = reader.read_bool()
            info['number_of_bots'] = reader.read_byte()
        info['mod_info'] = mod_info
    else:
        info['secure'] = reader.read_bool()
        info['number_of_bots'] = reader.read_byte()

    return ServerInfoPacket(header, info)


# =============================================================================
# Players, rules, challenge
# =============================================================================

def decode_players(header: int, content: bytes) -> PlayersPacket:
    if not content:
        raise PacketFormatError("Wrong formatted S2A_PLAYER packet.")

    reader = BinaryReader(content)
    reader.read_byte()  # player count, unreliable on busy servers

    players = {}
    while reader.has_remaining():
        player_id = reader.read_byte()
        name = reader.read_string()
        score = reader.read_long()
        connect_time = reader.read_float()
        players[name] = SteamPlayer(player_id, name, score, connect_time)

    return PlayersPacket(header, players)


def decode_rules(header: int, content: bytes) -> RulesPacket:
    if not content:
        raise PacketFormatError("Wrong formatted S2A_RULES packet.")

    reader = BinaryReader(content)
    rules_count = reader.read_short()

    rules = {}
    for _ in range(rules_count):
        name = reader.read_string()
        if not name:
            break
        rules[name] = reader.read_string()

    return RulesPacket(header, rules)


def decode_challenge(header: int, content: bytes) -> ChallengePacket:
    return ChallengePacket(header, BinaryReader(content).read_long())


# =============================================================================
# Master server
# =============================================================================

def decode_server_batch(header: int, content: bytes) -> ServerBatchPacket:
    reader = BinaryReader(content)
    if not content or reader.read_byte() != SERVER_BATCH_MARKER:
        raise PacketFormatError("Master query response is missing additional 0x0A byte.")

    servers = []
    while reader.has_remaining():
        octets = reader.read_bytes(4)
        port = reader.read_short_be()
        servers.append(f"{octets[0]}.{octets[1]}.{octets[2]}.{octets[3]}:{port}")

    return ServerBatchPacket(header, servers)


# =============================================================================
# GoldSrc RCON
# =============================================================================

def decode_goldsrc_rcon(header: int, content: bytes) -> GoldSrcRCONResponsePacket:
    response = content.rstrip(b"\x00").decode('utf-8', errors='replace')
    return GoldSrcRCONResponsePacket(header, response)


# =============================================================================
# Source RCON (TCP)
# =============================================================================

@dataclass
class RCONReply:
    """A decoded Source RCON packet"""
    request_id: int
    packet_type: int
    response: str


@dataclass
class RCONAuthResponse(RCONReply):
    """SERVERDATA_AUTH_RESPONSE, its request id is -1 on a wrong password"""


@dataclass
class RCONExecResponse(RCONReply):
    """SERVERDATA_RESPONSE_VALUE, one fragment of a command's output"""


def decode_rcon_fields(data: bytes):
    """Split an RCON packet (without its size field) into id, type and body"""
    reader = BinaryReader(data)
    request_id = reader.read_long()
    packet_type = reader.read_long()
    body = reader.read_string()
    return request_id, packet_type, body
