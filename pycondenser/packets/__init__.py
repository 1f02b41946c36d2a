"""
Packet definitions, builders and the reply factory
"""

from .base import QueryPacket, SteamPacket
from .incoming import (
    ChallengePacket, GoldSrcRCONResponsePacket, PlayersPacket,
    RCONAuthResponse, RCONExecResponse, RCONReply, RulesPacket,
    ServerBatchPacket, ServerInfoPacket,
)
from .outgoing import (
    A2MGetServersBatch2Packet, A2SInfoPacket,
    A2SPlayerPacket, A2SRulesPacket, RCONAuthRequest, RCONExecRequest,
    RCONGoldSrcRequest, RCONRequest, RCONTerminator,
)
from .packet_parser import packet_from_data, rcon_packet_from_data, reassemble_packet

__all__ = [
    'SteamPacket', 'QueryPacket',
    'ChallengePacket', 'GoldSrcRCONResponsePacket', 'PlayersPacket',
    'RCONAuthResponse', 'RCONExecResponse', 'RCONReply', 'RulesPacket',
    'ServerBatchPacket', 'ServerInfoPacket',
    'A2MGetServersBatch2Packet', 'A2SInfoPacket',
    'A2SPlayerPacket', 'A2SRulesPacket', 'RCONAuthRequest', 'RCONExecRequest',
    'RCONGoldSrcRequest', 'RCONRequest', 'RCONTerminator',
    'packet_from_data', 'rcon_packet_from_data', 'reassemble_packet',
]
