"""
Outgoing packets: query requests, master server requests and RCON requests
"""

import struct
from typing import Optional

from .base import QueryPacket
from ..protocol.constants import (
    CONNECTIONLESS_PREFIX, PacketHeader, RCONPacketType, Region,
    SERVER_LIST_SENTINEL,
)


# =============================================================================
# Query requests
# =============================================================================

class A2SInfoPacket(QueryPacket):
    """A2S_INFO request, optionally answering a server challenge"""

    def __init__(self, challenge: Optional[int] = None):
        content = b"Source Engine Query\x00"
        if challenge is not None:
            content += struct.pack('<i', challenge)
        super().__init__(PacketHeader.A2S_INFO, content)


class RequestWithChallengePacket(QueryPacket):
    """Request carrying a challenge number (-1 asks for a new challenge)"""

    def __init__(self, header: int, challenge: int = -1):
        self.challenge = challenge
        super().__init__(header, struct.pack('<i', challenge))


class A2SPlayerPacket(RequestWithChallengePacket):

    def __init__(self, challenge: int = -1):
        super().__init__(PacketHeader.A2S_PLAYER, challenge)


class A2SRulesPacket(RequestWithChallengePacket):

    def __init__(self, challenge: int = -1):
        super().__init__(PacketHeader.A2S_RULES, challenge)


# =============================================================================
# Master server requests
# =============================================================================

class A2MGetServersBatch2Packet:
    """Request for the next batch of servers from a master server

    Master server requests carry neither the connectionless prefix nor any
    padding:

        0x31, region byte, "ip:port\\0" seed, "filter\\0"
    """

    def __init__(self, region: int = Region.ALL, start_ip: str = SERVER_LIST_SENTINEL,
                 filter: str = ""):
        self.region = region
        self.start_ip = start_ip
        self.filter = filter

    def to_bytes(self) -> bytes:
        return (bytes([PacketHeader.A2M_GET_SERVERS_BATCH2, self.region & 0xFF])
                + self.start_ip.encode('ascii') + b"\x00"
                + self.filter.encode('utf-8') + b"\x00")

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __repr__(self) -> str:
        return f"<A2MGetServersBatch2Packet region=0x{self.region:02X} start={self.start_ip!r}>"


# =============================================================================
# Source RCON requests (TCP)
# =============================================================================

class RCONRequest:
    """A framed Source RCON packet

    <int32 size><int32 request id><int32 type><body>\\0\\0 where size counts
    everything after the size field.
    """

    def __init__(self, request_id: int, packet_type: int, body: str = ""):
        self.request_id = request_id
        self.packet_type = packet_type
        self.body = body

    def to_bytes(self) -> bytes:
        body = self.body.encode('utf-8')
        header = struct.pack('<iii', len(body) + 10, self.request_id, self.packet_type)
        return header + body + b"\x00\x00"

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.request_id} type={self.packet_type}>"


class RCONAuthRequest(RCONRequest):

    def __init__(self, request_id: int, password: str):
        super().__init__(request_id, RCONPacketType.SERVERDATA_AUTH, password)


class RCONExecRequest(RCONRequest):

    def __init__(self, request_id: int, command: str):
        super().__init__(request_id, RCONPacketType.SERVERDATA_EXECCOMMAND, command)


class RCONTerminator(RCONRequest):
    """Empty packet sent after a command to detect the end of its output

    The server echoes it back as an empty response and follows up with one
    more empty response, which marks the end of a multi-packet reply.
    """

    def __init__(self, request_id: int):
        super().__init__(request_id, RCONPacketType.SERVERDATA_RESPONSE_VALUE)


# =============================================================================
# GoldSrc RCON requests (UDP)
# =============================================================================

class RCONGoldSrcRequest:
    """Plain text GoldSrc RCON command behind the connectionless prefix"""

    def __init__(self, request: str):
        self.request = request

    def to_bytes(self) -> bytes:
        return CONNECTIONLESS_PREFIX + self.request.encode('utf-8')

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __repr__(self) -> str:
        return f"<RCONGoldSrcRequest {self.request.split(' ', 1)[0]!r}>"
