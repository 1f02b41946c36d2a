"""
Packet factory - turns raw reply data into packet objects

Query replies are dispatched on their header byte, RCON replies on their type
code. Split UDP replies are joined (and decompressed) by reassemble_packet().
"""

import bz2
import logging
import zlib
from typing import Any, Callable, Dict, List

from . import incoming
from ..exceptions import PacketFormatError
from ..protocol.constants import CONNECTIONLESS_PREFIX, PacketHeader, RCONPacketType

logger = logging.getLogger(__name__)


PACKET_DECODERS: Dict[int, Callable[[int, bytes], Any]] = {
    PacketHeader.S2A_INFO_DETAILED: incoming.decode_info_detailed,
    PacketHeader.S2A_INFO2: incoming.decode_info2,
    PacketHeader.S2A_PLAYER: incoming.decode_players,
    PacketHeader.S2A_RULES: incoming.decode_rules,
    PacketHeader.S2C_CHALLENGE: incoming.decode_challenge,
    PacketHeader.M2A_SERVER_BATCH: incoming.decode_server_batch,
    PacketHeader.RCON_GOLDSRC_CHALLENGE: incoming.decode_goldsrc_rcon,
    PacketHeader.RCON_GOLDSRC_NO_CHALLENGE: incoming.decode_goldsrc_rcon,
    PacketHeader.RCON_GOLDSRC_RESPONSE: incoming.decode_goldsrc_rcon,
}

RCON_PACKET_CLASSES = {
    RCONPacketType.SERVERDATA_AUTH_RESPONSE: incoming.RCONAuthResponse,
    RCONPacketType.SERVERDATA_RESPONSE_VALUE: incoming.RCONExecResponse,
}


def packet_from_data(data: bytes):
    """Decode a query reply without its connectionless prefix"""
    if not data:
        raise PacketFormatError("Received an empty packet.")

    header = data[0]
    decoder = PACKET_DECODERS.get(header)
    if decoder is None:
        raise PacketFormatError(f"Unknown packet with header 0x{header:02X} received.")

    try:
        header = PacketHeader(header)
    except ValueError:
        pass
    return decoder(header, data[1:])


def rcon_packet_from_data(data: bytes) -> incoming.RCONReply:
    """Decode an RCON packet without its size field"""
    request_id, packet_type, body = incoming.decode_rcon_fields(data)

    packet_class = RCON_PACKET_CLASSES.get(packet_type)
    if packet_class is None:
        raise PacketFormatError(f"Unknown RCON packet type {packet_type} received.")

    return packet_class(request_id, packet_type, body)


def reassemble_packet(fragments: List[bytes], compressed: bool = False,
                      uncompressed_size: int = 0, crc: int = 0):
    """Join the fragments of a split reply and decode the result

    Compressed replies are bzip2 decompressed and checked against the
    announced size and CRC32 first.
    """
    data = b"".join(fragments)

    if compressed:
        try:
            data = bz2.decompress(data)
        except (OSError, ValueError) as e:
            raise PacketFormatError(f"Could not decompress split packet: {e}") from e

        if len(data) != uncompressed_size:
            raise PacketFormatError(
                f"Decompressed size {len(data)} does not match announced size {uncompressed_size}."
            )
        if zlib.crc32(data) != (crc & 0xFFFFFFFF):
            raise PacketFormatError("CRC32 checksum mismatch of uncompressed packet data.")

    if data[:4] != CONNECTIONLESS_PREFIX:
        logger.debug(f"Reassembled packet starts with {data[:4]!r} instead of the connectionless prefix")

    # The first fragment still carries the 0xFFFFFFFF single packet header
    return packet_from_data(data[4:])
