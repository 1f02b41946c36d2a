"""
Socket layer for the Steam query, master server and RCON protocols

Every socket owns exactly one channel and waits for replies with select(), so
each receive is bounded by the socket timeout (milliseconds).
"""

import logging
import select
import socket
import struct
from typing import Dict, NamedTuple, Optional, Tuple

from ..exceptions import (
    ConnectionClosedError, PacketFormatError, RCONBanError, RCONNoAuthError,
    RequestTimeoutError, SteamCondenserError,
)
from ..packets.incoming import GoldSrcRCONResponsePacket, RCONReply
from ..packets.outgoing import RCONGoldSrcRequest
from ..packets.packet_parser import packet_from_data, rcon_packet_from_data, reassemble_packet
from ..protocol.binary_reader import BinaryReader
from ..protocol.constants import (
    COMPRESSED_FLAG, CONNECTIONLESS_PREFIX, GOLDSRC_BAD_PASSWORD_MESSAGE,
    GOLDSRC_BANNED_MESSAGE, MASTER_PACKET_SIZE, MAX_QUERY_PACKET_SIZE,
    SINGLE_PACKET_HEADER, SPLIT_PACKET_HEADER,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 1000


# =============================================================================
# Base socket
# =============================================================================

class SteamSocket:
    """Base class of all sockets talking to a Steam server"""

    def __init__(self, ip: str, port: int, timeout: int = DEFAULT_TIMEOUT,
                 log_packets: bool = False):
        self.ip = ip
        self.port = port
        self.timeout = timeout
        self.log_packets = log_packets
        self.buffer = b""
        self.channel: Optional[socket.socket] = None

    @property
    def remote(self) -> Tuple[str, int]:
        return (self.ip, self.port)

    def receive_packet(self, buffer_length: int = 0) -> int:
        """Wait for data and store up to buffer_length bytes in self.buffer

        Returns the number of bytes received (0 when the peer closed a TCP
        connection). Raises RequestTimeoutError when nothing arrives in time.
        """
        if self.channel is None:
            raise ConnectionClosedError("Socket is not connected")

        ready, _, _ = select.select([self.channel], [], [], self.timeout / 1000.0)
        if not ready:
            raise RequestTimeoutError(
                f"No reply from {self.ip}:{self.port} within {self.timeout} ms"
            )

        try:
            self.buffer = self.channel.recv(buffer_length or MAX_QUERY_PACKET_SIZE)
        except ConnectionError as e:
            self.close()
            raise ConnectionClosedError(f"Connection to {self.ip}:{self.port} was reset") from e

        if self.log_packets:
            logger.debug(f"<- {self.ip}:{self.port} {self.buffer.hex()}")

        return len(self.buffer)

    def close(self):
        """Close the channel if it is open"""
        if self.channel is not None:
            try:
                self.channel.close()
            finally:
                self.channel = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.ip}:{self.port}>"


# =============================================================================
# UDP query sockets
# =============================================================================

class SplitHeader(NamedTuple):
    """Header of one fragment of a split reply"""
    request_id: int
    packet_count: int
    packet_number: int
    compressed: bool = False
    uncompressed_size: Optional[int] = None
    crc: Optional[int] = None


class QuerySocket(SteamSocket):
    """UDP socket for connectionless query packets

    The channel is opened on the first send and reopened after close().
    """

    def __init__(self, ip: str, port: int, timeout: int = DEFAULT_TIMEOUT,
                 log_packets: bool = False, buffer_size: int = MAX_QUERY_PACKET_SIZE):
        super().__init__(ip, port, timeout, log_packets)
        self.buffer_size = buffer_size

    def connect(self):
        channel = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            channel.connect(self.remote)
        except OSError as e:
            channel.close()
            raise SteamCondenserError(f"Could not open a socket to {self.ip}:{self.port}: {e}") from e
        self.channel = channel

    def send(self, packet):
        """Send one packet as a single datagram"""
        if self.channel is None:
            self.connect()

        data = packet.to_bytes()
        logger.debug(f"Sending {packet!r} to {self.ip}:{self.port}")
        if self.log_packets:
            logger.debug(f"-> {self.ip}:{self.port} {data.hex()}")

        try:
            self.channel.send(data)
        except OSError as e:
            raise SteamCondenserError(f"Could not send to {self.ip}:{self.port}: {e}") from e

    def packet_is_split(self) -> bool:
        """Tell a split fragment (-2) from a single packet (-1) by its header"""
        if len(self.buffer) < 4:
            raise PacketFormatError(f"Reply of {len(self.buffer)} bytes is too short.")

        header = struct.unpack('<i', self.buffer[:4])[0]
        if header == SPLIT_PACKET_HEADER:
            return True
        if header == SINGLE_PACKET_HEADER:
            return False
        raise PacketFormatError(f"Reply has an invalid packet header 0x{header & 0xFFFFFFFF:08X}.")

    def read_split_header(self, reader: BinaryReader) -> SplitHeader:
        raise NotImplementedError("Query sockets must implement read_split_header()")

    def get_reply(self):
        """Receive one reply, joining split fragments when necessary"""
        self.receive_packet(self.buffer_size)

        if self.packet_is_split():
            packet = self._receive_split_reply()
        else:
            packet = packet_from_data(self.buffer[4:])

        logger.debug(f"Received packet of type {type(packet).__name__} from {self.ip}:{self.port}")
        return packet

    def _receive_split_reply(self):
        fragments: Dict[int, bytes] = {}
        compressed = False
        uncompressed_size = 0
        crc = 0

        while True:
            reader = BinaryReader(self.buffer, 4)
            header = self.read_split_header(reader)
            fragments[header.packet_number] = reader.read_remaining()

            if header.compressed:
                compressed = True
            if header.uncompressed_size is not None:
                uncompressed_size = header.uncompressed_size
                crc = header.crc

            logger.debug(
                f"Received fragment {header.packet_number + 1}/{header.packet_count} "
                f"of request {header.request_id & 0x7FFFFFFF}"
            )

            if len(fragments) >= header.packet_count:
                break

            self.receive_packet(self.buffer_size)
            if not self.packet_is_split():
                raise PacketFormatError("Received a single packet while waiting for split packet fragments.")

        ordered = [fragments[number] for number in sorted(fragments)]
        return reassemble_packet(ordered, compressed, uncompressed_size, crc)


class SourceSocket(QuerySocket):
    """Query socket of a Source server"""

    def read_split_header(self, reader: BinaryReader) -> SplitHeader:
        request_id = reader.read_unsigned_long()
        packet_count = reader.read_byte()
        packet_number = reader.read_byte()
        compressed = bool(request_id & COMPRESSED_FLAG)

        if compressed:
            # Size and checksum of the whole reply precede the first fragment
            if packet_number == 0:
                uncompressed_size = reader.read_long()
                crc = reader.read_unsigned_long()
                return SplitHeader(request_id, packet_count, packet_number,
                                   True, uncompressed_size, crc)
            return SplitHeader(request_id, packet_count, packet_number, True)

        reader.read_short()  # split size
        return SplitHeader(request_id, packet_count, packet_number)


class GoldSrcSocket(QuerySocket):
    """Query socket of a GoldSrc server, also used for its UDP RCON"""

    def __init__(self, ip: str, port: int, timeout: int = DEFAULT_TIMEOUT,
                 log_packets: bool = False, is_hltv: bool = False):
        super().__init__(ip, port, timeout, log_packets)
        self.is_hltv = is_hltv
        self.rcon_challenge: Optional[int] = None

    def read_split_header(self, reader: BinaryReader) -> SplitHeader:
        request_id = reader.read_unsigned_long()
        packet_info = reader.read_byte()
        # High nibble is the fragment number, low nibble the fragment count
        return SplitHeader(request_id, packet_info & 0x0F, packet_info >> 4)

    def rcon_send(self, command: str):
        self.send(RCONGoldSrcRequest(command))

    def _rcon_reply(self) -> str:
        packet = self.get_reply()
        if not isinstance(packet, GoldSrcRCONResponsePacket):
            raise PacketFormatError(f"Expected an RCON reply, got {type(packet).__name__}.")
        return packet.response

    def rcon_get_challenge(self):
        """Ask the server for a new RCON challenge number"""
        self.rcon_send("challenge rcon")
        response = self._rcon_reply().strip()

        if response == GOLDSRC_BANNED_MESSAGE:
            raise RCONBanError()

        # The reply is "challenge rcon <number>" minus its header byte "c"
        try:
            self.rcon_challenge = int(response[14:].strip())
        except ValueError as e:
            raise PacketFormatError(f"Invalid RCON challenge reply {response!r}.") from e

        logger.debug(f"Got RCON challenge {self.rcon_challenge} from {self.ip}:{self.port}")

    def rcon_exec(self, password: str, command: str) -> str:
        """Run a command and return its complete output"""
        if self.rcon_challenge is None or self.is_hltv:
            self.rcon_get_challenge()

        self.rcon_send(f"rcon {self.rcon_challenge} {password} {command}")
        if self.is_hltv:
            try:
                response = self._rcon_reply()
            except RequestTimeoutError:
                response = ""
        else:
            response = self._rcon_reply()

        if response.strip() == GOLDSRC_BAD_PASSWORD_MESSAGE:
            raise RCONNoAuthError()
        if response.strip() == GOLDSRC_BANNED_MESSAGE:
            raise RCONBanError()

        # An empty command flushes the remaining output
        self.rcon_send(f"rcon {self.rcon_challenge} {password}")
        parts = [response]
        while True:
            part = self._rcon_reply()
            parts.append(part)
            if not part:
                break

        return "".join(parts)


class MasterServerSocket(QuerySocket):
    """Query socket of a master server"""

    def __init__(self, ip: str, port: int, timeout: int = DEFAULT_TIMEOUT,
                 log_packets: bool = False):
        super().__init__(ip, port, timeout, log_packets, buffer_size=MASTER_PACKET_SIZE)

    def get_reply(self):
        self.receive_packet(MASTER_PACKET_SIZE)

        if self.buffer[:4] != CONNECTIONLESS_PREFIX:
            raise PacketFormatError("Master query response has wrong packet header.")

        packet = packet_from_data(self.buffer[4:])
        logger.debug(f"Received packet of type {type(packet).__name__} from {self.ip}:{self.port}")
        return packet


# =============================================================================
# TCP RCON socket
# =============================================================================

class RCONSocket(SteamSocket):
    """TCP socket for the Source RCON protocol

    The connection is opened on the first send and reopened transparently
    after the server closed it.
    """

    def __init__(self, ip: str, port: int, timeout: int = DEFAULT_TIMEOUT,
                 log_packets: bool = False, connect_timeout: int = DEFAULT_TIMEOUT):
        super().__init__(ip, port, timeout, log_packets)
        self.connect_timeout = connect_timeout

    @property
    def connected(self) -> bool:
        return self.channel is not None

    def connect(self):
        try:
            self.channel = socket.create_connection(self.remote, timeout=self.connect_timeout / 1000.0)
        except socket.timeout as e:
            raise RequestTimeoutError(
                f"Could not connect to {self.ip}:{self.port} within {self.connect_timeout} ms"
            ) from e
        except OSError as e:
            raise SteamCondenserError(f"Could not connect to {self.ip}:{self.port}: {e}") from e
        logger.debug(f"Opened RCON connection to {self.ip}:{self.port}")

    def send(self, packet):
        if self.channel is None:
            self.connect()

        data = packet.to_bytes()
        logger.debug(f"Sending {packet!r} to {self.ip}:{self.port}")
        if self.log_packets:
            logger.debug(f"-> {self.ip}:{self.port} {data.hex()}")

        try:
            self.channel.sendall(data)
        except OSError as e:
            self.close()
            raise SteamCondenserError(f"Could not send to {self.ip}:{self.port}: {e}") from e

    def get_reply(self) -> Optional[RCONReply]:
        """Receive one RCON packet, None when the server closed the connection"""
        try:
            if self.receive_packet(4) == 0:
                self.close()
                return None
        except ConnectionClosedError:
            self.close()
            return None

        try:
            size_field = self.buffer
            size_field += self._receive_exactly(4 - len(size_field))
            packet_size = struct.unpack('<i', size_field)[0]
            if packet_size < 10:
                raise PacketFormatError(f"Invalid RCON packet size {packet_size}.")

            packet = rcon_packet_from_data(self._receive_exactly(packet_size))
        except (RequestTimeoutError, PacketFormatError):
            # The stream is no longer aligned to packet boundaries
            self.close()
            raise
        logger.debug(f"Received packet of type {type(packet).__name__} from {self.ip}:{self.port}")
        return packet

    def _receive_exactly(self, size: int) -> bytes:
        data = b""
        while len(data) < size:
            if self.receive_packet(size - len(data)) == 0:
                self.close()
                raise ConnectionClosedError("Connection closed in the middle of an RCON packet")
            data += self.buffer
        return data
