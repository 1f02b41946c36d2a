"""
Mock Source server for testing client functionality without a real server

One instance answers UDP queries (and master server batch requests) and
accepts TCP RCON connections on the same port of the loopback interface.
"""

import logging
import socket
import struct
import threading
import time
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .builders import (
    build_challenge, build_info2, build_players, build_rcon_packet,
    build_rules, build_server_batch, connectionless, split_source_reply,
)
from ..protocol.constants import (
    CONNECTIONLESS_PREFIX, PacketHeader, RCONPacketType, SERVER_LIST_SENTINEL,
)


class ServerState(Enum):
    """Server state enumeration"""
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


class ServerScenario:
    """Defines how the mock server behaves in a test"""

    def __init__(self, name: str):
        self.name = name

        # Query replies
        self.info: Dict = {
            'server_name': "Mock Server",
            'map_name': "de_dust2",
            'game_dir': "cstrike",
            'game_description': "Counter-Strike: Source",
            'app_id': 240,
            'max_players': 24,
            'game_version': "1.0.0.0",
        }
        self.players: List[Tuple[str, int, float]] = []
        self.rules: Dict[str, str] = {}
        self.challenge = 0x0BADC0DE
        self.require_info_challenge = False
        self.split_size: Optional[int] = None
        self.compress = False
        self.drop_requests = 0

        # RCON
        self.rcon_password = "secret"
        self.rcon_banned = False
        self.rcon_chunk_size = 4096
        self.command_responses: Dict[str, str] = {}

        # Master server
        self.master_servers: List[str] = []
        self.master_batch_size = 2

    def set_rcon_behavior(self, password: str, banned: bool = False) -> None:
        self.rcon_password = password
        self.rcon_banned = banned

    def add_command_response(self, command: str, output: str) -> None:
        self.command_responses[command] = output

    def set_split_replies(self, fragment_size: int, compress: bool = False) -> None:
        """Send query replies as split packets of the given fragment size"""
        self.split_size = fragment_size
        self.compress = compress


class MockSourceServer:
    """Mock Source game and master server for tests"""

    def __init__(self, host: str = "127.0.0.1", port: int = 0):
        self.host = host
        self.port = port
        self.logger = logging.getLogger(__name__)

        # Server state
        self.state = ServerState.STOPPED
        self.udp_socket: Optional[socket.socket] = None
        self.tcp_socket: Optional[socket.socket] = None
        self.threads: List[threading.Thread] = []
        self.running = False
        self.rcon_clients: List[socket.socket] = []

        self.scenario = ServerScenario("default")
        self._next_request_id = 1

        # Statistics
        self.stats = {
            'queries_received': 0,
            'queries_dropped': 0,
            'datagrams_sent': 0,
            'master_requests': 0,
            'rcon_connections': 0,
            'rcon_commands': 0,
        }

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def set_scenario(self, scenario: ServerScenario) -> None:
        """Set the current test scenario"""
        self.scenario = scenario
        self.logger.debug(f"Set scenario: {scenario.name}")

    def start(self) -> bool:
        """Start the mock server"""
        if self.state != ServerState.STOPPED:
            return False

        try:
            self.state = ServerState.STARTING
            self.udp_socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            self.udp_socket.bind((self.host, self.port))
            self.udp_socket.settimeout(0.1)
            self.port = self.udp_socket.getsockname()[1]

            self.tcp_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self.tcp_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self.tcp_socket.bind((self.host, self.port))
            self.tcp_socket.listen(5)
            self.tcp_socket.settimeout(0.1)
        except OSError as e:
            self.logger.error(f"Failed to start mock server: {e}")
            self._close_sockets()
            self.state = ServerState.STOPPED
            return False

        self.running = True
        for target in (self._udp_loop, self._tcp_loop):
            thread = threading.Thread(target=target, daemon=True)
            thread.start()
            self.threads.append(thread)

        self.state = ServerState.RUNNING
        self.logger.info(f"Mock server started on {self.host}:{self.port}")
        return True

    def stop(self) -> None:
        """Stop the mock server"""
        if self.state != ServerState.RUNNING:
            return

        self.state = ServerState.STOPPING
        self.running = False

        for thread in self.threads:
            if thread.is_alive():
                thread.join(timeout=2.0)
        self.threads.clear()

        for client in self.rcon_clients:
            client.close()
        self.rcon_clients.clear()
        self._close_sockets()

        self.state = ServerState.STOPPED
        self.logger.info("Mock server stopped")

    def _close_sockets(self) -> None:
        for sock in (self.udp_socket, self.tcp_socket):
            if sock is not None:
                sock.close()
        self.udp_socket = None
        self.tcp_socket = None

    def get_stats(self) -> Dict[str, int]:
        """Get server statistics"""
        return self.stats.copy()

    def wait_for(self, stat: str, count: int, timeout: float = 2.0) -> bool:
        """Wait until a statistic reaches the given count"""
        start_time = time.time()
        while time.time() - start_time < timeout:
            if self.stats[stat] >= count:
                return True
            time.sleep(0.01)
        return False

    # =========================================================================
    # UDP queries
    # =========================================================================

    def _udp_loop(self) -> None:
        while self.running:
            try:
                data, address = self.udp_socket.recvfrom(65535)
            except socket.timeout:
                continue
            except OSError:
                break

            for datagram in self._handle_datagram(data):
                self.udp_socket.sendto(datagram, address)
                self.stats['datagrams_sent'] += 1

    def _handle_datagram(self, data: bytes) -> List[bytes]:
        if self.scenario.drop_requests > 0:
            self.scenario.drop_requests -= 1
            self.stats['queries_dropped'] += 1
            return []

        if data[:1] == bytes([PacketHeader.A2M_GET_SERVERS_BATCH2]):
            self.stats['master_requests'] += 1
            return [self._handle_master_request(data)]

        if data[:4] != CONNECTIONLESS_PREFIX or len(data) < 5:
            self.logger.debug(f"Ignoring malformed datagram {data[:8]!r}")
            return []

        self.stats['queries_received'] += 1
        header = data[4]
        payload = data[5:]

        if header == PacketHeader.A2S_INFO:
            reply = self._handle_info(payload)
        elif header in (PacketHeader.A2S_PLAYER, PacketHeader.A2S_RULES):
            challenge = struct.unpack('<i', payload[:4])[0]
            if challenge != self.scenario.challenge:
                reply = build_challenge(self.scenario.challenge)
            elif header == PacketHeader.A2S_PLAYER:
                reply = build_players(self.scenario.players)
            else:
                reply = build_rules(self.scenario.rules)
        else:
            self.logger.debug(f"Ignoring query with header 0x{header:02X}")
            return []

        return self._frame(reply)

    def _handle_info(self, payload: bytes) -> bytes:
        if self.scenario.require_info_challenge:
            query_end = payload.find(b"\x00") + 1
            challenge = payload[query_end:query_end + 4]
            if challenge != struct.pack('<i', self.scenario.challenge):
                return build_challenge(self.scenario.challenge)
        return build_info2(self.scenario.info)

    def _frame(self, packet: bytes) -> List[bytes]:
        datagram = connectionless(packet)
        if self.scenario.split_size is None:
            return [datagram]

        request_id = self._next_request_id
        self._next_request_id += 1
        return split_source_reply(datagram, request_id, self.scenario.split_size,
                                  self.scenario.compress)

    def _handle_master_request(self, data: bytes) -> bytes:
        seed_end = data.index(b"\x00", 2)
        seed = data[2:seed_end].decode('ascii')

        servers = self.scenario.master_servers
        start = 0 if seed == SERVER_LIST_SENTINEL else servers.index(seed) + 1
        end = start + self.scenario.master_batch_size
        batch = servers[start:end]
        if end >= len(servers):
            batch = batch + [SERVER_LIST_SENTINEL]

        return connectionless(build_server_batch(batch))

    # =========================================================================
    # TCP RCON
    # =========================================================================

    def _tcp_loop(self) -> None:
        while self.running:
            try:
                client, _ = self.tcp_socket.accept()
            except socket.timeout:
                continue
            except OSError:
                break

            self.stats['rcon_connections'] += 1
            self.rcon_clients.append(client)
            thread = threading.Thread(target=self._handle_rcon_client, args=(client,), daemon=True)
            thread.start()

    def _receive_exactly(self, client: socket.socket, size: int) -> Optional[bytes]:
        data = b""
        while len(data) < size and self.running:
            try:
                chunk = client.recv(size - len(data))
            except socket.timeout:
                continue
            except OSError:
                return None
            if not chunk:
                return None
            data += chunk
        return data if len(data) == size else None

    def _handle_rcon_client(self, client: socket.socket) -> None:
        client.settimeout(0.1)
        authenticated = False

        try:
            while self.running:
                size_field = self._receive_exactly(client, 4)
                if size_field is None:
                    break
                payload = self._receive_exactly(client, struct.unpack('<i', size_field)[0])
                if payload is None:
                    break

                request_id, packet_type = struct.unpack('<ii', payload[:8])
                body = payload[8:].split(b"\x00", 1)[0].decode('utf-8')

                if packet_type == RCONPacketType.SERVERDATA_AUTH:
                    if self.scenario.rcon_banned:
                        break
                    authenticated = body == self.scenario.rcon_password
                    client.sendall(build_rcon_packet(request_id, RCONPacketType.SERVERDATA_RESPONSE_VALUE))
                    client.sendall(build_rcon_packet(
                        request_id if authenticated else -1,
                        RCONPacketType.SERVERDATA_AUTH_RESPONSE,
                    ))
                elif packet_type == RCONPacketType.SERVERDATA_EXECCOMMAND:
                    if not authenticated:
                        break
                    self.stats['rcon_commands'] += 1
                    self._send_command_output(client, request_id, body)
                elif packet_type == RCONPacketType.SERVERDATA_RESPONSE_VALUE:
                    # Echo the terminator, then flush with one more empty packet
                    client.sendall(build_rcon_packet(request_id, RCONPacketType.SERVERDATA_RESPONSE_VALUE))
                    client.sendall(build_rcon_packet(request_id, RCONPacketType.SERVERDATA_RESPONSE_VALUE))
        except OSError as e:
            self.logger.debug(f"RCON client error: {e}")
        finally:
            client.close()

    def _send_command_output(self, client: socket.socket, request_id: int, command: str) -> None:
        output = self.scenario.command_responses.get(command, f"Unknown command \"{command}\"\n")
        size = self.scenario.rcon_chunk_size
        chunks = [output[i:i + size] for i in range(0, len(output), size)] or [""]
        for chunk in chunks:
            client.sendall(build_rcon_packet(request_id, RCONPacketType.SERVERDATA_RESPONSE_VALUE, chunk))

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
