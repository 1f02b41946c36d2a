"""
Source engine game server handle with TCP RCON
"""

from typing import Optional

from .game_server import DEFAULT_PORT, GameServer
from .master_server import MasterServer
from ..config.client_config import ClientConfig
from ..connection.socket_manager import RCONSocket, SourceSocket
from ..protocol.constants import SOURCE_MASTER_SERVER
from ..rcon.rcon_session import RCONSession


class SourceServer(GameServer):
    """
    A Source engine game server.

    Usage:
        with SourceServer("192.0.2.10:27015") as server:
            print(server.server_info['server_name'])
            if server.rcon_auth("secret"):
                print(server.rcon_exec("status"))
    """

    def __init__(self, address: str, port: int = DEFAULT_PORT,
                 config: Optional[ClientConfig] = None):
        self.rcon_socket: Optional[RCONSocket] = None
        self.rcon_session: Optional[RCONSession] = None
        super().__init__(address, port, config)

    @staticmethod
    def master(config: Optional[ClientConfig] = None) -> MasterServer:
        """The master server listing Source servers"""
        return MasterServer(SOURCE_MASTER_SERVER, config=config)

    def init_socket(self):
        self.socket = SourceSocket(
            self.ip_address, self.port,
            timeout=self.config.socket_timeout,
            log_packets=self.config.log_packets,
            buffer_size=self.config.query_buffer_size,
        )
        self.rcon_socket = RCONSocket(
            self.ip_address, self.port,
            timeout=self.config.socket_timeout,
            log_packets=self.config.log_packets,
            connect_timeout=self.config.connect_timeout,
        )
        self.rcon_session = RCONSession(self.rcon_socket)

    def disconnect(self):
        super().disconnect()
        if self.rcon_socket is not None:
            self.rcon_socket.close()
        if self.rcon_session is not None:
            self.rcon_session.reset()

    @property
    def rcon_authenticated(self) -> bool:
        return self.rcon_session is not None and self.rcon_session.authenticated

    def rcon_auth(self, password: str) -> bool:
        """Authenticate the RCON connection, False on a wrong password"""
        return self.rcon_session.authenticate(password)

    def rcon_exec(self, command: str) -> str:
        """Run a command over RCON and return its output"""
        return self.rcon_session.execute(command)
