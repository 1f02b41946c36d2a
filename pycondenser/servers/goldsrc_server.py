"""
GoldSrc engine game server handle with UDP RCON
"""

from typing import Optional

from .game_server import DEFAULT_PORT, GameServer
from .master_server import MasterServer
from ..config.client_config import ClientConfig
from ..connection.socket_manager import GoldSrcSocket
from ..exceptions import RCONNoAuthError
from ..protocol.constants import GOLDSRC_MASTER_SERVER


class GoldSrcServer(GameServer):
    """A GoldSrc engine game server or HLTV proxy

    GoldSrc RCON has no session: the password is sent along with every
    command, so rcon_auth() only stores it.
    """

    def __init__(self, address: str, port: int = DEFAULT_PORT, is_hltv: bool = False,
                 config: Optional[ClientConfig] = None):
        self.is_hltv = is_hltv
        self.rcon_password: Optional[str] = None
        super().__init__(address, port, config)

    @staticmethod
    def master(config: Optional[ClientConfig] = None) -> MasterServer:
        """The master server listing GoldSrc servers"""
        return MasterServer(GOLDSRC_MASTER_SERVER, config=config)

    def init_socket(self):
        self.socket = GoldSrcSocket(
            self.ip_address, self.port,
            timeout=self.config.socket_timeout,
            log_packets=self.config.log_packets,
            is_hltv=self.is_hltv,
        )

    @property
    def rcon_authenticated(self) -> bool:
        return self.rcon_password is not None

    def rcon_auth(self, password: str) -> bool:
        self.rcon_password = password
        return True

    def rcon_exec(self, command: str) -> str:
        if self.rcon_password is None:
            raise RCONNoAuthError()
        return self.socket.rcon_exec(self.rcon_password, command)
