"""
pycondenser - Steam game server query, RCON and master server client

Usage:
    from pycondenser import SourceServer, MasterServer, Region

    server = SourceServer("192.0.2.10:27015")
    print(server.server_info['map_name'])
    for player in server.players().values():
        print(player.name, player.score)

    master = MasterServer(MasterServer.SOURCE_MASTER_SERVER)
    servers = master.get_servers(Region.EUROPE, "\\\\gamedir\\\\tf")
"""

__version__ = "1.0.0"

from .config import ClientConfig, ConfigValidationError
from .exceptions import (
    ConnectionClosedError, ErrorCategory, PacketFormatError,
    PaginationLimitError, RCONBanError, RCONNoAuthError, RequestTimeoutError,
    SteamCondenserError,
)
from .models import Endpoint, SteamPlayer
from .protocol.constants import GOLDSRC_MASTER_SERVER, Region, SOURCE_MASTER_SERVER
from .rcon import RCONSession, RCONState
from .servers import GameServer, GoldSrcServer, MasterServer, Server, SourceServer
from .utils.logging_config import configure_logging

__all__ = [
    'ClientConfig', 'ConfigValidationError',
    'ConnectionClosedError', 'ErrorCategory', 'PacketFormatError',
    'PaginationLimitError', 'RCONBanError', 'RCONNoAuthError',
    'RequestTimeoutError', 'SteamCondenserError',
    'Endpoint', 'SteamPlayer',
    'GOLDSRC_MASTER_SERVER', 'Region', 'SOURCE_MASTER_SERVER',
    'RCONSession', 'RCONState',
    'GameServer', 'GoldSrcServer', 'MasterServer', 'Server', 'SourceServer',
    'configure_logging',
]
