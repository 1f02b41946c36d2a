"""
Server handles
"""

from .server import Server
from .game_server import (
    GameServer, REQUEST_CHALLENGE, REQUEST_INFO, REQUEST_PLAYER, REQUEST_RULES,
    player_status_attributes, split_player_status,
)
from .master_server import MasterServer
from .source_server import SourceServer
from .goldsrc_server import GoldSrcServer

__all__ = [
    'Server', 'GameServer', 'MasterServer', 'SourceServer', 'GoldSrcServer',
    'REQUEST_CHALLENGE', 'REQUEST_INFO', 'REQUEST_PLAYER', 'REQUEST_RULES',
    'player_status_attributes', 'split_player_status',
]
