"""
Socket layer
"""

from .socket_manager import (
    GoldSrcSocket, MasterServerSocket, QuerySocket, RCONSocket, SourceSocket,
    SplitHeader, SteamSocket,
)

__all__ = [
    'GoldSrcSocket', 'MasterServerSocket', 'QuerySocket', 'RCONSocket',
    'SourceSocket', 'SplitHeader', 'SteamSocket',
]
