"""
Data models
"""

from .endpoint import Endpoint
from .player import SteamPlayer

__all__ = ['Endpoint', 'SteamPlayer']
