"""
Source RCON protocol
"""

from .rcon_session import RCONSession, RCONState

__all__ = ['RCONSession', 'RCONState']
