"""
Exception hierarchy for pycondenser

Every error raised by the protocol code derives from SteamCondenserError and
carries an ErrorCategory so callers can decide how to react without matching
on concrete classes.
"""

from enum import Enum
from typing import List, Optional


class ErrorCategory(Enum):
    """Basic error categories"""
    CONNECTION = "connection"
    PROTOCOL = "protocol"
    AUTHENTICATION = "authentication"
    NETWORK = "network"
    PACKET = "packet"


class SteamCondenserError(Exception):
    """Base class for all errors raised by pycondenser"""

    category = ErrorCategory.PROTOCOL


class RequestTimeoutError(SteamCondenserError):
    """A reply did not arrive before the socket deadline"""

    category = ErrorCategory.NETWORK

    def __init__(self, message: str = "The request timed out"):
        super().__init__(message)


class ConnectionClosedError(SteamCondenserError):
    """The remote side closed or reset the connection"""

    category = ErrorCategory.CONNECTION

    def __init__(self, message: str = "The connection has been closed by the remote host"):
        super().__init__(message)


class PacketFormatError(SteamCondenserError):
    """A packet had a bad header, an unknown type or an invalid length"""

    category = ErrorCategory.PACKET


class RCONBanError(SteamCondenserError):
    """The server refused the RCON connection because this client is banned"""

    category = ErrorCategory.AUTHENTICATION

    def __init__(self, message: str = "You have been banned from this server."):
        super().__init__(message)


class RCONNoAuthError(SteamCondenserError):
    """An RCON command was issued without a valid authentication"""

    category = ErrorCategory.AUTHENTICATION

    def __init__(self, message: str = "Not authenticated yet."):
        super().__init__(message)


class PaginationLimitError(SteamCondenserError):
    """Master server enumeration requested more batches than allowed"""

    category = ErrorCategory.PROTOCOL

    def __init__(self, max_batches: int, servers: Optional[List] = None):
        self.max_batches = max_batches
        self.servers = list(servers or [])
        super().__init__(
            f"Master server enumeration stopped after {max_batches} batches "
            f"({len(self.servers)} servers collected)"
        )
