"""
Base class of game and master server handles

A server is addressed by a host name that may resolve to several IPv4
addresses. The handle talks to one of them at a time and can rotate to the
next one when it stops answering.
"""

import logging
import socket
from typing import List, Optional

from ..config.client_config import ClientConfig
from ..config.validation import validate_address
from ..exceptions import SteamCondenserError
from ..models.endpoint import Endpoint
from ..utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


class Server:
    """A server reachable under one or more IP addresses"""

    def __init__(self, address: str, port: Optional[int] = None,
                 config: Optional[ClientConfig] = None):
        """
        Create a server handle and its sockets.

        Sockets connect on first use. Invalid settings raise
        ConfigValidationError before anything is resolved.

        Args:
            address: Host name or IP, optionally with ":port"
            port: Port used when the address carries none
            config: Client settings (defaults to ClientConfig())
        """
        self.config = (config or ClientConfig()).validate()
        if self.config.log_level is not None:
            configure_logging(self.config.log_level)

        self.host, self.port = validate_address(address, port)
        self.ip_addresses = self.resolve(self.host)
        self.ip_index = 0

        self.init_socket()

    @staticmethod
    def resolve(host: str) -> List[str]:
        """Resolve a host name to all of its IPv4 addresses"""
        try:
            infos = socket.getaddrinfo(host, None, socket.AF_INET, socket.SOCK_DGRAM)
        except socket.gaierror as e:
            raise SteamCondenserError(f"Could not resolve host {host!r}: {e}") from e

        addresses = []
        for info in infos:
            ip = info[4][0]
            if ip not in addresses:
                addresses.append(ip)

        if not addresses:
            raise SteamCondenserError(f"Host {host!r} has no IPv4 address")

        logger.debug(f"Resolved {host} to {', '.join(addresses)}")
        return addresses

    @property
    def ip_address(self) -> str:
        """The IP address currently in use"""
        return self.ip_addresses[self.ip_index]

    @property
    def endpoint(self) -> Endpoint:
        return Endpoint(self.ip_address, self.port)

    def rotate_ip(self) -> bool:
        """Switch to the next IP address of this server

        Returns True when there is no other address to try, either because
        the host has a single address or because the rotation wrapped around
        to the first one.
        """
        if len(self.ip_addresses) == 1:
            return True

        self.ip_index = (self.ip_index + 1) % len(self.ip_addresses)
        logger.debug(f"Rotating {self.host} to {self.ip_address}")
        self.disconnect()
        self.init_socket()

        return self.ip_index == 0

    def init_socket(self):
        """Open the sockets for the current IP address"""
        raise NotImplementedError("Servers must implement init_socket()")

    def disconnect(self):
        """Close all sockets of this server"""
        raise NotImplementedError("Servers must implement disconnect()")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.host} ({self.ip_address}:{self.port})>"
