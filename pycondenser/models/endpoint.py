"""
Resolved server addresses
"""

from typing import NamedTuple, Tuple


class Endpoint(NamedTuple):
    """An IPv4 address and a port"""
    ip: str
    port: int

    @classmethod
    def parse(cls, address: str) -> 'Endpoint':
        """Parse an ``ip:port`` string"""
        ip, _, port = address.rpartition(':')
        if not ip or not port.isdigit():
            raise ValueError(f"Invalid server address: {address!r}")
        return cls(ip, int(port))

    @property
    def address(self) -> Tuple[str, int]:
        """Address as (ip, port) tuple for socket calls"""
        return (self.ip, self.port)

    def __str__(self) -> str:
        return f"{self.ip}:{self.port}"
