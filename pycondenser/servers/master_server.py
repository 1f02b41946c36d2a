"""
Master server handle - enumerates public game servers

The master server answers each batch request with a list of addresses. The
last address of a batch is the seed of the next request; the address
0.0.0.0:0 marks the end of the list. Timeouts are retried, and when the
current IP address keeps failing the handle rotates to the next address of
the master server and continues where it left off.
"""

import logging
from typing import Iterator, List, Optional

from .server import Server
from ..config.client_config import ClientConfig
from ..config.validation import validate_region, validate_retries
from ..connection.socket_manager import MasterServerSocket
from ..exceptions import PacketFormatError, PaginationLimitError, RequestTimeoutError
from ..models.endpoint import Endpoint
from ..packets.incoming import ServerBatchPacket
from ..packets.outgoing import A2MGetServersBatch2Packet
from ..protocol.constants import (
    GOLDSRC_MASTER_SERVER, Region, SERVER_LIST_SENTINEL, SOURCE_MASTER_SERVER,
)

logger = logging.getLogger(__name__)

# Region codes, re-exported for convenience
REGION_US_EAST_COAST = Region.US_EAST_COAST
REGION_US_WEST_COAST = Region.US_WEST_COAST
REGION_SOUTH_AMERICA = Region.SOUTH_AMERICA
REGION_EUROPE = Region.EUROPE
REGION_ASIA = Region.ASIA
REGION_AUSTRALIA = Region.AUSTRALIA
REGION_MIDDLE_EAST = Region.MIDDLE_EAST
REGION_AFRICA = Region.AFRICA
REGION_ALL = Region.ALL


class MasterServer(Server):
    """
    A Steam master server.

    Usage:
        master = MasterServer(SOURCE_MASTER_SERVER)
        for server in master.get_servers(REGION_EUROPE, "\\\\gamedir\\\\tf"):
            print(server)
    """

    GOLDSRC_MASTER_SERVER = GOLDSRC_MASTER_SERVER
    SOURCE_MASTER_SERVER = SOURCE_MASTER_SERVER

    def __init__(self, address: str, port: Optional[int] = None,
                 config: Optional[ClientConfig] = None, retries: Optional[int] = None):
        self.socket: Optional[MasterServerSocket] = None
        super().__init__(address, port, config)
        self.retries = validate_retries(retries) if retries is not None else self.config.master_retries
        self.max_batches = self.config.master_max_batches

    def init_socket(self):
        self.socket = MasterServerSocket(
            self.ip_address, self.port,
            timeout=self.config.socket_timeout,
            log_packets=self.config.log_packets,
        )

    def disconnect(self):
        if self.socket is not None:
            self.socket.close()

    def _request_batch(self, region: int, cursor: str, filter: str) -> List[str]:
        self.socket.send(A2MGetServersBatch2Packet(region, cursor, filter))
        reply = self.socket.get_reply()
        if not isinstance(reply, ServerBatchPacket):
            raise PacketFormatError(f"Expected a server batch, got {type(reply).__name__}.")
        return reply.servers

    def iter_batches(self, region: int = Region.ALL, filter: str = "",
                     force: bool = False) -> Iterator[List[Endpoint]]:
        """Yield the servers of each batch as it arrives

        Stop iterating to interrupt the enumeration between two batches.

        Args:
            region: Region code (see Region)
            filter: Master server filter, e.g. "\\\\gamedir\\\\cstrike"
            force: Return what has been collected instead of raising when
                   the master server stops answering
        """
        validate_region(region)

        cursor = SERVER_LIST_SENTINEL
        collected: List[Endpoint] = []
        batches = 0
        finished = False

        while True:
            fail_count = 0
            try:
                while not finished:
                    if self.max_batches is not None and batches >= self.max_batches:
                        raise PaginationLimitError(self.max_batches, collected)
                    batches += 1

                    try:
                        addresses = self._request_batch(region, cursor, filter)
                    except RequestTimeoutError:
                        fail_count += 1
                        if fail_count >= self.retries:
                            raise
                        logger.info(f"Request to master server {self.ip_address} timed out, retrying...")
                        continue

                    batch = []
                    for address in addresses:
                        if address == SERVER_LIST_SENTINEL:
                            finished = True
                            continue
                        endpoint = Endpoint.parse(address)
                        batch.append(endpoint)
                        cursor = address
                    fail_count = 0

                    collected.extend(batch)
                    logger.debug(f"Received {len(batch)} servers, {len(collected)} in total")
                    yield batch
                return
            except RequestTimeoutError:
                if force:
                    logger.info(f"Master server stopped answering, returning {len(collected)} servers")
                    return
                if self.rotate_ip():
                    raise
                logger.info(f"Request to master server failed, retrying {self.ip_address}...")

    def get_servers(self, region: int = Region.ALL, filter: str = "",
                    force: bool = False) -> List[Endpoint]:
        """Enumerate all servers matching the region and filter"""
        servers: List[Endpoint] = []
        for batch in self.iter_batches(region, filter, force):
            servers.extend(batch)
        return servers
