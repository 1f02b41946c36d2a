"""
Tests for master server enumeration, retries and failover
"""

import pytest

from pycondenser.config import ClientConfig, ConfigValidationError
from pycondenser.exceptions import (
    PacketFormatError, PaginationLimitError, RequestTimeoutError,
)
from pycondenser.models import Endpoint
from pycondenser.packets import (
    A2MGetServersBatch2Packet, ChallengePacket, ServerBatchPacket,
)
from pycondenser.protocol.constants import PacketHeader, Region
from pycondenser.servers import MasterServer
from pycondenser.testing.fakes import ScriptedSocket


def batch(*servers):
    return ServerBatchPacket(PacketHeader.M2A_SERVER_BATCH, list(servers))


def timeouts(count):
    return [RequestTimeoutError] * count


@pytest.fixture
def master():
    server = MasterServer("127.0.0.1:27011", retries=3)
    server.socket.close()
    server.socket = ScriptedSocket()
    return server


def with_failover(server, *scripts):
    """Give the server two addresses, each answering from its own script"""
    server.ip_addresses = ["10.0.0.1", "10.0.0.2"]
    sockets = [ScriptedSocket(script) for script in scripts]
    server.socket = sockets[0]
    queue = list(sockets[1:])

    def init_socket():
        server.socket = queue.pop(0)

    server.init_socket = init_socket
    return sockets


class TestEnumeration:
    """Test batch paging"""

    def test_end_marker_in_first_batch(self, master):
        master.socket.replies.append(batch("0.0.0.0:0"))

        assert master.get_servers() == []

        [request] = master.socket.sent
        assert isinstance(request, A2MGetServersBatch2Packet)
        assert request.start_ip == "0.0.0.0:0"
        assert request.region == Region.ALL

    def test_batches_are_chained(self, master):
        master.socket.replies.extend([
            batch("1.1.1.1:27015", "2.2.2.2:27016"),
            batch("3.3.3.3:27017", "0.0.0.0:0"),
        ])

        servers = master.get_servers(Region.EUROPE, "\\gamedir\\tf")

        assert servers == [
            Endpoint("1.1.1.1", 27015), Endpoint("2.2.2.2", 27016), Endpoint("3.3.3.3", 27017),
        ]
        first, second = master.socket.sent
        assert first.start_ip == "0.0.0.0:0"
        assert second.start_ip == "2.2.2.2:27016"
        assert second.region == Region.EUROPE
        assert second.filter == "\\gamedir\\tf"

    def test_iter_batches_yields_each_batch(self, master):
        master.socket.replies.extend([
            batch("1.1.1.1:1", "2.2.2.2:2"),
            batch("3.3.3.3:3", "0.0.0.0:0"),
        ])

        batches = list(master.iter_batches())

        assert batches == [
            [Endpoint("1.1.1.1", 1), Endpoint("2.2.2.2", 2)],
            [Endpoint("3.3.3.3", 3)],
        ]

    def test_iteration_can_be_interrupted(self, master):
        master.socket.replies.extend([batch("1.1.1.1:1"), batch("2.2.2.2:2")])

        for servers in master.iter_batches():
            break

        assert servers == [Endpoint("1.1.1.1", 1)]
        assert len(master.socket.sent) == 1

    def test_unexpected_reply_raises(self, master):
        master.socket.replies.append(ChallengePacket(PacketHeader.S2C_CHALLENGE, 1))

        with pytest.raises(PacketFormatError):
            master.get_servers()

    def test_unknown_region_raises(self, master):
        with pytest.raises(ConfigValidationError):
            master.get_servers(0x42)

    def test_batch_limit(self):
        server = MasterServer("127.0.0.1:27011", config=ClientConfig(master_max_batches=2))
        server.socket.close()
        server.socket = ScriptedSocket([batch("1.1.1.1:1"), batch("2.2.2.2:2"), batch("0.0.0.0:0")])

        with pytest.raises(PaginationLimitError) as exc_info:
            server.get_servers()

        assert exc_info.value.max_batches == 2
        assert exc_info.value.servers == [Endpoint("1.1.1.1", 1), Endpoint("2.2.2.2", 2)]
        assert len(server.socket.sent) == 2


class TestRetries:
    """Test timeouts, forced results and failover between addresses"""

    def test_retries_then_raises(self, master):
        master.socket.replies.extend(timeouts(3))

        with pytest.raises(RequestTimeoutError):
            master.get_servers()

        assert len(master.socket.sent) == 3
        assert {request.start_ip for request in master.socket.sent} == {"0.0.0.0:0"}

    def test_retry_succeeds(self, master):
        master.socket.replies.extend(timeouts(2) + [batch("1.1.1.1:1", "0.0.0.0:0")])

        assert master.get_servers() == [Endpoint("1.1.1.1", 1)]
        assert len(master.socket.sent) == 3

    def test_failures_reset_after_a_batch(self, master):
        master.socket.replies.extend(
            timeouts(2) + [batch("1.1.1.1:1")] + timeouts(2) + [batch("0.0.0.0:0")]
        )

        assert master.get_servers() == [Endpoint("1.1.1.1", 1)]
        assert len(master.socket.sent) == 6

    def test_force_returns_empty_list(self, master):
        master.socket.replies.extend(timeouts(3))

        assert master.get_servers(force=True) == []
        assert len(master.socket.sent) == 3

    def test_force_returns_partial_result(self, master):
        master.socket.replies.extend([batch("1.1.1.1:1", "2.2.2.2:2")] + timeouts(3))

        assert master.get_servers(force=True) == [Endpoint("1.1.1.1", 1), Endpoint("2.2.2.2", 2)]

    def test_failover_continues_from_cursor(self, master):
        first, second = with_failover(
            master,
            [batch("1.1.1.1:1")] + timeouts(3),
            [batch("2.2.2.2:2", "0.0.0.0:0")],
        )

        servers = master.get_servers()

        assert servers == [Endpoint("1.1.1.1", 1), Endpoint("2.2.2.2", 2)]
        assert first.closed
        assert second.sent[0].start_ip == "1.1.1.1:1"
        assert master.ip_address == "10.0.0.2"

    def test_failover_wraps_around_and_raises(self, master):
        first, second, _ = with_failover(master, timeouts(3), timeouts(3), [])

        with pytest.raises(RequestTimeoutError):
            master.get_servers()

        assert len(first.sent) == 3
        assert len(second.sent) == 3
        assert master.ip_index == 0
