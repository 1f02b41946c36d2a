"""
Game server handle - info, players, rules, challenge and ping queries
"""

import logging
import re
import time
from typing import Dict, List, Optional

from .server import Server
from ..config.client_config import ClientConfig
from ..exceptions import SteamCondenserError
from ..models.player import SteamPlayer
from ..packets.incoming import (
    ChallengePacket, PlayersPacket, RulesPacket, ServerInfoPacket,
)
from ..packets.outgoing import A2SInfoPacket, A2SPlayerPacket, A2SRulesPacket

logger = logging.getLogger(__name__)

# Request kinds of handle_response_for_request()
REQUEST_CHALLENGE = 0
REQUEST_INFO = 1
REQUEST_PLAYER = 2
REQUEST_RULES = 3

DEFAULT_PORT = 27015


def player_status_attributes(status_header: str) -> List[str]:
    """Attribute names of the columns of RCON ``status`` output"""
    attributes = []
    for attribute in status_header.split():
        if attribute == "connected":
            attributes.append("time")
        elif attribute == "frag":
            attributes.append("score")
        else:
            attributes.append(attribute)
    return attributes


def split_player_status(attributes: List[str], player_status: str) -> Dict[str, Optional[str]]:
    """Split one player line of RCON ``status`` output into its columns

    The player name is quoted and may contain spaces, so the line is split
    around the first and the last quote.
    """
    if attributes[0] != "userid":
        player_status = re.sub(r"^\d+ +", "", player_status)

    first_quote = player_status.index('"')
    last_quote = player_status.rindex('"')
    data: List[Optional[str]] = []
    data.extend(player_status[:first_quote].split())
    data.append(player_status[first_quote + 1:last_quote])
    data.extend(player_status[last_quote + 1:].split())

    if len(attributes) > len(data) and "state" in attributes:
        # Bots have no connected, ping and loss columns
        data[3:3] = [None, None, None]
    elif len(attributes) < len(data):
        del data[1]

    return dict(zip(attributes, data))


class GameServer(Server):
    """Base class of Source and GoldSrc game servers

    Query results are cached; the properties fetch them on first access and
    the update_* methods refresh them.
    """

    def __init__(self, address: str, port: int = DEFAULT_PORT,
                 config: Optional[ClientConfig] = None):
        self.socket = None
        self.challenge_number: Optional[int] = None
        self.info_challenge: Optional[int] = None
        self.ping_ms: Optional[int] = None
        self.info: Optional[Dict] = None
        self.player_map: Optional[Dict[str, SteamPlayer]] = None
        self.rules_map: Optional[Dict[str, str]] = None

        super().__init__(address, port, config)

    # =========================================================================
    # Transport
    # =========================================================================

    def send_request(self, packet):
        self.socket.send(packet)

    def get_reply(self):
        return self.socket.get_reply()

    def disconnect(self):
        if self.socket is not None:
            self.socket.close()

    # =========================================================================
    # RCON (implemented by the engine specific subclasses)
    # =========================================================================

    @property
    def rcon_authenticated(self) -> bool:
        return False

    def rcon_auth(self, password: str) -> bool:
        raise NotImplementedError("Game servers must implement rcon_auth()")

    def rcon_exec(self, command: str) -> str:
        raise NotImplementedError("Game servers must implement rcon_exec()")

    # =========================================================================
    # Queries
    # =========================================================================

    def handle_response_for_request(self, request_type: int, repeat_on_failure: bool = True):
        """Send the request of the given kind and store whatever comes back

        Any reply the server sends is stored. If it was not the reply that
        was asked for, the request is repeated once.
        """
        if request_type == REQUEST_CHALLENGE:
            expected = ChallengePacket
            self.send_request(A2SPlayerPacket())
        elif request_type == REQUEST_INFO:
            expected = ServerInfoPacket
            self.send_request(A2SInfoPacket(self.info_challenge))
        elif request_type == REQUEST_PLAYER:
            expected = PlayersPacket
            self.send_request(A2SPlayerPacket(self._challenge()))
        elif request_type == REQUEST_RULES:
            expected = RulesPacket
            self.send_request(A2SRulesPacket(self._challenge()))
        else:
            raise SteamCondenserError("Called with an undefined request type.")

        response = self.get_reply()

        if isinstance(response, ServerInfoPacket):
            self.info = response.info
        elif isinstance(response, PlayersPacket):
            self.player_map = response.players
        elif isinstance(response, RulesPacket):
            self.rules_map = response.rules
        elif isinstance(response, ChallengePacket):
            self.challenge_number = response.challenge
            if request_type == REQUEST_INFO:
                # Newer servers only answer A2S_INFO with a challenge
                self.info_challenge = response.challenge
        else:
            raise SteamCondenserError(
                f"Response of type {type(response).__name__} cannot be handled by this method."
            )

        if not isinstance(response, expected):
            logger.info(f"Expected a reply of type {expected.__name__}, but received {type(response).__name__}.")
            if repeat_on_failure:
                self.handle_response_for_request(request_type, False)

    def _challenge(self) -> int:
        return -1 if self.challenge_number is None else self.challenge_number

    def update_challenge_number(self):
        self.handle_response_for_request(REQUEST_CHALLENGE)

    def update_server_info(self):
        self.handle_response_for_request(REQUEST_INFO)

    def update_rules(self):
        self.handle_response_for_request(REQUEST_RULES)

    def update_ping(self) -> int:
        """Measure the round trip time of an A2S_INFO request in milliseconds"""
        self.send_request(A2SInfoPacket(self.info_challenge))
        start_time = time.monotonic()
        self.get_reply()
        self.ping_ms = int((time.monotonic() - start_time) * 1000)
        return self.ping_ms

    def update_players(self, rcon_password: Optional[str] = None):
        """Fetch the player list, enriched with RCON ``status`` data if possible"""
        self.handle_response_for_request(REQUEST_PLAYER)

        if not self.rcon_authenticated:
            if rcon_password is None:
                return
            self.rcon_auth(rcon_password)

        players = []
        for line in self.rcon_exec("status").split("\n"):
            if line.startswith("#") and line != "#end":
                players.append(line[1:].strip())

        if not players:
            return

        attributes = player_status_attributes(players.pop(0))
        for player in players:
            player_data = split_player_status(attributes, player)
            name = player_data.get('name')
            if self.player_map and name in self.player_map:
                self.player_map[name].add_info(player_data)
            else:
                logger.debug(f"RCON status lists unknown player {name!r}")

    def initialize(self):
        """Fetch ping, server info and a challenge number"""
        self.update_ping()
        self.update_server_info()
        self.update_challenge_number()

    # =========================================================================
    # Cached results
    # =========================================================================

    @property
    def ping(self) -> int:
        if self.ping_ms is None:
            self.update_ping()
        return self.ping_ms

    @property
    def server_info(self) -> Dict:
        if self.info is None:
            self.update_server_info()
        return self.info

    @property
    def rules(self) -> Dict[str, str]:
        if self.rules_map is None:
            self.update_rules()
        return self.rules_map

    def players(self, rcon_password: Optional[str] = None) -> Dict[str, SteamPlayer]:
        if self.player_map is None:
            self.update_players(rcon_password)
        return self.player_map

    def __str__(self) -> str:
        lines = [f"{self.host} ({self.ip_address}:{self.port})"]
        if self.ping_ms is not None:
            lines.append(f"  Ping: {self.ping_ms}")
        if self.challenge_number is not None:
            lines.append(f"  Challenge number: {self.challenge_number}")
        if self.info:
            lines.append("  Info:")
            lines.extend(f"    {key}: {value!r}" for key, value in self.info.items())
        if self.player_map:
            lines.append("  Players:")
            lines.extend(f"    {player!r}" for player in self.player_map.values())
        if self.rules_map:
            lines.append("  Rules:")
            lines.extend(f"    {key}: {value}" for key, value in self.rules_map.items())
        return "\n".join(lines)
