"""
Player model for players reported by a game server
"""

import logging
from typing import Dict, Optional

from ..exceptions import SteamCondenserError

logger = logging.getLogger(__name__)


class SteamPlayer:
    """A player as reported by an A2S_PLAYER reply

    Players can be enriched with the details of the RCON ``status`` command
    (Steam ID, ping, address and so on) through add_info().
    """

    def __init__(self, player_id: int, name: str, score: int, connect_time: float):
        # Query data
        self.id = player_id
        self.name = name
        self.score = score
        self.connect_time = connect_time

        # Status data (None until add_info() was called)
        self.extended = False
        self.real_id: Optional[int] = None
        self.steam_id: Optional[str] = None
        self.state: Optional[str] = None
        self.loss: Optional[int] = None
        self.ping: Optional[int] = None
        self.ip_address: Optional[str] = None
        self.client_port: Optional[int] = None
        self.rate: Optional[int] = None

    @property
    def is_bot(self) -> bool:
        return self.steam_id == "BOT"

    @property
    def is_extended(self) -> bool:
        """Whether this player has been enriched with RCON status data"""
        return self.extended

    def add_info(self, player_data: Dict[str, Optional[str]]):
        """Add the details of one line of RCON ``status`` output

        Raises SteamCondenserError if the data belongs to another player.
        """
        if player_data.get('name') != self.name:
            raise SteamCondenserError("Information to add belongs to a different player.")

        self.extended = True
        self.real_id = int(player_data['userid'])
        if player_data.get('state') is not None:
            self.state = player_data['state']
        self.steam_id = player_data.get('uniqueid')

        if not self.is_bot:
            if player_data.get('loss') is not None:
                self.loss = int(player_data['loss'])
            if player_data.get('ping') is not None:
                self.ping = int(player_data['ping'])

            address = player_data.get('adr')
            if address:
                ip_address, _, client_port = address.partition(':')
                self.ip_address = ip_address
                self.client_port = int(client_port) if client_port else None

            if player_data.get('rate') is not None:
                self.rate = int(player_data['rate'])

        logger.debug(f"Extended player info for {self.name!r} (userid {self.real_id})")

    def to_dict(self) -> Dict:
        data = {
            'id': self.id,
            'name': self.name,
            'score': self.score,
            'connect_time': self.connect_time,
        }
        if self.extended:
            data.update({
                'real_id': self.real_id,
                'steam_id': self.steam_id,
                'state': self.state,
                'loss': self.loss,
                'ping': self.ping,
                'ip_address': self.ip_address,
                'client_port': self.client_port,
                'rate': self.rate,
            })
        return data

    def __repr__(self) -> str:
        text = f"#{self.id} {self.name!r}, Score: {self.score}, Time: {self.connect_time:.0f}s"
        if self.extended:
            text += f", SteamID: {self.steam_id}"
            if not self.is_bot:
                text += f", Ping: {self.ping}, Loss: {self.loss}"
        return f"<SteamPlayer {text}>"
