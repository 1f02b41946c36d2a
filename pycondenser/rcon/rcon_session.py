"""
Source RCON session - authentication and command execution over TCP

The session walks through UNAUTHENTICATED -> AUTHENTICATING -> AUTHENTICATED.
A connection closed by the server before it answered the authentication
request means this client is banned; BANNED is terminal for the session.
"""

import logging
import random
from enum import Enum
from typing import List, Optional

from ..connection.socket_manager import RCONSocket
from ..exceptions import (
    ConnectionClosedError, PacketFormatError, RCONBanError, RCONNoAuthError,
    RequestTimeoutError, SteamCondenserError,
)
from ..packets.incoming import RCONAuthResponse
from ..packets.outgoing import RCONAuthRequest, RCONExecRequest, RCONTerminator

logger = logging.getLogger(__name__)


class RCONState(Enum):
    """RCON session states"""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    BANNED = "banned"


class RCONSession:
    """Authentication state and command execution for one RCON socket"""

    def __init__(self, rcon_socket: RCONSocket):
        self.socket = rcon_socket
        self.request_id: Optional[int] = None
        self.state = RCONState.UNAUTHENTICATED

    @property
    def authenticated(self) -> bool:
        return self.state == RCONState.AUTHENTICATED

    def _set_state(self, state: RCONState):
        if state != self.state:
            logger.debug(f"RCON {self.socket.ip}:{self.socket.port} {self.state.value} -> {state.value}")
        self.state = state

    @staticmethod
    def generate_request_id() -> int:
        return random.randint(1, 0x7FFFFFFF)

    def authenticate(self, password: str) -> bool:
        """Authenticate with the RCON password

        Returns False when the password was wrong. Raises RCONBanError when
        the server closed the connection instead of answering.
        """
        if self.state == RCONState.BANNED:
            raise RCONBanError()

        self.request_id = self.generate_request_id()
        self._set_state(RCONState.AUTHENTICATING)

        try:
            self.socket.send(RCONAuthRequest(self.request_id, password))

            # The first reply is an empty response value, the second one is
            # the actual auth response
            if self.socket.get_reply() is None:
                self._set_state(RCONState.BANNED)
                logger.warning(f"Banned from RCON of {self.socket.ip}:{self.socket.port}")
                raise RCONBanError()

            reply = self.socket.get_reply()
            if reply is None:
                raise ConnectionClosedError("Connection closed during RCON authentication")
        except (RequestTimeoutError, PacketFormatError):
            # A late reply must not be read as the answer to the next request
            self._drop_connection()
            raise
        except SteamCondenserError:
            if self.state == RCONState.AUTHENTICATING:
                self._set_state(RCONState.UNAUTHENTICATED)
            raise

        if reply.request_id == self.request_id:
            self._set_state(RCONState.AUTHENTICATED)
            logger.info(f"Authenticated with RCON of {self.socket.ip}:{self.socket.port}")
            return True

        self._set_state(RCONState.UNAUTHENTICATED)
        logger.info(f"RCON password rejected by {self.socket.ip}:{self.socket.port}")
        return False

    def execute(self, command: str) -> str:
        """Run a command and return its complete, stripped output"""
        if not self.authenticated:
            raise RCONNoAuthError()

        self.socket.send(RCONExecRequest(self.request_id, command))

        is_multi = False
        fragments: List[str] = []
        try:
            while True:
                reply = self.socket.get_reply()
                if reply is None or isinstance(reply, RCONAuthResponse):
                    self._set_state(RCONState.UNAUTHENTICATED)
                    raise RCONNoAuthError()

                if not is_multi and reply.response:
                    # Only the terminator echo tells where a long reply ends
                    is_multi = True
                    self.socket.send(RCONTerminator(self.request_id))

                fragments.append(reply.response)

                if not is_multi:
                    break
                if len(fragments) > 2 and fragments[-1] == "" and fragments[-2] == "":
                    break
        except (RequestTimeoutError, PacketFormatError):
            # Unread fragments would be taken for the output of the next command
            self._drop_connection()
            raise

        logger.debug(f"RCON command {command.split(' ', 1)[0]!r} returned {len(fragments)} fragments")
        return "".join(fragments).strip()

    def reset(self):
        """Forget the authentication, e.g. after the socket was replaced"""
        if self.state != RCONState.BANNED:
            self._set_state(RCONState.UNAUTHENTICATED)
        self.request_id = None

    def _drop_connection(self):
        self.socket.close()
        self.reset()
