from enum import Enum, auto
from typing import Dict, List


class ConnectionState(Enum):
    DISCONNECTED  = auto()
    CONNECTING    = auto()
    CONNECTED     = auto()
    DISCONNECTING = auto()


class StateMachine:
    def __init__(self, initial: ConnectionState = ConnectionState.DISCONNECTED):
        self._state = initial
        self._trans: Dict[ConnectionState, List[ConnectionState]] = {
            ConnectionState.DISCONNECTED:  [ConnectionState.CONNECTING],
            ConnectionState.CONNECTING:    [ConnectionState.CONNECTED,
                                            ConnectionState.DISCONNECTED],
            ConnectionState.CONNECTED:     [ConnectionState.DISCONNECTING],
            ConnectionState.DISCONNECTING: [ConnectionState.DISCONNECTED],
        }

    @property
    def state(self) -> ConnectionState: return self._state

    def can(self, nxt: ConnectionState) -> bool: return nxt in self._trans[self._state]

    def transition(self, nxt: ConnectionState) -> bool:
        if self.can(nxt):
            self._state = nxt
            return True
        return False
