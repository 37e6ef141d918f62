"""Per-session turn state machine."""

from enum import Enum

from aetheria.errors import TurnInProgressError


class TurnState(Enum):
    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    DONE = "done"


_BUSY = {TurnState.SENDING, TurnState.STREAMING}


class TurnTracker:
    """Tracks IDLE -> SENDING -> STREAMING -> DONE for each session.

    At most one turn per session may be in SENDING or STREAMING. Sessions
    are independent of each other.
    """

    def __init__(self) -> None:
        self._states: dict[str, TurnState] = {}

    def state(self, session_id: str) -> TurnState:
        return self._states.get(session_id, TurnState.IDLE)

    def is_busy(self, session_id: str) -> bool:
        return self.state(session_id) in _BUSY

    def begin(self, session_id: str) -> None:
        """Enter SENDING.

        Raises:
            TurnInProgressError: If the session already has a turn in flight
        """
        if self.is_busy(session_id):
            raise TurnInProgressError(session_id)
        self._states[session_id] = TurnState.SENDING

    def streaming(self, session_id: str) -> None:
        if self.state(session_id) is not TurnState.SENDING:
            raise RuntimeError(
                f"Session {session_id} cannot stream from state {self.state(session_id).value}"
            )
        self._states[session_id] = TurnState.STREAMING

    def finish(self, session_id: str) -> None:
        self._states[session_id] = TurnState.DONE
