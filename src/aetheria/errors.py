"""Exception types shared across aetheria."""


class AetheriaError(Exception):
    """Base class for aetheria errors."""


class DispatchError(AetheriaError):
    """A chat request could not be dispatched to any backend.

    Carries the HTTP status the streaming endpoint should answer with:
    400 when the request itself is unusable, 500 for upstream failures.
    """

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class StreamError(AetheriaError):
    """The event stream reported an error in-band."""


class TurnInProgressError(AetheriaError):
    """A send was attempted while the session already has a turn in flight."""

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} already has a response in flight")
        self.session_id = session_id


class SessionNotFoundError(AetheriaError, KeyError):
    """No session with the given id exists."""

    def __init__(self, session_id: str):
        super().__init__(f"Unknown session: {session_id}")
        self.session_id = session_id

    def __str__(self) -> str:
        return str(self.args[0])


class PresetNotFoundError(AetheriaError, KeyError):
    """A persona, framework, or linguistic control id is not in the library."""

    def __init__(self, kind: str, preset_id: str):
        super().__init__(f"Unknown {kind}: {preset_id}")
        self.kind = kind
        self.preset_id = preset_id

    def __str__(self) -> str:
        return str(self.args[0])
