from enum import Enum, IntEnum, auto
from typing import Any, Optional

LINE_END = "\r\n"

# Prompts sent by the bridge firmware, matched byte-for-byte
LOGIN_PROMPT = "login: "
PASSWORD_PROMPT = "password: "
COMMAND_PROMPT = "GNET> "

PROMPT_MARKERS = (LOGIN_PROMPT, PASSWORD_PROMPT, COMMAND_PROMPT)

COMMAND_RESPONSE_PREFIX = "~"
DEVICE_EVENT_PREFIX = COMMAND_RESPONSE_PREFIX + "DEVICE"

DEFAULT_PORT = 23
CONNECT_TIMEOUT = 10.0
LOGIN_TIMEOUT = 10.0

READ_CHUNK_SIZE = 1024
MAX_FRAME_SIZE = 4096

# Integration ids are 8-bit unsigned values assigned by the bridge
RemoteId = int
REMOTE_ID_MIN = 0
REMOTE_ID_MAX = 255


class ButtonId(IntEnum):
    """Pico remote component numbers as reported on the wire."""
    POWER_ON = 2
    FAVORITE = 3
    POWER_OFF = 4
    UP = 5
    DOWN = 6

    def __str__(self):
        return self.name


class ButtonAction(IntEnum):
    PRESS = 3
    RELEASE = 4

    def __str__(self):
        return self.name


class SessionState(Enum):
    UNOPENED = auto()
    AWAITING_LOGIN_PROMPT = auto()
    AWAITING_PASSWORD_PROMPT = auto()
    AWAITING_LOGIN_CONFIRMATION = auto()
    READY = auto()
    FAILED = auto()
    CLOSED = auto()


class SessionEvent(Enum):
    CONNECTED = auto()
    LOGIN_PROMPT_RECEIVED = auto()
    PASSWORD_PROMPT_RECEIVED = auto()
    LOGGED_IN = auto()
    FAILED = auto()
    CLOSED = auto()


# Error types
class CasetaError(Exception):
    """Base class for Caseta-related errors."""
    pass


class TransportError(CasetaError):
    """Error raised when the TCP connection fails to open, read or write."""
    pass


class ConnectTimeoutError(TransportError):
    """Error raised when the bridge doesn't accept the connection in time."""
    pass


class ReadTimeoutError(TransportError):
    """Error raised when the bridge stays silent longer than the read timeout."""
    pass


class FramingError(CasetaError):
    """Error raised when the byte stream can't be split into frames."""
    pass


class DecodeError(CasetaError):
    """Error raised when a frame doesn't decode into a known message."""

    def __init__(self, message: str, raw: Any = None):
        self.raw = raw
        if raw is not None:
            message = f"{message}: {raw!r}"
        super().__init__(message)


class ProtocolViolationError(CasetaError):
    """Error raised when a valid message arrives in the wrong session state."""

    def __init__(self, expected: str, received: Optional[Any] = None):
        self.expected = expected
        self.received = received
        if received is None:
            message = f"Expected {expected} but the bridge closed the connection"
        else:
            message = f"Expected {expected} but received {received!r}"
        super().__init__(message)


class UninitializedError(CasetaError):
    """Error raised when the session is used before initialize()."""
    pass


class SessionClosedError(CasetaError):
    """Error raised when a failed, closed or already used session is reused."""
    pass


class ConfigurationError(CasetaError):
    """Error raised when required bridge settings are missing or invalid."""
    pass
