"""
Caseta bridge telnet client - logs in to a Lutron Caseta Smart Bridge Pro
and decodes the Pico remote events it reports.
"""

from .connection import CasetaConnection, SessionStateMachine
from .framing import LineFramer
from .messages import (
    ButtonEvent,
    LoggedIn,
    LoginPrompt,
    Message,
    PasswordPrompt,
    UnrecognizedMessage,
    decode_frame,
    decode_message,
)
from .transport import ByteStream, DefaultTransportProvider, TcpStream, TransportProvider
from .types import (
    ButtonAction,
    ButtonId,
    CasetaError,
    ConfigurationError,
    ConnectTimeoutError,
    DecodeError,
    FramingError,
    ProtocolViolationError,
    ReadTimeoutError,
    RemoteId,
    SessionClosedError,
    SessionState,
    TransportError,
    UninitializedError,
)

__all__ = [
    "CasetaConnection",
    "SessionStateMachine",
    "LineFramer",
    "ButtonEvent",
    "LoggedIn",
    "LoginPrompt",
    "Message",
    "PasswordPrompt",
    "UnrecognizedMessage",
    "decode_frame",
    "decode_message",
    "ByteStream",
    "DefaultTransportProvider",
    "TcpStream",
    "TransportProvider",
    "ButtonAction",
    "ButtonId",
    "CasetaError",
    "ConfigurationError",
    "ConnectTimeoutError",
    "DecodeError",
    "FramingError",
    "ProtocolViolationError",
    "ReadTimeoutError",
    "RemoteId",
    "SessionClosedError",
    "SessionState",
    "TransportError",
    "UninitializedError",
]
