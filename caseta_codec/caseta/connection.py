import asyncio
from typing import AsyncIterator, Optional, Type

import logfire

from caseta_codec.caseta.framing import LineFramer
from caseta_codec.caseta.messages import (
    LoggedIn,
    LoginPrompt,
    Message,
    PasswordPrompt,
    UnrecognizedMessage,
    decode_frame,
)
from caseta_codec.caseta.transport import ByteStream, TransportProvider
from caseta_codec.caseta.types import (
    LINE_END,
    LOGIN_TIMEOUT,
    READ_CHUNK_SIZE,
    CasetaError,
    DecodeError,
    ProtocolViolationError,
    ReadTimeoutError,
    SessionClosedError,
    SessionEvent,
    SessionState,
    UninitializedError,
)
from caseta_codec.utils.logging import get_logger, mask_secret
from caseta_codec.utils.state import StateMachine

logger = get_logger(__name__)


class SessionStateMachine(StateMachine[SessionState, SessionEvent]):
    STRICT = True
    TRANSITIONS = {
        SessionState.UNOPENED: {
            SessionEvent.CONNECTED: SessionState.AWAITING_LOGIN_PROMPT,
            SessionEvent.FAILED: SessionState.FAILED,
            SessionEvent.CLOSED: SessionState.CLOSED,
        },
        SessionState.AWAITING_LOGIN_PROMPT: {
            SessionEvent.LOGIN_PROMPT_RECEIVED: SessionState.AWAITING_PASSWORD_PROMPT,
            SessionEvent.FAILED: SessionState.FAILED,
            SessionEvent.CLOSED: SessionState.CLOSED,
        },
        SessionState.AWAITING_PASSWORD_PROMPT: {
            SessionEvent.PASSWORD_PROMPT_RECEIVED: SessionState.AWAITING_LOGIN_CONFIRMATION,
            SessionEvent.FAILED: SessionState.FAILED,
            SessionEvent.CLOSED: SessionState.CLOSED,
        },
        SessionState.AWAITING_LOGIN_CONFIRMATION: {
            SessionEvent.LOGGED_IN: SessionState.READY,
            SessionEvent.FAILED: SessionState.FAILED,
            SessionEvent.CLOSED: SessionState.CLOSED,
        },
        SessionState.READY: {
            SessionEvent.FAILED: SessionState.FAILED,
            SessionEvent.CLOSED: SessionState.CLOSED,
        },
        SessionState.FAILED: {
            SessionEvent.CLOSED: SessionState.FAILED,
        },
        SessionState.CLOSED: {
            SessionEvent.CLOSED: SessionState.CLOSED,
        },
    }

    # Message expected in each handshake state, and the event it produces
    HANDSHAKE_STEPS: dict[SessionState, tuple[Type[Message], SessionEvent]] = {
        SessionState.AWAITING_LOGIN_PROMPT: (LoginPrompt, SessionEvent.LOGIN_PROMPT_RECEIVED),
        SessionState.AWAITING_PASSWORD_PROMPT: (PasswordPrompt, SessionEvent.PASSWORD_PROMPT_RECEIVED),
        SessionState.AWAITING_LOGIN_CONFIRMATION: (LoggedIn, SessionEvent.LOGGED_IN),
    }

    @property
    def is_handshaking(self) -> bool:
        return self.state in self.HANDSHAKE_STEPS


class CasetaConnection:
    """
    A single telnet session with a Caseta bridge.

    The session is initialized once and then read from until the bridge
    closes the connection or an error occurs. Every error is terminal: the
    stream is closed and further use raises SessionClosedError. Build a new
    connection to try again.

    Example:
        provider = DefaultTransportProvider("192.168.1.20")
        async with CasetaConnection("lutron", "integration", provider) as conn:
            await conn.initialize()
            async for message in conn.messages():
                ...
    """

    def __init__(
        self,
        username: str,
        password: str,
        transport_provider: TransportProvider,
        login_timeout: Optional[float] = LOGIN_TIMEOUT,
        idle_timeout: Optional[float] = None,
        strict: bool = True,
    ):
        """
        Args:
            username: Telnet integration username
            password: Telnet integration password
            transport_provider: Opens the byte stream to the bridge
            login_timeout: Seconds to wait for each handshake message
            idle_timeout: Seconds to wait for each message once logged in,
                or None to wait indefinitely
            strict: If False, lines that don't decode are returned as
                UnrecognizedMessage instead of raising DecodeError once the
                session is ready
        """
        self._username = username
        self._password = password
        self._transport_provider = transport_provider
        self.login_timeout = login_timeout
        self.idle_timeout = idle_timeout
        self.strict = strict

        self._stream: Optional[ByteStream] = None
        self._framer = LineFramer()
        self._session = SessionStateMachine()

    @property
    def username(self) -> str:
        return self._username

    @property
    def password(self) -> str:
        return self._password

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def ready(self) -> bool:
        return self._session.state == SessionState.READY

    @property
    def stream(self) -> ByteStream:
        if self._stream is None:
            raise UninitializedError("No stream available. Call initialize() first.")
        return self._stream

    @logfire.instrument("Initialize")
    async def initialize(self) -> None:
        """
        Open the transport and log in.

        Raises:
            TransportError: If the connection fails or times out
            ProtocolViolationError: If the bridge deviates from the login exchange
            FramingError, DecodeError: If the bridge sends something unreadable
            SessionClosedError: If this session was already initialized
        """
        if self._session.state != SessionState.UNOPENED:
            raise SessionClosedError(
                f"Session already used (state {self._session.state.name}); create a new connection"
            )

        try:
            self._stream = await self._transport_provider.open_connection()
            self._session.on_event(SessionEvent.CONNECTED)
            await self._log_in()
        except CasetaError as e:
            logger.error(f"Login failed: {e}")
            await self._fail()
            raise

        logger.info("Logged in to Caseta bridge")

    @logfire.instrument("Login")
    async def _log_in(self) -> None:
        with logfire.span("Find Login Prompt"):
            await self._expect_handshake_message()
            logger.debug("Sending username")
            await self._write_line(self._username)

        with logfire.span("Find Password Prompt"):
            await self._expect_handshake_message()
            logger.debug(f"Sending password {mask_secret(self._password)}")
            await self._write_line(self._password)

        with logfire.span("Find Command Prompt"):
            await self._expect_handshake_message()

    async def _expect_handshake_message(self) -> Message:
        expected, event = SessionStateMachine.HANDSHAKE_STEPS[self._session.state]
        message = await self._read_message(self.login_timeout)
        if not isinstance(message, expected):
            raise ProtocolViolationError(expected.__name__, message)

        logger.debug(f"Received {message}")
        self._session.on_event(event)
        return message

    async def await_message(self) -> Optional[Message]:
        """
        Wait for the next message from the bridge.

        Returns:
            The next message, or None once the bridge has closed the connection

        Raises:
            UninitializedError: If initialize() hasn't been called
            SessionClosedError: If the session has failed or been closed
            TransportError: If the read fails or exceeds the idle timeout
            FramingError: If the bridge closed the connection mid-frame
            DecodeError: If a line isn't understood and the session is strict
        """
        state = self._session.state
        if state == SessionState.UNOPENED:
            raise UninitializedError("Connection not established. Call initialize() first.")
        if state in (SessionState.FAILED, SessionState.CLOSED):
            raise SessionClosedError(f"Session is {state.name.lower()}")
        if self._session.is_handshaking:
            raise UninitializedError(f"Login hasn't completed (state {state.name})")

        while True:
            try:
                message = await self._read_message(self.idle_timeout)
            except DecodeError as e:
                if self.strict:
                    logger.error(f"Error reading from bridge: {e}")
                    await self._fail()
                    raise
                logger.warning(f"Skipping unrecognized message: {e}")
                return UnrecognizedMessage(_raw_text(e.raw))
            except CasetaError as e:
                logger.error(f"Error reading from bridge: {e}")
                await self._fail()
                raise

            if message is None:
                logger.info("Bridge closed the connection")
                await self.close()
                return None

            if isinstance(message, LoggedIn):
                logger.trace("Ignoring command prompt")
                continue

            logger.debug(f"Received {message}")
            return message

    async def messages(self) -> AsyncIterator[Message]:
        """Yield messages until the bridge closes the connection."""
        while True:
            message = await self.await_message()
            if message is None:
                return
            yield message

    async def _read_message(self, timeout: Optional[float]) -> Optional[Message]:
        """Decode the next frame, reading from the stream as needed."""
        while True:
            frame = self._framer.next_frame()
            if frame is not None:
                return decode_frame(frame)

            try:
                data = await asyncio.wait_for(self.stream.read(READ_CHUNK_SIZE), timeout=timeout)
            except asyncio.TimeoutError:
                raise ReadTimeoutError(
                    f"No data from bridge within {timeout}s (state {self._session.state.name})"
                ) from None

            if not data:
                self._framer.finish()
                return None

            self._framer.feed(data)

    async def _write_line(self, text: str) -> None:
        self.stream.write((text + LINE_END).encode("utf-8"))
        await self.stream.drain()

    async def _fail(self) -> None:
        await self._close_stream()
        self._session.on_event(SessionEvent.FAILED)

    async def _close_stream(self) -> None:
        if self._stream is not None:
            await self._stream.close()

    @logfire.instrument("Close")
    async def close(self) -> None:
        await self._close_stream()
        self._session.on_event(SessionEvent.CLOSED)

    async def __aenter__(self) -> "CasetaConnection":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __repr__(self):
        return f"<CasetaConnection {self._transport_provider!r} state={self._session.state.name}>"


def _raw_text(raw) -> str:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8", errors="replace")
    return str(raw)
