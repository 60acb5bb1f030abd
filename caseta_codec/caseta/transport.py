import asyncio
from abc import ABC, abstractmethod

import logfire

from caseta_codec.caseta.types import (
    CONNECT_TIMEOUT,
    DEFAULT_PORT,
    ConnectTimeoutError,
    TransportError,
)
from caseta_codec.utils.logging import get_logger

logger = get_logger(__name__)


class ByteStream(ABC):
    """A duplex byte stream owned by a single session."""

    @abstractmethod
    async def read(self, max_bytes: int) -> bytes:
        """
        Read up to max_bytes from the stream.

        Returns:
            The bytes read; b"" once the peer has closed the stream

        Raises:
            TransportError: If the read fails
        """

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Queue bytes for sending."""

    @abstractmethod
    async def drain(self) -> None:
        """
        Flush queued bytes to the peer.

        Raises:
            TransportError: If the write fails
        """

    @abstractmethod
    async def close(self) -> None:
        """Close the stream. Safe to call more than once."""


class TransportProvider(ABC):
    """Produces a new duplex byte stream to the bridge, or fails."""

    @abstractmethod
    async def open_connection(self) -> ByteStream:
        """
        Open a single connection. No retries.

        Raises:
            TransportError: If the connection can't be established
        """


class TcpStream(ByteStream):
    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self._reader = reader
        self._writer = writer
        self._closed = False

    async def read(self, max_bytes: int) -> bytes:
        try:
            return await self._reader.read(max_bytes)
        except OSError as e:
            raise TransportError(f"Error reading from bridge: {e}") from e

    def write(self, data: bytes) -> None:
        try:
            self._writer.write(data)
        except OSError as e:
            raise TransportError(f"Error writing to bridge: {e}") from e

    async def drain(self) -> None:
        try:
            await self._writer.drain()
        except OSError as e:
            raise TransportError(f"Couldn't flush the socket write buffer: {e}") from e

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError as e:
            logger.warning(f"Error closing connection: {e} {type(e)}")


class DefaultTransportProvider(TransportProvider):
    def __init__(self, host: str, port: int = DEFAULT_PORT, connect_timeout: float = CONNECT_TIMEOUT):
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout

    @logfire.instrument("Open Bridge Connection")
    async def open_connection(self) -> ByteStream:
        logger.info(f"Connecting to {self.host}:{self.port}")
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.connect_timeout,
            )
        except asyncio.TimeoutError:
            raise ConnectTimeoutError(
                f"Timed out after {self.connect_timeout}s connecting to {self.host}:{self.port}"
            ) from None
        except OSError as e:
            raise TransportError(f"Connection to {self.host}:{self.port} failed: {e}") from e

        logger.debug(f"Connected to {self.host}:{self.port}")
        return TcpStream(reader, writer)

    def __repr__(self):
        return f"DefaultTransportProvider({self.host!r}, {self.port})"
