from typing import Optional

from caseta_codec.caseta.types import (
    LINE_END,
    MAX_FRAME_SIZE,
    PROMPT_MARKERS,
    FramingError,
)
from caseta_codec.utils.logging import get_logger

logger = get_logger(__name__)

# The bridge pads prompts with stray line ends and the occasional \0
INTER_FRAME_FILL = b"\r\n\x00"


class LineFramer:
    """
    Accumulates bytes received from the bridge and splits them into frames.

    Event lines are terminated by CRLF (a bare LF is tolerated). Prompts
    are not terminated at all, so a frame is also cut whenever the buffer
    starts with one of the known prompt markers. Anything else stays
    buffered until its terminator arrives.
    """

    def __init__(self, max_frame_size: int = MAX_FRAME_SIZE):
        self.max_frame_size = max_frame_size
        self._buffer = bytearray()
        self._prompts = [marker.encode("ascii") for marker in PROMPT_MARKERS]

    def feed(self, data: bytes) -> None:
        logger.trace(f"<< {bytes(data)!r}")
        self._buffer += data

    def next_frame(self) -> Optional[bytes]:
        """
        Pop the next complete frame from the buffer.

        Returns:
            The frame without its terminator, or None if more data is needed

        Raises:
            FramingError: If the pending frame exceeds the maximum frame size
        """
        while True:
            self._discard_fill()
            if not self._buffer:
                return None

            for prompt in self._prompts:
                if self._buffer.startswith(prompt):
                    del self._buffer[:len(prompt)]
                    return prompt

            end = self._buffer.find(b"\n")
            if end < 0:
                if len(self._buffer) > self.max_frame_size:
                    raise FramingError(
                        f"Frame exceeds {self.max_frame_size} bytes without a line terminator"
                    )
                return None

            frame = bytes(self._buffer[:end]).rstrip(b"\r")
            if len(frame) > self.max_frame_size:
                raise FramingError(f"Frame exceeds {self.max_frame_size} bytes")

            del self._buffer[:end + 1]
            if frame:
                return frame

    def finish(self) -> None:
        """
        Signal that the peer closed the stream.

        Raises:
            FramingError: If a partial frame is still buffered
        """
        self._discard_fill()
        if self._buffer:
            pending = bytes(self._buffer)
            self._buffer.clear()
            raise FramingError(
                f"Connection closed with an incomplete frame (expected {LINE_END!r}): {pending!r}"
            )

    def _discard_fill(self) -> None:
        count = 0
        while count < len(self._buffer) and self._buffer[count] in INTER_FRAME_FILL:
            count += 1
        if count:
            del self._buffer[:count]

    def __len__(self):
        return len(self._buffer)

    def __bool__(self):
        return bool(self._buffer)

    def __repr__(self):
        return f"LineFramer({bytes(self._buffer)!r})"
