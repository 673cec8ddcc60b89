"""Line framing for chunked event-stream bodies.

HTTP chunk boundaries carry no meaning for the event stream: a single
`data:` line may arrive split across several chunks (even inside a
multi-byte UTF-8 character), and one chunk may hold many lines.
"""

import codecs

LINE_TERMINATOR = "\n"


class FrameSplitter:
    """Reassemble complete protocol lines from arbitrary fragments.

    The trailing segment after the last newline is held back as carry-over
    until a later fragment completes it.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """The incomplete trailing fragment currently held back."""
        return self._buffer

    def feed(self, chunk: bytes | str) -> list[str]:
        """Add a fragment and return every line it completes, in order.

        Args:
            chunk: Raw bytes from the transport or already-decoded text.

        Returns:
            Complete lines without their terminator.
        """
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        if not chunk:
            return []

        self._buffer += chunk
        if LINE_TERMINATOR not in chunk:
            return []

        *lines, self._buffer = self._buffer.split(LINE_TERMINATOR)
        return [line.removesuffix("\r") for line in lines]

    def flush(self) -> list[str]:
        """Return the held-back fragment as a final line at end of stream."""
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        tail = tail.removesuffix("\r")
        return [tail] if tail else []
