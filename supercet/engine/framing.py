"""Line framing for child process byte streams."""
from __future__ import annotations


class LineFramer:
    """Accumulates raw chunks and yields complete newline-terminated lines.

    Splitting happens on bytes so a multi-byte UTF-8 character cut
    across two reads is reassembled before decoding.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding
        self._buffer = bytearray()

    def feed(self, chunk: bytes) -> list[str]:
        """Add a chunk; return every line it completed, in order."""
        self._buffer.extend(chunk)
        if b"\n" not in chunk:
            return []
        *complete, rest = self._buffer.split(b"\n")
        self._buffer = bytearray(rest)
        return [self._decode(raw) for raw in complete]

    def flush(self) -> str | None:
        """Return the trailing partial line, if any, and reset."""
        if not self._buffer:
            return None
        raw = bytes(self._buffer)
        self._buffer.clear()
        return self._decode(raw)

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def _decode(self, raw: bytes) -> str:
        return raw.decode(self._encoding, errors="replace")
