"""
Incremental frame reader for newline-delimited event streams.
"""

from __future__ import annotations

import codecs


class FrameReader:
    """
    Turns arbitrarily split byte chunks into complete, newline-terminated frames.

    Bytes are decoded incrementally, so a multi-byte character split across two
    chunks is held by the decoder until its remaining bytes arrive. Text after
    the last newline stays in ``buffer`` until a later chunk terminates it; it
    is never emitted on its own.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self.buffer = ""
        # Length of a pushed-back frame sitting at the head of the buffer
        self._held: int | None = None

    def feed(self, chunk: bytes) -> None:
        """Decode a raw chunk and append it to the buffer."""
        self.buffer += self._decoder.decode(chunk)

    def next_frame(self) -> str | None:
        """
        Remove and return the next complete frame, or None if there is none.

        One trailing carriage return is trimmed. When a frame was pushed back,
        the newline that followed it is kept and the frame is returned joined
        with the next line.
        """
        start = 0 if self._held is None else self._held + 1
        newline_index = self.buffer.find("\n", start)
        if newline_index == -1:
            return None

        frame = self.buffer[:newline_index]
        self.buffer = self.buffer[newline_index + 1:]
        self._held = None

        if frame.endswith("\r"):
            frame = frame[:-1]
        return frame

    def push_back(self, frame: str) -> None:
        """Return a frame to the front of the buffer so it is re-read with the next line."""
        self.buffer = frame + "\n" + self.buffer
        self._held = len(frame)
