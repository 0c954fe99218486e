"""
Event stream parser with malformed-frame recovery and delta accumulation.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncGenerator, AsyncIterable, Iterator
from typing import Any

from ...history.models import Transcript, Turn
from .models import AccumulatorState, FrameKind, ParsedEvent
from .reader import FrameReader

logger = logging.getLogger(__name__)

# Constants
DATA_PREFIX = "data: "
SENTINEL = "[DONE]"
DEFAULT_MAX_PENDING_CHARS = 65536


def parse_frame(frame: str) -> ParsedEvent:
    """Classify one frame of the wire protocol."""
    if not frame.strip():
        return ParsedEvent(kind=FrameKind.BLANK, frame=frame)

    if frame.startswith(":"):
        return ParsedEvent(kind=FrameKind.COMMENT, frame=frame)

    if not frame.startswith(DATA_PREFIX):
        return ParsedEvent(kind=FrameKind.IGNORED, frame=frame)

    data_content = frame[len(DATA_PREFIX):].strip()
    if data_content == SENTINEL:
        return ParsedEvent(kind=FrameKind.SENTINEL, frame=frame)

    try:
        payload = json.loads(data_content, strict=False)
    except json.JSONDecodeError as e:
        return ParsedEvent(
            kind=FrameKind.MALFORMED,
            frame=frame,
            error=f"JSON decode error: {e}",
        )
    return ParsedEvent(kind=FrameKind.DATA, frame=frame, payload=payload)


def _starts_wire_element(line: str) -> bool:
    """True if a line is a frame in its own right rather than a payload continuation."""
    return not line.strip() or line.startswith(":") or line.startswith(DATA_PREFIX)


def extract_delta(payload: Any) -> str | None:
    """Pull ``choices[0].delta.content`` out of a payload, if it is there."""
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    choice = choices[0]
    if not isinstance(choice, dict):
        return None
    delta = choice.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    if isinstance(content, str) and content:
        return content
    return None


class StreamDecoder:
    """
    Decodes a byte stream of ``data:`` frames into DATA events.

    A frame whose payload does not parse is pushed back onto the reader and
    extraction stops until the next chunk arrives; the frame is then retried
    joined with the line that follows it. If the joined text still fails and
    that line is itself a new wire element, the held fragment is dropped and
    the line is classified on its own.
    """

    def __init__(
        self,
        encoding: str = "utf-8",
        max_pending_chars: int = DEFAULT_MAX_PENDING_CHARS,
    ):
        self.encoding = encoding
        self.max_pending_chars = max_pending_chars
        self.completed = False
        self._held: str | None = None
        self.stats = self._empty_stats()

    async def events(
        self, chunks: AsyncIterable[bytes]
    ) -> AsyncGenerator[ParsedEvent]:
        """
        Yield DATA events from the stream in arrival order.

        Returns after the sentinel; nothing that follows it is yielded. At the
        end of the stream, frames already complete in the buffer are still
        processed and any unterminated remainder is discarded.
        """
        reader = FrameReader(self.encoding)
        self.completed = False
        self._held = None

        async for chunk in chunks:
            reader.feed(chunk)
            for event in self._drain(reader, final=False):
                if event.kind is FrameKind.SENTINEL:
                    self.completed = True
                    return
                yield event

        for event in self._drain(reader, final=True):
            if event.kind is FrameKind.SENTINEL:
                self.completed = True
                return
            yield event

        if reader.buffer:
            logger.debug(
                "Discarding %d unterminated characters at end of stream",
                len(reader.buffer),
            )

    def _drain(self, reader: FrameReader, *, final: bool) -> Iterator[ParsedEvent]:
        """Yield DATA and SENTINEL events for every complete frame in the reader."""
        while (frame := reader.next_frame()) is not None:
            event = self._classify(frame)

            if event.kind is FrameKind.MALFORMED:
                frame = event.frame
                self.stats['malformed_frames'] += 1
                if len(frame) > self.max_pending_chars:
                    self.stats['dropped_frames'] += 1
                    logger.warning(
                        "Dropping unparseable frame of %d characters", len(frame)
                    )
                    continue
                reader.push_back(frame)
                self._held = frame
                if final:
                    continue
                return

            if event.kind in (FrameKind.DATA, FrameKind.SENTINEL):
                yield event
            else:
                self.stats['skipped_frames'] += 1

    def _classify(self, frame: str) -> ParsedEvent:
        held, self._held = self._held, None
        self.stats['total_frames'] += 1
        event = parse_frame(frame)

        if held is not None and event.kind is FrameKind.MALFORMED:
            continuation = frame[len(held) + 1:]
            if _starts_wire_element(continuation):
                self.stats['dropped_frames'] += 1
                logger.warning("Dropping unparseable frame: %s", held[:200])
                held = None
                event = parse_frame(continuation)

        if event.kind is FrameKind.DATA:
            self.stats['data_events'] += 1
            if held is not None:
                self.stats['recovered_frames'] += 1
        return event

    @staticmethod
    def _empty_stats() -> dict[str, int]:
        return {
            'total_frames': 0,
            'data_events': 0,
            'skipped_frames': 0,
            'malformed_frames': 0,
            'recovered_frames': 0,
            'dropped_frames': 0,
        }

    def get_stats(self) -> dict[str, int]:
        """Get decoding statistics for monitoring."""
        return self.stats.copy()

    def reset_stats(self) -> None:
        """Reset statistics counters."""
        self.stats = self._empty_stats()


class DeltaAccumulator:
    """
    Folds streamed text fragments into the transcript's in-progress assistant turn.

    The turn is rewritten in full with the running text on every fragment, so
    observers only ever see whole turns.
    """

    def __init__(self, transcript: Transcript):
        self.transcript = transcript
        self.state = AccumulatorState()

    @property
    def content(self) -> str:
        return self.state.content_buffer

    def fold(self, event: ParsedEvent) -> str | None:
        """Apply one DATA event; returns the fragment added, if any."""
        fragment = extract_delta(event.payload)
        if fragment is None:
            self.state.empty_events += 1
            return None

        self.state.content_buffer += fragment
        self.state.fragment_count += 1
        turn = Turn(role="assistant", content=self.state.content_buffer)

        last = self.transcript.last
        if last is not None and last.role == "assistant":
            self.transcript.replace_last(turn)
        else:
            self.transcript.append(turn)
        return fragment
