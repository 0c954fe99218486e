"""
Streaming-specific dataclasses for the event stream decoder.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FrameKind(Enum):
    """Classification of a single wire frame."""
    BLANK = "blank"
    COMMENT = "comment"
    IGNORED = "ignored"
    SENTINEL = "sentinel"
    DATA = "data"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ParsedEvent:
    """One classified frame, with its payload when it carried data."""
    kind: FrameKind
    frame: str
    payload: Any = None
    error: str | None = None


@dataclass
class AccumulatorState:
    """Mutable state for delta accumulation within one streaming session."""
    content_buffer: str = ""
    fragment_count: int = 0
    empty_events: int = 0
