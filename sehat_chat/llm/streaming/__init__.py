"""
Streaming functionality for the chat client.

This package contains:
- Frame reading over arbitrarily split byte chunks
- Wire frame classification and malformed-frame recovery
- Delta accumulation into the transcript
"""

from __future__ import annotations

from .models import FrameKind, ParsedEvent
from .parser import DeltaAccumulator, StreamDecoder, extract_delta, parse_frame
from .reader import FrameReader

__all__ = [
    "DeltaAccumulator",
    "FrameKind",
    "FrameReader",
    "ParsedEvent",
    "StreamDecoder",
    "extract_delta",
    "parse_frame",
]
