#!/usr/bin/env python3
"""
Tests for the incremental frame reader.
"""

from sehat_chat.llm.streaming.reader import FrameReader

WIRE = (
    ": keep-alive\n"
    "\n"
    'data: {"choices":[{"delta":{"content":"बुखार में आराम करें"}}]}\r\n'
    "data: [DONE]\n"
).encode("utf-8")

EXPECTED = [
    ": keep-alive",
    "",
    'data: {"choices":[{"delta":{"content":"बुखार में आराम करें"}}]}',
    "data: [DONE]",
]


def read_all(reader: FrameReader, chunks: list[bytes]) -> list[str]:
    frames = []
    for chunk in chunks:
        reader.feed(chunk)
        while (frame := reader.next_frame()) is not None:
            frames.append(frame)
    return frames


class TestFrameReader:
    """Frame extraction over arbitrarily split chunks."""

    def test_single_chunk(self):
        assert read_all(FrameReader(), [WIRE]) == EXPECTED

    def test_every_two_way_split(self):
        """Frames are identical wherever the bytes are split, mid-character included."""
        for split in range(len(WIRE) + 1):
            frames = read_all(FrameReader(), [WIRE[:split], WIRE[split:]])
            assert frames == EXPECTED, f"split at byte {split}"

    def test_byte_at_a_time(self):
        chunks = [WIRE[i:i + 1] for i in range(len(WIRE))]
        assert read_all(FrameReader(), chunks) == EXPECTED

    def test_unterminated_tail_is_never_emitted(self):
        reader = FrameReader()
        frames = read_all(reader, [b"data: one\ndata: tw", b"o"])
        assert frames == ["data: one"]
        assert reader.buffer == "data: two"

    def test_only_one_carriage_return_is_trimmed(self):
        assert read_all(FrameReader(), [b"abc\r\r\n"]) == ["abc\r"]

    def test_invalid_bytes_are_replaced(self):
        assert read_all(FrameReader(), [b"data: \xff\n"]) == ["data: \ufffd"]

    def test_push_back_joins_with_following_line(self):
        reader = FrameReader()
        reader.feed(b'data: {"a":\n')
        frame = reader.next_frame()
        assert frame == 'data: {"a":'

        reader.push_back(frame)
        assert reader.next_frame() is None
        assert reader.buffer == 'data: {"a":\n'

        reader.feed(b"1}\r\n")
        assert reader.next_frame() == 'data: {"a":\n1}'
        assert reader.buffer == ""
