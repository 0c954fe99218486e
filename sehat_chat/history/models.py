# sehat_chat/history/models.py
from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Literal

from pydantic import BaseModel, ConfigDict

Role = Literal["user", "assistant"]


class Turn(BaseModel):
    """One message in the conversation."""
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class Transcript:
    """
    Ordered turns of the active chat session.

    Turns are held in a tuple that is swapped on every change, so a snapshot
    taken by an observer never changes underneath it. Only the last turn may
    be replaced, and only by an assistant turn whose content extends it.
    """

    def __init__(self, turns: Iterable[Turn] = ()):
        self._turns: tuple[Turn, ...] = tuple(turns)

    @property
    def turns(self) -> tuple[Turn, ...]:
        return self._turns

    @property
    def last(self) -> Turn | None:
        return self._turns[-1] if self._turns else None

    def append(self, turn: Turn) -> None:
        self._turns = (*self._turns, turn)

    def replace_last(self, turn: Turn) -> None:
        """Rewrite the in-progress assistant turn with longer content."""
        last = self.last
        if last is None or last.role != "assistant" or turn.role != "assistant":
            raise ValueError("Only an assistant turn can replace an assistant turn")
        if not turn.content.startswith(last.content):
            raise ValueError("Assistant turn content may only grow")
        self._turns = (*self._turns[:-1], turn)

    def reset(self, turns: Iterable[Turn] = ()) -> None:
        self._turns = tuple(turns)

    def to_messages(self) -> list[dict[str, str]]:
        """Turns as request-ready message dicts."""
        return [turn.model_dump() for turn in self._turns]

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self._turns)
