"""
Chat session controller.

This module owns the conversation for one chat session:
- The transcript, reset to a localized welcome turn on every language change
- Single-flight sending of user turns to the chat endpoint
- Driving the streamed reply through the decoder into the transcript
- Turning endpoint and transport failures into localized notices

Every state change is pushed to subscribers as an immutable snapshot the
moment it happens; a streamed reply is published fragment by fragment.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .content import LanguagePack, Notice
from .history.models import Transcript, Turn
from .llm.exceptions import LLMError
from .llm.streaming.parser import DEFAULT_MAX_PENDING_CHARS, DeltaAccumulator, StreamDecoder
from .logging_utils import ChatErrorHandler, operation_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatSnapshot:
    """Read-only view of the session for the presentation layer."""
    turns: tuple[Turn, ...]
    busy: bool
    language: str
    draft: str = ""
    notice: Notice | None = None


Listener = Callable[[ChatSnapshot], None]


class ChatSession:
    """
    Conversation controller for a single chat session.
    1. Takes your message
    2. Sends it with the whole conversation so far
    3. Streams the reply into the transcript as it arrives
    4. Tells you plainly when something went wrong
    """

    class SessionConfig(BaseModel):
        model_config = ConfigDict(arbitrary_types_allowed=True)

        client: Any  # ChatClient
        language_packs: dict[str, LanguagePack]
        language: str
        streaming: dict[str, Any] = Field(default_factory=dict)

    def __init__(self, session_config: ChatSession.SessionConfig):
        self.client = session_config.client
        self.language_packs = session_config.language_packs
        self.encoding: str = session_config.streaming.get("encoding", "utf-8")
        self.max_pending_chars: int = session_config.streaming.get(
            "max_pending_chars", DEFAULT_MAX_PENDING_CHARS
        )

        self.language = self._validate_language(session_config.language)
        self.transcript = Transcript([self._welcome_turn()])
        self.busy = False
        self.draft = ""
        self.notice: Notice | None = None

        # Bumped on every reset; a stream started under an older value is stale
        self._generation = 0
        self._listeners: list[Listener] = []

    @property
    def language_pack(self) -> LanguagePack:
        return self.language_packs[self.language]

    def snapshot(self) -> ChatSnapshot:
        return ChatSnapshot(
            turns=self.transcript.turns,
            busy=self.busy,
            language=self.language,
            draft=self.draft,
            notice=self.notice,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for state changes; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset_for_language(self, language: str) -> None:
        """
        Switch language and start over with that language's welcome turn.

        A reply still streaming for the previous transcript is abandoned when
        its next event arrives.
        """
        self.language = self._validate_language(language)
        self._generation += 1
        self.transcript.reset([self._welcome_turn()])
        self.notice = None
        logger.info("Transcript reset for language '%s'", self.language)
        self._publish()

    async def send(self, text: str | None = None) -> bool:
        """
        Send a user turn and stream the reply into the transcript.

        Sends ``draft`` when no text is given. Returns False without doing
        anything when the text is blank or a send is already in flight.
        Endpoint and transport failures become a notice; they are not raised.
        """
        text = self.draft if text is None else text
        if not text.strip() or self.busy:
            return False

        user_text = text.strip()
        generation = self._generation
        language = self.language
        history = [
            *self.transcript.to_messages(),
            {"role": "user", "content": user_text},
        ]

        self.transcript.append(Turn(role="user", content=user_text))
        self.draft = ""
        self.notice = None
        self.busy = True
        self._publish()

        try:
            async with operation_context(
                "chat_turn",
                context={"language": language, "history_turns": len(history)},
                handled=(LLMError,),
            ) as op_logger:
                await self._stream_reply(history, language, generation, op_logger)
        except LLMError as e:
            self._report(e, generation, language)
        finally:
            self.busy = False
            self._publish()
        return True

    async def _stream_reply(
        self,
        history: list[dict[str, str]],
        language: str,
        generation: int,
        op_logger: Any,
    ) -> None:
        decoder = StreamDecoder(
            encoding=self.encoding, max_pending_chars=self.max_pending_chars
        )
        accumulator = DeltaAccumulator(self.transcript)

        async with aclosing(self.client.stream_chat(history, language)) as chunks:
            async with aclosing(decoder.events(chunks)) as events:
                async for event in events:
                    if generation != self._generation:
                        op_logger.warning(
                            "Abandoning reply for a reset transcript",
                            chars_received=len(accumulator.content),
                        )
                        return
                    if accumulator.fold(event) is not None:
                        self._publish()

        op_logger.info(
            "Reply streamed",
            completed=decoder.completed,
            fragments=accumulator.state.fragment_count,
            chars=len(accumulator.content),
            **decoder.get_stats(),
        )

    def _report(self, error: LLMError, generation: int, language: str) -> None:
        notice_kind = ChatErrorHandler.log_error(
            error, "chat_turn", context={"language": language}
        )
        if generation != self._generation:
            logger.info("Suppressing notice from a reset transcript")
            return
        self.notice = self.language_pack.notice(notice_kind)

    def _publish(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _validate_language(self, language: str) -> str:
        if language not in self.language_packs:
            raise ValueError(
                f"Unknown language '{language}'; configured: "
                f"{sorted(self.language_packs)}"
            )
        return language

    def _welcome_turn(self) -> Turn:
        return Turn(role="assistant", content=self.language_pack.welcome)
