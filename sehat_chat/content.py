"""
Localized content for the chat client.

Language packs are read from the ``languages`` section of the configuration
and handed to the chat session as a plain lookup keyed by language code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class NoticeKind(Enum):
    """User-facing notice categories."""
    RATE_LIMITED = "rate_limited"
    PAYMENT_REQUIRED = "payment_required"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A localized message shown to the user when a turn fails."""
    kind: NoticeKind
    title: str
    description: str


class NoticeText(BaseModel):
    title: str
    description: str


class LanguagePack(BaseModel):
    """All user-visible text for one language."""
    code: str
    title: str
    placeholder: str
    welcome: str
    tele_consultation: str = ""
    tele_number: str = ""
    notices: dict[NoticeKind, NoticeText] = Field(default_factory=dict)

    def notice(self, kind: NoticeKind) -> Notice:
        """Build the notice for ``kind``, falling back to the generic error text."""
        text = self.notices.get(kind) or self.notices.get(NoticeKind.ERROR)
        if text is None:
            raise ValueError(
                f"Language pack '{self.code}' defines no notice for '{kind.value}'"
            )
        return Notice(kind=kind, title=text.title, description=text.description)


def build_language_packs(languages_config: dict[str, Any]) -> dict[str, LanguagePack]:
    """Validate the configured packs and key them by language code."""
    packs = {}
    for code, raw in languages_config["packs"].items():
        packs[code] = LanguagePack(code=code, **raw)
    return packs
