"""
Main module for the terminal chat client.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TextIO

from .chat_service import ChatSession, ChatSnapshot
from .config import Configuration
from .content import Notice, build_language_packs
from .llm.client import ChatClient

QUIT_COMMANDS = ("/quit", "/exit")
LANGUAGE_COMMAND = "/lang"


class TerminalView:
    """Prints snapshot changes as they arrive, streaming assistant text in place."""

    def __init__(self, stream: TextIO = sys.stdout) -> None:
        self.stream = stream
        self._index = -1
        self._shown = ""
        self._notice: Notice | None = None

    def __call__(self, snapshot: ChatSnapshot) -> None:
        if snapshot.turns:
            index = len(snapshot.turns) - 1
            last = snapshot.turns[index]
            if last.role == "assistant":
                if index != self._index or not last.content.startswith(self._shown):
                    self._index, self._shown = index, ""
                    self.stream.write("\nassistant> ")
                self.stream.write(last.content[len(self._shown):])
                self._shown = last.content

        if snapshot.notice is not None and snapshot.notice is not self._notice:
            self.stream.write(
                f"\n[{snapshot.notice.title}] {snapshot.notice.description}"
            )
        self._notice = snapshot.notice
        self.stream.flush()


def print_banner(session: ChatSession, stream: TextIO = sys.stdout) -> None:
    pack = session.language_pack
    languages = "|".join(sorted(session.language_packs))
    stream.write(f"{pack.title}\n{pack.placeholder}\n")
    if pack.tele_number:
        stream.write(f"{pack.tele_consultation}: {pack.tele_number}\n")
    stream.write(f"({LANGUAGE_COMMAND} {languages} to switch language, /quit to leave)\n")
    stream.flush()


async def run_chat(session: ChatSession, stream: TextIO = sys.stdout) -> None:
    """Read lines from stdin and send them until the user quits."""
    while True:
        try:
            line = await asyncio.to_thread(input, "\nyou> ")
        except EOFError:
            break

        command = line.strip()
        if command in QUIT_COMMANDS:
            break
        if command.startswith(LANGUAGE_COMMAND):
            _, _, language = command.partition(" ")
            try:
                session.reset_for_language(language.strip())
            except ValueError as e:
                stream.write(f"{e}\n")
                stream.flush()
                continue
            print_banner(session, stream)
            continue

        session.draft = line
        await session.send()


async def main() -> None:
    """Main entry point - interactive terminal chat."""
    config = Configuration()
    logging.getLogger().setLevel(config.get_logging_config().get("level", "WARNING"))

    languages_config = config.get_languages_config()
    language_packs = build_language_packs(languages_config)

    async with ChatClient(config.get_endpoint_config(), config.api_key) as client:
        session = ChatSession(
            ChatSession.SessionConfig(
                client=client,
                language_packs=language_packs,
                language=languages_config["default"],
                streaming=config.get_streaming_config(),
            )
        )
        view = TerminalView()
        print_banner(session)
        view(session.snapshot())
        session.subscribe(view)

        try:
            await run_chat(session, view.stream)
        finally:
            logging.info("Chat session closed")


def cli() -> None:
    """Console script entry point."""
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
    )
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logging.info("Keyboard interrupt received, shutting down...")


if __name__ == "__main__":
    cli()
