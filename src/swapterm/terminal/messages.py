"""Output values and the notification surface collaborator.

Output is modelled as ``Message{kind, text, inline_tokens}``; the glyph a
token stands for is chosen by whoever renders it.
"""

import re
from typing import Protocol

from swapterm.models import Message, MessageKind

_TOKEN_RE = re.compile(r":([a-z0-9_]+):")

# Default glyphs for console rendering
GLYPHS: dict[str, str] = {
    "rose": "\U0001f339",
    "eth": "Ξ",
}


class NotificationSurface(Protocol):
    """Transient pop-up channel (rendered outside the command log)."""

    def show(self, message: Message) -> None: ...


def message(text: str, kind: MessageKind = MessageKind.INFO) -> Message:
    """Build a Message, collecting any ``:token:`` shortcodes in ``text``."""
    return Message(text=text, kind=kind, inline_tokens=tuple(_TOKEN_RE.findall(text)))


def info(text: str) -> Message:
    return message(text, MessageKind.INFO)


def success(text: str) -> Message:
    return message(text, MessageKind.SUCCESS)


def error(text: str) -> Message:
    return message(text, MessageKind.ERROR)


def render_tokens(msg: Message | str, glyphs: dict[str, str] | None = None) -> str:
    """Replace known ``:token:`` shortcodes with glyphs; unknown ones stay as text."""
    glyphs = GLYPHS if glyphs is None else glyphs
    text = msg.text if isinstance(msg, Message) else msg
    return _TOKEN_RE.sub(lambda m: glyphs.get(m.group(1), m.group(0)), text)


class RecordingSurface:
    """Notification surface that keeps every message shown.

    Stands in for the console pop-ups wherever nothing is drawn, such as tests.
    """

    def __init__(self) -> None:
        self.shown: list[Message] = []

    def show(self, message: Message) -> None:
        self.shown.append(message)
