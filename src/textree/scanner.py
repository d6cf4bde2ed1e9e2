# src/textree/scanner.py
# Walks one line of TeX-flavored text and yields lexical events.
# Events:
#   ("char", literal, pos)      plain character, or an escaped literal like "\{"
#   ("open", "{", pos)
#   ("close", "}", pos)
#   ("command", "\\", pos)      unescaped backslash starting a command

from __future__ import annotations
from typing import Iterator, Tuple

LexEvent = Tuple[str, str, int]

CHAR = "char"
OPEN = "open"
CLOSE = "close"
COMMAND = "command"

# Backslash followed by one of these is literal text, not a command.
ESCAPABLE = {"{", "}", "\\"}


def is_letter(ch: str) -> bool:
    """Control words are made of ASCII letters only (TeX catcode 11)."""
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def scan(text: str) -> Iterator[LexEvent]:
    """
    Yield events for `text` left to right.

    The builder reads command names straight from the following "char"
    events, so a command event only marks where the backslash was.
    """
    s = text or ""
    i = 0
    n = len(s)
    while i < n:
        ch = s[i]
        if ch == "\\":
            nxt = s[i + 1] if i + 1 < n else ""
            if nxt in ESCAPABLE:
                yield (CHAR, ch + nxt, i)
                i += 2
                continue
            yield (COMMAND, ch, i)
        elif ch == "{":
            yield (OPEN, ch, i)
        elif ch == "}":
            yield (CLOSE, ch, i)
        else:
            yield (CHAR, ch, i)
        i += 1
