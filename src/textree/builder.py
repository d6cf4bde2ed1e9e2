# src/textree/builder.py
# Builds a TeX tree from one line of text.
#
# Nodes are plain dicts:
#   {"type": "Text", "content": str}
#   {"type": "Group", "children": [node, ...]}
#   {"type": "Command", "name": str, "argument": Group | None}
# A tree is the list of top-level nodes.
#
# Open groups live on an explicit frame stack, so nesting depth is bounded by
# memory rather than by the interpreter's recursion limit.

from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from .config import DEFAULT_OPTIONS, TexOptions
from .errors import MalformedCommandError, NestingDepthError, UnbalancedBraceError
from .scanner import CHAR, CLOSE, COMMAND, OPEN, LexEvent, is_letter, scan

logger = logging.getLogger(__name__)

Node = Dict[str, Any]
Tree = List[Node]


def text_node(content: str) -> Node:
    return {"type": "Text", "content": content}


def group_node(children: Optional[List[Node]] = None) -> Node:
    return {"type": "Group", "children": children if children is not None else []}


def command_node(name: str, argument: Optional[Node] = None) -> Node:
    return {"type": "Command", "name": name, "argument": argument}


class _Frame:
    """One open group: where its children go, and pending plain text."""

    __slots__ = ("children", "pos", "buf")

    def __init__(self, children: List[Node], pos: int):
        self.children = children
        self.pos = pos
        self.buf: List[str] = []

    def flush(self) -> None:
        if self.buf:
            self.children.append(text_node("".join(self.buf)))
            self.buf = []


class Builder:
    def __init__(self, text: str, options: Optional[TexOptions] = None):
        self.text = text or ""
        self.options = options or DEFAULT_OPTIONS
        self.events: List[LexEvent] = list(scan(self.text))
        self.i = 0

    def peek(self) -> Optional[LexEvent]:
        if self.i < len(self.events):
            return self.events[self.i]
        return None

    def pop(self) -> LexEvent:
        ev = self.events[self.i]
        self.i += 1
        return ev

    def _push(self, stack: List[_Frame], children: List[Node], pos: int) -> None:
        stack.append(_Frame(children, pos))
        limit = self.options.max_depth
        if limit is not None and len(stack) - 1 > limit:
            raise NestingDepthError(f"nesting deeper than {limit}", pos, self.text)

    def _command_name(self, pos: int) -> str:
        ev = self.peek()
        if ev is None or ev[0] != CHAR:
            # Only end of input can follow a bare backslash: escaped braces
            # and backslashes never reach here as structural events.
            if self.options.strict_commands:
                raise MalformedCommandError("empty command name", pos, self.text)
            return ""
        ch = ev[1]
        if not is_letter(ch):
            self.pop()
            return ch
        letters = []
        while ev is not None and ev[0] == CHAR and is_letter(ev[1]):
            letters.append(self.pop()[1])
            ev = self.peek()
        return "".join(letters)

    def build(self) -> Tree:
        tree: Tree = []
        stack = [_Frame(tree, -1)]

        while self.peek() is not None:
            kind, value, pos = self.pop()
            frame = stack[-1]

            if kind == CHAR:
                frame.buf.append(value)

            elif kind == OPEN:
                frame.flush()
                group = group_node()
                frame.children.append(group)
                self._push(stack, group["children"], pos)

            elif kind == CLOSE:
                if len(stack) == 1:
                    raise UnbalancedBraceError(UnbalancedBraceError.UNEXPECTED_CLOSE, pos, self.text)
                frame.flush()
                stack.pop()

            elif kind == COMMAND:
                frame.flush()
                cmd = command_node(self._command_name(pos))
                frame.children.append(cmd)
                nxt = self.peek()
                if nxt is not None and nxt[0] == OPEN:
                    # Binds only when the brace follows the name directly.
                    _, _, open_pos = self.pop()
                    cmd["argument"] = group_node()
                    self._push(stack, cmd["argument"]["children"], open_pos)

        if len(stack) > 1:
            raise UnbalancedBraceError(UnbalancedBraceError.UNTERMINATED, stack[-1].pos, self.text)
        stack[0].flush()
        logger.debug("built %d top-level node(s) from %d char(s)", len(tree), len(self.text))
        return tree


def build(text: str, options: Optional[TexOptions] = None) -> Tree:
    """Parse one line into a tree; raises a TexTreeError subclass on bad input."""
    return Builder(text, options).build()
