# src/textree/dump.py
# Indented, human-readable trace of a tree. Diagnostic only; never parsed back.
#
#   Command \'
#     Group
#       Text "e"
#   Text "lan"

from __future__ import annotations
import json
import unicodedata
from typing import IO, List, Optional, Tuple

from .builder import Node, Tree


def quote_text(content: str) -> str:
    """
    JSON-quote `content`. json only escapes C0 controls, so DEL and the C1
    range are escaped here as well.
    """
    quoted = json.dumps(content, ensure_ascii=False)
    return "".join(
        f"\\u{ord(ch):04x}" if unicodedata.category(ch) == "Cc" else ch
        for ch in quoted
    )


def describe(node: Node) -> str:
    """One-line label for a node, without indentation."""
    t = node.get("type")
    if t == "Text":
        return "Text " + quote_text(node.get("content", ""))
    if t == "Command":
        return "Command \\" + node.get("name", "")
    return str(t)


def dump(tree: Tree, indent: int = 0, stream: Optional[IO[str]] = None, width: int = 2) -> str:
    """
    Return one line per node, indented `width` spaces per level starting at
    level `indent`. When `stream` is given the report is written there too.
    """
    lines: List[str] = []
    work: List[Tuple[Node, int]] = [(n, indent) for n in reversed(tree or [])]
    while work:
        node, depth = work.pop()
        lines.append(" " * (width * depth) + describe(node))
        t = node.get("type")
        if t == "Group":
            work.extend((c, depth + 1) for c in reversed(node.get("children") or []))
        elif t == "Command" and node.get("argument") is not None:
            work.append((node["argument"], depth + 1))

    report = "".join(line + "\n" for line in lines)
    if stream is not None and report:
        stream.write(report)
    return report
