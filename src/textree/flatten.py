# src/textree/flatten.py
# Serializes a tree back into the exact text it was built from.

from __future__ import annotations
from typing import Any, List, Union

from .builder import Node, Tree


def flatten(tree: Tree) -> str:
    """
    Depth-first, left-to-right. For every `s` that builds,
    flatten(build(s)) == s.
    """
    out: List[str] = []
    # Work items are nodes or literal strings, popped from the end.
    work: List[Union[Node, str]] = list(reversed(tree or []))
    while work:
        item: Any = work.pop()
        if isinstance(item, str):
            out.append(item)
            continue
        t = item.get("type")
        if t == "Text":
            out.append(item.get("content", ""))
        elif t == "Group":
            out.append("{")
            work.append("}")
            work.extend(reversed(item.get("children") or []))
        elif t == "Command":
            out.append("\\" + item.get("name", ""))
            arg = item.get("argument")
            if arg is not None:
                work.append(arg)
    return "".join(out)
