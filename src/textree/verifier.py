# src/textree/verifier.py
# JSON export of trees and a verifier for trees that did not come straight
# from the builder (hand-assembled, loaded from disk, ...).
#
# verify_tree() returns {"errors": [...], "warnings": [...]}; warnings never
# make a tree invalid.

from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, List, Tuple

from jsonschema import Draft202012Validator

from .builder import Tree
from .scanner import ESCAPABLE, is_letter

TREE_VERSION = "1.0.0"

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "tex-tree.schema.json"

_STRUCTURAL = ("{", "}")


def load_schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def to_document(tree: Tree) -> Dict[str, Any]:
    return {"treeVersion": TREE_VERSION, "nodes": tree}


def to_json(tree: Tree, indent: int | None = 2) -> str:
    return json.dumps(to_document(tree), indent=indent, ensure_ascii=False)


def from_json(text: str) -> Tree:
    doc = json.loads(text)
    Draft202012Validator(load_schema()).validate(doc)
    return doc["nodes"]


def _unescaped_structural(content: str) -> str | None:
    """Return the first structural char in `content` that is not escaped."""
    i = 0
    while i < len(content):
        ch = content[i]
        if ch == "\\":
            if i + 1 < len(content) and content[i + 1] in ("{", "}", "\\"):
                i += 2
                continue
            return ch
        if ch in _STRUCTURAL:
            return ch
        i += 1
    return None


def _bad_name(name: str) -> bool:
    """Names are a letter run or exactly one non-letter; "\\{" would read back as text."""
    if len(name) == 1:
        return name in ESCAPABLE
    return not all(is_letter(ch) for ch in name)


def _check_siblings(children: List[Any], path: str, errors: List[str], warnings: List[str]) -> List[Tuple[Any, str]]:
    """
    Check one sibling list; return (node, path) pairs to descend into.

    Besides shape, this catches neighbours that flatten into text the builder
    would read back differently: a letter right after a control word joins
    its name, and a group right after an argument-less command binds to it.
    """
    below: List[Tuple[Any, str]] = []
    top_level = path == "nodes"
    prev: Any = None
    for idx, node in enumerate(children):
        where = f"{path}[{idx}]"
        t = node.get("type")
        prev_t = prev.get("type") if prev is not None else None
        prev_name = prev.get("name", "") if prev_t == "Command" else ""

        if t == "Text":
            content = node.get("content", "")
            if prev_t == "Text":
                errors.append(f"{where}: adjacent Text nodes")
            if content == "":
                errors.append(f"{where}: empty Text node")
            bad = _unescaped_structural(content)
            if bad is not None:
                errors.append(f"{where}: Text holds unescaped {bad!r}")
            if content and is_letter(content[0]) and prev_name and is_letter(prev_name[0]):
                errors.append(f"{where}: Text would extend command name {prev_name!r}")
        elif t == "Group":
            if prev_t == "Command" and prev.get("argument") is None:
                errors.append(f"{where}: Group would bind as argument of command {prev_name!r}")
            below.append((node.get("children") or [], f"{where}.children"))
        elif t == "Command":
            name = node.get("name", "")
            arg = node.get("argument")
            if name == "":
                if top_level and idx == len(children) - 1 and arg is None:
                    warnings.append(f"{where}: command with empty name")
                else:
                    errors.append(f"{where}: empty command name before more input")
            elif _bad_name(name):
                errors.append(f"{where}: invalid command name {name!r}")
            if arg is not None:
                below.append((arg.get("children") or [], f"{where}.argument.children"))
        prev = node
    return below


def verify_tree(tree: Tree) -> Dict[str, List[str]]:
    errors: List[str] = []
    warnings: List[str] = []

    validator = Draft202012Validator(load_schema())
    schema_errors = sorted(validator.iter_errors(to_document(tree)), key=lambda e: list(e.path))
    for e in schema_errors:
        loc = "/".join(str(p) for p in e.path) or "<root>"
        errors.append(f"schema: {loc}: {e.message}")
    if schema_errors:
        # Shape is wrong; invariant checks would only repeat the noise.
        return {"errors": errors, "warnings": warnings}

    pending: List[Tuple[Any, str]] = [(tree, "nodes")]
    while pending:
        children, path = pending.pop()
        pending.extend(_check_siblings(children, path, errors, warnings))
    return {"errors": errors, "warnings": warnings}
