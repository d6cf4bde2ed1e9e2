# src/textree/__init__.py
# Lossless brace-and-command trees for single lines of TeX-flavored text.

from .builder import build, command_node, group_node, text_node
from .config import StringOptions, TexOptions, load_options, with_all_stringopts
from .dump import dump
from .errors import (
    ConfigError,
    MalformedCommandError,
    NestingDepthError,
    TexTreeError,
    UnbalancedBraceError,
)
from .flatten import flatten
from .scanner import scan
from .verifier import from_json, to_json, verify_tree

__all__ = [
    "build", "flatten", "dump", "scan",
    "text_node", "group_node", "command_node",
    "TexOptions", "StringOptions", "load_options", "with_all_stringopts",
    "TexTreeError", "UnbalancedBraceError", "MalformedCommandError",
    "NestingDepthError", "ConfigError",
    "to_json", "from_json", "verify_tree",
]
