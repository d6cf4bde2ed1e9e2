# src/textree/errors.py
# Typed failures raised while building a TeX tree. Every error carries the
# offset where the fault was detected.

from __future__ import annotations
from typing import Optional


class TexTreeError(Exception):
    """Base class for build failures; `position` is a character offset into `text`."""

    def __init__(self, message: str, position: int, text: Optional[str] = None):
        super().__init__(f"{message} at offset {position}")
        self.message = message
        self.position = position
        self.text = text

    @property
    def byte_offset(self) -> int:
        """Offset of the fault in the UTF-8 encoding of the source line."""
        if self.text is None:
            return self.position
        return len(self.text[: self.position].encode("utf-8"))


class UnbalancedBraceError(TexTreeError):
    UNTERMINATED = "unterminated"
    UNEXPECTED_CLOSE = "unexpected-close"

    def __init__(self, kind: str, position: int, text: Optional[str] = None):
        if kind == self.UNTERMINATED:
            message = "unterminated group"
        else:
            message = "unexpected close brace"
        super().__init__(message, position, text)
        self.kind = kind


class MalformedCommandError(TexTreeError):
    pass


class NestingDepthError(TexTreeError):
    pass


class ConfigError(ValueError):
    """Raised when an options file or environment value is unusable."""
