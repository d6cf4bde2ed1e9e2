# src/textree/config.py
# Explicit, read-only options for building and dumping TeX trees.
#
# Precedence (lowest -> highest): defaults, JSON options file, environment,
# keyword overrides (the CLI passes its flags here).
#
# The bibliography layer keeps string-formatting options per metatype
# (regular fields, macro definitions, comments, preamble). They travel with
# TexOptions so callers never read them from global state; the tree core
# itself does not apply them.

from __future__ import annotations
import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import jsonschema

from .errors import ConfigError

METATYPES = ("regular", "macrodef", "comment", "preamble")

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "options.schema.json"

ENV_STRICT = "TEXTREE_STRICT"
ENV_MAX_DEPTH = "TEXTREE_MAX_DEPTH"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class StringOptions:
    convert: bool = False   # process escapes and character conversions
    expand: bool = False    # expand macro references
    paste: bool = False     # paste "#"-joined substrings together
    collapse: bool = False  # collapse runs of whitespace


def _default_stringopts() -> Mapping[str, StringOptions]:
    return MappingProxyType({m: StringOptions() for m in METATYPES})


@dataclass(frozen=True)
class TexOptions:
    strict_commands: bool = False
    max_depth: Optional[int] = None
    dump_width: int = 2
    string_options: Mapping[str, StringOptions] = field(default_factory=_default_stringopts)

    def __post_init__(self):
        # Read-only view over a private copy; DEFAULT_OPTIONS is shared.
        if not isinstance(self.string_options, MappingProxyType):
            object.__setattr__(self, "string_options", MappingProxyType(dict(self.string_options)))

    def stringopts_for(self, metatype: str) -> StringOptions:
        if metatype not in METATYPES:
            raise ConfigError(f"unknown metatype: {metatype!r}")
        return self.string_options.get(metatype, StringOptions())


DEFAULT_OPTIONS = TexOptions()


def with_all_stringopts(options: TexOptions, stringopts: StringOptions) -> TexOptions:
    """Return a copy of `options` using `stringopts` for every metatype."""
    return replace(options, string_options=MappingProxyType({m: stringopts for m in METATYPES}))


def _load_schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def _parse_bool(name: str, raw: str) -> bool:
    low = raw.strip().lower()
    if low in _TRUE:
        return True
    if low in _FALSE:
        return False
    raise ConfigError(f"{name}: expected a boolean, got {raw!r}")


def _parse_depth(name: str, raw: str) -> Optional[int]:
    s = raw.strip()
    if not s:
        return None
    try:
        depth = int(s)
    except ValueError:
        raise ConfigError(f"{name}: expected an integer, got {raw!r}") from None
    if depth < 1:
        raise ConfigError(f"{name}: must be at least 1, got {depth}")
    return depth


def options_from_dict(data: Mapping[str, Any], base: TexOptions = DEFAULT_OPTIONS) -> TexOptions:
    """Validate `data` against the options schema and merge it over `base`."""
    try:
        jsonschema.validate(instance=data, schema=_load_schema())
    except jsonschema.ValidationError as e:
        raise ConfigError(f"invalid options: {e.message}") from e

    changes: Dict[str, Any] = {}
    for key in ("strict_commands", "max_depth", "dump_width"):
        if key in data:
            changes[key] = data[key]

    raw_stringopts = data.get("string_options")
    if raw_stringopts:
        merged = dict(base.string_options)
        for metatype, flags in raw_stringopts.items():
            merged[metatype] = StringOptions(**flags)
        changes["string_options"] = MappingProxyType(merged)
    return replace(base, **changes)


def load_options(
    path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> TexOptions:
    options = DEFAULT_OPTIONS

    if path is not None:
        p = Path(path)
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"cannot read options file {p}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"options file {p} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"options file {p} must hold a JSON object")
        options = options_from_dict(data, options)

    environ = os.environ if env is None else env
    if ENV_STRICT in environ:
        options = replace(options, strict_commands=_parse_bool(ENV_STRICT, environ[ENV_STRICT]))
    if ENV_MAX_DEPTH in environ:
        options = replace(options, max_depth=_parse_depth(ENV_MAX_DEPTH, environ[ENV_MAX_DEPTH]))

    given = {k: v for k, v in overrides.items() if v is not None}
    if given:
        options = replace(options, **given)
    return options
