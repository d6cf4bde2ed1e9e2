# src/textree/tex_cli.py
# Line-reading driver: builds a tree for every input line, dumps it, flattens
# it back and reports lines that do not round-trip.

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Optional, Tuple, Union

from .builder import build
from .config import TexOptions, load_options
from .dump import dump
from .errors import ConfigError, TexTreeError
from .flatten import flatten
from .verifier import to_json, verify_tree

logger = logging.getLogger(__name__)

MISMATCH = "uh-oh! line and str don't match!"


def _setup_logging(level: str) -> None:
    lvl = getattr(logging, level.upper())
    # No-op when the host application already configured the root logger.
    logging.basicConfig(format="[%(levelname)s] %(message)s", level=lvl)
    logging.getLogger("textree").setLevel(lvl)


def _read_lines(paths: List[str], stdin: IO[str]) -> Iterator[Tuple[str, Union[str, bytes]]]:
    """
    Yield (source, line) with the trailing newline stripped. Lines stay
    undecoded bytes where the source allows it, so run() can report a bad
    line without losing the rest of the input.
    """
    if not paths:
        for raw in getattr(stdin, "buffer", stdin):
            yield "<stdin>", raw.rstrip(b"\r\n" if isinstance(raw, bytes) else "\r\n")
        return
    for p in paths:
        with open(p, "rb") as f:
            for raw in f:
                yield p, raw.rstrip(b"\r\n")


def process_line(line: str, options: TexOptions, out: IO[str], as_json: bool = False, verify: bool = False) -> bool:
    """Build, show and flatten one line. Returns True when it round-trips."""
    tree = build(line, options)
    print("tree =", file=out)
    if as_json:
        print(to_json(tree), file=out)
    else:
        dump(tree, 0, out, width=options.dump_width)

    if verify:
        report = verify_tree(tree)
        print(json.dumps({"verify": report}, sort_keys=True), file=out)

    flat = flatten(tree)
    print(f"flattened tree = [{flat}]", file=out)
    if flat != line:
        print(MISMATCH, file=out)
        return False
    return True


def run(lines: Iterable[Tuple[str, Union[str, bytes]]], options: TexOptions, out: IO[str],
        as_json: bool = False, verify: bool = False, halt_on_error: bool = False) -> int:
    ok = True
    line_num = 0
    for source, line in lines:
        line_num += 1
        try:
            if isinstance(line, bytes):
                line = line.decode("utf-8")
            if not process_line(line, options, out, as_json=as_json, verify=verify):
                logger.warning("%s: line %d does not round-trip", source, line_num)
                ok = False
        except (TexTreeError, UnicodeDecodeError) as e:
            logger.error("%s: line %d: %s", source, line_num, e)
            ok = False
            if halt_on_error:
                return 1
    logger.info("processed %d line(s)", line_num)
    return 0 if ok else 1


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="textree",
        description="Build TeX trees for input lines; print dumps and flattened text.",
    )
    p.add_argument("files", nargs="*", help="Input files (default: stdin).")
    p.add_argument("--strict", action="store_true", default=None,
                   help="Reject empty command names (lone trailing backslash).")
    p.add_argument("--max-depth", type=int, default=None, help="Fail on brace nesting deeper than N.")
    p.add_argument("--config", metavar="PATH", help="JSON options file.")
    p.add_argument("--json", action="store_true", help="Print trees as JSON instead of the indented dump.")
    p.add_argument("--verify", action="store_true", help="Run the tree verifier and print its findings.")
    p.add_argument("--halt-on-error", action="store_true", help="Stop at the first line that fails to build.")
    p.add_argument("--log-level", default="warning", type=str.lower,
                   choices=["debug", "info", "warning", "error", "critical"],
                   help="Logging level (default: warning).")
    args = p.parse_args(argv)

    _setup_logging(args.log_level)

    if args.max_depth is not None and args.max_depth < 1:
        p.error("--max-depth must be at least 1")

    try:
        options = load_options(
            Path(args.config) if args.config else None,
            strict_commands=args.strict,
            max_depth=args.max_depth,
        )
    except ConfigError as e:
        p.error(str(e))
    logger.debug("options: %s", options)

    for path in args.files:
        if not Path(path).is_file():
            p.error(f"file not found: {path}")

    return run(
        _read_lines(args.files, sys.stdin),
        options,
        sys.stdout,
        as_json=args.json,
        verify=args.verify,
        halt_on_error=args.halt_on_error,
    )


if __name__ == "__main__":
    raise SystemExit(main())
