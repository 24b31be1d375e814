"""List the files an assembly source includes, recursively."""

from __future__ import annotations

import re
import sys
from collections.abc import Iterator
from pathlib import Path

from crystaltools.common import ToolError, UsageError, _getopt, _run

PROGRAM = "scan_includes"
USAGE = "[-h|--help] [-s|--strict] filename.asm"

_INTERESTING = re.compile(r'[;"Ii]')
_SPACE = frozenset(" \t\n\v\f\r")


def _char(text: str, pos: int) -> str:
    return text[pos] if pos < len(text) else "\0"


def _find(text: str, chars: str, start: int) -> int:
    indexes = [i for i in (text.find(c, start) for c in chars) if i >= 0]
    return min(indexes, default=len(text))


def scan_text(text: str, filename: str = "") -> Iterator[tuple[str, bool]]:
    """Yield (path, is_include) for each INCLUDE or INCBIN directive in text."""
    text = text.split("\0", 1)[0]
    pos = 0
    while pos < len(text):
        match = _INTERESTING.search(text, pos)
        if match is None:
            return
        i = match.start()
        c = text[i]
        if c == ";":
            pos = _find(text, "\r\n", i + 1) + 1
            continue
        if c == '"':
            pos = _find(text, '"', i + 1) + 1
            continue
        before = text[i - 1] if i > 0 else "\n"
        if before not in _SPACE and before != ":":
            pos = i + 1
            continue
        is_incbin = text.startswith("INCBIN", i) or text.startswith("incbin", i)
        is_include = text.startswith("INCLUDE", i) or text.startswith("include", i)
        if not (is_incbin or is_include):
            pos = i + 1
            continue
        ptr = i + (7 if is_include else 6)
        if _char(text, ptr) not in _SPACE and _char(text, ptr) != '"':
            pos = ptr + 1
            continue
        while _char(text, ptr) in " \t":
            ptr += 1
        if _char(text, ptr) == '"':
            start = ptr + 1
            end = _find(text, '"', start)
            pos = end + 2
            yield text[start:end], is_include
        else:
            kind = "LUDE" if is_include else "BIN"
            print(f"{filename}: no file path after INC{kind}", file=sys.stderr)
            pos = ptr if _char(text, ptr) == ";" else ptr + 1


def scan_file(path, strict: bool = False) -> Iterator[str]:
    """Yield every path included by a file, descending into INCLUDEs."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        if strict:
            raise ToolError(f'Could not open file "{path}": {exc.strerror}') from exc
        return
    text = data.decode("utf-8", errors="surrogateescape")
    for include, is_include in scan_text(text, str(path)):
        yield include
        if is_include:
            yield from scan_file(include, strict)


def _main(argv: list[str]) -> None:
    opts, args = _getopt(argv, "sh", ["strict", "help"])
    strict = False
    for opt, _ in opts:
        if opt in ("-h", "--help"):
            raise UsageError(0)
        strict = True
    if not args:
        raise UsageError(1)
    for include in scan_file(args[0], strict):
        sys.stdout.write(f"{include} ")
    sys.stdout.flush()


def main(argv=None) -> int:
    return _run(PROGRAM, USAGE, _main, argv)


if __name__ == "__main__":
    raise SystemExit(main())