"""QSRepl — interactive shell for trying out query strings.

Also provides the ``qs-repl`` CLI entry point via ``main()``.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import IO, Any

from .codec import QueryString
from .errors import QSCoreError
from .tokenizer import DEFAULT_DELIMITER
from .values import DecodedValue, _Absent


# ---------------------------------------------------------------------------
# QSRepl class (notebook / programmatic use)
# ---------------------------------------------------------------------------

class QSRepl:
    """Shell state: the active codec and the last decoded value.

    Usage::

        repl = QSRepl()
        repl.eval("a[]=1&a[]=2")        # → {"a": [1, 2]}
        repl.encode('{"a": [1, 2]}')    # → "a[0]=1&a[1]=2"
        repl.set_delimiter(";")
        repl.reset()
    """

    def __init__(self, delimiter: str = DEFAULT_DELIMITER) -> None:
        self.codec = QueryString(delimiter)
        self.last: dict[str, DecodedValue] | None = None

    @property
    def delimiter(self) -> str:
        return self.codec.delimiter

    def set_delimiter(self, delimiter: str) -> None:
        self.codec = QueryString(delimiter)

    def eval(self, text: str) -> dict[str, DecodedValue]:
        """Decode *text* and remember the result as ``last``."""
        self.last = self.codec.decode(text)
        return self.last

    def encode(self, text: str) -> str:
        """Parse *text* as a JSON object and encode it."""
        return self.codec.encode(json.loads(text))

    def reset(self) -> None:
        """Back to the default delimiter with nothing decoded."""
        self.codec = QueryString()
        self.last = None


# ---------------------------------------------------------------------------
# CLI helpers
# ---------------------------------------------------------------------------

def _fmt_inline(value: Any) -> str:
    """Format a decoded value for compact one-line display."""
    if isinstance(value, _Absent):
        return "<absent>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, list):
        return "[" + ", ".join(_fmt_inline(v) for v in value) + "]"
    if isinstance(value, dict):
        return "{" + ", ".join(f"{k}: {_fmt_inline(v)}" for k, v in value.items()) + "}"
    return repr(value)


def _fmt_inspect(value: Any, depth: int = 0) -> str:
    """Pretty-print a decoded value as an indented tree."""
    pad = "  " * (depth + 1)
    if isinstance(value, dict):
        if not value:
            return "{}"
        lines = ["{"]
        for k, v in value.items():
            lines.append(f"{pad}{k}: {_fmt_inspect(v, depth + 1)}")
        lines.append("  " * depth + "}")
        return "\n".join(lines)

    if isinstance(value, list):
        if not value:
            return "[]"
        lines = ["["]
        for i, v in enumerate(value):
            lines.append(f"{pad}{i}: {_fmt_inspect(v, depth + 1)}")
        lines.append("  " * depth + "]")
        return "\n".join(lines)

    return _fmt_inline(value)


def _report(exc: Exception) -> None:
    print(f"Error: {exc}", file=sys.stderr)


def _decode_line(repl: QSRepl, text: str, dest: IO[str]) -> bool:
    try:
        result = repl.eval(text)
    except QSCoreError as exc:
        _report(exc)
        return False
    print(_fmt_inline(result), file=dest)
    return True


def _encode_line(repl: QSRepl, text: str, dest: IO[str]) -> bool:
    try:
        result = repl.encode(text)
    except (json.JSONDecodeError, QSCoreError) as exc:
        _report(exc)
        return False
    print(result, file=dest)
    return True


def _inspect_line(repl: QSRepl, text: str, dest: IO[str]) -> None:
    try:
        result = repl.eval(text)
    except QSCoreError as exc:
        _report(exc)
        return
    print(_fmt_inspect(result), file=dest)


def _run_file(repl: QSRepl, filepath: str, dest: IO[str]) -> None:
    try:
        with open(filepath, encoding="utf-8") as fh:
            for file_line in fh:
                _process_line(repl, file_line.rstrip("\n"), dest)
    except OSError as exc:
        print(f"Error reading '{filepath}': {exc}", file=sys.stderr)


def _process_line(repl: QSRepl, line: str, dest: IO[str]) -> bool:
    """Process one input line.  Returns False when the session should end."""
    line = line.strip()
    if not line:
        return True

    # ── Exit ──────────────────────────────────────────────────────────────
    if line in (":q", ":quit"):
        return False

    # ── Control commands ──────────────────────────────────────────────────
    if line.startswith(":delim "):
        try:
            repl.set_delimiter(line[len(":delim "):].strip())
        except ValueError as exc:
            _report(exc)
        return True

    if line == ":last":
        if repl.last is None:
            print("  (nothing decoded yet)", file=dest)
        else:
            print(_fmt_inspect(repl.last), file=dest)
        return True

    if line == ":reset":
        repl.reset()
        return True

    # ── inspect() / i() ───────────────────────────────────────────────────
    for prefix in ("inspect(", "i("):
        if line.startswith(prefix) and line.endswith(")"):
            _inspect_line(repl, line[len(prefix):-1].strip(), dest)
            return True

    # ── ? json ────────────────────────────────────────────────────────────
    if line.startswith("? "):
        _encode_line(repl, line[2:].strip(), dest)
        return True

    # ── Batch file ────────────────────────────────────────────────────────
    if line.startswith("?<< "):
        _run_file(repl, line[4:].strip(), dest)
        return True

    # ── Query string ──────────────────────────────────────────────────────
    _decode_line(repl, line, dest)
    return True


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qs-repl",
        description="Decode bracket-notation query strings, or encode JSON objects into them.",
    )
    parser.add_argument("inputs", nargs="*", metavar="INPUT",
                        help="Query strings to decode (JSON objects with --encode); starts a shell when omitted")
    parser.add_argument("--delimiter", "-d", default=DEFAULT_DELIMITER,
                        help=f"Segment delimiter (default: {DEFAULT_DELIMITER!r})")
    parser.add_argument("--encode", "-e", action="store_true", help="Treat inputs as JSON objects to encode")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log codec activity at DEBUG level")
    return parser


def _interactive(repl: QSRepl) -> None:
    dest: IO[str] = sys.stdout
    _file: IO[str] | None = None

    print("QS REPL  (:q to quit  |  :delim <d>  :last  :reset  |  ? <json>  inspect(<query>))")

    while True:
        try:
            line = input("QS> ").strip()
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print()
            continue

        if not line:
            continue

        # ── Output redirect: ?>> filepath  /  ?>> ─────────────────────────
        if line.startswith("?>> "):
            filepath = line[4:].strip()
            if _file:
                _file.close()
                _file = None
                dest = sys.stdout
            try:
                _file = open(filepath, "w", encoding="utf-8")
                dest = _file
            except OSError as exc:
                print(f"Error opening '{filepath}': {exc}", file=sys.stderr)
            continue

        if line == "?>>":
            if _file:
                _file.close()
                _file = None
            dest = sys.stdout
            continue

        if not _process_line(repl, line, dest):
            break

    if _file:
        _file.close()


def main(argv: list[str] | None = None) -> int:
    """``qs-repl`` / ``python -m qs_core.repl``."""
    args = create_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        repl = QSRepl(args.delimiter)
    except ValueError as exc:
        _report(exc)
        return 2

    if not args.inputs:
        _interactive(repl)
        return 0

    run = _encode_line if args.encode else _decode_line
    for text in args.inputs:
        if not run(repl, text, sys.stdout):
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
