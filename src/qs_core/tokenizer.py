"""Tokenizer: splits query-string text into a flat list of typed tokens."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from urllib.parse import unquote

from .errors import DecodeError


DEFAULT_DELIMITER = "&"

_DIGITS = frozenset("0123456789")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


# ---------------------------------------------------------------------------
# Token types
# ---------------------------------------------------------------------------

class TokenType(Enum):
    ASSIGN = auto()         # =
    ARRAY_OPEN = auto()     # [
    ARRAY_CLOSE = auto()    # ]
    SEGMENT_END = auto()    # delimiter boundary
    STRING = auto()
    NUMBER = auto()


_OPERATORS = {
    "=": TokenType.ASSIGN,
    "[": TokenType.ARRAY_OPEN,
    "]": TokenType.ARRAY_CLOSE,
}


@dataclass(frozen=True, slots=True)
class Token:
    type: TokenType
    value: str | int | None = None
    segment: int = 0  # index of the segment the token came from


def describe_token(token: Token | TokenType | None, delimiter: str = DEFAULT_DELIMITER) -> str:
    """Return the printable form of a token (or token type) for error messages."""
    kind = token.type if isinstance(token, Token) else token
    if kind is None:
        return "end of input"
    if kind is TokenType.ASSIGN:
        return '"="'
    if kind is TokenType.ARRAY_OPEN:
        return '"["'
    if kind is TokenType.ARRAY_CLOSE:
        return '"]"'
    if kind is TokenType.SEGMENT_END:
        return f'"{delimiter}"'
    if kind is TokenType.STRING:
        return "(string)"
    return "(number)"


# ---------------------------------------------------------------------------
# Lexical helpers
# ---------------------------------------------------------------------------

def is_number_run(run: str) -> bool:
    """True when *run* is non-empty and made only of ASCII digits.

    Signs, decimal points and non-ASCII digits all make the run a string.
    """
    return bool(run) and all(ch in _DIGITS for ch in run)


def percent_decode(run: str, segment: int | None = None) -> str:
    """Decode ``%XX`` escapes the way ``decodeURIComponent`` does.

    ``+`` is left alone. A ``%`` not followed by two hex digits, or escaped
    bytes that do not form valid UTF-8, raise :class:`DecodeError`.
    """
    if "%" not in run:
        return run
    bad = _BAD_ESCAPE_RE.search(run)
    if bad is not None:
        raise DecodeError(run, f"malformed escape at offset {bad.start()}", segment)
    try:
        return unquote(run, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as exc:
        raise DecodeError(run, "escaped bytes are not valid UTF-8", segment) from exc


def check_delimiter(delimiter: str) -> str:
    if not delimiter:
        raise ValueError("delimiter must be a non-empty string")
    if any(ch in _OPERATORS for ch in delimiter):
        raise ValueError(f"delimiter {delimiter!r} must not contain '=', '[' or ']'")
    return delimiter


# ---------------------------------------------------------------------------
# tokenize
# ---------------------------------------------------------------------------

def tokenize(text: str, delimiter: str = DEFAULT_DELIMITER) -> list[Token]:
    """Split *text* on *delimiter* and classify every segment's characters.

    Every segment, empty ones included, is closed by a SEGMENT_END token.
    Digit-only runs become NUMBER tokens holding an ``int`` (``"007"`` and
    ``"7"`` are the same token); other runs are percent-decoded STRINGs.
    """
    check_delimiter(delimiter)
    tokens: list[Token] = []

    for index, segment in enumerate(text.split(delimiter)):
        offs = 0
        slen = len(segment)

        while offs < slen:
            ch = segment[offs]
            if ch in _OPERATORS:
                tokens.append(Token(_OPERATORS[ch], segment=index))
                offs += 1
                continue

            start = offs
            while offs < slen and segment[offs] not in _OPERATORS:
                offs += 1
            run = segment[start:offs]

            if is_number_run(run):
                tokens.append(Token(TokenType.NUMBER, int(run), index))
            else:
                tokens.append(Token(TokenType.STRING, percent_decode(run, index), index))

        tokens.append(Token(TokenType.SEGMENT_END, segment=index))

    return tokens
