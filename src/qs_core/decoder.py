"""Decoder: builds a nested mapping from a bracket-notation query string."""

from __future__ import annotations

import logging
from collections import deque
from typing import Any

from .errors import QuerySyntaxError
from .tokenizer import DEFAULT_DELIMITER, Token, TokenType, describe_token, tokenize
from .values import Absent, DecodedValue

logger = logging.getLogger(__name__)

T = TokenType

# Highest explicit list index accepted; a[N] pads the list up to N
MAX_INDEX = 10_000


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def decode(text: str, delimiter: str = DEFAULT_DELIMITER) -> dict[str, DecodedValue]:
    """Decode *text* into a dict of top-level keys.

    Raises :class:`QuerySyntaxError` or :class:`DecodeError`; nothing is
    returned for input that fails part way through.
    """
    parser = _Parser(tokenize(text, delimiter), delimiter)
    result = parser.parse()
    logger.debug(
        "Decoded %d top-level keys from %d tokens (delimiter=%r)",
        len(result), parser.consumed, delimiter,
    )
    return result


# ---------------------------------------------------------------------------
# Parser context (one per decode() call)
# ---------------------------------------------------------------------------

class _Parser:
    """Descent state for a single decode() call.

    ``collect`` decides what follows a key or index; ``access`` handles one
    ``[...]`` level and returns the ``(parent, key)`` handle of the slot it
    selected.  Values are written back through ``parent[key]``.
    """

    def __init__(self, tokens: list[Token], delimiter: str) -> None:
        self.tokens: deque[Token] = deque(tokens)
        self.delimiter = delimiter
        self.consumed = 0

    # -- Token stream ---------------------------------------------------

    def next(self) -> Token | None:
        if not self.tokens:
            return None
        self.consumed += 1
        return self.tokens.popleft()

    def peek(self, seek: int = 0) -> Token | None:
        if seek < len(self.tokens):
            return self.tokens[seek]
        return None

    def expect(self, *kinds: TokenType) -> Token:
        """Consume the next token, which must be one of *kinds*."""
        token = self.next()
        if token is None or token.type not in kinds:
            raise self.unexpected(token, kinds)
        return token

    def unexpected(self, token: Token | None, kinds: tuple[TokenType, ...]) -> QuerySyntaxError:
        return QuerySyntaxError(
            describe_token(token, self.delimiter),
            tuple(describe_token(k, self.delimiter) for k in kinds),
            token=token,
            segment=token.segment if token is not None else None,
        )

    # -- Grammar --------------------------------------------------------

    def parse(self) -> dict[str, DecodedValue]:
        result: dict[str, Any] = {}
        while self.tokens:
            name = self.expect(T.STRING).value
            if name not in result:
                result[name] = self.init()
            self.collect(result, name)
        return result

    def init(self) -> list | dict | None:
        """Pick the container for a fresh slot by looking ahead only.

        ``[]`` or ``[N]`` next means a list, ``[name]`` a dict; anything
        else leaves the slot to be assigned a scalar (``None`` placeholder).
        """
        nxt = self.peek()
        if nxt is None or nxt.type is not T.ARRAY_OPEN:
            return None

        after = self.peek(1)
        kind = after.type if after is not None else None
        if kind is T.ARRAY_CLOSE or kind is T.NUMBER:
            return []
        if kind is T.STRING:
            return {}
        raise self.unexpected(after, (T.ARRAY_CLOSE, T.NUMBER, T.STRING))

    def collect(self, parent: Any, key: str | int) -> None:
        """Follow ``[...]`` levels from ``parent[key]`` down to the assignment.

        Each ``access`` hands back the handle of the next slot, so nesting
        depth costs no stack frames.
        """
        while True:
            token = self.next()
            kind = token.type if token is not None else None

            if kind is T.ARRAY_OPEN:
                value = parent[key]
                if not isinstance(value, (list, dict)):
                    # Slot already holds a scalar from an earlier segment
                    raise self.unexpected(token, (T.ASSIGN, T.SEGMENT_END))
                parent, key = self.access(value)

            elif kind is T.ASSIGN:
                parent[key] = self.expect(T.STRING, T.NUMBER).value
                self.expect(T.SEGMENT_END)
                return

            elif kind is T.SEGMENT_END:
                parent[key] = True
                return

            else:
                raise self.unexpected(token, (T.ARRAY_OPEN, T.ASSIGN, T.SEGMENT_END))

    def access(self, host: list | dict) -> tuple[Any, str | int]:
        if isinstance(host, list):
            return self._access_list(host)
        return self._access_dict(host)

    def _access_list(self, host: list) -> tuple[list, int]:
        token = self.next()
        kind = token.type if token is not None else None

        if kind is T.ARRAY_CLOSE:
            # a[]= appends at the next free index
            host.append(self.init())
            return host, len(host) - 1

        if kind is not T.NUMBER:
            raise self.unexpected(token, (T.ARRAY_CLOSE, T.NUMBER))

        index = token.value
        if index > MAX_INDEX:
            raise QuerySyntaxError(
                f"index {index}", (f"an index up to {MAX_INDEX}",),
                token=token, segment=token.segment,
            )
        self.expect(T.ARRAY_CLOSE)
        if index >= len(host):
            host.extend([Absent] * (index - len(host)))
            host.append(self.init())
        elif host[index] is Absent:
            host[index] = self.init()
        return host, index

    def _access_dict(self, host: dict) -> tuple[dict, str]:
        token = self.next()
        kind = token.type if token is not None else None

        if kind is not T.STRING and kind is not T.NUMBER:
            raise self.unexpected(token, (T.STRING, T.NUMBER))

        name = str(token.value)
        self.expect(T.ARRAY_CLOSE)
        if name not in host:
            host[name] = self.init()
        return host, name
