"""Error taxonomy for QS Core."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .tokenizer import Token


class QSCoreError(Exception):
    """Base class for every failure raised by the codec."""


class QuerySyntaxError(QSCoreError):
    """Unexpected token at a decision point of the decoder."""

    def __init__(
        self,
        found: str,
        expected: tuple[str, ...],
        token: Token | None = None,
        segment: int | None = None,
    ) -> None:
        self.found = found
        self.expected = expected
        self.token = token
        self.segment = segment
        message = f"Syntax error: unexpected {found}"
        if expected:
            message += ", expecting " + " or ".join(expected)
        if segment is not None:
            message += f" (segment {segment})"
        super().__init__(message)


class DecodeError(QSCoreError):
    """A string run carries a malformed percent-escape."""

    def __init__(self, run: str, reason: str, segment: int | None = None) -> None:
        self.run = run
        self.segment = segment
        super().__init__(f"Decode error: {reason} in {run!r}")


class SerializationError(QSCoreError):
    """A value cannot be represented in a query string."""

    def __init__(self, label: str, value: object) -> None:
        self.label = label
        self.value = value
        where = f'key "{label}"' if label else "top-level value"
        super().__init__(
            f"Serialization error: value for {where} "
            f"({type(value).__name__}) is not serializable"
        )
