"""Encoder: writes a nested mapping back out in bracket notation."""

from __future__ import annotations

import datetime
import logging
import math
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from .errors import SerializationError
from .tokenizer import DEFAULT_DELIMITER, check_delimiter, is_number_run
from .values import Absent

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves untouched besides letters, digits and "_.-~"
_SAFE = "!*'()"

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)

# Stack marker paired with a container id once its children are done
_LEAVE = object()


def percent_encode(text: str) -> str:
    """Escape *text* the way ``encodeURIComponent`` does."""
    return quote(text, safe=_SAFE, encoding="utf-8", errors="strict")


def encode(value: Mapping[str, Any], delimiter: str = DEFAULT_DELIMITER) -> str:
    """Encode a mapping as a query string.

    Keys whose value serializes to nothing (``None``, ``Absent``, empty
    containers) are left out entirely.

    Examples::

        encode({"a": [1, 2, 3]})          # "a[0]=1&a[1]=2&a[2]=3"
        encode({"a": {"b": "x y"}})       # "a[b]=x%20y"
        encode({"a": None, "b": True})    # "b=1"
    """
    check_delimiter(delimiter)
    if not isinstance(value, Mapping):
        raise SerializationError("", value)

    serializer = _Serializer(delimiter)
    parts = []
    for key, item in value.items():
        encoded = serializer.serialize(item, escape_key(key))
        if encoded:
            parts.append(encoded)

    logger.debug("Encoded %d of %d top-level keys (delimiter=%r)", len(parts), len(value), delimiter)
    return delimiter.join(parts)


class _Serializer:
    """Per-call encoding context; holds only the delimiter.

    Containers are walked with an explicit stack, so nesting depth is not
    bounded by the interpreter's recursion limit.
    """

    def __init__(self, delimiter: str) -> None:
        self.delimiter = delimiter

    def serialize(self, value: Any, label: str) -> str:
        parts = []
        open_ids: set[int] = set()
        stack: list[tuple[Any, Any]] = [(value, label)]

        while stack:
            value, label = stack.pop()
            if value is _LEAVE:
                open_ids.discard(label)
                continue
            if isinstance(value, (list, tuple, Mapping)):
                if id(value) in open_ids:
                    raise SerializationError(label, value)
                open_ids.add(id(value))
                stack.append((_LEAVE, id(value)))
                stack.extend(reversed(self.access(value, label)))
                continue
            encoded = self.scalar(value, label)
            if encoded:
                parts.append(encoded)

        return self.delimiter.join(parts)

    def scalar(self, value: Any, label: str) -> str:
        if value is None or value is Absent:
            return ""
        # bool before int: True is an int
        if isinstance(value, bool):
            return f"{label}={1 if value else 0}"
        if isinstance(value, int):
            return f"{label}={value}"
        if isinstance(value, float):
            return f"{label}={_format_float(value, label)}"
        if isinstance(value, str):
            return f"{label}={_escape(value, label)}"
        if isinstance(value, datetime.date):
            return f"{label}={_timestamp_ms(value)}"
        raise SerializationError(label, value)

    def access(self, container: list | tuple | Mapping, label: str) -> list[tuple[Any, str]]:
        """Children of *container* paired with their bracket labels."""
        if isinstance(container, Mapping):
            return [(v, f"{label}[{escape_key(k, label)}]") for k, v in container.items()]
        return [(v, f"{label}[{i}]") for i, v in enumerate(container)]


def escape_key(key: Any, label: str = "") -> str:
    """Escape a mapping key; digit-only keys are fully escaped so they read back as strings."""
    text = str(key)
    if is_number_run(text):
        return "".join(f"%{ord(ch):02X}" for ch in text)
    return _escape(text, label or text)


def _escape(text: str, label: str) -> str:
    try:
        return percent_encode(text)
    except UnicodeEncodeError as exc:
        # lone surrogates have no UTF-8 form
        raise SerializationError(label, text) from exc


def _format_float(value: float, label: str) -> str:
    if not math.isfinite(value):
        raise SerializationError(label, value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _timestamp_ms(value: datetime.date) -> int:
    """Milliseconds since the epoch; plain dates count from UTC midnight."""
    if isinstance(value, datetime.datetime):
        return int(round(value.timestamp() * 1000))
    midnight = datetime.datetime(value.year, value.month, value.day, tzinfo=datetime.timezone.utc)
    return (midnight - _EPOCH) // datetime.timedelta(milliseconds=1)
