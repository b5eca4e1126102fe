"""QueryString — a delimiter bound once, decode/encode as methods."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .decoder import decode
from .encoder import encode
from .tokenizer import DEFAULT_DELIMITER, Token, check_delimiter, tokenize
from .values import DecodedValue


@dataclass(frozen=True, slots=True)
class QueryString:
    """Codec configuration.

    Usage::

        qs = QueryString(delimiter=";")
        qs.decode("a[]=1;a[]=2")   # → {"a": [1, 2]}
        qs.encode({"a": [1, 2]})   # → "a[0]=1;a[1]=2"

    Instances hold no per-call state and can be shared freely.
    """

    delimiter: str = DEFAULT_DELIMITER

    def __post_init__(self) -> None:
        check_delimiter(self.delimiter)

    def tokenize(self, text: str) -> list[Token]:
        return tokenize(text, self.delimiter)

    def decode(self, text: str) -> dict[str, DecodedValue]:
        return decode(text, self.delimiter)

    def encode(self, value: Mapping[str, Any]) -> str:
        return encode(value, self.delimiter)
