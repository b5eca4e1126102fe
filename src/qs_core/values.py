"""Value types for QS Core."""

from __future__ import annotations

import datetime
from collections.abc import Mapping, Sequence
from typing import Any, Union


class _Absent:
    """Singleton filling sequence slots created only to keep indices aligned."""

    _instance: "_Absent | None" = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Absent"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Absent":
        return self

    def __deepcopy__(self, memo: dict) -> "_Absent":
        return self

    def __reduce__(self) -> str:
        return "Absent"


Absent = _Absent()

# Scalars produced by decode(): strings, integers, and True for bare keys.
Scalar = Union[str, int, bool]
DecodedValue = Union[Scalar, "list[DecodedValue | _Absent]", "dict[str, DecodedValue]"]

# Anything encode() accepts at a leaf or container position.
EncodableValue = Union[
    None,
    _Absent,
    str,
    int,
    float,
    bool,
    datetime.date,
    Sequence[Any],
    Mapping[str, Any],
]
