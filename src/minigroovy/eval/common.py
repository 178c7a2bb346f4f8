from __future__ import annotations

from typing import Any

from ..runtime import MgNumber, MgTypeError, MgValue, type_name
from ..utils import stringify

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

def to_int32(value: int) -> int:
    """Wrap to 32-bit two's complement."""
    return (value - INT32_MIN) % (2 ** 32) + INT32_MIN

def saturate_int32(value: int) -> int:
    return max(INT32_MIN, min(INT32_MAX, value))

def number(value: int) -> MgNumber:
    return MgNumber(to_int32(value))

def require_number(value: Any, op: str) -> int:
    if isinstance(value, MgNumber):
        return value.value

    raise MgTypeError(f"Operator '{op}' expects Integer, got {type_name(value)}")

def unsupported(op: str, *values: MgValue) -> MgTypeError:
    tags = ", ".join(type_name(v) for v in values)
    return MgTypeError(f"Operator '{op}' not supported for {tags}")

__all__ = [
    "INT32_MIN",
    "INT32_MAX",
    "to_int32",
    "saturate_int32",
    "number",
    "require_number",
    "unsupported",
    "stringify",
]
