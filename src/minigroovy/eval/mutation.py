from __future__ import annotations

from ..runtime import (
    MgArray,
    MgIndexError,
    MgKeyError,
    MgMap,
    MgNull,
    MgNumber,
    MgText,
    MgTypeError,
    MgValue,
    type_name,
)

def index_value(recv: MgValue, idx: MgValue) -> MgValue:
    """Read `recv[idx]`; a missing element or key reads as null."""
    match recv:
        case MgArray(items=items):
            pos = _array_index(idx)

            if pos < 0 or pos >= len(items):
                return MgNull()

            return items[pos]
        case MgMap(slots=slots):
            return slots.get(_map_key(idx), MgNull())
        case _:
            raise MgTypeError(f"Cannot index {type_name(recv)}")

def set_index_value(recv: MgValue, idx: MgValue, value: MgValue) -> MgValue:
    """Assign `recv[idx] = value` through an element or key that already exists."""
    match recv:
        case MgArray(items=items):
            pos = _array_index(idx)

            if pos < 0 or pos >= len(items):
                raise MgIndexError(pos)

            items[pos] = value
            return value
        case MgMap(slots=slots):
            key = _map_key(idx)

            if key not in slots:
                raise MgKeyError(key)

            slots[key] = value
            return value
        case _:
            raise MgTypeError(f"Cannot assign into {type_name(recv)}")

def _array_index(idx: MgValue) -> int:
    if isinstance(idx, MgNumber):
        return idx.value

    raise MgTypeError(f"Array index must be Integer, got {type_name(idx)}")

def _map_key(idx: MgValue) -> str:
    if isinstance(idx, MgText):
        return idx.value

    raise MgTypeError(f"Map key must be String, got {type_name(idx)}")
