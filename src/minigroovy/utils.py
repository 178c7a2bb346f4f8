from __future__ import annotations

import os as _os
from typing import List, Optional

from .types import (
    MgValue,
    MgNull,
    MgNumber,
    MgText,
    MgBool,
    MgArray,
    MgMap,
)

PY_TRACE_ENV = "MINIGROOVY_DEBUG_PY_TRACE"
PARSE_TRACE_ENV = "MINIGROOVY_DEBUG_PARSE_TRACE"


def _env_flag(name: str) -> bool:
    return _os.environ.get(name, "") not in ("", "0", "false", "off")


def debug_py_trace_enabled() -> bool:
    """Print Python tracebacks alongside fatal diagnostics."""
    return _env_flag(PY_TRACE_ENV)


def debug_parse_trace_enabled() -> bool:
    """Echo every advance/eat/rollback of the analyzer to stderr."""
    return _env_flag(PARSE_TRACE_ENV)


def value_in_list(seq: List[MgValue], value: MgValue) -> bool:
    for existing in seq:
        if mg_equals(existing, value):
            return True

    return False


def mg_equals(lhs: MgValue, rhs: MgValue) -> bool:
    match (lhs, rhs):
        case (MgNull(), MgNull()):
            return True
        case (MgNumber(value=a), MgNumber(value=b)):
            return a == b
        case (MgText(value=a), MgText(value=b)):
            return a == b
        case (MgBool(value=a), MgBool(value=b)):
            return a == b
        case (MgArray(items=items_a), MgArray(items=items_b)):
            return len(items_a) == len(items_b) and all(
                mg_equals(a, b) for a, b in zip(items_a, items_b)
            )
        case (MgMap(slots=slots_a), MgMap(slots=slots_b)):
            return slots_a.keys() == slots_b.keys() and all(
                mg_equals(slots_a[k], slots_b[k]) for k in slots_a
            )
        case _:
            return False


def stringify(value: Optional[MgValue]) -> str:
    """Textual rendering used by print, `as String`, read prompts and map keys."""
    if isinstance(value, MgText):
        return value.value

    if isinstance(value, MgNumber):
        return str(value.value)

    if isinstance(value, MgBool):
        return "true" if value.value else "false"

    if isinstance(value, MgNull) or value is None:
        return "null"

    if isinstance(value, MgArray):
        return "[" + ", ".join(stringify(item) for item in value.items) + "]"

    if isinstance(value, MgMap):
        if not value.slots:
            return "[:]"

        return "[" + ", ".join(f"{k}:{stringify(v)}" for k, v in value.slots.items()) + "]"

    return str(value)
