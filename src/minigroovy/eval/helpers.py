from __future__ import annotations

from ..runtime import MgBool, MgValue

def is_truthy(val: MgValue) -> bool:
    """Only Boolean true is truthy; null and every other tag read as false."""
    match val:
        case MgBool(value=b):
            return b
        case _:
            return False
