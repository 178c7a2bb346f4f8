"""Built-in unary functions (read, empty, size, keys, values) registered via runtime."""

from __future__ import annotations

from .runtime import (
    Frame,
    MgArray,
    MgBool,
    MgMap,
    MgNumber,
    MgText,
    MgTypeError,
    MgValue,
    register_builtin,
    type_name,
)
from .utils import stringify


def _reject(name: str, value: MgValue, expected: str) -> MgTypeError:
    return MgTypeError(f"{name}() expects {expected}, got {type_name(value)}")


@register_builtin("read")
def std_read(frame: Frame, prompt: MgValue) -> MgText:
    frame.console.write(stringify(prompt))
    line = frame.console.read_line()

    # end of input reads as empty text
    return MgText("" if line is None else line)


@register_builtin("empty")
def std_empty(_frame: Frame, value: MgValue) -> MgBool:
    match value:
        case MgText(value=text):
            return MgBool(len(text) == 0)
        case MgArray(items=items):
            return MgBool(len(items) == 0)
        case MgMap(slots=slots):
            return MgBool(len(slots) == 0)
        case _:
            raise _reject("empty", value, "String, Array or Map")


@register_builtin("size")
def std_size(_frame: Frame, value: MgValue) -> MgNumber:
    match value:
        case MgArray(items=items):
            return MgNumber(len(items))
        case MgMap(slots=slots):
            return MgNumber(len(slots))
        case _:
            raise _reject("size", value, "Array or Map")


@register_builtin("keys")
def std_keys(_frame: Frame, value: MgValue) -> MgArray:
    if not isinstance(value, MgMap):
        raise _reject("keys", value, "Map")

    return MgArray([MgText(key) for key in value.slots])


@register_builtin("values")
def std_values(_frame: Frame, value: MgValue) -> MgArray:
    if not isinstance(value, MgMap):
        raise _reject("values", value, "Map")

    return MgArray(list(value.slots.values()))
