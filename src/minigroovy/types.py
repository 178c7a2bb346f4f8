from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
from typing_extensions import TypeAlias

# ---------- Value Model ----------

@dataclass
class MgNull:
    def __repr__(self) -> str:
        return "null"

@dataclass
class MgBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass
class MgNumber:
    value: int
    def __repr__(self) -> str:
        return str(self.value)

@dataclass
class MgText:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass(eq=False)
class MgArray:
    items: List['MgValue']
    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.items) + "]"

@dataclass(eq=False)
class MgMap:
    slots: Dict[str, 'MgValue']
    def __repr__(self) -> str:
        if not self.slots:
            return "[:]"

        pairs = []

        for k, v in self.slots.items():
            pairs.append(f"{k}:{repr(v)}")

        return "[" + ", ".join(pairs) + "]"

MgValue: TypeAlias = (
    MgNull
    | MgBool
    | MgNumber
    | MgText
    | MgArray
    | MgMap
)

def type_name(value: MgValue) -> str:
    """Name used for a value's tag in diagnostics."""
    match value:
        case MgNull():
            return "null"
        case MgBool():
            return "Boolean"
        case MgNumber():
            return "Integer"
        case MgText():
            return "String"
        case MgArray():
            return "Array"
        case MgMap():
            return "Map"
        case _:
            raise MgTypeError(f"Unexpected value type {type(value).__name__}")

# ---------- Exceptions ----------

class MgRuntimeError(Exception):
    """Fatal evaluation fault; `line` is filled in by the evaluator if the raiser had none."""
    line: Optional[int]

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return self.message

        return format_diagnostic(self.line, self.message)

class MgTypeError(MgRuntimeError):
    pass

class MgIndexError(MgRuntimeError):
    def __init__(self, index: int, line: Optional[int] = None):
        super().__init__(f"Index {index} out of range", line)
        self.index = index

class MgKeyError(MgRuntimeError):
    def __init__(self, key: str, line: Optional[int] = None):
        super().__init__(f"Key '{key}' not found", line)
        self.key = key

class MgCastError(MgRuntimeError):
    def __init__(self, text: str, line: Optional[int] = None):
        super().__init__(f"Invalid integer [{text}]", line)
        self.text = text

def format_diagnostic(line: int, message: str) -> str:
    """`7, "boom"` -> `"07: boom"`."""
    return f"{line:02d}: {message}"

# ---------- Built-in registry ----------

BuiltinFn = Callable[['Frame', MgValue], MgValue]

class Builtins:
    functions: Dict[str, BuiltinFn] = {}
