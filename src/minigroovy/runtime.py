from __future__ import annotations

import importlib
import sys
from typing import Dict, List, Optional, TextIO
from typing_extensions import Protocol

from .types import (
    MgNull, MgBool, MgNumber, MgText, MgArray, MgMap,
    MgValue, type_name,
    MgRuntimeError, MgTypeError, MgIndexError, MgKeyError, MgCastError,
    format_diagnostic, Builtins, BuiltinFn,
)

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load the stdlib module (idempotent) so register_builtin hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("minigroovy.stdlib")
    _STDLIB_INITIALIZED = True

def register_builtin(name: str):
    def dec(fn: BuiltinFn):
        Builtins.functions[name] = fn
        return fn

    return dec

# ---------- Console ports ----------

class Console(Protocol):
    def write(self, text: str) -> None: ...
    def read_line(self) -> Optional[str]: ...

class StdConsole:
    """Console bound to the process streams (looked up lazily so capture works)."""

    def __init__(self, stdout: Optional[TextIO] = None, stdin: Optional[TextIO] = None):
        self._stdout = stdout
        self._stdin = stdin

    def write(self, text: str) -> None:
        out = self._stdout or sys.stdout
        out.write(text)
        out.flush()

    def read_line(self) -> Optional[str]:
        line = (self._stdin or sys.stdin).readline()

        if line == "":
            return None

        return line.rstrip("\r\n")

class BufferConsole:
    """In-memory console: queued input lines, accumulated output."""

    def __init__(self, input_text: str = ""):
        self.lines: List[str] = input_text.splitlines()
        self.output: List[str] = []

    def write(self, text: str) -> None:
        self.output.append(text)

    def read_line(self) -> Optional[str]:
        if not self.lines:
            return None

        return self.lines.pop(0)

    def getvalue(self) -> str:
        return "".join(self.output)

# ---------- Environment ----------

class Frame:
    def __init__(self, parent: Optional['Frame']=None, console: Optional[Console]=None):
        self.parent = parent
        self.vars: Dict[str, MgValue] = {}

        if console is not None:
            self.console: Console = console
        elif parent is not None:
            self.console = parent.console
        else:
            self.console = StdConsole()

    def define(self, name: str, val: MgValue) -> None:
        self.vars[name] = val

    def lookup(self, name: str) -> MgValue:
        """Current value of `name`; unbound names read as null."""
        if name in self.vars:
            return self.vars[name]

        if self.parent is not None:
            return self.parent.lookup(name)

        return MgNull()

    def assign(self, name: str, val: MgValue) -> None:
        """Overwrite the nearest binding of `name`, or create it here."""
        owner = self._owner(name)

        if owner is None:
            self.vars[name] = val
            return

        owner.vars[name] = val

    def _owner(self, name: str) -> Optional['Frame']:
        cur: Optional[Frame] = self

        while cur is not None:
            if name in cur.vars:
                return cur

            cur = cur.parent

        return None

    def is_bound(self, name: str) -> bool:
        return self._owner(name) is not None

__all__ = [
    "MgNull", "MgBool", "MgNumber", "MgText", "MgArray", "MgMap",
    "MgValue", "type_name",
    "MgRuntimeError", "MgTypeError", "MgIndexError", "MgKeyError", "MgCastError",
    "format_diagnostic", "Builtins", "BuiltinFn",
    "init_stdlib", "register_builtin",
    "Console", "StdConsole", "BufferConsole", "Frame",
]
