from __future__ import annotations

from typing import Callable

from ..runtime import Frame, MgNull, MgValue
from ..tree import DeclarationType1, Expr

EvalFn = Callable[[Expr, Frame], MgValue]


def eval_declaration(n: DeclarationType1, frame: Frame, eval_func: EvalFn) -> None:
    """`def a = 1, b` binds every pair in order; a missing initializer binds null."""
    for item in n.items:
        value = MgNull() if item.value is None else eval_func(item.value, frame)
        frame.define(item.name, value)
