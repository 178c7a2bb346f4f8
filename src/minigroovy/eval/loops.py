from __future__ import annotations

from typing import Callable

from ..runtime import Frame, MgArray, MgTypeError, MgValue, type_name
from ..tree import Command, Expr, For, Foreach, If, While
from .helpers import is_truthy as _is_truthy

EvalFunc = Callable[[Expr, Frame], MgValue]
ExecFunc = Callable[[Command, Frame], None]

def eval_if_stmt(n: If, frame: Frame, eval_func: EvalFunc, exec_func: ExecFunc) -> None:
    if _is_truthy(eval_func(n.cond, frame)):
        exec_func(n.then, frame)
        return

    if n.orelse is not None:
        exec_func(n.orelse, frame)

def eval_while(n: While, frame: Frame, eval_func: EvalFunc, exec_func: ExecFunc) -> None:
    while _is_truthy(eval_func(n.cond, frame)):
        exec_func(n.body, frame)

def eval_for(n: For, frame: Frame, eval_func: EvalFunc, exec_func: ExecFunc) -> None:
    if n.init is not None:
        exec_func(n.init, frame)

    while True:
        # an omitted condition never stops the loop
        if n.cond is not None and not _is_truthy(eval_func(n.cond, frame)):
            return

        exec_func(n.body, frame)

        if n.step is not None:
            exec_func(n.step, frame)

def eval_foreach(n: Foreach, frame: Frame, eval_func: EvalFunc, exec_func: ExecFunc) -> None:
    source = eval_func(n.source, frame)

    if not isinstance(source, MgArray):
        raise MgTypeError(f"foreach expects Array, got {type_name(source)}")

    # snapshot: body mutations of the source do not change the iteration
    for element in list(source.items):
        frame.define(n.name, element)
        exec_func(n.body, frame)
