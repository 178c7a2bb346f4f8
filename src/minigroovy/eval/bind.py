from __future__ import annotations

from typing import Callable

from ..runtime import Frame, MgNull, MgRuntimeError, MgValue
from ..tree import Access, Assign, AssignOp, Expr, SetExpr, Variable
from .expr import apply_binary_operator
from .mutation import index_value, set_index_value

EvalFunc = Callable[[Expr, Frame], MgValue]

__all__ = [
    "eval_variable",
    "eval_access",
    "read_lvalue",
    "assign_lvalue",
    "eval_assign",
]

def eval_variable(n: Variable, frame: Frame) -> MgValue:
    return frame.lookup(n.name)

def eval_access(n: Access, frame: Frame, eval_func: EvalFunc) -> MgValue:
    recv = eval_func(n.base, frame)
    idx = eval_func(n.index, frame)

    return index_value(recv, idx)

def read_lvalue(target: SetExpr, frame: Frame, eval_func: EvalFunc) -> MgValue:
    match target:
        case Variable():
            return eval_variable(target, frame)
        case Access():
            return eval_access(target, frame, eval_func)

    raise MgRuntimeError("Assignment target must be a variable or an access")

def assign_lvalue(target: SetExpr, value: MgValue, frame: Frame, eval_func: EvalFunc) -> MgValue:
    """Write `value` through an assignable expression."""
    match target:
        case Variable(name=name):
            frame.assign(name, value)
            return value
        case Access(base=base, index=index):
            # the base evaluates to the live container, so the write is seen by every alias
            recv = eval_func(base, frame)
            idx = eval_func(index, frame)
            return set_index_value(recv, idx, value)

    raise MgRuntimeError("Assignment target must be a variable or an access")

def eval_assign(n: Assign, frame: Frame, eval_func: EvalFunc) -> None:
    op = n.op.binary()

    if n.op is AssignOp.STD or op is None:
        assign_lvalue(n.target, eval_func(n.value, frame), frame, eval_func)
        return

    current = read_lvalue(n.target, frame, eval_func)
    rhs = eval_func(n.value, frame)

    # compound ops on a target with no value behave like plain `=`
    if isinstance(current, MgNull):
        assign_lvalue(n.target, rhs, frame, eval_func)
        return

    assign_lvalue(n.target, apply_binary_operator(op, current, rhs), frame, eval_func)
