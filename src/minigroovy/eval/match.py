"""
Switch expression evaluation.

The subject is evaluated once, then case keys in declaration order until one
is equal to it; only the winning case's result (or the default, when nothing
matched) is evaluated.
"""

from typing import Callable

from ..runtime import Frame, MgNull, MgValue
from ..tree import Expr, SwitchExpr
from ..utils import mg_equals

EvalFunc = Callable[[Expr, Frame], MgValue]


def eval_switch(n: SwitchExpr, frame: Frame, eval_func: EvalFunc) -> MgValue:
    subject = eval_func(n.subject, frame)

    for case in n.cases:
        if mg_equals(eval_func(case.key, frame), subject):
            return eval_func(case.value, frame)

    if n.default is not None:
        return eval_func(n.default, frame)

    return MgNull()
