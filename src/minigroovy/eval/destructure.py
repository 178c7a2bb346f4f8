from __future__ import annotations

from typing import Callable, List

from ..runtime import Frame, MgArray, MgNull, MgValue
from ..tree import DeclarationType2, Expr

EvalFn = Callable[[Expr, Frame], MgValue]


def destructure_values(value: MgValue, count: int) -> List[MgValue]:
    """Spread an array positionally over `count` names, or repeat a non-array value.

    Elements past `count` are dropped; names past the array's end get null.
    """
    if not isinstance(value, MgArray):
        return [value] * count

    items = list(value.items[:count])

    while len(items) < count:
        items.append(MgNull())

    return items


def eval_destructure(n: DeclarationType2, frame: Frame, eval_func: EvalFn) -> None:
    value = eval_func(n.value, frame)

    for name, item in zip(n.names, destructure_values(value, len(n.names))):
        frame.define(name, item)
