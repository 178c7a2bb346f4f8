from __future__ import annotations

from typing import Callable, Dict, List

from ..runtime import Frame, MgArray, MgMap, MgValue
from ..tree import ArrayExpr, Const, Expr, MapExpr

EvalFunc = Callable[[Expr, Frame], MgValue]

def eval_const(n: Const) -> MgValue:
    return n.value

def eval_array_literal(n: ArrayExpr, frame: Frame, eval_func: EvalFunc) -> MgArray:
    items: List[MgValue] = []

    for item in n.items:
        items.append(eval_func(item, frame))

    return MgArray(items)

def eval_map_literal(n: MapExpr, frame: Frame, eval_func: EvalFunc) -> MgMap:
    slots: Dict[str, MgValue] = {}

    # a repeated key keeps its last value
    for item in n.items:
        slots[item.key] = eval_func(item.value, frame)

    return MgMap(slots)
