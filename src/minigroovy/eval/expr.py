from __future__ import annotations

from typing import Callable

from ..runtime import (
    Builtins,
    Frame,
    MgArray,
    MgBool,
    MgCastError,
    MgMap,
    MgNull,
    MgNumber,
    MgRuntimeError,
    MgText,
    MgTypeError,
    MgValue,
    type_name,
)
from ..tree import BinaryExpr, BinaryOp, CastExpr, CastOp, Expr, UnaryExpr, UnaryOp
from ..utils import mg_equals, value_in_list
from .common import INT32_MAX, INT32_MIN, number, require_number, saturate_int32, stringify, unsupported
from .helpers import is_truthy

EvalFunc = Callable[[Expr, Frame], MgValue]

def eval_unary(n: UnaryExpr, frame: Frame, eval_func: EvalFunc) -> MgValue:
    operand = eval_func(n.operand, frame)

    match n.op:
        case UnaryOp.NOT:
            return MgBool(not is_truthy(operand))
        case UnaryOp.NEG:
            return number(-require_number(operand, "-"))
        case _:
            builtin = Builtins.functions.get(n.op.value)

            if builtin is None:
                raise MgRuntimeError(f"Unknown built-in '{n.op.value}'")

            return builtin(frame, operand)

def eval_binary(n: BinaryExpr, frame: Frame, eval_func: EvalFunc) -> MgValue:
    # both sides always evaluate, && and || included
    lhs = eval_func(n.left, frame)
    rhs = eval_func(n.right, frame)

    return apply_binary_operator(n.op, lhs, rhs)

def apply_binary_operator(op: BinaryOp, lhs: MgValue, rhs: MgValue) -> MgValue:
    match op:
        case BinaryOp.AND:
            return MgBool(is_truthy(lhs) and is_truthy(rhs))
        case BinaryOp.OR:
            return MgBool(is_truthy(lhs) or is_truthy(rhs))
        case BinaryOp.EQUAL:
            return MgBool(mg_equals(lhs, rhs))
        case BinaryOp.NOT_EQUAL:
            return MgBool(not mg_equals(lhs, rhs))
        case BinaryOp.LOWER_THAN | BinaryOp.LOWER_EQUAL | BinaryOp.GREATER_THAN | BinaryOp.GREATER_EQUAL:
            return MgBool(_compare(op, lhs, rhs))
        case BinaryOp.CONTAINS:
            return MgBool(_contains(rhs, lhs))
        case BinaryOp.NOT_CONTAINS:
            return MgBool(not _contains(rhs, lhs))
        case BinaryOp.ADD:
            return _add(lhs, rhs)

    a = require_number(lhs, op.value)
    b = require_number(rhs, op.value)

    match op:
        case BinaryOp.SUB:
            return number(a - b)
        case BinaryOp.MUL:
            return number(a * b)
        case BinaryOp.DIV:
            _require_divisor(b)
            quotient = abs(a) // abs(b)
            return number(quotient if (a < 0) == (b < 0) else -quotient)
        case BinaryOp.MOD:
            _require_divisor(b)
            remainder = abs(a) % abs(b)
            return number(-remainder if a < 0 else remainder)
        case BinaryOp.POWER:
            return MgNumber(_power(a, b))

    raise MgRuntimeError(f"Unknown operator {op.value}")

def _add(lhs: MgValue, rhs: MgValue) -> MgValue:
    match (lhs, rhs):
        case (MgNumber(value=a), MgNumber(value=b)):
            return number(a + b)
        case (MgText(value=a), MgText(value=b)):
            return MgText(a + b)
        case (MgArray(items=a), MgArray(items=b)):
            return MgArray(list(a) + list(b))
        case (MgMap(slots=a), MgMap(slots=b)):
            merged = dict(a)
            merged.update(b)
            return MgMap(merged)
        case _:
            raise unsupported("+", lhs, rhs)

def _require_divisor(value: int) -> None:
    if value == 0:
        raise MgTypeError("division by zero")

def _power(base: int, exp: int) -> int:
    """Floating-point power truncated toward zero, saturated to 32 bits."""
    if exp < 0:
        if base == 0:
            return INT32_MAX
        if base == 1:
            return 1
        if base == -1:
            return 1 if exp % 2 == 0 else -1
        return 0

    if abs(base) <= 1:
        return base ** exp

    if exp > 64:
        negative = base < 0 and exp % 2 == 1
        return INT32_MIN if negative else INT32_MAX

    return saturate_int32(base ** exp)

def _compare(op: BinaryOp, lhs: MgValue, rhs: MgValue) -> bool:
    a = require_number(lhs, op.value)
    b = require_number(rhs, op.value)

    match op:
        case BinaryOp.LOWER_THAN:
            return a < b
        case BinaryOp.LOWER_EQUAL:
            return a <= b
        case BinaryOp.GREATER_THAN:
            return a > b
        case BinaryOp.GREATER_EQUAL:
            return a >= b
        case _:
            raise MgRuntimeError(f"Unknown comparator {op.value}")

def _contains(container: MgValue, item: MgValue) -> bool:
    match container:
        case MgArray(items=items):
            return value_in_list(items, item)
        case MgMap(slots=slots):
            return stringify(item) in slots
        case _:
            raise MgTypeError(f"Operator 'in' expects Array or Map on the right, got {type_name(container)}")

def eval_cast(n: CastExpr, frame: Frame, eval_func: EvalFunc) -> MgValue:
    value = eval_func(n.operand, frame)

    match n.op:
        case CastOp.STRING:
            return MgText(stringify(value))
        case CastOp.BOOLEAN:
            return cast_boolean(value)
        case CastOp.INTEGER:
            return cast_integer(value)

    raise MgRuntimeError(f"Unknown cast {n.op.value}")

def cast_boolean(value: MgValue) -> MgBool:
    match value:
        case MgBool():
            return value
        case MgNull():
            return MgBool(False)
        case MgNumber(value=num):
            return MgBool(num != 0)
        case MgText(value=text):
            return MgBool(text != "")
        case _:
            raise MgTypeError(f"Cannot cast {type_name(value)} to Boolean")

def cast_integer(value: MgValue) -> MgNumber:
    match value:
        case MgNumber():
            return value
        case MgBool(value=b):
            return MgNumber(1 if b else 0)
        case MgText(value=text):
            return MgNumber(parse_integer(text))
        case _:
            raise MgTypeError(f"Cannot cast {type_name(value)} to Integer")

def parse_integer(text: str) -> int:
    """Optional sign then decimal digits, nothing else; must fit in 32 bits."""
    digits = text[1:] if text[:1] in ("+", "-") else text

    if not digits or not (digits.isascii() and digits.isdigit()):
        raise MgCastError(text)

    value = int(text)
    if not INT32_MIN <= value <= INT32_MAX:
        raise MgCastError(text)

    return value
