from __future__ import annotations

from typing import Optional

from .runtime import (
    Frame,
    MgRuntimeError,
    MgValue,
    init_stdlib,
)

from .tree import (
    Access,
    ArrayExpr,
    Assign,
    BinaryExpr,
    Blocks,
    CastExpr,
    Command,
    Const,
    DeclarationType1,
    DeclarationType2,
    Expr,
    For,
    Foreach,
    If,
    MapExpr,
    Node,
    Print,
    SwitchExpr,
    UnaryExpr,
    Variable,
    While,
)

from .eval.bind import eval_access, eval_assign, eval_variable
from .eval.blocks import eval_blocks, eval_print
from .eval.destructure import eval_destructure
from .eval.expr import eval_binary, eval_cast, eval_unary
from .eval.let import eval_declaration
from .eval.literals import eval_array_literal, eval_const, eval_map_literal
from .eval.loops import eval_for, eval_foreach, eval_if_stmt, eval_while
from .eval.match import eval_switch


RECURSION_MESSAGE = "Recursion limit exceeded"

def _maybe_attach_location(exc: MgRuntimeError, node: Node) -> None:
    # the innermost node to see the error owns its line
    if exc.line is not None:
        return

    line = getattr(node, "line", None)
    if line is not None:
        exc.line = line

# ---------------- Public API ----------------

def eval_expr(ast: Expr, frame: Optional[Frame]=None) -> MgValue:
    init_stdlib()

    if frame is None:
        frame = Frame()

    return eval_node(ast, frame)

def execute(ast: Command, frame: Optional[Frame]=None) -> Frame:
    init_stdlib()

    if frame is None:
        frame = Frame()

    exec_node(ast, frame)
    return frame

# ---------------- Core evaluator ----------------

def eval_node(n: Expr, frame: Frame) -> MgValue:
    try:
        return _eval_node_inner(n, frame)
    except MgRuntimeError as e:
        _maybe_attach_location(e, n)
        raise
    except RecursionError as e:
        raise MgRuntimeError(RECURSION_MESSAGE, n.line) from e

def _eval_node_inner(n: Expr, frame: Frame) -> MgValue:
    match n:
        case Const():
            return eval_const(n)
        case Variable():
            return eval_variable(n, frame)
        case Access():
            return eval_access(n, frame, eval_node)
        case ArrayExpr():
            return eval_array_literal(n, frame, eval_node)
        case MapExpr():
            return eval_map_literal(n, frame, eval_node)
        case SwitchExpr():
            return eval_switch(n, frame, eval_node)
        case UnaryExpr():
            return eval_unary(n, frame, eval_node)
        case BinaryExpr():
            return eval_binary(n, frame, eval_node)
        case CastExpr():
            return eval_cast(n, frame, eval_node)
        case _:
            raise MgRuntimeError(f"Unknown expression node: {type(n).__name__}")

def exec_node(n: Command, frame: Frame) -> None:
    try:
        _exec_node_inner(n, frame)
    except MgRuntimeError as e:
        _maybe_attach_location(e, n)
        raise
    except RecursionError as e:
        raise MgRuntimeError(RECURSION_MESSAGE, n.line) from e

def _exec_node_inner(n: Command, frame: Frame) -> None:
    match n:
        case Blocks():
            eval_blocks(n, frame, exec_node)
        case DeclarationType1():
            eval_declaration(n, frame, eval_node)
        case DeclarationType2():
            eval_destructure(n, frame, eval_node)
        case Assign():
            eval_assign(n, frame, eval_node)
        case Print():
            eval_print(n, frame, eval_node)
        case If():
            eval_if_stmt(n, frame, eval_node, exec_node)
        case While():
            eval_while(n, frame, eval_node, exec_node)
        case For():
            eval_for(n, frame, eval_node, exec_node)
        case Foreach():
            eval_foreach(n, frame, eval_node, exec_node)
        case _:
            raise MgRuntimeError(f"Unknown command node: {type(n).__name__}")
