"""AST node families built by the parser and walked by the evaluator.

Two closed families: Expr nodes produce a value, Command nodes execute for
effect. Every node is an immutable dataclass carrying the source line it
starts at. `as_lark_tree` renders any node as a Lark tree so the parsed
program can be pretty-printed and compared structurally.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from lark import Token, Tree
from typing_extensions import TypeAlias, TypeGuard

from .types import MgValue


class UnaryOp(Enum):
    NOT = "!"
    NEG = "-"
    READ = "read"
    EMPTY = "empty"
    SIZE = "size"
    KEYS = "keys"
    VALUES = "values"


class BinaryOp(Enum):
    AND = "&&"
    OR = "||"
    EQUAL = "=="
    NOT_EQUAL = "!="
    LOWER_THAN = "<"
    LOWER_EQUAL = "<="
    GREATER_THAN = ">"
    GREATER_EQUAL = ">="
    CONTAINS = "in"
    NOT_CONTAINS = "!in"
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    POWER = "**"


class CastOp(Enum):
    BOOLEAN = "Boolean"
    INTEGER = "Integer"
    STRING = "String"


class AssignOp(Enum):
    STD = "="
    ADD = "+="
    SUB = "-="
    MUL = "*="
    DIV = "/="
    MOD = "%="
    POWER = "**="

    def binary(self) -> Optional[BinaryOp]:
        """Binary operator a compound assignment combines with; None for plain `=`."""
        return _COMPOUND_TO_BINARY.get(self)


_COMPOUND_TO_BINARY = {
    AssignOp.ADD: BinaryOp.ADD,
    AssignOp.SUB: BinaryOp.SUB,
    AssignOp.MUL: BinaryOp.MUL,
    AssignOp.DIV: BinaryOp.DIV,
    AssignOp.MOD: BinaryOp.MOD,
    AssignOp.POWER: BinaryOp.POWER,
}

# ---------- Expr family ----------

@dataclass(frozen=True)
class Const:
    line: int
    value: MgValue

@dataclass(frozen=True)
class Variable:
    line: int
    name: str

@dataclass(frozen=True)
class Access:
    line: int
    base: Expr
    index: Expr

@dataclass(frozen=True)
class ArrayExpr:
    line: int
    items: Tuple[Expr, ...]

@dataclass(frozen=True)
class MapItem:
    key: str
    value: Expr

@dataclass(frozen=True)
class MapExpr:
    line: int
    items: Tuple[MapItem, ...]

@dataclass(frozen=True)
class CaseItem:
    key: Expr
    value: Expr

@dataclass(frozen=True)
class SwitchExpr:
    line: int
    subject: Expr
    cases: Tuple[CaseItem, ...]
    default: Optional[Expr] = None

@dataclass(frozen=True)
class UnaryExpr:
    line: int
    op: UnaryOp
    operand: Expr

@dataclass(frozen=True)
class BinaryExpr:
    line: int
    left: Expr
    op: BinaryOp
    right: Expr

@dataclass(frozen=True)
class CastExpr:
    line: int
    op: CastOp
    operand: Expr

# ---------- Command family ----------

@dataclass(frozen=True)
class Blocks:
    line: int
    commands: Tuple[Command, ...]

@dataclass(frozen=True)
class DeclItem:
    name: str
    value: Optional[Expr] = None

@dataclass(frozen=True)
class DeclarationType1:
    line: int
    items: Tuple[DeclItem, ...]

@dataclass(frozen=True)
class DeclarationType2:
    line: int
    names: Tuple[str, ...]
    value: Expr

@dataclass(frozen=True)
class Assign:
    line: int
    target: SetExpr
    op: AssignOp
    value: Expr

@dataclass(frozen=True)
class Print:
    line: int
    value: Expr
    newline: bool

@dataclass(frozen=True)
class If:
    line: int
    cond: Expr
    then: Command
    orelse: Optional[Command] = None

@dataclass(frozen=True)
class While:
    line: int
    cond: Expr
    body: Command

@dataclass(frozen=True)
class For:
    line: int
    init: Optional[Command]
    cond: Optional[Expr]
    step: Optional[Command]
    body: Command

@dataclass(frozen=True)
class Foreach:
    line: int
    name: str
    source: Expr
    body: Command


SetExpr: TypeAlias = Union[Variable, Access]

Expr: TypeAlias = Union[
    Const,
    Variable,
    Access,
    ArrayExpr,
    MapExpr,
    SwitchExpr,
    UnaryExpr,
    BinaryExpr,
    CastExpr,
]

Command: TypeAlias = Union[
    Blocks,
    DeclarationType1,
    DeclarationType2,
    Assign,
    Print,
    If,
    While,
    For,
    Foreach,
]

Node: TypeAlias = Union[Expr, Command]

_EXPR_TYPES = (Const, Variable, Access, ArrayExpr, MapExpr, SwitchExpr, UnaryExpr, BinaryExpr, CastExpr)
_COMMAND_TYPES = (Blocks, DeclarationType1, DeclarationType2, Assign, Print, If, While, For, Foreach)

def is_expr(node: object) -> TypeGuard[Expr]:
    return isinstance(node, _EXPR_TYPES)

def is_command(node: object) -> TypeGuard[Command]:
    return isinstance(node, _COMMAND_TYPES)

def is_assignable(node: object) -> TypeGuard[SetExpr]:
    return isinstance(node, (Variable, Access))

# ---------- Lark rendering ----------

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

def node_label(node: object) -> str:
    """`DeclarationType1` -> `declaration_type1`, `If` -> `if`."""
    return _CAMEL_RE.sub("_", type(node).__name__).lower()

def as_lark_tree(node: object) -> Tree:
    """Render a node (and everything below it) as a `lark.Tree`.

    Child nodes become subtrees, operator tags and names become tokens,
    tuples become a subtree labelled with the field name, and absent
    optional parts are omitted.
    """
    children = []

    for f in fields(node):
        if f.name == "line":
            continue

        child = _render_field(f.name, getattr(node, f.name))
        if child is not None:
            children.append(child)

    return Tree(node_label(node), children)

def _render_field(name: str, value: object) -> Optional[Union[Tree, Token]]:
    if value is None:
        return None

    if isinstance(value, Enum):
        return Token("OP", value.value)

    if isinstance(value, bool):
        return Token(name.upper(), "true" if value else "false")

    if isinstance(value, str):
        return Token("NAME", value)

    if isinstance(value, tuple):
        items = [_render_field(name, item) for item in value]
        return Tree(name, [item for item in items if item is not None])

    if is_dataclass(value) and (is_expr(value) or is_command(value) or isinstance(value, (MapItem, CaseItem, DeclItem))):
        return as_lark_tree(value)

    # embedded runtime value of a Const
    return Token("VALUE", repr(value))

def pretty(node: Node) -> str:
    return as_lark_tree(node).pretty()
