from __future__ import annotations

from typing import List

import pytest
from lark import Token, Tree

from minigroovy.lexer_rd import Lexer
from minigroovy.parser_rd import ParseError, Parser, parse_expr_fragment, parse_source
from minigroovy.runtime import MgNumber, MgText
from minigroovy.token_types import TT, Tok
from minigroovy.tree import (
    Access,
    ArrayExpr,
    Assign,
    AssignOp,
    BinaryExpr,
    BinaryOp,
    Blocks,
    CastExpr,
    CastOp,
    Const,
    DeclarationType1,
    For,
    MapExpr,
    UnaryExpr,
    UnaryOp,
    Variable,
)
from minigroovy.utils import PARSE_TRACE_ENV
from tests.support.harness import parse_pipeline


class _CountingStream:
    """Token source that records every pull from the underlying lexer."""

    def __init__(self, source: str) -> None:
        self._lexer = Lexer(source)
        self.pulled: List[Tok] = []

    def next_token(self) -> Tok:
        tok = self._lexer.next_token()
        self.pulled.append(tok)
        return tok


def _count_nodes(tree: Tree, name: str) -> int:
    count = 0

    def walk(node: object) -> None:
        nonlocal count
        if not isinstance(node, Tree):
            return
        if node.data == name:
            count += 1
        for child in node.children:
            walk(child)

    walk(tree)
    return count


def _only_command(source: str):
    program = parse_source(source)
    assert isinstance(program, Blocks)
    assert len(program.commands) == 1
    return program.commands[0]


def test_rollback_replays_without_pulling_again() -> None:
    stream = _CountingStream("a : b")
    parser = Parser(stream, trace=False)

    assert parser.advance().value == "a"
    assert parser.current.type is TT.COLON

    parser.rollback()
    assert parser.current.value == "a"

    assert parser.advance().value == "a"
    assert parser.current.type is TT.COLON
    assert parser.advance().type is TT.COLON
    assert parser.current.value == "b"

    assert [tok.value for tok in stream.pulled] == ["a", ":", "b"]


def test_rollback_depth_is_one() -> None:
    parser = Parser(Lexer("a b c"), trace=False)
    parser.advance()
    parser.advance()
    parser.rollback()

    with pytest.raises(ParseError) as exc_info:
        parser.rollback()

    assert exc_info.value.message == "Nothing to roll back"


def test_rollback_needs_history() -> None:
    parser = Parser(Lexer("a"), trace=False)

    with pytest.raises(ParseError):
        parser.rollback()


def test_eat_reports_current_lexeme() -> None:
    parser = Parser(Lexer("( x"), trace=False)
    parser.eat(TT.OPEN_PAR)

    with pytest.raises(ParseError) as exc_info:
        parser.eat(TT.CLOSE_PAR)

    assert exc_info.value.message == "Unexpected lexeme [x]"


@pytest.mark.parametrize(
    "source, expected",
    [
        pytest.param("[]", ArrayExpr, id="empty-array"),
        pytest.param("[:]", MapExpr, id="empty-map"),
        pytest.param("[a]", ArrayExpr, id="name-alone"),
        pytest.param("[a, b]", ArrayExpr, id="names"),
        pytest.param("[a.b]", ArrayExpr, id="name-access"),
        pytest.param("[a: 1]", MapExpr, id="map-single"),
        pytest.param("[a: b, c: d]", MapExpr, id="map-names"),
        pytest.param("[1: 2]", None, id="number-key-rejected"),
        pytest.param("[[a: 1], [b]]", ArrayExpr, id="nested"),
    ],
)
def test_struct_literal_disambiguation(source: str, expected) -> None:
    if expected is None:
        with pytest.raises(ParseError):
            parse_expr_fragment(source)
        return

    assert isinstance(parse_expr_fragment(source), expected)


def test_map_literal_keeps_key_order() -> None:
    node = parse_expr_fragment("[z: 1, a: 2, m: 3]")
    assert isinstance(node, MapExpr)
    assert [item.key for item in node.items] == ["z", "a", "m"]


def test_precedence_arith_over_rel_over_logic() -> None:
    node = parse_expr_fragment("1 + 2 * 3 < 10 && true")

    assert isinstance(node, BinaryExpr) and node.op is BinaryOp.AND
    rel = node.left
    assert isinstance(rel, BinaryExpr) and rel.op is BinaryOp.LOWER_THAN
    add = rel.left
    assert isinstance(add, BinaryExpr) and add.op is BinaryOp.ADD
    assert isinstance(add.right, BinaryExpr) and add.right.op is BinaryOp.MUL


def test_logical_operators_share_one_level() -> None:
    node = parse_expr_fragment("a || b && c")

    assert isinstance(node, BinaryExpr) and node.op is BinaryOp.AND
    assert isinstance(node.left, BinaryExpr) and node.left.op is BinaryOp.OR


def test_power_is_left_associative() -> None:
    node = parse_expr_fragment("2 ** 3 ** 2")

    assert isinstance(node, BinaryExpr) and node.op is BinaryOp.POWER
    assert isinstance(node.left, BinaryExpr) and node.left.op is BinaryOp.POWER
    assert node.right == Const(1, MgNumber(2))


def test_unary_binds_tighter_than_power() -> None:
    node = parse_expr_fragment("-2 ** 2")

    assert isinstance(node, BinaryExpr) and node.op is BinaryOp.POWER
    assert isinstance(node.left, UnaryExpr) and node.left.op is UnaryOp.NEG


def test_cast_wraps_additive_expression() -> None:
    node = parse_expr_fragment("1 + 2 as String")

    assert isinstance(node, CastExpr) and node.op is CastOp.STRING
    assert isinstance(node.operand, BinaryExpr) and node.operand.op is BinaryOp.ADD


def test_dot_access_is_text_index() -> None:
    node = parse_expr_fragment("m.k[0]")

    assert isinstance(node, Access)
    assert node.index == Const(1, MgNumber(0))
    inner = node.base
    assert isinstance(inner, Access)
    assert inner.base == Variable(1, "m")
    assert inner.index == Const(1, MgText("k"))


def test_chained_assignment_splits_left_to_right() -> None:
    command = _only_command("a = b = 3")

    assert command == Blocks(
        1,
        (
            Assign(1, Variable(1, "a"), AssignOp.STD, Variable(1, "b")),
            Assign(1, Variable(1, "b"), AssignOp.STD, Const(1, MgNumber(3))),
        ),
    )


def test_chained_assignment_mixes_operators() -> None:
    command = _only_command("a += b *= 2")

    assert isinstance(command, Blocks)
    assert [cmd.op for cmd in command.commands] == [AssignOp.ADD, AssignOp.MUL]


def test_declaration_keeps_every_pair() -> None:
    command = _only_command("def a = 2, b, c = 3")

    assert isinstance(command, DeclarationType1)
    assert [item.name for item in command.items] == ["a", "b", "c"]
    assert command.items[1].value is None


def test_for_clauses_are_blocks() -> None:
    command = _only_command("for (def i = 0; ; i += 1, j += 1) {}")

    assert isinstance(command, For)
    assert isinstance(command.init, Blocks) and len(command.init.commands) == 1
    assert command.cond is None
    assert isinstance(command.step, Blocks) and len(command.step.commands) == 2


def test_number_literal_wraps_to_32_bits() -> None:
    assert parse_expr_fragment("2147483648") == Const(1, MgNumber(-2147483648))


def test_nodes_carry_start_line() -> None:
    program = parse_source("def a = 1\n\nif (a == 1)\n  println(a)")
    node = program.commands[1]

    assert program.commands[0].line == 1
    assert node.line == 3
    assert node.then.line == 4


def test_lark_rendering_shape() -> None:
    tree = parse_pipeline('def m = [k: 1]; println(m.k)')

    assert tree.data == "blocks"
    commands = tree.children[0]
    assert isinstance(commands, Tree) and commands.data == "commands"
    decl, printed = commands.children
    assert decl.data == "declaration_type1"
    assert printed.data == "print"
    assert Token("NEWLINE", "true") in printed.children
    assert _count_nodes(tree, "map_item") == 1
    assert _count_nodes(tree, "access") == 1


def test_lark_rendering_omits_absent_parts() -> None:
    tree = parse_pipeline("if (true) println(1)")
    if_node = tree.children[0].children[0]

    assert if_node.data == "if"
    assert len(if_node.children) == 2


def test_parse_trace_logs_navigation(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv(PARSE_TRACE_ENV, "1")
    parse_source("def m = [k: 1]")

    err = capsys.readouterr().err.splitlines()
    assert 'advanced ("def", DEF)' not in err
    assert 'expected DEF, found ("def", DEF)' in err
    assert 'advanced ("k", NAME)' in err
    assert 'rollback (":", COLON)' in err


def test_parse_trace_off_by_default(capsys: pytest.CaptureFixture[str]) -> None:
    parse_source("def m = [k: 1]")
    assert capsys.readouterr().err == ""
