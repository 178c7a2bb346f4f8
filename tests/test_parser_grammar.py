from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import BufferConsole, ParseError, parse_pipeline, run_frame
from minigroovy.parser_rd import parse_expr_fragment, parse_source
from minigroovy.runner import run

ACCEPTED = [
    pytest.param("", id="empty-program"),
    pytest.param("def x", id="decl-bare"),
    pytest.param("def x = 1", id="decl-init"),
    pytest.param("def a = 2, b, c = a + 1", id="decl-many"),
    pytest.param("def (a, b) = [1, 2]", id="decl-destructure"),
    pytest.param("def (a) = 5;", id="decl-destructure-single"),
    pytest.param("def x; x = 1; x += 2; x -= 1; x *= 3; x /= 2; x %= 2; x **= 3", id="assign-ops"),
    pytest.param("def a; def b; a = b = 3", id="assign-chain"),
    pytest.param("print(1) println(2)", id="print-without-semicolons"),
    pytest.param("if (true) println(1)", id="if-single"),
    pytest.param("if (true) { println(1) } else { println(2) }", id="if-else-blocks"),
    pytest.param("if (false) println(1) else if (true) println(2) else println(3)", id="if-else-if"),
    pytest.param("if (true) {}", id="if-empty-block"),
    pytest.param("def i = 0; while (i < 2) i += 1", id="while-single"),
    pytest.param("for (def i = 0; i < 2; i += 1) {}", id="for-full"),
    pytest.param("def i = 0; for (; i < 2;) i += 1", id="for-cond-only"),
    pytest.param("for (def i = 0, j = 3; i < j; i += 1, j -= 1) print(i)", id="for-lists"),
    pytest.param("for (def i = 0; i < 1; i += 1) for (def j = 0; j < 1; j += 1) print(j)", id="for-nested"),
    pytest.param("foreach (x in [1, 2]) print(x)", id="foreach"),
    pytest.param("foreach (def x in [1, 2]) { print(x) }", id="foreach-def"),
    pytest.param("def s = switch (1) { case 1 -> \"a\" case 2 -> \"b\" default -> \"z\" }", id="switch-full"),
    pytest.param("def s = switch (1) { }", id="switch-empty"),
    pytest.param("def s = switch (1) { default -> 0 }", id="switch-default-only"),
    pytest.param("def a = []; def m = [:]", id="empty-structs"),
    pytest.param("def a = [1, [2, 3], [k: 4]]", id="nested-structs"),
    pytest.param("def m = [a: 1, b: [c: 2]]; m.b.c = 3; m[\"a\"] = 0", id="map-access-assign"),
    pytest.param("def x = 1; def a = [x, x]", id="array-of-names"),
    pytest.param("def a = [(1)]", id="array-paren"),
    pytest.param("def b = !!true", id="double-not"),
    pytest.param("def n = - -1", id="double-neg"),
    pytest.param("def n = 1 + 2 * 3 - 4 / 2 % 3 ** 2", id="arith-mix"),
    pytest.param("def t = 1 < 2 && 2 >= 1 || !(1 == 2)", id="logic-mix"),
    pytest.param("def t = 1 in [1] && 2 !in [1]", id="containment"),
    pytest.param("def s = 1 + 2 as String", id="cast-after-arith"),
    pytest.param("def s = size([1]) + size([a:1])", id="functions"),
    pytest.param(
        dedent(
            """\
            // comment line
            def total = 0 /* inline */
            foreach (n in [1, 2, 3]) {
                total += n;
            }
            println("total: " + (total as String))
            """
        ),
        id="comments-and-blocks",
    ),
]

REJECTED = [
    pytest.param("1 = 2", "01: Unexpected lexeme [=]", id="assign-to-const"),
    pytest.param("x + 1 = 2", "01: Unexpected lexeme [=]", id="assign-to-binary"),
    pytest.param("def x; x", "01: Unexpected end of input", id="bare-expression"),
    pytest.param("def x;\nx + 1", "02: Unexpected end of input", id="bare-binary"),
    pytest.param("print(1);;", "01: Unexpected lexeme [;]", id="double-semicolon"),
    pytest.param("def 1", "01: Unexpected lexeme [1]", id="decl-number"),
    pytest.param("def x = ;", "01: Unexpected lexeme [;]", id="decl-missing-init"),
    pytest.param("def (a, b = [1]", "01: Unexpected lexeme [=]", id="destructure-unclosed"),
    pytest.param("def (a, b)", "01: Unexpected end of input", id="destructure-no-init"),
    pytest.param("println(1", "01: Unexpected end of input", id="print-unclosed"),
    pytest.param("println 1", "01: Unexpected lexeme [1]", id="print-no-parens"),
    pytest.param('println("abc)', "01: Unexpected end of input", id="unterminated-text"),
    pytest.param("def x = 1 @ 2", "01: Invalid lexeme [@]", id="invalid-lexeme"),
    pytest.param("def x = \u00b2", "01: Invalid lexeme [\u00b2]", id="non-ascii-digit"),
    pytest.param("def x = 1\u00b2", "01: Invalid lexeme [\u00b2]", id="number-then-non-ascii-digit"),
    pytest.param("def x = 1\n\n  /* open", "03: Unexpected end of input", id="unterminated-comment"),
    pytest.param("if true println(1)", "01: Unexpected lexeme [true]", id="if-no-parens"),
    pytest.param("if (true) { println(1)", "01: Unexpected end of input", id="if-unclosed-block"),
    pytest.param("else println(1)", "01: Unexpected lexeme [else]", id="dangling-else"),
    pytest.param("for (def i = 0; i < 1) {}", "01: Unexpected lexeme [)]", id="for-missing-semicolon"),
    pytest.param("for (println(1);;) {}", "01: Unexpected lexeme [println]", id="for-print-init"),
    pytest.param("foreach (x [1]) {}", "01: Unexpected lexeme [[]", id="foreach-no-in"),
    pytest.param("def x = 1 < 2 < 3", "01: Unexpected lexeme [<]", id="rel-chained"),
    pytest.param("def x = 1 as Integer as String", "01: Unexpected lexeme [as]", id="cast-chained"),
    pytest.param("def x = 1 as Float", "01: Unexpected lexeme [Float]", id="cast-unknown-type"),
    pytest.param('def x = "5" as Integer + 1', "01: Unexpected lexeme [+]", id="cast-then-arith"),
    pytest.param("def a = [1, 2,]", "01: Unexpected lexeme []]", id="array-trailing-comma"),
    pytest.param("def m = [a: 1, 2]", "01: Unexpected lexeme [2]", id="map-then-value"),
    pytest.param("def m = [a: 1, b]", "01: Unexpected lexeme []]", id="map-missing-colon"),
    pytest.param('def m = ["a": 1]', "01: Unexpected lexeme [:]", id="map-text-key"),
    pytest.param("def m = [:1]", "01: Unexpected lexeme [1]", id="empty-map-with-value"),
    pytest.param("def x = size [1]", "01: Unexpected lexeme [[]", id="function-no-parens"),
    pytest.param("def x = switch (1) { default -> 1 case 2 -> 3 }", "01: Unexpected lexeme [case]", id="switch-default-first"),
    pytest.param("def x = switch (1) { case 1 \"a\" }", "01: Unexpected lexeme [a]", id="switch-missing-arrow"),
    pytest.param("def m; m.1 = 2", "01: Unexpected lexeme [1]", id="dot-number"),
    pytest.param("def x = (1", "01: Unexpected end of input", id="paren-unclosed"),
    pytest.param("}", "01: Unexpected lexeme [}]", id="stray-brace"),
]


@pytest.mark.parametrize("source", ACCEPTED)
def test_grammar_accepts(source: str) -> None:
    tree = parse_pipeline(source)
    assert tree.data == "blocks"


@pytest.mark.parametrize("source", ACCEPTED)
def test_accepted_programs_execute(source: str) -> None:
    run_frame(source)


@pytest.mark.parametrize("source, diagnostic", REJECTED)
def test_grammar_rejects(source: str, diagnostic: str) -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source(source)

    assert exc_info.value.diagnostic() == diagnostic


def test_parse_error_reports_position() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source("def a = 1\ndef b = )")

    err = exc_info.value
    assert err.line == 2
    assert err.token is not None and err.token.column == 9
    assert str(err) == "Unexpected lexeme [)] at line 2, col 9"


def test_parse_error_runs_nothing() -> None:
    console = BufferConsole()

    with pytest.raises(ParseError):
        run('println("before")\ndef = 1', console=console)

    assert console.getvalue() == ""


@pytest.mark.parametrize(
    "source",
    [
        pytest.param("1 + 2", id="arith"),
        pytest.param("[a: 1]", id="map"),
        pytest.param("switch (x) { default -> 1 }", id="switch"),
        pytest.param("m.k[0]", id="lvalue"),
    ],
)
def test_expression_fragments(source: str) -> None:
    parse_expr_fragment(source)


def test_expression_fragment_must_be_complete() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_expr_fragment("1 2")

    assert exc_info.value.message == "Unexpected lexeme [2]"
