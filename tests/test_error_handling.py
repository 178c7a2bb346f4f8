from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    BufferConsole,
    MgCastError,
    MgIndexError,
    MgKeyError,
    MgRuntimeError,
    MgTypeError,
    ParseError,
    run_program,
    run_runtime_case,
)
from minigroovy.runner import diagnostic_for
from minigroovy.types import format_diagnostic

SCENARIOS = [
    pytest.param(
        dedent(
            """\
            def a = [1, 2]

            a[5] = 3
            """
        ),
        ("diagnostic", "03: Index 5 out of range"),
        MgIndexError,
        id="index-error-line",
    ),
    pytest.param(
        dedent(
            """\
            def m = [k: 1]
            if (true) {
                m.missing = 1
            }
            """
        ),
        ("diagnostic", "03: Key 'missing' not found"),
        MgKeyError,
        id="key-error-inside-block",
    ),
    pytest.param(
        dedent(
            """\
            def x = 1 +
                "two"
            """
        ),
        ("diagnostic", "01: Operator '+' not supported for Integer, String"),
        MgTypeError,
        id="operator-line",
    ),
    pytest.param(
        dedent(
            """\
            def items = [1, 2]
            def total = 0
            foreach (v in items) {
                total += v as String
            }
            """
        ),
        ("diagnostic", "04: Operator '+' not supported for Integer, String"),
        MgTypeError,
        id="compound-in-loop",
    ),
    pytest.param(
        'def n = "x1" as Integer',
        ("diagnostic", "01: Invalid integer [x1]"),
        MgCastError,
        id="cast-error",
    ),
    pytest.param(
        "def s = size(5)",
        ("diagnostic", "01: size() expects Array or Map, got Integer"),
        MgTypeError,
        id="builtin-error",
    ),
    pytest.param(
        "def a = [1]\nprintln(a[0] < \"1\")",
        ("diagnostic", "02: Operator '<' expects Integer, got String"),
        MgTypeError,
        id="compare-error",
    ),
    pytest.param(
        dedent(
            """\
            def a = [1]
            a[0] = a
            println(a)
            """
        ),
        ("diagnostic", "03: Recursion limit exceeded"),
        MgRuntimeError,
        id="self-containing-array",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_error_handling(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_runtime_errors_share_one_base() -> None:
    for exc_type in (MgTypeError, MgIndexError, MgKeyError, MgCastError):
        assert issubclass(exc_type, MgRuntimeError)


def test_error_stops_execution() -> None:
    console = BufferConsole()
    source = 'println("one")\ndef x = 1 / 0\nprintln("two")'

    with pytest.raises(MgTypeError):
        run_program(source, console=console)

    assert console.getvalue() == "one\n"


def test_innermost_line_wins() -> None:
    source = dedent(
        """\
        if (true)
            while (true)
                def x = 1 + null
        """
    )

    with pytest.raises(MgTypeError) as exc_info:
        run_program(source, console=BufferConsole())

    assert exc_info.value.line == 3


def test_explicit_line_is_kept() -> None:
    err = MgTypeError("boom", line=7)
    assert str(err) == "07: boom"
    assert diagnostic_for(err) == "07: boom"


def test_unlocated_error_uses_line_zero() -> None:
    assert diagnostic_for(MgTypeError("boom")) == "00: boom"
    assert str(MgTypeError("boom")) == "boom"


def test_recursion_error_diagnostic() -> None:
    assert diagnostic_for(RecursionError("maximum recursion depth exceeded")) == "00: Recursion limit exceeded"


def test_parse_error_diagnostic() -> None:
    with pytest.raises(ParseError) as exc_info:
        run_program("\n\ndef = 1")

    assert diagnostic_for(exc_info.value) == "03: Unexpected lexeme [=]"


@pytest.mark.parametrize(
    "line, message, expected",
    [
        pytest.param(1, "x", "01: x", id="pads"),
        pytest.param(42, "y", "42: y", id="two-digits"),
        pytest.param(123, "z", "123: z", id="wide"),
    ],
)
def test_format_diagnostic(line: int, message: str, expected: str) -> None:
    assert format_diagnostic(line, message) == expected
