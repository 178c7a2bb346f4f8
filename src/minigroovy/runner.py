from __future__ import annotations

import sys
import traceback
from pathlib import Path
from typing import List, Optional, Tuple

from .evaluator import RECURSION_MESSAGE, eval_expr, execute
from .parser_rd import ParseError, parse_expr_fragment, parse_source
from .runtime import Console, Frame, MgRuntimeError, MgValue, format_diagnostic, init_stdlib
from .tree import pretty
from .utils import debug_py_trace_enabled

def run(src: str, frame: Optional[Frame]=None, console: Optional[Console]=None) -> Frame:
    """Parse `src` completely, then execute it; returns the environment it ran in."""
    init_stdlib()

    program = parse_source(src)

    if frame is None:
        frame = Frame(console=console)
    elif console is not None:
        frame.console = console

    return execute(program, frame)

def repl_eval(src: str, frame: Frame) -> Tuple[Optional[MgValue], bool]:
    """
    Run one REPL entry in `frame`.
    Returns (value, is_stmt): a program runs for effect; an entry that only
    parses as a bare expression is evaluated and its value returned.
    """
    init_stdlib()

    try:
        program = parse_source(src)
    except ParseError as program_error:
        try:
            expr = parse_expr_fragment(src)
        except ParseError:
            raise program_error from None

        return eval_expr(expr, frame), False

    execute(program, frame)
    return None, True

def diagnostic_for(exc: Exception) -> str:
    """`NN: message` for a fatal parse or runtime error."""
    if isinstance(exc, ParseError):
        return exc.diagnostic()

    if isinstance(exc, MgRuntimeError):
        return format_diagnostic(exc.line or 0, exc.message)

    if isinstance(exc, RecursionError):
        return format_diagnostic(0, RECURSION_MESSAGE)

    return format_diagnostic(0, str(exc))

def report_fatal(exc: Exception) -> None:
    if debug_py_trace_enabled():
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)

    print(diagnostic_for(exc), file=sys.stderr)

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        return sys.stdin.read()

    candidate = Path(arg)
    if candidate.is_file():
        return candidate.read_text(encoding="utf-8")

    return arg

def main(argv: Optional[List[str]]=None) -> None:
    show_tree = False
    arg = None

    for token in sys.argv[1:] if argv is None else argv:
        if token == "--tree":
            show_tree = True
            continue

        if token.startswith("--"):
            raise SystemExit(f"Unknown flag: {token}")

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    if arg is None and not show_tree and sys.stdin.isatty():
        from .repl import repl
        repl()
        return

    source = _load_source(arg)

    try:
        if show_tree:
            print(pretty(parse_source(source)))
        else:
            run(source)
    except (ParseError, MgRuntimeError, RecursionError) as exc:
        report_fatal(exc)
        raise SystemExit(1) from None

if __name__ == "__main__":
    main()
