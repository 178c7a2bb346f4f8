from __future__ import annotations

from typing import Callable

from ..runtime import Frame, MgValue
from ..tree import Blocks, Command, Expr, Print
from .common import stringify

EvalFunc = Callable[[Expr, Frame], MgValue]
ExecFunc = Callable[[Command, Frame], None]

def eval_blocks(n: Blocks, frame: Frame, exec_func: ExecFunc) -> None:
    """Run commands in order in the same frame; a block opens no scope."""
    for command in n.commands:
        exec_func(command, frame)

def eval_print(n: Print, frame: Frame, eval_func: EvalFunc) -> None:
    text = stringify(eval_func(n.value, frame))

    if n.newline:
        text += "\n"

    frame.console.write(text)
