"""
Token Types for MiniGroovy

Shared between lexer, parser and REPL highlighting to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types - mirrors grammar terminals"""

    # Specials
    INVALID_TOKEN = auto()
    UNEXPECTED_EOF = auto()
    END_OF_FILE = auto()

    # Symbols
    SEMI_COLON = auto()  # ;
    COMMA = auto()
    DOT = auto()
    COLON = auto()
    ARROW = auto()  # ->
    OPEN_PAR = auto()
    CLOSE_PAR = auto()
    OPEN_BRA = auto()  # [
    CLOSE_BRA = auto()
    OPEN_CUR = auto()  # {
    CLOSE_CUR = auto()

    # Assignment
    ASSIGN = auto()
    ASSIGN_ADD = auto()
    ASSIGN_SUB = auto()
    ASSIGN_MUL = auto()
    ASSIGN_DIV = auto()
    ASSIGN_MOD = auto()
    ASSIGN_POWER = auto()

    # Logical, relational and arithmetic operators
    AND = auto()
    OR = auto()
    LOWER = auto()
    GREATER = auto()
    LOWER_EQUAL = auto()
    GREATER_EQUAL = auto()
    EQUALS = auto()
    NOT_EQUALS = auto()
    NOT = auto()
    NOT_CONTAINS = auto()  # !in
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    MOD = auto()
    POWER = auto()

    # Keywords
    DEF = auto()
    PRINT = auto()
    PRINTLN = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    FOR = auto()
    FOREACH = auto()
    CONTAINS = auto()  # in
    AS = auto()
    BOOLEAN = auto()
    INTEGER = auto()
    STRING = auto()
    NULL = auto()
    FALSE = auto()
    TRUE = auto()
    READ = auto()
    EMPTY = auto()
    SIZE = auto()
    KEYS = auto()
    VALUES = auto()
    SWITCH = auto()
    CASE = auto()
    DEFAULT = auto()

    # Others
    NAME = auto()
    NUMBER = auto()
    TEXT = auto()


@dataclass
class Tok:
    """Lexeme with position info"""

    type: TT
    value: Any
    line: int = 0
    column: int = 0

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
