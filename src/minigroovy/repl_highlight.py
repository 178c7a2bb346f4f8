"""prompt_toolkit lexer for live MiniGroovy syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable, List, Tuple

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as MgLexer
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "type": "bold ansiblue",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
    "error": "bold ansired",
}

_KEYWORDS = {
    TT.DEF, TT.PRINT, TT.PRINTLN, TT.IF, TT.ELSE, TT.WHILE, TT.FOR, TT.FOREACH,
    TT.CONTAINS, TT.AS, TT.SWITCH, TT.CASE, TT.DEFAULT,
}
_FUNCTIONS = {TT.READ, TT.EMPTY, TT.SIZE, TT.KEYS, TT.VALUES}
_TYPES = {TT.BOOLEAN, TT.INTEGER, TT.STRING}
_PUNCTUATION = {
    TT.SEMI_COLON, TT.COMMA, TT.DOT, TT.COLON,
    TT.OPEN_PAR, TT.CLOSE_PAR, TT.OPEN_BRA, TT.CLOSE_BRA, TT.OPEN_CUR, TT.CLOSE_CUR,
}

# Token type → highlight group.
_TT_GROUP = {
    **{tt: "keyword" for tt in _KEYWORDS},
    **{tt: "function" for tt in _FUNCTIONS},
    **{tt: "type" for tt in _TYPES},
    **{tt: "punctuation" for tt in _PUNCTUATION},
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.NULL: "constant",
    TT.NUMBER: "number",
    TT.TEXT: "string",
    TT.NAME: "identifier",
    TT.INVALID_TOKEN: "error",
    # an unterminated string while the user is still typing
    TT.UNEXPECTED_EOF: "string",
}


def _spans(text: str) -> List[Tuple[Tok, int, int]]:
    """Lexemes of one line with their [start, end) offsets."""
    lexer = MgLexer(text)
    spans = []

    while True:
        tok = lexer.next_token()
        if tok.type is TT.END_OF_FILE:
            break

        start = tok.column - 1
        spans.append((tok, start, min(lexer.pos, len(text))))

        if tok.type is TT.UNEXPECTED_EOF:
            break

    return spans


def _gap(text: str) -> Tuple[str, str]:
    if text.lstrip().startswith(("//", "/*")):
        return (GROUP_STYLE["comment"], text)
    return ("", text)


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    result: StyleAndTextTuples = []
    pos = 0

    for tok, start, end in _spans(text):
        if start < pos or end <= start:
            continue

        # Unstyled gap (whitespace or comment) before token.
        if start > pos:
            result.append(_gap(text[pos:start]))

        group = _TT_GROUP.get(tok.type, "operator")
        if tok.type is TT.UNEXPECTED_EOF and tok.value == "/*":
            group = "comment"
        result.append((GROUP_STYLE.get(group, ""), text[start:end]))
        pos = end

    # Trailing text (whitespace or comment).
    if pos < len(text):
        result.append(_gap(text[pos:]))

    return result if result else [("", text)]


class MiniGroovyLexer(Lexer):
    """prompt_toolkit Lexer that highlights MiniGroovy source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        # Pre-compute highlights for all lines.
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
