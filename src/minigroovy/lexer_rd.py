"""
Lexer for MiniGroovy - Recursive Descent Parser

Produces the lexical stream the syntactic analyzer pulls from.

Features:
- Pull-based: one lexeme per next_token() call
- Position tracking (line, column)
- Never raises: bad characters become INVALID_TOKEN lexemes and
  unterminated text/comments become UNEXPECTED_EOF, so the analyzer
  reports every fault through a single diagnostic path
"""

from typing import Iterator, List

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """MiniGroovy lexer."""

    # Keyword mapping
    KEYWORDS = {
        'def': TT.DEF,
        'print': TT.PRINT,
        'println': TT.PRINTLN,
        'if': TT.IF,
        'else': TT.ELSE,
        'while': TT.WHILE,
        'for': TT.FOR,
        'foreach': TT.FOREACH,
        'in': TT.CONTAINS,
        'as': TT.AS,
        'Boolean': TT.BOOLEAN,
        'Integer': TT.INTEGER,
        'String': TT.STRING,
        'null': TT.NULL,
        'false': TT.FALSE,
        'true': TT.TRUE,
        'read': TT.READ,
        'empty': TT.EMPTY,
        'size': TT.SIZE,
        'keys': TT.KEYS,
        'values': TT.VALUES,
        'switch': TT.SWITCH,
        'case': TT.CASE,
        'default': TT.DEFAULT,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Three-character operators
        ('**=', TT.ASSIGN_POWER),

        # Two-character operators
        ('==', TT.EQUALS),
        ('!=', TT.NOT_EQUALS),
        ('<=', TT.LOWER_EQUAL),
        ('>=', TT.GREATER_EQUAL),
        ('&&', TT.AND),
        ('||', TT.OR),
        ('+=', TT.ASSIGN_ADD),
        ('-=', TT.ASSIGN_SUB),
        ('*=', TT.ASSIGN_MUL),
        ('/=', TT.ASSIGN_DIV),
        ('%=', TT.ASSIGN_MOD),
        ('**', TT.POWER),
        ('->', TT.ARROW),

        # Single-character operators
        ('+', TT.ADD),
        ('-', TT.SUB),
        ('*', TT.MUL),
        ('/', TT.DIV),
        ('%', TT.MOD),
        ('<', TT.LOWER),
        ('>', TT.GREATER),
        ('!', TT.NOT),
        ('=', TT.ASSIGN),
        ('(', TT.OPEN_PAR),
        (')', TT.CLOSE_PAR),
        ('[', TT.OPEN_BRA),
        (']', TT.CLOSE_BRA),
        ('{', TT.OPEN_CUR),
        ('}', TT.CLOSE_CUR),
        ('.', TT.DOT),
        (',', TT.COMMA),
        (':', TT.COLON),
        (';', TT.SEMI_COLON),
    ]

    ESCAPES = {'n': '\n', 't': '\t', '"': '"', '\\': '\\'}

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1

    def __iter__(self) -> Iterator[Tok]:
        while True:
            tok = self.next_token()
            yield tok

            if tok.type in (TT.END_OF_FILE, TT.UNEXPECTED_EOF):
                return

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def next_token(self) -> Tok:
        """Scan and return the next lexeme; END_OF_FILE once input is exhausted"""
        skipped = self.skip_trivia()
        if skipped is not None:
            return skipped

        if self.pos >= len(self.source):
            return self.make(TT.END_OF_FILE, '', self.line, self.column)

        ch = self.peek()

        # Text literals
        if ch == '"':
            return self.scan_text()

        # Numbers
        if self._is_digit(ch):
            return self.scan_number()

        # Identifiers and keywords
        if ch.isalpha() or ch == '_':
            return self.scan_identifier()

        # Operators and punctuation
        return self.scan_operator()

    def skip_trivia(self):
        """Skip whitespace, newlines and comments; return a lexeme only on an unterminated comment"""
        while self.pos < len(self.source):
            ch = self.peek()

            if ch == '\n':
                self.advance()
                self.line += 1
                self.column = 1
                continue

            if ch in (' ', '\t', '\r'):
                self.advance()
                continue

            if ch == '/' and self.peek(1) == '/':
                while self.peek() not in ('\n', '\0'):
                    self.advance()
                continue

            if ch == '/' and self.peek(1) == '*':
                line, column = self.line, self.column
                self.advance(2)

                while self.pos < len(self.source) and not (self.peek() == '*' and self.peek(1) == '/'):
                    if self.advance() == '\n':
                        self.line += 1
                        self.column = 1

                if self.pos >= len(self.source):
                    return self.make(TT.UNEXPECTED_EOF, '/*', line, column)

                self.advance(2)
                continue

            break

        return None

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_text(self) -> Tok:
        """Scan text literal: "..." (value is the decoded content)"""
        line, column = self.line, self.column
        self.advance()  # Opening quote
        content = ''

        while self.pos < len(self.source) and self.peek() != '"':
            ch = self.advance()

            if ch == '\\' and self.peek() in self.ESCAPES:
                content += self.ESCAPES[self.advance()]
                continue

            if ch == '\n':
                self.line += 1
                self.column = 1
            content += ch

        if self.pos >= len(self.source):
            return self.make(TT.UNEXPECTED_EOF, '"' + content, line, column)

        self.advance()  # Closing quote
        return self.make(TT.TEXT, content, line, column)

    def scan_number(self) -> Tok:
        """Scan number literal (decimal digits only)"""
        line, column = self.line, self.column
        value = ''

        while self._is_digit(self.peek()):
            value += self.advance()

        return self.make(TT.NUMBER, value, line, column)

    def scan_identifier(self) -> Tok:
        """Scan identifier or keyword"""
        line, column = self.line, self.column
        value = ''

        while self.peek().isalnum() or self.peek() == '_':
            value += self.advance()

        # Check if keyword
        token_type = self.KEYWORDS.get(value, TT.NAME)
        return self.make(token_type, value, line, column)

    def scan_operator(self) -> Tok:
        """Scan operators and punctuation"""
        line, column = self.line, self.column

        # `!in` is one lexeme unless `in` starts a longer identifier (`!inside`)
        if self.source.startswith('!in', self.pos) and not self._is_ident_char(self.peek(3)):
            self.advance(3)
            return self.make(TT.NOT_CONTAINS, '!in', line, column)

        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                return self.make(op_type, op_str, line, column)

        return self.make(TT.INVALID_TOKEN, self.advance(), line, column)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        result = ''
        for _ in range(n):
            ch = self.source[self.pos] if self.pos < len(self.source) else '\0'
            result += ch
            self.pos += 1
            self.column += 1
        return result

    @staticmethod
    def _is_ident_char(ch: str) -> bool:
        return ch.isalnum() or ch == '_'

    @staticmethod
    def _is_digit(ch: str) -> bool:
        return '0' <= ch <= '9'

    @staticmethod
    def make(token_type: TT, value, line: int, column: int) -> Tok:
        return Tok(type=token_type, value=value, line=line, column=column)


def tokenize(source: str) -> List[Tok]:
    """Tokenize entire source, return lexeme list ending with END_OF_FILE or UNEXPECTED_EOF"""
    return list(Lexer(source))
