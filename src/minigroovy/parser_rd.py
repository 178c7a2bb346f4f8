"""
Recursive Descent Parser for MiniGroovy

Pulls lexemes one at a time from the lexer and builds the Command/Expr tree
in the same pass; the first grammar violation raises ParseError.

Structure:
- Navigation: advance / eat / rollback over a one-lexeme pushback buffer
- Statements: declarations, print, if/while/for/foreach, assignment
- Expressions: one method per precedence level, lowest first
- AST: dataclass nodes from tree.py

The only speculative point is the struct literal: after '[' a NAME followed
by ':' starts a map, anything else an array. The analyzer advances past the
NAME, looks at the next lexeme, then rolls back so the NAME is replayed.
"""

import sys
from typing import List, Optional

from typing_extensions import Protocol

from .lexer_rd import Lexer
from .runtime import MgBool, MgNull, MgText, format_diagnostic
from .token_types import TT, Tok
from .eval.common import number
from .utils import debug_parse_trace_enabled
from .tree import (
    Access,
    ArrayExpr,
    Assign,
    AssignOp,
    BinaryExpr,
    BinaryOp,
    Blocks,
    CaseItem,
    CastExpr,
    CastOp,
    Command,
    Const,
    DeclarationType1,
    DeclarationType2,
    DeclItem,
    Expr,
    For,
    Foreach,
    If,
    MapExpr,
    MapItem,
    Print,
    SwitchExpr,
    UnaryExpr,
    UnaryOp,
    Variable,
    While,
    is_assignable,
)

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        self.line = token.line if token else 0
        super().__init__(
            f"{message} at line {token.line}, col {token.column}" if token else message
        )

    @classmethod
    def from_token(cls, token: Tok) -> 'ParseError':
        """Classify the offending lexeme into one of the three diagnostic kinds."""
        if token.type is TT.INVALID_TOKEN:
            return cls(f"Invalid lexeme [{token.value}]", token)

        if token.type in (TT.UNEXPECTED_EOF, TT.END_OF_FILE):
            return cls("Unexpected end of input", token)

        return cls(f"Unexpected lexeme [{token.value}]", token)

    def diagnostic(self) -> str:
        return format_diagnostic(self.line, self.message)


class TokenStream(Protocol):
    def next_token(self) -> Tok: ...


ASSIGN_OPS = {
    TT.ASSIGN: AssignOp.STD,
    TT.ASSIGN_ADD: AssignOp.ADD,
    TT.ASSIGN_SUB: AssignOp.SUB,
    TT.ASSIGN_MUL: AssignOp.MUL,
    TT.ASSIGN_DIV: AssignOp.DIV,
    TT.ASSIGN_MOD: AssignOp.MOD,
    TT.ASSIGN_POWER: AssignOp.POWER,
}

LOGIC_OPS = {TT.AND: BinaryOp.AND, TT.OR: BinaryOp.OR}

REL_OPS = {
    TT.LOWER: BinaryOp.LOWER_THAN,
    TT.GREATER: BinaryOp.GREATER_THAN,
    TT.LOWER_EQUAL: BinaryOp.LOWER_EQUAL,
    TT.GREATER_EQUAL: BinaryOp.GREATER_EQUAL,
    TT.EQUALS: BinaryOp.EQUAL,
    TT.NOT_EQUALS: BinaryOp.NOT_EQUAL,
    TT.CONTAINS: BinaryOp.CONTAINS,
    TT.NOT_CONTAINS: BinaryOp.NOT_CONTAINS,
}

ADD_OPS = {TT.ADD: BinaryOp.ADD, TT.SUB: BinaryOp.SUB}
MUL_OPS = {TT.MUL: BinaryOp.MUL, TT.DIV: BinaryOp.DIV, TT.MOD: BinaryOp.MOD}

CAST_OPS = {TT.BOOLEAN: CastOp.BOOLEAN, TT.INTEGER: CastOp.INTEGER, TT.STRING: CastOp.STRING}

FUNCTION_OPS = {
    TT.READ: UnaryOp.READ,
    TT.EMPTY: UnaryOp.EMPTY,
    TT.SIZE: UnaryOp.SIZE,
    TT.KEYS: UnaryOp.KEYS,
    TT.VALUES: UnaryOp.VALUES,
}

EXPR_START = {
    TT.NOT, TT.SUB, TT.OPEN_PAR,
    TT.NULL, TT.FALSE, TT.TRUE, TT.NUMBER, TT.TEXT,
    TT.READ, TT.EMPTY, TT.SIZE, TT.KEYS, TT.VALUES,
    TT.SWITCH, TT.OPEN_BRA, TT.NAME,
}

CMD_START = {TT.DEF, TT.PRINT, TT.PRINTLN, TT.IF, TT.WHILE, TT.FOR, TT.FOREACH} | EXPR_START


class Parser:
    """
    Recursive descent parser for MiniGroovy.

    Expression precedence (lowest to highest):
    1. logical (&&, ||), one level, left associative
    2. relational (<, >, <=, >=, ==, !=, in, !in), not chained
    3. cast (as Boolean | Integer | String)
    4. additive (+, -)
    5. multiplicative (*, /, %)
    6. power (**), left associative
    7. unary (!, -)
    8. primary (literals, built-ins, switch, struct literals, lvalues, parens)
    """

    def __init__(self, stream: TokenStream, trace: Optional[bool] = None):
        self.stream = stream
        self.trace = debug_parse_trace_enabled() if trace is None else trace
        self.previous: Optional[Tok] = None
        self._pushback: Optional[Tok] = None
        self.current = stream.next_token()

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def _log(self, message: str) -> None:
        if self.trace:
            print(message, file=sys.stderr)

    @staticmethod
    def _describe(tok: Tok) -> str:
        return f'("{tok.value}", {tok.type.name})'

    def _commit(self) -> Tok:
        prev = self.current
        self.previous = prev

        if self._pushback is not None:
            self.current, self._pushback = self._pushback, None
        else:
            self.current = self.stream.next_token()

        return prev

    def advance(self) -> Tok:
        """Commit the current lexeme; the next one comes from the pushback buffer first"""
        self._log(f"advanced {self._describe(self.current)}")
        return self._commit()

    def eat(self, token_type: TT) -> Tok:
        """Consume a lexeme of the expected type or fail on the current one"""
        self._log(f"expected {token_type.name}, found {self._describe(self.current)}")

        if not self.check(token_type):
            raise self.error()

        return self._commit()

    def rollback(self) -> None:
        """Step back one lexeme; the discarded current lexeme is replayed next"""
        if self.previous is None or self._pushback is not None:
            raise ParseError("Nothing to roll back", self.current)

        self._log(f"rollback {self._describe(self.current)}")
        self._pushback = self.current
        self.current = self.previous
        self.previous = None

    def check(self, *types: TT) -> bool:
        """Check if current lexeme matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current lexeme matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def error(self) -> ParseError:
        return ParseError.from_token(self.current)

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Blocks:
        """Parse entire program: <code> END_OF_FILE"""
        program = self.parse_code()
        self.eat(TT.END_OF_FILE)
        return program

    def parse_code(self) -> Blocks:
        """<code> ::= { <cmd> }"""
        line = self.current.line
        commands: List[Command] = []

        while self.current.type in CMD_START:
            commands.append(self.parse_cmd())

        return Blocks(line, tuple(commands))

    def parse_cmd(self) -> Command:
        """<cmd> ::= ( <decl> | <print> | <if> | <while> | <for> | <foreach> | <assign> ) [ ';' ]"""
        match self.current.type:
            case TT.DEF:
                cmd = self.parse_decl()
            case TT.PRINT | TT.PRINTLN:
                cmd = self.parse_print()
            case TT.IF:
                cmd = self.parse_if()
            case TT.WHILE:
                cmd = self.parse_while()
            case TT.FOR:
                cmd = self.parse_for()
            case TT.FOREACH:
                cmd = self.parse_foreach()
            case _ if self.current.type in EXPR_START:
                cmd = self.parse_assign()
            case _:
                raise self.error()

        if self.check(TT.SEMI_COLON):
            self.advance()

        return cmd

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_decl(self) -> Command:
        """<decl> ::= def ( <decl-type1> | <decl-type2> )"""
        line = self.eat(TT.DEF).line

        if self.check(TT.NAME):
            return self.parse_decl_type1(line)

        if self.check(TT.OPEN_PAR):
            return self.parse_decl_type2(line)

        raise self.error()

    def parse_decl_type1(self, line: int) -> DeclarationType1:
        """<decl-type1> ::= <name> [ '=' <expr> ] { ',' <name> [ '=' <expr> ] }"""
        items = [self._parse_decl_item()]

        while self.check(TT.COMMA):
            self.advance()
            items.append(self._parse_decl_item())

        return DeclarationType1(line, tuple(items))

    def _parse_decl_item(self) -> DeclItem:
        name = self.eat(TT.NAME).value
        value: Optional[Expr] = None

        if self.check(TT.ASSIGN):
            self.advance()
            value = self.parse_expr()

        return DeclItem(name, value)

    def parse_decl_type2(self, line: int) -> DeclarationType2:
        """<decl-type2> ::= '(' <name> { ',' <name> } ')' '=' <expr>"""
        self.eat(TT.OPEN_PAR)
        names = [self.eat(TT.NAME).value]

        while self.check(TT.COMMA):
            self.advance()
            names.append(self.eat(TT.NAME).value)

        self.eat(TT.CLOSE_PAR)
        self.eat(TT.ASSIGN)
        value = self.parse_expr()

        return DeclarationType2(line, tuple(names), value)

    def parse_print(self) -> Print:
        """<print> ::= ( print | println ) '(' <expr> ')'"""
        tok = self.advance()
        self.eat(TT.OPEN_PAR)
        value = self.parse_expr()
        self.eat(TT.CLOSE_PAR)

        return Print(tok.line, value, newline=tok.type is TT.PRINTLN)

    def parse_if(self) -> If:
        """<if> ::= if '(' <expr> ')' <body> [ else <body> ]"""
        line = self.eat(TT.IF).line
        self.eat(TT.OPEN_PAR)
        cond = self.parse_expr()
        self.eat(TT.CLOSE_PAR)
        then = self.parse_body()
        orelse: Optional[Command] = None

        if self.check(TT.ELSE):
            self.advance()
            orelse = self.parse_body()

        return If(line, cond, then, orelse)

    def parse_while(self) -> While:
        """<while> ::= while '(' <expr> ')' <body>"""
        line = self.eat(TT.WHILE).line
        self.eat(TT.OPEN_PAR)
        cond = self.parse_expr()
        self.eat(TT.CLOSE_PAR)

        return While(line, cond, self.parse_body())

    def parse_for(self) -> For:
        """<for> ::= for '(' [ <for-list> ] ';' [ <expr> ] ';' [ <for-list> ] ')' <body>"""
        line = self.eat(TT.FOR).line
        self.eat(TT.OPEN_PAR)

        init = None if self.check(TT.SEMI_COLON) else self.parse_for_list()
        self.eat(TT.SEMI_COLON)

        cond = None if self.check(TT.SEMI_COLON) else self.parse_expr()
        self.eat(TT.SEMI_COLON)

        step = None if self.check(TT.CLOSE_PAR) else self.parse_for_list()
        self.eat(TT.CLOSE_PAR)

        return For(line, init, cond, step, self.parse_body())

    def parse_for_list(self) -> Blocks:
        """<for-list> ::= ( <decl> | <assign> ) { ',' ( <decl> | <assign> ) }"""
        line = self.current.line
        commands = [self._parse_for_item()]

        while self.check(TT.COMMA):
            self.advance()
            commands.append(self._parse_for_item())

        return Blocks(line, tuple(commands))

    def _parse_for_item(self) -> Command:
        if self.check(TT.DEF):
            return self.parse_decl()

        if self.current.type in EXPR_START:
            return self.parse_assign()

        raise self.error()

    def parse_foreach(self) -> Foreach:
        """<foreach> ::= foreach '(' [ def ] <name> in <expr> ')' <body>"""
        line = self.eat(TT.FOREACH).line
        self.eat(TT.OPEN_PAR)

        if self.check(TT.DEF):
            self.advance()

        name = self.eat(TT.NAME).value
        self.eat(TT.CONTAINS)
        source = self.parse_expr()
        self.eat(TT.CLOSE_PAR)

        return Foreach(line, name, source, self.parse_body())

    def parse_body(self) -> Command:
        """<body> ::= <cmd> | '{' <code> '}'"""
        if self.check(TT.OPEN_CUR):
            self.advance()
            block = self.parse_code()
            self.eat(TT.CLOSE_CUR)
            return block

        return self.parse_cmd()

    def parse_assign(self) -> Command:
        """
        <assign> ::= <expr> <assign-op> <expr> { <assign-op> <expr> }

        `a = b = c` becomes Blocks[a = b, b = c], run left to right.
        """
        line = self.current.line
        target = self.parse_expr()
        commands: List[Command] = []

        while True:
            if not is_assignable(target) or self.current.type not in ASSIGN_OPS:
                raise self.error()

            op = ASSIGN_OPS[self.advance().type]
            value = self.parse_expr()
            commands.append(Assign(line, target, op, value))

            if self.current.type not in ASSIGN_OPS:
                break

            target = value

        if len(commands) == 1:
            return commands[0]

        return Blocks(line, tuple(commands))

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self) -> Expr:
        """<expr> ::= <rel> { ( '&&' | '||' ) <rel> }"""
        left = self.parse_rel()

        while self.current.type in LOGIC_OPS:
            op = self.advance()
            right = self.parse_rel()
            left = BinaryExpr(op.line, left, LOGIC_OPS[op.type], right)

        return left

    def parse_rel(self) -> Expr:
        """<rel> ::= <cast> [ <rel-op> <cast> ]"""
        left = self.parse_cast()

        if self.current.type in REL_OPS:
            op = self.advance()
            right = self.parse_cast()
            return BinaryExpr(op.line, left, REL_OPS[op.type], right)

        return left

    def parse_cast(self) -> Expr:
        """<cast> ::= <arith> [ as ( Boolean | Integer | String ) ]"""
        operand = self.parse_arith()

        if self.check(TT.AS):
            line = self.advance().line

            if self.current.type not in CAST_OPS:
                raise self.error()

            op = CAST_OPS[self.advance().type]
            return CastExpr(line, op, operand)

        return operand

    def parse_arith(self) -> Expr:
        """<arith> ::= <term> { ( '+' | '-' ) <term> }"""
        left = self.parse_term()

        while self.current.type in ADD_OPS:
            op = self.advance()
            right = self.parse_term()
            left = BinaryExpr(op.line, left, ADD_OPS[op.type], right)

        return left

    def parse_term(self) -> Expr:
        """<term> ::= <power> { ( '*' | '/' | '%' ) <power> }"""
        left = self.parse_power()

        while self.current.type in MUL_OPS:
            op = self.advance()
            right = self.parse_power()
            left = BinaryExpr(op.line, left, MUL_OPS[op.type], right)

        return left

    def parse_power(self) -> Expr:
        """<power> ::= <factor> { '**' <factor> }"""
        left = self.parse_factor()

        while self.check(TT.POWER):
            op = self.advance()
            right = self.parse_factor()
            left = BinaryExpr(op.line, left, BinaryOp.POWER, right)

        return left

    def parse_factor(self) -> Expr:
        """<factor> ::= ( '!' | '-' ) <factor> | '(' <expr> ')' | <rvalue>"""
        if self.check(TT.NOT, TT.SUB):
            tok = self.advance()
            op = UnaryOp.NOT if tok.type is TT.NOT else UnaryOp.NEG
            return UnaryExpr(tok.line, op, self.parse_factor())

        if self.check(TT.OPEN_PAR):
            self.advance()
            inner = self.parse_expr()
            self.eat(TT.CLOSE_PAR)
            return inner

        return self.parse_rvalue()

    def parse_rvalue(self) -> Expr:
        """<rvalue> ::= <const> | <function> | <switch> | <struct> | <lvalue>"""
        match self.current.type:
            case TT.NULL | TT.FALSE | TT.TRUE | TT.NUMBER | TT.TEXT:
                return self.parse_const()
            case TT.READ | TT.EMPTY | TT.SIZE | TT.KEYS | TT.VALUES:
                return self.parse_function()
            case TT.SWITCH:
                return self.parse_switch()
            case TT.OPEN_BRA:
                return self.parse_struct()
            case TT.NAME:
                return self.parse_lvalue()
            case _:
                raise self.error()

    def parse_const(self) -> Const:
        """<const> ::= null | false | true | <number> | <text>"""
        tok = self.advance()

        match tok.type:
            case TT.NULL:
                return Const(tok.line, MgNull())
            case TT.FALSE:
                return Const(tok.line, MgBool(False))
            case TT.TRUE:
                return Const(tok.line, MgBool(True))
            case TT.NUMBER:
                return Const(tok.line, number(int(tok.value)))
            case _:
                return Const(tok.line, MgText(tok.value))

    def parse_function(self) -> UnaryExpr:
        """<function> ::= ( read | empty | size | keys | values ) '(' <expr> ')'"""
        tok = self.advance()
        self.eat(TT.OPEN_PAR)
        operand = self.parse_expr()
        self.eat(TT.CLOSE_PAR)

        return UnaryExpr(tok.line, FUNCTION_OPS[tok.type], operand)

    def parse_switch(self) -> SwitchExpr:
        """<switch> ::= switch '(' <expr> ')' '{' { case <expr> '->' <expr> } [ default '->' <expr> ] '}'"""
        line = self.eat(TT.SWITCH).line
        self.eat(TT.OPEN_PAR)
        subject = self.parse_expr()
        self.eat(TT.CLOSE_PAR)
        self.eat(TT.OPEN_CUR)

        cases: List[CaseItem] = []
        while self.check(TT.CASE):
            self.advance()
            key = self.parse_expr()
            self.eat(TT.ARROW)
            cases.append(CaseItem(key, self.parse_expr()))

        default: Optional[Expr] = None
        if self.check(TT.DEFAULT):
            self.advance()
            self.eat(TT.ARROW)
            default = self.parse_expr()

        self.eat(TT.CLOSE_CUR)

        return SwitchExpr(line, subject, tuple(cases), default)

    def parse_struct(self) -> Expr:
        """<struct> ::= '[' [ ':' | <expr> { ',' <expr> } | <name> ':' <expr> { ',' <name> ':' <expr> } ] ']'"""
        line = self.eat(TT.OPEN_BRA).line

        if self.check(TT.COLON):
            self.advance()
            self.eat(TT.CLOSE_BRA)
            return MapExpr(line, ())

        if self.check(TT.CLOSE_BRA):
            self.advance()
            return ArrayExpr(line, ())

        if self._starts_map_item():
            return self._parse_map_items(line)

        items = [self.parse_expr()]
        while self.check(TT.COMMA):
            self.advance()
            items.append(self.parse_expr())

        self.eat(TT.CLOSE_BRA)
        return ArrayExpr(line, tuple(items))

    def _starts_map_item(self) -> bool:
        """NAME then ':' means a map literal; look one lexeme past the NAME and step back"""
        if not self.check(TT.NAME):
            return False

        self.advance()
        is_map = self.check(TT.COLON)
        self.rollback()

        return is_map

    def _parse_map_items(self, line: int) -> MapExpr:
        items = [self._parse_map_item()]

        while self.check(TT.COMMA):
            self.advance()
            items.append(self._parse_map_item())

        self.eat(TT.CLOSE_BRA)
        return MapExpr(line, tuple(items))

    def _parse_map_item(self) -> MapItem:
        key = self.eat(TT.NAME).value
        self.eat(TT.COLON)
        return MapItem(key, self.parse_expr())

    def parse_lvalue(self) -> Expr:
        """<lvalue> ::= <name> { '.' <name> | '[' <expr> ']' }"""
        tok = self.eat(TT.NAME)
        node: Expr = Variable(tok.line, tok.value)

        while self.check(TT.DOT, TT.OPEN_BRA):
            if self.check(TT.DOT):
                self.advance()
                field = self.eat(TT.NAME)
                node = Access(field.line, node, Const(field.line, MgText(field.value)))
            else:
                line = self.advance().line
                index = self.parse_expr()
                self.eat(TT.CLOSE_BRA)
                node = Access(line, node, index)

        return node

# ============================================================================
# Usage Example
# ============================================================================

def parse_source(source: str) -> Blocks:
    """
    Parse MiniGroovy source code to the top-level Blocks command.

    Raises ParseError on the first grammar violation; no partial tree is returned.
    """
    parser = Parser(Lexer(source))
    return parser.parse()


def parse_expr_fragment(source: str) -> Expr:
    """
    Parse a standalone expression fragment.
    Used by the test harness and embedding code that evaluates a single expression.
    """
    parser = Parser(Lexer(source))
    expr = parser.parse_expr()

    # Ensure we've consumed the entire fragment
    parser.eat(TT.END_OF_FILE)
    return expr


# ============================================================================
# Main - tree dump
# ============================================================================

if __name__ == '__main__':
    from .tree import pretty

    args = [arg for arg in sys.argv[1:] if not arg.startswith('--')]

    # Read source from file or stdin
    if len(args) > 0 and args[0] != '-':
        with open(args[0], 'r', encoding='utf-8') as f:
            source = f.read()
    else:
        source = sys.stdin.read()

    try:
        print(pretty(parse_source(source)))
    except ParseError as e:
        print(e.diagnostic(), file=sys.stderr)
        sys.exit(1)
