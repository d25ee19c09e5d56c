"""
Recursive-descent parser for brace.

Binary operators are parsed by precedence climbing over the binding powers
declared in the grammar table: the right operand only absorbs operators that
bind strictly tighter than the current one, so every level is
left-associative. Assignment has the lowest binding power and is
right-associative.

The parser pulls tokens from the lexer one at a time through a single-token
lookahead buffer. The first grammar violation raises ParseError; there is no
recovery.
"""
from typing import List, Optional

from brace.brace_datatypes import (
    Span, Token, TokenKind, NodeSpan, BinaryOp, UnaryOp,
    Literal, Variable, Declaration, Assignment, BinaryExpr, UnaryExpr,
    Call, Block, DoBlock, Loop,
)
from brace.brace_errors import ParseError, dbg
from brace.brace_lexer import GRAMMAR, Grammar, Lexer


BINARY_OPS = {
    TokenKind.PLUS: BinaryOp.ADD,
    TokenKind.MINUS: BinaryOp.SUBTRACT,
    TokenKind.STAR: BinaryOp.MULTIPLY,
    TokenKind.SLASH: BinaryOp.DIVIDE,
    TokenKind.PERCENT: BinaryOp.MODULO,
    TokenKind.DOUBLE_EQUAL: BinaryOp.EQUAL,
    TokenKind.BANG_EQUAL: BinaryOp.NOT_EQUAL,
    TokenKind.GREATER: BinaryOp.GREATER,
    TokenKind.GREATER_EQUAL: BinaryOp.GREATER_EQUAL,
    TokenKind.LESSER: BinaryOp.LESSER,
    TokenKind.LESSER_EQUAL: BinaryOp.LESSER_EQUAL,
    TokenKind.AND: BinaryOp.AND,
    TokenKind.AMPERSAND: BinaryOp.AND,
    TokenKind.OR: BinaryOp.OR,
    TokenKind.PIPE: BinaryOp.OR,
}

UNARY_OPS = {
    'not': UnaryOp.NOT,
    'negate': UnaryOp.NEGATE,
}


class Parser:
    """Builds an AST from source text, one parse unit per instance."""

    def __init__(self, source: str, grammar: Grammar = GRAMMAR):
        self.source = source
        self.grammar = grammar
        self._tokens = Lexer(source, grammar)
        self._lookahead: Optional[Token] = None

    # --- token buffer ---

    def peek(self) -> Token:
        if self._lookahead is None:
            self._lookahead = next(self._tokens)
        return self._lookahead

    def advance(self) -> Token:
        """Consumes the lookahead token. EOF is never consumed."""
        tok = self.peek()
        if tok.kind is not TokenKind.EOF:
            self._lookahead = None
        return tok

    def at(self, *kinds: TokenKind) -> bool:
        return self.peek().kind in kinds

    def expect(self, kind: TokenKind) -> Token:
        tok = self.peek()
        if tok.kind is not kind:
            raise self.error(f"expected {kind.describe()}, found {self._describe(tok)}", tok)
        return self.advance()

    def skip_eols(self):
        while self.at(TokenKind.EOL):
            self.advance()

    def error(self, message: str, tok: Token) -> ParseError:
        return ParseError(message, tok.span)

    def _describe(self, tok: Token) -> str:
        if tok.kind in (TokenKind.IDENTIFIER, TokenKind.NUMBER, TokenKind.STRING):
            return f"{tok.kind.value} '{tok.span.text(self.source)}'"
        return tok.kind.describe()

    # --- parse units ---

    def parse_program(self) -> NodeSpan:
        """Program = { "var" Identifier [ "=" Expr ] EOL }"""
        declarations: List[NodeSpan] = []
        self.skip_eols()
        while not self.at(TokenKind.EOF):
            tok = self.peek()
            if tok.kind is TokenKind.FUNC:
                raise self._unsupported_func(tok)
            if tok.kind is not TokenKind.VAR:
                raise self.error(
                    f"expected a 'var' declaration at top level, found {self._describe(tok)}", tok)
            declarations.append(self.parse_declaration())
            self._end_of_statement()
            self.skip_eols()
        return NodeSpan(Block(declarations), self._cover(declarations))

    def parse_single(self) -> NodeSpan:
        """One statement, optionally followed by end-of-line tokens, then end of input."""
        self.skip_eols()
        stmt = self.parse_statement()
        self.skip_eols()
        tok = self.peek()
        if tok.kind is not TokenKind.EOF:
            raise self.error(f"expected end of input, found {self._describe(tok)}", tok)
        return stmt

    def parse_statements(self) -> NodeSpan:
        """A brace-less block body running to end of input, as typed at the prompt."""
        statements: List[NodeSpan] = []
        tail = None
        self.skip_eols()
        while not self.at(TokenKind.EOF):
            stmt = self.parse_statement()
            tok = self.peek()
            if tok.kind is TokenKind.EOF:
                tail = stmt
                break
            self._end_of_statement()
            statements.append(stmt)
            self.skip_eols()
        covered = statements + ([tail] if tail is not None else [])
        return NodeSpan(Block(statements, tail), self._cover(covered))

    # --- statements ---

    def parse_statement(self) -> NodeSpan:
        tok = self.peek()
        if tok.kind is TokenKind.VAR:
            return self.parse_declaration()
        if tok.kind is TokenKind.FUNC:
            raise self._unsupported_func(tok)
        return self.parse_expr()

    def parse_declaration(self) -> NodeSpan:
        var_tok = self.expect(TokenKind.VAR)
        name_tok = self.expect(TokenKind.IDENTIFIER)
        tok = self.peek()
        if tok.kind is TokenKind.EQUAL:
            self.advance()
            value = self.parse_expr()
            span = var_tok.span.union(value.span)
        elif tok.kind in (TokenKind.EOL, TokenKind.EOF, TokenKind.RBRACE):
            value = NodeSpan(Literal(None), name_tok.span)
            span = var_tok.span.union(name_tok.span)
        else:
            raise self.error(
                f"invalid variable declaration: expected '=' or end of line, found {self._describe(tok)}",
                tok)
        dbg("declaration", name_tok.value, span)
        return NodeSpan(Declaration(name_tok.value, value), span)

    def _end_of_statement(self):
        tok = self.peek()
        if tok.kind is TokenKind.EOL:
            self.advance()
        elif tok.kind is not TokenKind.EOF:
            raise self.error(f"expected end of line, found {self._describe(tok)}", tok)

    def parse_block(self) -> NodeSpan:
        """Block = "{" { Stmt EOL } [ TailExpr ] "}" """
        open_tok = self.expect(TokenKind.LBRACE)
        statements: List[NodeSpan] = []
        tail = None
        self.skip_eols()
        while True:
            tok = self.peek()
            if tok.kind is TokenKind.RBRACE:
                break
            if tok.kind is TokenKind.EOF:
                raise self.error("unclosed '{'", open_tok)
            stmt = self.parse_statement()
            tok = self.peek()
            if tok.kind is TokenKind.EOL:
                statements.append(stmt)
                self.skip_eols()
            elif tok.kind is TokenKind.RBRACE:
                tail = stmt
                break
            elif tok.kind is TokenKind.EOF:
                raise self.error("unclosed '{'", open_tok)
            else:
                raise self.error(f"expected end of line or '}}', found {self._describe(tok)}", tok)
        close_tok = self.advance()
        return NodeSpan(Block(statements, tail), open_tok.span.union(close_tok.span))

    # --- expressions ---

    def parse_expr(self, min_bp: int = 0) -> NodeSpan:
        left = self.parse_unary()
        while True:
            tok = self.peek()
            if tok.kind is TokenKind.EQUAL:
                if min_bp > 0:
                    # let the outermost level report the invalid target
                    break
                if not self._is_bare_identifier(left):
                    raise self.error("invalid assignment target: only a variable name can be assigned", tok)
                self.advance()
                value = self.parse_expr()
                left = NodeSpan(Assignment(left.node.name, value), left.span.union(value.span))
                break
            bp = self.grammar.binding_powers.get(tok.kind)
            if bp is None or bp <= min_bp:
                break
            self.advance()
            right = self.parse_expr(bp)
            left = NodeSpan(BinaryExpr(BINARY_OPS[tok.kind], left, right), left.span.union(right.span))
        return left

    def parse_unary(self) -> NodeSpan:
        tok = self.peek()
        op_name = self.grammar.unary.get(tok.kind)
        if op_name is not None:
            self.advance()
            operand = self.parse_unary()
            return NodeSpan(UnaryExpr(UNARY_OPS[op_name], operand), tok.span.union(operand.span))
        expr = self.parse_primary()
        while self.at(TokenKind.LPAREN):
            expr = self.parse_call(expr)
        return expr

    def parse_primary(self) -> NodeSpan:
        tok = self.peek()
        kind = tok.kind
        if kind in (TokenKind.STRING, TokenKind.NUMBER):
            self.advance()
            return NodeSpan(Literal(tok.value), tok.span)
        if kind is TokenKind.TRUE or kind is TokenKind.FALSE:
            self.advance()
            return NodeSpan(Literal(kind is TokenKind.TRUE), tok.span)
        if kind is TokenKind.IDENTIFIER:
            self.advance()
            return NodeSpan(Variable(tok.value), tok.span)
        if kind is TokenKind.DO:
            self.advance()
            body = self.parse_block()
            return NodeSpan(DoBlock(body), tok.span.union(body.span))
        if kind is TokenKind.LOOP:
            self.advance()
            body = self.parse_block()
            return NodeSpan(Loop(body), tok.span.union(body.span))
        if kind is TokenKind.LPAREN:
            return self.parse_paren()
        if kind is TokenKind.FUNC:
            raise self._unsupported_func(tok)
        if kind is TokenKind.VAR:
            raise self.error("a 'var' declaration is not allowed inside an expression", tok)
        if kind is TokenKind.EOF:
            raise self.error("unexpected end of input, expected an expression", tok)
        raise self.error(f"expected an expression, found {self._describe(tok)}", tok)

    def parse_paren(self) -> NodeSpan:
        open_tok = self.expect(TokenKind.LPAREN)
        inner = self.parse_expr()
        tok = self.peek()
        if tok.kind is TokenKind.EOF:
            raise self.error("unclosed '('", open_tok)
        if tok.kind is not TokenKind.RPAREN:
            raise self.error(f"expected ')', found {self._describe(tok)}", tok)
        self.advance()
        return inner.respan(open_tok.span.union(tok.span))

    def parse_call(self, callee: NodeSpan) -> NodeSpan:
        open_tok = self.expect(TokenKind.LPAREN)
        args: List[NodeSpan] = []
        if not self.at(TokenKind.RPAREN):
            while True:
                args.append(self.parse_expr())
                tok = self.peek()
                if tok.kind is TokenKind.COMMA:
                    self.advance()
                    continue
                if tok.kind is TokenKind.RPAREN:
                    break
                if tok.kind is TokenKind.EOF:
                    raise self.error("unclosed '('", open_tok)
                raise self.error(f"expected ',' or ')' in argument list, found {self._describe(tok)}", tok)
        close_tok = self.advance()
        return NodeSpan(Call(callee, args), callee.span.union(close_tok.span))

    # --- helpers ---

    def _is_bare_identifier(self, expr: NodeSpan) -> bool:
        # A parenthesized name has a wider span than the name itself.
        return isinstance(expr.node, Variable) and len(expr.span) == len(expr.node.name)

    def _unsupported_func(self, tok: Token) -> ParseError:
        return self.error("'func' is reserved: function definitions are not supported", tok)

    def _cover(self, nodes: List[NodeSpan]) -> Span:
        if not nodes:
            return Span(0, 0)
        return nodes[0].span.union(nodes[-1].span)


def _run(source: str, entry) -> NodeSpan:
    try:
        return entry(Parser(source))
    except RecursionError:
        raise ParseError("input is nested too deeply", Span(0, len(source))) from None


def parse_program(source: str) -> NodeSpan:
    """Parses a whole file: a Block of top-level declarations."""
    return _run(source, Parser.parse_program)


def parse_single_expression(source: str) -> NodeSpan:
    """Parses exactly one statement (an expression or a declaration)."""
    return _run(source, Parser.parse_single)


def parse_statements(source: str) -> NodeSpan:
    """Parses end-of-line separated statements as typed at the interactive prompt."""
    return _run(source, Parser.parse_statements)
