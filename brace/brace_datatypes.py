"""
Core data types shared by the brace lexer, parser and evaluator.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


# =================================================================
# Source spans
# =================================================================

@dataclass(frozen=True)
class Span:
    """Half-open range [start, end) of offsets into the source text."""
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"invalid span [{self.start}, {self.end})")

    def union(self, other: 'Span') -> 'Span':
        """Smallest span covering both self and other."""
        return Span(min(self.start, other.start), max(self.end, other.end))

    def text(self, source: str) -> str:
        return source[self.start:self.end]

    def __len__(self) -> int:
        return self.end - self.start

    def __repr__(self) -> str:
        return f"[{self.start}..{self.end})"


# =================================================================
# Tokens
# =================================================================

class TokenKind(Enum):
    # keywords
    VAR = 'var'
    DO = 'do'
    LOOP = 'loop'
    FUNC = 'func'
    TRUE = 'true'
    FALSE = 'false'
    AND = 'and'
    OR = 'or'
    NOT = 'not'
    # literals and names
    STRING = 'string'
    NUMBER = 'number'
    IDENTIFIER = 'identifier'
    # punctuation
    LPAREN = '('
    RPAREN = ')'
    LBRACE = '{'
    RBRACE = '}'
    COMMA = ','
    EOL = 'end of line'
    # operators
    PLUS = '+'
    MINUS = '-'
    STAR = '*'
    SLASH = '/'
    PERCENT = '%'
    EQUAL = '='
    DOUBLE_EQUAL = '=='
    BANG_EQUAL = '!='
    GREATER = '>'
    GREATER_EQUAL = '>='
    LESSER = '<'
    LESSER_EQUAL = '<='
    AMPERSAND = '&'
    PIPE = '|'
    BANG = '!'
    # end of input
    EOF = 'end of input'

    def describe(self) -> str:
        """Human-readable name for error messages."""
        if self in (TokenKind.STRING, TokenKind.NUMBER, TokenKind.IDENTIFIER,
                    TokenKind.EOL, TokenKind.EOF):
            return self.value
        return f"'{self.value}'"


@dataclass(frozen=True)
class Token:
    """A lexed token. `value` holds the decoded literal for strings and numbers."""
    kind: TokenKind
    span: Span
    value: Any = None

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.kind.name}, {self.value!r}, {self.span!r})"
        return f"Token({self.kind.name}, {self.span!r})"


# =================================================================
# AST
# =================================================================

class BinaryOp(Enum):
    ADD = '+'
    SUBTRACT = '-'
    MULTIPLY = '*'
    DIVIDE = '/'
    MODULO = '%'
    EQUAL = '=='
    NOT_EQUAL = '!='
    GREATER = '>'
    GREATER_EQUAL = '>='
    LESSER = '<'
    LESSER_EQUAL = '<='
    AND = 'and'
    OR = 'or'


class UnaryOp(Enum):
    NOT = 'not'
    NEGATE = '-'


class Node:
    """Base class for all AST node payloads."""


@dataclass
class NodeSpan:
    """An AST node paired with the span of the tokens it was built from."""
    node: 'Node'
    span: Span

    def respan(self, span: Span) -> 'NodeSpan':
        return NodeSpan(self.node, span)


@dataclass
class Literal(Node):
    # None, bool, float or str
    value: Any


@dataclass
class Variable(Node):
    name: str


@dataclass
class Declaration(Node):
    name: str
    initializer: NodeSpan


@dataclass
class Assignment(Node):
    name: str
    value: NodeSpan


@dataclass
class BinaryExpr(Node):
    op: BinaryOp
    left: NodeSpan
    right: NodeSpan


@dataclass
class UnaryExpr(Node):
    op: UnaryOp
    operand: NodeSpan


@dataclass
class Call(Node):
    callee: NodeSpan
    args: List[NodeSpan] = field(default_factory=list)


@dataclass
class Block(Node):
    """Statements run for effect; `tail`, when present, is the block's value."""
    statements: List[NodeSpan] = field(default_factory=list)
    tail: Optional[NodeSpan] = None


@dataclass
class DoBlock(Node):
    body: NodeSpan


@dataclass
class Loop(Node):
    body: NodeSpan


Value = Union[None, bool, float, str]


# =================================================================
# Scopes
# =================================================================

class Scope:
    """A table of variable bindings chained to its enclosing scope.

    Lookups walk outward through `parent` until a scope that owns the
    name is found. Declarations always bind in the scope they are made on.
    """
    def __init__(self, parent: Optional['Scope'] = None):
        self.bindings: Dict[str, Value] = {}
        self.parent = parent

    def declare(self, name: str, value: Value):
        self.bindings[name] = value

    def find_owner(self, name: str) -> Optional['Scope']:
        """Finds the nearest scope in the chain that binds `name`."""
        scope = self
        while scope is not None:
            if name in scope.bindings:
                return scope
            scope = scope.parent
        return None

    def __getitem__(self, name: str) -> Value:
        owner = self.find_owner(name)
        if owner is None:
            raise KeyError(name)
        return owner.bindings[name]

    def __contains__(self, name: str) -> bool:
        return self.find_owner(name) is not None

    def child(self) -> 'Scope':
        return Scope(parent=self)

    def depth(self) -> int:
        n, scope = 0, self.parent
        while scope is not None:
            n += 1
            scope = scope.parent
        return n

    def keys(self):
        """Names bound directly on this scope."""
        return self.bindings.keys()

    def __repr__(self) -> str:
        keys = ', '.join(self.keys())
        parent_id = f", parent=#{id(self.parent)}" if self.parent else ""
        return f"<Scope bindings=[{keys}]{parent_id}>"
