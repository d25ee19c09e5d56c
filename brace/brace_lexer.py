"""
Turns brace source text into a lazy stream of spanned tokens.
"""
import re
from pathlib import Path
from typing import Dict, Iterator, List

import yaml

from brace.brace_datatypes import Span, Token, TokenKind
from brace.brace_errors import LexError, dbg


GRAMMAR_PATH = Path(__file__).parent / "grammar" / "brace_grammar.yaml"


class Grammar:
    """The token table and operator binding powers, loaded from YAML."""

    def __init__(self, data: dict):
        self.keywords: Dict[str, TokenKind] = {
            str(word): self._kind(name) for word, name in data['keywords'].items()
        }
        self.symbols: Dict[str, TokenKind] = {
            str(text): self._kind(name) for text, name in data['symbols'].items()
        }
        # Binding powers start at 1 so that 0 can mean "any operator".
        self.binding_powers: Dict[TokenKind, int] = {}
        for level, names in enumerate(data['binary_precedence'], start=1):
            for name in names:
                self.binding_powers[self._kind(name)] = level
        self.unary: Dict[TokenKind, str] = {
            self._kind(name): str(op) for name, op in data['unary'].items()
        }

    @staticmethod
    def _kind(name) -> TokenKind:
        try:
            return TokenKind[str(name)]
        except KeyError:
            raise ValueError(f"grammar names unknown token kind {name!r}") from None

    @classmethod
    def from_file(cls, path) -> 'Grammar':
        with open(path, 'r', encoding='utf-8') as f:
            return cls(yaml.safe_load(f))

    def symbol_pattern(self) -> str:
        # Longest alternatives first gives maximal munch: '==' before '=', '<=' before '<'.
        ordered = sorted(self.symbols, key=len, reverse=True)
        return '|'.join(re.escape(s) for s in ordered)


GRAMMAR = Grammar.from_file(GRAMMAR_PATH)

_ESCAPES = {'n': '\n', 't': '\t', '"': '"', '\\': '\\'}


class Lexer:
    """Produces tokens on demand; iteration ends after a single EOF token.

    Malformed input raises LexError at the point the offending token would
    have been produced.
    """

    def __init__(self, source: str, grammar: Grammar = GRAMMAR):
        self.source = source
        self.grammar = grammar
        self.pos = 0
        self._regex = re.compile(
            r'(?P<WS>[ \t\r]+)'
            r'|(?P<NUMBER>[0-9]+(?:\.[0-9]+)?)'
            r'|(?P<IDENT>[A-Za-z_][A-Za-z0-9_]*)'
            r'|(?P<STRING>")'
            rf'|(?P<SYMBOL>{grammar.symbol_pattern()})'
        )
        self._tokens = self._scan()

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        return next(self._tokens)

    def _scan(self) -> Iterator[Token]:
        source = self.source
        while self.pos < len(source):
            m = self._regex.match(source, self.pos)
            if m is None:
                raise LexError(f"unexpected character {source[self.pos]!r}",
                               Span(self.pos, self.pos + 1))
            kind = m.lastgroup
            start, end = m.span()
            if kind == 'WS':
                self.pos = end
                continue
            if kind == 'STRING':
                token = self._string(start)
            elif kind == 'NUMBER':
                token = Token(TokenKind.NUMBER, Span(start, end), float(m.group()))
            elif kind == 'IDENT':
                word = m.group()
                keyword = self.grammar.keywords.get(word)
                if keyword is not None:
                    token = Token(keyword, Span(start, end))
                else:
                    token = Token(TokenKind.IDENTIFIER, Span(start, end), word)
            else:
                token = Token(self.grammar.symbols[m.group()], Span(start, end))
            self.pos = token.span.end
            dbg("token", token)
            yield token
        yield Token(TokenKind.EOF, Span(len(source), len(source)))

    def _string(self, start: int) -> Token:
        source = self.source
        chars: List[str] = []
        i = start + 1
        while i < len(source):
            ch = source[i]
            if ch == '"':
                return Token(TokenKind.STRING, Span(start, i + 1), ''.join(chars))
            if ch == '\\' and i + 1 < len(source):
                esc = source[i + 1]
                if esc not in _ESCAPES:
                    raise LexError(f"unknown escape sequence '\\{esc}'", Span(i, i + 2))
                chars.append(_ESCAPES[esc])
                i += 2
                continue
            chars.append(ch)
            i += 1
        raise LexError("unterminated string literal", Span(start, len(source)))


def lex(source: str) -> Iterator[Token]:
    """Lazily tokenizes source. The final token is always EOF."""
    return Lexer(source)


def tokenize(source: str) -> List[Token]:
    """Eagerly tokenizes source into a list (EOF included)."""
    return list(Lexer(source))
