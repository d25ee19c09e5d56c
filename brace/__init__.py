from brace.brace_datatypes import Span, Token, TokenKind, NodeSpan, Scope
from brace.brace_errors import (
    BraceError, LexError, ParseError, BraceRuntimeError, BraceTypeError,
    UndefinedVariable, UnsupportedOperation, LoopLimitExceeded,
    Diagnostic, ErrorBuilder, render_diagnostic,
)
from brace.brace_lexer import lex, tokenize
from brace.brace_parser import parse_program, parse_single_expression, parse_statements
from brace.brace_interpreter import Evaluator, evaluate, truthy
from brace.brace_printer import Printer
from brace.brace_runtime import ExecutionResult, ScriptRunner
