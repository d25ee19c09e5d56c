"""
Error types and the diagnostic renderer.

Every failure raised by the lexer, parser or evaluator is a BraceError
carrying a message and exactly one source span. Rendering a diagnostic is a
pure function of (source, message, span); printing it is left to the caller.
"""
import os
import sys
from dataclasses import dataclass
from typing import List, Optional, Tuple

from brace.brace_datatypes import Span


def dbg(*parts):
    """Debug trace to stderr, enabled by the BRACE_DEBUG environment variable."""
    if os.environ.get("BRACE_DEBUG"):
        print("[DBG]", *parts, file=sys.stderr)


class BraceError(Exception):
    """Base class for all errors that point at a span of source text."""
    label = "Error"

    def __init__(self, message: str, span: Span):
        super().__init__(message)
        self.message = message
        self.span = span

    def to_diagnostic(self, source: str) -> 'Diagnostic':
        return Diagnostic(source, self.message, self.span, self.label)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, {self.span!r})"


class LexError(BraceError):
    label = "LexError"


class ParseError(BraceError):
    label = "ParseError"


class BraceRuntimeError(BraceError):
    label = "RuntimeError"


class BraceTypeError(BraceRuntimeError):
    label = "TypeError"


class UndefinedVariable(BraceRuntimeError):
    label = "UndefinedVariable"

    def __init__(self, name: str, span: Span):
        super().__init__(f"variable '{name}' is not defined", span)
        self.name = name


class UnsupportedOperation(BraceRuntimeError):
    label = "UnsupportedOperation"


class LoopLimitExceeded(BraceRuntimeError):
    label = "LoopLimitExceeded"


# =================================================================
# Rendering
# =================================================================

def _line_starts(source: str) -> List[int]:
    starts = [0]
    for i, ch in enumerate(source):
        if ch == '\n':
            starts.append(i + 1)
    return starts


def _line_of(starts: List[int], offset: int) -> int:
    """0-based index of the line containing offset."""
    lo, hi = 0, len(starts) - 1
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if starts[mid] <= offset:
            lo = mid
        else:
            hi = mid - 1
    return lo


def line_col(source: str, offset: int) -> Tuple[int, int]:
    """1-based (line, column) of an offset into source."""
    starts = _line_starts(source)
    idx = _line_of(starts, offset)
    return idx + 1, offset - starts[idx] + 1


def render_diagnostic(source: str, message: str, span: Span, label: str = "Error") -> str:
    """Renders message with the source lines covered by span and a caret underline."""
    end_of_source = len(source)
    start = min(span.start, end_of_source)
    end = min(max(span.end, start), end_of_source)

    starts = _line_starts(source)
    lines = source.split('\n')
    first = _line_of(starts, start)
    # a span ending right after a newline does not touch the next line
    last = _line_of(starts, end - 1) if end > start else first
    width = len(str(last + 1))

    line, col = line_col(source, start)
    out = [f"{label}: {message}",
           f"{' ' * width}--> line {line}, col {col}"]
    for idx in range(first, last + 1):
        content = lines[idx]
        line_start = starts[idx]
        col_from = max(start, line_start) - line_start
        col_to = min(end, line_start + len(content)) - line_start
        out.append(f"> {str(idx + 1).rjust(width)} | {content}")
        out.append(f"  {' ' * width} | {' ' * col_from}{'^' * max(col_to - col_from, 1)}")
    return "\n".join(out)


@dataclass(frozen=True)
class Diagnostic:
    source: str
    message: str
    span: Span
    label: str = "Error"

    def render(self) -> str:
        return render_diagnostic(self.source, self.message, self.span, self.label)

    def __str__(self) -> str:
        return self.render()


class ErrorBuilder:
    """Binds a source text so diagnostics can be built from (message, span) alone."""

    def __init__(self, source: str):
        self.source = source
        self.diagnostics: List[Diagnostic] = []

    def build(self, message: str, span: Span, label: str = "Error") -> str:
        return render_diagnostic(self.source, message, span, label)

    def emit(self, message: str, span: Span, label: str = "Error") -> Diagnostic:
        """Records a diagnostic. The caller decides whether to abort."""
        diag = Diagnostic(self.source, message, span, label)
        self.diagnostics.append(diag)
        return diag

    def emit_error(self, error: BraceError) -> Diagnostic:
        return self.emit(error.message, error.span, error.label)

    @property
    def last(self) -> Optional[Diagnostic]:
        return self.diagnostics[-1] if self.diagnostics else None
