"""
Parses and executes brace code, turning failures into structured results.
"""
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional

from brace.brace_datatypes import NodeSpan, Scope, Span
from brace.brace_errors import BraceError, Diagnostic, ErrorBuilder, dbg
from brace.brace_interpreter import Evaluator
from brace.brace_parser import parse_program, parse_statements
from brace.brace_printer import Printer


@dataclass
class ExecutionResult:
    """The structured result of a script execution."""
    status: Literal['success', 'error']
    value: Any = None
    error_message: Optional[str] = None
    diagnostic: Optional[Diagnostic] = None

    def format_error(self) -> str:
        """The rendered diagnostic, with source excerpt and caret marker."""
        if self.status != 'error':
            return ""
        if self.diagnostic is not None:
            return self.diagnostic.render()
        return str(self.error_message or "Unknown error")


class ScriptRunner:
    """Parses and executes brace code against one persistent top-level scope.

    Bindings made by one call to handle_line or handle_script stay visible to
    later calls on the same runner.
    """

    def __init__(self, max_loop_iterations: Optional[int] = None):
        self.root_scope = Scope()
        self.evaluator = Evaluator(max_loop_iterations)
        self.printer = Printer()

    def handle_script(self, source_code: str) -> ExecutionResult:
        """Runs a program file: top-level declarations, executed in order."""
        return self._execute(source_code, parse_program)

    def handle_line(self, source_code: str) -> ExecutionResult:
        """Runs one line of interactive input and returns its value."""
        return self._execute(source_code, parse_statements)

    def dump_ast(self, source_code: str, interactive: bool = False) -> ExecutionResult:
        """Parses without executing; the value is the rendered syntax tree."""
        parse = parse_statements if interactive else parse_program
        try:
            tree = parse(source_code)
        except BraceError as e:
            return self._error(source_code, e)
        return ExecutionResult(status='success', value=self.printer.pformat_ast(tree))

    def _execute(self, source_code: str, parse: Callable[[str], NodeSpan]) -> ExecutionResult:
        self.evaluator.current_node = None
        try:
            tree = parse(source_code)
            dbg("parsed", tree.span)
            value = self.evaluator.run_block(tree, self.root_scope)
        except BraceError as e:
            return self._error(source_code, e)
        except Exception as e:
            node = self.evaluator.current_node
            span = node.span if node is not None else Span(0, len(source_code))
            diag = ErrorBuilder(source_code).emit(str(e), span, "InternalError")
            return ExecutionResult(status='error', error_message=diag.render(), diagnostic=diag)
        return ExecutionResult(status='success', value=value)

    def _error(self, source_code: str, error: BraceError) -> ExecutionResult:
        diag = ErrorBuilder(source_code).emit_error(error)
        return ExecutionResult(status='error', error_message=diag.render(), diagnostic=diag)
