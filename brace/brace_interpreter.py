"""
The brace tree-walking evaluator.
"""
import math
import operator
from typing import Optional

from brace.brace_datatypes import (
    Span, NodeSpan, Scope, Value, BinaryOp, UnaryOp,
    Literal, Variable, Declaration, Assignment, BinaryExpr, UnaryExpr,
    Call, Block, DoBlock, Loop,
)
from brace.brace_errors import (
    BraceRuntimeError, BraceTypeError, UndefinedVariable,
    UnsupportedOperation, LoopLimitExceeded, dbg,
)


def type_name(value: Value) -> str:
    match value:
        case None:
            return "null"
        case bool():
            return "bool"
        case float():
            return "number"
        case str():
            return "string"
    return type(value).__name__


def truthy(value: Value) -> bool:
    """Null, false and numeric zero are falsy; every other value is truthy."""
    match value:
        case None:
            return False
        case bool():
            return value
        case float():
            return value != 0
    return True


def values_equal(a: Value, b: Value) -> bool:
    """Structural equality. Values of different kinds are never equal."""
    # bool is an int subclass in Python, so compare kinds explicitly
    return type(a) is type(b) and a == b


_ARITHMETIC = {
    BinaryOp.ADD: operator.add,
    BinaryOp.SUBTRACT: operator.sub,
    BinaryOp.MULTIPLY: operator.mul,
    BinaryOp.DIVIDE: operator.truediv,
    BinaryOp.MODULO: math.fmod,
    BinaryOp.GREATER: operator.gt,
    BinaryOp.GREATER_EQUAL: operator.ge,
    BinaryOp.LESSER: operator.lt,
    BinaryOp.LESSER_EQUAL: operator.le,
}


class Evaluator:
    """Evaluates AST nodes against a chain of scopes."""

    def __init__(self, max_loop_iterations: Optional[int] = None):
        self.max_loop_iterations = max_loop_iterations
        self.current_node: Optional[NodeSpan] = None

    def eval(self, node: NodeSpan, scope: Scope) -> Value:
        """Public entry point. Evaluating a Block pushes a new scope."""
        try:
            return self._eval(node, scope)
        except RecursionError:
            raise BraceRuntimeError("evaluation nested too deeply", node.span) from None

    def run_block(self, block: NodeSpan, scope: Scope) -> Value:
        """Runs a Block's statements directly in scope and returns its tail value."""
        try:
            return self._run_statements(block.node, scope)
        except RecursionError:
            raise BraceRuntimeError("evaluation nested too deeply", block.span) from None

    def _run_statements(self, block: Block, scope: Scope) -> Value:
        for stmt in block.statements:
            self._eval(stmt, scope)
        if block.tail is None:
            return None
        return self._eval(block.tail, scope)

    def _eval(self, ns: NodeSpan, scope: Scope) -> Value:
        self.current_node = ns
        match ns.node:
            case Literal(value=value):
                return value
            case Variable(name=name):
                try:
                    return scope[name]
                except KeyError:
                    raise UndefinedVariable(name, ns.span) from None
            case Declaration(name=name, initializer=initializer):
                value = self._eval(initializer, scope)
                if scope.parent is not None and name in scope.parent:
                    dbg("declaration shadows", name)
                scope.declare(name, value)
                return None
            case Assignment(name=name, value=value_node):
                owner = scope.find_owner(name)
                if owner is None:
                    raise UndefinedVariable(name, Span(ns.span.start, ns.span.start + len(name)))
                value = self._eval(value_node, scope)
                owner.bindings[name] = value
                return value
            case BinaryExpr():
                return self._eval_binary(ns, scope)
            case UnaryExpr(op=op, operand=operand):
                value = self._eval(operand, scope)
                if op is UnaryOp.NOT:
                    return not truthy(value)
                if type(value) is not float:
                    raise BraceTypeError(f"cannot negate a value of type {type_name(value)}", ns.span)
                return -value
            case Call(callee=callee):
                self._eval(callee, scope)
                raise UnsupportedOperation("calling functions is not supported yet", ns.span)
            case Block() as block:
                dbg("enter block, depth", scope.depth() + 1)
                return self._run_statements(block, scope.child())
            case DoBlock(body=body):
                return self._eval(body, scope)
            case Loop(body=body):
                return self._eval_loop(ns, body, scope)
        raise BraceRuntimeError(f"cannot evaluate node {type(ns.node).__name__}", ns.span)

    def _eval_binary(self, ns: NodeSpan, scope: Scope) -> Value:
        node: BinaryExpr = ns.node
        op = node.op
        left = self._eval(node.left, scope)

        # Short-circuit: the right operand is only evaluated when needed.
        if op is BinaryOp.AND:
            return truthy(left) and truthy(self._eval(node.right, scope))
        if op is BinaryOp.OR:
            return truthy(left) or truthy(self._eval(node.right, scope))

        right = self._eval(node.right, scope)
        if op is BinaryOp.EQUAL:
            return values_equal(left, right)
        if op is BinaryOp.NOT_EQUAL:
            return not values_equal(left, right)

        if type(left) is not float or type(right) is not float:
            raise BraceTypeError(
                f"operator '{op.value}' expects two numbers, got {type_name(left)} and {type_name(right)}",
                ns.span)
        if op in (BinaryOp.DIVIDE, BinaryOp.MODULO) and right == 0:
            raise BraceRuntimeError("division by zero", ns.span)
        if op is BinaryOp.MODULO and math.isinf(left):
            # IEEE remainder of an infinite dividend; math.fmod raises instead
            return math.nan
        self.current_node = ns
        try:
            return _ARITHMETIC[op](left, right)
        except (ArithmeticError, ValueError) as e:
            raise BraceRuntimeError(f"operator '{op.value}' failed: {e}", ns.span) from None

    def _eval_loop(self, ns: NodeSpan, body: NodeSpan, scope: Scope) -> Value:
        limit = self.max_loop_iterations
        iterations = 0
        while True:
            if limit is not None and iterations >= limit:
                raise LoopLimitExceeded(f"loop exceeded {limit} iterations", ns.span)
            iterations += 1
            dbg("loop iteration", iterations)
            self._eval(body, scope)


def evaluate(node: NodeSpan, scope: Optional[Scope] = None,
             max_loop_iterations: Optional[int] = None) -> Value:
    """Evaluates node in scope (a fresh top-level scope when omitted)."""
    return Evaluator(max_loop_iterations).eval(node, scope if scope is not None else Scope())
