"""
A pretty-printer for brace values and syntax trees.
"""
import math

from brace.brace_datatypes import (
    NodeSpan, Literal, Variable, Declaration, Assignment, BinaryExpr, UnaryExpr,
    Call, Block, DoBlock, Loop,
)


class Printer:
    """Formats runtime values for display and AST nodes for debugging."""

    def __init__(self, indent_width=2):
        self._indent_char = " " * indent_width
        self._handlers = self._create_handlers()

    def pformat(self, obj):
        """Public entry point to format a runtime value."""
        handler = self._handlers.get(type(obj))
        if handler is None:
            return repr(obj)
        return handler(obj)

    def _create_handlers(self):
        return {
            type(None): self._pformat_none,
            bool: self._pformat_bool,
            float: self._pformat_number,
            str: self._pformat_str,
        }

    def _pformat_none(self, obj):
        return 'null'

    def _pformat_bool(self, obj):
        return 'true' if obj else 'false'

    def _pformat_number(self, obj):
        if math.isnan(obj):
            return 'nan'
        if math.isinf(obj):
            return 'inf' if obj > 0 else '-inf'
        if obj.is_integer() and abs(obj) < 1e16:
            return str(int(obj))
        return repr(obj)

    def _pformat_str(self, obj):
        escaped = (obj.replace('\\', '\\\\').replace('"', '\\"')
                   .replace('\n', '\\n').replace('\t', '\\t'))
        return f'"{escaped}"'

    # --- syntax trees ---

    def pformat_ast(self, ns: NodeSpan, level=0) -> str:
        """Renders an AST as an indented tree, one node per line with its span."""
        indent = self._indent_char * level
        node = ns.node
        head = f"{indent}{self._label(node)} {ns.span!r}"
        children = self._children(node)
        if not children:
            return head
        lines = [head]
        for name, child in children:
            if name:
                lines.append(f"{indent}{self._indent_char}{name}:")
                lines.append(self.pformat_ast(child, level + 2))
            else:
                lines.append(self.pformat_ast(child, level + 1))
        return "\n".join(lines)

    def _label(self, node) -> str:
        match node:
            case Literal(value=value):
                return f"Literal {self.pformat(value)}"
            case Variable(name=name):
                return f"Variable {name}"
            case Declaration(name=name):
                return f"Declaration {name}"
            case Assignment(name=name):
                return f"Assignment {name}"
            case BinaryExpr(op=op):
                return f"BinaryExpr {op.value}"
            case UnaryExpr(op=op):
                return f"UnaryExpr {op.value}"
            case Call(args=args):
                return f"Call ({len(args)} args)"
            case Block(tail=tail):
                return "Block" if tail is None else "Block (with tail)"
        return type(node).__name__

    def _children(self, node):
        match node:
            case Declaration(initializer=initializer):
                return [(None, initializer)]
            case Assignment(value=value):
                return [(None, value)]
            case BinaryExpr(left=left, right=right):
                return [(None, left), (None, right)]
            case UnaryExpr(operand=operand):
                return [(None, operand)]
            case Call(callee=callee, args=args):
                return [('callee', callee)] + [(f'arg {i}', a) for i, a in enumerate(args)]
            case Block(statements=statements, tail=tail):
                children = [(None, s) for s in statements]
                if tail is not None:
                    children.append(('tail', tail))
                return children
            case DoBlock(body=body) | Loop(body=body):
                return [(None, body)]
        return []
