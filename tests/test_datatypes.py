import pytest

from brace.brace_datatypes import Span, Scope, NodeSpan, Literal, TokenKind


class TestSpan:
    def test_union(self):
        assert Span(2, 4).union(Span(7, 9)) == Span(2, 9)
        assert Span(7, 9).union(Span(2, 4)) == Span(2, 9)
        assert Span(1, 10).union(Span(3, 4)) == Span(1, 10)

    def test_text_and_len(self):
        assert Span(4, 9).text("1 + ghost") == "ghost"
        assert len(Span(4, 9)) == 5
        assert len(Span(3, 3)) == 0

    def test_repr(self):
        assert repr(Span(0, 5)) == "[0..5)"

    @pytest.mark.parametrize("start, end", [(-1, 2), (5, 4)])
    def test_invalid(self, start, end):
        with pytest.raises(ValueError):
            Span(start, end)

    def test_is_hashable_value(self):
        assert {Span(1, 2), Span(1, 2)} == {Span(1, 2)}


def test_respan_keeps_node():
    ns = NodeSpan(Literal(1.0), Span(1, 2))
    wider = ns.respan(Span(0, 3))
    assert wider.node is ns.node
    assert wider.span == Span(0, 3)
    assert ns.span == Span(1, 2)


def test_token_kind_describe():
    assert TokenKind.EQUAL.describe() == "'='"
    assert TokenKind.IDENTIFIER.describe() == "identifier"
    assert TokenKind.EOF.describe() == "end of input"


class TestScope:
    def test_declare_and_lookup(self):
        scope = Scope()
        scope.declare("a", 1.0)
        assert scope["a"] == 1.0
        assert "a" in scope
        assert "b" not in scope
        with pytest.raises(KeyError):
            scope["b"]

    def test_lookup_walks_parents(self):
        root = Scope()
        root.declare("a", 1.0)
        inner = root.child().child()
        assert inner["a"] == 1.0
        assert inner.find_owner("a") is root
        assert inner.depth() == 2
        assert root.depth() == 0

    def test_shadowing(self):
        root = Scope()
        root.declare("a", 1.0)
        inner = root.child()
        inner.declare("a", 2.0)
        assert inner["a"] == 2.0
        assert root["a"] == 1.0
        assert inner.find_owner("a") is inner
        assert list(inner.keys()) == ["a"]

    def test_null_binding_is_still_bound(self):
        scope = Scope()
        scope.declare("x", None)
        assert "x" in scope
        assert scope.find_owner("x") is scope

    def test_repr_lists_own_bindings(self):
        root = Scope()
        root.declare("a", 1.0)
        root.declare("b", None)
        assert repr(root) == "<Scope bindings=[a, b]>"
        assert repr(root.child()).startswith("<Scope bindings=[], parent=#")
