import pytest

from brace.brace_datatypes import Span
from brace.brace_errors import (
    BraceError, LexError, ParseError, BraceRuntimeError, BraceTypeError,
    UndefinedVariable, UnsupportedOperation, LoopLimitExceeded,
    Diagnostic, ErrorBuilder, render_diagnostic, line_col,
)


def test_single_line_diagnostic():
    text = render_diagnostic("var = 5", "expected identifier, found '='", Span(4, 5), "ParseError")
    assert text == (
        "ParseError: expected identifier, found '='\n"
        " --> line 1, col 5\n"
        "> 1 | var = 5\n"
        "    |     ^"
    )


def test_carets_cover_the_whole_span():
    text = render_diagnostic("1 + ghost", "variable 'ghost' is not defined", Span(4, 9))
    assert text.splitlines()[-1] == "    |     ^^^^^"
    assert text.startswith("Error: ")


def test_multi_line_span_underlines_each_line():
    text = render_diagnostic("abc\ndef\nghi", "boom", Span(1, 6))
    assert text.splitlines() == [
        "Error: boom",
        " --> line 1, col 2",
        "> 1 | abc",
        "    |  ^^",
        "> 2 | def",
        "    | ^^",
    ]


def test_span_ending_after_newline_stays_on_its_line():
    lines = render_diagnostic("ab\ncd", "x", Span(0, 3)).splitlines()
    assert lines[2:] == ["> 1 | ab", "    | ^^"]


def test_zero_width_span_at_end_of_input():
    text = render_diagnostic("1 +", "unexpected end of input", Span(3, 3))
    assert text.splitlines()[1:] == [
        " --> line 1, col 4",
        "> 1 | 1 +",
        "    |    ^",
    ]


def test_end_of_input_after_trailing_newline():
    lines = render_diagnostic("1 +\n", "unexpected end of input", Span(4, 4)).splitlines()
    assert lines[1] == " --> line 2, col 1"
    assert lines[3] == "    | ^"


def test_line_numbers_are_right_aligned():
    source = "\n" * 9 + "x"
    lines = render_diagnostic(source, "bad", Span(9, 10)).splitlines()
    assert lines[1:] == [
        "  --> line 10, col 1",
        "> 10 | x",
        "     | ^",
    ]


def test_out_of_range_span_is_clamped():
    lines = render_diagnostic("abc", "late", Span(50, 60)).splitlines()
    assert lines[1] == " --> line 1, col 4"


def test_line_col():
    assert line_col("ab\ncd", 0) == (1, 1)
    assert line_col("ab\ncd", 2) == (1, 3)
    assert line_col("ab\ncd", 3) == (2, 1)
    assert line_col("ab\ncd", 4) == (2, 2)


@pytest.mark.parametrize("error_class, label", [
    (LexError, "LexError"),
    (ParseError, "ParseError"),
    (BraceRuntimeError, "RuntimeError"),
    (BraceTypeError, "TypeError"),
    (UnsupportedOperation, "UnsupportedOperation"),
    (LoopLimitExceeded, "LoopLimitExceeded"),
])
def test_error_labels(error_class, label):
    err = error_class("message", Span(0, 1))
    assert isinstance(err, BraceError)
    diag = err.to_diagnostic("x")
    assert diag.label == label
    assert diag.render().startswith(f"{label}: message")


def test_runtime_errors_share_a_base():
    assert issubclass(BraceTypeError, BraceRuntimeError)
    assert issubclass(UndefinedVariable, BraceRuntimeError)
    assert not issubclass(ParseError, BraceRuntimeError)


def test_undefined_variable_message():
    err = UndefinedVariable("count", Span(2, 7))
    assert err.name == "count"
    assert err.message == "variable 'count' is not defined"
    assert str(err) == err.message
    assert repr(err) == "UndefinedVariable(\"variable 'count' is not defined\", [2..7))"


def test_diagnostic_str_is_its_rendering():
    diag = Diagnostic("1 + x", "oops", Span(4, 5), "RuntimeError")
    assert str(diag) == diag.render() == render_diagnostic("1 + x", "oops", Span(4, 5), "RuntimeError")


class TestErrorBuilder:
    def test_build_renders_without_recording(self):
        builder = ErrorBuilder("var = 5")
        text = builder.build("expected identifier", Span(4, 5), "ParseError")
        assert text.startswith("ParseError: expected identifier")
        assert builder.diagnostics == []
        assert builder.last is None

    def test_emit_records_and_does_not_raise(self):
        builder = ErrorBuilder("a\nb")
        first = builder.emit("first", Span(0, 1))
        second = builder.emit("second", Span(2, 3), "Warning")
        assert builder.diagnostics == [first, second]
        assert builder.last is second
        assert second.render().splitlines()[1] == " --> line 2, col 1"

    def test_emit_error(self):
        builder = ErrorBuilder("1 + true")
        diag = builder.emit_error(BraceTypeError("bad operands", Span(0, 8)))
        assert diag.label == "TypeError"
        assert diag.span == Span(0, 8)
        assert diag.source == "1 + true"
