import math

import pytest

from brace.brace_parser import parse_program, parse_single_expression, parse_statements
from brace.brace_printer import Printer


@pytest.fixture
def printer():
    return Printer()


PFORMAT_CASES = [
    ("null", None, "null"),
    ("true", True, "true"),
    ("false", False, "false"),
    ("integral", 7.0, "7"),
    ("negative_integral", -3.0, "-3"),
    ("zero", 0.0, "0"),
    ("fraction", 2.5, "2.5"),
    ("small_fraction", 0.1, "0.1"),
    ("huge", 1e20, "1e+20"),
    ("inf", math.inf, "inf"),
    ("neg_inf", -math.inf, "-inf"),
    ("nan", math.nan, "nan"),
    ("string", "hi", '"hi"'),
    ("empty_string", "", '""'),
    ("escaped_string", 'a"b\\c\nd\te', r'"a\"b\\c\nd\te"'),
]


@pytest.mark.parametrize("case_id, value, expected", PFORMAT_CASES,
                         ids=[c[0] for c in PFORMAT_CASES])
def test_pformat(printer, case_id, value, expected):
    assert printer.pformat(value) == expected


def test_pformat_falls_back_to_repr(printer):
    assert printer.pformat(3) == "3"
    assert printer.pformat([1]) == "[1]"


def test_ast_of_program(printer):
    text = printer.pformat_ast(parse_program("var x = -1 + 2"))
    assert text.splitlines() == [
        "Block [0..14)",
        "  Declaration x [0..14)",
        "    BinaryExpr + [8..14)",
        "      UnaryExpr - [8..10)",
        "        Literal 1 [9..10)",
        "      Literal 2 [13..14)",
    ]


def test_ast_of_interactive_line_shows_tail(printer):
    text = printer.pformat_ast(parse_statements("var s = \"a\"; s"))
    assert text.splitlines() == [
        "Block (with tail) [0..14)",
        "  Declaration s [0..11)",
        '    Literal "a" [8..11)',
        "  tail:",
        "    Variable s [13..14)",
    ]


def test_ast_of_call_names_its_parts(printer):
    text = printer.pformat_ast(parse_single_expression("f(true, x = 1)"))
    assert text.splitlines() == [
        "Call (2 args) [0..14)",
        "  callee:",
        "    Variable f [0..1)",
        "  arg 0:",
        "    Literal true [2..6)",
        "  arg 1:",
        "    Assignment x [8..13)",
        "      Literal 1 [12..13)",
    ]


def test_ast_of_loop_and_do(printer):
    text = printer.pformat_ast(parse_single_expression("loop { do { } }"))
    assert text.splitlines() == [
        "Loop [0..15)",
        "  Block (with tail) [5..15)",
        "    tail:",
        "      DoBlock [7..13)",
        "        Block [10..13)",
    ]


def test_indent_width(printer):
    wide = Printer(indent_width=4)
    text = wide.pformat_ast(parse_single_expression("not x"))
    assert text.splitlines() == ["UnaryExpr not [0..5)", "    Variable x [4..5)"]
