import pytest

from rpncalc.config import PARSER_CONFIG
from rpncalc.parser import (
    Assignment,
    BinaryOperator,
    CompoundAssignment,
    Expression,
    NegatedGroup,
    NestingTooDeepError,
    ParserError,
    StatementKind,
    Variable,
    classify_statement,
    parse,
    parse_expression,
)
from rpncalc.tokenizer import tokenize
from rpncalc.utils import ErrorKind

ADD = BinaryOperator.ADD
SUB = BinaryOperator.SUB
MUL = BinaryOperator.MUL
POW = BinaryOperator.POW


@pytest.mark.parametrize(
    "code, expected_rpn",
    [
        pytest.param("2+3*4", [2.0, 3.0, 4.0, MUL, ADD]),
        pytest.param("2*3+4", [2.0, 3.0, MUL, 4.0, ADD]),
        pytest.param("1-2+3", [1.0, 2.0, SUB, 3.0, ADD]),
        pytest.param("2^3^2", [2.0, 3.0, POW, 2.0, POW]),
        pytest.param("-x * +y", [Variable("x", negated=True), Variable("y"), MUL]),
        pytest.param("(1+2)*3", [Expression([1.0, 2.0, ADD]), 3.0, MUL]),
        pytest.param("-(1)", [NegatedGroup(Expression([1.0]))]),
    ],
)
def test_rpn_order(code: str, expected_rpn: list) -> None:
    assert parse(tokenize(code)) == Expression(expected_rpn)


def test_grouped_parse_advances_past_close_paren() -> None:
    tokens = tokenize("(1 + 2) * 3")
    group, i = parse_expression(tokens, 1, grouped=True)
    assert group == Expression([1.0, 2.0, ADD])
    assert i == 5


def test_expression_str() -> None:
    assert str(parse(tokenize("-(a + 1) * -b"))) == "-[a 1.0 +] -b *"


@pytest.mark.parametrize(
    "code, kind",
    [
        pytest.param("x = 1", StatementKind.ASSIGNMENT),
        pytest.param("x += 1", StatementKind.COMPOUND_ASSIGNMENT),
        pytest.param("x ^= 2", StatementKind.COMPOUND_ASSIGNMENT),
        pytest.param("x + 1", StatementKind.EXPRESSION),
        pytest.param("x", StatementKind.EXPRESSION),
        pytest.param("", StatementKind.EXPRESSION),
        pytest.param("5 = 1", StatementKind.ASSIGNMENT),
    ],
)
def test_classify_statement(code: str, kind: StatementKind) -> None:
    assert classify_statement(tokenize(code)) is kind


def test_parse_assignment() -> None:
    assert parse(tokenize("x = y * 2")) == Assignment(name="x", expression=Expression([Variable("y"), 2.0, MUL]))


def test_parse_compound_assignment() -> None:
    assert parse(tokenize("total -= -1")) == CompoundAssignment(
        name="total", operator=SUB, expression=Expression([-1.0])
    )


@pytest.mark.parametrize(
    "code, errmsg, error_token_idx",
    [
        pytest.param("", "expected value, got EOF", 0),
        pytest.param("1 +", "expected value, got EOF", 2),
        pytest.param("1 + )", "expected value, got ')'", 2),
        pytest.param("1 * * 2", "expected value, got '*'", 2),
        pytest.param("*2", "expected value, got '*'", 0),
        pytest.param("+(1)", "expected value, got '+'", 0),
        pytest.param("- -1", "expected value, got '-'", 0),
        pytest.param("1 2", "expected operator, got '2'", 1),
        pytest.param("1 )", "expected operator, got ')'", 1),
        pytest.param("x = 1 = 2", "expected operator, got '='", 3),
        pytest.param("()", "empty expression", 1),
        pytest.param("-()", "empty expression", 2),
        pytest.param("(1+2", "expected ')', got EOF", 4),
        pytest.param("(1 2)", "expected operator or ')', got '2'", 2),
        pytest.param("5 = 1", "can't assign to '5'", 0),
        pytest.param("(x) += 1", "expected value, got '='", 4),
        pytest.param("1 += 1", "can't assign to '1'", 0),
        pytest.param("x =", "expected expression, got EOF", 2),
        pytest.param("x *=", "expected expression, got EOF", 3),
    ],
)
def test_parser_errors(code: str, errmsg: str, error_token_idx: int) -> None:
    with pytest.raises(ParserError) as exc_info:
        parse(tokenize(code))
    assert exc_info.value.errmsg == errmsg
    assert exc_info.value.error_token_idx == error_token_idx
    assert exc_info.value.kind is ErrorKind.SYNTAX


def test_parser_error_rendering() -> None:
    with pytest.raises(ParserError) as exc_info:
        parse(tokenize("1 2"))
    assert str(exc_info.value) == "\n".join(["Parser error: expected operator, got '2'", "1 2", "  ^"])


def test_parser_error_rendering_at_eof() -> None:
    with pytest.raises(ParserError) as exc_info:
        parse(tokenize("(1 + 2"))
    assert str(exc_info.value).splitlines()[-1] == " " * 7 + "^"


def test_nesting_limit() -> None:
    depth = PARSER_CONFIG["max_nesting_depth"]
    nested = parse(tokenize("(" * 20 + "1" + ")" * 20))
    for _ in range(21):
        (nested,) = nested.entries
    assert nested == 1.0
    with pytest.raises(NestingTooDeepError) as exc_info:
        parse(tokenize("(" * (depth + 1) + "1" + ")" * (depth + 1)))
    assert exc_info.value.kind is ErrorKind.RESOURCE


def test_deeply_nested_statement_str() -> None:
    inner = PARSER_CONFIG["max_nesting_depth"] - 1
    statement = parse(tokenize("total += (" + "-(" * inner + "v" + ")" * inner + ")"))
    assert str(statement) == "total += [" + "-[" * inner + "v" + "]" * inner + "]"
