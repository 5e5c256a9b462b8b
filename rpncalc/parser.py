import enum
import logging
import re
from dataclasses import dataclass
from typing import ClassVar

from rpncalc.config import PARSER_CONFIG
from rpncalc.tokenizer import Token, TokenType, untokenize
from rpncalc.utils import CalculatorError, ErrorKind, PrintableEnum

logger = logging.getLogger(__name__)


@dataclass
class ParserError(CalculatorError):
    tokens: list[Token]
    error_token_idx: int

    kind: ClassVar[ErrorKind] = ErrorKind.SYNTAX

    def __str__(self) -> str:
        rendered = untokenize(self.tokens)
        if self.error_token_idx < len(self.tokens):
            error_token = self.tokens[self.error_token_idx]
            caret_idx = len(untokenize(self.tokens[: self.error_token_idx + 1])) - len(error_token.lexeme)
        else:
            caret_idx = len(rendered) + 1 if rendered else 0
        return "\n".join([f"Parser error: {self.errmsg}", rendered, " " * caret_idx + "^"])


@dataclass
class NestingTooDeepError(ParserError):
    kind: ClassVar[ErrorKind] = ErrorKind.RESOURCE


class BinaryOperator(PrintableEnum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    POW = "^"


OPERATOR_PRECEDENCE = {
    BinaryOperator.ADD: 1,
    BinaryOperator.SUB: 1,
    BinaryOperator.MUL: 2,
    BinaryOperator.DIV: 2,
    BinaryOperator.MOD: 2,
    BinaryOperator.POW: 3,
}


def get_op_precedence(op: BinaryOperator) -> int:
    return OPERATOR_PRECEDENCE[op]


@dataclass
class Variable:
    name: str
    negated: bool = False


@dataclass
class NegatedGroup:
    expression: "Expression"


@dataclass
class Expression:
    """Operands and operators in reverse Polish order"""

    entries: list["RpnEntry"]

    def __str__(self) -> str:
        # iterative: groups may nest up to max_nesting_depth
        pieces: list[str] = []
        pending: list["RpnEntry | str"] = list(reversed(self.entries))
        while pending:
            entry = pending.pop()
            if isinstance(entry, str):
                pieces.append(entry)
            elif isinstance(entry, NegatedGroup):
                pending.extend(["]", *reversed(entry.expression.entries), "-["])
            elif isinstance(entry, Expression):
                pending.extend(["]", *reversed(entry.entries), "["])
            else:
                pieces.append(_format_entry(entry))
        result = " ".join(pieces)
        result = re.sub(r"\[\s+", "[", result)
        result = re.sub(r"\s+\]", "]", result)
        return result


@dataclass
class Assignment:
    name: str
    expression: Expression

    def __str__(self) -> str:
        return f"{self.name} = {self.expression}"


@dataclass
class CompoundAssignment:
    name: str
    operator: BinaryOperator
    expression: Expression

    def __str__(self) -> str:
        return f"{self.name} {self.operator.value}= {self.expression}"


Operand = float | Variable | NegatedGroup | Expression
RpnEntry = Operand | BinaryOperator
Statement = Expression | Assignment | CompoundAssignment


def _format_entry(entry: RpnEntry) -> str:
    if isinstance(entry, BinaryOperator):
        return entry.value
    elif isinstance(entry, Variable):
        return f"-{entry.name}" if entry.negated else entry.name
    else:
        return repr(entry)


class StatementKind(PrintableEnum):
    EXPRESSION = enum.auto()
    ASSIGNMENT = enum.auto()
    COMPOUND_ASSIGNMENT = enum.auto()


def classify_statement(tokens: list[Token]) -> StatementKind:
    if len(tokens) > 1 and tokens[1].type is TokenType.ASSIGN:
        return StatementKind.ASSIGNMENT
    elif len(tokens) > 2 and tokens[1].type is TokenType.OPERATOR and tokens[2].type is TokenType.ASSIGN:
        return StatementKind.COMPOUND_ASSIGNMENT
    else:
        return StatementKind.EXPRESSION


def parse(tokens: list[Token]) -> Statement:
    kind = classify_statement(tokens)
    logger.debug("Statement kind: %s", kind)
    if kind is StatementKind.ASSIGNMENT:
        return Assignment(name=_assignment_target(tokens), expression=_assignment_value(tokens, 2))
    elif kind is StatementKind.COMPOUND_ASSIGNMENT:
        return CompoundAssignment(
            name=_assignment_target(tokens),
            operator=BinaryOperator(tokens[1].lexeme),
            expression=_assignment_value(tokens, 3),
        )
    else:
        expression, _ = parse_expression(tokens, 0)
        return expression


def _assignment_target(tokens: list[Token]) -> str:
    target = tokens[0]
    if target.type is not TokenType.IDENTIFIER:
        raise ParserError(f"can't assign to {target.lexeme!r}", tokens=tokens, error_token_idx=0)
    return target.lexeme


def _assignment_value(tokens: list[Token], i: int) -> Expression:
    if i >= len(tokens):
        raise ParserError("expected expression, got EOF", tokens=tokens, error_token_idx=i)
    expression, _ = parse_expression(tokens, i)
    return expression


def parse_expression(tokens: list[Token], i: int, grouped: bool = False, depth: int = 0) -> tuple[Expression, int]:
    """Shunting-yard over tokens[i:], recursing into parenthesised groups.

    A grouped parse starts right after '(' and stops past the matching ')'.
    A top level parse must consume every remaining token.
    """
    if depth > PARSER_CONFIG["max_nesting_depth"]:
        raise NestingTooDeepError("parentheses nested too deeply", tokens=tokens, error_token_idx=i - 1)

    entries: list[RpnEntry] = []
    operator_stack: list[BinaryOperator] = []
    while True:
        if grouped and not entries and i < len(tokens) and tokens[i].type is TokenType.CLOSE_PAREN:
            raise ParserError("empty expression", tokens=tokens, error_token_idx=i)

        operand, i = _consume_operand(tokens, i, depth)
        entries.append(operand)

        if i >= len(tokens):
            if grouped:
                raise ParserError("expected ')', got EOF", tokens=tokens, error_token_idx=i)
            break

        token = tokens[i]
        if token.type is TokenType.OPERATOR:
            operator = BinaryOperator(token.lexeme)
            while operator_stack and get_op_precedence(operator_stack[-1]) >= get_op_precedence(operator):
                entries.append(operator_stack.pop())
            operator_stack.append(operator)
            i += 1
        elif grouped and token.type is TokenType.CLOSE_PAREN:
            i += 1  # skipping ')'
            break
        elif grouped:
            raise ParserError(f"expected operator or ')', got {token.lexeme!r}", tokens=tokens, error_token_idx=i)
        else:
            raise ParserError(f"expected operator, got {token.lexeme!r}", tokens=tokens, error_token_idx=i)

    while operator_stack:
        entries.append(operator_stack.pop())
    return Expression(entries), i


def _consume_operand(tokens: list[Token], i: int, depth: int) -> tuple[Operand, int]:
    if i >= len(tokens):
        raise ParserError("expected value, got EOF", tokens=tokens, error_token_idx=i)
    token = tokens[i]
    if token.type is TokenType.NUMBER:
        return float(token.lexeme), i + 1
    elif token.type is TokenType.IDENTIFIER:
        return Variable(token.lexeme), i + 1
    elif token.type is TokenType.OPEN_PAREN:
        return parse_expression(tokens, i + 1, grouped=True, depth=depth + 1)
    elif token.type is TokenType.OPERATOR:
        return _consume_signed_operand(tokens, i, depth)
    else:
        raise ParserError(f"expected value, got {token.lexeme!r}", tokens=tokens, error_token_idx=i)


def _consume_signed_operand(tokens: list[Token], i: int, depth: int) -> tuple[Operand, int]:
    """Unary '+'/'-' directly before a number or identifier, or '-' before '('"""
    sign = tokens[i]
    negated = sign.lexeme == "-"
    following = tokens[i + 1] if i + 1 < len(tokens) else None
    if sign.lexeme in ("+", "-") and following is not None:
        if following.type is TokenType.NUMBER:
            value = float(following.lexeme)
            return (-value if negated else value), i + 2
        elif following.type is TokenType.IDENTIFIER:
            return Variable(following.lexeme, negated=negated), i + 2
        elif negated and following.type is TokenType.OPEN_PAREN:
            inner, i = parse_expression(tokens, i + 2, grouped=True, depth=depth + 1)
            return NegatedGroup(inner), i
    raise ParserError(f"expected value, got {sign.lexeme!r}", tokens=tokens, error_token_idx=i)
