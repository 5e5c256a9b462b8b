import math
from dataclasses import dataclass
from typing import Callable, ClassVar

from rpncalc.parser import (
    Assignment,
    BinaryOperator,
    CompoundAssignment,
    Expression,
    NegatedGroup,
    Operand,
    Statement,
    Variable,
)
from rpncalc.utils import CalculatorError, ErrorKind

Variables = dict[str, float]


@dataclass
class CalcRuntimeError(CalculatorError):
    kind: ClassVar[ErrorKind] = ErrorKind.EVALUATION


@dataclass
class UndefinedVariableError(CalculatorError):
    name: str

    kind: ClassVar[ErrorKind] = ErrorKind.SEMANTIC


def evaluate(statement: Statement, variables: Variables) -> float:
    """Evaluates a parsed statement; the store is only written once the right-hand side succeeded"""
    if isinstance(statement, Assignment):
        value = evaluate_expression(statement.expression, variables)
        variables[statement.name] = value
        return value
    elif isinstance(statement, CompoundAssignment):
        current = _lookup(statement.name, variables)
        value = apply_operator(statement.operator, current, evaluate_expression(statement.expression, variables))
        variables[statement.name] = value
        return value
    elif isinstance(statement, Expression):
        return evaluate_expression(statement, variables)
    else:
        raise CalcRuntimeError(f"Unexpected statement type: {statement}")


def evaluate_expression(expression: Expression, variables: Variables) -> float:
    stack: list[float] = []
    for entry in expression.entries:
        if isinstance(entry, BinaryOperator):
            if len(stack) < 2:
                raise CalcRuntimeError(f"internal error, missing operands for {entry.value!r}")
            right = stack.pop()
            left = stack.pop()
            stack.append(apply_operator(entry, left, right))
        else:
            stack.append(evaluate_operand(entry, variables))
    if len(stack) != 1:
        raise CalcRuntimeError(f"internal error, invalid stack size {len(stack)}")
    return stack[0]


def evaluate_operand(operand: Operand, variables: Variables) -> float:
    if isinstance(operand, float):
        return operand
    elif isinstance(operand, Variable):
        value = _lookup(operand.name, variables)
        return -value if operand.negated else value
    elif isinstance(operand, NegatedGroup):
        return -evaluate_expression(operand.expression, variables)
    elif isinstance(operand, Expression):
        return evaluate_expression(operand, variables)
    else:
        raise CalcRuntimeError(f"Unexpected operand type: {operand}")


def _lookup(name: str, variables: Variables) -> float:
    if name not in variables:
        raise UndefinedVariableError(f"undefined variable {name!r}", name=name)
    return variables[name]


def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and x.is_integer() and x % 2 == 1


# Python raises where IEEE 754 produces inf or nan; these give the IEEE results instead


def _divide(a: float, b: float) -> float:
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _remainder(a: float, b: float) -> float:
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan


def _power(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        return -math.inf if a < 0 and _is_odd_integer(b) else math.inf
    except ValueError:
        if a == 0:
            return math.copysign(math.inf, a) if _is_odd_integer(b) else math.inf
        return math.nan


BINARY_OPERATIONS: dict[BinaryOperator, Callable[[float, float], float]] = {
    BinaryOperator.ADD: lambda a, b: a + b,
    BinaryOperator.SUB: lambda a, b: a - b,
    BinaryOperator.MUL: lambda a, b: a * b,
    BinaryOperator.DIV: _divide,
    BinaryOperator.MOD: _remainder,
    BinaryOperator.POW: _power,
}


def apply_operator(operator: BinaryOperator, left: float, right: float) -> float:
    return BINARY_OPERATIONS[operator](left, right)
