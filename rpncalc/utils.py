import enum
from dataclasses import dataclass
from typing import ClassVar

WHITESPACE = " \t\n\r"


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


class ErrorKind(PrintableEnum):
    LEXICAL = enum.auto()
    SYNTAX = enum.auto()
    SEMANTIC = enum.auto()
    EVALUATION = enum.auto()
    RESOURCE = enum.auto()


@dataclass
class CalculatorError(Exception):
    """Base of every failure that aborts the current statement"""

    errmsg: str

    kind: ClassVar[ErrorKind] = ErrorKind.EVALUATION

    def __str__(self) -> str:
        return self.errmsg


def split_statements(line: str, separator: str = ";") -> list[str]:
    """Splits on the separator; an empty piece after the last separator is dropped"""
    pieces = line.split(separator)
    if not pieces[-1]:
        pieces.pop()
    return pieces


def is_blank(code: str) -> bool:
    return not code.strip(WHITESPACE)


@dataclass
class ResourceExhaustedError(CalculatorError):
    kind: ClassVar[ErrorKind] = ErrorKind.RESOURCE
