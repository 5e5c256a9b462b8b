import enum
import re
import string
from dataclasses import dataclass
from typing import ClassVar

from rpncalc.utils import WHITESPACE, CalculatorError, ErrorKind, PrintableEnum


@dataclass
class TokenizerError(CalculatorError):
    code: str
    error_char_idx: int

    kind: ClassVar[ErrorKind] = ErrorKind.LEXICAL

    def __str__(self) -> str:
        print_start_idx = max(0, self.error_char_idx - 10)
        print_ellipsis_pre = print_start_idx > 0
        print_end_idx = min(len(self.code), self.error_char_idx + 10)
        print_ellipsis_post = print_end_idx < len(self.code)
        return "\n".join(
            [
                f"[Tokenizer error] {self.errmsg}",
                (
                    ("..." if print_ellipsis_pre else "")
                    + f"{self.code[print_start_idx:print_end_idx]}"
                    + ("..." if print_ellipsis_post else "")
                ),
                " " * (self.error_char_idx - print_start_idx + (3 if print_ellipsis_pre else 0)) + "^",
            ]
        )


class TokenType(PrintableEnum):
    OPEN_PAREN = enum.auto()
    CLOSE_PAREN = enum.auto()
    ASSIGN = enum.auto()
    OPERATOR = enum.auto()
    NUMBER = enum.auto()
    IDENTIFIER = enum.auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str

    def __str__(self) -> str:
        return f"<{self.type}>{self.lexeme}"


OPERATOR_CHARS = "+-*/%^"

SINGLE_CHAR_TOKENS = {
    "(": TokenType.OPEN_PAREN,
    ")": TokenType.CLOSE_PAREN,
    "=": TokenType.ASSIGN,
    **{char: TokenType.OPERATOR for char in OPERATOR_CHARS},
}

IDENTIFIER_CHARS = frozenset(string.ascii_letters + string.digits + "_")


def _is_number(s: str) -> bool:
    digits = s.replace(".", "", 1)
    return bool(digits) and all(c in string.digits for c in digits)


def _is_identifier(s: str) -> bool:
    return s[0] not in string.digits and all(c in IDENTIFIER_CHARS for c in s)


def tokenize(code: str) -> list[Token]:
    """Splits a statement into tokens.

    Whitespace and the single-character tokens end the text gathered so far,
    which then has to read as a number or an identifier.
    """
    tokens: list[Token] = []
    buffer_start_idx = 0
    for i, char in enumerate(code):
        if char in WHITESPACE or char in SINGLE_CHAR_TOKENS:
            _commit_buffer(code, buffer_start_idx, i, tokens)
            if char in SINGLE_CHAR_TOKENS:
                tokens.append(Token(type=SINGLE_CHAR_TOKENS[char], lexeme=char))
            buffer_start_idx = i + 1
    _commit_buffer(code, buffer_start_idx, len(code), tokens)
    return tokens


def _commit_buffer(code: str, start_idx: int, end_idx: int, tokens: list[Token]) -> None:
    lexeme = code[start_idx:end_idx]
    if not lexeme:
        return
    if _is_number(lexeme):
        tokens.append(Token(type=TokenType.NUMBER, lexeme=lexeme))
    elif _is_identifier(lexeme):
        tokens.append(Token(type=TokenType.IDENTIFIER, lexeme=lexeme))
    else:
        raise TokenizerError(f"unexpected {lexeme!r}", code=code, error_char_idx=start_idx)


def untokenize(tokens: list[Token]) -> str:
    result = " ".join(t.lexeme for t in tokens)

    # ( 1 + 2 ) => (1 + 2)
    result = re.sub(r"\(\s+", "(", result)
    result = re.sub(r"\s+\)", ")", result)
    return result
