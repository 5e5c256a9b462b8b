import logging
from typing import Optional

from rpncalc.parser import parse
from rpncalc.runtime import Variables, evaluate
from rpncalc.tokenizer import tokenize
from rpncalc.utils import CalculatorError, ResourceExhaustedError

logger = logging.getLogger(__name__)


class Session:
    """Evaluates statements one at a time against a single variable store.

    Variables assigned by one statement stay visible to every later
    statement of the same session. A failed statement leaves the store
    as it was.
    """

    def __init__(self, variables: Optional[Variables] = None) -> None:
        self.variables: Variables = {} if variables is None else variables

    def interpret(self, code: str) -> float:
        try:
            tokens = tokenize(code)
            logger.debug("Tokens: %s", tokens)
            statement = parse(tokens)
            logger.debug("Parsed: %s", statement)
            result = evaluate(statement, self.variables)
        except RecursionError as e:
            logger.debug("Recursion limit hit in %r", code)
            raise ResourceExhaustedError("statement nested too deeply to evaluate") from e
        except CalculatorError as e:
            logger.debug("%s error in %r: %s", e.kind, code, e.errmsg)
            raise
        logger.debug("Result: %s", result)
        return result


_process_session = Session()


def interpret(code: str) -> float:
    """Evaluates code against the variable store shared by the whole process"""
    return _process_session.interpret(code)
