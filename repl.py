import argparse
import logging
import sys
from typing import Optional

from rpncalc.config import LOGGING_CONFIG, REPL_CONFIG
from rpncalc.session import Session
from rpncalc.utils import CalculatorError, is_blank, split_statements

logger = logging.getLogger(__name__)


def format_result(value: float) -> str:
    return f"{value:g}"


def run_line(session: Session, line: str) -> tuple[list[str], bool]:
    """Evaluates every statement on the line.

    Returns the lines to print and whether all statements succeeded.
    """
    pieces = split_statements(line, REPL_CONFIG["statement_separator"])
    echo = len(pieces) > 1
    statements = [s for s in pieces if not is_blank(s)]
    output: list[str] = []
    ok = True
    for statement in statements:
        if echo:
            output.append(f":{statement}")
        try:
            output.append(format_result(session.interpret(statement)))
        except CalculatorError as e:
            ok = False
            output.append(str(e))
    return output, ok


def loop(session: Session) -> None:
    while True:
        try:
            line = input(REPL_CONFIG["prompt"])
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if line.strip() == REPL_CONFIG["quit_command"]:
            break

        output, _ = run_line(session, line)
        for out_line in output:
            print(out_line)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Arithmetic expression calculator with variables")
    parser.add_argument("-c", "--command", help="evaluate one line and exit")
    parser.add_argument(
        "--log-level",
        default=LOGGING_CONFIG["level"],
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging level (default: %(default)s)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format=LOGGING_CONFIG["format"])

    session = Session()
    if args.command is not None:
        output, ok = run_line(session, args.command)
        for out_line in output:
            print(out_line)
        return 0 if ok else 1

    logger.info("Starting read loop")
    loop(session)
    return 0


if __name__ == "__main__":
    sys.exit(main())
