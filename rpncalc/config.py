"""Configuration for the parser and the read loop"""

PARSER_CONFIG = {
    "max_nesting_depth": 200,  # each parenthesised group is one level of recursion
}

REPL_CONFIG = {
    "prompt": "> ",
    "quit_command": ":q",
    "statement_separator": ";",
}

LOGGING_CONFIG = {
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "level": "WARNING",
}
