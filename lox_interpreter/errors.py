import sys
from typing import Any, Optional

from .tokens import Token, TokenType


def report(line: int, where: str, message: str):
    """Reports a static (lexical or syntax) error to stderr."""
    print(f"[Line {line}] Error{where}: {message}", file=sys.stderr)


def token_error(token: Token, message: str):
    """Reports a syntax error located at a token."""
    if token.token_type == TokenType.EOF:
        report(token.line, " at end", message)
    else:
        report(token.line, f" at '{token.lexeme}'", message)


def runtime_error(error: 'LoxRuntimeError'):
    """Reports a runtime error to stderr."""
    if error.token is None:
        print(f"RuntimeError: {error.message}", file=sys.stderr)
    else:
        print(f"[Line {error.token.line}] RuntimeError: {error.message}", file=sys.stderr)


class LoxRuntimeError(RuntimeError):
    """Custom exception for reporting runtime errors."""
    def __init__(self, token: Optional[Token], message: str):
        self.token = token
        self.message = message
        super().__init__(self.message)

    @property
    def line(self) -> Optional[int]:
        return self.token.line if self.token is not None else None


class UndefinedVariableError(LoxRuntimeError):
    """A variable lookup or assignment exhausted the environment chain."""


class UndefinedPropertyError(LoxRuntimeError):
    """Neither a field nor a method of an instance matched the name."""


class LoxTypeError(LoxRuntimeError):
    """An operand, callee, superclass or property target had the wrong kind."""


class DivisionByZeroError(LoxTypeError):
    pass


class InvalidContextError(LoxRuntimeError):
    """'this' or 'super' used where no instance or superclass is bound."""


class RedeclarationError(LoxRuntimeError):
    pass


class Return(Exception):
    """
    An exception used for control flow to handle 'return' statements.
    It's not an error, so it inherits from the base Exception.
    """
    def __init__(self, value: Any, keyword: Optional[Token] = None):
        self.value = value
        self.keyword = keyword
