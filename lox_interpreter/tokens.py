from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional

class TokenType(Enum):
    """Every kind of token the Lox lexer produces."""

    # Single-character tokens
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    COMMA = auto()
    DOT = auto()
    MINUS = auto()
    PLUS = auto()
    SEMICOLON = auto()
    SLASH = auto()
    STAR = auto()

    # One or two character tokens
    BANG = auto()
    BANG_EQUAL = auto()
    EQUAL = auto()
    EQUAL_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()

    # Literals
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    # Keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FOR = auto()
    FUN = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    # End of file
    EOF = auto()


@dataclass
class Token:
    token_type: TokenType
    lexeme: str
    literal: Optional[Any]
    line: int

    def __str__(self) -> str:
        return f"Token(type={self.token_type.name}, lexeme='{self.lexeme}', literal={self.literal}, line={self.line})"

    def to_dict(self) -> dict:
        """Plain-data form used by the `--tokens` dump."""
        return {
            "type": self.token_type.name,
            "lexeme": self.lexeme,
            "literal": self.literal,
            "line": self.line,
        }

    @classmethod
    def synthetic(cls, lexeme: str, line: int = 0) -> 'Token':
        """An identifier token that does not come from source text."""
        return cls(TokenType.IDENTIFIER, lexeme, None, line)


# Reserved words map to the keyword members, which run from AND to WHILE.
keywords = {
    token_type.name.lower(): token_type
    for token_type in TokenType
    if TokenType.AND.value <= token_type.value <= TokenType.WHILE.value
}
