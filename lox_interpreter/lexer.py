from typing import List, Any

from .tokens import Token, TokenType, keywords
from .errors import report


ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '"': '"',
    '\\': '\\',
}


SINGLE_CHAR_TOKENS = {
    '(': TokenType.LEFT_PAREN,
    ')': TokenType.RIGHT_PAREN,
    '{': TokenType.LEFT_BRACE,
    '}': TokenType.RIGHT_BRACE,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    '-': TokenType.MINUS,
    '+': TokenType.PLUS,
    ';': TokenType.SEMICOLON,
    '*': TokenType.STAR,
}

# Tokens that become a different token when followed by '='.
EQUAL_SUFFIXED_TOKENS = {
    '!': (TokenType.BANG, TokenType.BANG_EQUAL),
    '=': (TokenType.EQUAL, TokenType.EQUAL_EQUAL),
    '<': (TokenType.LESS, TokenType.LESS_EQUAL),
    '>': (TokenType.GREATER, TokenType.GREATER_EQUAL),
}


class Lexer:
    """
    Turns Lox source text into a flat list of tokens ending in EOF.

    Lexical errors are reported and collected in `errors`; scanning always
    continues to the end so every bad character is reported in one pass.
    """
    def __init__(self, source: str):
        self.source: str = source
        self.tokens: List[Token] = []
        self.errors: List[str] = []
        self.start: int = 0
        self.current: int = 0
        self.line: int = 1

    @property
    def had_error(self) -> bool:
        return bool(self.errors)

    def scan_tokens(self) -> List[Token]:
        """Scans the entire source code and returns a list of tokens."""
        while not self._is_at_end():
            self.start = self.current
            self._scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    def _error(self, message: str):
        self.errors.append(f"[Line {self.line}] {message}")
        report(self.line, "", message)

    def _is_at_end(self) -> bool:
        return self.current >= len(self.source)

    def _advance(self) -> str:
        char = self.source[self.current]
        self.current += 1
        return char

    def _add_token(self, token_type: TokenType, literal: Any = None):
        text = self.source[self.start:self.current]
        self.tokens.append(Token(token_type, text, literal, self.line))

    def _match(self, expected: str) -> bool:
        if self._is_at_end():
            return False
        if self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def _peek(self) -> str:
        if self._is_at_end():
            return '\0'
        return self.source[self.current]

    def _peek_next(self) -> str:
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def _string(self):
        chars = []
        bad_escape = None
        while self._peek() != '"' and not self._is_at_end():
            if self._peek() == '\n':
                self.line += 1
            char = self._advance()
            if char == '\\' and not self._is_at_end():
                escaped = self._advance()
                if escaped == '\n':
                    self.line += 1
                if escaped in ESCAPES:
                    chars.append(ESCAPES[escaped])
                elif bad_escape is None:
                    bad_escape = escaped
            else:
                chars.append(char)

        if self._is_at_end():
            self._error("Unterminated string.")
            return

        self._advance()  # The closing quote.

        if bad_escape is not None:
            self._error(f"Invalid escape sequence '\\{bad_escape}'.")
            return

        self._add_token(TokenType.STRING, "".join(chars))

    def _number(self):
        while self._is_digit(self._peek()):
            self._advance()

        # Look for a fractional part.
        if self._peek() == '.' and self._is_digit(self._peek_next()):
            # Consume the "."
            self._advance()

            while self._is_digit(self._peek()):
                self._advance()

        # Every Lox number is a double.
        self._add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def _identifier(self):
        while self._is_alpha_numeric(self._peek()):
            self._advance()

        text = self.source[self.start:self.current]
        token_type = keywords.get(text, TokenType.IDENTIFIER)
        self._add_token(token_type)

    def _scan_token(self):
        char = self._advance()

        if char in SINGLE_CHAR_TOKENS:
            self._add_token(SINGLE_CHAR_TOKENS[char])
        elif char in EQUAL_SUFFIXED_TOKENS:
            plain, with_equal = EQUAL_SUFFIXED_TOKENS[char]
            self._add_token(with_equal if self._match('=') else plain)
        elif char == '/':
            if self._match('/'):
                # A comment goes until the end of the line.
                while self._peek() != '\n' and not self._is_at_end():
                    self._advance()
            else:
                self._add_token(TokenType.SLASH)
        elif char == '\n':
            self.line += 1
        elif char in ' \r\t':
            pass
        elif char == '"':
            self._string()
        elif self._is_digit(char):
            self._number()
        elif self._is_alpha(char):
            self._identifier()
        else:
            self._error(f"Unexpected character '{char}'.")

    # Helper methods
    def _is_digit(self, char: str) -> bool:
        return '0' <= char <= '9'

    def _is_alpha(self, char: str) -> bool:
        return ('a' <= char <= 'z') or ('A' <= char <= 'Z') or char == '_'

    def _is_alpha_numeric(self, char: str) -> bool:
        return self._is_alpha(char) or self._is_digit(char)
