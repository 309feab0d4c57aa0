import pytest

from lox_interpreter.lexer import Lexer
from lox_interpreter.tokens import Token, TokenType


def scan(source):
    lexer = Lexer(source)
    return lexer, lexer.scan_tokens()


def types_of(tokens):
    return [token.token_type for token in tokens]


def test_simple_variable_declaration():
    _, tokens = scan("var x = 10;")
    assert tokens == [
        Token(TokenType.VAR, 'var', None, 1),
        Token(TokenType.IDENTIFIER, 'x', None, 1),
        Token(TokenType.EQUAL, '=', None, 1),
        Token(TokenType.NUMBER, '10', 10.0, 1),
        Token(TokenType.SEMICOLON, ';', None, 1),
        Token(TokenType.EOF, '', None, 1),
    ]


def test_numbers_are_always_floats():
    _, tokens = scan("3 4.25 7.")
    assert isinstance(tokens[0].literal, float)
    assert tokens[0].literal == 3.0
    assert tokens[1].literal == 4.25
    # A trailing dot is not part of the number.
    assert types_of(tokens) == [TokenType.NUMBER, TokenType.NUMBER, TokenType.NUMBER, TokenType.DOT, TokenType.EOF]


def test_operators_and_punctuation():
    _, tokens = scan("(){},.-+;/* ! != = == > >= < <=")
    assert types_of(tokens) == [
        TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN,
        TokenType.LEFT_BRACE, TokenType.RIGHT_BRACE,
        TokenType.COMMA, TokenType.DOT, TokenType.MINUS, TokenType.PLUS,
        TokenType.SEMICOLON, TokenType.SLASH, TokenType.STAR,
        TokenType.BANG, TokenType.BANG_EQUAL,
        TokenType.EQUAL, TokenType.EQUAL_EQUAL,
        TokenType.GREATER, TokenType.GREATER_EQUAL,
        TokenType.LESS, TokenType.LESS_EQUAL,
        TokenType.EOF,
    ]


def test_keywords_and_identifiers():
    _, tokens = scan("class fun var print return super this nil true false and or if else while for classy _under")
    assert types_of(tokens) == [
        TokenType.CLASS, TokenType.FUN, TokenType.VAR, TokenType.PRINT,
        TokenType.RETURN, TokenType.SUPER, TokenType.THIS, TokenType.NIL,
        TokenType.TRUE, TokenType.FALSE, TokenType.AND, TokenType.OR,
        TokenType.IF, TokenType.ELSE, TokenType.WHILE, TokenType.FOR,
        TokenType.IDENTIFIER, TokenType.IDENTIFIER,
        TokenType.EOF,
    ]


def test_comments_and_line_numbers():
    source = """
    // Simple function
    fun main() {
        print "hi"; // trailing
    }
    """
    lexer, tokens = scan(source)
    assert not lexer.had_error
    assert tokens[0].token_type == TokenType.FUN
    assert tokens[0].line == 3
    print_token = next(t for t in tokens if t.token_type == TokenType.PRINT)
    assert print_token.line == 4
    assert tokens[-1].token_type == TokenType.EOF
    assert tokens[-1].line == 6


def test_string_escapes():
    _, tokens = scan(r'"a\tb\n\"q\"\\"')
    assert tokens[0].token_type == TokenType.STRING
    assert tokens[0].literal == 'a\tb\n"q"\\'
    assert tokens[0].lexeme == r'"a\tb\n\"q\"\\"'


def test_multiline_string_advances_line():
    _, tokens = scan('"one\ntwo" x')
    assert tokens[0].literal == "one\ntwo"
    assert tokens[1].line == 2


def test_unterminated_string_is_reported():
    lexer, tokens = scan('var s = "oops;')
    assert lexer.had_error
    assert lexer.errors == ["[Line 1] Unterminated string."]
    assert TokenType.STRING not in types_of(tokens)


def test_invalid_escape_is_reported():
    lexer, tokens = scan(r'"bad \q escape"')
    assert lexer.had_error
    assert "Invalid escape sequence '\\q'." in lexer.errors[0]
    assert types_of(tokens) == [TokenType.EOF]


@pytest.mark.parametrize("char", ["@", "#", "$", "'"])
def test_unexpected_character_keeps_scanning(char):
    lexer, tokens = scan(f"var a {char} = 1;")
    assert lexer.errors == [f"[Line 1] Unexpected character '{char}'."]
    assert types_of(tokens) == [
        TokenType.VAR, TokenType.IDENTIFIER, TokenType.EQUAL,
        TokenType.NUMBER, TokenType.SEMICOLON, TokenType.EOF,
    ]


def test_escaped_newline_still_counts_as_a_line():
    lexer, tokens = scan('"a\\\nb";\nx')
    assert lexer.errors == ["[Line 2] Invalid escape sequence '\\\n'."]
    assert [(t.token_type, t.line) for t in tokens] == [
        (TokenType.SEMICOLON, 2),
        (TokenType.IDENTIFIER, 3),
        (TokenType.EOF, 3),
    ]
