from typing import Callable, List, Optional, TypeVar

from .tokens import Token, TokenType
from .errors import token_error
from . import ast_nodes as ast


MAX_ARGUMENTS = 255

# Tokens that begin a statement; panic-mode recovery stops in front of them.
STATEMENT_STARTS = frozenset({
    TokenType.CLASS,
    TokenType.FUN,
    TokenType.VAR,
    TokenType.FOR,
    TokenType.IF,
    TokenType.WHILE,
    TokenType.PRINT,
    TokenType.RETURN,
})

T = TypeVar("T")


class ParseError(RuntimeError):
    """A syntax error located at a token."""
    def __init__(self, token: Token, message: str):
        self.token = token
        self.message = message
        super().__init__(message)


class Parser:
    """
    Recursive-descent parser from a token list to a list of statements.

    Syntax errors are reported as they are found; the parser then discards
    tokens up to the next statement boundary and carries on, so a single run
    reports every independent error in the program.

        program     -> declaration* EOF
        declaration -> classDecl | funDecl | varDecl | statement
        statement   -> exprStmt | forStmt | ifStmt | printStmt
                     | returnStmt | whileStmt | block
        expression  -> assignment
        assignment  -> ( call "." )? IDENTIFIER "=" assignment | logic_or
        logic_or    -> logic_and ( "or" logic_and )*
        logic_and   -> equality ( "and" equality )*
        equality    -> comparison ( ( "!=" | "==" ) comparison )*
        comparison  -> term ( ( ">" | ">=" | "<" | "<=" ) term )*
        term        -> factor ( ( "-" | "+" ) factor )*
        factor      -> unary ( ( "/" | "*" ) unary )*
        unary       -> ( "!" | "-" ) unary | call
        call        -> primary ( "(" arguments? ")" | "." IDENTIFIER )*
    """
    def __init__(self, tokens: List[Token]):
        self.tokens: List[Token] = tokens
        self.current: int = 0
        self.errors: List[ParseError] = []

        self._statements: dict = {
            TokenType.FOR: self._for_statement,
            TokenType.IF: self._if_statement,
            TokenType.PRINT: self._print_statement,
            TokenType.RETURN: self._return_statement,
            TokenType.WHILE: self._while_statement,
            TokenType.LEFT_BRACE: lambda: ast.Block(self._block()),
        }

    @property
    def had_error(self) -> bool:
        return bool(self.errors)

    def parse(self) -> List[ast.Stmt]:
        statements: List[ast.Stmt] = []
        while not self._is_at_end():
            declaration = self._declaration()
            if declaration is not None:
                statements.append(declaration)
        return statements

    # --- Declarations ---

    def _declaration(self) -> Optional[ast.Stmt]:
        """Parses one declaration, or returns None after recovering from a syntax error."""
        try:
            if self._match(TokenType.CLASS):
                return self._class_declaration()
            if self._match(TokenType.FUN):
                return self._function("function")
            if self._match(TokenType.VAR):
                return self._var_declaration()
            return self._statement()
        except ParseError:
            self._synchronize()
            return None

    def _class_declaration(self) -> ast.Class:
        name = self._consume(TokenType.IDENTIFIER, "Expect class name.")

        superclass = None
        if self._match(TokenType.LESS):
            superclass = ast.Variable(self._consume(TokenType.IDENTIFIER, "Expect superclass name."))

        self._consume(TokenType.LEFT_BRACE, "Expect '{' before class body.")
        methods: List[ast.Function] = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            methods.append(self._function("method"))
        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after class body.")

        return ast.Class(name, superclass, methods)

    def _function(self, kind: str) -> ast.Function:
        name = self._consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self._consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")
        params = self._comma_list(
            lambda: self._consume(TokenType.IDENTIFIER, "Expect parameter name."),
            "parameters",
        )
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self._consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        return ast.Function(name, params, self._block())

    def _var_declaration(self) -> ast.Var:
        name = self._consume(TokenType.IDENTIFIER, "Expect variable name.")
        initializer = self._expression() if self._match(TokenType.EQUAL) else None
        self._consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return ast.Var(name, initializer)

    # --- Statements ---

    def _statement(self) -> ast.Stmt:
        for token_type, parse_statement in self._statements.items():
            if self._match(token_type):
                return parse_statement()
        return self._expression_statement()

    def _for_statement(self) -> ast.Stmt:
        """
        Parses a for loop and desugars it into
        Block[initializer, While(condition, Block[body, increment])].
        """
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self._match(TokenType.SEMICOLON):
            initializer = None
        elif self._match(TokenType.VAR):
            initializer = self._var_declaration()
        else:
            initializer = self._expression_statement()

        condition = None if self._check(TokenType.SEMICOLON) else self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None if self._check(TokenType.RIGHT_PAREN) else self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self._statement()
        if increment is not None:
            body = ast.Block([body, ast.Expression(increment)])

        loop: ast.Stmt = ast.While(condition or ast.Literal(True), body)
        if initializer is not None:
            loop = ast.Block([initializer, loop])
        return loop

    def _if_statement(self) -> ast.If:
        condition = self._parenthesized_condition("if")
        then_branch = self._statement()
        else_branch = self._statement() if self._match(TokenType.ELSE) else None
        return ast.If(condition, then_branch, else_branch)

    def _while_statement(self) -> ast.While:
        condition = self._parenthesized_condition("while")
        return ast.While(condition, self._statement())

    def _parenthesized_condition(self, keyword: str) -> ast.Expr:
        self._consume(TokenType.LEFT_PAREN, f"Expect '(' after '{keyword}'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, f"Expect ')' after {keyword} condition.")
        return condition

    def _print_statement(self) -> ast.Print:
        value = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return ast.Print(value)

    def _return_statement(self) -> ast.Return:
        keyword = self._previous()
        value = None if self._check(TokenType.SEMICOLON) else self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return ast.Return(keyword, value)

    def _block(self) -> List[ast.Stmt]:
        """Parses declarations up to the closing brace; the opening brace is already consumed."""
        statements: List[ast.Stmt] = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            declaration = self._declaration()
            if declaration is not None:
                statements.append(declaration)

        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def _expression_statement(self) -> ast.Expression:
        expr = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ast.Expression(expr)

    # --- Expressions ---

    def _expression(self) -> ast.Expr:
        return self._assignment()

    def _assignment(self) -> ast.Expr:
        expr = self._or()
        if not self._match(TokenType.EQUAL):
            return expr

        equals = self._previous()
        value = self._assignment()

        if isinstance(expr, ast.Variable):
            return ast.Assign(expr.name, value)
        if isinstance(expr, ast.Get):
            return ast.Set(expr.object, expr.name, value)

        # Reported, but the parser is not confused, so no need to synchronize.
        self._error(equals, "Invalid assignment target.")
        return expr

    def _binary(self, operand: Callable[[], ast.Expr], node: type, *operators: TokenType) -> ast.Expr:
        """Parses a left-associative chain of `operand (operator operand)*`."""
        expr = operand()
        while self._match(*operators):
            operator = self._previous()
            expr = node(expr, operator, operand())
        return expr

    def _or(self) -> ast.Expr:
        return self._binary(self._and, ast.Logical, TokenType.OR)

    def _and(self) -> ast.Expr:
        return self._binary(self._equality, ast.Logical, TokenType.AND)

    def _equality(self) -> ast.Expr:
        return self._binary(self._comparison, ast.Binary, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def _comparison(self) -> ast.Expr:
        return self._binary(
            self._term, ast.Binary,
            TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL,
        )

    def _term(self) -> ast.Expr:
        return self._binary(self._factor, ast.Binary, TokenType.MINUS, TokenType.PLUS)

    def _factor(self) -> ast.Expr:
        return self._binary(self._unary, ast.Binary, TokenType.SLASH, TokenType.STAR)

    def _unary(self) -> ast.Expr:
        if self._match(TokenType.MINUS, TokenType.BANG):
            operator = self._previous()
            return ast.Unary(operator, self._unary())
        return self._call()

    def _call(self) -> ast.Expr:
        expr = self._primary()
        while True:
            if self._match(TokenType.LEFT_PAREN):
                arguments = self._comma_list(self._expression, "arguments")
                paren = self._consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
                expr = ast.Call(expr, paren, arguments)
            elif self._match(TokenType.DOT):
                name = self._consume(TokenType.IDENTIFIER, "Expect property name after '.'.")
                expr = ast.Get(expr, name)
            else:
                return expr

    def _primary(self) -> ast.Expr:
        if self._match(TokenType.FALSE): return ast.Literal(False)
        if self._match(TokenType.TRUE): return ast.Literal(True)
        if self._match(TokenType.NIL): return ast.Literal(None)
        if self._match(TokenType.NUMBER, TokenType.STRING):
            return ast.Literal(self._previous().literal)

        if self._match(TokenType.THIS):
            return ast.This(self._previous())
        if self._match(TokenType.SUPER):
            keyword = self._previous()
            self._consume(TokenType.DOT, "Expect '.' after 'super'.")
            method = self._consume(TokenType.IDENTIFIER, "Expect superclass method name.")
            return ast.Super(keyword, method)
        if self._match(TokenType.IDENTIFIER):
            return ast.Variable(self._previous())

        if self._match(TokenType.LEFT_PAREN):
            expr = self._expression()
            self._consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return ast.Grouping(expr)

        raise self._error(self._peek(), "Expect expression.")

    def _comma_list(self, parse_item: Callable[[], T], what: str) -> List[T]:
        """
        Parses zero or more comma separated items up to (not including) ')'.
        Going over MAX_ARGUMENTS is reported without abandoning the parse.
        """
        items: List[T] = []
        if self._check(TokenType.RIGHT_PAREN):
            return items

        while True:
            if len(items) >= MAX_ARGUMENTS:
                self._error(self._peek(), f"Can't have more than {MAX_ARGUMENTS} {what}.")
            items.append(parse_item())
            if not self._match(TokenType.COMMA):
                return items

    # --- Token stream ---

    def _match(self, *types: TokenType) -> bool:
        """Consumes the current token if it has one of the given types."""
        if any(self._check(token_type) for token_type in types):
            self._advance()
            return True
        return False

    def _check(self, token_type: TokenType) -> bool:
        return not self._is_at_end() and self._peek().token_type == token_type

    def _advance(self) -> Token:
        if not self._is_at_end():
            self.current += 1
        return self._previous()

    def _is_at_end(self) -> bool:
        return self._peek().token_type == TokenType.EOF

    def _peek(self) -> Token:
        return self.tokens[self.current]

    def _previous(self) -> Token:
        return self.tokens[self.current - 1]

    # --- Errors ---

    def _consume(self, token_type: TokenType, message: str) -> Token:
        if self._check(token_type):
            return self._advance()
        raise self._error(self._peek(), message)

    def _error(self, token: Token, message: str) -> ParseError:
        """Reports a syntax error and returns (not raises) a ParseError."""
        token_error(token, message)
        error = ParseError(token, message)
        self.errors.append(error)
        return error

    def _synchronize(self):
        """Discards tokens until the likely start of the next statement."""
        self._advance()
        while not self._is_at_end():
            if self._previous().token_type == TokenType.SEMICOLON:
                return
            if self._peek().token_type in STATEMENT_STARTS:
                return
            self._advance()
