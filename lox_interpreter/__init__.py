"""A tree-walking interpreter for the Lox scripting language."""

from .tokens import Token, TokenType
from .lexer import Lexer
from .parser import Parser, ParseError
from .environment import Environment
from .errors import (
    DivisionByZeroError,
    InvalidContextError,
    LoxRuntimeError,
    LoxTypeError,
    RedeclarationError,
    Return,
    UndefinedPropertyError,
    UndefinedVariableError,
)
from .callables import LoxCallable, LoxClass, LoxFunction, LoxInstance, LoxNativeFunction
from .interpreter import Interpreter, stringify
from .ast_printer import AstPrinter
from .lox import Lox, main

__all__ = [
    "AstPrinter",
    "DivisionByZeroError",
    "Environment",
    "Interpreter",
    "InvalidContextError",
    "Lexer",
    "Lox",
    "LoxCallable",
    "LoxClass",
    "LoxFunction",
    "LoxInstance",
    "LoxNativeFunction",
    "LoxRuntimeError",
    "LoxTypeError",
    "ParseError",
    "Parser",
    "RedeclarationError",
    "Return",
    "Token",
    "TokenType",
    "UndefinedPropertyError",
    "UndefinedVariableError",
    "main",
    "stringify",
]
