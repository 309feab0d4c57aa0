import argparse
import json
import sys
from typing import List, Optional

from .lexer import Lexer
from .parser import Parser
from .interpreter import Interpreter
from .ast_printer import AstPrinter
from . import ast_nodes as ast

EX_OK = 0
EX_USAGE = 64
EX_DATAERR = 65
EX_SOFTWARE = 70


class Lox:
    """
    Drives a program through lexing, parsing and interpretation and keeps
    the error flags the command line turns into exit codes.
    """
    def __init__(self, interpreter: Optional[Interpreter] = None):
        self.interpreter = interpreter or Interpreter()
        self.had_error = False
        self.had_runtime_error = False

    def parse(self, source: str) -> Optional[List[ast.Stmt]]:
        """Lexes and parses source, or returns None if it has static errors."""
        lexer = Lexer(source)
        tokens = lexer.scan_tokens()
        parser = Parser(tokens)
        statements = parser.parse()

        if lexer.had_error or parser.had_error:
            self.had_error = True
            return None
        return statements

    def run(self, source: str):
        statements = self.parse(source)
        if statements is None:
            return

        if self.interpreter.interpret(statements) is not None:
            self.had_runtime_error = True

    def run_file(self, path: str) -> int:
        self.run(read_source(path))
        if self.had_error: return EX_DATAERR
        if self.had_runtime_error: return EX_SOFTWARE
        return EX_OK

    def run_prompt(self):
        print("Lox REPL (Ctrl+C to exit)")
        while True:
            try:
                line = input("> ")
                if not line: continue
                # Globals persist between lines; errors on one line don't end the session.
                self.run(line)
                self.had_error = False
                self.had_runtime_error = False
            except KeyboardInterrupt:
                print("\nExiting.")
                break
            except EOFError:
                print("\nExiting.")
                break


def read_source(path: str) -> str:
    """Reads a script as UTF-8. Raises OSError or UnicodeDecodeError."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def dump_tokens(source: str) -> str:
    """The lexer's output for source as pretty-printed JSON."""
    tokens = Lexer(source).scan_tokens()
    return json.dumps([token.to_dict() for token in tokens], indent=2)


def dump_ast(source: str) -> Optional[str]:
    """The parsed program in AstPrinter form, or None if it did not parse."""
    statements = Lox().parse(source)
    if statements is None:
        return None
    return AstPrinter().print_program(statements)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lox",
        description="Run a Lox script, or start a REPL when no script is given.",
    )
    parser.add_argument("script", nargs="?", help="path of the script to run")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--tokens", action="store_true", help="print the script's tokens as JSON and exit")
    mode.add_argument("--ast", action="store_true", help="print the script's syntax tree and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    if args.script is None:
        if args.tokens or args.ast:
            print("Usage: lox [--tokens | --ast] <script>", file=sys.stderr)
            return EX_USAGE
        Lox().run_prompt()
        return EX_OK

    try:
        if not (args.tokens or args.ast):
            return Lox().run_file(args.script)
        source = read_source(args.script)
    except OSError as e:
        print(f"Could not read '{args.script}': {e.strerror}", file=sys.stderr)
        return EX_USAGE
    except UnicodeDecodeError as e:
        print(f"Could not read '{args.script}': not valid UTF-8 ({e.reason} at byte {e.start}).", file=sys.stderr)
        return EX_DATAERR

    if args.tokens:
        print(dump_tokens(source))
        return EX_OK

    printed = dump_ast(source)
    if printed is None:
        return EX_DATAERR
    print(printed)
    return EX_OK


if __name__ == "__main__":
    sys.exit(main())
