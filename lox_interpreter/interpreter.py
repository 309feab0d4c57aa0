import math
import sys
import threading
from decimal import Decimal
from typing import List, Any, Optional, TextIO

from . import ast_nodes as ast
from .tokens import Token, TokenType
from .errors import (
    DivisionByZeroError,
    InvalidContextError,
    LoxRuntimeError,
    LoxTypeError,
    RedeclarationError,
    Return,
    UndefinedPropertyError,
    UndefinedVariableError,
    runtime_error,
)
from .environment import Environment
from .callables import (
    NATIVES,
    LoxCallable,
    LoxClass,
    LoxFunction,
    LoxInstance,
    LoxNativeFunction,
)

EPSILON = sys.float_info.epsilon

# Each Lox call costs about a dozen Python frames, so programs run on a
# worker thread with room for a few thousand nested Lox calls.
RECURSION_LIMIT = 30_000
THREAD_STACK_SIZE = 512 * 1024 * 1024


def type_name(value: Any) -> str:
    """The Lox name for the kind of a runtime value."""
    if value is None: return "nil"
    if isinstance(value, bool): return "boolean"
    if isinstance(value, float): return "number"
    if isinstance(value, str): return "string"
    if isinstance(value, LoxNativeFunction): return "native function"
    if isinstance(value, LoxFunction): return "function"
    if isinstance(value, LoxClass): return "class"
    if isinstance(value, LoxInstance): return "instance"
    return type(value).__name__


def stringify(value: Any) -> str:
    """The text 'print' writes for a value."""
    if value is None: return "nil"
    if isinstance(value, bool): return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value): return "NaN"
        if math.isinf(value): return "inf" if value > 0 else "-inf"
        if value.is_integer():
            if value == 0 and math.copysign(1.0, value) < 0:
                return "-0"
            return str(int(value))
        # Shortest round-trip digits, never in exponent notation.
        return format(Decimal(repr(value)), "f")
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, float)


class Interpreter(ast.ExprVisitor, ast.StmtVisitor):
    """
    The Interpreter walks the AST and executes the code.
    """
    def __init__(self, output: Optional[TextIO] = None):
        self.output = output
        self.globals = Environment()
        self.environment = self.globals
        self.instance_count = 0

        for name, function in NATIVES.items():
            self.globals.define(name, LoxNativeFunction(name, function))

    def interpret(self, statements: List[ast.Stmt]) -> Optional[LoxRuntimeError]:
        """
        The main entry point for the interpreter.
        Returns None on success, or the runtime error that stopped the program.

        The program runs on its own thread with a raised recursion limit and
        a large stack; anything other than a Lox error is re-raised here.
        """
        outcome = {}

        def run():
            try:
                outcome["error"] = self._run(statements)
            except BaseException as e:
                outcome["exception"] = e

        previous_limit = sys.getrecursionlimit()
        previous_stack = threading.stack_size(THREAD_STACK_SIZE)
        sys.setrecursionlimit(max(previous_limit, RECURSION_LIMIT))
        try:
            worker = threading.Thread(target=run, name="lox-interpreter")
            worker.start()
            worker.join()
        finally:
            threading.stack_size(previous_stack)
            sys.setrecursionlimit(previous_limit)

        if "exception" in outcome:
            raise outcome["exception"]
        return outcome["error"]

    def _run(self, statements: List[ast.Stmt]) -> Optional[LoxRuntimeError]:
        try:
            for statement in statements:
                self._execute(statement)
        except Return as signal:
            error = LoxRuntimeError(signal.keyword, "Can't return from top-level code.")
        except RecursionError:
            error = LoxRuntimeError(None, "Stack overflow.")
        except LoxRuntimeError as caught:
            error = caught
        else:
            return None

        runtime_error(error)
        return error

    def next_instance_name(self, klass: LoxClass) -> str:
        name = f"{klass.name}#{self.instance_count}"
        self.instance_count += 1
        return name

    def _execute(self, stmt: ast.Stmt):
        """Helper to execute a single statement."""
        stmt.accept(self)

    def _evaluate(self, expr: ast.Expr) -> Any:
        """Helper to evaluate a single expression."""
        return expr.accept(self)

    # --- STATEMENT VISITOR METHODS ---

    def visit_expression_stmt(self, stmt: ast.Expression):
        self._evaluate(stmt.expression)
        return None

    def visit_print_stmt(self, stmt: ast.Print):
        value = self._evaluate(stmt.expression)
        print(stringify(value), file=self.output or sys.stdout)
        return None

    def visit_var_stmt(self, stmt: ast.Var):
        if self.environment.is_defined_locally(stmt.name.lexeme):
            raise RedeclarationError(stmt.name, f"Already a variable with name '{stmt.name.lexeme}' in this scope.")

        value = None
        if stmt.initializer is not None:
            value = self._evaluate(stmt.initializer)

        self.environment.define(stmt.name.lexeme, value)
        return None

    def visit_block_stmt(self, stmt: ast.Block):
        self._execute_block(stmt.statements, Environment(self.environment))
        return None

    def visit_if_stmt(self, stmt: ast.If):
        if self._is_truthy(self._evaluate(stmt.condition)):
            self._execute(stmt.then_branch)
        elif stmt.else_branch is not None:
            self._execute(stmt.else_branch)
        return None

    def visit_while_stmt(self, stmt: ast.While):
        while self._is_truthy(self._evaluate(stmt.condition)):
            self._execute(stmt.body)
        return None

    def visit_function_stmt(self, stmt: ast.Function):
        # The name is bound in the closure first so the body can call itself.
        closure = Environment(self.environment)
        closure.define(stmt.name.lexeme, None)
        function = LoxFunction(stmt, closure)
        closure.assign(stmt.name, function)

        self.environment.define(stmt.name.lexeme, function)
        return None

    def visit_class_stmt(self, stmt: ast.Class):
        superclass = None
        if stmt.superclass is not None:
            superclass = self._evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxTypeError(stmt.superclass.name, "Superclass must be a class.")

        methods = Environment(self.environment)
        if superclass is not None:
            methods.define("super", superclass)

        for method in stmt.methods:
            function = LoxFunction(method, methods, is_initializer=method.name.lexeme == "init")
            methods.define(method.name.lexeme, function)

        klass = LoxClass(stmt.name.lexeme, methods, superclass)
        self.environment.define(stmt.name.lexeme, klass)
        return None

    def visit_return_stmt(self, stmt: ast.Return):
        value = None
        if stmt.value is not None:
            value = self._evaluate(stmt.value)

        raise Return(value, stmt.keyword)

    def _execute_block(self, statements: List[ast.Stmt], environment: Environment):
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                self._execute(statement)
        finally:
            self.environment = previous

    # --- HELPER METHODS FOR RUNTIME CHECKS ---

    def _is_truthy(self, obj: Any) -> bool:
        """False and nil are falsey; everything else, 0 and "" included, is truthy."""
        if obj is None: return False
        if isinstance(obj, bool): return obj
        return True

    def _is_equal(self, a: Any, b: Any) -> bool:
        """Defines equality in Lox."""
        if a is None and b is None: return True
        if isinstance(a, bool) and isinstance(b, bool): return a == b
        if _is_number(a) and _is_number(b): return abs(a - b) < EPSILON
        if isinstance(a, str) and isinstance(b, str): return a == b
        # Functions, classes and instances compare by identity; mixed kinds never match.
        return a is b

    def _check_number_operand(self, operator: Token, operand: Any):
        if _is_number(operand): return
        raise LoxTypeError(operator, "Operand must be a number.")

    def _check_number_operands(self, operator: Token, left: Any, right: Any):
        if _is_number(left) and _is_number(right): return
        raise LoxTypeError(operator, "Operands must be numbers.")

    def _check_boolean_operand(self, operator: Token, operand: Any) -> bool:
        if isinstance(operand, bool): return operand
        raise LoxTypeError(operator, f"Operand must be boolean (got {type_name(operand)}).")

    def _compare(self, operator: Token, left: Any, right: Any):
        """Numbers compare by value; strings compare by length."""
        if _is_number(left) and _is_number(right):
            a, b = left, right
        elif isinstance(left, str) and isinstance(right, str):
            a, b = len(left), len(right)
        else:
            raise LoxTypeError(operator, "Operands must be numbers or strings.")

        op_type = operator.token_type
        if op_type == TokenType.GREATER: return a > b
        if op_type == TokenType.GREATER_EQUAL: return a >= b
        if op_type == TokenType.LESS: return a < b
        return a <= b

    # --- EXPRESSION VISITOR METHODS ---

    def visit_binary_expr(self, expr: ast.Binary):
        left = self._evaluate(expr.left)
        right = self._evaluate(expr.right)
        op_type = expr.operator.token_type

        if op_type == TokenType.MINUS:
            self._check_number_operands(expr.operator, left, right)
            return left - right
        if op_type == TokenType.SLASH:
            self._check_number_operands(expr.operator, left, right)
            if right == 0.0:
                raise DivisionByZeroError(expr.operator, "Division by zero.")
            return left / right
        if op_type == TokenType.STAR:
            self._check_number_operands(expr.operator, left, right)
            return left * right
        if op_type == TokenType.PLUS:
            if _is_number(left) and _is_number(right):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxTypeError(expr.operator, "Operands must be two numbers or two strings.")

        if op_type in (TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL):
            return self._compare(expr.operator, left, right)

        if op_type == TokenType.EQUAL_EQUAL:
            return self._is_equal(left, right)
        if op_type == TokenType.BANG_EQUAL:
            return not self._is_equal(left, right)

        raise LoxRuntimeError(expr.operator, "Invalid operator.")

    def visit_grouping_expr(self, expr: ast.Grouping):
        return self._evaluate(expr.expression)

    def visit_literal_expr(self, expr: ast.Literal):
        return expr.value

    def visit_unary_expr(self, expr: ast.Unary):
        right = self._evaluate(expr.right)
        if expr.operator.token_type == TokenType.MINUS:
            self._check_number_operand(expr.operator, right)
            return -right
        if expr.operator.token_type == TokenType.BANG:
            return not self._is_truthy(right)

        raise LoxRuntimeError(expr.operator, "Invalid operator.")

    def visit_variable_expr(self, expr: ast.Variable):
        return self.environment.get(expr.name)

    def visit_assign_expr(self, expr: ast.Assign):
        value = self._evaluate(expr.value)
        self.environment.assign(expr.name, value)
        return value

    def visit_logical_expr(self, expr: ast.Logical):
        # No short-circuit: both sides run, and both must already be booleans.
        left = self._check_boolean_operand(expr.operator, self._evaluate(expr.left))
        right = self._check_boolean_operand(expr.operator, self._evaluate(expr.right))

        if expr.operator.token_type == TokenType.OR:
            return left or right
        return left and right

    def visit_call_expr(self, expr: ast.Call):
        callee = self._evaluate(expr.callee)

        arguments = []
        for argument in expr.arguments:
            arguments.append(self._evaluate(argument))

        if not isinstance(callee, LoxCallable):
            raise LoxTypeError(expr.paren, "Can only call functions and classes.")

        try:
            return callee.call(self, arguments)
        except LoxRuntimeError as error:
            # Native functions raise without a location; pin it on the call.
            if error.token is None:
                error.token = expr.paren
            raise

    def visit_get_expr(self, expr: ast.Get):
        obj = self._evaluate(expr.object)
        if isinstance(obj, LoxInstance):
            return obj.get(expr.name)

        raise LoxTypeError(expr.name, "Only instances have properties.")

    def visit_set_expr(self, expr: ast.Set):
        obj = self._evaluate(expr.object)

        if not isinstance(obj, LoxInstance):
            raise LoxTypeError(expr.name, "Only instances have fields.")

        value = self._evaluate(expr.value)
        obj.set(expr.name, value)
        return value

    def visit_this_expr(self, expr: ast.This):
        instance = self._lookup_instance(expr.keyword)
        if instance is None:
            raise InvalidContextError(expr.keyword, "Invalid 'this' context.")
        return instance

    def visit_super_expr(self, expr: ast.Super):
        try:
            superclass = self.environment.get(expr.keyword)
        except UndefinedVariableError:
            raise InvalidContextError(expr.keyword, "Can't use 'super' outside of a class method.") from None

        if superclass is None:
            raise InvalidContextError(expr.keyword, "Can't use 'super' in a class with no superclass.")
        if not isinstance(superclass, LoxClass):
            raise InvalidContextError(expr.keyword, "Invalid super class.")

        instance = self._lookup_instance(Token(TokenType.THIS, "this", None, expr.keyword.line))
        if instance is None:
            raise InvalidContextError(expr.keyword, "'super' must be used in an instance method.")

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise UndefinedPropertyError(expr.method, f"Undefined property '{expr.method.lexeme}' on superclass '{superclass.name}'.")

        return method.bind(instance)

    def _lookup_instance(self, keyword: Token) -> Optional[LoxInstance]:
        """Resolves 'this', or None when it is unbound or not an instance."""
        try:
            value = self.environment.get(keyword)
        except UndefinedVariableError:
            return None
        return value if isinstance(value, LoxInstance) else None
