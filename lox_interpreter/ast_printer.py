from typing import List

from . import ast_nodes as ast
from .interpreter import stringify


class AstPrinter(ast.ExprVisitor, ast.StmtVisitor):
    """
    Renders a parsed program as Lisp-style s-expressions, one top-level
    statement per line. Used by `lox --ast` and the parser tests.
    """
    def print_program(self, statements: List[ast.Stmt]) -> str:
        return "\n".join(stmt.accept(self) for stmt in statements)

    # --- Statements ---

    def visit_expression_stmt(self, stmt: ast.Expression) -> str:
        return self._parenthesize("expr_stmt", stmt.expression)

    def visit_print_stmt(self, stmt: ast.Print) -> str:
        return self._parenthesize("print", stmt.expression)

    def visit_var_stmt(self, stmt: ast.Var) -> str:
        if stmt.initializer is None:
            return f"(var {stmt.name.lexeme})"
        return self._parenthesize(f"var {stmt.name.lexeme}", stmt.initializer)

    def visit_block_stmt(self, stmt: ast.Block) -> str:
        return self._nested("(block", stmt.statements, ")")

    def visit_if_stmt(self, stmt: ast.If) -> str:
        text = f"(if {stmt.condition.accept(self)} {stmt.then_branch.accept(self)}"
        if stmt.else_branch is not None:
            text += f" else {stmt.else_branch.accept(self)}"
        return text + ")"

    def visit_while_stmt(self, stmt: ast.While) -> str:
        return f"(while {stmt.condition.accept(self)} {stmt.body.accept(self)})"

    def visit_function_stmt(self, stmt: ast.Function) -> str:
        params = ", ".join(param.lexeme for param in stmt.params)
        return self._nested(f"(fun {stmt.name.lexeme}({params}) {{", stmt.body, "})")

    def visit_return_stmt(self, stmt: ast.Return) -> str:
        if stmt.value is None:
            return "(return)"
        return self._parenthesize("return", stmt.value)

    def visit_class_stmt(self, stmt: ast.Class) -> str:
        header = f"(class {stmt.name.lexeme}"
        if stmt.superclass is not None:
            header += f" < {stmt.superclass.name.lexeme}"
        return self._nested(header + " {", stmt.methods, "})")

    # --- Expressions ---

    def visit_binary_expr(self, expr: ast.Binary) -> str:
        return self._parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_grouping_expr(self, expr: ast.Grouping) -> str:
        return self._parenthesize("group", expr.expression)

    def visit_literal_expr(self, expr: ast.Literal) -> str:
        if isinstance(expr.value, str):
            return f'"{expr.value}"'
        return stringify(expr.value)

    def visit_unary_expr(self, expr: ast.Unary) -> str:
        return self._parenthesize(expr.operator.lexeme, expr.right)

    def visit_variable_expr(self, expr: ast.Variable) -> str:
        return expr.name.lexeme

    def visit_assign_expr(self, expr: ast.Assign) -> str:
        return self._parenthesize(f"assign {expr.name.lexeme}", expr.value)

    def visit_logical_expr(self, expr: ast.Logical) -> str:
        return self._parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_call_expr(self, expr: ast.Call) -> str:
        return self._parenthesize("call", expr.callee, *expr.arguments)

    def visit_get_expr(self, expr: ast.Get) -> str:
        return self._parenthesize(f". {expr.name.lexeme}", expr.object)

    def visit_set_expr(self, expr: ast.Set) -> str:
        return self._parenthesize(f"= {expr.name.lexeme}", expr.object, expr.value)

    def visit_this_expr(self, expr: ast.This) -> str:
        return "this"

    def visit_super_expr(self, expr: ast.Super) -> str:
        return f"(super {expr.method.lexeme})"

    # --- Helpers ---

    def _parenthesize(self, name: str, *children: ast.Node) -> str:
        inner = "".join(f" {child.accept(self)}" for child in children)
        return f"({name}{inner})"

    def _nested(self, header: str, statements: List[ast.Stmt], closer: str) -> str:
        lines = [header]
        lines.extend(f"  {statement.accept(self)}" for statement in statements)
        lines.append(closer)
        return "\n".join(lines)
