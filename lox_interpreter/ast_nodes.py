from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Any, Optional

from .tokens import Token


# --- Visitor Pattern Definition ---

class ExprVisitor(ABC):
    @abstractmethod
    def visit_binary_expr(self, expr: 'Binary'): ...
    @abstractmethod
    def visit_grouping_expr(self, expr: 'Grouping'): ...
    @abstractmethod
    def visit_literal_expr(self, expr: 'Literal'): ...
    @abstractmethod
    def visit_unary_expr(self, expr: 'Unary'): ...
    @abstractmethod
    def visit_variable_expr(self, expr: 'Variable'): ...
    @abstractmethod
    def visit_assign_expr(self, expr: 'Assign'): ...
    @abstractmethod
    def visit_logical_expr(self, expr: 'Logical'): ...
    @abstractmethod
    def visit_call_expr(self, expr: 'Call'): ...
    @abstractmethod
    def visit_get_expr(self, expr: 'Get'): ...
    @abstractmethod
    def visit_set_expr(self, expr: 'Set'): ...
    @abstractmethod
    def visit_this_expr(self, expr: 'This'): ...
    @abstractmethod
    def visit_super_expr(self, expr: 'Super'): ...


class StmtVisitor(ABC):
    @abstractmethod
    def visit_expression_stmt(self, stmt: 'Expression'): ...
    @abstractmethod
    def visit_print_stmt(self, stmt: 'Print'): ...
    @abstractmethod
    def visit_var_stmt(self, stmt: 'Var'): ...
    @abstractmethod
    def visit_block_stmt(self, stmt: 'Block'): ...
    @abstractmethod
    def visit_if_stmt(self, stmt: 'If'): ...
    @abstractmethod
    def visit_while_stmt(self, stmt: 'While'): ...
    @abstractmethod
    def visit_function_stmt(self, stmt: 'Function'): ...
    @abstractmethod
    def visit_return_stmt(self, stmt: 'Return'): ...
    @abstractmethod
    def visit_class_stmt(self, stmt: 'Class'): ...


# --- Base Classes for AST Nodes ---

class Node:
    """
    Base of every syntax tree node. `accept` dispatches to the visitor
    method named after the node class, e.g. Binary -> visit_binary_expr.
    """
    kind = "node"

    def accept(self, visitor):
        method = getattr(visitor, f"visit_{type(self).__name__.lower()}_{self.kind}")
        return method(self)


class Expr(Node):
    kind = "expr"


class Stmt(Node):
    kind = "stmt"


# --- Expressions ---

@dataclass
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass
class Grouping(Expr):
    expression: Expr


@dataclass
class Literal(Expr):
    value: Any


@dataclass
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass
class Variable(Expr):
    name: Token


@dataclass
class Assign(Expr):
    name: Token
    value: Expr


@dataclass
class Logical(Expr):
    """`and` / `or`. Both operands are always evaluated."""
    left: Expr
    operator: Token
    right: Expr


@dataclass
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used to locate call errors
    arguments: List[Expr]


@dataclass
class Get(Expr):
    object: Expr
    name: Token


@dataclass
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@dataclass
class This(Expr):
    keyword: Token


@dataclass
class Super(Expr):
    keyword: Token
    method: Token


# --- Statements ---

@dataclass
class Expression(Stmt):
    expression: Expr


@dataclass
class Print(Stmt):
    expression: Expr


@dataclass
class Var(Stmt):
    name: Token
    initializer: Optional[Expr]


@dataclass
class Block(Stmt):
    statements: List[Stmt]


@dataclass
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass
class While(Stmt):
    condition: Expr
    body: Stmt


@dataclass
class Function(Stmt):
    name: Token
    params: List[Token]
    body: List[Stmt]


@dataclass
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]


@dataclass
class Class(Stmt):
    name: Token
    superclass: Optional[Variable]
    methods: List[Function]
