import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Any, Optional, TYPE_CHECKING

from . import ast_nodes as ast
from .environment import Environment
from .errors import LoxRuntimeError, Return, UndefinedPropertyError
from .tokens import Token

# This is a common pattern to break circular import cycles.
# The import is only done for static type checking, not at runtime.
if TYPE_CHECKING:
    from .interpreter import Interpreter


class LoxCallable(ABC):
    """
    An abstract base class for all objects that can be called like a function.
    """
    @abstractmethod
    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        """Executes the callable's logic."""
        raise NotImplementedError


class LoxFunction(LoxCallable):
    """
    Represents a user-defined function or method.
    """
    def __init__(self, declaration: ast.Function, closure: Environment, is_initializer: bool = False):
        self.declaration = declaration
        self.closure = closure # The environment where the function was declared.
        self.is_initializer = is_initializer

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        """
        Executes the function. Parameters are bound in a scope enclosing the
        function's closure, not the caller's environment, and the body runs in
        a block nested inside that scope.

        Arity is not checked: missing trailing parameters stay unbound and
        extra arguments are dropped.
        """
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        try:
            interpreter._execute_block(self.declaration.body, Environment(environment))
        except Return as return_value:
            if self.is_initializer:
                return None
            return return_value.value

        # If no 'return' is encountered, functions implicitly return nil.
        return None

    def bind(self, instance: 'LoxInstance') -> 'LoxFunction':
        """
        Binds 'this' to a specific instance.

        The new closure defines 'this' and 'super' on top of a view of the
        instance's field store, which in turn encloses the method's own
        closure, so fields, sibling declarations and globals all stay visible.
        """
        fields = Environment(self.closure, values=instance.fields.values)
        environment = Environment(fields)
        environment.define("this", instance)
        # 'super' belongs to the class that declared the method, not the instance's class.
        environment.define("super", self.closure.values.get("super"))
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def __str__(self) -> str:
        return f"<fn {self.name}>"


class LoxNativeFunction(LoxCallable):
    """A function implemented in Python. It validates its own arguments."""
    def __init__(self, name: str, function: Callable[[List[Any]], Any]):
        self.name = name
        self.function = function

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        return self.function(arguments)

    def __str__(self) -> str:
        return f"<native fn {self.name}>"


def clock(arguments: List[Any]) -> float:
    """Seconds since the Unix epoch, as a fraction."""
    if arguments:
        raise LoxRuntimeError(None, f"Expected 0 arguments but got {len(arguments)}.")
    return time.time()


NATIVES: Dict[str, Callable[[List[Any]], Any]] = {
    "clock": clock,
}


class LoxClass(LoxCallable):
    """
    A class declaration. Calling it produces a new instance.
    """
    def __init__(self, name: str, methods: Environment, superclass: Optional['LoxClass'] = None):
        self.name = name
        self.methods = methods
        self.superclass = superclass

    def find_method(self, name: str) -> Optional[LoxFunction]:
        """Looks in this class's own methods, then up the superclass chain."""
        method = self.methods.values.get(name)
        if isinstance(method, LoxFunction):
            return method

        if self.superclass is not None:
            return self.superclass.find_method(name)

        return None

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        instance = LoxInstance(self, interpreter.next_instance_name(self))

        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)

        # Whatever 'init' computes, the constructor always yields the instance.
        return instance

    def __str__(self) -> str:
        return f"<class {self.name}>"


class LoxInstance:
    """An object created by calling a class. Fields are added on first assignment."""
    def __init__(self, klass: LoxClass, name: Optional[str] = None):
        self.klass = klass
        self.name = name or klass.name
        self.fields = Environment()

        # Bound methods reach the superclass through the field store.
        if klass.methods.is_defined_locally("super"):
            self.fields.define("super", klass.methods.values["super"])

    def get(self, name: Token) -> Any:
        if name.lexeme in self.fields.values:
            return self.fields.values[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise UndefinedPropertyError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: Any):
        self.fields.define(name.lexeme, value)

    def __str__(self) -> str:
        return f"<instance of {self.klass.name}>"

    def __repr__(self) -> str:
        return f"<LoxInstance {self.name}>"
