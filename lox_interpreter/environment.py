from typing import Dict, Any, Optional

from .tokens import Token
from .errors import UndefinedVariableError

class Environment:
    """
    Manages variable scopes, storing and retrieving variable values.

    Scopes are shared by reference: closures, bound methods and active calls
    all hold the same Environment object, so a write through any of them is
    seen by the others.
    """
    def __init__(self, enclosing: Optional['Environment'] = None, values: Optional[Dict[str, Any]] = None):
        # Passing `values` makes this scope a view over another scope's storage.
        self.values: Dict[str, Any] = values if values is not None else {}
        self.enclosing: Optional['Environment'] = enclosing

    def define(self, name: str, value: Any):
        """
        Defines a variable in the current scope, replacing any existing binding.
        """
        self.values[name] = value

    def is_defined_locally(self, name: str) -> bool:
        return name in self.values

    def get(self, name: Token) -> Any:
        """
        Retrieves the value of a variable.
        If not found in the current scope, it checks the enclosing scope.
        """
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                return environment.values[name.lexeme]
            environment = environment.enclosing

        raise UndefinedVariableError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Any):
        """
        Assigns a new value to an existing variable.
        If not found in the current scope, it checks the enclosing scope.
        """
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                environment.values[name.lexeme] = value
                return
            environment = environment.enclosing

        raise UndefinedVariableError(name, f"Undefined variable '{name.lexeme}'.")

