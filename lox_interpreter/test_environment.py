import pytest

from lox_interpreter.environment import Environment
from lox_interpreter.errors import UndefinedVariableError, LoxRuntimeError
from lox_interpreter.tokens import Token


def name(lexeme):
    return Token.synthetic(lexeme, line=7)


def test_define_and_get():
    env = Environment()
    env.define("a", 1.0)
    assert env.get(name("a")) == 1.0


def test_define_overwrites_in_same_scope():
    env = Environment()
    env.define("a", 1.0)
    env.define("a", "two")
    assert env.get(name("a")) == "two"


def test_get_walks_enclosing_scopes():
    outer = Environment()
    outer.define("a", "outer")
    inner = Environment(Environment(outer))
    assert inner.get(name("a")) == "outer"


def test_inner_definition_shadows_outer():
    outer = Environment()
    outer.define("a", "outer")
    inner = Environment(outer)
    inner.define("a", "inner")
    assert inner.get(name("a")) == "inner"
    assert outer.get(name("a")) == "outer"


def test_assign_mutates_the_defining_scope():
    outer = Environment()
    outer.define("a", 1.0)
    inner = Environment(outer)
    inner.assign(name("a"), 2.0)
    assert outer.get(name("a")) == 2.0
    assert not inner.is_defined_locally("a")


def test_assign_never_creates_a_binding():
    env = Environment(Environment())
    with pytest.raises(UndefinedVariableError) as excinfo:
        env.assign(name("missing"), 1.0)
    assert excinfo.value.message == "Undefined variable 'missing'."
    assert not env.is_defined_locally("missing")


def test_get_undefined_reports_name_and_line():
    env = Environment()
    with pytest.raises(UndefinedVariableError) as excinfo:
        env.get(name("ghost"))
    error = excinfo.value
    assert isinstance(error, LoxRuntimeError)
    assert error.message == "Undefined variable 'ghost'."
    assert error.line == 7


def test_nil_binding_is_still_defined():
    env = Environment()
    env.define("a", None)
    assert env.get(name("a")) is None


def test_sibling_scopes_share_a_parent():
    parent = Environment()
    parent.define("count", 0.0)
    left = Environment(parent)
    right = Environment(parent)
    left.assign(name("count"), 1.0)
    assert right.get(name("count")) == 1.0


def test_view_shares_storage_with_another_scope():
    store = Environment()
    outer = Environment()
    outer.define("g", "global")
    view = Environment(outer, values=store.values)

    view.define("x", 1.0)
    assert store.get(name("x")) == 1.0
    store.define("y", 2.0)
    assert view.get(name("y")) == 2.0
    assert view.get(name("g")) == "global"
    with pytest.raises(UndefinedVariableError):
        store.get(name("g"))
