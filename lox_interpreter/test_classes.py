from lox_interpreter.callables import LoxClass, LoxInstance
from lox_interpreter.errors import (
    InvalidContextError,
    LoxRuntimeError,
    LoxTypeError,
    UndefinedPropertyError,
)
from lox_interpreter.test_interpreter import global_value, run_error, run_ok, run_program


def test_initializer_and_methods():
    assert run_ok("""
    class Point {
        init(x, y) {
            this.x = x;
            this.y = y;
        }
        sum() { return this.x + this.y; }
    }
    var p = Point(1, 2);
    print p.sum();
    print p.x;
    """) == ["3", "1"]


def test_initializer_return_value_is_discarded():
    assert run_ok("""
    class A { init() { return 42; } }
    print A();
    """) == ["<instance of A>"]


def test_calling_init_directly_returns_nil():
    assert run_ok("""
    class A { init() { this.ready = true; } }
    var a = A();
    print a.init();
    print a.ready;
    """) == ["nil", "true"]


def test_error_inside_initializer_propagates():
    error = run_error("""
    class A { init() { this.x = 1 / 0; } }
    A();
    """, LoxTypeError)
    assert error.message == "Division by zero."


def test_fields_are_added_on_first_assignment():
    assert run_ok("""
    class Box {}
    var b = Box();
    b.value = "first";
    print b.value;
    b.value = "second";
    print b.value;
    """) == ["first", "second"]


def test_super_call():
    assert run_ok("""
    class A { describe() { return "I am " + this.name(); } name() { return "A"; } }
    class B < A {
        describe() { return super.describe() + "!"; }
        name() { return "B"; }
    }
    print B().describe();
    """) == ["I am B!"]


def test_inherited_initializer():
    assert run_ok("""
    class A { init(v) { this.v = v; } }
    class B < A {}
    print B(5).v;
    """) == ["5"]


def test_super_resolves_from_the_defining_class():
    assert run_ok("""
    class A { name() { return "A"; } }
    class B < A { name() { return "B" + super.name(); } }
    class C < B { name() { return "C" + super.name(); } }
    print C().name();
    """) == ["CBA"]


def test_instances_compare_by_identity():
    assert run_ok("""
    class A {}
    var a = A();
    var b = A();
    print a == b;
    print a == a;
    """) == ["false", "true"]


def test_field_shadows_method():
    assert run_ok("""
    class A { m() { return "method"; } }
    var a = A();
    a.m = "field";
    print a.m;
    """) == ["field"]


def test_undefined_property():
    error = run_error("class A {}\nA().nope;", UndefinedPropertyError)
    assert error.message == "Undefined property 'nope'."
    assert error.line == 2


def test_properties_require_instances():
    error = run_error("var x = 1; x.y;", LoxTypeError)
    assert error.message == "Only instances have properties."

    error = run_error("var x = 1; x.y = 2;", LoxTypeError)
    assert error.message == "Only instances have fields."

    error = run_error("class A {} A.field;", LoxTypeError)
    assert error.message == "Only instances have properties."


def test_superclass_must_be_a_class():
    error = run_error("var X = 1;\nclass B < X {}", LoxTypeError)
    assert error.message == "Superclass must be a class."
    assert error.token.lexeme == "X"


def test_this_outside_a_method():
    error = run_error("print this;", InvalidContextError)
    assert error.message == "Invalid 'this' context."

    error = run_error("fun f() { return this; } f();", InvalidContextError)
    assert error.message == "Invalid 'this' context."


def test_super_outside_a_method():
    error = run_error("super.m();", InvalidContextError)
    assert error.message == "Can't use 'super' outside of a class method."


def test_super_in_class_without_superclass():
    error = run_error("class A { m() { return super.m(); } } A().m();", InvalidContextError)
    assert error.message == "Can't use 'super' in a class with no superclass."


def test_missing_super_method():
    error = run_error("""
    class A {}
    class B < A { m() { return super.nope(); } }
    B().m();
    """, UndefinedPropertyError)
    assert error.message == "Undefined property 'nope' on superclass 'A'."


def test_bound_method_remembers_its_instance():
    assert run_ok("""
    class Counter {
        init() { this.n = 0; }
        inc() { this.n = this.n + 1; return this.n; }
    }
    var c = Counter();
    var f = c.inc;
    f();
    print f();
    print c.n;
    """) == ["2", "2"]


def test_methods_see_globals_and_bare_fields():
    assert run_ok("""
    var greeting = "hi";
    class A {
        init() { this.x = 5; }
        greet() { return greeting; }
        getX() { return x; }
    }
    var a = A();
    print a.greet();
    print a.getX();
    """) == ["hi", "5"]


def test_class_can_refer_to_itself():
    assert run_ok("""
    class Node {
        init(next) { this.next = next; }
        push() { return Node(this); }
    }
    var head = Node(nil).push().push();
    print head.next.next.next;
    """) == ["nil"]


def test_instances_are_shared_handles():
    assert run_ok("""
    class A {}
    var a = A();
    var alias = a;
    alias.value = "shared";
    print a.value;
    fun mutate(obj) { obj.value = "changed"; }
    mutate(a);
    print alias.value;
    """) == ["shared", "changed"]


def test_instance_field_store_carries_super():
    _, error, interpreter = run_program("class A {} class B < A {} var b = B(); var a = A();")
    assert error is None
    a_class = global_value(interpreter, "A")
    b = global_value(interpreter, "B")
    instance = global_value(interpreter, "b")

    assert isinstance(b, LoxClass)
    assert isinstance(instance, LoxInstance)
    assert instance.fields.values["super"] is a_class
    assert not global_value(interpreter, "a").fields.is_defined_locally("super")


def test_instances_get_sequential_ids():
    _, error, interpreter = run_program("class A {} var first = A(); var second = A();")
    assert error is None
    assert repr(global_value(interpreter, "first")) == "<LoxInstance A#0>"
    assert repr(global_value(interpreter, "second")) == "<LoxInstance A#1>"


def test_method_errors_carry_their_line():
    _, error, _ = run_program("""class A {
        m() {
            return nope;
        }
    }
    A().m();""")
    assert isinstance(error, LoxRuntimeError)
    assert error.line == 3
