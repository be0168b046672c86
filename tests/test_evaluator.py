"""Tests for lox_core.evaluator."""

import io
import sys

import pytest

from lox_core import (
    Document,
    ErrorPolicy,
    Interpreter,
    InterpreterConfig,
    Nil,
    StreamReporter,
    VNumber,
    VText,
    define_builtin,
    evaluate,
    parse,
)
from lox_core import nodes
from lox_core.errors import LoxTypeError
from lox_core.tokens import Token, TokenType


def run(source, policy=ErrorPolicy.CONTINUE):
    return evaluate(parse(source), InterpreterConfig(error_policy=policy))


def messages(doc):
    return [d.message for d in doc.errors]


class TestArithmetic:
    def test_numbers(self):
        doc = run("print 1 + 2; print 7 - 10; print 2 * 3.5; print 9 / 2;")
        assert doc.output == ["3", "-3", "7", "4.5"]

    def test_comparison(self):
        doc = run("print 1 < 2; print 2 <= 1; print 3 > 3; print 3 >= 3;")
        assert doc.output == ["true", "false", "false", "true"]

    def test_string_concatenation(self):
        assert run('print "foo" + "bar";').output == ["foobar"]

    def test_division_by_zero_is_ieee(self):
        doc = run("print 1 / 0; print -1 / 0; print 0 / 0;")
        assert doc.output == ["inf", "-inf", "NaN"]
        assert doc.errors == []

    def test_unary(self):
        doc = run("print -3; print !nil; print !0; print !!true;")
        assert doc.output == ["-3", "true", "false", "true"]

    def test_unknown_numeric_operator_falls_back_to_zero(self):
        interp = Interpreter()
        op = Token(TokenType.AND, "and", None, 1)
        expr = nodes.Binary(nodes.Literal(VNumber(1.0)), op, nodes.Literal(VNumber(2.0)))
        assert interp.evaluate(expr) == VNumber(0.0)


class TestTypeErrors:
    def test_string_minus_number(self):
        doc = run('"a" - 1; print "after";')
        assert messages(doc) == ["Operands must be numbers."]
        assert doc.output == ["after"]

    def test_mixed_plus(self):
        doc = run('"a" + 1;')
        assert messages(doc) == ["Operands must be two numbers or two strings."]

    def test_string_arithmetic(self):
        doc = run('"a" * "b"; "a" / "b";')
        assert messages(doc) == ["Operands must be numbers."] * 2

    def test_string_comparison_yields_nil_silently(self):
        doc = run('print "a" < "b"; print "b" >= "a";')
        assert doc.output == ["nil", "nil"]
        assert doc.errors == []

    def test_negate_non_number(self):
        assert messages(run('-"a";')) == ["Operand must be a number."]

    def test_faulting_expression_yields_nil(self):
        doc = run('print "a" - 1;')
        assert doc.output == ["nil"]

    def test_error_carries_line(self):
        doc = run('var a = 1;\n\na - "b";')
        assert doc.errors[0].line == 3
        assert doc.errors[0].format() == "Operands must be numbers.\n[line 3]"


class TestEquality:
    def test_no_coercion(self):
        doc = run('print 1 == "1"; print nil == false; print nil == nil; print "a" != "a";')
        assert doc.output == ["false", "false", "true", "false"]

    def test_uninitialized_is_not_nil(self):
        doc = run("var u; print u; print u == nil; print !u;")
        assert doc.output == ["unitialized", "false", "true"]

    def test_bool_equality(self):
        assert run("print true == true; print true != false;").output == ["true", "true"]

    def test_functions_never_equal(self):
        doc = run("fun f() {} var g = f; print f == f; print f == g; print clock != clock;")
        assert doc.output == ["false", "false", "true"]


class TestVariables:
    def test_assignment_is_an_expression(self):
        assert run("var a; print a = 5; print a;").output == ["5", "5"]

    def test_undefined_variable(self):
        doc = run("print y;")
        assert messages(doc) == ["Undefined variable 'y'."]
        assert doc.output == ["nil"]

    def test_assign_undefined(self):
        doc = run("y = 1;")
        assert messages(doc) == ["Undefined variable 'y'."]
        assert "y" not in doc.globals_

    def test_block_scoping(self):
        doc = run("var a = 1; { var b = 2; a = 3; } print a; print b;")
        assert doc.output == ["3", "nil"]
        assert messages(doc) == ["Undefined variable 'b'."]

    def test_shadowing(self):
        doc = run('var a = "outer"; { var a = "inner"; print a; } print a;')
        assert doc.output == ["inner", "outer"]


class TestControlFlow:
    def test_if_else(self):
        doc = run('if (0) print "yes"; else print "no"; if (nil) print "yes"; else print "no";')
        assert doc.output == ["yes", "no"]

    def test_if_without_else(self):
        assert run('if (false) print "x";').output == []

    def test_while(self):
        doc = run("var i = 0; while (i < 3) { print i; i = i + 1; }")
        assert doc.output == ["0", "1", "2"]

    def test_for(self):
        assert run("for (var i = 0; i < 3; i = i + 1) print i;").output == ["0", "1", "2"]

    def test_for_variable_does_not_leak(self):
        doc = run("for (var i = 0; i < 1; i = i + 1) {} print i;")
        assert messages(doc) == ["Undefined variable 'i'."]

    def test_logical_short_circuit(self):
        doc = run(
            'fun boom() { print "boom"; return true; }\n'
            "print false and boom(); print true or boom();"
        )
        assert doc.output == ["false", "true"]

    def test_logical_returns_operand(self):
        doc = run('print nil or "x"; print 1 and 2; print nil and 2;')
        assert doc.output == ["x", "2", "nil"]


class TestFunctions:
    def test_return_value(self):
        doc = run('fun f() { return 1; print "unreachable"; } print f();')
        assert doc.output == ["1"]

    def test_implicit_nil(self):
        assert run("fun f() {} print f();").output == ["nil"]

    def test_bare_return(self):
        assert run("fun f() { return; } print f();").output == ["nil"]

    def test_return_unwinds_loops_and_blocks(self):
        doc = run(
            "fun f() { var i = 0; while (true) { i = i + 1; if (i == 3) { return i; } } }"
            "print f();"
        )
        assert doc.output == ["3"]

    def test_recursion(self):
        doc = run(
            "fun fib(n) { if (n < 2) return n; return fib(n - 1) + fib(n - 2); }"
            "print fib(10);"
        )
        assert doc.output == ["55"]

    def test_arguments_bound_positionally(self):
        assert run('fun f(a, b) { print a + b; } f("x", "y");').output == ["xy"]

    def test_function_rendering(self):
        assert run("fun f() {} print f; print clock;").output == ["<fn f>", "<native fn clock>"]

    def test_arity_mismatch(self):
        doc = run("fun f(a) { return a; } print f(1, 2);")
        assert messages(doc) == ["Expected 1 arguments, but got 2."]
        assert doc.output == ["nil"]

    def test_not_callable(self):
        doc = run('"text"(); nil();')
        assert messages(doc) == ["Can only call functions and classes."] * 2

    def test_arguments_evaluated_before_callee_check(self):
        doc = run('fun side() { print "side"; return 1; } "x"(side());')
        assert doc.output == ["side"]
        assert messages(doc) == ["Can only call functions and classes."]

    def test_lexical_not_dynamic_scope(self):
        doc = run(
            'var a = "global"; fun show() { print a; }'
            '{ var a = "local"; show(); }'
        )
        assert doc.output == ["global"]


class TestCallDepth:
    def test_deep_recursion(self):
        doc = run("fun c(n) { if (n > 0) c(n - 1); } c(1000); print 1;")
        assert doc.output == ["1"]
        assert doc.errors == []

    def test_deep_recursion_with_return_values(self):
        doc = run("fun sum(n) { if (n == 0) return 0; return n + sum(n - 1); } print sum(1500);")
        assert doc.output == ["1125750"]

    def test_unbounded_recursion_reports_stack_overflow(self):
        doc = run('fun f() { f(); } f(); print "after";')
        assert messages(doc) == ["Stack overflow."]
        assert doc.output == ["after"]

    def test_unbounded_recursion_aborts(self):
        doc = run('fun f() { f(); } f(); print "after";', ErrorPolicy.ABORT)
        assert messages(doc) == ["Stack overflow."]
        assert doc.output == []
        assert doc.aborted
        assert doc.interpreter.environment is doc.environment

    def test_configured_limit(self):
        config = InterpreterConfig(max_call_depth=50)
        source = "fun c(n) { if (n > 0) c(n - 1); } c(49); print 1; c(50); print 2;"
        doc = evaluate(parse(source), config)
        assert doc.output == ["1", "2"]
        assert messages(doc) == ["Stack overflow."]
        assert doc.interpreter.call_depth == 0

    def test_recursion_limit_restored(self):
        limit = sys.getrecursionlimit()
        run("fun c(n) { if (n > 0) c(n - 1); } c(10);")
        assert sys.getrecursionlimit() == limit


class TestClosures:
    def test_counter_shares_state(self):
        doc = run(
            "fun makeCounter() { var i = 0; fun counter() { i = i + 1; print i; } return counter; }"
            "var counter = makeCounter(); counter(); counter();"
        )
        assert doc.output == ["1", "2"]

    def test_independent_counters(self):
        doc = run(
            "fun makeCounter() { var i = 0; fun counter() { i = i + 1; return i; } return counter; }"
            "var a = makeCounter(); var b = makeCounter(); a(); a(); print a(); print b();"
        )
        assert doc.output == ["3", "1"]

    def test_closure_sees_later_outer_mutation(self):
        doc = run("var x = 1; fun get() { return x; } x = 2; print get();")
        assert doc.output == ["2"]


class TestBuiltins:
    def test_builtin_arity_is_checked(self):
        assert messages(run("clock(1);")) == ["Expected 0 arguments, but got 1."]

    def test_variadic_builtin(self):
        doc = Document()
        define_builtin(
            doc.environment, "sum",
            lambda args: VNumber(sum(a.value for a in args)),
            None,
        )
        doc.merge(parse("print sum(); print sum(1, 2, 3);"))
        assert doc.output == ["0", "6"]

    def test_fixed_arity_builtin(self):
        doc = Document()
        define_builtin(doc.environment, "shout", lambda args: VText(str(args[0]).upper()), 1)
        doc.merge(parse('print shout("hey"); shout();'))
        assert doc.output == ["HEY"]
        assert messages(doc) == ["Expected 1 arguments, but got 0."]

    def test_no_builtins(self):
        doc = evaluate(parse("clock;"), InterpreterConfig(register_builtins=False))
        assert messages(doc) == ["Undefined variable 'clock'."]


class TestErrorPolicy:
    def test_continue_runs_every_statement(self):
        doc = run('print 1; "a" - 1; print 2;')
        assert doc.output == ["1", "2"]
        assert not doc.aborted

    def test_abort_stops_at_first_fault(self):
        doc = run('print 1; "a" - 1; print 2; nope;', ErrorPolicy.ABORT)
        assert doc.output == ["1"]
        assert messages(doc) == ["Operands must be numbers."]
        assert doc.aborted

    def test_abort_restores_environment(self):
        doc = run(
            "fun f() { { var inner = 1; return inner - nil; } } f();",
            ErrorPolicy.ABORT,
        )
        assert doc.aborted
        assert doc.interpreter.environment is doc.environment

    def test_abort_resets_between_merges(self):
        doc = run('"a" - 1;', ErrorPolicy.ABORT)
        assert doc.aborted
        doc.merge(parse("print 3;"))
        assert not doc.aborted
        assert doc.output == ["3"]

    def test_abort_raises_from_evaluate(self):
        interp = Interpreter(InterpreterConfig(error_policy=ErrorPolicy.ABORT))
        (stmt,) = parse("-nil;")
        with pytest.raises(LoxTypeError):
            interp.evaluate(stmt.expression)


class TestInterpreter:
    def test_print_goes_to_callback(self):
        lines = []
        Interpreter(on_print=lines.append).interpret(parse('print "hi";'))
        assert lines == ["hi"]

    def test_stream_reporter(self):
        err = io.StringIO()
        reporter = StreamReporter(err)
        Interpreter(reporter=reporter, on_print=lambda s: None).interpret(parse("print x;"))
        assert reporter.had_runtime_error
        assert err.getvalue() == "Undefined variable 'x'.\n[line 1]\n"

    def test_interpret_returns_last_expression_value(self):
        interp = Interpreter(on_print=lambda s: None)
        assert interp.interpret(parse("1 + 1;")) == VNumber(2.0)
        assert interp.interpret(parse("print 1;")) is None

    def test_top_level_return_ast_stops_program(self):
        lines = []
        keyword = Token(TokenType.RETURN, "return", None, 1)
        program = [
            nodes.Print(nodes.Literal(VNumber(1.0))),
            nodes.Return(keyword, None),
            nodes.Print(nodes.Literal(VNumber(2.0))),
        ]
        Interpreter(on_print=lines.append).interpret(program)
        assert lines == ["1"]

    def test_literal_ast(self):
        interp = Interpreter()
        assert interp.evaluate(nodes.Literal(Nil)) is Nil
