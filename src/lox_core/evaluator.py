"""Evaluator: executes statements and evaluates expressions against scopes."""

from __future__ import annotations

import logging
import math
import operator
import sys
from typing import TYPE_CHECKING, Callable, assert_never

from . import nodes
from .builtins import register_builtins
from .callables import VFunction, is_callable
from .config import ErrorPolicy, InterpreterConfig
from .environment import Environment
from .errors import ArityMismatch, LoxRuntimeError, LoxTypeError, NotCallable, StackOverflow
from .reporter import ErrorReporter, StreamReporter
from .tokens import Token, TokenType
from .values import Nil, Value, VBool, VNumber, VReturn, VText, is_equal, is_truthy

if TYPE_CHECKING:
    from .document import Document

logger = logging.getLogger(__name__)

T = TokenType


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def evaluate(statements: list[nodes.Stmt], config: InterpreterConfig | None = None) -> Document:
    """Run *statements* in a fresh global scope and return the Document."""
    from .document import Document
    doc = Document(config=config or InterpreterConfig())
    doc.merge(statements)
    return doc


# ---------------------------------------------------------------------------
# Number operators
# ---------------------------------------------------------------------------

def _divide(a: float, b: float) -> float:
    """IEEE-754 division: a zero divisor gives inf, -inf or nan."""
    if b != 0:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


_ARITHMETIC: dict[TokenType, Callable[[float, float], float]] = {
    T.PLUS: operator.add,
    T.MINUS: operator.sub,
    T.STAR: operator.mul,
    T.SLASH: _divide,
}

_COMPARISON: dict[TokenType, Callable[[float, float], bool]] = {
    T.GREATER: operator.gt,
    T.GREATER_EQUAL: operator.ge,
    T.LESS: operator.lt,
    T.LESS_EQUAL: operator.le,
    T.EQUAL_EQUAL: operator.eq,
    T.BANG_EQUAL: operator.ne,
}

_ARITHMETIC_ONLY = frozenset({T.MINUS, T.STAR, T.SLASH})

_NUMERIC_ONLY = _ARITHMETIC_ONLY | {T.GREATER, T.GREATER_EQUAL, T.LESS, T.LESS_EQUAL}

# Python frames one Lox call can stack up (evaluate, _call, execute_block, ...)
_FRAMES_PER_CALL = 30


class Interpreter:
    """Tree-walking interpreter over a chain of Environments.

    Usage::

        interp = Interpreter()
        interp.interpret(parse("var a = 1; print a + 2;"))   # prints 3

    Runtime faults are raised as LoxRuntimeError subclasses and handled at
    the expression boundary according to ``config.error_policy``.
    """

    def __init__(
        self,
        config: InterpreterConfig | None = None,
        reporter: ErrorReporter | None = None,
        on_print: Callable[[str], None] | None = None,
    ) -> None:
        self.config = config or InterpreterConfig()
        self.reporter: ErrorReporter = reporter or StreamReporter()
        self.on_print = on_print or print
        self.globals = Environment()
        self.environment = self.globals
        self.aborted = False
        self.call_depth = 0
        if self.config.register_builtins:
            register_builtins(self.globals)

    # -- Program --------------------------------------------------------

    def interpret(self, statements: list[nodes.Stmt]) -> Value | None:
        """Execute top-level *statements*.

        Returns the value of the last expression statement, or ``None``
        when there was none. Under ErrorPolicy.ABORT the first fault is
        reported, ``aborted`` is set and the rest of the program is skipped.
        """
        self.aborted = False
        result: Value | None = None
        limit = sys.getrecursionlimit()
        needed = self.config.max_call_depth * _FRAMES_PER_CALL + limit
        if needed > limit:
            sys.setrecursionlimit(needed)
        try:
            for stmt in statements:
                if isinstance(stmt, nodes.Expression):
                    result = self.evaluate(stmt.expression)
                elif self.execute(stmt) is not None:
                    break  # a top-level return ends the program
        except LoxRuntimeError as error:
            self.report(error)
            self.aborted = True
            return None
        finally:
            sys.setrecursionlimit(limit)
        return result

    def report(self, error: LoxRuntimeError) -> None:
        logger.debug("runtime fault %s at line %d: %s",
                     type(error).__name__, error.token.line, error.message)
        self.reporter.report(error.token, error.message)

    # -- Statements -----------------------------------------------------

    def execute(self, stmt: nodes.Stmt) -> VReturn | None:
        """Run one statement; a VReturn outcome means a return is unwinding."""
        match stmt:
            case nodes.Expression():
                self.evaluate(stmt.expression)
            case nodes.Print():
                value = self.evaluate(stmt.expression)
                self.on_print(str(value))
            case nodes.Var():
                value = self.evaluate(stmt.initializer)
                self.environment.define(stmt.name.lexeme, value)
            case nodes.Block():
                return self.execute_block(stmt.statements, Environment(enclosing=self.environment))
            case nodes.If():
                if is_truthy(self.evaluate(stmt.condition)):
                    return self.execute(stmt.then_branch)
                if stmt.else_branch is not None:
                    return self.execute(stmt.else_branch)
            case nodes.While():
                while is_truthy(self.evaluate(stmt.condition)):
                    outcome = self.execute(stmt.body)
                    if outcome is not None:
                        return outcome
            case nodes.Function():
                function = VFunction(stmt, self.environment)
                self.environment.define(stmt.name.lexeme, function)
            case nodes.Return():
                value = Nil if stmt.value is None else self.evaluate(stmt.value)
                return VReturn(value)
            case _:
                assert_never(stmt)
        return None

    def execute_block(self, statements: list[nodes.Stmt], environment: Environment) -> VReturn | None:
        """Run *statements* with *environment* current, restoring the previous one on any exit."""
        previous = self.environment
        self.environment = environment
        try:
            for stmt in statements:
                outcome = self.execute(stmt)
                if outcome is not None:
                    return outcome
            return None
        finally:
            self.environment = previous

    # -- Expressions ----------------------------------------------------

    def evaluate(self, expr: nodes.Expr) -> Value:
        try:
            return self._evaluate(expr)
        except LoxRuntimeError as error:
            if self.config.error_policy is ErrorPolicy.ABORT:
                raise
            self.report(error)
            return Nil

    def _evaluate(self, expr: nodes.Expr) -> Value:
        match expr:
            case nodes.Literal():
                return expr.value
            case nodes.Grouping():
                return self.evaluate(expr.expression)
            case nodes.Variable():
                return self.environment.get(expr.name)
            case nodes.Assign():
                value = self.evaluate(expr.value)
                self.environment.assign(expr.name, value)
                return value
            case nodes.Logical():
                return self._logical(expr)
            case nodes.Unary():
                return self._unary(expr.operator, self.evaluate(expr.right))
            case nodes.Binary():
                left = self.evaluate(expr.left)
                right = self.evaluate(expr.right)
                return self._binary(expr.operator, left, right)
            case nodes.Call():
                return self._call(expr)
            case _:
                assert_never(expr)

    def _logical(self, expr: nodes.Logical) -> Value:
        left = self.evaluate(expr.left)
        if expr.operator.type == T.OR:
            if is_truthy(left):
                return left
        elif not is_truthy(left):
            return left
        return self.evaluate(expr.right)

    def _unary(self, op: Token, right: Value) -> Value:
        if op.type == T.BANG:
            return VBool(not is_truthy(right))
        if op.type == T.MINUS:
            if isinstance(right, VNumber):
                return VNumber(-right.value)
            raise LoxTypeError(op, "Operand must be a number.")
        return Nil

    def _binary(self, op: Token, left: Value, right: Value) -> Value:
        match left, right:
            case VText(), VText():
                if op.type == T.PLUS:
                    return VText(left.value + right.value)
                if op.type == T.EQUAL_EQUAL:
                    return VBool(left.value == right.value)
                if op.type == T.BANG_EQUAL:
                    return VBool(left.value != right.value)
                if op.type in _ARITHMETIC_ONLY:
                    raise LoxTypeError(op, "Operands must be numbers.")
                return Nil
            case VNumber(), VNumber():
                if op.type in _ARITHMETIC:
                    return VNumber(_ARITHMETIC[op.type](left.value, right.value))
                if op.type in _COMPARISON:
                    return VBool(_COMPARISON[op.type](left.value, right.value))
                logger.warning("no numeric operator for %s at line %d", op.lexeme, op.line)
                return VNumber(0.0)
            case _:
                if op.type in _NUMERIC_ONLY:
                    raise LoxTypeError(op, "Operands must be numbers.")
                if op.type == T.PLUS:
                    raise LoxTypeError(op, "Operands must be two numbers or two strings.")
                if op.type == T.EQUAL_EQUAL:
                    return VBool(is_equal(left, right))
                if op.type == T.BANG_EQUAL:
                    return VBool(not is_equal(left, right))
                return Nil

    def _call(self, expr: nodes.Call) -> Value:
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(arg) for arg in expr.arguments]

        if not is_callable(callee):
            raise NotCallable(expr.paren, "Can only call functions and classes.")

        arity = callee.arity()
        if arity is not None and len(arguments) != arity:
            raise ArityMismatch(expr.paren, f"Expected {arity} arguments, but got {len(arguments)}.")

        if self.call_depth >= self.config.max_call_depth:
            raise StackOverflow(expr.paren, "Stack overflow.")
        self.call_depth += 1
        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise StackOverflow(expr.paren, "Stack overflow.") from None
        finally:
            self.call_depth -= 1
