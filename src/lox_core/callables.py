"""Callable contract shared by user functions and native builtins."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Protocol

from .environment import Environment
from .values import Nil, Value, VReturn

if TYPE_CHECKING:
    from .evaluator import Interpreter
    from . import nodes

logger = logging.getLogger(__name__)


class LoxCallable(Protocol):
    def arity(self) -> int | None:
        """Declared parameter count, or ``None`` for a variadic callable."""

    def call(self, interpreter: Interpreter, arguments: list[Value]) -> Value: ...


@dataclass(eq=False)
class VFunction:
    """A user-defined function closed over its defining scope."""

    declaration: nodes.Function
    closure: Environment

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    @property
    def params(self) -> list[str]:
        return [p.lexeme for p in self.declaration.params]

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: Interpreter, arguments: list[Value]) -> Value:
        # Parameters live in a fresh scope under the closure, not the caller.
        env = Environment(enclosing=self.closure)
        for param, arg in zip(self.declaration.params, arguments):
            env.define(param.lexeme, arg)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("call %s(%s) depth=%d", self.name, ", ".join(self.params), env.depth)
        outcome = interpreter.execute_block(self.declaration.body, env)
        if isinstance(outcome, VReturn):
            return outcome.value
        return Nil

    def __str__(self) -> str:
        return f"<fn {self.name}>"


@dataclass(eq=False)
class VBuiltin:
    """A host-provided primitive: ``fn(args) -> Value``."""

    name: str
    fn: Callable[[list[Value]], Value]
    declared_arity: int | None = 0

    def arity(self) -> int | None:
        return self.declared_arity

    def call(self, interpreter: Interpreter, arguments: list[Value]) -> Value:
        return self.fn(arguments)

    def __str__(self) -> str:
        return f"<native fn {self.name}>"


def is_callable(value: Value) -> bool:
    return isinstance(value, (VFunction, VBuiltin))
