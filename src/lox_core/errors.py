"""Exception hierarchy for Lox Core."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .reporter import Diagnostic
    from .tokens import Token


class LoxCoreError(Exception):
    """Base class for all Lox Core errors."""


class LoxSyntaxError(LoxCoreError):
    """Raised when source text could not be scanned or parsed."""

    def __init__(self, diagnostics: list[Diagnostic]):
        self.diagnostics = diagnostics
        super().__init__("\n".join(d.format() for d in diagnostics))


class LoxRuntimeError(LoxCoreError):
    """A fault detected while evaluating a single expression or statement."""

    def __init__(self, token: Token, message: str):
        self.token = token
        self.message = message
        super().__init__(message)


class UndefinedVariable(LoxRuntimeError):
    """Raised on a lookup or assignment of a name no scope defines."""


class LoxTypeError(LoxRuntimeError):
    """Raised when an operator gets operands of the wrong type."""


class NotCallable(LoxRuntimeError):
    """Raised when the call target is neither a function nor a builtin."""


class ArityMismatch(LoxRuntimeError):
    """Raised when the argument count differs from the declared arity."""


class StackOverflow(LoxRuntimeError):
    """Raised when nested calls go deeper than the configured limit."""
