"""Document — the accumulated result of running Lox statements."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import IO

from . import nodes
from .config import InterpreterConfig
from .environment import Environment
from .evaluator import Interpreter
from .reporter import CollectingReporter, Diagnostic
from .values import Value


@dataclass
class Document:
    """Holds one interpreter session: globals, printed output and diagnostics.

    When *echo* is set, printed lines are also written there as they happen.
    """

    config: InterpreterConfig = field(default_factory=InterpreterConfig)
    echo: IO[str] | None = None
    output: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._reporter = CollectingReporter()
        self.interpreter = Interpreter(self.config, self._reporter, self._emit)
        # Not a dataclass field — tracks last result from the most recent merge()
        self._last_result: Value | None = None

    # -- Convenience accessors ------------------------------------------

    @property
    def environment(self) -> Environment:
        return self.interpreter.globals

    @property
    def globals_(self) -> dict[str, Value]:
        return self.interpreter.globals.values

    @property
    def errors(self) -> list[Diagnostic]:
        return self._reporter.diagnostics

    @property
    def aborted(self) -> bool:
        return self.interpreter.aborted

    @property
    def last_result(self) -> Value | None:
        """The last expression value produced by the most recent merge()."""
        return self._last_result

    # -- Incremental evaluation -----------------------------------------

    def merge(self, statements: list[nodes.Stmt]) -> None:
        """Run *statements* against this Document's globals (used by LoxRepl)."""
        self._last_result = self.interpreter.interpret(statements)

    def _emit(self, text: str) -> None:
        self.output.append(text)
        if self.echo is not None:
            print(text, file=self.echo)
