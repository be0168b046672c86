"""Error reporting: turns (Token, message) pairs into user-facing diagnostics."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import IO, Protocol

from .tokens import Token, TokenType

logger = logging.getLogger(__name__)


@dataclass
class Diagnostic:
    token: Token | None
    message: str
    runtime: bool = True

    @property
    def line(self) -> int | None:
        return self.token.line if self.token is not None else None

    def format(self) -> str:
        if self.token is None:
            return f"Error: {self.message}"
        if self.runtime:
            return f"{self.message}\n[line {self.token.line}]"
        if self.token.type == TokenType.EOF:
            where = " at end"
        elif self.token.lexeme:
            where = f" at '{self.token.lexeme}'"
        else:
            where = ""
        return f"[line {self.token.line}] Error{where}: {self.message}"

    def __str__(self) -> str:
        return self.format()


class ErrorReporter(Protocol):
    def report(self, token: Token | None, message: str, runtime: bool = True) -> None: ...


@dataclass
class StreamReporter:
    """Write each diagnostic to *stream* (stderr by default)."""

    stream: IO[str] | None = None
    had_error: bool = False
    had_runtime_error: bool = False

    def report(self, token: Token | None, message: str, runtime: bool = True) -> None:
        diagnostic = Diagnostic(token, message, runtime)
        logger.debug("reported: %s", diagnostic.format().replace("\n", " "))
        print(diagnostic.format(), file=self.stream or sys.stderr)
        if runtime:
            self.had_runtime_error = True
        else:
            self.had_error = True


@dataclass
class CollectingReporter:
    """Keep diagnostics in memory instead of printing them."""

    diagnostics: list[Diagnostic] = field(default_factory=list)

    def report(self, token: Token | None, message: str, runtime: bool = True) -> None:
        diagnostic = Diagnostic(token, message, runtime)
        logger.debug("collected: %s", diagnostic.format().replace("\n", " "))
        self.diagnostics.append(diagnostic)
