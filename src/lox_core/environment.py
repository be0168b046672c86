"""Lexical scopes and the enclosing-scope chain."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

from .errors import UndefinedVariable

if TYPE_CHECKING:
    from .tokens import Token
    from .values import Value


@dataclass(eq=False)
class Environment:
    """One scope of bindings, linked to the scope that encloses it.

    Closures and call frames share Environment objects by reference, so a
    mutation made through one holder is visible to every other holder.
    """

    enclosing: Environment | None = None
    values: dict[str, Value] = field(default_factory=dict)

    # -- Bindings -------------------------------------------------------

    def define(self, name: str, value: Value) -> None:
        """Bind *name* in this scope only, shadowing any outer binding."""
        self.values[name] = value

    def get(self, name: Token) -> Value:
        env = self._resolve(name)
        return env.values[name.lexeme]

    def assign(self, name: Token, value: Value) -> None:
        """Overwrite the nearest existing binding; never creates one."""
        env = self._resolve(name)
        env.values[name.lexeme] = value

    def _resolve(self, name: Token) -> Environment:
        for env in self.chain():
            if name.lexeme in env.values:
                return env
        raise UndefinedVariable(name, f"Undefined variable '{name.lexeme}'.")

    # -- Introspection --------------------------------------------------

    def chain(self) -> Iterator[Environment]:
        """Yield this scope, then each enclosing scope outward."""
        env: Environment | None = self
        while env is not None:
            yield env
            env = env.enclosing

    @property
    def depth(self) -> int:
        return sum(1 for _ in self.chain()) - 1

    def __contains__(self, name: str) -> bool:
        return any(name in env.values for env in self.chain())

    def __repr__(self) -> str:
        names = ", ".join(self.values)
        parent = " -> ..." if self.enclosing is not None else ""
        return f"<Environment {{{names}}}{parent}>"
