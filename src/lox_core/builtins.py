"""Native functions wired into the global scope."""

from __future__ import annotations

import time
from typing import Callable

from .callables import VBuiltin
from .environment import Environment
from .values import Value, VNumber


def define_builtin(
    env: Environment,
    name: str,
    fn: Callable[[list[Value]], Value],
    arity: int | None = 0,
) -> VBuiltin:
    """Wrap *fn* as a builtin and bind it in *env*.

    *arity* is the exact argument count, or ``None`` to accept any number.
    """
    builtin = VBuiltin(name, fn, arity)
    env.define(name, builtin)
    return builtin


def _clock(args: list[Value]) -> Value:
    return VNumber(time.time())


def register_builtins(env: Environment) -> None:
    define_builtin(env, "clock", _clock, 0)
