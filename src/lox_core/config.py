"""Interpreter configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping


class ErrorPolicy(Enum):
    CONTINUE = "continue"  # report, substitute nil, keep evaluating
    ABORT = "abort"        # report the first fault and stop the program


_POLICY_VAR = "LOX_ERROR_POLICY"


@dataclass
class InterpreterConfig:
    error_policy: ErrorPolicy = ErrorPolicy.CONTINUE
    register_builtins: bool = True
    max_call_depth: int = 2000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> InterpreterConfig:
        """Build a config, honouring ``LOX_ERROR_POLICY`` when it is set."""
        environ = os.environ if environ is None else environ
        raw = environ.get(_POLICY_VAR, "").strip().lower()
        if not raw:
            return cls()
        try:
            policy = ErrorPolicy(raw)
        except ValueError:
            choices = ", ".join(p.value for p in ErrorPolicy)
            raise ValueError(f"{_POLICY_VAR}={raw!r}: expected one of {choices}") from None
        return cls(error_policy=policy)
