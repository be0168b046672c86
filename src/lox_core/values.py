"""Value types for Lox Core."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Union


@dataclass
class VText:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass
class VNumber:
    value: float

    def __str__(self) -> str:
        v = self.value
        if math.isnan(v):
            return "NaN"
        if math.isinf(v):
            return "inf" if v > 0 else "-inf"
        # Shortest round-trip digits, written positionally (never 1e-05)
        text = format(Decimal(repr(float(v))), "f")
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text


@dataclass
class VBool:
    value: bool

    def __str__(self) -> str:
        return str(self.value).lower()


@dataclass
class VReturn:
    """Control-flow outcome of a ``return`` statement; never stored in a scope."""

    value: "Value"

    def __str__(self) -> str:
        return f"return {self.value}"


class _Nil:
    """Singleton for the explicit "no value"."""

    _instance: "_Nil | None" = None

    def __new__(cls) -> "_Nil":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Nil"

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return "nil"


class _Uninitialized:
    """Singleton marking a declared-but-unassigned binding."""

    _instance: "_Uninitialized | None" = None

    def __new__(cls) -> "_Uninitialized":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Uninitialized"

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return "unitialized"


Nil = _Nil()
Uninitialized = _Uninitialized()

Value = Union[VText, VNumber, VBool, _Nil, _Uninitialized, VReturn, "VFunction", "VBuiltin"]


def is_truthy(value: Value) -> bool:
    """Nil and Uninitialized are falsy, a boolean is itself, anything else is true."""
    if value is Nil or value is Uninitialized:
        return False
    if isinstance(value, VBool):
        return value.value
    return True


def is_equal(left: Value, right: Value) -> bool:
    """Variant-homogeneous equality; values of different variants never match."""
    if type(left) is not type(right):
        return False
    if isinstance(left, (VText, VNumber, VBool)):
        return left.value == right.value
    if left is Nil or left is Uninitialized:
        return True
    # functions, builtins and return wrappers are never equal, not even to themselves
    return False
