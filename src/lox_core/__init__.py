"""Lox Core — runtime value model, scopes and tree-walking evaluator."""

from .builtins import define_builtin, register_builtins
from .callables import LoxCallable, VBuiltin, VFunction, is_callable
from .config import ErrorPolicy, InterpreterConfig
from .document import Document
from .environment import Environment
from .errors import (
    ArityMismatch,
    LoxCoreError,
    LoxRuntimeError,
    LoxSyntaxError,
    LoxTypeError,
    NotCallable,
    StackOverflow,
    UndefinedVariable,
)
from .evaluator import Interpreter, evaluate
from .reader import parse
from .repl import LoxRepl
from .reporter import CollectingReporter, Diagnostic, StreamReporter
from .tokens import Token, TokenType
from .values import (
    Nil,
    Uninitialized,
    Value,
    VBool,
    VNumber,
    VReturn,
    VText,
    is_equal,
    is_truthy,
)

__all__ = [
    "evaluate",
    "parse",
    "Document",
    "Environment",
    "Interpreter",
    "LoxRepl",
    "ErrorPolicy",
    "InterpreterConfig",
    "Value",
    "Nil",
    "Uninitialized",
    "VBool",
    "VNumber",
    "VReturn",
    "VText",
    "VFunction",
    "VBuiltin",
    "LoxCallable",
    "is_callable",
    "is_equal",
    "is_truthy",
    "define_builtin",
    "register_builtins",
    "Token",
    "TokenType",
    "Diagnostic",
    "CollectingReporter",
    "StreamReporter",
    "LoxCoreError",
    "LoxSyntaxError",
    "LoxRuntimeError",
    "UndefinedVariable",
    "LoxTypeError",
    "NotCallable",
    "ArityMismatch",
    "StackOverflow",
]
