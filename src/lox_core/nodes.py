"""AST node types consumed by the evaluator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from .tokens import Token
from .values import Value


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

@dataclass
class Assign:
    name: Token
    value: "Expr"


@dataclass
class Binary:
    left: "Expr"
    operator: Token
    right: "Expr"


@dataclass
class Call:
    callee: "Expr"
    paren: Token  # closing paren, used to locate call errors
    arguments: list["Expr"] = field(default_factory=list)


@dataclass
class Grouping:
    expression: "Expr"


@dataclass
class Literal:
    value: Value


@dataclass
class Logical:
    left: "Expr"
    operator: Token
    right: "Expr"


@dataclass
class Unary:
    operator: Token
    right: "Expr"


@dataclass
class Variable:
    name: Token


Expr = Union[Assign, Binary, Call, Grouping, Literal, Logical, Unary, Variable]


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------

@dataclass
class Block:
    statements: list["Stmt"] = field(default_factory=list)


@dataclass
class Expression:
    expression: Expr


@dataclass
class Function:
    name: Token
    params: list[Token]
    body: list["Stmt"]


@dataclass
class If:
    condition: Expr
    then_branch: "Stmt"
    else_branch: "Stmt | None" = None


@dataclass
class Print:
    expression: Expr


@dataclass
class Return:
    keyword: Token
    value: Expr | None = None


@dataclass
class Var:
    name: Token
    initializer: Expr


@dataclass
class While:
    condition: Expr
    body: "Stmt"


Stmt = Union[Block, Expression, Function, If, Print, Return, Var, While]
