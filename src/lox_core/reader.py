"""Reader layer: recursive-descent parser from Tokens to statements."""

from __future__ import annotations

from . import nodes
from .errors import LoxSyntaxError
from .reporter import Diagnostic
from .scanner import scan
from .tokens import Token, TokenType
from .values import Nil, Uninitialized, VBool, VNumber, VText

MAX_ARGUMENTS = 255

T = TokenType


class _ParseError(Exception):
    """Internal unwind signal; the parser synchronizes and continues."""


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def parse(source: str) -> list[nodes.Stmt]:
    """Scan and parse *source*.

    Raises LoxSyntaxError with every collected diagnostic if the scanner
    or the parser hit a problem anywhere in the text.
    """
    tokens, diagnostics = scan(source)
    parser = Parser(tokens)
    statements = parser.parse()
    diagnostics.extend(parser.diagnostics)
    if diagnostics:
        raise LoxSyntaxError(diagnostics)
    return statements


class Parser:
    """Grammar, lowest to highest precedence::

        declaration -> funDecl | varDecl | statement
        statement   -> exprStmt | forStmt | ifStmt | printStmt
                     | returnStmt | whileStmt | block
        expression  -> assignment
        assignment  -> IDENTIFIER "=" assignment | logic_or
        logic_or    -> logic_and ( "or" logic_and )*
        logic_and   -> equality ( "and" equality )*
        equality    -> comparison ( ( "!=" | "==" ) comparison )*
        comparison  -> term ( ( ">" | ">=" | "<" | "<=" ) term )*
        term        -> factor ( ( "-" | "+" ) factor )*
        factor      -> unary ( ( "/" | "*" ) unary )*
        unary       -> ( "!" | "-" ) unary | call
        call        -> primary ( "(" arguments? ")" )*
        primary     -> NUMBER | STRING | "true" | "false" | "nil"
                     | IDENTIFIER | "(" expression ")"
    """

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.diagnostics: list[Diagnostic] = []
        self._current = 0
        self._function_depth = 0

    def parse(self) -> list[nodes.Stmt]:
        statements: list[nodes.Stmt] = []
        while not self._at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    # -- Declarations ---------------------------------------------------

    def _declaration(self) -> nodes.Stmt | None:
        try:
            if self._match(T.FUN):
                return self._function("function")
            if self._match(T.VAR):
                return self._var_declaration()
            return self._statement()
        except _ParseError:
            self._synchronize()
            return None

    def _function(self, kind: str) -> nodes.Function:
        name = self._consume(T.IDENTIFIER, f"Expect {kind} name.")
        self._consume(T.LEFT_PAREN, f"Expect '(' after {kind} name.")
        params: list[Token] = []
        if not self._check(T.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self._error(self._peek(), f"Can't have more than {MAX_ARGUMENTS} parameters.")
                params.append(self._consume(T.IDENTIFIER, "Expect parameter name."))
                if not self._match(T.COMMA):
                    break
        self._consume(T.RIGHT_PAREN, "Expect ')' after parameters.")
        self._consume(T.LEFT_BRACE, f"Expect '{{' before {kind} body.")

        self._function_depth += 1
        try:
            body = self._block()
        finally:
            self._function_depth -= 1
        return nodes.Function(name, params, body)

    def _var_declaration(self) -> nodes.Var:
        name = self._consume(T.IDENTIFIER, "Expect variable name.")
        initializer: nodes.Expr = nodes.Literal(Uninitialized)
        if self._match(T.EQUAL):
            initializer = self._expression()
        self._consume(T.SEMICOLON, "Expect ';' after variable declaration.")
        return nodes.Var(name, initializer)

    # -- Statements -----------------------------------------------------

    def _statement(self) -> nodes.Stmt:
        if self._match(T.FOR):
            return self._for_statement()
        if self._match(T.IF):
            return self._if_statement()
        if self._match(T.PRINT):
            value = self._expression()
            self._consume(T.SEMICOLON, "Expect ';' after value.")
            return nodes.Print(value)
        if self._match(T.RETURN):
            return self._return_statement()
        if self._match(T.WHILE):
            return self._while_statement()
        if self._match(T.LEFT_BRACE):
            return nodes.Block(self._block())

        expr = self._expression()
        self._consume(T.SEMICOLON, "Expect ';' after expression.")
        return nodes.Expression(expr)

    def _for_statement(self) -> nodes.Stmt:
        """Desugar ``for (init; cond; incr) body`` into a block and a while loop."""
        self._consume(T.LEFT_PAREN, "Expect '(' after 'for'.")

        initializer: nodes.Stmt | None
        if self._match(T.SEMICOLON):
            initializer = None
        elif self._match(T.VAR):
            initializer = self._var_declaration()
        else:
            expr = self._expression()
            self._consume(T.SEMICOLON, "Expect ';' after expression.")
            initializer = nodes.Expression(expr)

        condition: nodes.Expr = nodes.Literal(VBool(True))
        if not self._check(T.SEMICOLON):
            condition = self._expression()
        self._consume(T.SEMICOLON, "Expect ';' after loop condition.")

        increment: nodes.Expr | None = None
        if not self._check(T.RIGHT_PAREN):
            increment = self._expression()
        self._consume(T.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self._statement()
        if increment is not None:
            body = nodes.Block([body, nodes.Expression(increment)])
        body = nodes.While(condition, body)
        if initializer is not None:
            body = nodes.Block([initializer, body])
        return body

    def _if_statement(self) -> nodes.If:
        self._consume(T.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self._expression()
        self._consume(T.RIGHT_PAREN, "Expect ')' after if condition.")
        then_branch = self._statement()
        else_branch = self._statement() if self._match(T.ELSE) else None
        return nodes.If(condition, then_branch, else_branch)

    def _return_statement(self) -> nodes.Return:
        keyword = self._previous()
        if self._function_depth == 0:
            # Reported, but parsing goes on so later problems surface too
            self._error(keyword, "Can't return from top-level code.")
        value = None
        if not self._check(T.SEMICOLON):
            value = self._expression()
        self._consume(T.SEMICOLON, "Expect ';' after return value.")
        return nodes.Return(keyword, value)

    def _while_statement(self) -> nodes.While:
        self._consume(T.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self._expression()
        self._consume(T.RIGHT_PAREN, "Expect ')' after condition.")
        return nodes.While(condition, self._statement())

    def _block(self) -> list[nodes.Stmt]:
        statements: list[nodes.Stmt] = []
        while not self._check(T.RIGHT_BRACE) and not self._at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)
        self._consume(T.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    # -- Expressions ----------------------------------------------------

    def _expression(self) -> nodes.Expr:
        return self._assignment()

    def _assignment(self) -> nodes.Expr:
        expr = self._or()

        if self._match(T.EQUAL):
            equals = self._previous()
            value = self._assignment()
            if isinstance(expr, nodes.Variable):
                return nodes.Assign(expr.name, value)
            self._error(equals, "Invalid assignment target.")

        return expr

    def _or(self) -> nodes.Expr:
        expr = self._and()
        while self._match(T.OR):
            operator = self._previous()
            expr = nodes.Logical(expr, operator, self._and())
        return expr

    def _and(self) -> nodes.Expr:
        expr = self._equality()
        while self._match(T.AND):
            operator = self._previous()
            expr = nodes.Logical(expr, operator, self._equality())
        return expr

    def _equality(self) -> nodes.Expr:
        return self._binary(self._comparison, T.BANG_EQUAL, T.EQUAL_EQUAL)

    def _comparison(self) -> nodes.Expr:
        return self._binary(self._term, T.GREATER, T.GREATER_EQUAL, T.LESS, T.LESS_EQUAL)

    def _term(self) -> nodes.Expr:
        return self._binary(self._factor, T.MINUS, T.PLUS)

    def _factor(self) -> nodes.Expr:
        return self._binary(self._unary, T.SLASH, T.STAR)

    def _binary(self, operand, *types: TokenType) -> nodes.Expr:
        """Left-associative chain of *operand* joined by any of *types*."""
        expr = operand()
        while self._match(*types):
            operator = self._previous()
            expr = nodes.Binary(expr, operator, operand())
        return expr

    def _unary(self) -> nodes.Expr:
        if self._match(T.BANG, T.MINUS):
            operator = self._previous()
            return nodes.Unary(operator, self._unary())
        return self._call()

    def _call(self) -> nodes.Expr:
        expr = self._primary()
        while self._match(T.LEFT_PAREN):
            expr = self._finish_call(expr)
        return expr

    def _finish_call(self, callee: nodes.Expr) -> nodes.Call:
        arguments: list[nodes.Expr] = []
        if not self._check(T.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self._error(self._peek(), f"Can't have more than {MAX_ARGUMENTS} arguments.")
                arguments.append(self._expression())
                if not self._match(T.COMMA):
                    break
        paren = self._consume(T.RIGHT_PAREN, "Expect ')' after arguments.")
        return nodes.Call(callee, paren, arguments)

    def _primary(self) -> nodes.Expr:
        if self._match(T.FALSE):
            return nodes.Literal(VBool(False))
        if self._match(T.TRUE):
            return nodes.Literal(VBool(True))
        if self._match(T.NIL):
            return nodes.Literal(Nil)
        if self._match(T.NUMBER):
            return nodes.Literal(VNumber(self._previous().literal))
        if self._match(T.STRING):
            return nodes.Literal(VText(self._previous().literal))
        if self._match(T.IDENTIFIER):
            return nodes.Variable(self._previous())
        if self._match(T.LEFT_PAREN):
            expr = self._expression()
            self._consume(T.RIGHT_PAREN, "Expect ')' after expression.")
            return nodes.Grouping(expr)

        raise self._error(self._peek(), "Expect expression.")

    # -- Token cursor ---------------------------------------------------

    def _match(self, *types: TokenType) -> bool:
        for type_ in types:
            if self._check(type_):
                self._advance()
                return True
        return False

    def _consume(self, type_: TokenType, message: str) -> Token:
        if self._check(type_):
            return self._advance()
        raise self._error(self._peek(), message)

    def _check(self, type_: TokenType) -> bool:
        return not self._at_end() and self._peek().type == type_

    def _advance(self) -> Token:
        if not self._at_end():
            self._current += 1
        return self._previous()

    def _at_end(self) -> bool:
        return self._peek().type == T.EOF

    def _peek(self) -> Token:
        return self.tokens[self._current]

    def _previous(self) -> Token:
        return self.tokens[self._current - 1]

    def _error(self, token: Token, message: str) -> _ParseError:
        self.diagnostics.append(Diagnostic(token, message, runtime=False))
        return _ParseError(message)

    def _synchronize(self) -> None:
        """Skip tokens until the start of the next statement."""
        self._advance()
        while not self._at_end():
            if self._previous().type == T.SEMICOLON:
                return
            if self._peek().type in (T.CLASS, T.FUN, T.VAR, T.FOR, T.IF, T.WHILE, T.PRINT, T.RETURN):
                return
            self._advance()
