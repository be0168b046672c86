"""Scanner: source text to a flat list of Tokens."""

from __future__ import annotations

from .reporter import Diagnostic
from .tokens import KEYWORDS, Token, TokenType


_SINGLE = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "-": TokenType.MINUS,
    "+": TokenType.PLUS,
    ";": TokenType.SEMICOLON,
    "*": TokenType.STAR,
}

# char -> (type when followed by "=", type otherwise)
_PAIRED = {
    "!": (TokenType.BANG_EQUAL, TokenType.BANG),
    "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    "<": (TokenType.LESS_EQUAL, TokenType.LESS),
    ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
}


class Scanner:
    """Single pass over *source*; problems are collected, not raised."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.tokens: list[Token] = []
        self.diagnostics: list[Diagnostic] = []
        self._start = 0
        self._current = 0
        self._line = 1

    def scan_tokens(self) -> list[Token]:
        while not self._at_end():
            self._start = self._current
            self._scan_token()
        self.tokens.append(Token(TokenType.EOF, "", None, self._line))
        return self.tokens

    # -- Dispatch -------------------------------------------------------

    def _scan_token(self) -> None:
        c = self._advance()

        if c in _SINGLE:
            self._add(_SINGLE[c])
        elif c in _PAIRED:
            matched, alone = _PAIRED[c]
            self._add(matched if self._match("=") else alone)
        elif c == "/":
            if self._match("/"):
                while self._peek() != "\n" and not self._at_end():
                    self._advance()
            else:
                self._add(TokenType.SLASH)
        elif c in " \r\t":
            pass
        elif c == "\n":
            self._line += 1
        elif c == '"':
            self._string()
        elif _is_digit(c):
            self._number()
        elif _is_alpha(c):
            self._identifier()
        else:
            self._error("Unexpected character.")

    def _string(self) -> None:
        while self._peek() != '"' and not self._at_end():
            if self._peek() == "\n":
                self._line += 1
            self._advance()

        if self._at_end():
            self._error("Unterminated string.")
            return

        self._advance()  # closing quote
        self._add(TokenType.STRING, self.source[self._start + 1:self._current - 1])

    def _number(self) -> None:
        while _is_digit(self._peek()):
            self._advance()

        # A fractional part needs at least one digit after the dot
        if self._peek() == "." and _is_digit(self._peek_next()):
            self._advance()
            while _is_digit(self._peek()):
                self._advance()

        self._add(TokenType.NUMBER, float(self.source[self._start:self._current]))

    def _identifier(self) -> None:
        while _is_alpha(self._peek()) or _is_digit(self._peek()):
            self._advance()
        text = self.source[self._start:self._current]
        self._add(KEYWORDS.get(text, TokenType.IDENTIFIER))

    # -- Cursor helpers -------------------------------------------------

    def _at_end(self) -> bool:
        return self._current >= len(self.source)

    def _advance(self) -> str:
        c = self.source[self._current]
        self._current += 1
        return c

    def _match(self, expected: str) -> bool:
        if self._at_end() or self.source[self._current] != expected:
            return False
        self._current += 1
        return True

    def _peek(self) -> str:
        return "" if self._at_end() else self.source[self._current]

    def _peek_next(self) -> str:
        if self._current + 1 >= len(self.source):
            return ""
        return self.source[self._current + 1]

    def _add(self, type_: TokenType, literal: object = None) -> None:
        text = self.source[self._start:self._current]
        self.tokens.append(Token(type_, text, literal, self._line))

    def _error(self, message: str) -> None:
        token = Token(TokenType.IDENTIFIER, "", None, self._line)
        self.diagnostics.append(Diagnostic(token, message, runtime=False))


def _is_alpha(c: str) -> bool:
    return c == "_" or ("a" <= c <= "z") or ("A" <= c <= "Z")


def _is_digit(c: str) -> bool:
    return c != "" and "0" <= c <= "9"


def scan(source: str) -> tuple[list[Token], list[Diagnostic]]:
    scanner = Scanner(source)
    tokens = scanner.scan_tokens()
    return tokens, scanner.diagnostics
