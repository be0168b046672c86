"""LoxRepl — incremental REPL for interactive use.

Also provides the ``lox`` CLI entry point via ``main()``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import IO

from .callables import VBuiltin, VFunction
from .config import ErrorPolicy, InterpreterConfig
from .document import Document
from .errors import LoxSyntaxError
from .evaluator import Interpreter
from .reader import parse
from .reporter import StreamReporter
from .values import Nil, Value, VText

logger = logging.getLogger(__name__)

EXIT_SYNTAX_ERROR = 65
EXIT_RUNTIME_ERROR = 70


# ---------------------------------------------------------------------------
# LoxRepl class (programmatic use)
# ---------------------------------------------------------------------------

class LoxRepl:
    """Stateful REPL that keeps global bindings across calls.

    Usage::

        repl = LoxRepl()
        repl.eval("fun add(a, b) { return a + b; }")
        repl.eval("add(1, 2);")    # → VNumber(3.0)

        repl.doc.globals_   # all global bindings
        repl.doc.output     # every printed line so far
        repl.reset()        # clear state
    """

    def __init__(
        self,
        config: InterpreterConfig | None = None,
        echo: IO[str] | None = None,
        err: IO[str] | None = None,
    ) -> None:
        self.config = config or InterpreterConfig()
        self.echo = echo
        self.err = err
        self.doc = Document(config=self.config, echo=echo)

    def eval(self, text: str) -> Value | None:
        """Parse and run *text* against the accumulated globals.

        Returns the value of the last expression statement, or ``None`` if
        the input had none or failed to parse. Diagnostics are appended to
        ``doc.errors`` and, when *err* is set, printed there.
        """
        seen = len(self.doc.errors)
        try:
            statements = parse(text)
        except LoxSyntaxError as exc:
            self.doc.errors.extend(exc.diagnostics)
            result = None
        else:
            self.doc.merge(statements)
            result = self.doc.last_result

        if self.err is not None:
            for diagnostic in self.doc.errors[seen:]:
                print(diagnostic.format(), file=self.err)
        return result

    def reset(self) -> None:
        """Clear all accumulated state (bindings, output, diagnostics)."""
        self.doc = Document(config=self.config, echo=self.echo)


# ---------------------------------------------------------------------------
# CLI helpers
# ---------------------------------------------------------------------------

def _fmt_inline(value: Value) -> str:
    """Format a single value for compact one-line display."""
    if isinstance(value, VText):
        return f'"{value.value}"'
    return str(value)


def _fmt_inspect(value: Value) -> str:
    """Describe a value in more detail than its printed form."""
    if isinstance(value, VFunction):
        lines = [f"fn {value.name}({', '.join(value.params)})"]
        lines.append(f"  arity  : {value.arity()}")
        lines.append(f"  closure: {value.closure!r}")
        return "\n".join(lines)

    if isinstance(value, VBuiltin):
        arity = "variadic" if value.arity() is None else str(value.arity())
        return f"native fn {value.name} (arity {arity})"

    return _fmt_inline(value)


def _show_vars(repl: LoxRepl, dest: IO[str]) -> None:
    """Print all global bindings except builtins."""
    entries = {k: v for k, v in repl.doc.globals_.items() if not isinstance(v, VBuiltin)}
    if not entries:
        print("  (no variables defined)", file=dest)
        return
    width = max(len(k) for k in entries)
    for name, value in entries.items():
        print(f"  {name:<{width}} : {_fmt_inline(value)}", file=dest)


def _as_statement(text: str) -> str:
    return text if text.rstrip().endswith(";") else text + ";"


def _process_line(repl: LoxRepl, line: str, dest: IO[str]) -> bool:
    """Process one input line.  Returns False when the session should end."""
    line = line.strip()
    if not line:
        return True

    # ── Exit ──────────────────────────────────────────────────────────────
    if line in (":q", ":quit"):
        return False

    # ── Control commands ──────────────────────────────────────────────────
    if line == ":vars":
        _show_vars(repl, dest)
        return True

    if line == ":reset":
        repl.reset()
        return True

    if line.startswith(":inspect "):
        result = repl.eval(_as_statement(line[len(":inspect "):]))
        if result is not None:
            print(_fmt_inspect(result), file=dest)
        return True

    # ── Batch file ────────────────────────────────────────────────────────
    if line.startswith(":load "):
        filepath = line[len(":load "):].strip()
        try:
            source = Path(filepath).read_text(encoding="utf-8")
        except OSError as exc:
            print(f"Error reading '{filepath}': {exc}", file=sys.stderr)
            return True
        repl.eval(source)
        return True

    # ── Regular Lox input ─────────────────────────────────────────────────
    result = repl.eval(line)
    if result is not None and result is not Nil:
        print(_fmt_inline(result), file=dest)
    return True


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def run_file(path: str, config: InterpreterConfig) -> int:
    """Run a whole script; returns the process exit status."""
    try:
        source = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        print(f"Error reading '{path}': {exc}", file=sys.stderr)
        return 1

    try:
        statements = parse(source)
    except LoxSyntaxError as exc:
        for diagnostic in exc.diagnostics:
            print(diagnostic.format(), file=sys.stderr)
        return EXIT_SYNTAX_ERROR

    reporter = StreamReporter()
    Interpreter(config, reporter).interpret(statements)
    return EXIT_RUNTIME_ERROR if reporter.had_runtime_error else 0


def _interactive(config: InterpreterConfig) -> None:
    repl = LoxRepl(config, echo=sys.stdout, err=sys.stderr)
    dest: IO[str] = sys.stdout

    print("Lox REPL  (:q to quit  |  :vars  :reset  :load <file>  :inspect <expr>)")

    while True:
        try:
            line = input("> ").strip()
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print()
            continue

        if not _process_line(repl, line, dest):
            break


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lox", description="Run a Lox script or start a REPL.")
    parser.add_argument("script", nargs="?", help="script to run; omit for an interactive session")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument(
        "--abort-on-error",
        action="store_true",
        help="stop at the first runtime error instead of continuing with nil",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Lox shell (``lox`` / ``python -m lox_core``)."""
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = InterpreterConfig.from_env()
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    if args.abort_on_error:
        config.error_policy = ErrorPolicy.ABORT
    logger.debug("error policy: %s", config.error_policy.value)

    if args.script:
        return run_file(args.script, config)

    _interactive(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
