from __future__ import annotations

import logging
import sys
import traceback
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, TextIO, Tuple

from lark import Tree

from .config import LoamConfig
from .evaluator import Interpreter, run
from .lexer import LexError, tokenize
from .parser import ParseError, parse
from .token_types import Tok
from .types import LoamError, LoamValue

log = logging.getLogger(__name__)

# sysexits-style status codes
EXIT_DATAERR = 65    # lexical or syntax error
EXIT_SOFTWARE = 70   # runtime error

USAGE = "usage: loam [--tokens | --ast] [--max-depth N] [--repl] [FILE | - | SOURCE]"

def scan(source: str) -> List[Tok]:
    return tokenize(source)

def run_source(source: str, out: Optional[TextIO] = None, config: Optional[LoamConfig] = None) -> None:
    """Scan, parse and run ``source`` in one go."""
    program = parse(scan(source))
    run(program, out=out, config=config)

def repl_eval(source: str, interp: Interpreter) -> Tuple[Optional[LoamValue], bool]:
    """
    Evaluate one REPL entry against a persistent interpreter.

    A lone expression without its trailing ';' is accepted; its value is
    returned with ``echo=True`` so the REPL can show it.
    """
    tokens = scan(source)
    echo = False

    try:
        program = parse(tokens)
    except ParseError:
        if source.rstrip().endswith((";", "}")):
            raise
        program = parse(scan(source + ";"))
        echo = _is_lone_expression(program)

    return interp.execute(program), echo

def _is_lone_expression(program: Tree) -> bool:
    return len(program.children) == 1 and program.children[0].data == 'exprstmt'

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    try:
        is_file = candidate.is_file()
    except OSError:
        # long one-line programs exceed the filename limit
        is_file = False

    if is_file:
        return candidate.read_text(encoding="utf-8")

    return arg

def report_error(exc: LoamError, config: LoamConfig, stream: Optional[TextIO] = None) -> None:
    stream = stream if stream is not None else sys.stderr

    for err in getattr(exc, "errors", [exc]):
        print(f"Error: {err}", file=stream)

    if config.debug_py_trace:
        print("\nPython traceback:", file=stream)
        print("".join(traceback.format_exception(exc)), file=stream, end="")

def configure_logging(config: LoamConfig) -> None:
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")

def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = LoamConfig.from_env()
    except ValueError as exc:
        raise SystemExit(str(exc)) from None

    mode = "run"
    arg = None
    it = iter(sys.argv[1:] if argv is None else argv)

    for token in it:
        if token in ("-h", "--help"):
            print(USAGE)
            return 0

        if token in ("--tokens", "--ast"):
            mode = token[2:]
            continue

        if token == "--repl":
            mode = "repl"
            continue

        if token.startswith("--max-depth"):
            if "=" in token:
                raw = token.split("=", 1)[1]
            else:
                try:
                    raw = next(it)
                except StopIteration:
                    raise SystemExit("--max-depth flag requires a number") from None
            try:
                depth = int(raw)
            except ValueError:
                raise SystemExit(f"--max-depth expects an integer, got {raw!r}") from None
            if depth < 1:
                raise SystemExit(f"--max-depth must be at least 1, got {depth}")
            config = replace(config, max_call_depth=depth)
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}\n{USAGE}")

    configure_logging(config)
    log.debug("runner mode %s, max call depth %d", mode, config.max_call_depth)

    if mode == "repl":
        from .repl import repl
        repl(config)
        return 0

    source = _load_source(arg)

    try:
        tokens = scan(source)
        if mode == "tokens":
            for tok in tokens:
                print(tok)
            return 0

        program = parse(tokens)
        if mode == "ast":
            print(program.pretty())
            return 0

        run(program, config=config)
    except (LexError, ParseError) as exc:
        report_error(exc, config)
        return EXIT_DATAERR
    except LoamError as exc:
        report_error(exc, config)
        return EXIT_SOFTWARE

    return 0

if __name__ == "__main__":
    sys.exit(main())
