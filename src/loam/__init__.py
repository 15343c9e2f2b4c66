"""Loam: a small dynamically typed scripting language with a tree-walking interpreter."""

import logging

from .config import LoamConfig
from .evaluator import Interpreter, run
from .lexer import LexError
from .parser import ParseError, parse
from .runner import run_source, scan
from .types import (
    LoamArityError,
    LoamError,
    LoamIndexError,
    LoamNameError,
    LoamRecursionError,
    LoamRuntimeError,
    LoamTypeError,
    LoamZeroDivisionError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Interpreter",
    "LexError",
    "LoamArityError",
    "LoamConfig",
    "LoamError",
    "LoamIndexError",
    "LoamNameError",
    "LoamRecursionError",
    "LoamRuntimeError",
    "LoamTypeError",
    "LoamZeroDivisionError",
    "ParseError",
    "parse",
    "run",
    "run_source",
    "scan",
]
