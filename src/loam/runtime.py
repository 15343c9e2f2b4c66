from __future__ import annotations

import importlib
import logging
import sys
from dataclasses import dataclass
from typing import Dict, List, Optional, TextIO

from .environment import Environment
from .types import (
    LoamNumber, LoamString, LoamBool, LoamArray, LoamMap, LoamFn,
    Intrinsic, IntrinsicFn, LoamValue,
    LoamError, LoamRuntimeError, LoamNameError, LoamTypeError, LoamArityError,
    LoamIndexError, LoamZeroDivisionError, LoamRecursionError, LoamReturnSignal,
    type_name,
)

log = logging.getLogger(__name__)

DEFAULT_MAX_CALL_DEPTH = 200

@dataclass
class RunContext:
    """Per-run state shared by every environment of one interpreter."""
    out: TextIO
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH
    call_depth: int = 0

    def write(self, text: str) -> None:
        self.out.write(text)

def new_context(out: Optional[TextIO] = None, max_call_depth: int = DEFAULT_MAX_CALL_DEPTH) -> RunContext:
    return RunContext(out=out if out is not None else sys.stdout, max_call_depth=max_call_depth)

class Builtins:
    intrinsics: Dict[str, Intrinsic] = {}

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load the intrinsics module (idempotent) so register_intrinsic hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module(".stdlib", __package__)
    _STDLIB_INITIALIZED = True

def register_intrinsic(name: str, *, arity: Optional[int] = None):
    def dec(fn: IntrinsicFn):
        Builtins.intrinsics[name] = Intrinsic(name=name, fn=fn, arity=arity)
        return fn

    return dec

def lookup_intrinsic(name: str) -> Optional[Intrinsic]:
    init_stdlib()
    return Builtins.intrinsics.get(name)

def call_intrinsic(intrinsic: Intrinsic, args: List[LoamValue], ctx: RunContext) -> LoamValue:
    if intrinsic.arity is not None and len(args) != intrinsic.arity:
        raise LoamArityError(f"{intrinsic.name}() expects {intrinsic.arity} argument(s); got {len(args)}")

    return intrinsic.fn(ctx, args)

def call_function(fn: LoamFn, args: List[LoamValue], caller: Environment) -> LoamValue:
    """
    Call semantics:
    - arity must match len(fn.params) exactly
    - params are bound in a fresh child of the closure environment
    - the result is the returned value, or 0 when the body finishes normally
    """
    from .evaluator import exec_statements  # local import to avoid cycle

    if len(args) != len(fn.params):
        raise LoamArityError(f"Function '{fn.name}' expects {len(fn.params)} argument(s); got {len(args)}")

    ctx = caller.ctx
    if ctx.call_depth >= ctx.max_call_depth:
        raise LoamRecursionError(ctx.max_call_depth)

    callee_env = Environment(parent=fn.closure, ctx=ctx)

    for name, val in zip(fn.params, args):
        callee_env.define(name, val)

    ctx.call_depth += 1
    log.debug("call %s depth=%d", fn.name, ctx.call_depth)

    try:
        exec_statements(fn.body, callee_env)
    except LoamReturnSignal as signal:
        return signal.value
    finally:
        ctx.call_depth -= 1

    return LoamNumber(0)
