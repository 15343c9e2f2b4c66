"""Intrinsic functions (print, len) registered via loam.runtime.

Intrinsics are resolved by the callee's name at the call site, so a script
variable named `print` or `len` never shadows them.
"""

from __future__ import annotations

from typing import List

from .runtime import register_intrinsic, RunContext, LoamArray, LoamMap, LoamNumber, LoamString, LoamValue, LoamTypeError
from .runtime import type_name
from .utils import render

@register_intrinsic("print")
def std_print(ctx: RunContext, args: List[LoamValue]) -> LoamNumber:
    rendered = [render(arg) for arg in args]
    ctx.write(" ".join(rendered) + "\n")
    return LoamNumber(0)

@register_intrinsic("len", arity=1)
def std_len(_ctx: RunContext, args: List[LoamValue]) -> LoamNumber:
    value = args[0]

    match value:
        case LoamString(value=s):
            return LoamNumber(len(s))
        case LoamArray(items=items):
            return LoamNumber(len(items))
        case LoamMap(entries=entries):
            return LoamNumber(len(entries))
        case _:
            raise LoamTypeError(f"len() expects a string, array or map; got {type_name(value)}")
