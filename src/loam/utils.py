from __future__ import annotations

from .types import (
    LoamValue,
    LoamNumber,
    LoamString,
    LoamBool,
    LoamArray,
    LoamMap,
    LoamFn,
)

_I64_SPAN = 2**64
_I64_MIN = -(2**63)


def wrap_i64(value: int) -> int:
    """Reduce an integer to signed 64-bit two's complement."""
    return (value - _I64_MIN) % _I64_SPAN + _I64_MIN


def loam_equals(lhs: LoamValue, rhs: LoamValue) -> bool:
    match (lhs, rhs):
        case (LoamNumber(value=a), LoamNumber(value=b)):
            return a == b
        case (LoamString(value=a), LoamString(value=b)):
            return a == b
        case (LoamBool(value=a), LoamBool(value=b)):
            return a == b
        case (LoamArray(items=items_a), LoamArray(items=items_b)):
            return len(items_a) == len(items_b) and all(
                loam_equals(a, b) for a, b in zip(items_a, items_b)
            )
        case (LoamMap(entries=entries_a), LoamMap(entries=entries_b)):
            return entries_a.keys() == entries_b.keys() and all(
                loam_equals(entries_a[k], entries_b[k]) for k in entries_a
            )
        case _:
            # functions never compare equal, not even to themselves
            return False


def render(value: LoamValue) -> str:
    """Human-readable form used by `print` and string concatenation."""
    match value:
        case LoamString(value=s):
            return s
        case LoamNumber(value=n):
            return str(n)
        case LoamBool(value=b):
            return "true" if b else "false"
        case LoamArray(items=items):
            return "[" + ", ".join(render(item) for item in items) + "]"
        case LoamMap(entries=entries):
            return "{" + ", ".join(f"{k}: {render(v)}" for k, v in entries.items()) + "}"
        case LoamFn(name=name):
            return f"<function {name}>"
        case _:
            return str(value)
