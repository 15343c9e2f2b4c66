from __future__ import annotations

from ..runtime import LoamArray, LoamBool, LoamMap, LoamNumber, LoamString, LoamValue

def is_truthy(val: LoamValue) -> bool:
    match val:
        case LoamBool(value=b):
            return b
        case LoamNumber(value=num):
            return num != 0
        case LoamString(value=s):
            return bool(s)
        case LoamArray(items=items):
            return bool(items)
        case LoamMap(entries=entries):
            return bool(entries)
        case _:
            return True
