from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, List, Optional
from typing_extensions import TypeAlias

from .tree import Node

if TYPE_CHECKING:
    from .environment import Environment
    from .runtime import RunContext

# ---------- Value Model ----------
#
# Arrays and maps are never mutated after construction: writes through
# index/field targets build an updated copy (see eval/mutation.py), so a
# value bound to two names can never be observed changing through one of them.

@dataclass
class LoamNumber:
    value: int
    def __repr__(self) -> str:
        return str(self.value)

@dataclass
class LoamString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class LoamBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass
class LoamArray:
    items: List['LoamValue']
    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.items) + "]"

@dataclass
class LoamMap:
    entries: Dict[str, 'LoamValue']
    def __repr__(self) -> str:
        pairs = []

        for k, v in self.entries.items():
            pairs.append(f"{k}: {repr(v)}")

        return "{" + ", ".join(pairs) + "}"

@dataclass(eq=False)
class LoamFn:
    name: str
    params: List[str]
    body: List[Node]                 # statements of the fn body
    closure: 'Environment'           # scope active at the declaration
    def __repr__(self) -> str:
        return f"<function {self.name}>"

IntrinsicFn = Callable[['RunContext', List['LoamValue']], 'LoamValue']

@dataclass(frozen=True)
class Intrinsic:
    name: str
    fn: IntrinsicFn
    arity: Optional[int] = None

LoamValue: TypeAlias = (
    LoamNumber
    | LoamString
    | LoamBool
    | LoamArray
    | LoamMap
    | LoamFn
)

def type_name(value: object) -> str:
    """Script-facing name of a value's type, used in error messages."""
    match value:
        case LoamNumber():
            return "number"
        case LoamString():
            return "string"
        case LoamBool():
            return "boolean"
        case LoamArray():
            return "array"
        case LoamMap():
            return "map"
        case LoamFn():
            return "function"
        case _:
            return type(value).__name__

# ---------- Exceptions ----------

class LoamError(Exception):
    """Base of every error the front end or evaluator reports.

    ``kind`` is one of ``"lexical"``, ``"syntax"`` or ``"runtime"``; ``line``
    and ``column`` are filled in once a position is known.
    """

    kind = "error"

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        msg = self.message

        if self.line is None:
            return msg

        if self.column is None:
            return f"{msg} (line {self.line})"

        return f"{msg} (line {self.line}, col {self.column})"

class LoamRuntimeError(LoamError):
    kind = "runtime"

    def __init__(self, message: str):
        super().__init__(message)
        self.loam_meta: Optional[object] = None

class LoamNameError(LoamRuntimeError):
    def __init__(self, name: str, action: str = "read"):
        verb = "assign to" if action == "assign" else "read"
        super().__init__(f"Cannot {verb} undefined variable '{name}'")
        self.name = name

class LoamTypeError(LoamRuntimeError):
    pass

class LoamArityError(LoamRuntimeError):
    pass

class LoamIndexError(LoamRuntimeError):
    def __init__(self, index: int, length: int):
        super().__init__(f"Index {index} out of bounds for array of length {length}")
        self.index = index
        self.length = length

class LoamZeroDivisionError(LoamRuntimeError):
    def __init__(self) -> None:
        super().__init__("Division by zero")

class LoamRecursionError(LoamRuntimeError):
    def __init__(self, limit: int):
        super().__init__(f"Maximum call depth of {limit} exceeded")
        self.limit = limit

class LoamReturnSignal(Exception):
    """Internal control-flow exception used to implement `return`."""
    def __init__(self, value: LoamValue):
        self.value = value
