from __future__ import annotations

from typing import Any

from lark import Token

from ..runtime import LoamNumber, LoamString, LoamRuntimeError, LoamTypeError, type_name
from ..tree import is_token, token_kind

def expect_ident_token(node: Any, context: str) -> str:
    if is_token(node) and token_kind(node) == 'IDENT':
        return str(node.value)

    raise LoamRuntimeError(f"{context} must be an identifier")

def require_number(value: Any, op: str) -> int:
    if not isinstance(value, LoamNumber):
        raise LoamTypeError(f"Operator '{op}' expects numbers; got {type_name(value)}")

    return value.value

def token_number(token: Token, _: Any) -> LoamNumber:
    return LoamNumber(int(token.value))

def token_string(token: Token, _: Any) -> LoamString:
    return LoamString(str(token.value))
