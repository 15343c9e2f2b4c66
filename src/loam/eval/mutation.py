"""Index and field reads and writes.

Containers are values: a write never mutates the container it was handed.
It builds an updated copy and, when the written-through expression is a bare
variable, stores the copy back into that variable. Writes through any other
expression (``f()[0] = 1``, ``a[0][1] = 2``) are evaluated and then dropped.
"""
from __future__ import annotations

import logging
from typing import Callable, List

from ..environment import Environment
from ..runtime import (
    LoamArray,
    LoamMap,
    LoamNumber,
    LoamString,
    LoamValue,
    LoamIndexError,
    LoamTypeError,
    type_name,
)
from ..tree import Node, is_ident, node_meta
from .common import expect_ident_token

log = logging.getLogger(__name__)

EvalFunc = Callable[[Node, Environment], LoamValue]

def index_value(recv: LoamValue, index: LoamValue) -> LoamValue:
    """Read `recv[index]`: arrays by in-range number, maps by string (missing -> 0)."""
    match recv:
        case LoamArray(items=items):
            return items[_array_index(index, len(items))]
        case LoamMap(entries=entries):
            return entries.get(_map_key(index), LoamNumber(0))
        case _:
            raise LoamTypeError(f"Cannot index into {type_name(recv)}")

def get_field_value(recv: LoamValue, name: str) -> LoamValue:
    match recv:
        case LoamMap(entries=entries):
            return entries.get(name, LoamNumber(0))
        case _:
            raise LoamTypeError(f"Cannot read field '{name}' on {type_name(recv)}")

def with_index(recv: LoamValue, index: LoamValue, value: LoamValue) -> LoamValue:
    """Copy of ``recv`` with ``recv[index]`` replaced by ``value``."""
    match recv:
        case LoamArray(items=items):
            idx = _array_index(index, len(items))
            updated = list(items)
            updated[idx] = value
            return LoamArray(updated)
        case LoamMap(entries=entries):
            key = _map_key(index)
            return LoamMap({**entries, key: value})
        case _:
            raise LoamTypeError(f"Cannot assign by index into {type_name(recv)}")

def with_field(recv: LoamValue, name: str, value: LoamValue) -> LoamMap:
    match recv:
        case LoamMap(entries=entries):
            return LoamMap({**entries, name: value})
        case _:
            raise LoamTypeError(f"Cannot set field '{name}' on {type_name(recv)}")

def eval_index(children: List[Node], env: Environment, eval_func: EvalFunc) -> LoamValue:
    obj_node, index_node = children
    recv = eval_func(obj_node, env)
    index = eval_func(index_node, env)
    return index_value(recv, index)

def eval_field(children: List[Node], env: Environment, eval_func: EvalFunc) -> LoamValue:
    obj_node, name_node = children
    recv = eval_func(obj_node, env)
    return get_field_value(recv, expect_ident_token(name_node, "Field name"))

def eval_index_assign(children: List[Node], env: Environment, eval_func: EvalFunc) -> LoamValue:
    obj_node, index_node, value_node = children
    recv = eval_func(obj_node, env)
    index = eval_func(index_node, env)
    value = eval_func(value_node, env)

    _store_back(obj_node, with_index(recv, index, value), env)
    return value

def eval_field_assign(children: List[Node], env: Environment, eval_func: EvalFunc) -> LoamValue:
    obj_node, name_node, value_node = children
    recv = eval_func(obj_node, env)
    name = expect_ident_token(name_node, "Field name")
    value = eval_func(value_node, env)

    _store_back(obj_node, with_field(recv, name, value), env)
    return value

def _store_back(target: Node, updated: LoamValue, env: Environment) -> None:
    if is_ident(target):
        env.assign(str(target.value), updated)
        return

    log.debug("write through non-variable target at line %s not persisted", getattr(node_meta(target), "line", None))

def _array_index(index: LoamValue, length: int) -> int:
    if not isinstance(index, LoamNumber):
        raise LoamTypeError(f"Array index must be a number; got {type_name(index)}")

    # negative indices are out of range, never counted from the end
    idx = index.value
    if idx < 0 or idx >= length:
        raise LoamIndexError(idx, length)

    return idx

def _map_key(index: LoamValue) -> str:
    if not isinstance(index, LoamString):
        raise LoamTypeError(f"Map key must be a string; got {type_name(index)}")

    return index.value
