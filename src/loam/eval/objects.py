from __future__ import annotations

from typing import Callable, Dict

from lark import Tree

from ..environment import Environment
from ..runtime import LoamArray, LoamMap, LoamRuntimeError, LoamValue
from ..tree import Node, token_kind, tree_children, tree_label

EvalFunc = Callable[[Node, Environment], LoamValue]

def eval_array(n: Tree, env: Environment, eval_func: EvalFunc) -> LoamArray:
    return LoamArray([eval_func(child, env) for child in tree_children(n)])

def eval_map(n: Tree, env: Environment, eval_func: EvalFunc) -> LoamMap:
    """Build a map literal; entries keep source order and a repeated key keeps the last value."""
    entries: Dict[str, LoamValue] = {}

    for entry in tree_children(n):
        if tree_label(entry) != 'map_entry':
            raise LoamRuntimeError("Malformed map literal")

        key_node, value_node = entry.children
        if token_kind(key_node) != 'KEY':
            raise LoamRuntimeError("Malformed map key")

        entries[str(key_node.value)] = eval_func(value_node, env)

    return LoamMap(entries)
