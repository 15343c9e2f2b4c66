from __future__ import annotations

from typing import Any, Callable, List

from lark import Tree

from ..environment import Environment
from ..runtime import LoamArray, LoamString, LoamValue, LoamTypeError, type_name
from ..tree import Node, tree_children
from .common import expect_ident_token
from .helpers import is_truthy

EvalFunc = Callable[[Node, Environment], Any]

def _iterable_values(value: LoamValue) -> List[LoamValue]:
    match value:
        case LoamArray(items=items):
            return list(items)
        case LoamString(value=s):
            return [LoamString(ch) for ch in s]
        case _:
            raise LoamTypeError(f"Cannot iterate over {type_name(value)}")

def eval_if_stmt(n: Tree, env: Environment, eval_func: EvalFunc) -> None:
    cond_node, then_node, *rest = tree_children(n)

    if is_truthy(eval_func(cond_node, env)):
        eval_func(then_node, env)
    elif rest:
        eval_func(rest[0], env)

def eval_while_stmt(n: Tree, env: Environment, eval_func: EvalFunc) -> None:
    cond_node, body_node = tree_children(n)

    while is_truthy(eval_func(cond_node, env)):
        eval_func(body_node, env.child())

def eval_for_in(n: Tree, env: Environment, eval_func: EvalFunc) -> None:
    var_node, iter_node, body_node = tree_children(n)
    name = expect_ident_token(var_node, "Loop variable")

    # the iterable is evaluated once; reassigning it inside the body does not
    # change the sequence being walked
    for element in _iterable_values(eval_func(iter_node, env)):
        loop_env = env.child()
        loop_env.define(name, element)
        eval_func(body_node, loop_env)
