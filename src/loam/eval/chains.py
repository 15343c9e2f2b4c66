from __future__ import annotations

from typing import Callable, List

from ..environment import Environment
from ..runtime import (
    LoamFn,
    LoamValue,
    LoamTypeError,
    call_function,
    call_intrinsic,
    lookup_intrinsic,
    type_name,
)
from ..tree import Node, is_ident, tree_children

EvalFunc = Callable[[Node, Environment], LoamValue]

def eval_args_node(args_node: Node, env: Environment, eval_func: EvalFunc) -> List[LoamValue]:
    """Evaluate call arguments left to right in the caller's environment."""
    return [eval_func(arg, env) for arg in tree_children(args_node)]

def eval_call(children: List[Node], env: Environment, eval_func: EvalFunc) -> LoamValue:
    callee_node, args_node = children

    # intrinsics are picked by the callee's spelling, ahead of any binding
    if is_ident(callee_node):
        intrinsic = lookup_intrinsic(str(callee_node.value))
        if intrinsic is not None:
            args = eval_args_node(args_node, env, eval_func)
            return call_intrinsic(intrinsic, args, env.ctx)

    callee = eval_func(callee_node, env)
    args = eval_args_node(args_node, env, eval_func)
    return call_value(callee, args, env)

def call_value(callee: LoamValue, args: List[LoamValue], env: Environment) -> LoamValue:
    if isinstance(callee, LoamFn):
        return call_function(callee, args, env)

    raise LoamTypeError(f"Can only call functions; got {type_name(callee)}")
