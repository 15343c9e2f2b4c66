from __future__ import annotations

from typing import Any, List

from ..environment import Environment
from ..runtime import LoamFn, LoamRuntimeError
from ..tree import child_by_label, tree_children
from .common import expect_ident_token as _expect_ident_token

def extract_param_names(params_node: Any) -> List[str]:
    if params_node is None:
        return []

    return [_expect_ident_token(p, "Parameter") for p in tree_children(params_node)]

def eval_fn_def(n: Any, env: Environment) -> None:
    """Bind a function closing over ``env`` under its own name in ``env``.

    The name is defined in the same frame the closure captures, so the body
    can call itself recursively.
    """
    children = tree_children(n)
    if not children:
        raise LoamRuntimeError("Malformed function definition")

    name = _expect_ident_token(children[0], "Function name")
    params_node = child_by_label(n, 'paramlist')
    body_node = child_by_label(n, 'fnbody')

    if body_node is None:
        raise LoamRuntimeError(f"Function '{name}' has no body")

    params = extract_param_names(params_node)
    fn_value = LoamFn(name=name, params=params, body=tree_children(body_node), closure=env)
    env.define(name, fn_value)
