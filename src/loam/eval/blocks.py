from __future__ import annotations

from typing import Any, Callable, List, Optional

from ..environment import Environment
from ..runtime import LoamValue
from ..tree import Node, tree_children

EvalFunc = Callable[[Node, Environment], Any]

def eval_program(children: List[Node], env: Environment, eval_func: EvalFunc) -> Optional[LoamValue]:
    """Run statements in order, returning the value of the last one (None for non-expressions)."""
    result: Optional[LoamValue] = None

    for child in children:
        result = eval_func(child, env)

    return result

def eval_block(n: Node, env: Environment, eval_func: EvalFunc) -> None:
    # the child frame is simply dropped afterwards; ``env`` is untouched
    eval_program(tree_children(n), env.child(), eval_func)
