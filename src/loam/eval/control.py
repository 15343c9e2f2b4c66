from __future__ import annotations

from typing import Any, Callable, List

from ..environment import Environment
from ..runtime import LoamNumber, LoamReturnSignal, LoamValue
from ..tree import Node
from ..utils import render
from .common import expect_ident_token

EvalFunc = Callable[[Node, Environment], Any]

def eval_let_stmt(children: List[Node], env: Environment, eval_func: EvalFunc) -> None:
    name = expect_ident_token(children[0], "Variable name")
    value: LoamValue = eval_func(children[1], env) if len(children) > 1 else LoamNumber(0)
    env.define(name, value)

def eval_print_stmt(children: List[Node], env: Environment, eval_func: EvalFunc) -> None:
    value = eval_func(children[0], env)
    env.ctx.write(render(value) + "\n")

def eval_return_stmt(children: List[Node], env: Environment, eval_func: EvalFunc) -> None:
    value = eval_func(children[0], env) if children else LoamNumber(0)

    raise LoamReturnSignal(value)
