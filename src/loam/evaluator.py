from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, TextIO

from lark import Token, Tree

from .config import LoamConfig
from .environment import Environment
from .runtime import (
    LoamBool,
    LoamValue,
    LoamReturnSignal,
    LoamRecursionError,
    LoamRuntimeError,
    init_stdlib,
    new_context,
)
from .tree import Node, is_token, node_meta, tree_label
from .utils import render

from .eval.blocks import eval_block, eval_program
from .eval.chains import eval_call
from .eval.common import token_number, token_string
from .eval.control import eval_let_stmt, eval_print_stmt, eval_return_stmt
from .eval.expr import eval_binary, eval_logical, eval_unary
from .eval.fn import eval_fn_def
from .eval.loops import eval_for_in, eval_if_stmt, eval_while_stmt
from .eval.mutation import eval_field, eval_field_assign, eval_index, eval_index_assign
from .eval.objects import eval_array, eval_map

log = logging.getLogger(__name__)

# Python frames used per script-level call, with room to spare; the host
# recursion limit is raised to fit the configured call depth.
_PY_FRAMES_PER_CALL = 60


def _maybe_attach_location(exc: LoamRuntimeError, node: Node) -> None:
    if exc.line is not None:
        return

    meta = node_meta(node)
    line = getattr(meta, "line", None)

    if not line:
        return

    exc.line = line
    exc.column = getattr(meta, "column", None)
    exc.loam_meta = meta

# ---------------- Public API ----------------

class Interpreter:
    """Runs programs against one global environment.

    Separate ``execute`` calls share globals, which is what the REPL needs;
    ``run`` below uses a fresh interpreter per program.
    """

    def __init__(self, out: Optional[TextIO] = None, config: Optional[LoamConfig] = None):
        self.config = config if config is not None else LoamConfig()
        self.ctx = new_context(out, max_call_depth=self.config.max_call_depth)
        self.globals = Environment(ctx=self.ctx)

    def reset(self) -> None:
        self.globals = Environment(ctx=self.ctx)

    def execute(self, program: Tree) -> Optional[LoamValue]:
        """Run a `program` tree; returns the value of a trailing expression statement."""
        init_stdlib()

        if tree_label(program) != 'program':
            raise TypeError(f"expected a program tree, got {program!r}")

        self.ctx.call_depth = 0

        with _recursion_headroom(self.ctx.max_call_depth):
            try:
                return eval_program(program.children, self.globals, eval_node)
            except LoamReturnSignal as signal:
                log.warning("return outside of a function stopped the program (value %s)", render(signal.value))
                return None
            except RecursionError:
                raise LoamRecursionError(self.ctx.max_call_depth) from None


def run(program: Tree, out: Optional[TextIO] = None, config: Optional[LoamConfig] = None) -> None:
    """Execute ``program`` in a fresh global environment, printing to ``out`` (stdout by default)."""
    Interpreter(out=out, config=config).execute(program)


def exec_statements(stmts: List[Node], env: Environment) -> Optional[LoamValue]:
    return eval_program(stmts, env, eval_node)


@contextmanager
def _recursion_headroom(max_call_depth: int) -> Iterator[None]:
    previous = sys.getrecursionlimit()
    wanted = max_call_depth * _PY_FRAMES_PER_CALL + 1000

    if wanted > previous:
        sys.setrecursionlimit(wanted)

    try:
        yield
    finally:
        sys.setrecursionlimit(previous)

# ---------------- Core evaluator ----------------

def eval_node(n: Node, env: Environment) -> Optional[LoamValue]:
    try:
        return _eval_node_inner(n, env)
    except LoamRuntimeError as e:
        _maybe_attach_location(e, n)
        raise


def _eval_node_inner(n: Node, env: Environment) -> Optional[LoamValue]:
    if is_token(n):
        return _eval_token(n, env)

    d = n.data
    handler = _NODE_DISPATCH.get(d)
    if handler is not None:
        return handler(n, env)

    raise LoamRuntimeError(f"Unknown node: {d}")

# ---------------- Tokens ----------------

def _eval_token(t: Token, env: Environment) -> LoamValue:
    handler = _TOKEN_DISPATCH.get(t.type)
    if handler:
        return handler(t, env)

    if t.type == 'IDENT':
        return env.get(str(t.value))

    raise LoamRuntimeError(f"Unhandled token {t.type}:{t.value}")

# ---------------- Dispatch ----------------

def _eval_assign(n: Tree, env: Environment) -> LoamValue:
    name_tok, value_node = n.children
    value = eval_node(value_node, env)
    env.assign(str(name_tok.value), value)
    return value

_NODE_DISPATCH: dict[str, Callable[[Tree, Environment], Optional[LoamValue]]] = {
    # statements
    'exprstmt': lambda n, env: eval_node(n.children[0], env),
    'letstmt': lambda n, env: eval_let_stmt(n.children, env, eval_node),
    'printstmt': lambda n, env: eval_print_stmt(n.children, env, eval_node),
    'block': lambda n, env: eval_block(n, env, eval_node),
    'ifstmt': lambda n, env: eval_if_stmt(n, env, eval_node),
    'whilestmt': lambda n, env: eval_while_stmt(n, env, eval_node),
    'forin': lambda n, env: eval_for_in(n, env, eval_node),
    'fndef': eval_fn_def,
    'returnstmt': lambda n, env: eval_return_stmt(n.children, env, eval_node),
    # expressions
    'assign': _eval_assign,
    'binary': lambda n, env: eval_binary(n.children, env, eval_node),
    'logical': lambda n, env: eval_logical(n.children, env, eval_node),
    'unary': lambda n, env: eval_unary(n.children, env, eval_node),
    'call': lambda n, env: eval_call(n.children, env, eval_node),
    'array': lambda n, env: eval_array(n, env, eval_node),
    'map': lambda n, env: eval_map(n, env, eval_node),
    'index': lambda n, env: eval_index(n.children, env, eval_node),
    'index_assign': lambda n, env: eval_index_assign(n.children, env, eval_node),
    'field': lambda n, env: eval_field(n.children, env, eval_node),
    'field_assign': lambda n, env: eval_field_assign(n.children, env, eval_node),
}

_TOKEN_DISPATCH: dict[str, Callable[[Token, Environment], LoamValue]] = {
    'NUMBER': token_number,
    'STRING': token_string,
    'TRUE': lambda _, __: LoamBool(True),
    'FALSE': lambda _, __: LoamBool(False),
}
