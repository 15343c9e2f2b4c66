from __future__ import annotations

from typing import Callable, List

from lark import Token

from ..environment import Environment
from ..runtime import (
    LoamArray,
    LoamBool,
    LoamNumber,
    LoamString,
    LoamValue,
    LoamRuntimeError,
    LoamTypeError,
    LoamZeroDivisionError,
    type_name,
)
from ..tree import Node
from ..utils import loam_equals, render, wrap_i64
from .common import require_number
from .helpers import is_truthy

EvalFunc = Callable[[Node, Environment], LoamValue]

def eval_unary(children: List[Node], env: Environment, eval_func: EvalFunc) -> LoamValue:
    op, rhs_node = children
    rhs = eval_func(rhs_node, env)

    match op:
        case Token(type='MINUS'):
            return LoamNumber(wrap_i64(-require_number(rhs, '-')))
        case Token(type='NEG'):
            return LoamBool(not is_truthy(rhs))
        case _:
            raise LoamRuntimeError(f"Unsupported unary op {op}")

def eval_binary(children: List[Node], env: Environment, eval_func: EvalFunc) -> LoamValue:
    lhs_node, op, rhs_node = children
    lhs = eval_func(lhs_node, env)
    rhs = eval_func(rhs_node, env)
    return apply_binary_operator(str(op.value), lhs, rhs)

def eval_logical(children: List[Node], env: Environment, eval_func: EvalFunc) -> LoamBool:
    lhs_node, op, rhs_node = children
    lhs = is_truthy(eval_func(lhs_node, env))

    # right operand only runs when the left one does not decide the result
    if op.type == 'OR':
        if lhs:
            return LoamBool(True)
    elif not lhs:
        return LoamBool(False)

    return LoamBool(is_truthy(eval_func(rhs_node, env)))

def apply_binary_operator(op: str, lhs: LoamValue, rhs: LoamValue) -> LoamValue:
    match op:
        case '+':
            return _add(lhs, rhs)
        case '-':
            return LoamNumber(wrap_i64(require_number(lhs, op) - require_number(rhs, op)))
        case '*':
            return LoamNumber(wrap_i64(require_number(lhs, op) * require_number(rhs, op)))
        case '/':
            return LoamNumber(_divide(require_number(lhs, op), require_number(rhs, op)))
        case '==':
            return LoamBool(loam_equals(lhs, rhs))
        case '!=':
            return LoamBool(not loam_equals(lhs, rhs))
        case '<':
            return LoamBool(require_number(lhs, op) < require_number(rhs, op))
        case '<=':
            return LoamBool(require_number(lhs, op) <= require_number(rhs, op))
        case '>':
            return LoamBool(require_number(lhs, op) > require_number(rhs, op))
        case '>=':
            return LoamBool(require_number(lhs, op) >= require_number(rhs, op))
    raise LoamRuntimeError(f"Unknown operator {op}")

def _add(lhs: LoamValue, rhs: LoamValue) -> LoamValue:
    match (lhs, rhs):
        case (LoamNumber(value=a), LoamNumber(value=b)):
            return LoamNumber(wrap_i64(a + b))
        case (LoamString(value=s), _):
            return LoamString(s + render(rhs))
        case (LoamArray(items=a), LoamArray(items=b)):
            return LoamArray(a + b)
        case _:
            raise LoamTypeError(f"Operator '+' cannot combine {type_name(lhs)} and {type_name(rhs)}")

def _divide(a: int, b: int) -> int:
    if b == 0:
        raise LoamZeroDivisionError()

    # truncate toward zero
    quotient = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        quotient = -quotient

    return wrap_i64(quotient)
