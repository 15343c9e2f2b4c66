"""Shared helpers for building and inspecting the lark Tree/Token AST.

Interior nodes are ``lark.Tree`` instances labelled with one of the names
below; leaves (literals, identifiers, operators) are ``lark.Token``. Every
node carries a ``meta`` with line/column and source offsets so runtime errors
can point back at the script.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Union

from lark import Token, Tree
from lark.tree import Meta
from typing_extensions import TypeAlias, TypeGuard

Node: TypeAlias = Union[Tree, Token]

# Expression labels
ASSIGN = 'assign'
BINARY = 'binary'
LOGICAL = 'logical'
UNARY = 'unary'
CALL = 'call'
ARGS = 'args'
ARRAY = 'array'
MAP = 'map'
MAP_ENTRY = 'map_entry'
INDEX = 'index'
INDEX_ASSIGN = 'index_assign'
FIELD = 'field'
FIELD_ASSIGN = 'field_assign'

# Statement labels
PROGRAM = 'program'
EXPRSTMT = 'exprstmt'
LETSTMT = 'letstmt'
PRINTSTMT = 'printstmt'
BLOCK = 'block'
IFSTMT = 'ifstmt'
WHILESTMT = 'whilestmt'
FORIN = 'forin'
FNDEF = 'fndef'
PARAMLIST = 'paramlist'
FNBODY = 'fnbody'
RETURNSTMT = 'returnstmt'

EXPRESSION_LABELS = frozenset({
    ASSIGN, BINARY, LOGICAL, UNARY, CALL, ARRAY, MAP,
    INDEX, INDEX_ASSIGN, FIELD, FIELD_ASSIGN,
})


def make_meta(line: int, column: int, start_pos: int, end_pos: int) -> Meta:
    meta = Meta()
    meta.line = line
    meta.column = column
    meta.start_pos = start_pos
    meta.end_pos = end_pos
    meta.empty = False
    return meta

def make_token(type_: str, value: str, line: int, column: int, start_pos: int, end_pos: int) -> Token:
    return Token(type_, value, start_pos=start_pos, line=line, column=column, end_pos=end_pos)

def is_tree(node: object) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: object) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: object) -> Optional[str]:
    return node.data if is_tree(node) else None

def token_kind(node: object) -> Optional[str]:
    return str(node.type) if is_token(node) else None

def tree_children(node: object) -> List[Node]:
    if not is_tree(node):
        return []

    return list(node.children)

def node_meta(node: object) -> Optional[object]:
    """Position info for a Tree (its meta) or a Token (the token itself)."""
    if is_token(node):
        return node

    if is_tree(node):
        meta = node.meta
        return None if getattr(meta, 'empty', True) else meta

    return None

def node_span(node: object) -> tuple[Optional[int], Optional[int]]:
    meta = node_meta(node)
    start = getattr(meta, 'start_pos', None)
    end = getattr(meta, 'end_pos', None)
    return start, end

def child_by_label(node: Node, label: str) -> Optional[Tree]:
    for ch in tree_children(node):
        if tree_label(ch) == label:
            return ch

    return None

def is_ident(node: object) -> TypeGuard[Token]:
    return token_kind(node) == 'IDENT'

def is_expression(node: object) -> bool:
    if is_token(node):
        return token_kind(node) in {'NUMBER', 'STRING', 'TRUE', 'FALSE', 'IDENT'}

    return tree_label(node) in EXPRESSION_LABELS

def walk(node: Node) -> Iterable[Node]:
    """Pre-order traversal over every node below (and including) ``node``."""
    yield node

    for child in tree_children(node):
        yield from walk(child)
