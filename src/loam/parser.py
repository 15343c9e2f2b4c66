"""
Recursive Descent Parser for Loam

Structure:
- Lexer: token list from source (see lexer.py)
- Parser: recursive descent, one method per precedence level
- AST: lark Tree/Token nodes labelled as in tree.py, each with position meta

Syntax errors are collected rather than raised immediately: the parser
resynchronizes at the next statement boundary so a single run reports every
error it can find. The first one is raised once the whole input is consumed.
"""

import logging
from typing import List, Optional, Union

from lark import Token, Tree

from .token_types import SYNC_KEYWORDS, TT, Tok
from .tree import Node, is_ident, make_meta, make_token, node_meta
from .types import LoamError

log = logging.getLogger(__name__)

# ============================================================================
# Parser
# ============================================================================

class ParseError(LoamError):
    """Parse error with position info.

    ``errors`` holds every syntax error found in the same parse, this one
    first.
    """

    kind = "syntax"

    def __init__(self, message: str, token: Optional[Tok] = None):
        line = token.line if token is not None else None
        column = token.column if token is not None else None
        super().__init__(message, line, column)
        self.token = token
        self.errors: List['ParseError'] = [self]


class Parser:
    """
    Recursive descent parser for Loam.

    Expression precedence (lowest to highest):
    1. assignment (=, right associative)
    2. or
    3. and
    4. equality (==, !=)
    5. comparison (>, >=, <, <=)
    6. additive (+, -)
    7. multiplicative (*, /)
    8. unary (!, -)
    9. postfix ([index], .field, (call); `[..] =` and `.name =` end the chain)
    10. primary (literals, identifiers, parens, array and map literals)
    """

    def __init__(self, tokens: List[Tok]):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, None, 0, 0)
        self.previous = self.current
        self.errors: List[ParseError] = []
        self.block_depth = 0

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1] if self.tokens else Tok(TT.EOF, None, 0, 0)

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        if prev.type != TT.EOF:
            self.pos += 1
        self.current = self.peek()
        self.previous = prev
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            msg = message or f"Expected {token_type.name}, got {self.current.type.name}"
            raise ParseError(msg, self.current)
        return self.advance()

    # ========================================================================
    # Node construction
    # ========================================================================

    def leaf(self, tok: Tok) -> Token:
        """Convert a scanner token into a lark Token leaf"""
        return make_token(tok.type.name, str(tok.value), tok.line, tok.column, tok.start_pos, tok.end_pos)

    def node(self, data: str, children: List[Node], start: Union[Tok, Node]) -> Tree:
        """Build a tree spanning from ``start`` to the last consumed token"""
        if isinstance(start, Tok):
            line, column, start_pos = start.line, start.column, start.start_pos
        else:
            meta = node_meta(start)
            line = getattr(meta, 'line', 0)
            column = getattr(meta, 'column', 0)
            start_pos = getattr(meta, 'start_pos', 0)

        # an empty list node (`f()`, `fn g()`) starts after the last consumed token
        end_pos = max(self.previous.end_pos, start_pos)
        meta = make_meta(line, column, start_pos, end_pos)
        return Tree(data, children, meta=meta)

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tree:
        """Parse entire program"""
        start = self.current
        stmts = []

        try:
            while not self.check(TT.EOF):
                stmt = self.parse_declaration_or_recover()
                if stmt is not None:
                    stmts.append(stmt)
        except RecursionError:
            # no statement boundary to resync at from this deep
            self.errors.append(ParseError("Expression nested too deeply", self.current))

        if self.errors:
            first = self.errors[0]
            first.errors = list(self.errors)

            for extra in self.errors[1:]:
                log.warning("additional syntax error: %s", extra)
            raise first

        log.debug("parsed %d top-level statements", len(stmts))
        return self.node('program', stmts, start)

    def parse_declaration_or_recover(self) -> Optional[Tree]:
        """Parse one declaration; on error record it and skip to a statement boundary"""
        try:
            return self.parse_declaration()
        except ParseError as err:
            self.errors.append(err)
            self.synchronize()
            return None

    def synchronize(self) -> None:
        """Discard tokens until just past a ';' or before a statement keyword.

        Inside a block a '}' is left in place so the block can still close.
        """
        in_block = self.block_depth > 0
        if in_block and self.check(TT.RBRACE):
            return
        self.advance()

        while not self.check(TT.EOF):
            if self.previous.type == TT.SEMI:
                return
            if self.current.type in SYNC_KEYWORDS:
                return
            if in_block and self.check(TT.RBRACE):
                return
            self.advance()

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_declaration(self) -> Tree:
        """Declarations (let, fn) or any other statement"""
        if self.check(TT.LET):
            return self.parse_let_stmt()
        if self.check(TT.FN):
            return self.parse_fn_stmt()

        return self.parse_statement()

    def parse_statement(self) -> Tree:
        """
        Parse a single statement.

        Statements include:
        - Control flow (if, while, for)
        - print / return
        - Blocks
        - Expression statements
        """
        if self.check(TT.PRINT):
            if self._print_is_call():
                return self.parse_expr_stmt()
            return self.parse_print_stmt()
        if self.check(TT.IF):
            return self.parse_if_stmt()
        if self.check(TT.WHILE):
            return self.parse_while_stmt()
        if self.check(TT.FOR):
            return self.parse_for_stmt()
        if self.check(TT.RETURN):
            return self.parse_return_stmt()
        if self.check(TT.LBRACE):
            return self.parse_block()

        return self.parse_expr_stmt()

    def parse_let_stmt(self) -> Tree:
        """Parse variable declaration: let name [= expr];"""
        let_tok = self.expect(TT.LET)
        name = self.expect(TT.IDENT, "Expected variable name after 'let'")
        children: List[Node] = [self.leaf(name)]

        if self.match(TT.ASSIGN):
            children.append(self.parse_expr())

        self.expect(TT.SEMI, "Expected ';' after variable declaration")
        return self.node('letstmt', children, let_tok)

    def parse_fn_stmt(self) -> Tree:
        """Parse function declaration: fn name(a, b) { body }"""
        fn_tok = self.expect(TT.FN)
        name = self.expect(TT.IDENT, "Expected function name after 'fn'")

        self.expect(TT.LPAR, "Expected '(' after function name")
        params = self.parse_param_list()
        self.expect(TT.RPAR, "Expected ')' after parameters")

        body_start = self.expect(TT.LBRACE, "Expected '{' before function body")
        stmts = self.parse_block_contents()
        body = self.node('fnbody', stmts, body_start)

        return self.node('fndef', [self.leaf(name), params, body], fn_tok)

    def parse_param_list(self) -> Tree:
        """Parse comma-separated parameter names (possibly empty)"""
        start = self.current
        params: List[Node] = []

        if not self.check(TT.RPAR):
            while True:
                name = self.expect(TT.IDENT, "Expected parameter name")
                params.append(self.leaf(name))
                if not self.match(TT.COMMA):
                    break

        return self.node('paramlist', params, start)

    def parse_print_stmt(self) -> Tree:
        """Parse print statement: print expr;"""
        print_tok = self.expect(TT.PRINT)
        value = self.parse_expr()
        self.expect(TT.SEMI, "Expected ';' after value")
        return self.node('printstmt', [value], print_tok)

    def _print_is_call(self) -> bool:
        """`print(...)` whose closing paren is directly followed by ';' calls the intrinsic"""
        if self.peek(1).type != TT.LPAR:
            return False

        depth = 0
        offset = 1

        while True:
            tok = self.peek(offset)
            if tok.type == TT.EOF:
                return False
            if tok.type in (TT.LPAR, TT.LSQB, TT.LBRACE):
                depth += 1
            elif tok.type in (TT.RPAR, TT.RSQB, TT.RBRACE):
                depth -= 1
                if depth == 0:
                    return tok.type == TT.RPAR and self.peek(offset + 1).type == TT.SEMI
            offset += 1

    def parse_if_stmt(self) -> Tree:
        """Parse if statement: if (expr) stmt [else stmt]"""
        if_tok = self.expect(TT.IF)
        self.expect(TT.LPAR, "Expected '(' after 'if'")
        cond = self.parse_expr()
        self.expect(TT.RPAR, "Expected ')' after if condition")

        children: List[Node] = [cond, self.parse_declaration()]

        if self.match(TT.ELSE):
            children.append(self.parse_declaration())

        return self.node('ifstmt', children, if_tok)

    def parse_while_stmt(self) -> Tree:
        """Parse while loop: while (expr) stmt"""
        while_tok = self.expect(TT.WHILE)
        self.expect(TT.LPAR, "Expected '(' after 'while'")
        cond = self.parse_expr()
        self.expect(TT.RPAR, "Expected ')' after while condition")
        body = self.parse_declaration()
        return self.node('whilestmt', [cond, body], while_tok)

    def parse_for_stmt(self) -> Tree:
        """Parse for loop: for (name in expr) stmt"""
        for_tok = self.expect(TT.FOR)
        self.expect(TT.LPAR, "Expected '(' after 'for'")
        var = self.expect(TT.IDENT, "Expected loop variable name in for")
        self.expect(TT.IN, "Expected 'in' after loop variable")
        iterable = self.parse_expr()
        self.expect(TT.RPAR, "Expected ')' after for clause")
        body = self.parse_declaration()
        return self.node('forin', [self.leaf(var), iterable, body], for_tok)

    def parse_return_stmt(self) -> Tree:
        """Parse return statement: return [expr];"""
        ret_tok = self.expect(TT.RETURN)
        children: List[Node] = []

        if not self.check(TT.SEMI):
            children.append(self.parse_expr())

        self.expect(TT.SEMI, "Expected ';' after return value")
        return self.node('returnstmt', children, ret_tok)

    def parse_block(self) -> Tree:
        """Parse block: { declaration* }"""
        lbrace = self.expect(TT.LBRACE)
        stmts = self.parse_block_contents()
        return self.node('block', stmts, lbrace)

    def parse_block_contents(self) -> List[Tree]:
        """Declarations up to and including the closing '}'"""
        stmts = []

        self.block_depth += 1
        try:
            while not self.check(TT.RBRACE, TT.EOF):
                stmt = self.parse_declaration_or_recover()
                if stmt is not None:
                    stmts.append(stmt)
        finally:
            self.block_depth -= 1

        self.expect(TT.RBRACE, "Expected '}' after block")
        return stmts

    def parse_expr_stmt(self) -> Tree:
        """Parse expression statement: expr;"""
        start = self.current
        expr = self.parse_expr()
        self.expect(TT.SEMI, "Expected ';' after expression")
        return self.node('exprstmt', [expr], start)

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self) -> Node:
        return self.parse_assignment()

    def parse_assignment(self) -> Node:
        """Parse assignment: name = expr (right associative)"""
        target = self.parse_or_expr()

        if self.check(TT.ASSIGN):
            eq_tok = self.advance()
            value = self.parse_assignment()

            if is_ident(target):
                return self.node('assign', [target, value], target)

            raise ParseError("Invalid assignment target", eq_tok)

        return target

    def parse_or_expr(self) -> Node:
        """Parse logical OR: expr or expr"""
        left = self.parse_and_expr()

        while self.check(TT.OR):
            op = self.advance()
            right = self.parse_and_expr()
            left = self.node('logical', [left, self.leaf(op), right], left)

        return left

    def parse_and_expr(self) -> Node:
        """Parse logical AND: expr and expr"""
        left = self.parse_equality_expr()

        while self.check(TT.AND):
            op = self.advance()
            right = self.parse_equality_expr()
            left = self.node('logical', [left, self.leaf(op), right], left)

        return left

    def parse_equality_expr(self) -> Node:
        return self._parse_binary_level(self.parse_compare_expr, TT.EQ, TT.NEQ)

    def parse_compare_expr(self) -> Node:
        return self._parse_binary_level(self.parse_add_expr, TT.GT, TT.GTE, TT.LT, TT.LTE)

    def parse_add_expr(self) -> Node:
        return self._parse_binary_level(self.parse_mul_expr, TT.PLUS, TT.MINUS)

    def parse_mul_expr(self) -> Node:
        return self._parse_binary_level(self.parse_unary_expr, TT.STAR, TT.SLASH)

    def _parse_binary_level(self, operand, *ops: TT) -> Node:
        """Left-associative binary level: operand (op operand)*"""
        left = operand()

        while self.check(*ops):
            op = self.advance()
            right = operand()
            left = self.node('binary', [left, self.leaf(op), right], left)

        return left

    def parse_unary_expr(self) -> Node:
        """Parse unary operators: -expr, !expr"""
        if self.check(TT.MINUS, TT.NEG):
            op = self.advance()
            operand = self.parse_unary_expr()
            return self.node('unary', [self.leaf(op), operand], op)

        return self.parse_postfix_expr()

    def parse_postfix_expr(self) -> Node:
        """
        Parse postfix chains:
        - calls: expr(args)
        - indexing: expr[index], expr[index] = value
        - field access: expr.name, expr.name = value
        """
        expr = self.parse_primary_expr()

        while True:
            if self.match(TT.LPAR):
                args = self.parse_arg_list()
                self.expect(TT.RPAR, "Expected ')' after arguments")
                expr = self.node('call', [expr, args], expr)
            elif self.match(TT.LSQB):
                index = self.parse_expr()
                self.expect(TT.RSQB, "Expected ']' after index")

                if self.match(TT.ASSIGN):
                    value = self.parse_assignment()
                    return self.node('index_assign', [expr, index, value], expr)

                expr = self.node('index', [expr, index], expr)
            elif self.match(TT.DOT):
                name = self.expect(TT.IDENT, "Expected field name after '.'")

                if self.match(TT.ASSIGN):
                    value = self.parse_assignment()
                    return self.node('field_assign', [expr, self.leaf(name), value], expr)

                expr = self.node('field', [expr, self.leaf(name)], expr)
            else:
                return expr

    def parse_arg_list(self) -> Tree:
        """Comma-separated call arguments (possibly empty)"""
        start = self.current
        args: List[Node] = []

        if not self.check(TT.RPAR):
            while True:
                args.append(self.parse_expr())
                if not self.match(TT.COMMA):
                    break

        return self.node('args', args, start)

    def parse_primary_expr(self) -> Node:
        """Parse primary expressions: literals, identifiers, groups, arrays, maps"""
        if self.check(TT.NUMBER, TT.STRING, TT.TRUE, TT.FALSE, TT.IDENT):
            return self.leaf(self.advance())

        # `print` in expression position is the callee of an intrinsic call
        if self.check(TT.PRINT):
            print_tok = self.advance()
            if not self.check(TT.LPAR):
                raise ParseError("Expected '(' after 'print' in expression", self.current)
            return make_token('IDENT', 'print', print_tok.line, print_tok.column,
                              print_tok.start_pos, print_tok.end_pos)

        if self.match(TT.LPAR):
            expr = self.parse_expr()
            self.expect(TT.RPAR, "Expected ')' after expression")
            return expr

        if self.check(TT.LSQB):
            return self.parse_array_literal()

        if self.check(TT.LBRACE):
            return self.parse_map_literal()

        if self.check(TT.EOF):
            raise ParseError("Unexpected end of input in expression", self.current)
        raise ParseError(f"Unexpected token in expression: '{self.current.value}'", self.current)

    def parse_array_literal(self) -> Tree:
        """Parse array literal: [a, b, ...]"""
        lsqb = self.expect(TT.LSQB)
        items: List[Node] = []

        if not self.check(TT.RSQB):
            while True:
                items.append(self.parse_expr())
                if not self.match(TT.COMMA):
                    break

        self.expect(TT.RSQB, "Expected ']' after array elements")
        return self.node('array', items, lsqb)

    def parse_map_literal(self) -> Tree:
        """Parse map literal: {key: value, "key": value, ...}"""
        lbrace = self.expect(TT.LBRACE)
        entries: List[Node] = []

        if not self.check(TT.RBRACE):
            while True:
                entries.append(self.parse_map_entry())
                if not self.match(TT.COMMA):
                    break

        self.expect(TT.RBRACE, "Expected '}' after map entries")
        return self.node('map', entries, lbrace)

    def parse_map_entry(self) -> Tree:
        if not self.check(TT.IDENT, TT.STRING):
            raise ParseError("Expected identifier or string as map key", self.current)

        key_tok = self.advance()
        key = make_token('KEY', str(key_tok.value), key_tok.line, key_tok.column,
                         key_tok.start_pos, key_tok.end_pos)
        self.expect(TT.COLON, "Expected ':' after map key")
        value = self.parse_expr()
        return self.node('map_entry', [key, value], key_tok)


# ============================================================================
# Entry points
# ============================================================================

def parse(tokens: List[Tok]) -> Tree:
    """Parse a scanned token list into a `program` tree."""
    return Parser(tokens).parse()


def parse_source(source: str) -> Tree:
    """
    Parse Loam source code to AST.

    Raises LexError for scanning failures and ParseError for syntax errors.
    """
    from .lexer import tokenize

    return parse(tokenize(source))
