"""
Lexer for Loam

Tokenizes Loam source code into a list of tokens terminated by EOF.

Features:
- Single-pass tokenization
- Position tracking (line, column, source offsets)
- Two-character operators preferred over their one-character prefixes
- `//` line comments (optionally emitted for the REPL highlighter)
"""

import logging
from typing import List

from .token_types import TT, Tok
from .types import LoamError

log = logging.getLogger(__name__)

I64_MAX = 2**63 - 1

# ============================================================================
# Lexer Implementation
# ============================================================================

class LexError(LoamError):
    """Lexical analysis error"""

    kind = "lexical"


class Lexer:
    """
    Loam lexer.

    Whitespace (including newlines) is insignificant; the line counter exists
    only for diagnostics.
    """

    # Keyword mapping
    KEYWORDS = {
        'let': TT.LET,
        'print': TT.PRINT,
        'if': TT.IF,
        'else': TT.ELSE,
        'while': TT.WHILE,
        'for': TT.FOR,
        'in': TT.IN,
        'fn': TT.FN,
        'return': TT.RETURN,
        'true': TT.TRUE,
        'false': TT.FALSE,
        'and': TT.AND,
        'or': TT.OR,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('==', TT.EQ),
        ('!=', TT.NEQ),
        ('<=', TT.LTE),
        ('>=', TT.GTE),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('<', TT.LT),
        ('>', TT.GT),
        ('!', TT.NEG),
        ('=', TT.ASSIGN),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        ('.', TT.DOT),
        (',', TT.COMMA),
        (':', TT.COLON),
        (';', TT.SEMI),
    ]

    def __init__(self, source: str, emit_comments: bool = False):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []
        self.emit_comments = emit_comments

        # Start of the token being scanned
        self.start = 0
        self.start_line = 1
        self.start_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.mark_start()
        self.emit(TT.EOF, None)
        log.debug("scanned %d tokens", len(self.tokens))
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        # Skip whitespace
        if self.skip_whitespace():
            return

        self.mark_start()

        # Comments
        if self.peek() == '/' and self.peek(1) == '/':
            self.skip_comment()
            return

        # String literals
        if self.peek() == '"':
            self.scan_string()
            return

        # Numbers
        if self.peek().isascii() and self.peek().isdigit():
            self.scan_number()
            return

        # Identifiers and keywords
        if self.is_ident_start(self.peek()):
            self.scan_identifier()
            return

        # Operators and punctuation
        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self):
        """Scan string literal: "..." (no escape processing)"""
        self.advance()  # Opening quote
        value = ''

        while self.pos < len(self.source) and self.peek() != '"':
            value += self.advance()

        if self.pos >= len(self.source):
            raise LexError("Unterminated string", self.start_line, self.start_column)

        self.advance()  # Closing quote
        self.emit(TT.STRING, value)

    def scan_number(self):
        """Scan integer literal"""
        value = ''

        while self.peek().isascii() and self.peek().isdigit():
            value += self.advance()

        if int(value) > I64_MAX:
            raise LexError(
                f"Integer literal {value} does not fit in 64 bits",
                self.start_line,
                self.start_column,
            )

        # Keep as string to match Lark
        self.emit(TT.NUMBER, value)

    def scan_identifier(self):
        """Scan identifier or keyword"""
        value = ''

        while self.is_ident_char(self.peek()):
            value += self.advance()

        # Check if keyword
        token_type = self.KEYWORDS.get(value, TT.IDENT)
        self.emit(token_type, value)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type, op_str)
                return

        ch = self.peek()
        raise LexError(f"Unexpected character '{ch}'", self.line, self.column)

    # ========================================================================
    # Utilities
    # ========================================================================

    @staticmethod
    def is_ident_start(ch: str) -> bool:
        return ch == '_' or (ch.isascii() and ch.isalpha())

    @staticmethod
    def is_ident_char(ch: str) -> bool:
        return ch == '_' or (ch.isascii() and ch.isalnum())

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = ''
        for _ in range(n):
            ch = self.source[self.pos] if self.pos < len(self.source) else '\0'
            result += ch
            self.pos += 1
            if ch == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return result

    def mark_start(self):
        self.start = self.pos
        self.start_line = self.line
        self.start_column = self.column

    def skip_whitespace(self) -> bool:
        """Skip whitespace, return True if any skipped"""
        skipped = False
        while self.peek() in (' ', '\t', '\n', '\r'):
            self.advance()
            skipped = True
        return skipped

    def skip_comment(self):
        """Skip comment until end of line"""
        while self.pos < len(self.source) and self.peek() != '\n':
            self.advance()

        if self.emit_comments:
            self.emit(TT.COMMENT, self.source[self.start:self.pos])

    def emit(self, token_type: TT, value):
        """Emit a token spanning from the marked start to the current position"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.start_line,
            column=self.start_column,
            start_pos=self.start,
            end_pos=self.pos,
        )
        self.tokens.append(tok)


def tokenize(source: str, emit_comments: bool = False) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source, emit_comments=emit_comments)
    return lexer.tokenize()
