"""prompt_toolkit lexer for live Loam syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer import Lexer as LoamSourceLexer, LexError
from .token_types import TT

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
}

_KEYWORDS = (
    TT.LET, TT.PRINT, TT.IF, TT.ELSE, TT.WHILE, TT.FOR, TT.IN,
    TT.FN, TT.RETURN, TT.AND, TT.OR,
)
_OPERATORS = (
    TT.PLUS, TT.MINUS, TT.STAR, TT.SLASH, TT.EQ, TT.NEQ,
    TT.LT, TT.LTE, TT.GT, TT.GTE, TT.NEG, TT.ASSIGN,
)
_PUNCTUATION = (
    TT.LPAR, TT.RPAR, TT.LSQB, TT.RSQB, TT.LBRACE, TT.RBRACE,
    TT.DOT, TT.COMMA, TT.COLON, TT.SEMI,
)

# Token type → highlight group.
_TT_GROUP = {
    **{tt: "keyword" for tt in _KEYWORDS},
    **{tt: "operator" for tt in _OPERATORS},
    **{tt: "punctuation" for tt in _PUNCTUATION},
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.NUMBER: "number",
    TT.STRING: "string",
    TT.IDENT: "identifier",
    TT.COMMENT: "comment",
}


def highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = LoamSourceLexer(text, emit_comments=True).tokenize()
    except LexError:
        # half-typed input (an open string, a stray character) stays unstyled
        return [("", text)]

    result: StyleAndTextTuples = []
    pos = 0

    for tok in tokens:
        if tok.type == TT.EOF or tok.end_pos <= tok.start_pos:
            continue

        if tok.start_pos > pos:
            result.append(("", text[pos:tok.start_pos]))

        style = GROUP_STYLE.get(_TT_GROUP.get(tok.type, ""), "")
        result.append((style, text[tok.start_pos:tok.end_pos]))
        pos = tok.end_pos

    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]


class LoamLexer(Lexer):
    """prompt_toolkit Lexer that highlights Loam source line by line."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
