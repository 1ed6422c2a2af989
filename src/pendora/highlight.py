"""prompt_toolkit lexer for Pendora syntax highlighting."""

from __future__ import annotations

from typing import Callable, List

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .errors import ParseError
from .lexer_rd import DIGITS, WORD_BODY, Lexer as PendoraTokenizer
from .parser_rd import (
    DECLARATION_PARSERS,
    GLOBAL_DIRECTIVES,
    GLOBAL_PREFIX,
    METHOD_DIRECTIVES,
    OBJECT_DIRECTIVES,
    PARENT_PREFIX,
    TYPE_SPELLINGS,
    VERBS,
)
from .token_types import Tok, TokenKind

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "directive": "bold ansiyellow",
    "type": "bold ansiblue",
    "verb": "ansimagenta",
    "reference": "italic",
    "boolean": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "punctuation": "",
}

_KIND_GROUP = {
    TokenKind.INTEGER: "number",
    TokenKind.BOOLEAN: "boolean",
    TokenKind.STRING_LITERAL: "string",
    TokenKind.ENCAPSULATOR: "punctuation",
    TokenKind.SPLIT: "punctuation",
}

_DIRECTIVES = set(GLOBAL_DIRECTIVES) | set(OBJECT_DIRECTIVES) | set(METHOD_DIRECTIVES)
_DIRECTIVE_OPENERS = {"(", "<"}


def _word_group(tokens: List[Tok], idx: int) -> str:
    text = tokens[idx].value
    if text in DECLARATION_PARSERS and idx == 0:
        return "keyword"
    if text in _DIRECTIVES:
        nxt = tokens[idx + 1] if idx + 1 < len(tokens) else None
        if nxt is not None and nxt.kind == TokenKind.ENCAPSULATOR and nxt.value in _DIRECTIVE_OPENERS:
            return "directive"
    if text in TYPE_SPELLINGS:
        return "type"
    if text in VERBS:
        return "verb"
    if text.startswith((GLOBAL_PREFIX, PARENT_PREFIX)):
        return "reference"
    return "identifier"


def _token_end(text: str, start: int, tok: Tok) -> int:
    """Index just past the source text of `tok`, which begins at `start`."""
    if tok.kind in (TokenKind.ENCAPSULATOR, TokenKind.SPLIT):
        return start + 1
    if tok.kind == TokenKind.STRING_LITERAL:
        return text.index('"', start + 1) + 1

    body = DIGITS if tok.kind == TokenKind.INTEGER else WORD_BODY
    end = start
    while end < len(text) and text[end] in body:
        end += 1
    return end


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = PendoraTokenizer(text).tokenize()
    except ParseError:
        return [("", text)]

    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        start = tok.column - 1
        end = _token_end(text, start, tok)

        # Unstyled gap before token.
        if start > pos:
            result.append(("", text[pos:start]))

        if tok.kind == TokenKind.WORD:
            group = _word_group(tokens, i)
        else:
            group = _KIND_GROUP[tok.kind]
        result.append((GROUP_STYLE[group], text[start:end]))
        pos = end

    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]


class PendoraLexer(Lexer):
    """prompt_toolkit Lexer that highlights Pendora source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        # Pre-compute highlights for all lines.
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
