"""
Lexer for Pendora - Recursive Descent Parser

Tokenizes Pendora declaration source into a flat list of tokens.

Features:
- Single-pass tokenization
- Position tracking (line, column)
- Boolean literals folded out of word runs
- Unrecognised characters are skipped, never rejected
"""

from __future__ import annotations

import string
from typing import List

from .errors import Location, ParseError, UnterminatedLiteral
from .token_types import ENCAPSULATORS, SPLITS, Tok, TokenKind

# ============================================================================
# Lexer Implementation
# ============================================================================

WORD_START = frozenset(string.ascii_letters)
WORD_BODY = WORD_START | frozenset(string.digits) | frozenset("_-?.")
DIGITS = frozenset(string.digits)

BOOLEANS = {
    'true': True,
    'True': True,
    'false': False,
    'False': False,
}


class Lexer:
    """
    Pendora lexer.

    Total over its input: whitespace and any character outside the token
    vocabulary is discarded. The only failure is a quote that never closes.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()
        return self.tokens

    def scan_token(self):
        ch = self.peek()

        if ch in WORD_START:
            self.scan_word()
            return

        if ch == '"':
            self.scan_string()
            return

        if ch in DIGITS:
            self.scan_number()
            return

        if ch in ENCAPSULATORS:
            self.emit(TokenKind.ENCAPSULATOR, ch)
            self.advance()
            return

        if ch in SPLITS:
            self.emit(TokenKind.SPLIT, ch)
            self.advance()
            return

        self.advance()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_word(self):
        """Scan identifier-like run, folding boolean spellings"""
        line, column = self.line, self.column
        value = ''

        while self.pos < len(self.source) and self.peek() in WORD_BODY:
            value += self.advance()

        if value in BOOLEANS:
            self.emit(TokenKind.BOOLEAN, BOOLEANS[value], line, column)
        else:
            self.emit(TokenKind.WORD, value, line, column)

    def scan_string(self):
        """Scan string literal: "..." with no escape handling"""
        line, column = self.line, self.column
        self.advance()  # opening quote
        value = ''

        while self.pos < len(self.source) and self.peek() != '"':
            value += self.advance()

        if self.pos >= len(self.source):
            raise ParseError(UnterminatedLiteral(Location.STRING_LITERAL), line, column)

        self.advance()  # closing quote
        self.emit(TokenKind.STRING_LITERAL, value, line, column)

    def scan_number(self):
        """Scan unsigned integer literal"""
        line, column = self.line, self.column
        value = ''

        while self.pos < len(self.source) and self.peek() in DIGITS:
            value += self.advance()

        self.emit(TokenKind.INTEGER, int(value), line, column)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self) -> str:
        """Consume one character, keeping line/column current"""
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def emit(self, kind: TokenKind, value, line: int = 0, column: int = 0):
        """Emit a token, defaulting to the current position"""
        self.tokens.append(Tok(kind, value, line or self.line, column or self.column))


def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    return Lexer(source).tokenize()
