"""
Token Types for the Pendora parser

Shared between lexer, parser and error model to avoid circular dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Union


class TokenKind(Enum):
    """Token kinds - the six tags of the Pendora token vocabulary"""

    INTEGER = auto()
    BOOLEAN = auto()
    STRING_LITERAL = auto()
    WORD = auto()
    ENCAPSULATOR = auto()  # ( ) { } < > [ ]
    SPLIT = auto()  # : , ;

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]


_KIND_LABELS = {
    TokenKind.INTEGER: "Integer",
    TokenKind.BOOLEAN: "Boolean",
    TokenKind.STRING_LITERAL: "StringLiteral",
    TokenKind.WORD: "Word",
    TokenKind.ENCAPSULATOR: "Encapsulator",
    TokenKind.SPLIT: "Split",
}

ENCAPSULATORS = "(){}<>[]"
SPLITS = ":,;"


@dataclass(frozen=True)
class Tok:
    """Token with position info. Position does not take part in equality."""

    kind: TokenKind
    value: Union[int, bool, str]
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    def is_word(self, text: str) -> bool:
        return self.kind == TokenKind.WORD and self.value == text

    def __repr__(self) -> str:
        return f"{self.kind.label}({self.value!r})"


def word(text: str, line: int = 0, column: int = 0) -> Tok:
    return Tok(TokenKind.WORD, text, line, column)


def string_literal(text: str, line: int = 0, column: int = 0) -> Tok:
    return Tok(TokenKind.STRING_LITERAL, text, line, column)


def integer(value: int, line: int = 0, column: int = 0) -> Tok:
    return Tok(TokenKind.INTEGER, value, line, column)


def boolean(value: bool, line: int = 0, column: int = 0) -> Tok:
    return Tok(TokenKind.BOOLEAN, value, line, column)


def encapsulator(char: str, line: int = 0, column: int = 0) -> Tok:
    if char not in ENCAPSULATORS:
        raise ValueError(f"not an encapsulator: {char!r}")
    return Tok(TokenKind.ENCAPSULATOR, char, line, column)


def split(char: str, line: int = 0, column: int = 0) -> Tok:
    if char not in SPLITS:
        raise ValueError(f"not a split: {char!r}")
    return Tok(TokenKind.SPLIT, char, line, column)
