from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import pytest

from pendora.errors import Location, ParseError, UnterminatedLiteral
from pendora.lexer_rd import tokenize
from pendora.token_types import (
    Tok,
    TokenKind,
    boolean,
    encapsulator,
    integer,
    split,
    string_literal,
    word,
)


@dataclass(frozen=True)
class Case:
    """Unified lexer case payload."""

    name: str
    source: str
    expected: Tuple[Tok, ...] = ()


BASIC_TOKEN_CASES: List[Case] = [
    Case("word", "Object", (word("Object"),)),
    Case("word-snake", "user_id", (word("user_id"),)),
    Case("word-dashed", "x-api-key", (word("x-api-key"),)),
    Case("word-nullable", "int?", (word("int?"),)),
    Case("word-dotted", "GLOBAL.token", (word("GLOBAL.token"),)),
    Case("word-digits-inside", "user2id", (word("user2id"),)),
    Case("string", '"/api/users"', (string_literal("/api/users"),)),
    Case("string-empty", '""', (string_literal(""),)),
    Case("string-keeps-backslash", r'"a\"', (string_literal("a\\"),)),
    Case("integer", "1234", (integer(1234),)),
    Case("integer-leading-zero", "007", (integer(7),)),
    Case("bool-true", "true", (boolean(True),)),
    Case("bool-True", "True", (boolean(True),)),
    Case("bool-false", "false", (boolean(False),)),
    Case("bool-False", "False", (boolean(False),)),
    Case("bool-prefix-is-word", "trueish", (word("trueish"),)),
    Case("bool-shouting-is-word", "TRUE", (word("TRUE"),)),
]

SKIPPED_CASES: List[Case] = [
    Case("whitespace", " \t\r\n ", ()),
    Case("punctuation", "@#$%^&*=+!/\\|~`'", ()),
    Case("leading-qmark", "?name", (word("name"),)),
    Case("leading-dot", ".5", (integer(5),)),
    Case("no-sign", "-3", (integer(3),)),
    Case("no-fraction", "3.14", (integer(3), integer(14))),
    Case("underscore-start", "_x", (word("x"),)),
]

SEPARATOR_CASES: List[Case] = [
    Case(
        "encapsulators",
        "(){}<>[]",
        tuple(encapsulator(ch) for ch in "(){}<>[]"),
    ),
    Case("splits", ":,;", (split(":"), split(","), split(";"))),
    Case(
        "shape-entry",
        "id: int,",
        (word("id"), split(":"), word("int"), split(",")),
    ),
    Case(
        "number-then-word",
        "12abc",
        (integer(12), word("abc")),
    ),
]


@pytest.mark.parametrize("case", BASIC_TOKEN_CASES, ids=lambda case: case.name)
def test_basic_tokens(case: Case) -> None:
    assert tuple(tokenize(case.source)) == case.expected


@pytest.mark.parametrize("case", SKIPPED_CASES, ids=lambda case: case.name)
def test_unrecognised_characters_are_skipped(case: Case) -> None:
    assert tuple(tokenize(case.source)) == case.expected


@pytest.mark.parametrize("case", SEPARATOR_CASES, ids=lambda case: case.name)
def test_separators(case: Case) -> None:
    assert tuple(tokenize(case.source)) == case.expected


def test_method_declaration_token_kinds() -> None:
    source = 'Method GetUser(int userId,){ route("/user") };'
    kinds = [tok.kind for tok in tokenize(source)]

    assert kinds == [
        TokenKind.WORD,
        TokenKind.WORD,
        TokenKind.ENCAPSULATOR,
        TokenKind.WORD,
        TokenKind.WORD,
        TokenKind.SPLIT,
        TokenKind.ENCAPSULATOR,
        TokenKind.ENCAPSULATOR,
        TokenKind.WORD,
        TokenKind.ENCAPSULATOR,
        TokenKind.STRING_LITERAL,
        TokenKind.ENCAPSULATOR,
        TokenKind.ENCAPSULATOR,
        TokenKind.SPLIT,
    ]


def test_string_literal_spans_lines() -> None:
    tokens = tokenize('"a\nb" x')
    assert tokens == [string_literal("a\nb"), word("x")]
    assert (tokens[1].line, tokens[1].column) == (2, 4)


def test_position_tracking() -> None:
    tokens = tokenize('Object User {\n  shape({id: int})\n};')
    positions = {str(tok.value): (tok.line, tok.column) for tok in tokens}

    assert positions["Object"] == (1, 1)
    assert positions["User"] == (1, 8)
    assert positions["shape"] == (2, 3)
    assert positions["int"] == (2, 14)
    assert positions[";"] == (3, 2)


def test_position_is_not_part_of_identity() -> None:
    assert Tok(TokenKind.WORD, "x", 4, 2) == word("x")
    assert hash(Tok(TokenKind.WORD, "x", 4, 2)) == hash(word("x"))


def test_token_repr_is_tagged() -> None:
    assert repr(word("shape")) == "Word('shape')"
    assert repr(encapsulator("(")) == "Encapsulator('(')"
    assert repr(split(";")) == "Split(';')"
    assert repr(string_literal("/api")) == "StringLiteral('/api')"
    assert repr(integer(3)) == "Integer(3)"
    assert repr(boolean(False)) == "Boolean(False)"


def test_constructors_reject_foreign_characters() -> None:
    with pytest.raises(ValueError):
        encapsulator(":")
    with pytest.raises(ValueError):
        split("(")


TOTALITY_SOURCES = [
    "",
    "Object User { shape({id: int,}) };",
    "}}}{{{;;;",
    "\x00\x01 weird éè unicode \U0001F600 ok",
    "12 true Word \"str\" <>",
    "int? str? bool? GLOBAL. PARENT.",
]


@pytest.mark.parametrize("source", TOTALITY_SOURCES)
def test_tokenize_is_deterministic(source: str) -> None:
    first = tokenize(source)
    second = tokenize(source)

    assert first == second
    assert [(t.line, t.column) for t in first] == [(t.line, t.column) for t in second]


def test_non_ascii_letters_are_skipped() -> None:
    assert tokenize("été") == [word("t")]


@dataclass(frozen=True)
class ErrorCase:
    name: str
    source: str
    err_line: int
    err_col: int


LEX_ERROR_CASES: List[ErrorCase] = [
    ErrorCase("unterminated-string", '"abc', 1, 1),
    ErrorCase("unterminated-string-line2", 'Object U {\n  route("/x', 2, 9),
    ErrorCase("lone-quote", 'x "', 1, 3),
]


@pytest.mark.parametrize("case", LEX_ERROR_CASES, ids=lambda case: case.name)
def test_unterminated_quote(case: ErrorCase) -> None:
    with pytest.raises(ParseError) as exc_info:
        tokenize(case.source)

    err = exc_info.value
    assert err.failure == UnterminatedLiteral(Location.STRING_LITERAL)
    assert (err.line, err.column) == (case.err_line, case.err_col)
    assert "Unterminated quote" in str(err)
