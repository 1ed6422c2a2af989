"""
Error model for the Pendora front-end

Every failure is one of a closed set of variants, each tagged with the
syntactic location it was raised from. `render` is the only place that turns
a failure into text; `ParseError` is the exception that carries a failure out
of the lexer, the parser and the project assembler.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union, get_args

from typing_extensions import TypeAlias

from .token_types import Tok, TokenKind


class Location(Enum):
    """Fixed syntactic contexts, valued by their descriptive phrase"""

    GLOBAL = "a global object"
    OBJECT = "an object"
    METHOD = "a method"
    METHOD_INTERNAL = "a method's internal"
    METHOD_ARGUMENTS = "a method's arguments"
    TYPE = "a Pendora type"
    REQUEST_TYPE = "a HTTP request type"
    REQUEST_SHAPE = "a method's request shape"
    METHOD_SHAPE_VALUE = "a method shape value"
    RETURN_SHAPE = "a method's shape"
    OBJECT_METHODS = "an object's methods list"
    OBJECT_SHAPE = "an object's shape"
    STRING_LITERAL = "a string literal"

    @property
    def phrase(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProjectFile:
    """Location tag for failures attributed to a whole declaration file."""

    file_name: str

    @property
    def phrase(self) -> str:
        return f"a project ({self.file_name})"


ErrorLocation: TypeAlias = Union[Location, ProjectFile]
Expected: TypeAlias = Union[Tok, TokenKind]


# ---------- Failure variants ----------

@dataclass(frozen=True)
class MisplacedSymbol:
    """A token of the wrong kind where a specific kind was required."""

    location: ErrorLocation
    found: Tok
    expected: Expected


@dataclass(frozen=True)
class InvalidSymbolBody:
    """A token of the right kind whose content is outside the allowed set."""

    location: ErrorLocation
    found: Tok
    valid: Tuple[str, ...]


@dataclass(frozen=True)
class BadLength:
    location: ErrorLocation
    found: int
    valid: Tuple[int, ...]


@dataclass(frozen=True)
class PoorClosure:
    location: ErrorLocation
    found: Tok
    expected: Tok


@dataclass(frozen=True)
class FieldNotExistent:
    location: ErrorLocation
    missing_field: str


@dataclass(frozen=True)
class UnterminatedBlock:
    """Input ran out before an expected closing token."""

    location: ErrorLocation
    expected: Expected


@dataclass(frozen=True)
class UnterminatedLiteral:
    location: ErrorLocation


@dataclass(frozen=True)
class DuplicateDeclaration:
    """A second declaration of a construct that may only appear once."""

    location: ErrorLocation
    keyword: str
    name: str


Failure: TypeAlias = Union[
    MisplacedSymbol,
    InvalidSymbolBody,
    BadLength,
    PoorClosure,
    FieldNotExistent,
    UnterminatedBlock,
    UnterminatedLiteral,
    DuplicateDeclaration,
]


def _describe_expected(expected: Expected) -> str:
    if isinstance(expected, TokenKind):
        return expected.label
    return repr(expected)


def render(failure: Failure) -> str:
    """Render a failure as a single diagnostic sentence."""
    if not isinstance(failure, get_args(Failure)):
        raise TypeError(f"unknown failure variant: {type(failure).__name__}")
    where = failure.location.phrase

    if isinstance(failure, MisplacedSymbol):
        return (
            f"Wrong symbol found while parsing {where}. "
            f"Expected {_describe_expected(failure.expected)} but found {failure.found!r}."
        )
    if isinstance(failure, InvalidSymbolBody):
        return (
            f"Invalid symbol content found while parsing {where}. "
            f"Found {failure.found!r} but expected {list(failure.valid)!r}."
        )
    if isinstance(failure, BadLength):
        return (
            f"Incorrectly sized chunk found while parsing {where}. "
            f"Expected length(s) {list(failure.valid)!r} but found length {failure.found}."
        )
    if isinstance(failure, PoorClosure):
        return (
            f"Incomplete or poor closure found while parsing {where}. "
            f"Expected {failure.expected!r} but found {failure.found!r}."
        )
    if isinstance(failure, FieldNotExistent):
        return (
            f"Required field ({failure.missing_field}) unable to be found "
            f"while parsing {where}."
        )
    if isinstance(failure, UnterminatedBlock):
        return (
            f"Input ended while parsing {where}. "
            f"Expected {_describe_expected(failure.expected)} before the end of input."
        )
    if isinstance(failure, UnterminatedLiteral):
        return f"Unterminated quote found while parsing {where}."
    if isinstance(failure, DuplicateDeclaration):
        return (
            f"Duplicate {failure.keyword} ({failure.name}) found while parsing {where}. "
            f"Only one {failure.keyword} may be declared per project."
        )

    raise AssertionError(f"unhandled failure variant: {type(failure).__name__}")


def _position_of(failure: Failure) -> Tuple[int, int]:
    found = getattr(failure, "found", None)
    if isinstance(found, Tok):
        return found.line, found.column
    return 0, 0


class ParseError(Exception):
    """Parse error carrying a structured failure and position info"""

    def __init__(
        self,
        failure: Failure,
        line: Optional[int] = None,
        column: Optional[int] = None,
        file_name: Optional[str] = None,
    ):
        if line is None:
            line, column = _position_of(failure)
        self.failure = failure
        self.line = line
        self.column = column or 0
        self.file_name = file_name
        super().__init__(render(failure))

    @property
    def location(self) -> ErrorLocation:
        return self.failure.location

    def __str__(self) -> str:
        message = render(self.failure)
        where = []
        if self.file_name:
            where.append(self.file_name)
        if self.line:
            where.append(f"line {self.line}, col {self.column}")
        return f"{message} ({', '.join(where)})" if where else message
