"""Lark-based reference parser for Pendora declarations.

Builds the same model objects as `parser_rd` from `grammar.lark`. It only
understands well-formed input and reports problems as `SyntaxError`; the
recursive descent parser remains the one that produces diagnostics.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from lark import Lark, Token, Transformer, UnexpectedInput
from lark.exceptions import VisitError

from .parser_rd import TYPE_SPELLINGS, VERBS, parse_shape_value
from .types import EMPTY, Declaration, Global, Method, Object, RequestVerb, Type, frozen

GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")


@lru_cache(maxsize=None)
def build_parser(grammar_path: Optional[str] = None) -> Lark:
    path = Path(grammar_path) if grammar_path else GRAMMAR_PATH
    return Lark(
        path.read_text(encoding="utf-8"),
        parser="lalr",
        start="start",
        maybe_placeholders=False,
        propagate_positions=True,
    )


def _unquote(tok: Token) -> str:
    return str(tok)[1:-1]


def _type_of(tok: Token) -> Type:
    try:
        return TYPE_SPELLINGS[str(tok)]
    except KeyError:
        raise SyntaxError(f"unknown type {str(tok)!r} at line {tok.line}, col {tok.column}") from None


def _verb_of(tok: Token) -> RequestVerb:
    try:
        return VERBS[str(tok)]
    except KeyError:
        raise SyntaxError(f"unknown request verb {str(tok)!r} at line {tok.line}, col {tok.column}") from None


class ToModel(Transformer):
    """Turn the Lark parse tree into Global/Object/Method values."""

    def start(self, c):
        return c[0]

    # ---------- declarations ----------

    def global_decl(self, c):
        name, *directives = c
        values: Dict[str, Any] = dict(directives)
        return Global(
            name=str(name),
            head_route=values.get("headRoute", ""),
            shape=values.get("shape", EMPTY),
            methods=values.get("methods", ()),
        )

    def object_decl(self, c):
        name, *directives = c
        values: Dict[str, Any] = dict(directives)
        return Object(
            name=str(name),
            shape=values.get("shape", EMPTY),
            methods=values.get("methods", ()),
        )

    def method_decl(self, c):
        name, arguments, *directives = c
        values: Dict[str, Any] = dict(directives)
        verb, request_shape = values.get("request", (RequestVerb.GET, EMPTY))
        return_object, return_shape = values.get("return", ("", EMPTY))
        return Method(
            name=str(name),
            arguments=arguments,
            route=values.get("route", ""),
            request_shape=request_shape,
            request_verb=verb,
            return_shape=return_shape,
            return_object=return_object,
        )

    # ---------- directives ----------

    def head_route(self, c):
        return ("headRoute", _unquote(c[0]))

    def route(self, c):
        return ("route", _unquote(c[0]))

    def shape(self, c):
        return ("shape", frozen(dict(c)))

    def field(self, c):
        name, type_name = c
        return (str(name), _type_of(type_name))

    def methods(self, c):
        return ("methods", tuple(str(name) for name in c))

    def arguments(self, c):
        return frozen(dict(c))

    def argument(self, c):
        type_name, name = c
        return (str(name), _type_of(type_name))

    def request(self, c):
        verb, *params = c
        return ("request", (_verb_of(verb), frozen(dict(params))))

    def param(self, c):
        key, source = c
        return (str(key), parse_shape_value(str(source)))

    def returns(self, c):
        name, *selections = c
        return ("return", (str(name), frozen(dict(selections))))

    def selection(self, c):
        alias = _unquote(c[1]) if len(c) > 1 else None
        return (str(c[0]), alias)


def parse_source_auto(code: str, grammar_path: Optional[str] = None) -> Declaration:
    """Parse one declaration file with the Lark grammar."""
    parser = build_parser(grammar_path)
    try:
        tree = parser.parse(code)
    except UnexpectedInput as err:
        ctx = err.get_context(code, span=40)
        raise SyntaxError(
            f"{type(err).__name__} at line {err.line}, col {err.column}\n{ctx}"
        ) from None

    try:
        return ToModel().transform(tree)
    except VisitError as err:
        raise err.orig_exc from None
