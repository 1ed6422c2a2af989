"""Front-end for the Pendora API description language."""

from .errors import ParseError, render
from .lexer_rd import tokenize
from .parser_rd import parse_declaration, parse_global, parse_method, parse_object
from .project import assemble, parse_project, parse_source

__all__ = [
    "ParseError",
    "assemble",
    "parse_declaration",
    "parse_global",
    "parse_method",
    "parse_object",
    "parse_project",
    "parse_source",
    "render",
    "tokenize",
]
