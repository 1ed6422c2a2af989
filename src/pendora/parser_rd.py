"""
Recursive Descent Parser for Pendora

Structure:
- Cursor: every step takes an immutable token buffer and an index and
  returns (fragment, new_index), raising ParseError on failure
- Extraction: bracket contents are captured up to the FIRST matching closer,
  without depth tracking; no construct nests a bracket inside itself
- Blocks: `Keyword Name '{' ... '}' ';'` are captured up to the `;` and the
  trailing `}` dropped before the directives are scanned
- Decoders: argument lists, shapes and method lists are read in fixed-size
  chunks, so a trailing separator on the last entry is optional
"""

from __future__ import annotations

from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from .errors import (
    BadLength,
    ErrorLocation,
    Expected,
    FieldNotExistent,
    InvalidSymbolBody,
    Location,
    MisplacedSymbol,
    ParseError,
    PoorClosure,
    ProjectFile,
    UnterminatedBlock,
)
from .token_types import Tok, TokenKind, encapsulator, split, word
from .types import (
    ArgumentRef,
    Declaration,
    EMPTY,
    Global,
    GlobalRef,
    Method,
    MethodArguments,
    Object,
    ParentRef,
    RequestShape,
    RequestVerb,
    ReturnShape,
    Shape,
    Type,
    Value,
    frozen,
)

Tokens = Sequence[Tok]

COMMA = split(',')
COLON = split(':')
SEMI = split(';')

TYPE_SPELLINGS: Dict[str, Type] = {
    'int': Type.INTEGER,
    'Integer': Type.INTEGER,
    'bool': Type.BOOLEAN,
    'Boolean': Type.BOOLEAN,
    'str': Type.STRING,
    'String': Type.STRING,
    'int?': Type.NULLABLE_INTEGER,
    'Integer?': Type.NULLABLE_INTEGER,
    'bool?': Type.NULLABLE_BOOLEAN,
    'Boolean?': Type.NULLABLE_BOOLEAN,
    'str?': Type.NULLABLE_STRING,
    'String?': Type.NULLABLE_STRING,
}

VERBS: Dict[str, RequestVerb] = {verb.value: verb for verb in RequestVerb}

GLOBAL_PREFIX = 'GLOBAL.'
PARENT_PREFIX = 'PARENT.'

# ============================================================================
# Token Navigation
# ============================================================================

def _end_of(tokens: Tokens) -> Tuple[int, int]:
    """Position of the last token, used when input runs out"""
    if tokens:
        return tokens[-1].line, tokens[-1].column
    return 0, 0


def _ran_out(tokens: Tokens, location: ErrorLocation, expected: Expected) -> ParseError:
    line, column = _end_of(tokens)
    return ParseError(UnterminatedBlock(location, expected), line, column)


def expect(tokens: Tokens, pos: int, token: Tok, location: ErrorLocation) -> int:
    """Consume the bracket `token` or raise PoorClosure"""
    if pos >= len(tokens):
        raise _ran_out(tokens, location, token)
    found = tokens[pos]
    if found != token:
        raise ParseError(PoorClosure(location, found, token))
    return pos + 1


def expect_keyword(tokens: Tokens, pos: int, keyword: str, location: ErrorLocation) -> int:
    expected = word(keyword)
    if pos >= len(tokens):
        raise _ran_out(tokens, location, expected)
    if tokens[pos] != expected:
        raise ParseError(MisplacedSymbol(location, tokens[pos], expected))
    return pos + 1


def take_word(tokens: Tokens, pos: int, location: ErrorLocation) -> Tuple[str, int]:
    if pos >= len(tokens):
        raise _ran_out(tokens, location, TokenKind.WORD)
    found = tokens[pos]
    if found.kind != TokenKind.WORD:
        raise ParseError(MisplacedSymbol(location, found, TokenKind.WORD))
    return found.value, pos + 1


def capture_until(
    tokens: Tokens, pos: int, closing: Tok, location: ErrorLocation
) -> Tuple[Tuple[Tok, ...], int]:
    """Collect tokens up to the first `closing`; return them and the index past it"""
    start = pos
    while pos < len(tokens):
        if tokens[pos] == closing:
            return tuple(tokens[start:pos]), pos + 1
        pos += 1
    raise _ran_out(tokens, location, closing)


def extract_enclosed(
    tokens: Tokens, pos: int, opening: str, closing: str, location: ErrorLocation
) -> Tuple[Tuple[Tok, ...], int]:
    """Read `opening ... closing`, stopping at the first closer (no nesting)"""
    pos = expect(tokens, pos, encapsulator(opening), location)
    return capture_until(tokens, pos, encapsulator(closing), location)


def extract_block(
    tokens: Tokens, pos: int, location: ErrorLocation
) -> Tuple[Tuple[Tok, ...], int]:
    """
    Read a declaration body `'{' ... '}' ';'`.

    Capture runs to the first `;`, then the last captured token, the body's
    own `}`, is dropped.
    """
    pos = expect(tokens, pos, encapsulator('{'), location)
    captured, pos = capture_until(tokens, pos, SEMI, location)
    closer = encapsulator('}')

    if not captured:
        raise ParseError(PoorClosure(location, tokens[pos - 1], closer))
    if captured[-1] != closer:
        raise ParseError(PoorClosure(location, captured[-1], closer))

    return captured[:-1], pos


def chunks(tokens: Tokens, size: int) -> Iterator[Tokens]:
    for start in range(0, len(tokens), size):
        yield tokens[start:start + size]


def split_on(tokens: Tokens, separator: Tok) -> List[Tokens]:
    """Split on every `separator`, keeping empty pieces"""
    pieces: List[Tokens] = []
    start = 0
    for idx, tok in enumerate(tokens):
        if tok == separator:
            pieces.append(tokens[start:idx])
            start = idx + 1
    pieces.append(tokens[start:])
    return pieces


def single(tokens: Tokens, kind: TokenKind, location: ErrorLocation) -> Tok:
    """The only token of `tokens`, which must be of `kind`"""
    if len(tokens) != 1:
        raise ParseError(BadLength(location, len(tokens), (1,)))
    if tokens[0].kind != kind:
        raise ParseError(MisplacedSymbol(location, tokens[0], kind))
    return tokens[0]


def _word_at(chunk: Tokens, idx: int, location: ErrorLocation) -> str:
    tok = chunk[idx]
    if tok.kind != TokenKind.WORD:
        raise ParseError(MisplacedSymbol(location, tok, TokenKind.WORD))
    return tok.value


def _split_at(chunk: Tokens, idx: int, separator: Tok, location: ErrorLocation) -> None:
    if chunk[idx] != separator:
        raise ParseError(MisplacedSymbol(location, chunk[idx], separator))

# ============================================================================
# Tables
# ============================================================================

def parse_type(tok: Tok) -> Type:
    if tok.kind != TokenKind.WORD:
        raise ParseError(MisplacedSymbol(Location.TYPE, tok, TokenKind.WORD))
    try:
        return TYPE_SPELLINGS[tok.value]
    except KeyError:
        raise ParseError(
            InvalidSymbolBody(Location.TYPE, tok, tuple(TYPE_SPELLINGS))
        ) from None


def parse_request_verb(tok: Tok) -> RequestVerb:
    if tok.kind != TokenKind.WORD:
        raise ParseError(MisplacedSymbol(Location.REQUEST_TYPE, tok, TokenKind.WORD))
    try:
        return VERBS[tok.value]
    except KeyError:
        raise ParseError(
            InvalidSymbolBody(Location.REQUEST_TYPE, tok, tuple(VERBS))
        ) from None


def parse_shape_value(text: str) -> Value:
    """Pick the value source from the raw reference text"""
    if text.startswith(GLOBAL_PREFIX):
        return GlobalRef(text[len(GLOBAL_PREFIX):])
    if text.startswith(PARENT_PREFIX):
        return ParentRef(text[len(PARENT_PREFIX):])
    return ArgumentRef(text)

# ============================================================================
# List and Map Decoders
# ============================================================================

def parse_method_arguments(tokens: Tokens) -> MethodArguments:
    """`Type name,` repeated; the last entry may drop its comma"""
    location = Location.METHOD_ARGUMENTS
    result: Dict[str, Type] = {}

    for chunk in chunks(tokens, 3):
        if len(chunk) not in (3, 2):
            raise ParseError(BadLength(location, len(chunk), (3, 2)))
        if chunk[0].kind != TokenKind.WORD:
            raise ParseError(MisplacedSymbol(location, chunk[0], TokenKind.WORD))
        arg_type = parse_type(chunk[0])
        arg_name = _word_at(chunk, 1, location)
        if len(chunk) == 3:
            _split_at(chunk, 2, COMMA, location)
        result[arg_name] = arg_type

    return frozen(result)


def _parse_pairs(
    tokens: Tokens,
    location: ErrorLocation,
    value_location: ErrorLocation,
    decode: Callable[[Tok], object],
) -> Dict[str, object]:
    """`key: value,` repeated; the last entry may drop its comma"""
    result: Dict[str, object] = {}

    for chunk in chunks(tokens, 4):
        if len(chunk) not in (4, 3):
            raise ParseError(BadLength(location, len(chunk), (4, 3)))
        key = _word_at(chunk, 0, location)
        _split_at(chunk, 1, COLON, location)
        if chunk[2].kind != TokenKind.WORD:
            raise ParseError(MisplacedSymbol(value_location, chunk[2], TokenKind.WORD))
        value = decode(chunk[2])
        if len(chunk) == 4:
            _split_at(chunk, 3, COMMA, location)
        result[key] = value

    return result


def parse_object_shape(tokens: Tokens) -> Shape:
    return frozen(_parse_pairs(tokens, Location.OBJECT_SHAPE, Location.TYPE, parse_type))


def parse_request_shape(tokens: Tokens) -> RequestShape:
    return frozen(_parse_pairs(
        tokens,
        Location.REQUEST_SHAPE,
        Location.METHOD_SHAPE_VALUE,
        lambda tok: parse_shape_value(tok.value),
    ))


def parse_return_shape(tokens: Tokens) -> ReturnShape:
    """
    Comma separated `field` or `field: "alias"` entries.

    Entries are split on commas rather than chunked, so empty pieces left by
    trailing or doubled commas are skipped.
    """
    location = Location.RETURN_SHAPE
    result: Dict[str, Optional[str]] = {}

    for piece in split_on(tokens, COMMA):
        if len(piece) == 0:
            continue
        if len(piece) == 1:
            result[_word_at(piece, 0, location)] = None
        elif len(piece) == 3:
            field_name = _word_at(piece, 0, location)
            _split_at(piece, 1, COLON, location)
            if piece[2].kind != TokenKind.STRING_LITERAL:
                raise ParseError(
                    MisplacedSymbol(location, piece[2], TokenKind.STRING_LITERAL)
                )
            result[field_name] = piece[2].value
        else:
            raise ParseError(BadLength(location, len(piece), (3, 1, 0)))

    return frozen(result)


def parse_method_names(tokens: Tokens) -> Tuple[str, ...]:
    location = Location.OBJECT_METHODS
    result: List[str] = []

    for chunk in chunks(tokens, 2):
        result.append(_word_at(chunk, 0, location))
        if len(chunk) == 2:
            _split_at(chunk, 1, COMMA, location)

    return tuple(result)

# ============================================================================
# Directives
# ============================================================================

Directive = Callable[[Tokens, int, ErrorLocation], Tuple[object, int]]


def _string_argument(tokens: Tokens, pos: int, location: ErrorLocation) -> Tuple[str, int]:
    """`("text")`"""
    inner, pos = extract_enclosed(tokens, pos, '(', ')', location)
    return single(inner, TokenKind.STRING_LITERAL, location).value, pos


def _shape_argument(tokens: Tokens, pos: int, location: ErrorLocation) -> Tuple[Shape, int]:
    """`({ field: Type, ... })`"""
    inner, pos = extract_enclosed(tokens, pos, '(', ')', location)
    body, _ = extract_enclosed(inner, 0, '{', '}', Location.OBJECT_SHAPE)
    return parse_object_shape(body), pos


def _methods_argument(
    tokens: Tokens, pos: int, location: ErrorLocation
) -> Tuple[Tuple[str, ...], int]:
    """`([ Name, ... ])`"""
    inner, pos = extract_enclosed(tokens, pos, '(', ')', location)
    body, _ = extract_enclosed(inner, 0, '[', ']', Location.OBJECT_METHODS)
    return parse_method_names(body), pos


def _request_argument(
    tokens: Tokens, pos: int, location: ErrorLocation
) -> Tuple[Tuple[RequestVerb, RequestShape], int]:
    """`<VERB>({ param: source, ... })`"""
    verb_tokens, pos = extract_enclosed(tokens, pos, '<', '>', location)
    verb = parse_request_verb(single(verb_tokens, TokenKind.WORD, Location.REQUEST_TYPE))
    inner, pos = extract_enclosed(tokens, pos, '(', ')', location)
    body, _ = extract_enclosed(inner, 0, '{', '}', Location.REQUEST_SHAPE)
    return (verb, parse_request_shape(body)), pos


def _return_argument(
    tokens: Tokens, pos: int, location: ErrorLocation
) -> Tuple[Tuple[str, ReturnShape], int]:
    """`<ObjectName>({ field, field: "alias", ... })`"""
    name_tokens, pos = extract_enclosed(tokens, pos, '<', '>', location)
    return_object = single(name_tokens, TokenKind.WORD, location).value
    inner, pos = extract_enclosed(tokens, pos, '(', ')', location)
    body, _ = extract_enclosed(inner, 0, '{', '}', Location.RETURN_SHAPE)
    return (return_object, parse_return_shape(body)), pos


GLOBAL_DIRECTIVES: Dict[str, Directive] = {
    'headRoute': _string_argument,
    'shape': _shape_argument,
    'methods': _methods_argument,
}

OBJECT_DIRECTIVES: Dict[str, Directive] = {
    'shape': _shape_argument,
    'methods': _methods_argument,
}

METHOD_DIRECTIVES: Dict[str, Directive] = {
    'route': _string_argument,
    'request': _request_argument,
    'return': _return_argument,
}


def parse_directives(
    tokens: Tokens, directives: Dict[str, Directive], location: ErrorLocation
) -> Dict[str, object]:
    """
    Scan a declaration body in one pass.

    Directives may come in any order, may be left out, and a repeated
    directive replaces the earlier value.
    """
    values: Dict[str, object] = {}
    pos = 0

    while pos < len(tokens):
        tok = tokens[pos]
        if tok.kind != TokenKind.WORD:
            raise ParseError(MisplacedSymbol(location, tok, TokenKind.WORD))
        handler = directives.get(tok.value)
        if handler is None:
            raise ParseError(InvalidSymbolBody(location, tok, tuple(directives)))
        values[tok.value], pos = handler(tokens, pos + 1, location)

    return values

# ============================================================================
# Declarations
# ============================================================================

def parse_global_at(tokens: Tokens, pos: int = 0) -> Tuple[Global, int]:
    location = Location.GLOBAL
    pos = expect_keyword(tokens, pos, 'Global', location)
    name, pos = take_word(tokens, pos, location)
    body, pos = extract_block(tokens, pos, location)
    values = parse_directives(body, GLOBAL_DIRECTIVES, location)

    return Global(
        name=name,
        head_route=values.get('headRoute', ""),
        shape=values.get('shape', EMPTY),
        methods=values.get('methods', ()),
    ), pos


def parse_object_at(tokens: Tokens, pos: int = 0) -> Tuple[Object, int]:
    location = Location.OBJECT
    pos = expect_keyword(tokens, pos, 'Object', location)
    name, pos = take_word(tokens, pos, location)
    body, pos = extract_block(tokens, pos, location)
    values = parse_directives(body, OBJECT_DIRECTIVES, location)

    return Object(
        name=name,
        shape=values.get('shape', EMPTY),
        methods=values.get('methods', ()),
    ), pos


def parse_method_at(tokens: Tokens, pos: int = 0) -> Tuple[Method, int]:
    location = Location.METHOD
    pos = expect_keyword(tokens, pos, 'Method', location)
    name, pos = take_word(tokens, pos, location)
    arg_tokens, pos = extract_enclosed(tokens, pos, '(', ')', location)
    arguments = parse_method_arguments(arg_tokens)
    body, pos = extract_block(tokens, pos, location)
    values = parse_directives(body, METHOD_DIRECTIVES, Location.METHOD_INTERNAL)

    verb, request_shape = values.get('request', (RequestVerb.GET, EMPTY))
    return_object, return_shape = values.get('return', ("", EMPTY))

    return Method(
        name=name,
        arguments=arguments,
        route=values.get('route', ""),
        request_shape=request_shape,
        request_verb=verb,
        return_shape=return_shape,
        return_object=return_object,
    ), pos


def parse_global(tokens: Tokens) -> Global:
    return parse_global_at(tuple(tokens))[0]


def parse_object(tokens: Tokens) -> Object:
    return parse_object_at(tuple(tokens))[0]


def parse_method(tokens: Tokens) -> Method:
    return parse_method_at(tuple(tokens))[0]


DECLARATION_PARSERS = {
    'Global': parse_global,
    'Object': parse_object,
    'Method': parse_method,
}


def parse_declaration(tokens: Tokens, file_name: str = "<source>") -> Declaration:
    """
    Parse one declaration file's tokens, picking the parser by leading keyword.

    Failures about the file as a whole (nothing in it, no keyword, an unknown
    keyword) are located at `ProjectFile(file_name)`.
    """
    location = ProjectFile(file_name)
    if not tokens:
        raise ParseError(FieldNotExistent(location, "declaration"))

    head = tokens[0]
    if head.kind != TokenKind.WORD:
        raise ParseError(MisplacedSymbol(location, head, TokenKind.WORD))

    parser = DECLARATION_PARSERS.get(head.value)
    if parser is None:
        raise ParseError(InvalidSymbolBody(location, head, tuple(DECLARATION_PARSERS)))
    return parser(tokens)
