from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, Mapping, Optional

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from pendora.errors import Failure, ParseError
from pendora.lexer_rd import tokenize
from pendora.project import parse_source
from pendora.types import Declaration


def parse_rd(source: str, file_name: str = "<test>") -> Declaration:
    """Parse one declaration through the full lexer -> RD parser path."""
    return parse_source(source, file_name)


def failure_of(source: str, file_name: str = "<test>") -> Failure:
    """Parse `source`, expecting a ParseError, and return its failure."""
    with pytest.raises(ParseError) as exc_info:
        parse_source(source, file_name)
    return exc_info.value.failure


def decoder_failure(decoder, source: str) -> Failure:
    """Run a list/map decoder over the tokens of `source`, expecting failure."""
    with pytest.raises(ParseError) as exc_info:
        decoder(tokenize(source))
    return exc_info.value.failure


def plain(mapping: Mapping) -> Dict:
    """Copy a read-only model mapping into a dict for comparisons."""
    return dict(mapping)


def write_sources(root: Path, files: Dict[str, str]) -> None:
    for name, text in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")


GLOBAL_APP = 'Global App { headRoute("/api") shape({id: int,}) methods([GetUser,]) };'
OBJECT_USER = 'Object User { shape({id: int, name: str,}) methods([GetUser,]) };'
METHOD_GET_USER = (
    'Method GetUser(int userId,){ route("/user") request<GET>({id: userId,}) '
    'return<User>({name, email: "emailAlias",}) };'
)


def expected_kind(failure: Failure, kind: type, location: Optional[object] = None) -> None:
    assert isinstance(failure, kind), f"expected {kind.__name__}, got {failure!r}"
    if location is not None:
        assert failure.location == location, f"expected {location!r}, got {failure.location!r}"
