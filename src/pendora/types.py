from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union

from typing_extensions import TypeAlias

# ---------- Field types ----------

class Type(Enum):
    INTEGER = "Integer"
    STRING = "String"
    BOOLEAN = "Boolean"
    NULLABLE_INTEGER = "Integer?"
    NULLABLE_STRING = "String?"
    NULLABLE_BOOLEAN = "Boolean?"

    @property
    def nullable(self) -> bool:
        return self.value.endswith("?")

    def __repr__(self) -> str:
        return f"Type.{self.name}"


class RequestVerb(Enum):
    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    DELETE = "DELETE"


# ---------- Request value references ----------

@dataclass(frozen=True)
class GlobalRef:
    """Parameter sourced from the project Global's shape (`GLOBAL.field`)."""
    field: str

@dataclass(frozen=True)
class ParentRef:
    """Parameter sourced from the enclosing object's shape (`PARENT.field`)."""
    field: str

@dataclass(frozen=True)
class ArgumentRef:
    """Parameter sourced from one of the method's own arguments."""
    name: str

Value: TypeAlias = Union[GlobalRef, ParentRef, ArgumentRef]

Shape: TypeAlias = Mapping[str, Type]
MethodArguments: TypeAlias = Mapping[str, Type]
RequestShape: TypeAlias = Mapping[str, Value]
ReturnShape: TypeAlias = Mapping[str, Optional[str]]

EMPTY: Mapping = MappingProxyType({})


def _empty() -> Mapping:
    return EMPTY


def frozen(mapping: Mapping) -> Mapping:
    """Read-only view over a private copy of `mapping`."""
    return MappingProxyType(dict(mapping))


# ---------- Declarations ----------

@dataclass(frozen=True)
class Global:
    name: str
    head_route: str = ""
    shape: Shape = field(default_factory=_empty)
    methods: Tuple[str, ...] = ()

@dataclass(frozen=True)
class Object:
    name: str
    shape: Shape = field(default_factory=_empty)
    methods: Tuple[str, ...] = ()

@dataclass(frozen=True)
class Method:
    name: str
    arguments: MethodArguments = field(default_factory=_empty)
    route: str = ""
    request_shape: RequestShape = field(default_factory=_empty)
    request_verb: RequestVerb = RequestVerb.GET
    return_shape: ReturnShape = field(default_factory=_empty)
    return_object: str = ""

Declaration = Union[Global, Object, Method]


@dataclass(frozen=True)
class Project:
    global_: Global
    objects: Mapping[str, Object] = field(default_factory=_empty)
    methods: Mapping[str, Method] = field(default_factory=_empty)
