"""
Parameter descriptors - declared inputs of a route contract.

Each descriptor names one input read from the request (a query string
entry, a nested query string entry, or a header) and the type its raw
string value is coerced to.

Usage:
    class SearchContext(RouteContext):
        term = StringQueryParam("q", description="Search term")
        page = IntegerQueryParam("page", default=1)
        ids = CSVQueryParam("ids", int)
        status = NestedQueryParam(("filter", "status"), allowed_values=["open", "closed"])
        api_version = IntegerHeader("X-Api-Version", default=1)

allowed_values is documentation metadata only. It is stored as strings
for rendering and is never checked against request values.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Sequence, Tuple

from ..utils.normalize import SemanticType, resolve_semantic_type
from .validate import validate_name, validate_path


def _allowed_values_as_strings(values: Optional[Sequence[Any]]) -> Optional[Tuple[str, ...]]:
    if values is None:
        return None
    if isinstance(values, str):
        values = (values,)
    return tuple(str(value) for value in values)


def _init_descriptor(descriptor) -> None:
    """Resolve the semantic type and freeze allowed_values on a descriptor."""
    semantic_type = resolve_semantic_type(descriptor.type)
    if descriptor.force_list and not semantic_type.is_list:
        semantic_type = SemanticType(semantic_type.scalar, is_list=True)
    object.__setattr__(descriptor, 'semantic_type', semantic_type)
    object.__setattr__(
        descriptor, 'allowed_values', _allowed_values_as_strings(descriptor.allowed_values)
    )


class AbstractQueryParam:
    """A descriptor whose value is read from the query string."""

    @property
    def query_key(self) -> str:
        raise NotImplementedError


class AbstractHeader:
    """A descriptor whose value is read from a request header."""


@dataclass(frozen=True, eq=False)
class QueryParam(AbstractQueryParam):
    """
    A query parameter with an associated type.

    e.x.

        {path}?param=hello

    Args:
        name: The part before the equals sign
        type: str, int, float, bool, or a list of one of those
        description: Optional description for documentation
        default: Value used when the parameter is absent or malformed
        allowed_values: Finite list of allowed values (documentation only)
        required: Documentation flag
        deprecated: Documentation flag
    """
    force_list: ClassVar[bool] = False

    name: str
    type: Any = str
    description: Optional[str] = None
    default: Any = None
    allowed_values: Optional[Sequence[Any]] = None
    required: bool = False
    deprecated: bool = False
    semantic_type: SemanticType = field(init=False, repr=False)

    def __post_init__(self):
        validate_name(self.name, "query parameter")
        _init_descriptor(self)

    @property
    def query_key(self) -> str:
        return self.name


@dataclass(frozen=True, eq=False)
class StringQueryParam(QueryParam):
    """A query parameter with a single value: ``{path}?param=hello``"""
    type: Any = str


@dataclass(frozen=True, eq=False)
class IntegerQueryParam(QueryParam):
    """A query parameter with a single integer value: ``{path}?param=1``"""
    type: Any = int


@dataclass(frozen=True, eq=False)
class NumberQueryParam(QueryParam):
    """A query parameter with a single number, not necessarily an integer: ``{path}?param=10.345``"""
    type: Any = float


@dataclass(frozen=True, eq=False)
class CSVQueryParam(QueryParam):
    """
    A query parameter whose value is a comma-separated list.

    ``type`` is the item type: CSVQueryParam("ids", int) reads
    ``{path}?ids=1,2,3`` as [1, 2, 3].
    """
    force_list: ClassVar[bool] = True

    type: Any = str


@dataclass(frozen=True, eq=False)
class NestedQueryParam(AbstractQueryParam):
    """
    A query parameter whose value is nested in an object.

    e.x.

        {path}?param[hello]=hi+there

    In this example, the path would be ("param", "hello").
    """
    force_list: ClassVar[bool] = False

    path: Tuple[str, ...]
    type: Any = str
    description: Optional[str] = None
    default: Any = None
    allowed_values: Optional[Sequence[Any]] = None
    required: bool = False
    deprecated: bool = False
    semantic_type: SemanticType = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'path', validate_path(self.path))
        _init_descriptor(self)

    @classmethod
    def at(cls, *path: str, **kwargs) -> 'NestedQueryParam':
        """Build from path segments: NestedQueryParam.at("filter", "status")."""
        return cls(path, **kwargs)

    @property
    def name(self) -> str:
        """The first path component."""
        return self.path[0]

    @property
    def query_key(self) -> str:
        return self.path[0] + "".join(f"[{segment}]" for segment in self.path[1:])


@dataclass(frozen=True, eq=False)
class Header(AbstractHeader):
    """
    A request header with an associated type.

    e.x.

        Header-Name: hello
    """
    force_list: ClassVar[bool] = False

    name: str
    type: Any = str
    description: Optional[str] = None
    default: Any = None
    allowed_values: Optional[Sequence[Any]] = None
    semantic_type: SemanticType = field(init=False, repr=False)

    def __post_init__(self):
        validate_name(self.name, "header")
        _init_descriptor(self)


@dataclass(frozen=True, eq=False)
class StringHeader(Header):
    """A header with a single value: ``Header-Name: hello``"""
    type: Any = str


@dataclass(frozen=True, eq=False)
class IntegerHeader(Header):
    """A header with a single integer value: ``Header-Name: 1``"""
    type: Any = int


@dataclass(frozen=True, eq=False)
class NumberHeader(Header):
    """A header with a single number value: ``Header-Name: 10.345``"""
    type: Any = float


@dataclass(frozen=True, eq=False)
class CSVHeader(Header):
    """A header whose value is a comma-separated list: ``Header-Name: hello,world``"""
    force_list: ClassVar[bool] = True

    type: Any = str


__all__ = [
    'AbstractQueryParam',
    'AbstractHeader',
    'QueryParam',
    'StringQueryParam',
    'IntegerQueryParam',
    'NumberQueryParam',
    'CSVQueryParam',
    'NestedQueryParam',
    'Header',
    'StringHeader',
    'IntegerHeader',
    'NumberHeader',
    'CSVHeader',
]
