"""
Typed path components.

A route path is a sequence of components, each one of:
- constant:  "users"
- parameter: ":id"  (with a type and description for documentation)
- anything:  "*"    (one segment, value discarded)
- catchall:  "**"   (one or more segments, stored as the 'catchall' parameter)

Strings are parsed with the same notation, and a string containing "/"
expands to several components:

    routes.get("users", param("id", int, "The user id"), "posts", context=...)
    routes.get("users/:id/posts", context=...)

Parameter type and description are metadata for documentation tooling.
They do not change how the route matches: every parameter matches a
single raw path segment.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable, List, Optional, Union


class ComponentKind(Enum):
    CONSTANT = "constant"
    PARAMETER = "parameter"
    ANYTHING = "anything"
    CATCHALL = "catchall"


CATCHALL_PARAMETER = "catchall"


@dataclass(frozen=True)
class ParameterMeta:
    """Type and optional description of a route parameter."""
    type: Any = str
    description: Optional[str] = None


@dataclass(frozen=True)
class TypedPathComponent:
    """A strongly-typed path component."""
    kind: ComponentKind
    value: str = ""
    meta: Optional[ParameterMeta] = None

    @classmethod
    def constant(cls, value: str) -> 'TypedPathComponent':
        return cls(ComponentKind.CONSTANT, value)

    @classmethod
    def parameter(cls, name: str, type: Any = str, description: Optional[str] = None) -> 'TypedPathComponent':
        return cls(ComponentKind.PARAMETER, name, ParameterMeta(type, description))

    @classmethod
    def anything(cls) -> 'TypedPathComponent':
        return cls(ComponentKind.ANYTHING)

    @classmethod
    def catchall(cls) -> 'TypedPathComponent':
        return cls(ComponentKind.CATCHALL)

    @classmethod
    def parse(cls, segment: str) -> 'TypedPathComponent':
        """Parse one segment: ':name', '*', '**' or a constant."""
        if segment == "**":
            return cls.catchall()
        if segment == "*":
            return cls.anything()
        if segment.startswith(":") and len(segment) > 1:
            return cls.parameter(segment[1:])
        return cls.constant(segment)

    @property
    def is_parameter(self) -> bool:
        return self.kind is ComponentKind.PARAMETER

    @property
    def parameter_type(self) -> Any:
        """The type associated with the route parameter, if any."""
        return self.meta.type if self.is_parameter else None

    def described(self, description: str) -> 'TypedPathComponent':
        """
        Add a description to this path component.

        Only has an effect on parameters; other components are returned unchanged.
        """
        if not self.is_parameter:
            return self
        return replace(self, meta=ParameterMeta(self.meta.type, description))

    def typed(self, type: Any) -> 'TypedPathComponent':
        """
        Set the type of this path component (str by default).

        Only has an effect on parameters; other components are returned unchanged.
        """
        if not self.is_parameter:
            return self
        return replace(self, meta=ParameterMeta(type, self.meta.description))

    def rule_segment(self, index: int) -> str:
        """The equivalent Flask URL rule segment."""
        if self.kind is ComponentKind.CONSTANT:
            return self.value
        if self.kind is ComponentKind.PARAMETER:
            return f"<{self.value}>"
        if self.kind is ComponentKind.ANYTHING:
            return f"<_anything{index}>"
        return f"<path:{CATCHALL_PARAMETER}>"

    def __str__(self) -> str:
        if self.kind is ComponentKind.PARAMETER:
            return f":{self.value}"
        if self.kind is ComponentKind.ANYTHING:
            return "*"
        if self.kind is ComponentKind.CATCHALL:
            return "**"
        return self.value


PathLike = Union[str, TypedPathComponent]


def param(name: str, type: Any = str, description: Optional[str] = None) -> TypedPathComponent:
    """Shorthand for TypedPathComponent.parameter()."""
    return TypedPathComponent.parameter(name, type, description)


def parse_path(components: Iterable[PathLike]) -> List[TypedPathComponent]:
    """Normalize strings and components into a flat component list."""
    parsed: List[TypedPathComponent] = []
    for component in components:
        if isinstance(component, TypedPathComponent):
            parsed.append(component)
            continue
        for segment in component.split("/"):
            if segment:
                parsed.append(TypedPathComponent.parse(segment))
    return parsed


def path_string(components: Iterable[TypedPathComponent]) -> str:
    """A path constructed from the components: 'users/:id/posts'."""
    return "/".join(str(component) for component in components)


def flask_rule(components: Iterable[TypedPathComponent]) -> str:
    """The Flask URL rule for the components: '/users/<id>/posts'."""
    return "/" + "/".join(
        component.rule_segment(index) for index, component in enumerate(components)
    )
