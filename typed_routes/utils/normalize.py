"""
Input Coercion Utilities
========================

Single source of truth for turning raw request strings into typed values.
All parsing of query string and header values happens here, nowhere else.

Unlike validation, coercion never raises: a value that cannot be parsed
as the declared type yields None, and callers fall back to a default.

Usage:
    from typed_routes.utils.normalize import coerce_value, resolve_semantic_type

    semantic_type = resolve_semantic_type(List[int])
    coerce_value("1,2,3", semantic_type)   # [1, 2, 3]
    coerce_value("1,x,3", semantic_type)   # None
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Union, get_args, get_origin


class ContractConfigurationError(ValueError):
    """Raised when a route contract is declared incorrectly."""

    def __init__(self, message: str, field: str = None, received_value=None):
        super().__init__(message)
        self.field = field
        self.received_value = received_value


_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_FLOAT_SPECIALS = {"inf", "+inf", "-inf", "infinity", "+infinity", "-infinity", "nan", "+nan", "-nan"}

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")

SCALAR_TYPES = (str, int, float, bool)

_TYPE_NAMES = {
    'str': str,
    'int': int,
    'float': float,
    'bool': bool,
}


@dataclass(frozen=True)
class SemanticType:
    """Target type of a parameter: a scalar, or a comma-separated list of one."""
    scalar: type
    is_list: bool = False

    @property
    def label(self) -> str:
        if self.is_list:
            return f"list[{self.scalar.__name__}]"
        return self.scalar.__name__


def resolve_semantic_type(declared: Any) -> SemanticType:
    """
    Resolve a declared parameter type to a SemanticType.

    Accepts:
        - str, int, float, bool
        - List[int], list[float], ... (list of a supported scalar)
        - list (list of str)
        - String names: 'str', 'int', 'float', 'bool', 'list', 'list[int]'
        - An existing SemanticType (passthrough)

    Raises:
        ContractConfigurationError: If the declaration is not supported
    """
    if isinstance(declared, SemanticType):
        return declared

    if isinstance(declared, str):
        name = declared.strip().lower()
        if name in _TYPE_NAMES:
            return SemanticType(_TYPE_NAMES[name])
        if name == 'list':
            return SemanticType(str, is_list=True)
        if name.startswith('list[') and name.endswith(']'):
            item = _TYPE_NAMES.get(name[5:-1].strip())
            if item is not None:
                return SemanticType(item, is_list=True)
        raise ContractConfigurationError(
            f"Unsupported parameter type name: {declared!r}",
            received_value=declared,
        )

    if declared in SCALAR_TYPES:
        return SemanticType(declared)

    if declared is list:
        return SemanticType(str, is_list=True)

    if get_origin(declared) in (list, List):
        args = get_args(declared)
        item = args[0] if args else str
        if item in SCALAR_TYPES:
            return SemanticType(item, is_list=True)

    raise ContractConfigurationError(
        f"Unsupported parameter type: {declared!r} "
        f"(expected one of str, int, float, bool or a list of them)",
        received_value=declared,
    )


def coerce_scalar(raw: Optional[str], target: type) -> Optional[Any]:
    """
    Convert a raw string to a scalar of the target type.

    Parsing is strict and locale-independent: no whitespace trimming,
    no digit separators, ASCII digits only.

    Returns:
        The parsed value, or None if raw is None or not a valid literal
    """
    if raw is None:
        return None
    if target is str:
        return raw
    if target is int:
        if not _INT_PATTERN.fullmatch(raw):
            return None
        try:
            return int(raw)
        except ValueError:
            # Longer than sys.get_int_max_str_digits()
            return None
    if target is float:
        if _FLOAT_PATTERN.fullmatch(raw) or raw.lower() in _FLOAT_SPECIALS:
            return float(raw)
        return None
    if target is bool:
        lower = raw.lower()
        if lower in _TRUE_VALUES:
            return True
        if lower in _FALSE_VALUES:
            return False
        return None
    return None


def split_list(raw: str, separator: str = ",") -> List[str]:
    """
    Split a comma-separated value.

    Items are not trimmed and empty items are kept, so an empty string
    yields a single empty item: split_list("") == [""].
    """
    return raw.split(separator)


def coerce_list(
    raw: Optional[str],
    item_type: type,
    *,
    separator: str = ","
) -> Optional[List[Any]]:
    """
    Convert a comma-separated string to a list of item_type.

    The list is all-or-nothing: if any item fails to coerce,
    the whole list coerces to None.
    """
    if raw is None:
        return None
    items = []
    for item in split_list(raw, separator):
        value = coerce_scalar(item, item_type)
        if value is None:
            return None
        items.append(value)
    return items


def coerce_value(raw: Optional[str], semantic_type: SemanticType) -> Union[Any, List[Any], None]:
    """Coerce a raw string according to a SemanticType."""
    if semantic_type.is_list:
        return coerce_list(raw, semantic_type.scalar)
    return coerce_scalar(raw, semantic_type.scalar)
