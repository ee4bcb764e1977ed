"""
Definition-time checks for route contracts.

Contracts are shared process-wide, so a misdeclared contract is a
programmer error: these checks run when descriptors are constructed and
when a RouteContext subclass is defined, never per request.

Checks:
- Parameter names and nested paths are non-empty
- Query keys are unique within a contract
- Header names are unique (case-insensitive) within a contract
"""

from typing import Dict, Iterable, List, Sequence, Tuple

from ..utils.normalize import ContractConfigurationError


def validate_name(name: str, kind: str) -> None:
    """
    Validate a parameter or header name.

    Raises:
        ContractConfigurationError: If name is not a non-empty string
    """
    if not isinstance(name, str) or not name:
        raise ContractConfigurationError(
            f"{kind} name must be a non-empty string, got {name!r}",
            field=kind,
            received_value=name,
        )


def validate_path(path: Sequence[str]) -> Tuple[str, ...]:
    """
    Validate the path of a nested query parameter.

    Returns:
        The path as a tuple

    Raises:
        ContractConfigurationError: If the path or any segment is empty
    """
    if isinstance(path, str):
        path = (path,)
    path = tuple(path)
    if not path:
        raise ContractConfigurationError(
            "Nested query parameter path must have at least one segment",
            field="path",
            received_value=path,
        )
    for segment in path:
        if not isinstance(segment, str) or not segment:
            raise ContractConfigurationError(
                f"Nested query parameter path segments must be non-empty strings, got {path!r}",
                field="path",
                received_value=path,
            )
    return path


def validate_unique(keys: Iterable[Tuple[str, str]], kind: str, context_name: str) -> None:
    """
    Check that no two declarations share a key.

    Args:
        keys: (attribute_name, key) pairs in declaration order
        kind: Human-readable kind for error messages ("query parameter")
        context_name: Contract name for error messages

    Raises:
        ContractConfigurationError: Listing every duplicated key
    """
    seen: Dict[str, str] = {}
    violations: List[str] = []

    for attribute, key in keys:
        if key in seen:
            violations.append(f"'{key}' declared by both '{seen[key]}' and '{attribute}'")
        else:
            seen[key] = attribute

    if violations:
        raise ContractConfigurationError(
            f"Duplicate {kind} in contract '{context_name}': " + "; ".join(violations),
            field=kind,
        )
