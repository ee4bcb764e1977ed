"""
Shared helpers for typed routes.
"""

from .normalize import (
    ContractConfigurationError,
    SemanticType,
    coerce_list,
    coerce_scalar,
    coerce_value,
    resolve_semantic_type,
    split_list,
)

__all__ = [
    'ContractConfigurationError',
    'SemanticType',
    'coerce_list',
    'coerce_scalar',
    'coerce_value',
    'resolve_semantic_type',
    'split_list',
]
