"""
Route contract package.

Provides parameter descriptors, response variants, and the RouteContext
base class with its process-wide registry.
"""

from .params import (
    AbstractQueryParam,
    AbstractHeader,
    QueryParam,
    StringQueryParam,
    IntegerQueryParam,
    NumberQueryParam,
    CSVQueryParam,
    NestedQueryParam,
    Header,
    StringHeader,
    IntegerHeader,
    NumberHeader,
    CSVHeader,
)
from .responses import (
    AbstractResponseContext,
    ResponseContext,
    CannedResponse,
    EmptyResponseBody,
)
from .registry import (
    RouteContext,
    JSONRouteContext,
    EmptyRequestBody,
    ResponseTuple,
    register_contract,
    get_contract,
    list_contracts,
    CONTRACTS,
)
from .validate import ContractConfigurationError

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
    'AbstractResponseContext',
    'ResponseContext',
    'CannedResponse',
    'EmptyResponseBody',
    'RouteContext',
    'JSONRouteContext',
    'EmptyRequestBody',
    'ResponseTuple',
    'register_contract',
    'get_contract',
    'list_contracts',
    'CONTRACTS',
    'ContractConfigurationError',
]
