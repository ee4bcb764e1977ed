"""
Contract Registry - Single source of truth for route contracts.

Each endpoint has a RouteContext subclass declaring:
- Query parameters and headers (what the client sends)
- Response variants (what the handler may return)
- request_body_type / default_content_type (how the body is decoded)

Declarations are discovered once, when the subclass is defined, and
stored on the class as its explicit field list. Nothing is introspected
per request. Concrete contracts register themselves in CONTRACTS under
their name so documentation tooling can enumerate them.
"""

import logging
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Type

from flask import Response
from pydantic import BaseModel, ConfigDict

from .params import AbstractHeader, AbstractQueryParam
from .responses import AbstractResponseContext
from ..utils.normalize import ContractConfigurationError
from .validate import validate_unique


logger = logging.getLogger('typed_routes.contracts')


class EmptyRequestBody(BaseModel):
    """Request body type for routes that do not read a body."""
    model_config = ConfigDict(frozen=True, extra='ignore')


class ResponseTuple(NamedTuple):
    """Status, content type and body type discovered from a response variant."""
    status_code: int
    content_type: Optional[str]
    body_type: Any


class RouteContext:
    """
    A RouteContext holds the contract for a particular route/endpoint.

    Declare the accepted inputs and possible responses as class attributes.
    The class itself is the shared, read-only contract: it is never
    instantiated per request.

    **Example** (a context for a GET endpoint):

        class SayHelloContext(RouteContext):
            arg = StringQueryParam("arg")

            success = ResponseContext.with_status(200, content_type="text/plain")

            bad_request = CannedResponse(
                Response(status=400, mimetype="text/plain")
            )

    Pass ``abstract=True`` in the class statement for shared bases that
    should not be registered:

        class JSONRouteContext(RouteContext, abstract=True):
            default_content_type = "application/json"
    """

    name: str = "RouteContext"
    request_body_type: Any = EmptyRequestBody
    default_content_type: Optional[str] = None

    _query_params: Dict[str, AbstractQueryParam] = {}
    _headers: Dict[str, AbstractHeader] = {}
    _responses: Dict[str, AbstractResponseContext] = {}
    _response_tuples: Optional[Tuple[ResponseTuple, ...]] = None

    def __init_subclass__(cls, abstract: bool = False, **kwargs):
        super().__init_subclass__(**kwargs)
        if 'name' not in cls.__dict__:
            cls.name = cls.__name__

        query_params, headers, responses = _discover_fields(cls)

        validate_unique(
            ((attr, param.query_key) for attr, param in query_params.items()),
            "query parameter",
            cls.name,
        )
        validate_unique(
            ((attr, header.name.lower()) for attr, header in headers.items()),
            "header",
            cls.name,
        )

        cls._query_params = query_params
        cls._headers = headers
        cls._responses = responses
        cls._response_tuples = None

        if not abstract:
            register_contract(cls)

    @classmethod
    def request_query_params(cls) -> Tuple[AbstractQueryParam, ...]:
        """Every declared query-kind parameter."""
        return tuple(cls._query_params.values())

    @classmethod
    def request_headers(cls) -> Tuple[AbstractHeader, ...]:
        """Every declared header."""
        return tuple(cls._headers.values())

    @classmethod
    def response_variants(cls) -> Tuple[AbstractResponseContext, ...]:
        """Every declared response variant."""
        return tuple(cls._responses.values())

    @classmethod
    def fields(cls) -> Dict[str, Any]:
        """Declared descriptors keyed by attribute name."""
        return {**cls._query_params, **cls._headers, **cls._responses}

    @classmethod
    def declares(cls, descriptor: Any) -> bool:
        """True if descriptor is one of this contract's declarations (by identity)."""
        return any(declared is descriptor for declared in cls.fields().values())

    @classmethod
    def require_declared(cls, descriptor: Any, kind: type) -> None:
        """
        Raises:
            ContractConfigurationError: If descriptor is not a `kind`
                declared on this contract
        """
        if not isinstance(descriptor, kind) or not cls.declares(descriptor):
            raise ContractConfigurationError(
                f"{descriptor!r} is not declared on contract '{cls.name}'",
                field=getattr(descriptor, 'name', None),
            )

    @classmethod
    def response_body_tuples(cls) -> Tuple[ResponseTuple, ...]:
        """
        (status_code, content_type, body_type) for every response variant.

        Each variant's configure step is applied to a fresh response with
        the default status and no content type; the result is read back.
        Computed once per contract class.
        """
        if cls.__dict__.get('_response_tuples') is None:
            cls._response_tuples = tuple(
                _describe_variant(variant) for variant in cls._responses.values()
            )
        return cls._response_tuples


def _discover_fields(cls: type) -> Tuple[
    Dict[str, AbstractQueryParam],
    Dict[str, AbstractHeader],
    Dict[str, AbstractResponseContext],
]:
    """Classify declared class attributes, base classes first."""
    query_params: Dict[str, AbstractQueryParam] = {}
    headers: Dict[str, AbstractHeader] = {}
    responses: Dict[str, AbstractResponseContext] = {}

    for klass in reversed(cls.__mro__):
        for attr, value in vars(klass).items():
            if attr.startswith('__'):
                continue
            # A redeclared attribute replaces the inherited one, whatever its kind
            for bucket in (query_params, headers, responses):
                bucket.pop(attr, None)
            if isinstance(value, AbstractQueryParam):
                query_params[attr] = value
            elif isinstance(value, AbstractHeader):
                headers[attr] = value
            elif isinstance(value, AbstractResponseContext):
                responses[attr] = value

    return query_params, headers, responses


def _blank_response() -> Response:
    response = Response()
    response.headers.pop('Content-Type', None)
    return response


def _describe_variant(variant: AbstractResponseContext) -> ResponseTuple:
    response = variant.apply(_blank_response())
    return ResponseTuple(
        status_code=response.status_code,
        content_type=response.mimetype or None,
        body_type=variant.body_type,
    )


# Global registry instance
CONTRACTS: Dict[str, Type[RouteContext]] = {}


def _qualified_name(context: type) -> str:
    return f"{context.__module__}.{context.__qualname__}"


def register_contract(context: Type[RouteContext]) -> None:
    """
    Register a route contract under its name.

    Called automatically for every concrete RouteContext subclass.
    Re-registration replaces the previous contract. Redefining the same
    class (module reload) is logged at DEBUG; a different class taking an
    existing name is logged at WARNING.
    """
    existing = CONTRACTS.get(context.name)
    if existing is not None and existing is not context:
        if _qualified_name(existing) == _qualified_name(context):
            logger.debug(f"Replacing registered contract '{context.name}'")
        else:
            logger.warning(
                f"Contract name '{context.name}' of {_qualified_name(context)} "
                f"replaces {_qualified_name(existing)}",
                extra={
                    "event": "contract_name_collision",
                    "contract": context.name,
                    "previous": _qualified_name(existing),
                }
            )
    CONTRACTS[context.name] = context


def get_contract(name: str) -> Optional[Type[RouteContext]]:
    """
    Get contract for an endpoint.

    Args:
        name: The contract name (class name unless overridden)

    Returns:
        RouteContext subclass if found, None otherwise
    """
    return CONTRACTS.get(name)


def list_contracts() -> List[str]:
    """Get list of registered contract names."""
    return list(CONTRACTS.keys())


class JSONRouteContext(RouteContext, abstract=True):
    """A RouteContext whose request body defaults to JSON."""
    default_content_type = "application/json"
