"""
Typed routes for Flask.

Declare a route's inputs and outputs once as a RouteContext, register the
handler through TypedRoutes, and read the request through a TypedRequest:

    class ShowContext(RouteContext):
        echo = IntegerQueryParam("echo")
        success = ResponseContext.with_status(200, content_type="text/plain")

    routes = TypedRoutes(app)

    @routes.get("hello", context=ShowContext)
    def show(req: TypedRequest):
        echo = req.query[ShowContext.echo]
        return req.response[ShowContext.success].encode(str(echo) if echo is not None else "Hello")
"""

from .config import Config, get_max_body_size
from .contracts import (
    AbstractHeader,
    AbstractQueryParam,
    AbstractResponseContext,
    CannedResponse,
    ContractConfigurationError,
    CSVHeader,
    CSVQueryParam,
    EmptyRequestBody,
    EmptyResponseBody,
    Header,
    IntegerHeader,
    IntegerQueryParam,
    JSONRouteContext,
    NestedQueryParam,
    NumberHeader,
    NumberQueryParam,
    QueryParam,
    ResponseContext,
    ResponseTuple,
    RouteContext,
    StringHeader,
    StringQueryParam,
    get_contract,
    list_contracts,
)
from .docs import describe_contract, describe_route, describe_routes
from .paths import ParameterMeta, TypedPathComponent, param
from .request import TypedRequest
from .response import ResponseBuilder, ResponseEncoder
from .routing import TypedRoute, TypedRoutes

__all__ = [
    'Config',
    'get_max_body_size',
    'AbstractHeader',
    'AbstractQueryParam',
    'AbstractResponseContext',
    'CannedResponse',
    'ContractConfigurationError',
    'CSVHeader',
    'CSVQueryParam',
    'EmptyRequestBody',
    'EmptyResponseBody',
    'Header',
    'IntegerHeader',
    'IntegerQueryParam',
    'JSONRouteContext',
    'NestedQueryParam',
    'NumberHeader',
    'NumberQueryParam',
    'QueryParam',
    'ResponseContext',
    'ResponseTuple',
    'RouteContext',
    'StringHeader',
    'StringQueryParam',
    'get_contract',
    'list_contracts',
    'describe_contract',
    'describe_route',
    'describe_routes',
    'ParameterMeta',
    'TypedPathComponent',
    'param',
    'TypedRequest',
    'ResponseBuilder',
    'ResponseEncoder',
    'TypedRoute',
    'TypedRoutes',
]
