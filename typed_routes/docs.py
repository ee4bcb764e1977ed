"""
Documentation export for typed routes.

Serializes route contracts and registered routes into JSON-ready dicts
that API documentation generators can consume:

    routes = TypedRoutes(app)
    ...
    payload = {"routes": describe_routes(routes.routes)}
    json.dumps(payload, indent=2, sort_keys=True)
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Type, get_args, get_origin

from .contracts.params import AbstractQueryParam, NestedQueryParam, QueryParam
from .contracts.registry import EmptyRequestBody, RouteContext
from .contracts.responses import EmptyResponseBody
from .routing import TYPED_PARAMETER_PREFIX, TypedRoute


def _normalize_type(type_value) -> str:
    if type_value is None:
        return "None"
    if type_value is EmptyRequestBody or type_value is EmptyResponseBody:
        return "empty"
    origin = get_origin(type_value)
    if origin is not None:
        args = ", ".join(_normalize_type(arg) for arg in get_args(type_value))
        return f"{_normalize_type(origin)}[{args}]" if args else _normalize_type(origin)
    if isinstance(type_value, type):
        return type_value.__name__
    return str(type_value)


def _normalize_value(value):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_normalize_value(v) for v in value]
    if isinstance(value, dict):
        return {k: _normalize_value(v) for k, v in value.items()}
    return value


def _serialize_param(descriptor) -> Dict[str, Any]:
    serialized = {
        "name": descriptor.name,
        "type": descriptor.semantic_type.label,
        "default": _normalize_value(descriptor.default),
        "allowed_values": _normalize_value(descriptor.allowed_values),
        "description": descriptor.description,
    }
    if isinstance(descriptor, AbstractQueryParam):
        serialized["key"] = descriptor.query_key
    if isinstance(descriptor, (QueryParam, NestedQueryParam)):
        serialized["required"] = bool(descriptor.required)
        serialized["deprecated"] = bool(descriptor.deprecated)
    if isinstance(descriptor, NestedQueryParam):
        serialized["path"] = list(descriptor.path)
    return serialized


def describe_contract(context: Type[RouteContext]) -> Dict[str, Any]:
    """
    Serialize a route contract.

    Returns:
        Dict with name, query_params, headers, responses, request_body_type
        and default_content_type
    """
    return {
        "name": context.name,
        "query_params": [_serialize_param(p) for p in context.request_query_params()],
        "headers": [_serialize_param(h) for h in context.request_headers()],
        "responses": [
            {
                "status_code": status_code,
                "content_type": content_type,
                "body_type": _normalize_type(body_type),
            }
            for status_code, content_type, body_type in context.response_body_tuples()
        ],
        "request_body_type": _normalize_type(context.request_body_type),
        "default_content_type": context.default_content_type,
    }


def describe_route(route: TypedRoute) -> Dict[str, Any]:
    """Serialize a registered route together with its contract."""
    path_parameters = []
    for key, meta in route.user_info.items():
        if not key.startswith(TYPED_PARAMETER_PREFIX):
            continue
        path_parameters.append({
            "name": key[len(TYPED_PARAMETER_PREFIX):],
            "type": _normalize_type(meta.type),
            "description": meta.description,
        })

    return {
        "method": route.method,
        "path": route.path_string,
        "rule": route.rule,
        "endpoint": route.endpoint,
        "path_parameters": path_parameters,
        "contract": describe_contract(route.context),
    }


def describe_routes(routes: Iterable[TypedRoute]) -> List[Dict[str, Any]]:
    """Serialize routes, sorted by rule then method."""
    ordered = sorted(routes, key=lambda route: (route.rule, route.method))
    return [describe_route(route) for route in ordered]
