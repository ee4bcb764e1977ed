"""
Typed route registration for Flask apps and blueprints.

Usage:
    routes = TypedRoutes(app)          # or TypedRoutes(blueprint)

    @routes.get("hello", context=ShowContext)
    def show(req: TypedRequest):
        return req.response[ShowContext.success].encode("Hello")

    @routes.post("users", param("id", int, "The user id"), context=UpdateContext)
    async def update(req: TypedRequest):
        ...

Handlers receive a TypedRequest instead of the raw request and may be
plain functions or coroutines (run through Flask's ensure_sync, which
needs the flask[async] extra). Unless collect_body=False, the body is
buffered before the handler runs so decode_body() always sees the full
body; bodies over the size limit fail with 413 before the handler runs.

Each typed path parameter's ParameterMeta is recorded in the route's
user_info under "typed_parameter:<name>" for documentation tooling.
"""

import logging
import weakref
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Type, Union

from flask import current_app, request

from .contracts.registry import RouteContext
from .paths import PathLike, TypedPathComponent, flask_rule, parse_path, path_string
from .request import TypedRequest


logger = logging.getLogger('typed_routes.routing')

TYPED_PARAMETER_PREFIX = "typed_parameter:"

# Endpoint names taken by typed routes, shared by every TypedRoutes on the same app or blueprint
_TAKEN_ENDPOINTS: "weakref.WeakKeyDictionary[Any, Set[str]]" = weakref.WeakKeyDictionary()

Handler = Callable[[TypedRequest], Any]


@dataclass
class TypedRoute:
    """Handle for a registered typed route."""
    method: str
    path: List[TypedPathComponent]
    rule: str
    endpoint: str
    context: Type[RouteContext]
    handler: Handler
    user_info: Dict[str, Any] = field(default_factory=dict)

    @property
    def path_string(self) -> str:
        return path_string(self.path)

    @property
    def request_body_type(self) -> Any:
        return self.context.request_body_type


class TypedRoutes:
    """
    Registers typed routes on a Flask app or blueprint.

    Args:
        scaffold: A Flask app or Blueprint (anything with add_url_rule)
        max_body_size: Body buffering limit for every route registered here;
            falls back to app.config['TYPED_ROUTES_MAX_BODY_SIZE'], then
            Config.DEFAULT_MAX_BODY_SIZE
    """

    def __init__(self, scaffold: Any, max_body_size: Optional[int] = None):
        self.scaffold = scaffold
        self.max_body_size = max_body_size
        self.routes: List[TypedRoute] = []
        self._endpoints: Set[str] = _TAKEN_ENDPOINTS.setdefault(scaffold, set())

    def get(self, *path: PathLike, context: Type[RouteContext], use: Optional[Handler] = None, **options):
        """A GET route. Decorator, or pass use=handler to get the TypedRoute."""
        return self.on("GET", path, context, use, **options)

    def post(self, *path: PathLike, context: Type[RouteContext], use: Optional[Handler] = None, **options):
        """A POST route. Decorator, or pass use=handler to get the TypedRoute."""
        return self.on("POST", path, context, use, **options)

    def put(self, *path: PathLike, context: Type[RouteContext], use: Optional[Handler] = None, **options):
        """A PUT route. Decorator, or pass use=handler to get the TypedRoute."""
        return self.on("PUT", path, context, use, **options)

    def patch(self, *path: PathLike, context: Type[RouteContext], use: Optional[Handler] = None, **options):
        """A PATCH route. Decorator, or pass use=handler to get the TypedRoute."""
        return self.on("PATCH", path, context, use, **options)

    def delete(self, *path: PathLike, context: Type[RouteContext], use: Optional[Handler] = None, **options):
        """A DELETE route. Decorator, or pass use=handler to get the TypedRoute."""
        return self.on("DELETE", path, context, use, **options)

    def on(
        self,
        method: str,
        path: Union[PathLike, Sequence[PathLike]],
        context: Type[RouteContext],
        use: Optional[Handler] = None,
        **options,
    ):
        """
        A route for any HTTP method.

        Returns:
            The TypedRoute when use= is given, otherwise a decorator that
            registers the handler and returns it unchanged
        """
        if use is not None:
            return self.add(method, path, context, use, **options)

        def decorator(handler: Handler) -> Handler:
            self.add(method, path, context, handler, **options)
            return handler

        return decorator

    def add(
        self,
        method: str,
        path: Union[PathLike, Sequence[PathLike]],
        context: Type[RouteContext],
        handler: Handler,
        *,
        collect_body: bool = True,
        max_body_size: Optional[int] = None,
        endpoint: Optional[str] = None,
    ) -> TypedRoute:
        """
        Register a handler for (method, path) bound to a route contract.

        Args:
            method: HTTP method
            path: Path components (strings and/or TypedPathComponents)
            context: The RouteContext subclass describing the route
            handler: Function or coroutine taking a TypedRequest
            collect_body: Buffer the body before calling the handler
            max_body_size: Per-route body buffering limit
            endpoint: Flask endpoint name (defaults to the handler name)
        """
        if not (isinstance(context, type) and issubclass(context, RouteContext)):
            raise TypeError(f"context must be a RouteContext subclass, got {context!r}")

        method = method.upper()
        if isinstance(path, (str, TypedPathComponent)):
            path = [path]
        components = parse_path(path)
        rule = flask_rule(components)
        endpoint = endpoint or self._endpoint_name(handler, method)
        body_limit = max_body_size if max_body_size is not None else self.max_body_size

        user_info = {
            f"{TYPED_PARAMETER_PREFIX}{component.value}": component.meta
            for component in components
            if component.is_parameter
        }

        def view(**_path_values):
            typed_request = TypedRequest(request._get_current_object(), context)
            if collect_body:
                typed_request.collect_body(body_limit)
            return current_app.ensure_sync(handler)(typed_request)

        view.__name__ = endpoint
        view.__doc__ = handler.__doc__
        view.user_info = user_info
        view.typed_context = context

        self.scaffold.add_url_rule(rule, endpoint=endpoint, view_func=view, methods=[method])
        self._endpoints.add(endpoint)

        route = TypedRoute(
            method=method,
            path=components,
            rule=rule,
            endpoint=endpoint,
            context=context,
            handler=handler,
            user_info=user_info,
        )
        self.routes.append(route)

        logger.debug(
            f"typed_route_registered: {method} {rule} -> {endpoint} ({context.name})",
            extra={
                "event": "typed_route_registered",
                "method": method,
                "rule": rule,
                "contract": context.name,
            }
        )
        return route

    def _endpoint_name(self, handler: Handler, method: str) -> str:
        base = getattr(handler, '__name__', 'typed_route').replace('.', '_')
        name = base
        suffix = 1
        while self._endpoint_taken(name):
            name = f"{base}_{method.lower()}" if suffix == 1 else f"{base}_{method.lower()}_{suffix}"
            suffix += 1
        return name

    def _endpoint_taken(self, name: str) -> bool:
        # Blueprints defer registration, so their own view_functions only cover bp.endpoint()
        return name in self._endpoints or name in getattr(self.scaffold, 'view_functions', {})
