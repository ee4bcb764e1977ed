"""
TypedRequest - a strongly-typed view over a Flask request.

Wraps the raw request together with the RouteContext bound to its route.
Query parameters and headers are read through the contract's descriptors:

    @routes.get("hello", context=ShowContext)
    def show(req: TypedRequest):
        echo = req.query[ShowContext.echo]          # Optional[int]
        version = req.header[ShowContext.version]   # Optional[int]
        ...

Typed access is best-effort: a value that is absent, or present but not
parseable as the declared type, resolves to the descriptor's default
(None when no default is declared). Handlers needing strict validation
check for None themselves.
"""

import logging
import weakref
from functools import cached_property
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from flask import Request, current_app, has_app_context
from werkzeug.exceptions import RequestEntityTooLarge, UnsupportedMediaType

from .config import Config, get_max_body_size
from .contracts.params import AbstractHeader, AbstractQueryParam
from .contracts.registry import EmptyRequestBody, RouteContext
from .response import ResponseBuilder, type_adapter
from .utils.normalize import coerce_value, resolve_semantic_type


logger = logging.getLogger('typed_routes.request')

C = TypeVar('C', bound=RouteContext)

BodyDecoder = Callable[[Request], Any]

_READ_CHUNK_SIZE = 64 * 1024


# =============================================================================
# BODY BUFFERING
# =============================================================================

def _body_is_buffered(request: Request) -> bool:
    # Werkzeug keeps the body here once get_data(cache=True) has run
    return getattr(request, '_cached_data', None) is not None


def collect_body(request: Request, max_size: int) -> bytes:
    """
    Buffer the request body in memory, bounded by max_size bytes.

    Bodies that were already buffered are returned as-is. Bodies without a
    Content-Length (chunked) are read at most max_size + 1 bytes at a time,
    so an oversized body is rejected without being read in full.

    Raises:
        RequestEntityTooLarge: If the body is larger than max_size
    """
    if _body_is_buffered(request):
        return request.get_data(cache=True)

    declared = request.content_length
    if declared is not None and declared > max_size:
        _log_oversized(request, declared, max_size)
        raise RequestEntityTooLarge(
            f"Request body of {declared} bytes exceeds the {max_size} byte limit"
        )

    stream = request.stream
    chunks: List[bytes] = []
    total = 0
    while True:
        chunk = stream.read(min(_READ_CHUNK_SIZE, max_size + 1 - total))
        if not chunk:
            break
        chunks.append(chunk)
        total += len(chunk)
        if total > max_size:
            _log_oversized(request, total, max_size)
            raise RequestEntityTooLarge(
                f"Request body exceeds the {max_size} byte limit"
            )

    data = b"".join(chunks)
    # Same cache get_data(cache=True) fills, so get_data/get_json/form reuse it
    request._cached_data = data
    return data


def _log_oversized(request: Request, size: int, max_size: int) -> None:
    logger.warning(
        f"Request body rejected: path={request.path} size={size} max={max_size}",
        extra={
            "event": "body_too_large",
            "path": request.path,
            "size": size,
            "max_size": max_size,
        }
    )


# =============================================================================
# BODY DECODING
# =============================================================================

def _decode_json(request: Request) -> Any:
    return request.get_json(force=True)


def _decode_form(request: Request) -> Dict[str, str]:
    # First value wins for repeated keys, as for query strings
    return request.form.to_dict()


def _decode_text(request: Request) -> str:
    return request.get_data(as_text=True)


def _decode_bytes(request: Request) -> bytes:
    return request.get_data()


BODY_DECODERS: Dict[str, BodyDecoder] = {
    'application/json': _decode_json,
    'application/x-www-form-urlencoded': _decode_form,
    'text/plain': _decode_text,
    'application/octet-stream': _decode_bytes,
}


def _decoder_for(mimetype: str) -> BodyDecoder:
    decoder = BODY_DECODERS.get(mimetype)
    if decoder is None and mimetype.endswith('+json'):
        decoder = _decode_json
    if decoder is None:
        raise UnsupportedMediaType(
            f"No body decoder for content type {mimetype or '(none)'!r}"
        )
    return decoder


# =============================================================================
# TYPED ACCESSORS
# =============================================================================

def _typed_value(raw: Optional[str], descriptor: Any, source: str) -> Any:
    if raw is None:
        return descriptor.default

    value = coerce_value(raw, descriptor.semantic_type)
    if value is None:
        if Config.LOG_COERCION_FAILURES:
            logger.debug(
                f"coercion_fallback: {source} '{descriptor.name}' = {raw!r} "
                f"is not {descriptor.semantic_type.label}, using default",
                extra={
                    "event": "coercion_fallback",
                    "source": source,
                    "param": descriptor.name,
                    "expected": descriptor.semantic_type.label,
                }
            )
        return descriptor.default
    return value


class _SubFacade:
    """
    Request-scoped accessor.

    Holds the raw request and contract it reads, plus a non-owning
    reference back to the TypedRequest that created it.
    """

    def __init__(self, typed_request: 'TypedRequest'):
        self._request = typed_request.underlying_request
        self._context = typed_request.context
        self._typed_request = weakref.ref(typed_request)

    @property
    def typed_request(self) -> Optional['TypedRequest']:
        """The owning TypedRequest, or None once it has been released."""
        return self._typed_request()


class Query(_SubFacade):
    """Typed access to the query string."""

    def raw(self, param: AbstractQueryParam) -> Optional[str]:
        """First raw value for the parameter's query key, or None."""
        return self._request.args.get(param.query_key)

    def get(self, param: AbstractQueryParam) -> Any:
        """
        Get a query value using a descriptor declared on the bound context.

        Returns:
            The coerced value, or the descriptor's default if the value is
            absent or cannot be coerced
        """
        self._context.require_declared(param, AbstractQueryParam)
        return _typed_value(self.raw(param), param, "query")

    def __getitem__(self, param: AbstractQueryParam) -> Any:
        return self.get(param)


class Headers(_SubFacade):
    """Typed access to request headers."""

    def raw(self, header: AbstractHeader) -> Optional[str]:
        """First raw value of the named header, or None."""
        values = self._request.headers.getlist(header.name)
        return values[0] if values else None

    def get(self, header: AbstractHeader) -> Any:
        """Same contract as Query.get(), reading the first value of the header."""
        self._context.require_declared(header, AbstractHeader)
        return _typed_value(self.raw(header), header, "header")

    def __getitem__(self, header: AbstractHeader) -> Any:
        return self.get(header)


# =============================================================================
# TYPED REQUEST
# =============================================================================

class TypedRequest(Generic[C]):
    """
    A strongly-typed Request.

    Created once per inbound request. The query, header and response
    accessors are created on first use and reused for the rest of the
    request. Unknown attributes are read from the underlying Flask request
    (req.method, req.path, ...).
    """

    def __init__(self, underlying_request: Request, context: Type[C]):
        self._request = underlying_request
        self.context = context

    @property
    def underlying_request(self) -> Request:
        return self._request

    @cached_property
    def query(self) -> Query:
        return Query(self)

    @cached_property
    def header(self) -> Headers:
        return Headers(self)

    @cached_property
    def response(self) -> ResponseBuilder:
        return ResponseBuilder(self)

    def __getattr__(self, name: str) -> Any:
        if name.startswith('_'):
            raise AttributeError(name)
        return getattr(self._request, name)

    def path_parameter(self, name: str, type: Any = None) -> Any:
        """
        Get a path parameter matched by the route.

        Args:
            name: Parameter name as declared in the route path
            type: Optional type to coerce to (same rules as query values)

        Returns:
            The raw string, the coerced value, or None if absent or malformed
        """
        raw = (self._request.view_args or {}).get(name)
        if type is None or raw is None:
            return raw
        return coerce_value(str(raw), resolve_semantic_type(type))

    def collect_body(self, max_size: Optional[int] = None) -> bytes:
        """Buffer the body (see collect_body()), defaulting to the configured limit."""
        if max_size is None:
            max_size = get_max_body_size(current_app if has_app_context() else None)
        return collect_body(self._request, max_size)

    async def collect_body_async(self, max_size: Optional[int] = None) -> bytes:
        """Awaitable form of collect_body()."""
        return self.collect_body(max_size)

    def _effective_mimetype(self) -> str:
        environ = self._request.environ
        if not environ.get('CONTENT_TYPE') and self.context.default_content_type:
            environ['CONTENT_TYPE'] = self.context.default_content_type
        return (environ.get('CONTENT_TYPE') or '').split(';')[0].strip().lower()

    def decode_body(self, decoder: Optional[BodyDecoder] = None) -> Any:
        """
        Decode the body into the contract's request_body_type.

        If the request declares no content type, the contract's
        default_content_type is set on the request before decoding.

        Args:
            decoder: Optional callable(request) -> data that replaces the
                content-type based decoder

        Raises:
            UnsupportedMediaType: No decoder for the content type
            BadRequest: Malformed body (from Flask)
            pydantic.ValidationError: Body does not match request_body_type
        """
        body_type = self.context.request_body_type
        if body_type is EmptyRequestBody:
            return EmptyRequestBody()

        if decoder is None:
            decoder = _decoder_for(self._effective_mimetype())
        data = decoder(self._request)
        return type_adapter(body_type).validate_python(data)
