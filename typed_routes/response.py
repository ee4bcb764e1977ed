"""
Response building for typed routes.

The handler names which declared variant it wants; the builder returns an
encoder bound to that variant:

    return req.response[ShowContext.success].encode("Hello")
    return req.response[ShowContext.bad_request].encode()
    return await req.response[ShowContext.success].encode_async("Hello")

Encoding builds the body first and then applies the variant's configure
step, so status and headers set by the variant win over the body's
defaults. Canned variants emit their stored response and ignore any value.
"""

import weakref
from dataclasses import is_dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Optional, get_origin

from flask import Response, current_app
from pydantic import BaseModel, TypeAdapter

from .contracts.responses import AbstractResponseContext, CannedResponse, EmptyResponseBody

if TYPE_CHECKING:
    from .request import TypedRequest


_MISSING = object()


@lru_cache(maxsize=None)
def type_adapter(body_type: Any) -> TypeAdapter:
    """Shared pydantic TypeAdapter per body type."""
    return TypeAdapter(body_type)


def encode_body(value: Any) -> Response:
    """
    Build the wire encoding of a response body.

    - EmptyResponseBody: empty text/plain body
    - pydantic models and dataclasses: JSON via pydantic
    - anything else (str, bytes, dict, list, Response): Flask make_response
    """
    if isinstance(value, EmptyResponseBody):
        return Response(b"", mimetype="text/plain")
    if isinstance(value, BaseModel) or is_dataclass(value):
        return Response(type_adapter(type(value)).dump_json(value), mimetype="application/json")
    return current_app.make_response(value)


def _check_body_type(value: Any, body_type: Any) -> None:
    if get_origin(body_type) is None and isinstance(body_type, type):
        if not isinstance(value, body_type):
            raise TypeError(
                f"Response body must be {body_type.__name__}, got {type(value).__name__}"
            )


class ResponseEncoder:
    """Encodes a body for one declared response variant."""

    def __init__(self, variant: AbstractResponseContext):
        self.variant = variant

    @property
    def is_canned(self) -> bool:
        return isinstance(self.variant, CannedResponse)

    def encode(self, value: Any = _MISSING) -> Response:
        """
        Encode value and apply the variant's configure step.

        Canned variants take no value; one passed anyway is ignored.

        Raises:
            TypeError: If value is missing or not of the variant's body type
        """
        if self.is_canned:
            return self.variant.apply(Response())

        if value is _MISSING:
            if self.variant.body_type is not EmptyResponseBody:
                raise TypeError("encode() requires a body value for this response variant")
            value = EmptyResponseBody()

        _check_body_type(value, self.variant.body_type)
        return self.variant.apply(encode_body(value))

    async def encode_async(self, value: Any = _MISSING) -> Response:
        """Awaitable form of encode()."""
        return self.encode(value)

    def encode_empty(self) -> Response:
        """Encode an EmptyResponseBody."""
        return self.encode(EmptyResponseBody())

    async def encode_empty_async(self) -> Response:
        """Awaitable form of encode_empty()."""
        return self.encode_empty()


class ResponseBuilder:
    """Selects a declared response variant of the bound context."""

    def __init__(self, typed_request: 'TypedRequest'):
        self._context = typed_request.context
        self._typed_request = weakref.ref(typed_request)

    @property
    def typed_request(self) -> Optional['TypedRequest']:
        """The owning TypedRequest, or None once it has been released."""
        return self._typed_request()

    def get(self, variant: AbstractResponseContext) -> ResponseEncoder:
        """
        Get an encoder for a response variant declared on the bound context.

        Raises:
            ContractConfigurationError: If the variant is not declared
        """
        self._context.require_declared(variant, AbstractResponseContext)
        return ResponseEncoder(variant)

    def __getitem__(self, variant: AbstractResponseContext) -> ResponseEncoder:
        return self.get(variant)
