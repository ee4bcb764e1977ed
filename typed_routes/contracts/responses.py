"""
Response variant descriptors - declared outcomes of a route contract.

A variant pairs a configure step with the type of body the handler will
attach. The configure step receives a Flask Response and either mutates
it in place (returning None) or returns a replacement Response.

Two variants:
- ResponseContext: runs an arbitrary configure step over the encoded body
- CannedResponse: always replaces the response with a fixed, pre-built one

Usage:
    class ShowContext(RouteContext):
        success = ResponseContext.with_status(200, content_type="text/plain")
        bad_request = CannedResponse(Response(status=400, mimetype="text/plain"))
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from flask import Response


ConfigureStep = Callable[[Response], Optional[Response]]


@dataclass(frozen=True)
class EmptyResponseBody:
    """Body type for responses that carry no body."""


def copy_response(response: Response) -> Response:
    """Build an independent copy of a fully materialized response."""
    return Response(
        response=response.get_data(),
        status=response.status,
        headers=response.headers.copy(),
    )


class AbstractResponseContext:
    """A declared response outcome with a configure step and a body type."""

    body_type: Any

    def configure(self, response: Response) -> Optional[Response]:
        raise NotImplementedError

    def apply(self, response: Response) -> Response:
        """Run the configure step and return the resulting response."""
        configured = self.configure(response)
        return response if configured is None else configured


@dataclass(frozen=True, eq=False)
class ResponseContext(AbstractResponseContext):
    """
    A response variant configured by a closure.

    Args:
        configure: Step applied to the encoded response; may set status,
            headers, or return a replacement Response
        body_type: Type of the body the handler supplies at encode time
    """
    configure: ConfigureStep
    body_type: Any = str

    @classmethod
    def with_status(
        cls,
        status: int,
        *,
        content_type: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        body_type: Any = str,
    ) -> 'ResponseContext':
        """Variant that sets a status code and, optionally, content type and headers."""
        extra_headers = dict(headers or {})

        def configure(response: Response) -> None:
            response.status_code = status
            if content_type is not None:
                response.mimetype = content_type
            for name, value in extra_headers.items():
                response.headers[name] = value

        return cls(configure, body_type=body_type)


@dataclass(frozen=True, eq=False)
class CannedResponse(AbstractResponseContext):
    """
    A response variant that always sends a pre-determined response.

    Any body supplied at encode time is discarded. Each use gets a fresh
    copy so the stored response is never mutated by later processing.
    """
    response: Response
    body_type: Any = str

    def configure(self, response: Response) -> Response:
        return copy_response(self.response)
