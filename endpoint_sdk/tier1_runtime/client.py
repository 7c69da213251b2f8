"""
endpoint_sdk.tier1_runtime.client
───────────────────────────────────
Transport capability consumed by endpoints. A transport implements only
``send`` and ``base``; ``execute`` layers logging and success/failure
classification on top so every backend classifies responses identically.

Two flavours share the same contract:
    AsyncClient: ``await client.send(request)`` (non-blocking)
    Client:      ``client.send(request)`` (blocking)

Concurrent calls against one client are safe as long as ``send`` is.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from endpoint_sdk.tier0_core.errors import ServerResponseError
from endpoint_sdk.tier0_core.http import HTTP_SUCCESS_CODES, Request, Response
from endpoint_sdk.tier0_core.logging import get_logger
from endpoint_sdk.tier0_core.redact import redact_headers, scrub_string

log = get_logger(__name__)


def check_response(response: Response) -> Response:
    """
    Return *response* if its status is in 200..208, otherwise raise
    ServerResponseError with the status code and the body decoded as text.
    """
    if response.status_code not in HTTP_SUCCESS_CODES:
        raise ServerResponseError(
            status_code=response.status_code,
            content=response.text(),
        )
    return response


def _log_sending(request: Request) -> None:
    log.info(
        "client.sending",
        method=request.method.value,
        url=scrub_string(str(request.url)),
        body_bytes=request.body_size,
        headers=redact_headers(request.headers),
    )


def _log_received(response: Response) -> None:
    log.info(
        "client.received",
        status_code=response.status_code,
        body_bytes=len(response.body),
    )


class AsyncClient(ABC):
    """Non-blocking transport capability."""

    @property
    @abstractmethod
    def base(self) -> str:
        """Base URL every endpoint path is joined onto."""

    @abstractmethod
    async def send(self, request: Request) -> Response:
        """
        Send *request* and return the raw response. Implementations must
        consolidate their own failures into ClientError subclasses.
        """

    async def execute(self, request: Request) -> Response:
        _log_sending(request)
        response = await self.send(request)
        _log_received(response)
        return check_response(response)


class Client(ABC):
    """Blocking transport capability."""

    @property
    @abstractmethod
    def base(self) -> str:
        """Base URL every endpoint path is joined onto."""

    @abstractmethod
    def send(self, request: Request) -> Response:
        """
        Send *request* and return the raw response. Implementations must
        consolidate their own failures into ClientError subclasses.
        """

    def execute(self, request: Request) -> Response:
        _log_sending(request)
        response = self.send(request)
        _log_received(response)
        return check_response(response)


__sdk_export__ = {
    "exports": ["AsyncClient", "Client", "check_response"],
    "description": "Abstract transports with shared response classification",
    "tier": "tier1_runtime",
    "module": "client",
}
