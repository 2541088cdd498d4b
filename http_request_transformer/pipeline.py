"""Assembly of handlers into a single composed sender, and adapters to and from httpx transports.

Usage:
    import httpx
    from http_request_transformer import GZipCompressor, MiddlewareHandler, create_client

    async def add_header(request, next, cancellation_token):
        request.headers["X-Test-Header"] = "1"
        return await next(request, cancellation_token)

    async with create_client(httpx.AsyncHTTPTransport(), MiddlewareHandler(add_header), GZipCompressor()) as client:
        response = await client.post("https://example.com", content=b"...")
"""

import logging
from typing import Any, Iterable, Optional, Union

import httpx

from http_request_transformer.core.cancellation import CancellationToken
from http_request_transformer.exceptions import HandlerConfigurationError
from http_request_transformer.handlers.delegating_handler import DelegatingHandler
from http_request_transformer.types import Sender

logger = logging.getLogger(__name__)

# Request extension used to carry a cancellation token through an httpx.AsyncClient.
CANCELLATION_EXTENSION = "http_request_transformer.cancellation"

PrimarySender = Union[Sender, httpx.AsyncBaseTransport]
HandlerArgs = Union[Optional[DelegatingHandler], Iterable[Optional[DelegatingHandler]], None]


class TransportSender:
    """Terminal sender that transmits requests through an httpx transport."""

    def __init__(self, transport: httpx.AsyncBaseTransport, name: Optional[str] = None):
        if transport is None:
            raise HandlerConfigurationError("Transport must not be None.", handler_name=name)
        self.transport = transport
        self.name = name or f"{self.__class__.__name__}({transport.__class__.__name__})"

    async def send(self, request: httpx.Request, cancellation_token: CancellationToken) -> httpx.Response:
        logger.debug(f"Sending {request.method} {request.url} via {self.name}")
        return await cancellation_token.run(self.transport.handle_async_request(request))

    async def aclose(self) -> None:
        await self.transport.aclose()

    def __repr__(self) -> str:
        return f"<{self.name}>"


def _flatten_handlers(handlers: tuple) -> list:
    # Accept create_pipeline(primary, a, b) as well as create_pipeline(primary, [a, b]).
    # Handlers are pydantic models, which are themselves iterable.
    if len(handlers) != 1 or isinstance(handlers[0], (DelegatingHandler, str, bytes)):
        return list(handlers)
    if isinstance(handlers[0], Iterable):
        return list(handlers[0])
    return list(handlers)


def create_pipeline(primary: PrimarySender, *handlers: HandlerArgs) -> Sender:
    """
    Compose a primary (terminal) sender and an ordered list of handlers into a single sender.

    Handlers are given outermost first: the first handler sees each request first and
    its response last. Handlers are bound from the terminal end backwards, each one
    becoming the inner sender of the handler before it. None entries are skipped.

    Args:
        primary: The terminal sender, or an httpx transport to wrap in a TransportSender.
        *handlers: Handlers in outermost-first order, either as separate arguments or
            as a single iterable.

    Returns:
        The outermost handler, or the primary sender itself when there are no handlers.

    Raises:
        HandlerConfigurationError: If `primary` is None, or if a handler is already bound
            into another pipeline.
    """
    if primary is None:
        raise HandlerConfigurationError("Primary sender must not be None.")

    if isinstance(primary, httpx.AsyncBaseTransport):
        primary = TransportSender(primary)
    elif not isinstance(primary, Sender):
        raise HandlerConfigurationError(
            f"Primary sender must be an httpx transport or have a send() method, got {type(primary).__name__}."
        )

    next_sender: Sender = primary
    bound = []
    for handler in reversed(_flatten_handlers(handlers)):
        if handler is None:
            continue
        if not isinstance(handler, DelegatingHandler):
            raise HandlerConfigurationError(
                f"Pipeline handlers must be DelegatingHandler instances, got {type(handler).__name__}."
            )
        handler.bind(next_sender)
        next_sender = handler
        bound.append(handler.name)

    if bound:
        logger.debug(f"Composed pipeline: {' -> '.join(reversed(bound))} -> {getattr(primary, 'name', primary)}")
    return next_sender


class PipelineTransport(httpx.AsyncBaseTransport):
    """httpx transport that sends every request through a composed sender."""

    def __init__(self, sender: Sender):
        if sender is None:
            raise HandlerConfigurationError("Sender must not be None.")
        self.sender = sender

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        cancellation_token = request.extensions.get(CANCELLATION_EXTENSION)
        if not isinstance(cancellation_token, CancellationToken):
            cancellation_token = CancellationToken.none()
        return await self.sender.send(request, cancellation_token)

    async def aclose(self) -> None:
        # Walk down to the terminal sender; only a transport owned by the pipeline is closed.
        current: Any = self.sender
        while isinstance(current, DelegatingHandler):
            current = current.inner
        if isinstance(current, TransportSender):
            await current.aclose()


def with_cancellation(request: httpx.Request, cancellation_token: CancellationToken) -> httpx.Request:
    """Attach a cancellation token to a request sent through a client from `create_client`."""
    if request is None:
        raise ValueError("request must not be None")
    request.extensions[CANCELLATION_EXTENSION] = cancellation_token
    return request


def create_client(primary: PrimarySender, *handlers: HandlerArgs, **client_kwargs: Any) -> httpx.AsyncClient:
    """
    Create an httpx.AsyncClient that sends requests through a pipeline.

    Args:
        primary: The terminal sender or httpx transport.
        *handlers: Handlers in outermost-first order.
        **client_kwargs: Passed to httpx.AsyncClient, e.g. `base_url` or `timeout`.

    Returns:
        A client whose transport is the composed pipeline. Closing the client closes
        the primary transport.
    """
    if "transport" in client_kwargs:
        raise HandlerConfigurationError("create_client() builds the transport itself; do not pass 'transport'.")
    return httpx.AsyncClient(transport=PipelineTransport(create_pipeline(primary, *handlers)), **client_kwargs)
