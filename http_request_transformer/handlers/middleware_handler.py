# Handler that hands full control of the request to a middleware callback.

import time
from typing import Any, Optional

import httpx

from http_request_transformer.core.cancellation import CancellationToken
from http_request_transformer.core.logging import log_handler_execution
from http_request_transformer.exceptions import HandlerConfigurationError, PipelineError
from http_request_transformer.handlers.delegating_handler import DelegatingHandler
from http_request_transformer.types import PipelineDelegate


class MiddlewareHandler(DelegatingHandler):
    """
    A handler whose behaviour is entirely delegated to a callback of the form
    `(request, next, cancellation_token) -> response`.

    The callback receives the rest of the pipeline as `next` and decides whether
    to call it at all (short-circuit), once, or several times (retries, fan-out).
    Faults raised by the callback or by `next` are logged and re-raised.
    A callback that returns anything other than an `httpx.Response` fails with
    `PipelineError`.

    Example:
        async def add_header(request, next, cancellation_token):
            request.headers["X-Test-Header"] = str(uuid.uuid4())
            return await next(request, cancellation_token)

        handler = MiddlewareHandler(add_header)
    """

    handler: PipelineDelegate

    def __init__(self, handler: Optional[PipelineDelegate], name: Optional[str] = None, **data: Any):
        """
        Initializes the MiddlewareHandler.

        Args:
            handler: The middleware callback.
            name: An optional name for logging/identification purposes.

        Raises:
            HandlerConfigurationError: If `handler` is None.
        """
        if handler is None:
            raise HandlerConfigurationError("Middleware handler callback must not be None.", handler_name=name)
        super().__init__(handler=handler, name=name, **data)

    async def send(self, request: httpx.Request, cancellation_token: CancellationToken) -> httpx.Response:
        start = time.perf_counter()
        try:
            response = await self.handler(request, self.send_inner, cancellation_token)
            if not isinstance(response, httpx.Response):
                raise PipelineError(
                    f"Handler '{self.name}' returned {type(response).__name__} instead of an httpx.Response.",
                    handler_name=self.name,
                )
        except Exception as e:
            log_handler_execution(
                self.name or self.__class__.__name__,
                "error",
                request=request,
                duration=time.perf_counter() - start,
                error=f"{e.__class__.__name__}: {e}",
            )
            raise
        log_handler_execution(
            self.name or self.__class__.__name__,
            "completed",
            request=request,
            duration=time.perf_counter() - start,
            details={"status_code": response.status_code},
        )
        return response
