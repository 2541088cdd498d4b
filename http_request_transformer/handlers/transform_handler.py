# Handler that runs optional callbacks before a request is sent and after its response is received.

import inspect
from typing import Any, Optional

import httpx

from http_request_transformer.core.cancellation import CancellationToken
from http_request_transformer.exceptions import HandlerConfigurationError
from http_request_transformer.handlers.middleware_handler import MiddlewareHandler
from http_request_transformer.types import (
    PipelineDelegate,
    RequestTransformDelegate,
    ResponseTransformDelegate,
    SendDelegate,
)


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


class TransformHandler(MiddlewareHandler):
    """
    A handler that transforms requests and/or responses without deciding whether
    the request is sent.

    For every request: `before_send` runs (if supplied), the rest of the pipeline
    is invoked, then `response_received` runs on the response (if supplied). If the
    rest of the pipeline raises, `response_received` is skipped and the fault
    propagates. Callbacks may be plain functions or coroutine functions.

    Attributes:
        before_send: Optional callback `(request, cancellation_token)`.
        response_received: Optional callback `(response, cancellation_token)`.
    """

    before_send: Optional[RequestTransformDelegate] = None
    response_received: Optional[ResponseTransformDelegate] = None

    def __init__(
        self,
        before_send: Optional[RequestTransformDelegate] = None,
        response_received: Optional[ResponseTransformDelegate] = None,
        name: Optional[str] = None,
        **data: Any,
    ):
        """
        Initializes the TransformHandler.

        Raises:
            HandlerConfigurationError: If neither callback is supplied.
        """
        if before_send is None and response_received is None:
            raise HandlerConfigurationError(
                "At least one of before_send or response_received must be supplied.", handler_name=name
            )
        super().__init__(
            handler=TransformHandler._create_delegate(before_send, response_received),
            name=name,
            before_send=before_send,
            response_received=response_received,
            **data,
        )

    @staticmethod
    def _create_delegate(
        before_send: Optional[RequestTransformDelegate],
        response_received: Optional[ResponseTransformDelegate],
    ) -> PipelineDelegate:
        async def transform(
            request: httpx.Request, next: SendDelegate, cancellation_token: CancellationToken
        ) -> httpx.Response:
            if before_send is not None:
                await _maybe_await(before_send(request, cancellation_token))

            response = await next(request, cancellation_token)

            if response_received is not None:
                await _maybe_await(response_received(response, cancellation_token))

            return response

        return transform
