from typing import Awaitable, Callable, Protocol, Union, runtime_checkable

import httpx

from http_request_transformer.core.cancellation import CancellationToken


@runtime_checkable
class Sender(Protocol):
    """Anything that can send a request and produce a response, including a whole composed pipeline."""

    async def send(self, request: httpx.Request, cancellation_token: CancellationToken) -> httpx.Response: ...


# The continuation handed to a middleware callback: everything downstream of the
# current handler, ending with the terminal sender.
SendDelegate = Callable[[httpx.Request, CancellationToken], Awaitable[httpx.Response]]

# (request, next, cancellation_token) -> response
PipelineDelegate = Callable[[httpx.Request, SendDelegate, CancellationToken], Awaitable[httpx.Response]]

# Transform callbacks may be plain functions or coroutine functions.
RequestTransformDelegate = Callable[[httpx.Request, CancellationToken], Union[Awaitable[None], None]]
ResponseTransformDelegate = Callable[[httpx.Response, CancellationToken], Union[Awaitable[None], None]]

CompressionPredicate = Callable[[httpx.Request], bool]
