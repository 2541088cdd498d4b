# Base class for every stage of a request pipeline.

import abc
import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from http_request_transformer.core.cancellation import CancellationToken
from http_request_transformer.exceptions import HandlerConfigurationError, NoInnerHandlerError
from http_request_transformer.types import Sender


class DelegatingHandler(BaseModel, abc.ABC):
    """Abstract Base Class for a pipeline stage that delegates to an inner sender.

    A handler is bound to its inner sender exactly once, when the pipeline is
    assembled (see `create_pipeline`). After that the chain never changes, so a
    single handler instance can serve any number of concurrent requests.

    Attributes:
        name (Optional[str]): An optional name for the handler instance, used for
            logging and identification purposes.
    """

    name: Optional[str] = Field(default=None)
    logger: logging.Logger = Field(default_factory=lambda: logging.getLogger(__name__), exclude=True)

    _inner: Optional[Sender] = PrivateAttr(default=None)

    def __init__(self, **data: Any) -> None:
        if data.get("name") is None:
            data["name"] = self.__class__.__name__
        super().__init__(**data)

    @property
    def inner(self) -> Optional[Sender]:
        """The sender this handler delegates to, or None if it has not been bound yet."""
        return self._inner

    def bind(self, inner: Sender) -> "DelegatingHandler":
        """Binds this handler to the next sender in the pipeline.

        Args:
            inner: The next handler, or the terminal sender.

        Returns:
            This handler, now ready to send requests.

        Raises:
            HandlerConfigurationError: If `inner` is None, or if this handler is
                already bound to a different sender.
        """
        if inner is None:
            raise HandlerConfigurationError("Inner sender must not be None.", handler_name=self.name)
        if self._inner is not None and self._inner is not inner:
            raise HandlerConfigurationError(
                f"Handler '{self.name}' is already bound into a pipeline and cannot be rebound.",
                handler_name=self.name,
            )
        self._inner = inner
        return self

    async def send_inner(self, request: httpx.Request, cancellation_token: CancellationToken) -> httpx.Response:
        """Sends the request to the rest of the pipeline.

        Raises:
            NoInnerHandlerError: If the handler has not been bound to an inner sender.
        """
        if self._inner is None:
            raise NoInnerHandlerError(
                f"Handler '{self.name}' has no inner sender. Use create_pipeline() to assemble handlers.",
                handler_name=self.name,
            )
        return await self._inner.send(request, cancellation_token)

    @abc.abstractmethod
    async def send(self, request: httpx.Request, cancellation_token: CancellationToken) -> httpx.Response:
        """
        Process the request and produce a response.

        Implementations may modify the request, call `send_inner` zero or more
        times, and modify the response before returning it.

        Args:
            request: The outgoing request.
            cancellation_token: The cancellation signal for this request. It must be
                passed unchanged to `send_inner`.

        Returns:
            The response for the request.

        Raises:
            Exception: Any fault raised further down the pipeline propagates unless the
                handler chooses to intercept it.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        inner_name = getattr(self._inner, "name", self._inner.__class__.__name__) if self._inner else None
        return f"<{self.name} <{self.__class__.__name__}> inner={inner_name}>"

    model_config = ConfigDict(arbitrary_types_allowed=True)
