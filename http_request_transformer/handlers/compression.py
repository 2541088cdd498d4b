# Handlers that compress outgoing request bodies.

import abc
from typing import Any, Optional

import httpx
from pydantic import Field

from http_request_transformer.content.compressed_content import BrotliContent, CompressedContent, GZipContent
from http_request_transformer.core.cancellation import CancellationToken
from http_request_transformer.handlers.delegating_handler import DelegatingHandler
from http_request_transformer.settings import Settings
from http_request_transformer.types import CompressionPredicate


def has_content(request: httpx.Request) -> bool:
    """Returns True if the request will be sent with a non-empty body."""
    content_length = request.headers.get("content-length")
    if content_length is not None:
        try:
            return int(content_length) > 0
        except ValueError:
            return False
    if "transfer-encoding" in request.headers:
        return True
    # Requests built with stream= carry no length headers.
    if isinstance(request.stream, httpx.ByteStream):
        return any(chunk for chunk in request.stream)
    return request.stream is not None


class ContentCompressor(DelegatingHandler, abc.ABC):
    """
    Abstract handler that replaces the body of outgoing requests with a compressed
    version of itself before passing them on. Responses are not altered.

    Attributes:
        predicate (Optional[CompressionPredicate]): Decides whether a given request is
            compressed. When None, every request with a non-empty body is compressed.
    """

    predicate: Optional[CompressionPredicate] = Field(default=None)

    @abc.abstractmethod
    def create_content(self, request: httpx.Request) -> CompressedContent:
        """Wrap the body of `request` in the matching compressed content."""
        raise NotImplementedError

    def should_compress(self, request: httpx.Request) -> bool:
        if not has_content(request):
            return False
        return self.predicate is None or bool(self.predicate(request))

    async def send(self, request: httpx.Request, cancellation_token: CancellationToken) -> httpx.Response:
        if self.should_compress(request):
            content = self.create_content(request)
            request.stream = content
            request.headers = httpx.Headers(content.headers)
            # httpx caches non-streaming bodies; the cached bytes are the uncompressed body.
            if hasattr(request, "_content"):
                del request._content
            self.logger.debug(
                f"Compressing request body for {request.method} {request.url} "
                f"using '{content.content_encoding}' ({self.name})"
            )
        return await self.send_inner(request, cancellation_token)


class GZipCompressor(ContentCompressor):
    """Compresses outgoing request bodies with gzip."""

    compresslevel: int = Field(default=9, ge=0, le=9)

    def __init__(
        self,
        predicate: Optional[CompressionPredicate] = None,
        compresslevel: Optional[int] = None,
        name: Optional[str] = None,
        **data: Any,
    ):
        """
        Initializes the GZipCompressor.

        Args:
            predicate: Decides whether a request is compressed. None compresses every request with a body.
            compresslevel: The gzip compression level. Defaults to GZIP_COMPRESSION_LEVEL from the settings.
            name: An optional name for logging/identification purposes.
        """
        if compresslevel is None:
            compresslevel = Settings().get_gzip_compression_level()
        super().__init__(predicate=predicate, compresslevel=compresslevel, name=name, **data)

    def create_content(self, request: httpx.Request) -> CompressedContent:
        return GZipContent(request.stream, request.headers, compresslevel=self.compresslevel)


class BrotliCompressor(ContentCompressor):
    """Compresses outgoing request bodies with Brotli."""

    quality: int = Field(default=11, ge=0, le=11)

    def __init__(
        self,
        predicate: Optional[CompressionPredicate] = None,
        quality: Optional[int] = None,
        name: Optional[str] = None,
        **data: Any,
    ):
        """
        Initializes the BrotliCompressor.

        Args:
            predicate: Decides whether a request is compressed. None compresses every request with a body.
            quality: The Brotli quality. Defaults to BROTLI_QUALITY from the settings.
            name: An optional name for logging/identification purposes.
        """
        if quality is None:
            quality = Settings().get_brotli_quality()
        super().__init__(predicate=predicate, quality=quality, name=name, **data)

    def create_content(self, request: httpx.Request) -> CompressedContent:
        return BrotliContent(request.stream, request.headers, quality=self.quality)
