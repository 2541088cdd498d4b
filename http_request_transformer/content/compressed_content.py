"""Request bodies that are compressed on the fly while they are being sent.

A `CompressedContent` wraps the original request stream. It never knows its own
length up front, so the request is sent with `Transfer-Encoding: chunked` and the
original `Content-Length` is dropped. The compressor is opened over an in-memory
buffer for each iteration and is always closed before iteration finishes, including
when the consumer stops early or the original stream raises.
"""

import abc
import gzip
import io
from typing import AsyncIterator, BinaryIO, Iterator, Mapping, Optional, Sequence, Tuple, Union

import brotli
import httpx

from http_request_transformer.exceptions import HandlerConfigurationError

ByteStream = Union[httpx.SyncByteStream, httpx.AsyncByteStream]
HeaderTypes = Union[httpx.Headers, Mapping[str, str], Sequence[Tuple[str, str]]]

# Headers describing the length of the original body no longer apply once it is compressed.
_LENGTH_HEADERS = ("content-length", "transfer-encoding")


def _drain(buffer: io.BytesIO) -> bytes:
    data = buffer.getvalue()
    buffer.seek(0)
    buffer.truncate()
    return data


class BrotliWriter(io.RawIOBase):
    """Write-only file object that brotli-compresses everything written into `destination`.

    Closing the writer finishes the brotli stream but leaves `destination` open.
    """

    def __init__(self, destination: BinaryIO, quality: int = 11):
        super().__init__()
        self._destination = destination
        self._compressor = brotli.Compressor(quality=quality)
        self._finished = False

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        if self.closed:
            raise ValueError("write to closed BrotliWriter")
        output = self._compressor.process(bytes(data))
        if output:
            self._destination.write(output)
        return len(data)

    def flush(self) -> None:
        # io.RawIOBase.close() calls flush(), which must not run after finish().
        if self._finished:
            return
        output = self._compressor.flush()
        if output:
            self._destination.write(output)

    def close(self) -> None:
        if self.closed:
            return
        try:
            output = self._compressor.finish()
            if output:
                self._destination.write(output)
        finally:
            self._finished = True
            super().close()


class CompressedContent(httpx.SyncByteStream, httpx.AsyncByteStream, abc.ABC):
    """
    Abstract request body that compresses another request body.

    Attributes:
        content_encoding: The token appended to the Content-Encoding header.
        headers: The original headers, minus length headers, with
            `Transfer-Encoding: chunked` and the content encoding added.
    """

    content_encoding: str = ""

    def __init__(self, inner: ByteStream, headers: Optional[HeaderTypes] = None):
        if inner is None:
            raise HandlerConfigurationError("Content to compress must not be None.")
        self._inner = inner

        items = [(key, value) for key, value in httpx.Headers(headers).multi_items() if key not in _LENGTH_HEADERS]
        items.append(("Transfer-Encoding", "chunked"))
        items.append(("Content-Encoding", self.content_encoding))
        self.headers = httpx.Headers(items)

    @property
    def length(self) -> Optional[int]:
        """Always None: the compressed length is unknown until the compressor has run."""
        return None

    @abc.abstractmethod
    def create_compression_stream(self, destination: BinaryIO) -> BinaryIO:
        """
        Open a writable compression stream over `destination`.

        Closing the returned stream must finish the compressed output without
        closing `destination`.
        """
        raise NotImplementedError

    # --- Sync API ---

    def __iter__(self) -> Iterator[bytes]:
        buffer = io.BytesIO()
        with self.create_compression_stream(buffer) as compression_stream:
            for chunk in self._iter_inner():
                compression_stream.write(chunk)
                data = _drain(buffer)
                if data:
                    yield data
            compression_stream.flush()
        data = _drain(buffer)
        if data:
            yield data

    def serialize_to(self, destination: BinaryIO) -> None:
        """Write the compressed body to `destination`. `destination` is left open."""
        with self.create_compression_stream(destination) as compression_stream:
            for chunk in self._iter_inner():
                compression_stream.write(chunk)
            compression_stream.flush()

    def close(self) -> None:
        if isinstance(self._inner, httpx.SyncByteStream):
            self._inner.close()

    def _iter_inner(self) -> Iterator[bytes]:
        if not isinstance(self._inner, httpx.SyncByteStream):
            raise RuntimeError("Attempted to send an async request body with a sync client.")
        for chunk in self._inner:
            yield chunk

    # --- Async API ---

    async def __aiter__(self) -> AsyncIterator[bytes]:
        buffer = io.BytesIO()
        with self.create_compression_stream(buffer) as compression_stream:
            async for chunk in self._aiter_inner():
                compression_stream.write(chunk)
                data = _drain(buffer)
                if data:
                    yield data
            compression_stream.flush()
        data = _drain(buffer)
        if data:
            yield data

    async def aserialize_to(self, destination: BinaryIO) -> None:
        """Write the compressed body to `destination`, reading the original body asynchronously."""
        with self.create_compression_stream(destination) as compression_stream:
            async for chunk in self._aiter_inner():
                compression_stream.write(chunk)
            compression_stream.flush()

    async def aclose(self) -> None:
        if isinstance(self._inner, httpx.AsyncByteStream):
            await self._inner.aclose()
        else:
            self.close()

    async def _aiter_inner(self) -> AsyncIterator[bytes]:
        if isinstance(self._inner, httpx.AsyncByteStream):
            async for chunk in self._inner:
                yield chunk
        else:
            for chunk in self._inner:
                yield chunk

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} encoding={self.content_encoding!r} inner={self._inner!r}>"


class GZipContent(CompressedContent):
    """Request body compressed with gzip."""

    content_encoding = "gzip"

    def __init__(self, inner: ByteStream, headers: Optional[HeaderTypes] = None, compresslevel: int = 9):
        super().__init__(inner, headers)
        self.compresslevel = compresslevel

    def create_compression_stream(self, destination: BinaryIO) -> BinaryIO:
        # A GzipFile given a fileobj does not close it.
        return gzip.GzipFile(filename="", mode="wb", compresslevel=self.compresslevel, fileobj=destination)


class BrotliContent(CompressedContent):
    """Request body compressed with Brotli."""

    content_encoding = "br"

    def __init__(self, inner: ByteStream, headers: Optional[HeaderTypes] = None, quality: int = 11):
        super().__init__(inner, headers)
        self.quality = quality

    def create_compression_stream(self, destination: BinaryIO) -> BinaryIO:
        return BrotliWriter(destination, quality=self.quality)
