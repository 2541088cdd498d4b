import gzip

import brotli
import httpx
import pytest
from http_request_transformer.content.compressed_content import BrotliContent, GZipContent
from http_request_transformer.content.decoding import get_decompressed_request_body
from http_request_transformer.handlers.compression import (
    BrotliCompressor,
    ContentCompressor,
    GZipCompressor,
    has_content,
)
from http_request_transformer.handlers.delegating_handler import DelegatingHandler
from pydantic import ValidationError

from tests.helpers.senders import RecordingSender

COMPRESSORS = [
    pytest.param(GZipCompressor, "gzip", gzip.decompress, id="gzip"),
    pytest.param(BrotliCompressor, "br", brotli.decompress, id="brotli"),
]


async def send_through(compressor, terminal_sender, request, cancellation_token):
    response = await compressor.bind(terminal_sender).send(request, cancellation_token)
    return response, terminal_sender.requests[0]


# --- has_content ---


@pytest.mark.parametrize(
    "headers, expected",
    [
        ({}, False),
        ({"Content-Length": "0"}, False),
        ({"Content-Length": "12"}, True),
        ({"Content-Length": "not-a-number"}, False),
        ({"Transfer-Encoding": "chunked"}, True),
    ],
)
def test_has_content(headers, expected):
    request = httpx.Request("PUT", "https://example.com")
    request.headers = httpx.Headers(headers)
    assert has_content(request) is expected


# --- Construction ---


def test_compressors_are_delegating_handlers():
    assert issubclass(GZipCompressor, ContentCompressor)
    assert issubclass(BrotliCompressor, ContentCompressor)
    assert issubclass(ContentCompressor, DelegatingHandler)


def test_levels_default_to_maximum():
    assert GZipCompressor().compresslevel == 9
    assert BrotliCompressor().quality == 11


def test_levels_default_from_settings(monkeypatch):
    monkeypatch.setenv("GZIP_COMPRESSION_LEVEL", "1")
    monkeypatch.setenv("BROTLI_QUALITY", "4")

    assert GZipCompressor().compresslevel == 1
    assert BrotliCompressor().quality == 4


def test_explicit_level_overrides_settings(monkeypatch):
    monkeypatch.setenv("GZIP_COMPRESSION_LEVEL", "1")
    assert GZipCompressor(compresslevel=5).compresslevel == 5


@pytest.mark.parametrize(
    "factory",
    [lambda: GZipCompressor(compresslevel=10), lambda: BrotliCompressor(quality=12)],
    ids=["gzip", "brotli"],
)
def test_out_of_range_level_is_rejected(factory):
    with pytest.raises(ValidationError):
        factory()


# --- Compression ---


@pytest.mark.asyncio
@pytest.mark.parametrize("compressor_class, encoding, decompress", COMPRESSORS)
async def test_compresses_request_body(
    compressor_class, encoding, decompress, terminal_sender, post_request, sample_payload, cancellation_token
):
    _, sent = await send_through(compressor_class(), terminal_sender, post_request, cancellation_token)

    body = await sent.aread()
    assert body != sample_payload
    assert decompress(body) == sample_payload
    assert len(body) < len(sample_payload)


@pytest.mark.asyncio
@pytest.mark.parametrize("compressor_class, encoding, decompress", COMPRESSORS)
async def test_rewrites_body_headers(
    compressor_class, encoding, decompress, terminal_sender, post_request, cancellation_token
):
    _, sent = await send_through(compressor_class(), terminal_sender, post_request, cancellation_token)

    assert sent.headers["Content-Encoding"] == encoding
    assert sent.headers["Transfer-Encoding"] == "chunked"
    assert "Content-Length" not in sent.headers
    assert sent.headers["Content-Type"] == "application/json"
    assert sent.headers["Host"] == "example.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("compressor_class, encoding, decompress", COMPRESSORS)
async def test_request_stream_is_replaced(
    compressor_class, encoding, decompress, terminal_sender, post_request, cancellation_token
):
    _, sent = await send_through(compressor_class(), terminal_sender, post_request, cancellation_token)

    assert isinstance(sent.stream, (GZipContent, BrotliContent))
    assert sent.stream.content_encoding == encoding


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "POST"])
async def test_request_without_body_is_untouched(method, terminal_sender, cancellation_token):
    request = httpx.Request(method, "https://example.com/empty")
    original_headers = list(request.headers.multi_items())

    _, sent = await send_through(GZipCompressor(), terminal_sender, request, cancellation_token)

    assert "Content-Encoding" not in sent.headers
    assert list(sent.headers.multi_items()) == original_headers
    assert sent.content == b""


@pytest.mark.asyncio
async def test_predicate_false_leaves_request_untouched(
    terminal_sender, post_request, sample_payload, cancellation_token
):
    compressor = GZipCompressor(predicate=lambda request: False)

    _, sent = await send_through(compressor, terminal_sender, post_request, cancellation_token)

    assert "Content-Encoding" not in sent.headers
    assert sent.headers["Content-Length"] == str(len(sample_payload))
    assert sent.content == sample_payload


@pytest.mark.asyncio
async def test_predicate_receives_request(terminal_sender, post_request, cancellation_token):
    seen = []

    def only_uploads(request):
        seen.append(request)
        return request.url.path == "/upload"

    compressor = GZipCompressor(predicate=only_uploads)
    _, sent = await send_through(compressor, terminal_sender, post_request, cancellation_token)

    assert seen == [post_request]
    assert sent.headers["Content-Encoding"] == "gzip"


@pytest.mark.asyncio
async def test_existing_content_encoding_is_kept(terminal_sender, sample_payload, cancellation_token):
    pre_compressed = brotli.compress(sample_payload)
    request = httpx.Request(
        "POST", "https://example.com/upload", content=pre_compressed, headers={"Content-Encoding": "br"}
    )

    _, sent = await send_through(GZipCompressor(), terminal_sender, request, cancellation_token)

    assert sent.headers.get_list("Content-Encoding") == ["br", "gzip"]
    assert await get_decompressed_request_body(sent) == sample_payload


@pytest.mark.asyncio
async def test_stacked_compressors_apply_inner_encoding_first(
    terminal_sender, post_request, sample_payload, cancellation_token
):
    inner = BrotliCompressor().bind(terminal_sender)
    outer = GZipCompressor().bind(inner)

    await outer.send(post_request, cancellation_token)
    sent = terminal_sender.requests[0]

    assert sent.headers.get_list("Content-Encoding") == ["gzip", "br"]
    assert await get_decompressed_request_body(sent) == sample_payload


@pytest.mark.asyncio
async def test_compresses_async_streaming_body(terminal_sender, cancellation_token):
    async def upload_chunks():
        for i in range(5):
            yield f"chunk-{i};".encode() * 50

    request = httpx.Request("POST", "https://example.com/stream", content=upload_chunks())

    _, sent = await send_through(BrotliCompressor(), terminal_sender, request, cancellation_token)

    expected = b"".join(f"chunk-{i};".encode() * 50 for i in range(5))
    assert await get_decompressed_request_body(sent) == expected


@pytest.mark.asyncio
async def test_response_is_returned_unchanged(post_request, cancellation_token):
    terminal = RecordingSender(status_code=201, content=b"created")

    response, _ = await send_through(GZipCompressor(), terminal, post_request, cancellation_token)

    assert response.status_code == 201
    assert response.content == b"created"
    assert "Content-Encoding" not in response.headers


# --- Bodies supplied as streams ---


@pytest.mark.parametrize(
    "stream, expected",
    [
        (httpx.ByteStream(b"abc"), True),
        (httpx.ByteStream(b""), False),
    ],
    ids=["non-empty", "empty"],
)
def test_has_content_without_length_headers_checks_byte_stream(stream, expected):
    request = httpx.Request("POST", "https://example.com/upload", stream=stream)

    assert "Content-Length" not in request.headers
    assert has_content(request) is expected


@pytest.mark.asyncio
async def test_compresses_body_supplied_as_stream(terminal_sender, sample_payload, cancellation_token):
    request = httpx.Request("POST", "https://example.com/upload", stream=httpx.ByteStream(sample_payload))

    _, sent = await send_through(GZipCompressor(), terminal_sender, request, cancellation_token)

    assert sent.headers["Content-Encoding"] == "gzip"
    assert await get_decompressed_request_body(sent) == sample_payload
