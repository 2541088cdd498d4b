"""Decoding of compressed message bodies, mainly for inspecting what a pipeline sent."""

import zlib
from typing import Callable, Dict, Optional

import brotli
import httpx


def _gunzip(content: bytes) -> bytes:
    return zlib.decompress(content, wbits=zlib.MAX_WBITS | 16)


def _inflate(content: bytes) -> bytes:
    # "deflate" is meant to be zlib-wrapped, but raw streams are common in practice.
    try:
        return zlib.decompress(content)
    except zlib.error:
        return zlib.decompress(content, wbits=-zlib.MAX_WBITS)


_DECODERS: Dict[str, Callable[[bytes], bytes]] = {
    "gzip": _gunzip,
    "deflate": _inflate,
    "br": brotli.decompress,
}


def decompress_content(content: bytes, encoding: Optional[str]) -> bytes:
    """Reverses the content codings listed in `encoding`.

    Args:
        content: The encoded body.
        encoding: A Content-Encoding value such as "gzip" or "br, gzip". Tokens are
            case-insensitive and are undone from last to first. None, "" and
            "identity" leave the content as it is.

    Raises:
        ValueError: If a coding is unsupported or the body is not valid for it.
    """
    tokens = [token.strip().lower() for token in (encoding or "").split(",")]
    for token in reversed(tokens):
        if token in ("", "identity"):
            continue
        decoder = _DECODERS.get(token)
        if decoder is None:
            raise ValueError(f"Unsupported encoding: {token}")
        try:
            content = decoder(content)
        except (zlib.error, brotli.error) as e:
            raise ValueError(f"Failed to decompress {token} content: {e}") from e
    return content


async def get_decompressed_request_body(request: httpx.Request) -> bytes:
    """Reads the request body and reverses any Content-Encoding applied to it.

    NOTE: This consumes the request stream.
    """
    raw_body = await request.aread()
    return decompress_content(raw_body, ", ".join(request.headers.get_list("content-encoding")))
