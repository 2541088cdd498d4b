"""Composable request/response pipelines for httpx clients."""

from .content import BrotliContent, CompressedContent, GZipContent, decompress_content
from .core.cancellation import CancellationToken
from .core.state import STATE_PROPERTY_NAME, clear_state, get_state, set_state
from .exceptions import HandlerConfigurationError, NoInnerHandlerError, PipelineError, RequestCancelledError
from .handlers import (
    BrotliCompressor,
    ContentCompressor,
    DelegatingHandler,
    GZipCompressor,
    MiddlewareHandler,
    TransformHandler,
)
from .pipeline import (
    CANCELLATION_EXTENSION,
    PipelineTransport,
    TransportSender,
    create_client,
    create_pipeline,
    with_cancellation,
)
from .types import PipelineDelegate, SendDelegate, Sender

__all__ = [
    "BrotliCompressor",
    "BrotliContent",
    "CANCELLATION_EXTENSION",
    "CancellationToken",
    "CompressedContent",
    "ContentCompressor",
    "DelegatingHandler",
    "GZipCompressor",
    "GZipContent",
    "HandlerConfigurationError",
    "MiddlewareHandler",
    "NoInnerHandlerError",
    "PipelineDelegate",
    "PipelineError",
    "PipelineTransport",
    "RequestCancelledError",
    "STATE_PROPERTY_NAME",
    "SendDelegate",
    "Sender",
    "TransformHandler",
    "TransportSender",
    "clear_state",
    "create_client",
    "create_pipeline",
    "decompress_content",
    "get_state",
    "set_state",
    "with_cancellation",
]
