from .compression import BrotliCompressor, ContentCompressor, GZipCompressor
from .delegating_handler import DelegatingHandler
from .middleware_handler import MiddlewareHandler
from .transform_handler import TransformHandler

__all__ = [
    "BrotliCompressor",
    "ContentCompressor",
    "DelegatingHandler",
    "GZipCompressor",
    "MiddlewareHandler",
    "TransformHandler",
]
