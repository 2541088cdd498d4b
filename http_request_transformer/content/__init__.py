from .compressed_content import BrotliContent, BrotliWriter, CompressedContent, GZipContent
from .decoding import decompress_content, get_decompressed_request_body

__all__ = [
    "BrotliContent",
    "BrotliWriter",
    "CompressedContent",
    "GZipContent",
    "decompress_content",
    "get_decompressed_request_body",
]
