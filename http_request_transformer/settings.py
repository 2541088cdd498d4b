import os

from dotenv import load_dotenv

# Load .env file variables into environment
load_dotenv(verbose=True)

DEFAULT_GZIP_COMPRESSION_LEVEL = 9
DEFAULT_BROTLI_QUALITY = 11


class Settings:
    """Library configuration settings loaded from environment variables."""

    # --- Logging Settings ---
    def get_log_level(self, default: str = "INFO") -> str:
        """Gets the configured log level, defaulting if not set."""
        return os.getenv("LOG_LEVEL", default).upper()

    # --- Compression Settings ---
    def get_gzip_compression_level(self) -> int:
        """Returns the gzip compression level (0-9) used when a compressor does not specify one."""
        return self._get_bounded_int("GZIP_COMPRESSION_LEVEL", DEFAULT_GZIP_COMPRESSION_LEVEL, 0, 9)

    def get_brotli_quality(self) -> int:
        """Returns the brotli quality (0-11) used when a compressor does not specify one."""
        return self._get_bounded_int("BROTLI_QUALITY", DEFAULT_BROTLI_QUALITY, 0, 11)

    def _get_bounded_int(self, env_var: str, default: int, minimum: int, maximum: int) -> int:
        raw_value = os.getenv(env_var)
        if raw_value is None:
            return default
        try:
            value = int(raw_value)
        except ValueError:
            raise ValueError(f"{env_var} environment variable must be an integer.")
        if not minimum <= value <= maximum:
            raise ValueError(f"{env_var} must be between {minimum} and {maximum}, got {value}.")
        return value
