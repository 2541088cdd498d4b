from typing import List

import httpx
import pytest
from http_request_transformer.core.cancellation import CancellationToken

from tests.helpers.senders import RecordingSender

# --- Environment ---

SETTINGS_ENV_VARS = ["LOG_LEVEL", "GZIP_COMPRESSION_LEVEL", "BROTLI_QUALITY"]


@pytest.fixture(autouse=True)
def isolate_settings_env(monkeypatch):
    """AUTOUSE: Removes settings variables that a developer .env file may have loaded."""
    for env_var in SETTINGS_ENV_VARS:
        monkeypatch.delenv(env_var, raising=False)
    yield


# --- Terminal Senders ---


@pytest.fixture
def call_log() -> List[str]:
    return []


@pytest.fixture
def terminal_sender(call_log) -> RecordingSender:
    """Provides a terminal sender that returns 200 and logs 'T' to call_log."""
    return RecordingSender(call_log=call_log)


@pytest.fixture
def cancellation_token() -> CancellationToken:
    return CancellationToken()


# --- Requests ---


@pytest.fixture
def empty_request() -> httpx.Request:
    """A GET request with no body."""
    return httpx.Request("GET", "https://example.com/resource")


@pytest.fixture
def sample_payload() -> bytes:
    return b'{"message": "hello world", "items": [1, 2, 3]}' * 20


@pytest.fixture
def post_request(sample_payload) -> httpx.Request:
    """A POST request with a JSON body."""
    return httpx.Request(
        "POST",
        "https://example.com/upload",
        content=sample_payload,
        headers={"Content-Type": "application/json"},
    )
