# Request-scoped state stored in the httpx request extensions.

from typing import Any, Optional, Type, TypeVar, get_origin, overload

import httpx

T = TypeVar("T")

# httpx already uses keys such as "timeout" and "trace" in request.extensions,
# so the state entry is namespaced to this package.
STATE_PROPERTY_NAME = "http_request_transformer.state"


def _require_request(request: Optional[httpx.Request]) -> httpx.Request:
    if request is None:
        raise ValueError("request must not be None")
    return request


def _matches(value: Any, expected_type: Any) -> bool:
    # Parameterized generics such as list[int] are checked against their origin only.
    try:
        return isinstance(value, get_origin(expected_type) or expected_type)
    except TypeError:
        return False


def set_state(request: httpx.Request, state: Any) -> httpx.Request:
    """Stores `state` on the request, replacing any state previously stored.

    Args:
        request: The outgoing request.
        state: An arbitrary value, e.g. the identity of the user the request is made on behalf of.

    Returns:
        The same request, so calls can be chained.

    Raises:
        ValueError: If `request` is None.
    """
    _require_request(request).extensions[STATE_PROPERTY_NAME] = state
    return request


@overload
def get_state(request: httpx.Request) -> Any: ...


@overload
def get_state(request: httpx.Request, expected_type: Type[T], default: Optional[T] = None) -> Optional[T]: ...


def get_state(request: httpx.Request, expected_type: Optional[type] = None, default: Any = None) -> Any:
    """Gets the state stored on the request.

    Missing state and state that is not an instance of `expected_type` are both
    reported as `default`; this never raises because of what is (or is not) stored.

    Raises:
        ValueError: If `request` is None.
    """
    extensions = _require_request(request).extensions
    if STATE_PROPERTY_NAME not in extensions:
        return default
    value = extensions[STATE_PROPERTY_NAME]
    if expected_type is not None and not _matches(value, expected_type):
        return default
    return value


def clear_state(request: httpx.Request) -> httpx.Request:
    """Removes the state stored on the request. Does nothing if no state is stored.

    Raises:
        ValueError: If `request` is None.
    """
    _require_request(request).extensions.pop(STATE_PROPERTY_NAME, None)
    return request
