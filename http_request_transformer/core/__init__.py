from .cancellation import CancellationToken
from .state import STATE_PROPERTY_NAME, clear_state, get_state, set_state

__all__ = [
    "CancellationToken",
    "STATE_PROPERTY_NAME",
    "clear_state",
    "get_state",
    "set_state",
]
