"""
In-process publish/subscribe event dispatcher.

Listeners are registered by event name (optionally scoped to a target
object) and broadcasts are delivered synchronously. Callbacks may safely
register, remove and send on the same manager while a broadcast runs.
"""

from .config import DispatcherConfig, load_config
from .exceptions import EventHubError, InvalidArgument, RecursionLimitExceeded
from .global_events import GlobalEvent, get_event_manager, reset_event_manager
from .manager import EventManager

__version__ = "0.1.0"

__all__ = [
    "DispatcherConfig",
    "EventHubError",
    "EventManager",
    "GlobalEvent",
    "InvalidArgument",
    "RecursionLimitExceeded",
    "get_event_manager",
    "load_config",
    "reset_event_manager",
]
