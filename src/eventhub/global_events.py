from __future__ import annotations

from typing import Any, Callable, Optional

from .manager import EventManager

# Process-wide manager, created on first use.
_GLOBAL_MANAGER: Optional[EventManager] = None


def get_event_manager() -> EventManager:
    """Return the process-global EventManager, creating one if necessary."""
    global _GLOBAL_MANAGER
    if _GLOBAL_MANAGER is None:
        _GLOBAL_MANAGER = EventManager()
    return _GLOBAL_MANAGER


def reset_event_manager(manager: Optional[EventManager] = None) -> EventManager:
    """Replace the global manager (a fresh default one when ``manager`` is None)."""
    global _GLOBAL_MANAGER
    _GLOBAL_MANAGER = manager if manager is not None else EventManager()
    return _GLOBAL_MANAGER


class GlobalEvent:
    """Static-style access to the global manager.

    Every method forwards to :func:`get_event_manager` unchanged, e.g.::

        GlobalEvent.add("hp_changed", hud.on_hp_changed, hud)
        GlobalEvent.send("hp_changed", 42)
        GlobalEvent.remove_by_target(hud)
    """

    @staticmethod
    def add(name: str, callback: Callable[..., Any], target: Any = None) -> int:
        return get_event_manager().add(name, callback, target)

    @staticmethod
    def add_once(name: str, callback: Callable[..., Any], target: Any = None) -> int:
        return get_event_manager().add_once(name, callback, target)

    @staticmethod
    def send(name: str, /, *args: Any, **kwargs: Any) -> None:
        """Send to every listener of ``name``, regardless of target."""
        get_event_manager().send(name, None, *args, **kwargs)

    @staticmethod
    def send_to_target(name: str, target: Any, /, *args: Any, **kwargs: Any) -> None:
        get_event_manager().send(name, target, *args, **kwargs)

    @staticmethod
    def remove(listener_id: int) -> None:
        get_event_manager().remove(listener_id)

    @staticmethod
    def remove_by_name(name: str) -> None:
        get_event_manager().remove_by_name(name)

    @staticmethod
    def remove_by_target(target: Any) -> None:
        get_event_manager().remove_by_target(target)

    @staticmethod
    def remove_by_name_and_target(name: str, target: Any) -> None:
        get_event_manager().remove_by_name_and_target(name, target)

    @staticmethod
    def clear_all() -> None:
        get_event_manager().clear_all()
