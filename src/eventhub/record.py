from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(eq=False)
class Listener:
    """A single registration held by :class:`eventhub.manager.EventManager`.

    Attributes:
        id: Unique, monotonically increasing id. ``0`` means the record is
            sitting in the pool and belongs to nobody.
        name: Event name the callback listens for.
        callback: Invoked with the broadcast arguments.
        target: Optional owner object used to scope sends and removals.
            ``None`` means the listener has no target. Compared by identity only.
        once: Remove the listener after its first matching broadcast.
    """

    id: int = 0
    name: Optional[str] = None
    callback: Optional[Callable[..., Any]] = None
    target: Any = None
    once: bool = False

    @property
    def active(self) -> bool:
        return self.id != 0

    def matches(self, target: Any) -> bool:
        """True when a send scoped to ``target`` should reach this listener."""
        return target is None or self.target is target

    def reset(self) -> None:
        # Drop references so recycled records do not keep callbacks or owners alive.
        self.id = 0
        self.name = None
        self.callback = None
        self.target = None
        self.once = False
