from __future__ import annotations

import itertools
import logging
from typing import List

from .record import Listener

logger = logging.getLogger(__name__)


class ListenerPool:
    """Free-list of :class:`Listener` records.

    Records are reused across registrations, but every allocation receives a
    fresh id from a counter that never goes backwards, so an id handed out
    once can never match a later registration.
    """

    def __init__(self, preallocate: int = 0) -> None:
        if preallocate < 0:
            raise ValueError("preallocate must be >= 0")
        self._free: List[Listener] = [Listener() for _ in range(preallocate)]
        self._ids = itertools.count(1)
        self._created = preallocate

    @property
    def free_count(self) -> int:
        return len(self._free)

    @property
    def created(self) -> int:
        """Total number of records ever constructed by this pool."""
        return self._created

    def allocate(self) -> Listener:
        if self._free:
            listener = self._free.pop()
        else:
            listener = Listener()
            self._created += 1
        listener.id = next(self._ids)
        return listener

    def recycle(self, listener: Listener) -> None:
        if not listener.active:
            logger.debug("Ignoring recycle of inactive listener record")
            return
        listener.reset()
        self._free.append(listener)
