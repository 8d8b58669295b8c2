from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .commands import Command, CommandQueue, CommandType
from .config import DispatcherConfig
from .exceptions import InvalidArgument, RecursionLimitExceeded
from .pool import ListenerPool
from .record import Listener

logger = logging.getLogger(__name__)

# Insertion-ordered set of listener ids; dict keys keep registration order.
IdSet = Dict[int, None]


class EventManager:
    """Synchronous publish/subscribe dispatcher keyed by event name and target.

    Listeners are registered under an event name, optionally scoped to a
    target object. ``send`` calls every matching listener in registration
    order, on the caller's stack.

    Callbacks may register, remove, clear or send on the same manager while a
    send is in progress. Sends nest (up to ``config.max_depth``); mutations
    are queued and replayed in FIFO order once the outermost send returns,
    so a running broadcast always sees the listener set it started with.
    """

    def __init__(self, config: Optional[DispatcherConfig] = None) -> None:
        self._config = config or DispatcherConfig()
        self._listeners: Dict[int, Listener] = {}
        self._by_name: Dict[str, IdSet] = {}
        # Keyed by id(target); the record holds the target itself, keeping the key valid.
        self._by_target: Dict[int, IdSet] = {}
        self._pool = ListenerPool(self._config.preallocate)
        self._queue = CommandQueue()
        self._pending_once: IdSet = {}
        self._depth = 0
        self.refused_sends = 0

    @property
    def config(self) -> DispatcherConfig:
        return self._config

    @property
    def depth(self) -> int:
        """Number of sends currently running on this manager."""
        return self._depth

    @property
    def is_sending(self) -> bool:
        return self._depth > 0

    @property
    def pool(self) -> ListenerPool:
        return self._pool

    def has(self, name: str) -> bool:
        return bool(self._by_name.get(name))

    def count(self, name: Optional[str] = None) -> int:
        """Number of indexed listeners, overall or for one event name."""
        if name is None:
            return len(self._listeners)
        return len(self._by_name.get(name, ()))

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add(self, name: str, callback: Callable[..., Any], target: Any = None) -> int:
        """Register ``callback`` for ``name`` and return the listener id.

        Args:
            name: Event name, must be a non-empty string.
            callback: Called with the positional and keyword arguments of each send.
            target: Optional owner object. Sends and removals can be scoped to it.

        Raises:
            InvalidArgument: If ``name`` is empty or ``callback`` is not callable.
        """
        return self._register(name, callback, target, once=False)

    def add_once(self, name: str, callback: Callable[..., Any], target: Any = None) -> int:
        """Like :meth:`add`, but the listener is removed after its first matching send."""
        return self._register(name, callback, target, once=True)

    def _register(self, name: str, callback: Callable[..., Any], target: Any, once: bool) -> int:
        if not isinstance(name, str) or not name:
            raise InvalidArgument("Event name must be a non-empty string")
        if callback is None or not callable(callback):
            raise InvalidArgument(f"Callback for event '{name}' must be callable, got {callback!r}")

        listener = self._pool.allocate()
        listener.name = name
        listener.callback = callback
        listener.target = target
        listener.once = once

        if self._depth > 0:
            self._queue.push_add(listener)
            return listener.id
        self._index(listener)
        return listener.id

    def _index(self, listener: Listener) -> None:
        self._listeners[listener.id] = listener
        self._by_name.setdefault(listener.name, {})[listener.id] = None
        if listener.target is not None:
            self._by_target.setdefault(id(listener.target), {})[listener.id] = None
        logger.debug(
            "Registered listener %d for '%s' (once=%s, target=%s)",
            listener.id,
            listener.name,
            listener.once,
            type(listener.target).__name__ if listener.target is not None else None,
        )

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def remove(self, listener_id: int) -> None:
        """Remove a listener by id. Unknown ids are ignored."""
        if self._depth > 0:
            self._queue.push(Command(CommandType.REMOVE_BY_ID, listener_id=listener_id))
            return
        self._remove_now(listener_id)

    def remove_by_name(self, name: str) -> None:
        """Remove every listener registered for ``name``."""
        if self._depth > 0:
            self._queue.push(Command(CommandType.REMOVE_BY_NAME, name=name))
            return
        ids = self._by_name.get(name)
        if ids:
            self._remove_all(list(ids))

    def remove_by_target(self, target: Any) -> None:
        """Remove every listener scoped to ``target``."""
        if self._depth > 0:
            self._queue.push(Command(CommandType.REMOVE_BY_TARGET, target=target))
            return
        if target is None:
            return
        ids = self._by_target.get(id(target))
        if ids:
            self._remove_all(list(ids))

    def remove_by_name_and_target(self, name: str, target: Any) -> None:
        """Remove the listeners registered for ``name`` and scoped to ``target``."""
        if self._depth > 0:
            self._queue.push(Command(CommandType.REMOVE_BY_NAME_AND_TARGET, name=name, target=target))
            return
        if target is None:
            return
        name_ids = self._by_name.get(name)
        target_ids = self._by_target.get(id(target))
        if not name_ids or not target_ids:
            return

        # Scan whichever bucket is smaller.
        if len(name_ids) < len(target_ids):
            doomed = [i for i in name_ids if self._listeners[i].target is target]
        else:
            doomed = [i for i in target_ids if self._listeners[i].name == name]
        self._remove_all(doomed)

    def clear_all(self) -> None:
        """Remove every listener.

        During a send this is deferred until the outermost send returns, and
        it discards every other mutation queued in the meantime.
        """
        if self._depth > 0:
            self._queue.push(Command(CommandType.CLEAR_ALL))
            return
        for listener in self._listeners.values():
            self._pool.recycle(listener)
        for orphan in self._queue.discard():
            self._pool.recycle(orphan)
        removed = len(self._listeners)
        self._listeners.clear()
        self._by_name.clear()
        self._by_target.clear()
        self._pending_once.clear()
        self._depth = 0
        logger.debug("Cleared all listeners (%d removed)", removed)

    def _remove_all(self, ids: Iterable[int]) -> None:
        for listener_id in ids:
            self._remove_now(listener_id)

    def _remove_now(self, listener_id: int) -> None:
        listener = self._listeners.pop(listener_id, None)
        if listener is None:
            return
        self._discard_id(self._by_name, listener.name, listener_id)
        if listener.target is not None:
            self._discard_id(self._by_target, id(listener.target), listener_id)
        logger.debug("Removed listener %d for '%s'", listener_id, listener.name)
        self._pool.recycle(listener)

    @staticmethod
    def _discard_id(index: Dict[Any, IdSet], key: Any, listener_id: int) -> None:
        ids = index.get(key)
        if ids is None:
            return
        ids.pop(listener_id, None)
        if not ids:
            del index[key]

    # ------------------------------------------------------------------
    # Broadcast
    # ------------------------------------------------------------------

    def send(self, name: str, target: Any = None, /, *args: Any, **kwargs: Any) -> None:
        """Call every listener of ``name`` with ``*args`` and ``**kwargs``.

        When ``target`` is given only listeners scoped to that exact object
        (compared by identity) are called; ``None`` reaches every listener of
        ``name``. ``name`` and ``target`` are positional-only, so callbacks
        may take keyword arguments with those names.

        A send nested deeper than ``config.max_depth`` is refused: it is
        logged as a warning, counted in ``refused_sends`` and no callback
        runs. Callback errors are logged and the remaining callbacks still
        run; with ``config.raise_errors`` the first error is re-raised at the
        end of the send.
        """
        max_depth = self._config.max_depth
        if max_depth > 0 and self._depth >= max_depth:
            self.refused_sends += 1
            logger.warning("%s", RecursionLimitExceeded(name, self._depth, max_depth))
            return

        ids = self._by_name.get(name)
        if not ids:
            return
        triggered = self._snapshot(ids, target)
        if not triggered:
            return
        logger.debug("Sending '%s' to %d listeners (depth=%d)", name, len(triggered), self._depth + 1)

        first_error: Optional[Exception] = None
        self._depth += 1
        try:
            for listener in triggered:
                try:
                    listener.callback(*args, **kwargs)
                except Exception as exc:  # noqa: BLE001 - one bad listener must not starve the rest
                    logger.exception("Error in listener %d (%r) for event '%s'", listener.id, listener.callback, name)
                    if first_error is None:
                        first_error = exc
        finally:
            self._depth -= 1
            if self._depth == 0:
                self._flush()

        if first_error is not None and self._config.raise_errors:
            raise first_error

    def _snapshot(self, ids: IdSet, target: Any) -> List[Listener]:
        triggered: List[Listener] = []
        stale: List[int] = []
        for listener_id in ids:
            listener = self._listeners.get(listener_id)
            if listener is None:
                stale.append(listener_id)
                continue
            # Already claimed by an outer send; it goes away when that send ends.
            if listener_id in self._pending_once:
                continue
            if not listener.matches(target):
                continue
            triggered.append(listener)
            if listener.once:
                self._pending_once[listener_id] = None
        for listener_id in stale:
            logger.debug("Dropping stale listener id %d", listener_id)
            ids.pop(listener_id, None)
        return triggered

    def _flush(self) -> None:
        """Apply once-removals and deferred commands after the outermost send."""
        if self._pending_once:
            once_ids = list(self._pending_once)
            self._pending_once.clear()
            self._remove_all(once_ids)
        if self._queue:
            logger.debug("Replaying %d deferred commands", len(self._queue))
            for command in self._queue.drain():
                self._apply(command)

    def _apply(self, command: Command) -> None:
        kind = command.type
        if kind is CommandType.ADD:
            self._index(command.listener)
        elif kind is CommandType.REMOVE_BY_ID:
            self.remove(command.listener_id)
        elif kind is CommandType.REMOVE_BY_NAME:
            self.remove_by_name(command.name)
        elif kind is CommandType.REMOVE_BY_TARGET:
            self.remove_by_target(command.target)
        elif kind is CommandType.REMOVE_BY_NAME_AND_TARGET:
            self.remove_by_name_and_target(command.name, command.target)
        elif kind is CommandType.CLEAR_ALL:
            self.clear_all()
