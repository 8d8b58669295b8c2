from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Deque, Iterator, List, Optional

from .record import Listener

logger = logging.getLogger(__name__)


class CommandType(Enum):
    ADD = "add"
    REMOVE_BY_ID = "remove_by_id"
    REMOVE_BY_NAME = "remove_by_name"
    REMOVE_BY_TARGET = "remove_by_target"
    REMOVE_BY_NAME_AND_TARGET = "remove_by_name_and_target"
    CLEAR_ALL = "clear_all"


@dataclass(frozen=True)
class Command:
    """A mutation requested while a broadcast was running."""

    type: CommandType
    listener: Optional[Listener] = None
    listener_id: int = 0
    name: Optional[str] = None
    target: Any = None


_CLEAR_ALL = Command(CommandType.CLEAR_ALL)


class CommandQueue:
    """FIFO of deferred mutations, replayed once the outermost send unwinds.

    A queued clear-all wins over everything else: commands queued before or
    after it are dropped and draining yields a single ``CLEAR_ALL``.
    """

    def __init__(self) -> None:
        self._commands: Deque[Command] = deque()
        self._clear_all = False

    def __len__(self) -> int:
        return 1 if self._clear_all else len(self._commands)

    def __bool__(self) -> bool:
        return self._clear_all or bool(self._commands)

    @property
    def clear_requested(self) -> bool:
        return self._clear_all

    def push_add(self, listener: Listener) -> None:
        self.push(Command(CommandType.ADD, listener=listener, listener_id=listener.id))

    def push(self, command: Command) -> None:
        if command.type is CommandType.CLEAR_ALL:
            self._clear_all = True
            logger.debug("Queued clear-all; %d pending commands superseded", len(self._commands))
            return
        logger.debug("Queued %s (id=%s name=%r)", command.type.value, command.listener_id, command.name)
        self._commands.append(command)

    def drain(self) -> Iterator[Command]:
        """Yield queued commands in FIFO order, consuming them.

        When a clear-all is pending only that command is produced; the
        consumer is expected to call :meth:`discard` as part of applying it.
        """
        if self._clear_all:
            yield _CLEAR_ALL
            return
        while self._commands:
            yield self._commands.popleft()

    def discard(self) -> List[Listener]:
        """Drop every pending command and return the listeners of queued adds.

        Those listeners were allocated but never indexed, so the caller must
        hand them back to the pool.
        """
        orphans = [c.listener for c in self._commands if c.type is CommandType.ADD and c.listener is not None]
        self._commands.clear()
        self._clear_all = False
        return orphans
