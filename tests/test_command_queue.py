from eventhub.commands import Command, CommandQueue, CommandType
from eventhub.record import Listener


def _listener(listener_id: int) -> Listener:
    return Listener(id=listener_id, name="evt", callback=print)


def test_drain_is_fifo_and_consumes():
    queue = CommandQueue()
    queue.push_add(_listener(1))
    queue.push(Command(CommandType.REMOVE_BY_NAME, name="a"))
    queue.push(Command(CommandType.REMOVE_BY_ID, listener_id=1))

    assert len(queue) == 3
    kinds = [c.type for c in queue.drain()]

    assert kinds == [CommandType.ADD, CommandType.REMOVE_BY_NAME, CommandType.REMOVE_BY_ID]
    assert not queue
    assert list(queue.drain()) == []


def test_add_command_carries_listener_and_id():
    queue = CommandQueue()
    listener = _listener(7)
    queue.push_add(listener)

    (command,) = list(queue.drain())
    assert command.listener is listener
    assert command.listener_id == 7


def test_clear_all_supersedes_earlier_and_later_commands():
    queue = CommandQueue()
    queue.push(Command(CommandType.REMOVE_BY_TARGET, target="panel"))
    queue.push(Command(CommandType.CLEAR_ALL))
    queue.push(Command(CommandType.REMOVE_BY_NAME, name="late"))

    assert queue.clear_requested
    assert len(queue) == 1
    commands = list(queue.drain())

    assert [c.type for c in commands] == [CommandType.CLEAR_ALL]


def test_discard_returns_orphaned_adds_and_resets():
    queue = CommandQueue()
    first, second = _listener(1), _listener(2)
    queue.push_add(first)
    queue.push(Command(CommandType.CLEAR_ALL))
    queue.push_add(second)

    orphans = queue.discard()

    assert orphans == [first, second]
    assert not queue
    assert not queue.clear_requested
