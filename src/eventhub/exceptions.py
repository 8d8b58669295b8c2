class EventHubError(Exception):
    """Base exception for the eventhub package."""


class InvalidArgument(EventHubError, ValueError):
    """Raised when a listener is registered with an empty name or no callback."""


class RecursionLimitExceeded(EventHubError, RuntimeError):
    """Describes a broadcast refused by the nesting-depth guard.

    ``EventManager.send`` builds and logs this instead of raising it, so a
    runaway self-triggering event stops without unwinding the caller.
    """

    def __init__(self, name: str, depth: int, max_depth: int) -> None:
        self.name = name
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(
            f"Refusing to send '{name}': nesting depth {depth} reached the configured maximum of {max_depth}"
        )
