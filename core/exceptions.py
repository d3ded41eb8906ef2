"""
Core domain exceptions.

These exceptions are transport-agnostic. The server layer turns them into
HTTP responses, or into error chunks once a response stream has started.
"""


class CoreError(Exception):
    """Base exception for all core errors."""

    pass


class NotFoundError(CoreError):
    """Raised when a conversation, message or tool call cannot be found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class InvalidOperationError(CoreError):
    """Raised when an operation cannot be performed in the current state."""

    pass


class StreamAbortedError(CoreError):
    """Raised inside a response stream when its abort signal fires."""

    def __init__(self) -> None:
        super().__init__("Stream aborted")
