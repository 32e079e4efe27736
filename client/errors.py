"""Failures raised by the client-side stores."""


class ClientError(Exception):
    """Base class for client store failures."""


class StorageError(ClientError):
    """A stored blob could not be deserialized."""


class TaskNotFound(ClientError):
    def __init__(self, task_id):
        super().__init__(f"Task {task_id!r} not found")
        self.task_id = task_id


class StaleWriteError(ClientError):
    """The stored collection changed since it was read."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Expected version {expected}, found {actual}")
        self.expected = expected
        self.actual = actual


class DuplicateAccount(ClientError):
    """A local account with that email already exists."""


class InvalidLocalCredentials(ClientError):
    """Email/password did not match a local account."""
