"""Client-side stores: tasks, cross-view sync, session and local accounts."""

from .accounts import LocalAccountStore, LocalLogin
from .audit_log import AuditLog
from .errors import (
    ClientError,
    DuplicateAccount,
    InvalidLocalCredentials,
    StaleWriteError,
    StorageError,
    TaskNotFound,
)
from .profiles import NotesStore, ProfileStore
from .session import RouteDecision, SessionClient
from .sync import ChangeChannel, StorageChange, Subscription
from .task_store import TaskRepository
from .tasks import BUCKETS, Task, bucket_for
from .views import BoardView, TaskListView

__all__ = [
    "AuditLog",
    "BUCKETS",
    "BoardView",
    "ChangeChannel",
    "ClientError",
    "DuplicateAccount",
    "InvalidLocalCredentials",
    "LocalAccountStore",
    "LocalLogin",
    "NotesStore",
    "ProfileStore",
    "RouteDecision",
    "SessionClient",
    "StaleWriteError",
    "StorageChange",
    "StorageError",
    "Subscription",
    "Task",
    "TaskListView",
    "TaskNotFound",
    "TaskRepository",
    "bucket_for",
]
