"""Repository for the task collection kept in client key-value storage.

The whole collection is one JSON array under a single key, with a
separate version counter next to it. Every write goes through
:meth:`TaskRepository.mutate` (or the compare-and-set
:meth:`TaskRepository.replace`), which re-reads storage instead of
trusting an in-memory copy, so two views writing the same collection no
longer silently drop each other's edits.
"""

from __future__ import annotations

import json
import logging
import threading
import weakref
from datetime import datetime, timedelta
from typing import Callable, Iterable

from storage import AbstractStorage

from .errors import StaleWriteError, StorageError, TaskNotFound
from .serialization import read_json
from .sync import ChangeChannel, StorageChange, Subscription
from .tasks import (
    BUCKET_PROGRESS,
    BUCKETS,
    Task,
    clamp_progress,
    new_task,
    normalize_priority,
)

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
MAX_WRITE_ATTEMPTS = 3

_EDITABLE_FIELDS = {"title", "description", "priority", "deadline", "assigned_to"}

# One writer lock per storage object, shared by every repository over it.
_storage_locks: "weakref.WeakKeyDictionary[AbstractStorage, threading.RLock]" = (
    weakref.WeakKeyDictionary()
)
_registry_lock = threading.Lock()


def _lock_for(storage: AbstractStorage) -> threading.RLock:
    with _registry_lock:
        lock = _storage_locks.get(storage)
        if lock is None:
            lock = threading.RLock()
            _storage_locks[storage] = lock
        return lock


def serialize_tasks(tasks: Iterable[Task]) -> list[dict]:
    return [task.to_dict() for task in tasks]


def deserialize_tasks(raw) -> list[Task]:
    """Turn a stored array (or its JSON text) back into tasks."""
    if raw is None:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw else []
        except ValueError as exc:
            raise StorageError("Stored task collection is not valid JSON") from exc
    if not isinstance(raw, list):
        raise StorageError("Stored task collection must be a list")
    try:
        return [Task.from_dict(item) for item in raw]
    except (AttributeError, ValueError) as exc:
        raise StorageError(f"Stored task entry is malformed: {exc}") from exc


def default_tasks(now: datetime | None = None) -> list[Task]:
    """Demo tasks written on first use of an empty store."""
    now = now or datetime.utcnow()
    day = timedelta(days=1)

    def stamp(offset: timedelta) -> str:
        return (now + offset).isoformat()

    return [
        Task(
            id="1",
            title="Complete project documentation",
            description="Write comprehensive documentation for the TaskFlow project",
            priority="High",
            progress=0,
            deadline=now.date().isoformat(),
            created_at=stamp(timedelta(0)),
        ),
        Task(
            id="2",
            title="Fix navigation bug",
            description="Address the issue with sidebar navigation on mobile devices",
            priority="Medium",
            progress=100,
            deadline=now.date().isoformat(),
            created_at=stamp(-day),
        ),
        Task(
            id="3",
            title="Implement user feedback",
            description="Add the user feedback form to the dashboard",
            priority="Low",
            progress=0,
            deadline=(now + day).date().isoformat(),
            created_at=stamp(-2 * day),
        ),
        Task(
            id="4",
            title="Update dependencies",
            description="Update all packages to their latest versions",
            priority="Medium",
            progress=0,
            deadline=(now + 2 * day).date().isoformat(),
            created_at=stamp(-3 * day),
        ),
    ]


class TaskRepository:
    def __init__(
        self,
        storage: AbstractStorage,
        channel: ChangeChannel | None = None,
        key: str = TASKS_KEY,
    ):
        self.storage = storage
        self.channel = channel or ChangeChannel()
        self.key = key
        self.version_key = f"{key}.version"
        self._lock = _lock_for(storage)

    # ---- reads ----

    def load(self) -> list[Task]:
        """Read the current collection from storage."""
        return deserialize_tasks(read_json(self.storage, self.key, default=[]))

    @property
    def version(self) -> int:
        raw = self.storage.get(self.version_key)
        try:
            return int(raw) if raw else 0
        except ValueError as exc:
            raise StorageError(f"Stored version for {self.key!r} is not an integer") from exc

    def snapshot(self) -> tuple[list[Task], int]:
        with self._lock:
            return self.load(), self.version

    def get(self, task_id: str) -> Task:
        for task in self.load():
            if task.id == str(task_id):
                return task
        raise TaskNotFound(task_id)

    def subscribe(self, callback: Callable[[StorageChange], None]) -> Subscription:
        return self.channel.subscribe(self.key, callback)

    def unsubscribe(self, subscription: Subscription) -> None:
        self.channel.unsubscribe(subscription)

    # ---- writes ----

    def _write(self, tasks: list[Task], expected_version: int) -> StorageChange:
        current = self.version
        if current != expected_version:
            raise StaleWriteError(expected_version, current)

        serialized = json.dumps(serialize_tasks(tasks))
        new_version = current + 1
        self.storage.set(self.key, serialized)
        self.storage.set(self.version_key, str(new_version))
        return StorageChange(key=self.key, new_value=serialized, version=new_version)

    def replace(self, tasks: Iterable[Task], expected_version: int | None = None) -> int:
        """Overwrite the collection; compare-and-set when a version is given."""
        tasks = list(tasks)
        with self._lock:
            expected = self.version if expected_version is None else expected_version
            change = self._write(tasks, expected)
        self.channel.publish(change)
        return change.version

    def mutate(self, fn: Callable[[list[Task]], list[Task]]) -> list[Task]:
        """Apply ``fn`` to a fresh read of the collection and persist the result.

        Writers in this process are serialized by the storage lock; a
        version bump from elsewhere between read and write is retried.
        """
        attempt = 1
        while True:
            with self._lock:
                tasks, version = self.load(), self.version
                updated = list(fn(list(tasks)))
                try:
                    change = self._write(updated, version)
                except StaleWriteError:
                    logger.warning(
                        "Concurrent write to %s detected (attempt %d)", self.key, attempt
                    )
                    if attempt >= MAX_WRITE_ATTEMPTS:
                        raise
                    attempt += 1
                    continue
            self.channel.publish(change)
            return updated

    def _update_one(self, task_id: str, change: Callable[[Task], Task]) -> Task:
        task_id = str(task_id)
        result: list[Task] = []

        def apply(tasks: list[Task]) -> list[Task]:
            result.clear()
            out = []
            for task in tasks:
                if task.id == task_id:
                    task = change(task)
                    result.append(task)
                out.append(task)
            if not result:
                raise TaskNotFound(task_id)
            return out

        self.mutate(apply)
        return result[0]

    def create(self, title: str, **fields) -> Task:
        created: list[Task] = []

        def apply(tasks: list[Task]) -> list[Task]:
            task = new_task(title, existing_ids=[t.id for t in tasks], **fields)
            created[:] = [task]
            return tasks + [task]

        self.mutate(apply)
        return created[0]

    def delete(self, task_id: str) -> None:
        task_id = str(task_id)

        def apply(tasks: list[Task]) -> list[Task]:
            remaining = [t for t in tasks if t.id != task_id]
            if len(remaining) == len(tasks):
                raise TaskNotFound(task_id)
            return remaining

        self.mutate(apply)

    def update_fields(self, task_id: str, **fields) -> Task:
        unknown = set(fields) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError("Cannot edit fields: {}".format(", ".join(sorted(unknown))))
        if "title" in fields:
            if not fields["title"] or not str(fields["title"]).strip():
                raise ValueError("Task title cannot be empty")
            fields["title"] = str(fields["title"]).strip()
        if "priority" in fields:
            fields["priority"] = normalize_priority(fields["priority"])
        return self._update_one(task_id, lambda task: task.updated(**fields))

    def set_progress(self, task_id: str, progress) -> Task:
        value = clamp_progress(progress)
        return self._update_one(task_id, lambda task: task.updated(progress=value))

    def toggle_complete(self, task_id: str) -> Task:
        return self._update_one(
            task_id,
            lambda task: task.updated(progress=0 if task.is_complete else 100),
        )

    def mark_complete(self, task_id: str) -> Task:
        return self._update_one(task_id, lambda task: task.updated(progress=100))

    def move_to_bucket(self, task_id: str, bucket: str) -> Task:
        """Drag-and-drop: persist bucket membership through progress."""
        if bucket not in BUCKETS:
            raise ValueError(f"Unknown bucket: {bucket!r}")

        def move(task: Task) -> Task:
            if task.bucket == bucket:
                return task
            return task.updated(progress=BUCKET_PROGRESS[bucket])

        return self._update_one(task_id, move)

    def seed_defaults(self) -> bool:
        """Store the demo tasks if nothing is stored yet."""
        with self._lock:
            if self.storage.get(self.key) is not None:
                return False
            change = self._write(default_tasks(), self.version)
        self.channel.publish(change)
        logger.info("Seeded %s with demo tasks", self.key)
        return True
