"""Presentation-side consumers of the task repository.

A view holds the list it renders. It loads the collection on ``mount``,
listens for change notifications until ``unmount`` and replaces its whole
list with each notification's payload. Views never write storage
themselves; mutations go through the repository.
"""

from __future__ import annotations

import logging
from datetime import date

from .errors import StorageError
from .sync import StorageChange, Subscription
from .task_store import TaskRepository, deserialize_tasks
from .tasks import (
    DeadlineAlert,
    Task,
    bucket_counts,
    deadline_alerts,
    filter_tasks,
    group_by_bucket,
    pending_tasks,
    sort_tasks,
)

logger = logging.getLogger(__name__)


class TaskListView:
    def __init__(self, repository: TaskRepository, name: str = "tasks"):
        self.repository = repository
        self.name = name
        self.tasks: list[Task] = []
        self.error: str | None = None
        # Version of the collection currently held in ``tasks``.
        self.version = 0
        self._subscription: Subscription | None = None

    @property
    def mounted(self) -> bool:
        return self._subscription is not None

    def mount(self) -> "TaskListView":
        if self.mounted:
            return self
        try:
            self.tasks, self.version = self.repository.snapshot()
            self.error = None
        except StorageError:
            logger.exception("View %s could not load tasks", self.name)
            self.tasks = []
            self.error = "Failed to load tasks. Please try again later."
        self._subscription = self.repository.subscribe(self._on_change)
        return self

    def unmount(self) -> None:
        if self._subscription is not None:
            self.repository.unsubscribe(self._subscription)
            self._subscription = None

    def __enter__(self) -> "TaskListView":
        return self.mount()

    def __exit__(self, *exc_info) -> None:
        self.unmount()

    def _on_change(self, change: StorageChange) -> None:
        # A listener that writes while a change is being delivered makes
        # newer changes arrive before older ones; keep only the newest.
        if change.version is not None and change.version <= self.version:
            logger.debug(
                "View %s ignored change v%s (holding v%s)", self.name, change.version, self.version
            )
            return
        try:
            tasks = deserialize_tasks(change.new_value)
        except StorageError:
            logger.exception("View %s received an unreadable task payload", self.name)
            return
        self.tasks = tasks
        if change.version is not None:
            self.version = change.version
        self.on_tasks_replaced()

    def on_tasks_replaced(self) -> None:
        """Hook for subclasses that derive state from ``tasks``."""

    # ---- rendering helpers ----

    def task_ids(self) -> list[str]:
        return [task.id for task in self.tasks]

    def visible(self, status: str = "all", search: str = "", sort_key: str | None = None,
                descending: bool = False) -> list[Task]:
        result = filter_tasks(self.tasks, status=status, search=search)
        if sort_key:
            result = sort_tasks(result, key=sort_key, descending=descending)
        return result

    def pending(self) -> list[Task]:
        return pending_tasks(self.tasks)

    # ---- mutations, delegated to the repository ----

    def create(self, title: str, **fields) -> Task:
        return self.repository.create(title, **fields)

    def delete(self, task_id: str) -> None:
        self.repository.delete(task_id)

    def edit(self, task_id: str, **fields) -> Task:
        return self.repository.update_fields(task_id, **fields)

    def set_progress(self, task_id: str, progress) -> Task:
        return self.repository.set_progress(task_id, progress)

    def toggle_complete(self, task_id: str) -> Task:
        return self.repository.toggle_complete(task_id)


class BoardView(TaskListView):
    """Kanban board: tasks grouped into status buckets."""

    def __init__(self, repository: TaskRepository, name: str = "board"):
        super().__init__(repository, name=name)
        self.columns: dict[str, list[Task]] = group_by_bucket([])

    def mount(self) -> "BoardView":
        super().mount()
        self.on_tasks_replaced()
        return self

    def on_tasks_replaced(self) -> None:
        self.columns = group_by_bucket(self.tasks)

    def counts(self) -> dict[str, int]:
        return bucket_counts(self.tasks)

    def drag(self, task_id: str, target_bucket: str) -> Task:
        return self.repository.move_to_bucket(task_id, target_bucket)

    def alerts(self, today: date | None = None) -> list[DeadlineAlert]:
        return deadline_alerts(self.tasks, today=today)
