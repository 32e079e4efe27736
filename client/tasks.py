"""Task records and the pure functions the task views are built on."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Iterable

TODO = "To Do"
IN_PROGRESS = "In Progress"
COMPLETED = "Completed"
BUCKETS = (TODO, IN_PROGRESS, COMPLETED)

# Progress a task is given when dropped into a bucket it is not already in.
BUCKET_PROGRESS = {TODO: 0, IN_PROGRESS: 50, COMPLETED: 100}

PRIORITIES = ("High", "Medium", "Low")
DEFAULT_PRIORITY = "Medium"

SORT_KEYS = ("title", "priority", "progress", "deadline", "createdAt", "updatedAt")
_PRIORITY_RANK = {"High": 0, "Medium": 1, "Low": 2}


def _now_iso() -> str:
    return datetime.utcnow().isoformat()


def clamp_progress(value) -> int:
    """Coerce ``value`` to an int in [0, 100]."""
    try:
        progress = int(float(value))
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValueError(f"Progress must be a finite number, got {value!r}") from exc
    return max(0, min(100, progress))


def bucket_for(progress: int) -> str:
    """Map numeric progress to its status bucket."""
    if progress <= 40:
        return TODO
    if progress <= 80:
        return IN_PROGRESS
    return COMPLETED


def normalize_priority(priority: str | None) -> str:
    if not priority:
        return DEFAULT_PRIORITY
    value = str(priority).strip().capitalize()
    if value not in PRIORITIES:
        raise ValueError("Priority must be one of: {}.".format(", ".join(PRIORITIES)))
    return value


@dataclass
class Task:
    id: str
    title: str
    description: str = ""
    priority: str = DEFAULT_PRIORITY
    progress: int = 0
    deadline: str | None = None
    assigned_to: str = ""
    created_at: str = field(default_factory=_now_iso)
    updated_at: str | None = None

    @property
    def bucket(self) -> str:
        return bucket_for(self.progress)

    @property
    def is_complete(self) -> bool:
        return self.bucket == COMPLETED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "progress": self.progress,
            "deadline": self.deadline,
            "assignedTo": self.assigned_to,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Build a task from its stored form.

        Older entries carry ``_id``, ``dueDate`` and a complete/incomplete
        ``status`` instead of progress; those are mapped onto progress.
        """
        task_id = data.get("id", data.get("_id"))
        if task_id is None:
            raise ValueError("Task entry has no id")

        if data.get("progress") is not None:
            progress = clamp_progress(data["progress"])
        else:
            status = str(data.get("status") or "").strip().lower()
            progress = 100 if status in {"complete", "completed"} else 0

        try:
            priority = normalize_priority(data.get("priority"))
        except ValueError:
            priority = DEFAULT_PRIORITY

        return cls(
            id=str(task_id),
            title=data.get("title") or "",
            description=data.get("description") or "",
            priority=priority,
            progress=progress,
            deadline=data.get("deadline") or data.get("dueDate") or None,
            assigned_to=data.get("assignedTo") or "",
            created_at=data.get("createdAt") or _now_iso(),
            updated_at=data.get("updatedAt"),
        )

    def updated(self, **changes) -> "Task":
        """Return a copy with ``changes`` applied and a fresh update stamp."""
        changes.setdefault("updated_at", _now_iso())
        return replace(self, **changes)


def generate_task_id(existing: Iterable[str] = (), now_ms: int | None = None) -> str:
    """Return a millisecond timestamp id not already in ``existing``."""
    taken = set(existing)
    candidate = now_ms if now_ms is not None else int(time.time() * 1000)
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)


def new_task(
    title: str,
    description: str = "",
    priority: str | None = None,
    deadline: str | None = None,
    progress=0,
    assigned_to: str = "",
    existing_ids: Iterable[str] = (),
) -> Task:
    if not title or not title.strip():
        raise ValueError("Task title cannot be empty")
    return Task(
        id=generate_task_id(existing_ids),
        title=title.strip(),
        description=(description or "").strip(),
        priority=normalize_priority(priority),
        progress=clamp_progress(progress),
        deadline=deadline or None,
        assigned_to=assigned_to or "",
    )


def filter_tasks(tasks: Iterable[Task], status: str = "all", search: str = "") -> list[Task]:
    """Filter by status and a case-insensitive search on title/description.

    ``status`` is ``all``, ``complete``, ``incomplete`` or a bucket name.
    """
    result = list(tasks)
    key = (status or "all").strip()
    lowered = key.lower()
    if key in BUCKETS:
        result = [t for t in result if t.bucket == key]
    elif lowered in {"complete", "completed"}:
        result = [t for t in result if t.is_complete]
    elif lowered == "incomplete":
        result = [t for t in result if not t.is_complete]
    elif lowered != "all":
        raise ValueError(f"Unknown status filter: {status!r}")

    term = (search or "").strip().lower()
    if term:
        result = [
            t for t in result
            if term in t.title.lower() or term in t.description.lower()
        ]
    return result


def sort_tasks(tasks: Iterable[Task], key: str = "createdAt", descending: bool = False) -> list[Task]:
    """Sort tasks by one of ``SORT_KEYS``; missing values always sort last."""
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {key!r}")

    def value(task: Task):
        raw = task.to_dict()[key]
        if key == "priority":
            return _PRIORITY_RANK.get(raw, len(_PRIORITY_RANK))
        if isinstance(raw, str):
            return raw.lower()
        return raw

    tasks = list(tasks)
    present = [t for t in tasks if t.to_dict()[key] not in (None, "")]
    missing = [t for t in tasks if t.to_dict()[key] in (None, "")]
    return sorted(present, key=value, reverse=descending) + missing


def group_by_bucket(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    groups: dict[str, list[Task]] = {bucket: [] for bucket in BUCKETS}
    for task in tasks:
        groups[task.bucket].append(task)
    return groups


def bucket_counts(tasks: Iterable[Task]) -> dict[str, int]:
    return {bucket: len(items) for bucket, items in group_by_bucket(tasks).items()}


def pending_tasks(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if not t.is_complete]


@dataclass(frozen=True)
class DeadlineAlert:
    task_id: str
    title: str
    due: str
    message: str


def deadline_alerts(tasks: Iterable[Task], today: date | None = None) -> list[DeadlineAlert]:
    """Alerts for tasks due today or tomorrow."""
    today = today or date.today()
    today_str = today.isoformat()
    tomorrow_str = (today + timedelta(days=1)).isoformat()

    alerts = []
    for task in tasks:
        due = (task.deadline or "")[:10]
        if due == today_str:
            alerts.append(DeadlineAlert(task.id, task.title, "today", f'Task Due Today: "{task.title}"'))
        elif due == tomorrow_str:
            alerts.append(DeadlineAlert(task.id, task.title, "tomorrow", f'Task Due Tomorrow: "{task.title}"'))
    return alerts
