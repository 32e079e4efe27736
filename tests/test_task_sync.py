"""Tests for the task repository and cross-view change notifications."""

import json

import pytest

from client.errors import StaleWriteError, StorageError, TaskNotFound
from client.sync import ChangeChannel, StorageChange
from client.task_store import MAX_WRITE_ATTEMPTS, TaskRepository, default_tasks, deserialize_tasks
from client.tasks import COMPLETED, IN_PROGRESS, TODO, Task
from client.views import BoardView, TaskListView


@pytest.fixture()
def repository(storage) -> TaskRepository:
    return TaskRepository(storage)


def test_progress_update_moves_task_to_completed(repository):
    task = repository.create("A", progress=0)
    assert task.bucket == TODO

    updated = repository.set_progress(task.id, 100)

    assert updated.bucket == COMPLETED
    stored = repository.load()
    assert len(stored) == 1
    assert stored[0].bucket == COMPLETED


def test_delete_in_one_view_is_reflected_in_another(repository):
    keep = repository.create("Keep me")
    doomed = repository.create("Delete me")

    with TaskListView(repository, name="list") as view1, BoardView(repository) as view2:
        assert doomed.id in view2.task_ids()

        view1.delete(doomed.id)

        assert view2.task_ids() == [keep.id]
        assert view1.task_ids() == [keep.id]
        assert view2.counts()[TODO] == 1


def test_unmounted_view_stops_receiving_updates(repository):
    view = TaskListView(repository).mount()
    repository.create("First")
    assert len(view.tasks) == 1

    view.unmount()
    repository.create("Second")

    assert len(view.tasks) == 1
    assert repository.channel.subscriber_count() == 0


def test_writes_from_two_views_do_not_clobber_each_other(repository):
    with TaskListView(repository) as view1, TaskListView(repository) as view2:
        view1.create("From view one")
        # view2 still renders the write above, but its own write re-reads storage.
        view2.create("From view two")

    titles = sorted(t.title for t in repository.load())
    assert titles == ["From view one", "From view two"]


def test_replace_with_stale_version_is_rejected(repository):
    repository.create("A")
    tasks, version = repository.snapshot()
    repository.create("B")

    with pytest.raises(StaleWriteError):
        repository.replace(tasks, expected_version=version)

    assert len(repository.load()) == 2


def test_version_increments_per_write(repository):
    assert repository.version == 0
    task = repository.create("A")
    repository.set_progress(task.id, 10)
    assert repository.version == 2


def test_missing_task_raises(repository):
    with pytest.raises(TaskNotFound):
        repository.delete("nope")
    with pytest.raises(TaskNotFound):
        repository.set_progress("nope", 10)
    assert repository.version == 0


def test_edit_rejects_unknown_fields_and_blank_title(repository):
    task = repository.create("A")
    with pytest.raises(ValueError):
        repository.update_fields(task.id, progress=50)
    with pytest.raises(ValueError):
        repository.update_fields(task.id, title="  ")

    edited = repository.update_fields(task.id, title="B", priority="high")
    assert edited.title == "B"
    assert edited.priority == "High"
    assert edited.updated_at is not None


def test_toggle_complete(repository):
    task = repository.create("A", progress=30)
    assert repository.toggle_complete(task.id).progress == 100
    assert repository.toggle_complete(task.id).progress == 0


def test_drag_sets_bucket_progress_and_survives_reload(repository):
    task = repository.create("A", progress=10)
    board = BoardView(repository).mount()

    board.drag(task.id, IN_PROGRESS)

    assert [t.id for t in board.columns[IN_PROGRESS]] == [task.id]
    assert repository.get(task.id).progress == 50
    assert BoardView(repository).mount().columns[IN_PROGRESS][0].id == task.id


def test_drag_within_same_bucket_keeps_progress(repository):
    task = repository.create("A", progress=70)
    assert repository.move_to_bucket(task.id, IN_PROGRESS).progress == 70
    with pytest.raises(ValueError):
        repository.move_to_bucket(task.id, "Backlog")


def test_seed_defaults_only_on_empty_store(repository):
    assert repository.seed_defaults() is True
    assert len(repository.load()) == len(default_tasks())
    assert repository.seed_defaults() is False


def test_view_reports_unreadable_store(storage):
    storage.set("tasks", "{not json")
    view = TaskListView(TaskRepository(storage)).mount()
    assert view.tasks == []
    assert view.error


def test_view_pending_and_visible(repository):
    repository.create("Open item", progress=0)
    repository.create("Done item", progress=100)
    view = TaskListView(repository).mount()

    assert [t.title for t in view.pending()] == ["Open item"]
    assert [t.title for t in view.visible(status="complete")] == ["Done item"]
    assert [t.title for t in view.visible(sort_key="title", descending=True)] == [
        "Open item",
        "Done item",
    ]


def test_stored_form_is_a_json_array(repository, storage):
    repository.create("A")
    stored = json.loads(storage.get("tasks"))
    assert isinstance(stored, list)
    assert stored[0]["title"] == "A"
    assert storage.get("tasks.version") == "1"


def test_channel_skips_failing_listener():
    channel = ChangeChannel()
    received = []

    def broken(change):
        raise RuntimeError("boom")

    channel.subscribe("tasks", broken)
    channel.subscribe("tasks", received.append)
    channel.subscribe("notes", received.append)

    delivered = channel.publish(StorageChange(key="tasks", new_value="[]", version=1))

    assert delivered == 1
    assert len(received) == 1


def test_deserialize_rejects_non_list(storage):
    storage.set("tasks", '{"id": "1"}')
    with pytest.raises(StorageError):
        TaskRepository(storage).load()


def test_repositories_sharing_a_channel_see_each_other(storage):
    channel = ChangeChannel()
    first = TaskRepository(storage, channel)
    second = TaskRepository(storage, channel)
    view = TaskListView(second).mount()

    first.create("Shared")

    assert [t.title for t in view.tasks] == ["Shared"]
    assert isinstance(view.tasks[0], Task)


def test_view_keeps_newest_state_when_a_listener_writes_during_delivery(repository):
    task = repository.create("A", progress=0)

    def finish_half_done(change):
        current = next(t for t in deserialize_tasks(change.new_value) if t.id == task.id)
        if current.progress == 50:
            repository.set_progress(task.id, 100)

    # Subscribed before the view, so its nested write reaches the view first.
    repository.subscribe(finish_half_done)
    view = TaskListView(repository).mount()

    repository.set_progress(task.id, 50)

    assert repository.get(task.id).progress == 100
    assert view.tasks[0].progress == 100
    assert view.version == repository.version


def test_view_ignores_changes_older_than_its_snapshot(repository):
    repository.create("A")
    repository.create("B")
    view = TaskListView(repository).mount()

    view._on_change(StorageChange(key="tasks", new_value="[]", version=1))

    assert len(view.tasks) == 2
    assert view.version == 2


def test_mutate_retries_after_an_outside_version_bump(repository, storage):
    bumps = []

    def add_after_outside_write(tasks):
        if not bumps:
            bumps.append(1)
            storage.set("tasks.version", str(int(storage.get("tasks.version") or 0) + 1))
        return tasks + [Task(id="x", title="X")]

    result = repository.mutate(add_after_outside_write)

    assert [t.id for t in result] == ["x"]
    assert repository.version == 2


def test_mutate_gives_up_after_repeated_conflicts(repository, storage):
    calls = []

    def always_conflicting(tasks):
        calls.append(1)
        storage.set("tasks.version", str(int(storage.get("tasks.version") or 0) + 1))
        return tasks

    with pytest.raises(StaleWriteError):
        repository.mutate(always_conflicting)

    assert len(calls) == MAX_WRITE_ATTEMPTS


def test_view_reports_non_finite_progress(storage):
    storage.set("tasks", '[{"id": "1", "title": "A", "progress": 1e999}]')

    view = TaskListView(TaskRepository(storage)).mount()

    assert view.tasks == []
    assert view.error
