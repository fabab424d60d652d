import logging
import threading

import pytest

from task_manager.errors import InvalidStateError, TaskNotFoundError, TaskValidationError
from task_manager.models import IDLE, Editing, EmptyStateReason, Task, TaskFilter
from task_manager.store import TaskStore

from fakes import EPOCH


def assert_invariants(store: TaskStore) -> None:
    counts = store.counts()
    assert counts.active + counts.completed == counts.total
    assert counts.total == len(store.tasks())
    session = store.edit_session
    if isinstance(session, Editing):
        target = store.get(session.task_id)
        assert target is not None
        assert target.completed is False
    ids = [t.id for t in store.tasks()]
    assert len(ids) == len(set(ids))
    assert all(t.text and t.text == t.text.strip() for t in store.tasks())


class TestAdd:
    def test_add_buy_milk(self, store):
        task = store.add("Buy milk")
        assert [(t.text, t.completed) for t in store.tasks()] == [("Buy milk", False)]
        counts = store.counts()
        assert (counts.total, counts.active, counts.completed) == (1, 1, 0)
        assert task.created_at == EPOCH
        assert task.updated_at is None

    def test_add_trims_text(self, store):
        task = store.add("  Walk the dog \n")
        assert task.text == "Walk the dog"

    def test_newest_first(self, store):
        a = store.add("a")
        b = store.add("b")
        assert [t.id for t in store.tasks()] == [b.id, a.id]
        assert [t.text for t in store.tasks()] == ["b", "a"]

    @pytest.mark.parametrize("raw", ["", "   ", "\t\n"])
    def test_blank_text_rejected_and_list_unchanged(self, store, raw):
        store.add("keep")
        before = store.tasks()
        with pytest.raises(TaskValidationError) as ei:
            store.add(raw)
        assert ei.value.code == "ValidationError"
        assert store.tasks() == before

    def test_ids_never_reused_after_delete(self, store):
        first = store.add("one")
        store.delete(first.id)
        second = store.add("two")
        assert second.id != first.id
        assert second.id > first.id


class TestToggle:
    def test_toggle_flips_and_stamps_updated_at(self, store, clock):
        task = store.add("X")
        toggled = store.toggle(task.id)
        assert toggled.completed is True
        assert toggled.updated_at is not None
        assert toggled.updated_at > task.created_at
        again = store.toggle(task.id)
        assert again.completed is False
        assert again.updated_at > toggled.updated_at

    def test_toggle_unknown_id(self, store):
        store.add("X")
        before = store.tasks()
        with pytest.raises(TaskNotFoundError) as ei:
            store.toggle(999)
        assert ei.value.task_id == 999
        assert store.tasks() == before

    def test_toggle_preserves_order(self, store):
        a = store.add("a")
        b = store.add("b")
        c = store.add("c")
        store.toggle(b.id)
        assert [t.id for t in store.tasks()] == [c.id, b.id, a.id]

    def test_completing_task_under_edit_cancels_session(self, store):
        task = store.add("X")
        store.begin_edit(task.id)
        store.update_draft("X renamed")
        store.toggle(task.id)
        assert store.edit_session == IDLE
        assert store.get(task.id).text == "X"
        assert_invariants(store)

    def test_toggling_other_task_keeps_session(self, store):
        a = store.add("a")
        b = store.add("b")
        store.begin_edit(a.id)
        store.toggle(b.id)
        assert store.edit_session == Editing(task_id=a.id, draft="a")


class TestDelete:
    def test_delete_is_idempotent(self, store):
        a = store.add("a")
        b = store.add("b")
        assert store.delete(a.id) is True
        once = store.tasks()
        assert store.delete(a.id) is False
        assert store.tasks() == once
        assert [t.id for t in once] == [b.id]

    def test_delete_task_under_edit_clears_session(self, store):
        task = store.add("X")
        store.begin_edit(task.id)
        store.delete(task.id)
        assert store.edit_session == IDLE

    def test_delete_other_task_keeps_session(self, store):
        a = store.add("a")
        b = store.add("b")
        store.begin_edit(a.id)
        store.delete(b.id)
        assert isinstance(store.edit_session, Editing)


class TestEditSession:
    def test_begin_edit_seeds_draft(self, store):
        task = store.add("Y")
        session = store.begin_edit(task.id)
        assert session == Editing(task_id=task.id, draft="Y")
        assert store.edit_session == session

    def test_begin_edit_unknown_task(self, store):
        with pytest.raises(TaskNotFoundError):
            store.begin_edit(42)
        assert store.edit_session == IDLE

    def test_begin_edit_on_completed_task_rejected(self, store):
        task = store.add("done already")
        store.toggle(task.id)
        with pytest.raises(InvalidStateError):
            store.begin_edit(task.id)
        assert store.edit_session == IDLE

    def test_begin_edit_replaces_prior_session(self, store):
        a = store.add("a")
        b = store.add("b")
        store.begin_edit(a.id)
        store.update_draft("abandoned draft")
        store.begin_edit(b.id)
        assert store.edit_session == Editing(task_id=b.id, draft="b")
        assert store.get(a.id).text == "a"

    def test_update_draft_is_verbatim(self, store):
        task = store.add("Y")
        store.begin_edit(task.id)
        store.update_draft("  spaced  ")
        assert store.edit_session.draft == "  spaced  "

    def test_commit_applies_trimmed_draft(self, store):
        task = store.add("Y")
        store.begin_edit(task.id)
        store.update_draft("  Y renamed ")
        updated = store.commit_edit()
        assert updated.text == "Y renamed"
        assert updated.updated_at is not None
        assert store.get(task.id) == updated
        assert store.edit_session == IDLE

    def test_commit_blank_draft_keeps_session_open(self, store):
        task = store.add("Y")
        store.begin_edit(task.id)
        store.update_draft("  ")
        with pytest.raises(TaskValidationError):
            store.commit_edit()
        assert store.get(task.id).text == "Y"
        assert store.get(task.id).updated_at is None
        assert store.edit_session == Editing(task_id=task.id, draft="  ")

    def test_begin_then_cancel_round_trip(self, store):
        task = store.add("Y")
        store.toggle(task.id)
        store.toggle(task.id)
        before = store.get(task.id)
        store.begin_edit(task.id)
        store.update_draft("something else")
        store.cancel_edit()
        after = store.get(task.id)
        assert after.text == before.text
        assert after.updated_at == before.updated_at
        assert store.edit_session == IDLE

    def test_cancel_when_idle_is_noop(self, store):
        store.cancel_edit()
        assert store.edit_session == IDLE

    @pytest.mark.parametrize("command", ["update_draft", "commit_edit"])
    def test_session_commands_require_active_session(self, store, command):
        store.add("Y")
        with pytest.raises(InvalidStateError) as ei:
            if command == "update_draft":
                store.update_draft("text")
            else:
                store.commit_edit()
        assert ei.value.code == "InvalidState"


class TestClearCompleted:
    def test_add_toggle_clear_leaves_empty(self, store):
        task = store.add("X")
        store.toggle(task.id)
        assert store.clear_completed() == 1
        assert store.tasks() == ()
        counts = store.counts()
        assert (counts.total, counts.active, counts.completed) == (0, 0, 0)

    def test_preserves_relative_order(self, store):
        a = store.add("a")
        b = store.add("b")
        c = store.add("c")
        d = store.add("d")
        store.toggle(b.id)
        store.toggle(d.id)
        assert store.clear_completed() == 2
        assert [t.id for t in store.tasks()] == [c.id, a.id]

    def test_nothing_to_clear(self, store):
        store.add("a")
        assert store.clear_completed() == 0
        assert len(store.tasks()) == 1

    def test_keeps_session_on_active_task(self, store):
        a = store.add("a")
        b = store.add("b")
        store.toggle(b.id)
        store.begin_edit(a.id)
        store.clear_completed()
        assert store.edit_session == Editing(task_id=a.id, draft="a")


class TestFilterAndView:
    def test_default_filter_is_all(self, store):
        assert store.filter is TaskFilter.ALL

    def test_active_filter_keeps_relative_order(self, store):
        a = store.add("a")
        b = store.add("b")
        c = store.add("c")
        store.toggle(b.id)
        store.set_filter("active")
        assert [t.id for t in store.filtered_view()] == [c.id, a.id]
        store.set_filter(TaskFilter.COMPLETED)
        assert [t.id for t in store.filtered_view()] == [b.id]

    def test_set_filter_parses_strings(self, store):
        assert store.set_filter(" Completed ") is TaskFilter.COMPLETED

    def test_unknown_filter_rejected(self, store):
        with pytest.raises(TaskValidationError):
            store.set_filter("someday")
        assert store.filter is TaskFilter.ALL

    def test_initial_filter(self, clock):
        assert TaskStore(clock, initial_filter="active").filter is TaskFilter.ACTIVE

    def test_view_bundles_state(self, store):
        a = store.add("a")
        store.toggle(a.id)
        store.set_filter(TaskFilter.ACTIVE)
        view = store.view()
        assert view.items == ()
        assert view.counts.total == 1
        assert view.counts.completed == 1
        assert view.filter is TaskFilter.ACTIVE
        assert view.edit_session == IDLE
        assert view.empty_state is EmptyStateReason.NO_ACTIVE_TASKS

    def test_empty_store_view(self, store):
        assert store.view().empty_state is EmptyStateReason.NO_TASKS
        assert store.empty_state_reason() is EmptyStateReason.NO_TASKS

    def test_queries_return_immutable_values(self, store):
        store.add("a")
        tasks = store.tasks()
        assert isinstance(tasks, tuple)
        with pytest.raises(AttributeError):
            tasks[0].text = "changed"  # type: ignore[misc]

    @pytest.mark.parametrize(
        "query,expected",
        [
            (lambda s: [t.text for t in s.filtered_view()], ["a"]),
            (lambda s: s.empty_state_reason(), None),
        ],
        ids=["filtered_view", "empty_state_reason"],
    )
    def test_queries_read_tasks_and_filter_together(self, store, monkeypatch, query, expected):
        store.add("a")
        read_tasks = store.tasks
        writers = []

        def tasks_then_concurrent_filter_change():
            tasks = read_tasks()
            writer = threading.Thread(target=store.set_filter, args=("completed",))
            writers.append(writer)
            writer.start()
            writer.join(0.1)
            return tasks

        monkeypatch.setattr(store, "tasks", tasks_then_concurrent_filter_change)
        assert query(store) == expected
        monkeypatch.undo()

        writers[0].join(5)
        assert store.filter is TaskFilter.COMPLETED


class TestSubscriptions:
    def test_listener_gets_initial_and_updates(self, store):
        seen = []
        store.subscribe(seen.append)
        assert len(seen) == 1
        assert seen[0].items == ()

        task = store.add("a")
        store.toggle(task.id)
        assert len(seen) == 3
        assert seen[-1].counts.completed == 1

    def test_rejected_commands_do_not_notify(self, store):
        seen = []
        store.subscribe(seen.append)
        with pytest.raises(TaskValidationError):
            store.add("  ")
        with pytest.raises(TaskNotFoundError):
            store.toggle(7)
        assert store.delete(7) is False
        store.cancel_edit()
        assert len(seen) == 1

    def test_unsubscribe(self, store):
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        store.add("a")
        assert len(seen) == 1
        unsubscribe()  # second call is harmless

    def test_edit_session_changes_notify(self, store):
        task = store.add("a")
        seen = []
        store.subscribe(seen.append)
        store.begin_edit(task.id)
        store.update_draft("b")
        store.commit_edit()
        assert [v.edit_session for v in seen] == [
            IDLE,
            Editing(task_id=task.id, draft="a"),
            Editing(task_id=task.id, draft="b"),
            IDLE,
        ]
        assert seen[-1].items[0].text == "b"

    def test_listener_command_does_not_leave_stale_views(self, store):
        def auto_add(view):
            if view.counts.total == 1:
                store.add("auto")

        totals = []
        store.subscribe(auto_add)
        store.subscribe(lambda view: totals.append(view.counts.total))

        store.add("first")

        assert store.counts().total == 2
        assert totals == [0, 2]
        assert totals[-1] == store.view().counts.total


class TestFromTasks:
    def test_restores_order_and_resumes_ids(self, clock):
        tasks = [
            Task(id=5, text="newest", created_at=EPOCH),
            Task(id=2, text="oldest", completed=True, created_at=EPOCH),
        ]
        store = TaskStore.from_tasks(tasks, task_filter="completed", clock=clock)
        assert [t.id for t in store.tasks()] == [5, 2]
        assert store.filter is TaskFilter.COMPLETED
        assert store.edit_session == IDLE
        assert store.add("next").id == 6

    def test_rejects_duplicate_ids(self):
        tasks = [Task(id=1, text="a", created_at=EPOCH), Task(id=1, text="b", created_at=EPOCH)]
        with pytest.raises(TaskValidationError):
            TaskStore.from_tasks(tasks)

    def test_rejects_blank_text(self):
        with pytest.raises(TaskValidationError):
            TaskStore.from_tasks([Task(id=1, text="  ", created_at=EPOCH)])

    def test_trims_text(self):
        store = TaskStore.from_tasks([Task(id=1, text="  padded  ", created_at=EPOCH)])
        assert store.get(1).text == "padded"

    @pytest.mark.parametrize("task_id", [0, -3])
    def test_rejects_non_positive_ids(self, task_id):
        with pytest.raises(TaskValidationError) as ei:
            TaskStore.from_tasks([Task(id=task_id, text="a", created_at=EPOCH)])
        assert ei.value.detail == {"task_id": task_id}

    def test_next_id_is_honoured_but_never_below_loaded_ids(self, clock):
        tasks = [Task(id=4, text="a", created_at=EPOCH)]
        assert TaskStore.from_tasks(tasks, clock=clock, next_id=9).add("b").id == 9
        assert TaskStore.from_tasks(tasks, clock=clock, next_id=2).add("b").id == 5


class TestLogging:
    def test_rejections_are_logged(self, store, caplog):
        with caplog.at_level(logging.INFO, logger="task_manager.store"):
            with pytest.raises(TaskValidationError):
                store.add("")
        assert any("Command rejected" in r.getMessage() for r in caplog.records)


def test_invariants_hold_over_mixed_command_sequence(store):
    a = store.add("a")
    assert_invariants(store)
    b = store.add("b")
    c = store.add("c")
    store.begin_edit(b.id)
    assert_invariants(store)
    store.toggle(b.id)
    assert_invariants(store)
    store.begin_edit(c.id)
    store.update_draft("")
    with pytest.raises(TaskValidationError):
        store.commit_edit()
    assert_invariants(store)
    store.toggle(a.id)
    store.clear_completed()
    assert_invariants(store)
    store.delete(c.id)
    assert_invariants(store)
    assert store.edit_session == IDLE
