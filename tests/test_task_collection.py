# tests/test_task_collection.py

from __future__ import annotations

from datetime import date

from taskdeck.tasks.task_collection import TaskCollection
from taskdeck.tasks.task_models import Priority, Task

from .conftest import make_task
from .fakes import FakeNotifier, FakeTaskRepo


def _collection(repo: FakeTaskRepo, *titles: str, notifier: FakeNotifier | None = None) -> TaskCollection:
    coll = TaskCollection(user_id="alice", repo=repo, notifier=notifier)
    # Added in reverse so the resulting order reads like `titles`.
    for title in reversed(titles):
        coll.add(make_task(title))
    return coll


def _order(coll: TaskCollection) -> list[str]:
    return [t.title for t in coll]


def test_add_inserts_at_head_and_saves(repo: FakeTaskRepo) -> None:
    coll = TaskCollection(user_id="alice", repo=repo)
    coll.add(make_task("first"))
    coll.add(make_task("second"))

    assert _order(coll) == ["second", "first"]
    assert repo.save_calls == 2
    assert [r["title"] for r in repo.records["alice"]] == ["second", "first"]


def test_many_adds_keep_ids_distinct(repo: FakeTaskRepo) -> None:
    coll = TaskCollection(user_id="alice", repo=repo)
    for i in range(200):
        coll.add(Task.create(f"task {i}"))
    assert len({t.id for t in coll}) == len(coll) == 200


def test_adding_same_task_twice_is_refused(repo: FakeTaskRepo) -> None:
    coll = TaskCollection(user_id="alice", repo=repo)
    t = make_task("dup")
    assert coll.add(t) is True
    assert coll.add(t) is False
    assert len(coll) == 1
    assert repo.save_calls == 1


def test_update_applies_only_given_fields(repo: FakeTaskRepo) -> None:
    coll = _collection(repo, "a")
    result = coll.update("t-a", {"group": "Work", "due_date": date(2026, 11, 1)})

    assert result.ok
    assert result.applied == ("group", "due_date")
    t = coll.get("t-a")
    assert t is not None
    assert (t.title, t.group, t.due_date, t.priority) == ("a", "Work", date(2026, 11, 1), Priority.MEDIUM)


def test_update_rejects_blank_title_and_unknown_priority(repo: FakeTaskRepo) -> None:
    coll = _collection(repo, "a")
    saves = repo.save_calls

    r1 = coll.update("t-a", {"title": "   "})
    r2 = coll.update("t-a", {"priority": "Urgent"})

    assert (r1.found, r1.ok, r1.rejected) == (True, False, ("title",))
    assert (r2.found, r2.ok, r2.rejected) == (True, False, ("priority",))
    t = coll.get("t-a")
    assert t is not None
    assert t.title == "a"
    assert t.priority is Priority.MEDIUM
    # Nothing applied -> nothing saved.
    assert repo.save_calls == saves


def test_update_mixed_fields_keeps_the_valid_ones(repo: FakeTaskRepo) -> None:
    coll = _collection(repo, "a")
    r = coll.update("t-a", {"title": "renamed", "priority": "nope", "colour": "red"})
    assert r.applied == ("title",)
    assert set(r.rejected) == {"priority", "colour"}
    assert coll.get("t-a").title == "renamed"  # type: ignore[union-attr]


def test_update_can_set_completion(repo: FakeTaskRepo) -> None:
    coll = _collection(repo, "a")
    assert coll.update("t-a", {"is_completed": True}).ok
    assert coll.get("t-a").is_completed is True  # type: ignore[union-attr]


def test_missing_ids_are_silent_noops(repo: FakeTaskRepo) -> None:
    coll = _collection(repo, "a", "b")
    saves = repo.save_calls

    assert coll.update("ghost", {"title": "x"}).found is False
    assert coll.remove("ghost") is False
    assert coll.toggle_completion("ghost") is False
    assert coll.reorder("ghost", "t-a") is False

    assert _order(coll) == ["a", "b"]
    assert repo.save_calls == saves


def test_remove(repo: FakeTaskRepo) -> None:
    coll = _collection(repo, "a", "b", "c")
    assert coll.remove("t-b") is True
    assert _order(coll) == ["a", "c"]
    assert coll.get("t-b") is None
    assert [r["id"] for r in repo.records["alice"]] == ["t-a", "t-c"]


def test_toggle_twice_restores_original_value(repo: FakeTaskRepo) -> None:
    coll = _collection(repo, "a")
    original = coll.get("t-a").is_completed  # type: ignore[union-attr]
    coll.toggle_completion("t-a")
    coll.toggle_completion("t-a")
    assert coll.get("t-a").is_completed is original  # type: ignore[union-attr]


def test_reorder_before_target_moves_only_that_task(repo: FakeTaskRepo) -> None:
    coll = _collection(repo, "a", "b", "c", "d")
    snapshot = {t.id: t.to_record() for t in coll}

    assert coll.reorder("t-d", "t-b") is True
    assert _order(coll) == ["a", "d", "b", "c"]
    assert {t.id: t.to_record() for t in coll} == snapshot

    assert coll.remove("t-d") is True
    assert _order(coll) == ["a", "b", "c"]


def test_reorder_to_end(repo: FakeTaskRepo) -> None:
    coll = _collection(repo, "a", "b", "c")
    coll.reorder("t-a")
    assert _order(coll) == ["b", "c", "a"]

    # Unknown reference or self-reference also means "end".
    coll.reorder("t-b", "ghost")
    assert _order(coll) == ["c", "a", "b"]
    coll.reorder("t-c", "t-c")
    assert _order(coll) == ["a", "b", "c"]


def test_reorder_without_change_does_not_save(repo: FakeTaskRepo) -> None:
    coll = _collection(repo, "a", "b")
    saves = repo.save_calls
    assert coll.reorder("t-a", "t-b") is True
    assert _order(coll) == ["a", "b"]
    assert repo.save_calls == saves


def test_failed_save_keeps_memory_and_notifies(repo: FakeTaskRepo) -> None:
    notifier = FakeNotifier()
    coll = TaskCollection(user_id="alice", repo=repo, notifier=notifier)
    repo.fail_saves = True

    coll.add(make_task("a"))
    assert _order(coll) == ["a"]
    assert notifier.messages == [("error", "Error saving tasks!")]

    repo.fail_saves = False
    coll.toggle_completion("t-a")
    assert repo.records["alice"][0]["isCompleted"] is True


def test_load_restores_order_and_skips_bad_records() -> None:
    good = [make_task("x").to_record(), make_task("y").to_record()]
    repo = FakeTaskRepo(
        {"alice": [good[0], {"id": "broken", "title": ""}, good[1], dict(good[0], title="dup")]}
    )
    coll = TaskCollection.load(repo, "alice")
    assert _order(coll) == ["x", "y"]


def test_load_failure_starts_empty_and_notifies() -> None:
    repo = FakeTaskRepo()
    repo.fail_loads = True
    notifier = FakeNotifier()

    coll = TaskCollection.load(repo, "alice", notifier=notifier)

    assert len(coll) == 0
    assert notifier.levels() == ["error"]
    # Still usable in memory.
    repo.fail_loads = False
    coll.add(make_task("z"))
    assert _order(coll) == ["z"]


def test_users_are_isolated() -> None:
    repo = FakeTaskRepo()
    alice = TaskCollection(user_id="alice", repo=repo)
    bob = TaskCollection(user_id="bob", repo=repo)
    alice.add(make_task("a"))
    bob.add(make_task("b"))
    assert [r["title"] for r in repo.records["alice"]] == ["a"]
    assert [r["title"] for r in repo.records["bob"]] == ["b"]
    assert _order(TaskCollection.load(repo, "bob")) == ["b"]
