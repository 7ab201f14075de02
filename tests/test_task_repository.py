# tests/test_task_repository.py

from datetime import timedelta

import pytest

from taskmanager.schemas.task import TaskFilter

from .conftest import NOW


def titles(tasks):
    return [task.title for task in tasks]


def test_owner_scope_is_always_applied(task_repo, make_task, alice, bob) -> None:
    make_task(alice, "mine")
    make_task(bob, "theirs")

    tasks, total = task_repo.find_by_owner(alice.id, TaskFilter())

    assert titles(tasks) == ["mine"]
    assert total == 1


def test_status_filter(task_repo, make_task, alice) -> None:
    make_task(alice, "open")
    make_task(alice, "done", completed=True)

    pending, _ = task_repo.find_by_owner(alice.id, TaskFilter(status="pending"))
    completed, _ = task_repo.find_by_owner(alice.id, TaskFilter(status="completed"))
    everything, _ = task_repo.find_by_owner(alice.id, TaskFilter(status="all"))

    assert titles(pending) == ["open"]
    assert titles(completed) == ["done"]
    assert len(everything) == 2


def test_category_priority_and_archived_filters_combine(task_repo, make_task, alice) -> None:
    make_task(alice, "match", category="work", priority="high", is_archived=False)
    make_task(alice, "wrong category", category="health", priority="high")
    make_task(alice, "wrong priority", category="work", priority="low")
    make_task(alice, "archived", category="work", priority="high", is_archived=True)

    tasks, total = task_repo.find_by_owner(
        alice.id, TaskFilter(category="work", priority="high", is_archived=False)
    )

    assert titles(tasks) == ["match"]
    assert total == 1


def test_tag_filter_requires_all_tags_in_any_order(task_repo, make_task, alice) -> None:
    make_task(alice, "both", tags=["urgent", "home"])
    make_task(alice, "both reversed", tags=["home", "garden", "urgent"])
    make_task(alice, "one", tags=["urgent"])
    make_task(alice, "prefix only", tags=["urgently", "homework"])
    make_task(alice, "none")

    tasks, total = task_repo.find_by_owner(
        alice.id, TaskFilter(tags=["home", "urgent"], sort_by="title", sort_order="asc")
    )

    assert titles(tasks) == ["both", "both reversed"]
    assert total == 2


def test_tag_filter_treats_like_wildcards_literally(task_repo, make_task, alice) -> None:
    make_task(alice, "percent", tags=["100%"])
    make_task(alice, "plain", tags=["1000"])

    tasks, _ = task_repo.find_by_owner(alice.id, TaskFilter(tags=["100%"]))

    assert titles(tasks) == ["percent"]


def test_search_is_case_insensitive_over_title_and_description(task_repo, make_task, alice) -> None:
    make_task(alice, "Buy MILK")
    make_task(alice, "Groceries", description="remember the milk")
    make_task(alice, "Unrelated", description="bread")

    tasks, total = task_repo.find_by_owner(
        alice.id, TaskFilter(search="milk", sort_by="title", sort_order="asc")
    )

    assert titles(tasks) == ["Buy MILK", "Groceries"]
    assert total == 2


def test_priority_sort_uses_severity_not_alphabet(task_repo, make_task, alice) -> None:
    make_task(alice, "low", priority="low")
    make_task(alice, "high", priority="high")
    make_task(alice, "medium", priority="medium")

    desc, _ = task_repo.find_by_owner(alice.id, TaskFilter(sort_by="priority", sort_order="desc"))
    asc, _ = task_repo.find_by_owner(alice.id, TaskFilter(sort_by="priority", sort_order="asc"))

    assert titles(desc) == ["high", "medium", "low"]
    assert titles(asc) == ["low", "medium", "high"]


def test_default_sort_is_newest_first(task_repo, make_task, alice) -> None:
    make_task(alice, "oldest", created_at=NOW - timedelta(days=2))
    make_task(alice, "newest", created_at=NOW)
    make_task(alice, "middle", created_at=NOW - timedelta(days=1))

    tasks, _ = task_repo.find_by_owner(alice.id, TaskFilter())

    assert titles(tasks) == ["newest", "middle", "oldest"]


def test_due_date_sort_puts_undated_tasks_last(task_repo, make_task, alice) -> None:
    make_task(alice, "undated")
    make_task(alice, "later", due_date=NOW + timedelta(days=3))
    make_task(alice, "sooner", due_date=NOW + timedelta(days=1))

    asc, _ = task_repo.find_by_owner(alice.id, TaskFilter(sort_by="due_date", sort_order="asc"))
    desc, _ = task_repo.find_by_owner(alice.id, TaskFilter(sort_by="due_date", sort_order="desc"))

    assert titles(asc) == ["sooner", "later", "undated"]
    assert titles(desc) == ["later", "sooner", "undated"]


@pytest.mark.parametrize("limit,offset", [(1, 0), (2, 1), (5, 3), (10, 10)])
def test_total_ignores_pagination(task_repo, make_task, alice, limit, offset) -> None:
    for i in range(5):
        make_task(alice, f"task {i}")

    tasks, total = task_repo.find_by_owner(alice.id, TaskFilter(limit=limit, offset=offset))

    assert total == 5
    assert len(tasks) == max(0, min(limit, 5 - offset))


def test_pages_do_not_overlap(task_repo, make_task, alice) -> None:
    for i in range(5):
        make_task(alice, f"task {i}")

    first, _ = task_repo.find_by_owner(alice.id, TaskFilter(limit=3, offset=0))
    second, _ = task_repo.find_by_owner(alice.id, TaskFilter(limit=3, offset=3))

    ids = [task.id for task in first + second]
    assert len(ids) == len(set(ids)) == 5


def test_stats_on_empty_account_are_zero_filled(task_repo, alice) -> None:
    stats = task_repo.stats_for(alice.id, NOW)

    assert stats.total == 0
    assert stats.pending == 0
    assert stats.by_category == {
        "work": 0, "personal": 0, "shopping": 0, "health": 0, "education": 0, "other": 0,
    }
    assert stats.by_priority == {"low": 0, "medium": 0, "high": 0}


def test_stats_counts(task_repo, make_task, alice, bob) -> None:
    make_task(alice, "done", completed=True, category="work", priority="high")
    make_task(alice, "overdue", due_date=NOW - timedelta(hours=1), category="work")
    make_task(alice, "archived overdue", due_date=NOW - timedelta(days=3), is_archived=True)
    make_task(alice, "upcoming", due_date=NOW + timedelta(days=2), category="health", priority="low")
    make_task(alice, "far future", due_date=NOW + timedelta(days=30))
    make_task(alice, "done late", completed=True, due_date=NOW - timedelta(days=1))
    make_task(bob, "someone else's", due_date=NOW - timedelta(days=1))

    stats = task_repo.stats_for(alice.id, NOW)

    assert stats.total == 6
    assert stats.completed == 2
    assert stats.pending == 4
    assert stats.overdue == 2
    assert stats.archived == 1
    assert stats.upcoming == 1
    assert stats.by_category["work"] == 2
    assert stats.by_category["health"] == 1
    assert stats.by_category["other"] == 3
    assert stats.by_priority == {"low": 1, "medium": 4, "high": 1}


def test_bulk_update_skips_tasks_owned_by_others(task_repo, make_task, alice, bob) -> None:
    mine = make_task(alice, "mine")
    theirs = make_task(bob, "theirs")

    updated = task_repo.bulk_update([mine.id, theirs.id], alice.id, {"priority": "high"})

    assert [task.id for task in updated] == [mine.id]
    assert task_repo.find_by_id(mine.id).priority == "high"
    assert task_repo.find_by_id(theirs.id).priority == "medium"


def test_bulk_update_completion_sets_completed_at(task_repo, make_task, alice, clock) -> None:
    task = make_task(alice, "open")

    [updated] = task_repo.bulk_update([task.id], alice.id, {"completed": True})

    assert updated.completed
    assert updated.completed_at == clock()


def test_delete_is_owner_scoped(task_repo, make_task, alice, bob) -> None:
    task = make_task(alice, "mine")

    assert task_repo.delete(task.id, bob.id) is False
    assert task_repo.find_by_id(task.id) is not None
    assert task_repo.delete(task.id, alice.id) is True
    assert task_repo.find_by_id(task.id) is None
    assert task_repo.delete(task.id, alice.id) is False


def test_overdue_excludes_archived_and_completed(task_repo, make_task, alice) -> None:
    make_task(alice, "late b", due_date=NOW - timedelta(hours=1))
    make_task(alice, "late a", due_date=NOW - timedelta(days=2))
    make_task(alice, "archived", due_date=NOW - timedelta(days=1), is_archived=True)
    make_task(alice, "done", due_date=NOW - timedelta(days=1), completed=True)
    make_task(alice, "future", due_date=NOW + timedelta(days=1))

    assert titles(task_repo.overdue_for(alice.id, NOW)) == ["late a", "late b"]


def test_period_queries(task_repo, make_task, alice) -> None:
    start, end = NOW - timedelta(days=7), NOW
    make_task(alice, "completed in window", completed=True,
              created_at=NOW - timedelta(days=20), completed_at=NOW - timedelta(days=2))
    make_task(alice, "completed before window", completed=True,
              created_at=NOW - timedelta(days=20), completed_at=NOW - timedelta(days=10))
    make_task(alice, "created in window", created_at=NOW - timedelta(days=1))

    assert titles(task_repo.completed_in_period(alice.id, start, end)) == ["completed in window"]
    assert titles(task_repo.created_in_period(alice.id, start, end)) == ["created in window"]


def test_owner_deletion_cascades_to_tasks(session, task_repo, make_task, alice) -> None:
    task = make_task(alice, "mine")

    session.delete(alice)
    session.commit()
    session.expire_all()

    assert task_repo.find_by_id(task.id) is None


def test_timestamps_round_trip_through_storage(session, task_repo, make_task, alice) -> None:
    created = NOW - timedelta(days=1)
    done_at = NOW - timedelta(hours=4, seconds=30)
    due = NOW + timedelta(days=2, minutes=15)
    task = make_task(alice, "stored", completed=True, created_at=created, completed_at=done_at, due_date=due)

    session.expire_all()
    stored = task_repo.find_by_id(task.id)

    assert stored.created_at == created
    assert stored.completed_at == done_at
    assert stored.due_date == due
    assert stored.created_at.tzinfo is None
    assert alice.created_at.tzinfo is None


def test_tag_filter_is_case_sensitive(task_repo, make_task, alice) -> None:
    make_task(alice, "lower", tags=["work"])
    make_task(alice, "upper", tags=["WORK"])

    exact, total = task_repo.find_by_owner(alice.id, TaskFilter(tags=["WORK"]))
    missing, none = task_repo.find_by_owner(alice.id, TaskFilter(tags=["Work"]))

    assert titles(exact) == ["upper"]
    assert total == 1
    assert missing == []
    assert none == 0


def test_search_folds_non_ascii_case(task_repo, make_task, alice) -> None:
    make_task(alice, "Ünïcode notes")
    make_task(alice, "Other", description="STRASSE maps")
    make_task(alice, "plain")

    accented, _ = task_repo.find_by_owner(alice.id, TaskFilter(search="üNÏCODE"))
    folded, _ = task_repo.find_by_owner(alice.id, TaskFilter(search="straße"))

    assert titles(accented) == ["Ünïcode notes"]
    assert titles(folded) == ["Other"]
