# tests/test_analytics_service.py

from datetime import date, datetime, timedelta

import pytest

from taskmanager.errors import ValidationError
from taskmanager.services.analytics_service import best_weekday, completion_streak, percent_change

from .conftest import NOW


@pytest.fixture()
def complete(make_task, alice):
    """Create one of alice's tasks completed ``ago`` before NOW."""

    def _complete(ago, took=timedelta(hours=1), **fields):
        completed_at = NOW - ago
        return make_task(
            alice,
            fields.pop("title", "done"),
            completed=True,
            created_at=completed_at - took,
            completed_at=completed_at,
            **fields,
        )

    return _complete


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Pure helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_streak_stops_at_first_gap() -> None:
    today = date(2026, 3, 11)
    days = [today, today - timedelta(days=1), today - timedelta(days=3)]

    assert completion_streak(days, today) == 2


def test_streak_is_zero_without_a_completion_today() -> None:
    today = date(2026, 3, 11)

    assert completion_streak([today - timedelta(days=1)], today) == 0


def test_streak_scan_is_capped() -> None:
    today = date(2026, 3, 11)
    days = [today - timedelta(days=i) for i in range(45)]

    assert completion_streak(days, today) == 30


def test_percent_change_with_empty_previous_window_is_zero() -> None:
    # Documented policy: no baseline means no trend, not infinity
    assert percent_change(5, 0) == 0.0
    assert percent_change(0, 0) == 0.0


def test_percent_change() -> None:
    assert percent_change(3, 2) == 50.0
    assert percent_change(1, 4) == -75.0


def test_best_weekday_picks_most_completions() -> None:
    monday = datetime(2026, 3, 9, 10)
    wednesday = datetime(2026, 3, 11, 10)

    assert best_weekday([monday, monday, wednesday]) == "Monday"


def test_best_weekday_ties_go_to_earliest_in_week() -> None:
    saturday = datetime(2026, 3, 7, 10)
    sunday = datetime(2026, 3, 8, 10)
    tuesday = datetime(2026, 3, 10, 10)

    assert best_weekday([saturday, tuesday, sunday]) == "Sunday"
    assert best_weekday([]) == "Sunday"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# get_analytics
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_analytics_buckets_completions_by_day(analytics_service, complete, alice) -> None:
    complete(timedelta(hours=1))
    complete(timedelta(hours=2))
    complete(timedelta(days=2))

    analytics = analytics_service.get_analytics(alice.id, 7)

    assert [(point.date, point.count) for point in analytics.completed_tasks_over_time] == [
        (date(2026, 3, 9), 1),
        (date(2026, 3, 11), 2),
    ]
    assert analytics.completed_tasks_in_period == 3


def test_analytics_breakdowns_count_only_completed(analytics_service, complete, make_task, alice) -> None:
    complete(timedelta(hours=1), category="work", priority="high")
    complete(timedelta(hours=2), category="work", priority="low")
    make_task(alice, "open", category="health", created_at=NOW - timedelta(days=1))

    analytics = analytics_service.get_analytics(alice.id, 7)

    assert analytics.tasks_by_category == {"work": 2}
    assert analytics.tasks_by_priority == {"high": 1, "low": 1}
    assert analytics.total_tasks_in_period == 3


def test_analytics_average_completion_time(analytics_service, complete, alice) -> None:
    complete(timedelta(hours=1), took=timedelta(hours=10))
    complete(timedelta(hours=1), took=timedelta(hours=20, minutes=20))

    analytics = analytics_service.get_analytics(alice.id, 7)

    assert analytics.average_completion_time == 15.17


def test_analytics_without_completions(analytics_service, alice) -> None:
    analytics = analytics_service.get_analytics(alice.id, 30)

    assert analytics.completed_tasks_over_time == []
    assert analytics.average_completion_time == 0
    assert analytics.productivity_trend == 0
    assert analytics.total_tasks_in_period == 0


def test_analytics_trend_against_previous_window(analytics_service, complete, alice) -> None:
    for hours in (1, 2, 3):
        complete(timedelta(hours=hours))
    for days in (8, 9):
        complete(timedelta(days=days))
    complete(timedelta(days=20))  # outside both windows

    analytics = analytics_service.get_analytics(alice.id, 7)

    assert analytics.completed_tasks_in_period == 3
    assert analytics.productivity_trend == 50.0


def test_analytics_trend_is_zero_when_previous_window_empty(analytics_service, complete, alice) -> None:
    complete(timedelta(hours=1))

    assert analytics_service.get_analytics(alice.id, 7).productivity_trend == 0


def test_analytics_trend_rounds_to_two_decimals(analytics_service, complete, alice) -> None:
    complete(timedelta(hours=1))
    for days in (8, 9, 10):
        complete(timedelta(days=days))

    assert analytics_service.get_analytics(alice.id, 7).productivity_trend == -66.67


def test_analytics_is_owner_scoped(analytics_service, complete, make_task, bob) -> None:
    complete(timedelta(hours=1))
    make_task(bob, "bob's", completed=True, completed_at=NOW - timedelta(hours=1),
              created_at=NOW - timedelta(hours=2))

    assert analytics_service.get_analytics(bob.id, 7).completed_tasks_in_period == 1


@pytest.mark.parametrize("days", [0, -1, 366])
def test_analytics_rejects_bad_window(analytics_service, alice, days) -> None:
    with pytest.raises(ValidationError):
        analytics_service.get_analytics(alice.id, days)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# get_productivity_insights
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_insights_streak_scenario(analytics_service, complete, alice) -> None:
    complete(timedelta(hours=1))
    complete(timedelta(days=1))
    complete(timedelta(days=3))

    assert analytics_service.get_productivity_insights(alice.id).streak_days == 2


def test_insights_rank_categories_by_completion_rate(analytics_service, complete, make_task, alice) -> None:
    complete(timedelta(hours=1), category="work")
    make_task(alice, "open work", category="work")
    complete(timedelta(hours=2), category="health")
    make_task(alice, "open other", category="other")

    insights = analytics_service.get_productivity_insights(alice.id)

    assert insights.most_productive_category == "health"
    assert insights.least_productive_category == "other"
    assert insights.recommended_focus == "other"


def test_insights_default_to_other_without_tasks(analytics_service, alice) -> None:
    insights = analytics_service.get_productivity_insights(alice.id)

    assert insights.most_productive_category == "other"
    assert insights.least_productive_category == "other"
    assert insights.recommended_focus == "other"
    assert insights.streak_days == 0
    assert insights.average_tasks_per_day == 0
    assert insights.time_to_complete.model_dump() == {"low": 0.0, "medium": 0.0, "high": 0.0}


def test_insights_completion_time_per_priority(analytics_service, complete, alice) -> None:
    complete(timedelta(hours=1), took=timedelta(hours=2), priority="high")
    complete(timedelta(hours=1), took=timedelta(hours=4), priority="high")
    complete(timedelta(hours=1), took=timedelta(minutes=90), priority="low")

    times = analytics_service.get_productivity_insights(alice.id).time_to_complete

    assert times.high == 3.0
    assert times.low == 1.5
    assert times.medium == 0.0


def test_insights_average_per_day_and_best_day(analytics_service, complete, alice) -> None:
    # NOW is a Wednesday; two completions on Monday, one today
    complete(timedelta(days=2))
    complete(timedelta(days=2, hours=1))
    complete(timedelta(hours=1))

    insights = analytics_service.get_productivity_insights(alice.id)

    assert insights.average_tasks_per_day == 0.1
    assert insights.best_completion_day == "Monday"


def test_insights_ignore_completions_older_than_thirty_days(analytics_service, complete, alice) -> None:
    complete(timedelta(days=45))

    insights = analytics_service.get_productivity_insights(alice.id)

    assert insights.average_tasks_per_day == 0
    assert insights.streak_days == 0
