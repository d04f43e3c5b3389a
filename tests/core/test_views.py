"""
Tests for derived views: statistics, filters, sorting.
"""

import pytest
from datetime import date, datetime, timedelta

TODAY = date(2025, 3, 10)


def make_task(task_id, **kwargs):
    from taskboard.models.task import Task

    return Task(id=task_id, title=f"Task {task_id}", **kwargs)


class TestStats:
    """Tests for compute_stats()."""

    def test_empty_collection(self):
        from taskboard.services.views import compute_stats

        stats = compute_stats([])

        assert stats.total == 0
        assert stats.completed == 0
        assert stats.pending == 0
        assert stats.completion_percentage == 0

    @pytest.mark.parametrize(
        "completed, total, expected",
        [(1, 3, 33), (2, 3, 67), (1, 2, 50), (1, 8, 13), (3, 3, 100), (0, 5, 0)],
    )
    def test_completion_percentage(self, completed, total, expected):
        from taskboard.services.views import compute_stats

        tasks = [make_task(str(i), completed=i < completed) for i in range(total)]

        stats = compute_stats(tasks)

        assert stats.completed == completed
        assert stats.pending == total - completed
        assert stats.completion_percentage == expected

    def test_priority_counts_case_insensitive(self):
        from taskboard.services.views import compute_stats

        tasks = [
            make_task("a", priority="high"),
            make_task("b", priority="High"),
            make_task("c", priority="medium"),
            make_task("d", priority="low"),
            make_task("e", priority="urgent"),
            make_task("f"),
        ]

        stats = compute_stats(tasks)

        assert (stats.high, stats.medium, stats.low) == (2, 1, 1)
        assert stats.total == 6

    def test_stats_from_raw_records(self, sample_records):
        from taskboard.services.normalizer import normalize_tasks
        from taskboard.services.views import compute_stats

        stats = compute_stats(normalize_tasks(sample_records))

        assert stats.to_dict() == {
            "total": 3,
            "completed": 1,
            "pending": 2,
            "completionPercentage": 33,
            "lowPriority": 1,
            "mediumPriority": 1,
            "highPriority": 1,
        }


class TestPendingAgreesWithStats:
    """Dashboard counts and the pending list use one predicate."""

    def test_counts_agree_for_odd_inputs(self):
        from taskboard.services.normalizer import normalize_tasks
        from taskboard.services.views import compute_stats, pending_tasks

        records = [
            {"id": str(i), "completed": value}
            for i, value in enumerate([True, 1, "Yes", "yes", False, 0, "No", None, "maybe", 2, []])
        ] + [{"id": "missing"}]

        tasks = normalize_tasks(records)
        stats = compute_stats(tasks)

        assert stats.completed + len(pending_tasks(tasks)) == stats.total
        assert len(pending_tasks(tasks)) == stats.pending == 8

    def test_undefined_is_pending_and_yes_is_not(self):
        from taskboard.services.normalizer import normalize_tasks
        from taskboard.services.views import pending_tasks

        tasks = normalize_tasks([{"id": "u"}, {"id": "y", "completed": "Yes"}])

        assert [t.id for t in pending_tasks(tasks)] == ["u"]


class TestFilters:
    """Tests for filter_tasks()."""

    def test_today_ignores_time_of_day(self):
        from taskboard.services.views import filter_tasks

        tasks = [
            make_task("morning", due_date=datetime(2025, 3, 10, 0, 1)),
            make_task("night", due_date=datetime(2025, 3, 10, 23, 59)),
            make_task("yesterday", due_date=datetime(2025, 3, 9, 23, 59)),
            make_task("tomorrow", due_date=datetime(2025, 3, 11, 0, 0)),
            make_task("none"),
        ]

        result = filter_tasks(tasks, "today", today=TODAY)

        assert [t.id for t in result] == ["morning", "night"]

    def test_week_is_inclusive(self):
        from taskboard.services.views import filter_tasks

        base = datetime(2025, 3, 10, 18, 0)
        tasks = [
            make_task("past", due_date=base - timedelta(days=1)),
            make_task("today", due_date=base),
            make_task("day7", due_date=base + timedelta(days=7)),
            make_task("day8", due_date=base + timedelta(days=8)),
            make_task("none"),
        ]

        result = filter_tasks(tasks, "week", today=TODAY)

        assert [t.id for t in result] == ["today", "day7"]

    def test_priority_filters(self):
        from taskboard.services.views import filter_tasks

        tasks = [
            make_task("a", priority="high"),
            make_task("b", priority="HIGH"),
            make_task("c", priority="low"),
            make_task("d"),
        ]

        assert [t.id for t in filter_tasks(tasks, "high")] == ["a", "b"]
        assert [t.id for t in filter_tasks(tasks, "low")] == ["c"]
        assert filter_tasks(tasks, "medium") == []

    @pytest.mark.parametrize("key", ["all", "bogus", "", None])
    def test_all_and_unknown_keys_keep_everything(self, key):
        from taskboard.services.views import filter_tasks

        tasks = [make_task("a"), make_task("b", priority="low")]

        assert [t.id for t in filter_tasks(tasks, key, today=TODAY)] == ["a", "b"]

    def test_filter_keys_case_insensitive(self):
        from taskboard.services.views import filter_tasks

        tasks = [make_task("a", due_date=datetime(2025, 3, 10))]

        assert len(filter_tasks(tasks, "Today", today=TODAY)) == 1


class TestSorting:
    """Tests for sort_tasks()."""

    def test_priority_descending(self):
        from taskboard.services.views import sort_tasks

        tasks = [make_task("l", priority="low"), make_task("h", priority="high"), make_task("m", priority="medium")]

        assert [t.priority for t in sort_tasks(tasks, "priority")] == ["high", "medium", "low"]

    def test_priority_unknown_last_and_stable(self):
        from taskboard.services.views import sort_tasks

        tasks = [
            make_task("x", priority="urgent"),
            make_task("h1", priority="high"),
            make_task("n"),
            make_task("h2", priority="High"),
            make_task("l", priority="low"),
        ]

        result = sort_tasks(tasks, "priority")

        assert [t.id for t in result] == ["h1", "h2", "l", "x", "n"]

    def test_newest_and_oldest(self):
        from taskboard.services.views import sort_tasks

        tasks = [
            make_task("mid", created_at=datetime(2025, 3, 2)),
            make_task("old", created_at=datetime(2025, 3, 1)),
            make_task("new", created_at=datetime(2025, 3, 3)),
        ]

        assert [t.id for t in sort_tasks(tasks, "newest")] == ["new", "mid", "old"]
        assert [t.id for t in sort_tasks(tasks, "oldest")] == ["old", "mid", "new"]

    def test_missing_created_at_is_oldest(self):
        from taskboard.services.views import sort_tasks

        tasks = [
            make_task("undated1"),
            make_task("dated", created_at=datetime(2025, 3, 1)),
            make_task("undated2"),
        ]

        assert [t.id for t in sort_tasks(tasks, "newest")] == ["dated", "undated1", "undated2"]
        assert [t.id for t in sort_tasks(tasks, "oldest")] == ["undated1", "undated2", "dated"]

    def test_mixed_naive_and_aware_dates(self):
        from taskboard.services.normalizer import normalize_tasks
        from taskboard.services.views import sort_tasks

        tasks = normalize_tasks([
            {"id": "aware", "createdAt": "2025-03-02T00:00:00Z"},
            {"id": "naive", "createdAt": "2025-03-01T00:00:00"},
        ])

        assert [t.id for t in sort_tasks(tasks, "newest")] == ["aware", "naive"]

    def test_unknown_sort_keeps_order(self):
        from taskboard.services.views import sort_tasks

        tasks = [make_task("b"), make_task("a")]

        assert [t.id for t in sort_tasks(tasks, "alphabetical")] == ["b", "a"]

    def test_sort_does_not_mutate_input(self):
        from taskboard.services.views import sort_tasks

        tasks = [make_task("l", priority="low"), make_task("h", priority="high")]
        sort_tasks(tasks, "priority")

        assert [t.id for t in tasks] == ["l", "h"]


class TestPendingView:
    """Tests for pending_tasks()."""

    def test_pending_sorted_by_priority(self):
        from taskboard.services.views import pending_tasks

        tasks = [
            make_task("done", priority="high", completed=True),
            make_task("l", priority="low"),
            make_task("h", priority="high"),
        ]

        assert [t.id for t in pending_tasks(tasks, "priority")] == ["h", "l"]


class TestSubtaskProgress:
    """Tests for subtask_progress()."""

    def test_no_subtasks(self):
        from taskboard.services.views import subtask_progress

        assert subtask_progress(make_task("a")) == 0.0

    def test_partial(self):
        from taskboard.models.task import Subtask
        from taskboard.services.views import subtask_progress

        task = make_task("a", subtasks=[Subtask("x", True), Subtask("y", False), Subtask("z", False), Subtask("w", True)])

        assert subtask_progress(task) == 50.0


class TestLabels:
    """Tests for recent_tasks(), due_label() and created_label()."""

    def test_recent_takes_first_three(self):
        from taskboard.services.views import recent_tasks

        tasks = [make_task(str(i)) for i in range(5)]

        assert [t.id for t in recent_tasks(tasks)] == ["0", "1", "2"]
        assert recent_tasks(tasks, limit=0) == []

    def test_due_label(self):
        from taskboard.services.views import due_label

        assert due_label(make_task("a", due_date=datetime(2025, 3, 10, 15)), today=TODAY) == "Today"
        assert due_label(make_task("b", due_date=datetime(2025, 3, 5)), today=TODAY) == "Mar 05"
        assert due_label(make_task("c"), today=TODAY) == "-"

    def test_created_label(self):
        from taskboard.services.views import created_label

        assert created_label(make_task("a", created_at=datetime(2025, 1, 7))) == "Created Jan 07"
        assert created_label(make_task("b")) == "No date"
