"""
Unit Tests for the Smart Task Advisor.

This module covers the keyword lexicon, deadline buckets, priority scoring
with and without the text classifier, the classifier adapter lifecycle,
portfolio insights and the REST endpoints.
"""

import json
import threading
import time
from datetime import date, datetime, timedelta, timezone as dt_timezone

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from .classifier import (
    ClassificationResult,
    ClassifierAdapter,
    ClassifierLoadFailure,
    ClassifierStatus,
    default_loaders
)
from .insights import (
    BREAK_DOWN_RECOMMENDATION,
    CONSOLIDATE_RECOMMENDATION,
    GREAT_JOB_INSIGHT,
    OVERDUE_RECOMMENDATION,
    POMODORO_RECOMMENDATION,
    PortfolioAnalyzer,
    compute_stats
)
from .models import Task
from .records import Priority, TaskRecord, parse_instant, to_record
from .scoring import (
    HIGH_PRIORITY_KEYWORDS,
    LOW_PRIORITY_KEYWORDS,
    MEDIUM_PRIORITY_KEYWORDS,
    PriorityScorer,
    classify_score,
    days_until,
    deadline_contribution
)
from .services import (
    advisor_status,
    analyze_portfolio,
    configure_advisor,
    initialize_advisor,
    portfolio_stats,
    score_priority
)
from .store import iter_task_records


NOW = datetime(2025, 1, 10, tzinfo=dt_timezone.utc)


def classifier_returning(label, score=0.9, calls=None):
    """Loader for a fake backend that always returns ``label``."""
    def load():
        def classify(text):
            if calls is not None:
                calls.append(text)
            return [{'label': label, 'score': score}, {'label': 'other', 'score': 0.1}]
        return classify
    return load


def failing_loader():
    raise ClassifierLoadFailure("no backend available")


def ready_adapter(label, calls=None):
    adapter = ClassifierAdapter(loaders=[classifier_returning(label, calls=calls)])
    adapter.initialize()
    return adapter


def unavailable_adapter():
    adapter = ClassifierAdapter(loaders=[failing_loader])
    adapter.initialize()
    return adapter


def make_task(i, **kwargs):
    defaults = {
        'id': str(i),
        'title': f'Task {i}',
        'priority': 'none',
        'category': 'work',
        'completed': False,
    }
    defaults.update(kwargs)
    return defaults


class LexiconTests(TestCase):
    """Tests for keyword matching."""

    def test_high_keywords_listed_in_declaration_order(self):
        """Matched keywords follow the keyword set order, not the text order."""
        matched = HIGH_PRIORITY_KEYWORDS.matches("submit urgent report to client")
        self.assertEqual(matched, ['urgent', 'client', 'submit'])

    def test_substring_matching(self):
        """Keywords match inside longer words."""
        self.assertEqual(MEDIUM_PRIORITY_KEYWORDS.matches("rescheduled sync"), ['schedule'])
        self.assertEqual(LOW_PRIORITY_KEYWORDS.matches("fundamentals"), ['fun'])

    def test_phrase_format(self):
        phrase = LOW_PRIORITY_KEYWORDS.phrase(['someday', 'maybe'])
        self.assertEqual(phrase, "Contains low-priority keywords: someday, maybe")

    def test_no_match(self):
        self.assertEqual(HIGH_PRIORITY_KEYWORDS.matches("buy groceries"), [])


class TemporalTests(TestCase):
    """Tests for deadline buckets."""

    def bucket(self, days):
        return deadline_contribution(NOW + timedelta(days=days), NOW)

    def test_days_until_rounds_up(self):
        self.assertEqual(days_until(NOW + timedelta(hours=12), NOW), 1)
        self.assertEqual(days_until(NOW + timedelta(days=2, minutes=1), NOW), 3)
        self.assertEqual(days_until(NOW - timedelta(days=5), NOW), -5)

    def test_overdue_falls_in_first_bucket(self):
        self.assertEqual(self.bucket(-5), (0.8, "Deadline is within 1 day"))

    def test_within_one_day(self):
        self.assertEqual(self.bucket(0), (0.8, "Deadline is within 1 day"))
        self.assertEqual(self.bucket(1), (0.8, "Deadline is within 1 day"))

    def test_within_three_days(self):
        self.assertEqual(self.bucket(2), (0.6, "Deadline is within 3 days"))
        self.assertEqual(self.bucket(3), (0.6, "Deadline is within 3 days"))

    def test_within_a_week(self):
        self.assertEqual(self.bucket(4), (0.3, "Deadline is within a week"))
        self.assertEqual(self.bucket(7), (0.3, "Deadline is within a week"))

    def test_beyond_a_week(self):
        self.assertEqual(self.bucket(8), (0.0, "Deadline is in 8 days"))

    def test_no_deadline(self):
        self.assertIsNone(deadline_contribution(None, NOW))


class ClassifyScoreTests(TestCase):
    """Tests for the score threshold table."""

    def test_thresholds_are_inclusive(self):
        self.assertEqual(classify_score(0.7), (Priority.HIGH, 0.7))
        self.assertEqual(classify_score(0.4), (Priority.MEDIUM, 0.4))
        self.assertEqual(classify_score(0.1), (Priority.LOW, 0.1))

    def test_high_confidence_capped(self):
        self.assertEqual(classify_score(1.5), (Priority.HIGH, 1.0))

    def test_none_confidence(self):
        self.assertEqual(classify_score(0.05), (Priority.NONE, 0.95))

    def test_negative_score_confidence_clamped(self):
        """1 - S would exceed 1.0 for negative scores."""
        self.assertEqual(classify_score(-0.3), (Priority.NONE, 1.0))


class PriorityScorerTests(TestCase):
    """Tests for heuristic-only scoring."""

    def setUp(self):
        self.scorer = PriorityScorer(classifier=unavailable_adapter())

    def test_urgent_client_task_due_today(self):
        verdict = self.scorer.score(
            "Submit urgent report to client", None, NOW + timedelta(hours=12), NOW
        )

        self.assertEqual(verdict.suggested_priority, Priority.HIGH)
        self.assertEqual(verdict.confidence, 1.0)
        self.assertEqual(verdict.reasoning, (
            "Contains high-priority keywords: urgent, client, submit",
            "Deadline is within 1 day",
        ))
        self.assertEqual(verdict.score, 1.5)

    def test_medium_and_low_keywords_cancel_to_low(self):
        verdict = self.scorer.score("Plan hobby project", None, None, NOW)

        self.assertEqual(verdict.suggested_priority, Priority.LOW)
        self.assertEqual(verdict.confidence, 0.1)
        self.assertEqual(verdict.reasoning, (
            "Contains medium-priority keywords: plan",
            "Contains low-priority keywords: hobby",
        ))

    def test_low_keyword_only_is_none_with_full_confidence(self):
        verdict = self.scorer.score("Read book someday", None, None, NOW)

        self.assertEqual(verdict.suggested_priority, Priority.NONE)
        self.assertEqual(verdict.confidence, 1.0)
        self.assertEqual(verdict.reasoning, ("Contains low-priority keywords: someday",))

    def test_no_signal_uses_default_reasoning(self):
        verdict = self.scorer.score("Buy groceries", None, None, NOW)

        self.assertEqual(verdict.suggested_priority, Priority.NONE)
        self.assertEqual(verdict.confidence, 1.0)
        self.assertEqual(verdict.reasoning_text, "Analysis based on content and deadline")

    def test_exact_thresholds(self):
        high = self.scorer.score("Urgent", None, None, NOW)
        medium = self.scorer.score("Review notes", None, None, NOW)
        mixed = self.scorer.score("Urgent hobby", None, None, NOW)

        self.assertEqual((high.suggested_priority, high.confidence), (Priority.HIGH, 0.7))
        self.assertEqual((medium.suggested_priority, medium.confidence), (Priority.MEDIUM, 0.4))
        self.assertEqual((mixed.suggested_priority, mixed.confidence), (Priority.MEDIUM, 0.4))

    def test_description_is_searched(self):
        verdict = self.scorer.score("Slides", "For the client meeting", None, NOW)
        self.assertEqual(
            verdict.reasoning[0],
            "Contains high-priority keywords: meeting, client"
        )

    def test_empty_title_permitted(self):
        verdict = self.scorer.score("", "prepare slides", None, NOW)
        self.assertEqual(verdict.suggested_priority, Priority.MEDIUM)

    def test_reasoning_order(self):
        verdict = self.scorer.score(
            "Maybe review the client deck", None, NOW + timedelta(days=10), NOW
        )
        self.assertEqual(verdict.reasoning, (
            "Contains high-priority keywords: client",
            "Contains medium-priority keywords: review",
            "Contains low-priority keywords: maybe",
            "Deadline is in 10 days",
        ))

    def test_reasoning_text_joined(self):
        verdict = self.scorer.score("Plan hobby project", None, None, NOW)
        self.assertEqual(
            verdict.reasoning_text,
            "Contains medium-priority keywords: plan; Contains low-priority keywords: hobby"
        )

    def test_near_deadline_never_lowers_priority(self):
        order = [Priority.NONE, Priority.LOW, Priority.MEDIUM, Priority.HIGH]
        for title in ["Plan hobby project", "Read book someday", "Buy groceries", "Review notes"]:
            without = self.scorer.score(title, None, None, NOW)
            with_deadline = self.scorer.score(title, None, NOW + timedelta(hours=6), NOW)
            self.assertGreaterEqual(
                order.index(with_deadline.suggested_priority),
                order.index(without.suggested_priority),
                title
            )

    def test_works_without_classifier(self):
        verdict = PriorityScorer().score("Urgent", None, None, NOW)
        self.assertEqual(verdict.suggested_priority, Priority.HIGH)
        self.assertFalse(verdict.ai_adjusted)


class ClassifierAugmentedScoringTests(TestCase):
    """Tests for the optional classifier boost."""

    TITLES = [
        ("Submit urgent report to client", None),
        ("Plan hobby project", None),
        ("Read book someday", "eventually"),
        ("Buy groceries", None),
    ]

    def test_non_urgent_label_matches_heuristic_verdict(self):
        heuristic = PriorityScorer(classifier=unavailable_adapter())
        augmented = PriorityScorer(classifier=ready_adapter('joy'))

        for title, description in self.TITLES:
            for deadline in (None, NOW + timedelta(days=2)):
                self.assertEqual(
                    heuristic.score(title, description, deadline, NOW),
                    augmented.score(title, description, deadline, NOW)
                )

    def test_anger_label_adds_boost(self):
        scorer = PriorityScorer(classifier=ready_adapter('anger'))
        verdict = scorer.score("Review notes", None, None, NOW)

        self.assertEqual(verdict.suggested_priority, Priority.MEDIUM)
        self.assertEqual(verdict.confidence, 0.6)
        self.assertEqual(verdict.reasoning[-1], "AI detected urgency-related sentiment")
        self.assertTrue(verdict.ai_adjusted)

    def test_boost_can_cross_threshold(self):
        scorer = PriorityScorer(classifier=ready_adapter('FEAR'))
        verdict = scorer.score("Buy groceries", None, None, NOW)

        self.assertEqual(verdict.suggested_priority, Priority.LOW)
        self.assertEqual(verdict.confidence, 0.2)
        self.assertEqual(verdict.reasoning, ("AI detected urgency-related sentiment",))

    def test_ai_phrase_comes_after_deadline(self):
        scorer = PriorityScorer(classifier=ready_adapter('anger'))
        verdict = scorer.score("Urgent", None, NOW + timedelta(days=5), NOW)
        self.assertEqual(verdict.reasoning[-2:], (
            "Deadline is within a week",
            "AI detected urgency-related sentiment",
        ))

    def test_classifier_receives_lowercased_text(self):
        calls = []
        scorer = PriorityScorer(classifier=ready_adapter('joy', calls=calls))
        scorer.score("Call The BOSS", "About Budget", None, NOW)
        self.assertEqual(calls, ["call the boss about budget"])

    def test_classifier_failure_ignored(self):
        def load():
            def classify(text):
                raise RuntimeError("inference crashed")
            return classify

        adapter = ClassifierAdapter(loaders=[load])
        adapter.initialize()
        scorer = PriorityScorer(classifier=adapter)

        with self.assertLogs('advisor.classifier', level='WARNING'):
            verdict = scorer.score("Review notes", None, None, NOW)

        self.assertEqual(verdict.suggested_priority, Priority.MEDIUM)
        self.assertEqual(verdict.confidence, 0.4)
        self.assertFalse(verdict.ai_adjusted)


class ClassifierAdapterTests(TestCase):
    """Tests for the classifier adapter lifecycle."""

    def test_starts_uninitialized(self):
        adapter = ClassifierAdapter(loaders=[classifier_returning('joy')])
        self.assertEqual(adapter.status, ClassifierStatus.UNINITIALIZED)
        self.assertIsNone(adapter.try_classify("anything"))

    def test_successful_load_is_ready(self):
        adapter = ClassifierAdapter(loaders=[classifier_returning('fear', score=0.75)])
        self.assertEqual(adapter.initialize(), ClassifierStatus.READY)
        self.assertEqual(
            adapter.try_classify("text"),
            ClassificationResult(label='fear', score=0.75)
        )

    def test_falls_back_to_next_loader(self):
        adapter = ClassifierAdapter(loaders=[failing_loader, classifier_returning('joy')])
        self.assertEqual(adapter.initialize(), ClassifierStatus.READY)

    def test_all_loaders_failing_is_unavailable(self):
        def broken():
            raise RuntimeError("out of memory")

        adapter = ClassifierAdapter(loaders=[failing_loader, broken])
        with self.assertLogs('advisor.classifier', level='WARNING'):
            status_ = adapter.initialize()

        self.assertEqual(status_, ClassifierStatus.UNAVAILABLE)
        self.assertIsNone(adapter.try_classify("text"))

    def test_initialize_only_once(self):
        calls = []

        def counting_loader():
            calls.append(1)
            raise ClassifierLoadFailure("nope")

        adapter = ClassifierAdapter(loaders=[counting_loader])
        with self.assertLogs('advisor.classifier', level='WARNING'):
            adapter.initialize()
        adapter.initialize()
        adapter.initialize()

        self.assertEqual(len(calls), 1)
        self.assertEqual(adapter.status, ClassifierStatus.UNAVAILABLE)

    def test_concurrent_initialize_loads_once(self):
        calls = []

        def slow_loader():
            calls.append(1)
            time.sleep(0.05)
            return lambda text: [{'label': 'joy', 'score': 1.0}]

        adapter = ClassifierAdapter(loaders=[slow_loader])
        results = []
        threads = [
            threading.Thread(target=lambda: results.append(adapter.initialize()))
            for _ in range(5)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(calls), 1)
        self.assertEqual(results, [ClassifierStatus.READY] * 5)

    def test_disabled_never_loads(self):
        calls = []
        adapter = ClassifierAdapter(loaders=[classifier_returning('joy', calls=calls)], enabled=False)

        self.assertEqual(adapter.initialize(), ClassifierStatus.UNAVAILABLE)
        self.assertIsNone(adapter.try_classify("text"))
        self.assertEqual(calls, [])

    def test_nested_pipeline_output(self):
        def load():
            return lambda text: [[{'label': 'anger', 'score': 0.6}, {'label': 'joy', 'score': 0.4}]]

        adapter = ClassifierAdapter(loaders=[load])
        adapter.initialize()
        self.assertEqual(adapter.try_classify("text").label, 'anger')

    def test_empty_output_is_no_result(self):
        adapter = ClassifierAdapter(loaders=[lambda: (lambda text: [])])
        adapter.initialize()
        self.assertIsNone(adapter.try_classify("text"))

    def test_default_loaders_order(self):
        self.assertEqual(len(default_loaders(prefer_gpu=True)), 2)
        self.assertEqual(len(default_loaders(prefer_gpu=False)), 1)


class PortfolioAnalyzerTests(TestCase):
    """Tests for productivity insights."""

    def setUp(self):
        self.analyzer = PortfolioAnalyzer()

    def test_empty_collection(self):
        report = self.analyzer.analyze([], NOW)

        self.assertEqual(report.insights, ("No tasks available for analysis",))
        self.assertEqual(
            report.recommendations,
            ("Start by adding some tasks to get personalized insights",)
        )

    def test_productive_portfolio_with_overdue_task(self):
        priorities = ['high'] * 4 + ['medium', 'low'] + ['none'] * 4
        tasks = [
            make_task(i, priority=p, completed=True, category='work' if i % 2 else 'home')
            for i, p in enumerate(priorities[:9])
        ]
        tasks.append(make_task(9, priority=priorities[9], deadline='2025-01-05T00:00:00Z'))

        report = self.analyzer.analyze(tasks, NOW)

        self.assertEqual(report.insights, (
            "You have completed 9 out of 10 tasks (90% completion rate)",
            "You have 1 overdue tasks that need attention",
            GREAT_JOB_INSIGHT,
        ))
        self.assertEqual(report.recommendations, (
            OVERDUE_RECOMMENDATION,
            BREAK_DOWN_RECOMMENDATION,
        ))

    def test_low_completion_with_many_categories(self):
        priorities = ['high', 'medium', 'low', 'none', 'high', 'medium']
        tasks = [
            make_task(i, priority=p, category=f'cat-{i}', completed=i < 2)
            for i, p in enumerate(priorities)
        ]

        report = self.analyzer.analyze(tasks, NOW)

        self.assertEqual(report.insights, (
            "You have completed 2 out of 6 tasks (33% completion rate)",
        ))
        self.assertEqual(report.recommendations, (
            POMODORO_RECOMMENDATION,
            CONSOLIDATE_RECOMMENDATION,
        ))

    def test_completion_rate_boundaries_trigger_nothing(self):
        half = [make_task(0, completed=True), make_task(1)]
        eighty = [make_task(i, completed=i < 4) for i in range(5)]

        for tasks in (half, eighty):
            report = self.analyzer.analyze(tasks, NOW)
            self.assertNotIn(GREAT_JOB_INSIGHT, report.insights)
            self.assertNotIn(POMODORO_RECOMMENDATION, report.recommendations)

    def test_completion_rate_rounds_half_up(self):
        tasks = [make_task(i, completed=i == 0) for i in range(8)]
        report = self.analyzer.analyze(tasks, NOW)
        self.assertEqual(
            report.insights[0],
            "You have completed 1 out of 8 tasks (13% completion rate)"
        )

    def test_high_priority_tie_does_not_recommend_breakdown(self):
        tasks = [
            make_task(0, priority='high', completed=True),
            make_task(1, priority='high', completed=True),
            make_task(2, priority='medium', completed=True),
            make_task(3, priority='low', completed=True),
        ]
        report = self.analyzer.analyze(tasks, NOW)
        self.assertNotIn(BREAK_DOWN_RECOMMENDATION, report.recommendations)

    def test_overdue_excludes_completed_and_exact_now(self):
        tasks = [
            make_task(0, deadline='2025-01-01', completed=True),
            make_task(1, deadline=NOW.isoformat()),
            make_task(2, deadline='2025-01-20'),
        ]
        report = self.analyzer.analyze(tasks, NOW)
        self.assertNotIn(OVERDUE_RECOMMENDATION, report.recommendations)

    def test_five_categories_not_enough_to_consolidate(self):
        tasks = [make_task(i, category=f'cat-{i}', completed=True) for i in range(5)]
        report = self.analyzer.analyze(tasks, NOW)
        self.assertNotIn(CONSOLIDATE_RECOMMENDATION, report.recommendations)

    def test_malformed_records_do_not_abort(self):
        tasks = [
            make_task(0, priority='urgent', deadline='not-a-date'),
            make_task(1, priority='high', completed=True),
        ]
        report = self.analyzer.analyze(tasks, NOW)

        self.assertEqual(
            report.insights[0],
            "You have completed 1 out of 2 tasks (50% completion rate)"
        )
        self.assertIn(BREAK_DOWN_RECOMMENDATION, report.recommendations)
        self.assertNotIn(OVERDUE_RECOMMENDATION, report.recommendations)

    def test_naive_record_deadline_read_as_utc(self):
        tasks = [
            TaskRecord(id='1', title='x', deadline=datetime(2025, 1, 1)),
            TaskRecord(id='2', title='y', deadline=datetime(2025, 1, 10, 12)),
        ]
        report = self.analyzer.analyze(tasks, NOW)

        self.assertEqual(report.insights[1], "You have 1 overdue tasks that need attention")
        self.assertEqual(compute_stats(tasks, NOW).overdue, 1)

    def test_repeated_analysis_is_identical(self):
        tasks = [make_task(i, priority='high', deadline='2025-01-01', category=str(i)) for i in range(7)]
        self.assertEqual(self.analyzer.analyze(tasks, NOW), self.analyzer.analyze(tasks, NOW))

    def test_accepts_generators(self):
        report = self.analyzer.analyze((make_task(i) for i in range(3)), NOW)
        self.assertEqual(report.insights[0], "You have completed 0 out of 3 tasks (0% completion rate)")


class PortfolioStatsTests(TestCase):
    """Tests for aggregate statistics."""

    def test_stats(self):
        tasks = [
            make_task(0, priority='high', category='work', deadline='2025-01-10T15:00:00Z'),
            make_task(1, priority='high', category='work', completed=True),
            make_task(2, priority='low', category='home', deadline='2025-01-02'),
            make_task(3, priority='bogus', category='errands'),
        ]

        stats = compute_stats(tasks, NOW)

        self.assertEqual(stats.total, 4)
        self.assertEqual(stats.completed, 1)
        self.assertEqual(stats.pending, 3)
        self.assertEqual(stats.overdue, 1)
        self.assertEqual(stats.due_today, 1)
        self.assertEqual(stats.high_priority_pending, 1)
        self.assertEqual(stats.completion_rate, 25)
        self.assertEqual(stats.priority_counts, {'high': 2, 'medium': 0, 'low': 1, 'none': 0})
        self.assertEqual(stats.top_category, ('work', 2))

    def test_empty_stats(self):
        stats = compute_stats([], NOW)
        self.assertEqual(stats.completion_rate, 0)
        self.assertIsNone(stats.top_category)
        self.assertIsNone(stats.to_dict()['top_category'])

    def test_top_category_tie_keeps_first_seen(self):
        tasks = [make_task(0, category='home'), make_task(1, category='work')]
        self.assertEqual(compute_stats(tasks, NOW).top_category, ('home', 1))


class TaskRecordTests(TestCase):
    """Tests for task normalization."""

    def test_parse_iso_with_z(self):
        self.assertEqual(
            parse_instant('2025-01-10T12:00:00Z'),
            datetime(2025, 1, 10, 12, tzinfo=dt_timezone.utc)
        )

    def test_parse_date_only(self):
        self.assertEqual(parse_instant('2025-01-05'), datetime(2025, 1, 5, tzinfo=dt_timezone.utc))
        self.assertEqual(parse_instant(date(2025, 1, 5)), datetime(2025, 1, 5, tzinfo=dt_timezone.utc))

    def test_naive_datetime_is_utc(self):
        parsed = parse_instant(datetime(2025, 1, 5, 8, 30))
        self.assertEqual(parsed.utcoffset(), timedelta(0))

    def test_unparseable_is_none(self):
        self.assertIsNone(parse_instant('next tuesday'))
        self.assertIsNone(parse_instant('2025-13-45'))
        self.assertIsNone(parse_instant(''))
        self.assertIsNone(parse_instant(42))

    def test_to_record_from_mapping(self):
        record = to_record({
            'id': 7,
            'title': 'Ship it',
            'priority': 'HIGH',
            'category': 'work',
            'deadline': '2025-01-12',
            'completed': True,
            'createdAt': '2025-01-01T09:00:00Z',
        })

        self.assertEqual(record.id, '7')
        self.assertEqual(record.priority, Priority.HIGH)
        self.assertEqual(record.deadline, datetime(2025, 1, 12, tzinfo=dt_timezone.utc))
        self.assertTrue(record.completed)
        self.assertEqual(record.created_at, datetime(2025, 1, 1, 9, tzinfo=dt_timezone.utc))

    def test_malformed_fields_become_absent(self):
        record = to_record({'title': 'x', 'priority': 'p1', 'deadline': 'soon'}, index=3)

        self.assertEqual(record.id, 'task_3')
        self.assertIsNone(record.priority)
        self.assertIsNone(record.deadline)

    def test_completed_strings(self):
        for value in ('true', 'True', '1', 'yes', True, 1):
            self.assertTrue(to_record({'title': 'x', 'completed': value}).completed, value)
        for value in ('false', '0', 'no', '', 'done', None, False, 0, [1]):
            self.assertFalse(to_record({'title': 'x', 'completed': value}).completed, value)

    def test_record_instants_made_aware(self):
        record = TaskRecord(id='1', title='x', deadline=datetime(2025, 1, 5), created_at='2025-01-01')

        self.assertEqual(record.deadline, datetime(2025, 1, 5, tzinfo=dt_timezone.utc))
        self.assertEqual(record.created_at, datetime(2025, 1, 1, tzinfo=dt_timezone.utc))

    def test_is_overdue(self):
        record = TaskRecord(id='1', title='x', deadline=NOW - timedelta(seconds=1))
        self.assertTrue(record.is_overdue(NOW))
        self.assertFalse(TaskRecord(id='2', title='x').is_overdue(NOW))


class ServiceTests(TestCase):
    """Tests for the public advisor entry points."""

    def tearDown(self):
        configure_advisor(None)

    def test_status_settles_once(self):
        configure_advisor(ClassifierAdapter(loaders=[classifier_returning('joy')]))

        self.assertEqual(advisor_status(), ClassifierStatus.UNINITIALIZED)
        self.assertEqual(initialize_advisor(), ClassifierStatus.READY)
        self.assertEqual(initialize_advisor(), ClassifierStatus.READY)
        self.assertEqual(advisor_status(), ClassifierStatus.READY)

    def test_disabled_setting_makes_advisor_unavailable(self):
        configure_advisor(None)
        with self.settings(ADVISOR={'CLASSIFIER_ENABLED': False}):
            self.assertEqual(initialize_advisor(), ClassifierStatus.UNAVAILABLE)

    def test_score_priority_parses_string_deadline(self):
        configure_advisor(ClassifierAdapter(loaders=[], enabled=False))
        initialize_advisor()

        verdict = score_priority(
            "Submit urgent report to client",
            deadline='2025-01-10T12:00:00Z',
            now=NOW
        )

        self.assertEqual(verdict.suggested_priority, Priority.HIGH)
        self.assertIn("Deadline is within 1 day", verdict.reasoning)

    def test_score_priority_ignores_bad_deadline(self):
        configure_advisor(ClassifierAdapter(loaders=[], enabled=False))
        verdict = score_priority("Buy groceries", deadline='whenever', now=NOW)
        self.assertEqual(verdict.reasoning_text, "Analysis based on content and deadline")

    def test_score_priority_uses_ready_classifier(self):
        configure_advisor(ClassifierAdapter(loaders=[classifier_returning('anger')]))
        initialize_advisor()

        verdict = score_priority("Buy groceries", now=NOW)
        self.assertTrue(verdict.ai_adjusted)

    def test_analyze_portfolio_and_stats(self):
        tasks = [make_task(0, completed=True), make_task(1, deadline='2025-01-01')]

        report = analyze_portfolio(tasks, now=NOW)
        stats = portfolio_stats(tasks, now=NOW)

        self.assertIn("You have 1 overdue tasks that need attention", report.insights)
        self.assertEqual(stats.overdue, 1)


class TaskStoreTests(TestCase):
    """Tests for the read-only task store view."""

    def setUp(self):
        Task.objects.create(title='Quarterly report', priority='high', category='work')
        Task.objects.create(title='Garden', priority='low', category='home', completed=True)
        Task.objects.create(
            title='Invoice client', priority='medium', category='work',
            deadline=timezone.now() - timedelta(days=2)
        )

    def test_all_tasks(self):
        records = list(iter_task_records())
        self.assertEqual(len(records), 3)
        self.assertTrue(all(isinstance(r, TaskRecord) for r in records))

    def test_all_sentinel(self):
        self.assertEqual(len(list(iter_task_records('all'))), 3)

    def test_category_filter(self):
        records = list(iter_task_records('work'))
        self.assertEqual({r.title for r in records}, {'Quarterly report', 'Invoice client'})

    def test_records_carry_deadline(self):
        overdue = [r for r in iter_task_records() if r.is_overdue(timezone.now())]
        self.assertEqual([r.title for r in overdue], ['Invoice client'])


class APIEndpointTests(APITestCase):
    """Tests for the API endpoints."""

    def setUp(self):
        cache.clear()
        configure_advisor(ClassifierAdapter(loaders=[], enabled=False))

    def tearDown(self):
        configure_advisor(None)

    def post(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type='application/json')

    def test_priority_endpoint_success(self):
        """POST /api/advisor/priority/ should return a verdict."""
        deadline = (timezone.now() + timedelta(hours=12)).isoformat()
        response = self.post('/api/advisor/priority/', {
            'title': 'Submit urgent report to client',
            'deadline': deadline
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['suggested_priority'], 'high')
        self.assertEqual(response.data['confidence'], 1.0)
        self.assertEqual(
            response.data['reasoning'],
            "Contains high-priority keywords: urgent, client, submit; Deadline is within 1 day"
        )
        self.assertEqual(response.data['advisor_status'], 'unavailable')

    def test_priority_endpoint_without_deadline(self):
        response = self.post('/api/advisor/priority/', {'title': 'Plan hobby project'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['suggested_priority'], 'low')
        self.assertEqual(response.data['confidence'], 0.1)

    def test_priority_endpoint_missing_title(self):
        response = self.post('/api/advisor/priority/', {'description': 'no title'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error_code'], 'ERR_MISSING_FIELD')

    def test_priority_endpoint_invalid_deadline(self):
        response = self.post('/api/advisor/priority/', {'title': 'x', 'deadline': 'tomorrow-ish'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error_code'], 'ERR_INVALID_DATE')

    def test_insights_endpoint_empty_tasks(self):
        response = self.post('/api/advisor/insights/', {'tasks': []})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['insights'], ['No tasks available for analysis'])
        self.assertEqual(
            response.data['recommendations'],
            ['Start by adding some tasks to get personalized insights']
        )

    def test_insights_endpoint_success(self):
        response = self.post('/api/advisor/insights/', {
            'tasks': [
                {'id': 1, 'title': 'A', 'priority': 'high', 'category': 'work', 'completed': True},
                {'id': 2, 'title': 'B', 'priority': 'weird', 'deadline': '2000-01-01'},
                {'id': 3, 'title': 'C', 'priority': 'low', 'deadline': 'garbage'},
            ]
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(
            response.data['insights'][:2],
            [
                "You have completed 1 out of 3 tasks (33% completion rate)",
                "You have 1 overdue tasks that need attention",
            ]
        )
        self.assertIn(POMODORO_RECOMMENDATION, response.data['recommendations'])
        self.assertEqual(response.data['stats']['overdue_tasks'], 1)
        self.assertEqual(response.data['stats']['priority_distribution']['high'], 1)

    def test_insights_endpoint_tolerates_non_string_fields(self):
        response = self.post('/api/advisor/insights/', {
            'tasks': [
                {'id': '1', 'title': 'a', 'priority': True},
                {'id': '2', 'title': 'b', 'completed': True},
                {'id': '3', 'title': 'c', 'deadline': {'when': 'soon'}},
                {'id': '4', 'title': 'd', 'priority': ['high'], 'deadline': 20250101},
            ]
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 4)
        self.assertEqual(
            response.data['insights'][0],
            "You have completed 1 out of 4 tasks (25% completion rate)"
        )
        self.assertEqual(response.data['stats']['overdue_tasks'], 0)
        self.assertEqual(
            response.data['stats']['priority_distribution'],
            {'high': 0, 'medium': 0, 'low': 0, 'none': 2}
        )

    def test_insights_endpoint_missing_tasks(self):
        response = self.post('/api/advisor/insights/', {})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error_code'], 'ERR_MISSING_FIELD')

    def test_stored_insights_endpoint(self):
        Task.objects.create(title='One', priority='high', category='work', completed=True)
        Task.objects.create(title='Two', priority='none', category='home')

        response = self.client.get('/api/advisor/insights/stored/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.data['insights'][0],
            "You have completed 1 out of 2 tasks (50% completion rate)"
        )

        filtered = self.client.get('/api/advisor/insights/stored/?category=home')
        self.assertEqual(filtered.data['count'], 1)

    def test_status_endpoint(self):
        response = self.client.get('/api/advisor/status/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'unavailable')
        self.assertFalse(response.data['ai_enabled'])

    def test_api_info_endpoint(self):
        """GET /api/ should return API information."""
        response = self.client.get('/api/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('name', response.data)
        self.assertIn('endpoints', response.data)
        self.assertIn('error_codes', response.data)
