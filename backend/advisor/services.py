"""
Public entry points of the advisory engine.

The classifier adapter is process-wide: it is built lazily from the
``ADVISOR`` settings on first use and can be replaced with
``configure_advisor()`` (tests inject fakes this way). Scoring and analysis
never raise to callers.
"""

import threading
from datetime import datetime
from typing import Iterable, Optional

from django.conf import settings
from django.utils import timezone

from .classifier import ClassifierAdapter, ClassifierStatus, DEFAULT_MODEL, default_loaders
from .insights import PortfolioAnalyzer, PortfolioReport, PortfolioStats, compute_stats
from .records import parse_instant
from .scoring import PriorityScorer, PriorityVerdict


_advisor: Optional[ClassifierAdapter] = None
_advisor_lock = threading.Lock()


def _build_default_advisor() -> ClassifierAdapter:
    options = getattr(settings, 'ADVISOR', {})
    loaders = default_loaders(
        model=options.get('CLASSIFIER_MODEL', DEFAULT_MODEL),
        prefer_gpu=options.get('PREFER_GPU', True)
    )
    return ClassifierAdapter(loaders=loaders, enabled=options.get('CLASSIFIER_ENABLED', True))


def get_advisor() -> ClassifierAdapter:
    """Return the process-wide classifier adapter, creating it on first use."""
    global _advisor
    with _advisor_lock:
        if _advisor is None:
            _advisor = _build_default_advisor()
        return _advisor


def configure_advisor(adapter: Optional[ClassifierAdapter]) -> None:
    """Replace the process-wide adapter. ``None`` rebuilds it from settings."""
    global _advisor
    with _advisor_lock:
        _advisor = adapter


def _resolve_now(now: Optional[datetime]) -> datetime:
    if now is None:
        return timezone.now()
    return parse_instant(now)


def initialize_advisor() -> ClassifierStatus:
    """Settle the classifier status. Safe to call repeatedly."""
    return get_advisor().initialize()


def advisor_status() -> ClassifierStatus:
    return get_advisor().status


def score_priority(
    title: str,
    description: Optional[str] = None,
    deadline=None,
    now: Optional[datetime] = None
) -> PriorityVerdict:
    """
    Suggest a priority for a task.

    ``deadline`` may be a datetime, date or ISO 8601 string; unparseable
    values are treated as no deadline.
    """
    scorer = PriorityScorer(classifier=get_advisor())
    return scorer.score(title, description, parse_instant(deadline), _resolve_now(now))


def analyze_portfolio(tasks: Iterable, now: Optional[datetime] = None) -> PortfolioReport:
    return PortfolioAnalyzer().analyze(tasks, _resolve_now(now))


def portfolio_stats(tasks: Iterable, now: Optional[datetime] = None) -> PortfolioStats:
    return compute_stats(tasks, _resolve_now(now))
