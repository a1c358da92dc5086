"""
Priority Scoring for the Smart Task Advisor.

This module proposes a priority class for a single task from its text and
deadline. The score is a plain sum of contributions:

    score = lexicon contributions        (keyword sets, each fires at most once)
          + deadline contribution        (days until the deadline)
          + classifier contribution      (urgency-related emotion, optional)

and is mapped to a priority class with a fixed threshold table:

    score >= 0.7          -> high     (confidence = min(score, 1.0))
    0.4 <= score < 0.7    -> medium   (confidence = score)
    0.1 <= score < 0.4    -> low      (confidence = score)
    score < 0.1           -> none     (confidence = 1 - score, capped at 1.0)

Every contribution that fires also adds a short phrase to the reasoning, so
users can see why a priority was suggested.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .classifier import ClassifierAdapter
from .records import Priority


# ==================== Lexicon ====================

@dataclass(frozen=True)
class KeywordSet:
    """A group of keywords that contributes a fixed amount when any matches."""
    level: str
    keywords: Tuple[str, ...]
    contribution: float

    def matches(self, text: str) -> List[str]:
        """Return matched keywords in declaration order. ``text`` must be lowercase."""
        return [kw for kw in self.keywords if kw in text]

    def phrase(self, matched: List[str]) -> str:
        return f"Contains {self.level}-priority keywords: {', '.join(matched)}"


HIGH_PRIORITY_KEYWORDS = KeywordSet(
    level='high',
    keywords=(
        'urgent', 'asap', 'emergency', 'critical', 'deadline', 'important',
        'meeting', 'presentation', 'client', 'boss', 'due', 'submit'
    ),
    contribution=0.7
)

MEDIUM_PRIORITY_KEYWORDS = KeywordSet(
    level='medium',
    keywords=('schedule', 'plan', 'review', 'check', 'update', 'prepare', 'organize'),
    contribution=0.4
)

LOW_PRIORITY_KEYWORDS = KeywordSet(
    level='low',
    keywords=('someday', 'maybe', 'eventually', 'hobby', 'leisure', 'fun'),
    contribution=-0.3
)

# Evaluation order is also the order of phrases in the reasoning.
LEXICON: Tuple[KeywordSet, ...] = (
    HIGH_PRIORITY_KEYWORDS,
    MEDIUM_PRIORITY_KEYWORDS,
    LOW_PRIORITY_KEYWORDS,
)


# ==================== Temporal Analysis ====================

SECONDS_PER_DAY = 86400


def days_until(deadline: datetime, now: datetime) -> int:
    """Whole days until the deadline, rounded up. Negative when overdue."""
    return math.ceil((deadline - now).total_seconds() / SECONDS_PER_DAY)


def deadline_contribution(
    deadline: Optional[datetime],
    now: datetime
) -> Optional[Tuple[float, str]]:
    """
    Map a deadline to an urgency contribution and a reasoning phrase.

    Scoring Logic:
    - Due within 1 day (or overdue): +0.8
    - Due in 2-3 days: +0.6
    - Due in 4-7 days: +0.3
    - Due later: 0.0 (the phrase still reports the distance)

    Returns:
        Tuple of (contribution, phrase), or None when there is no deadline.
    """
    if deadline is None:
        return None

    days = days_until(deadline, now)

    if days <= 1:
        return (0.8, "Deadline is within 1 day")
    if days <= 3:
        return (0.6, "Deadline is within 3 days")
    if days <= 7:
        return (0.3, "Deadline is within a week")
    return (0.0, f"Deadline is in {days} days")


# ==================== Verdict ====================

DEFAULT_REASONING = "Analysis based on content and deadline"
AI_REASONING = "AI detected urgency-related sentiment"

URGENCY_LABELS = ('anger', 'fear')
AI_CONTRIBUTION = 0.2

HIGH_THRESHOLD = 0.7
MEDIUM_THRESHOLD = 0.4
LOW_THRESHOLD = 0.1

# Contributions are one-decimal constants; rounding the running sum keeps
# 0.7 - 0.3 equal to 0.4 at the thresholds.
SCORE_PRECISION = 10


@dataclass(frozen=True)
class PriorityVerdict:
    """The scorer's suggestion for a single task."""
    suggested_priority: Priority
    confidence: float
    reasoning: Tuple[str, ...]
    score: float = 0.0
    ai_adjusted: bool = False

    @property
    def reasoning_text(self) -> str:
        return "; ".join(self.reasoning)

    def to_dict(self) -> Dict:
        return {
            'suggested_priority': self.suggested_priority.value,
            'confidence': self.confidence,
            'reasoning': self.reasoning_text,
            'reasoning_steps': list(self.reasoning),
            'score': self.score,
            'ai_adjusted': self.ai_adjusted,
        }


def classify_score(score: float) -> Tuple[Priority, float]:
    """
    Map a raw score to a priority class and confidence.

    Confidence is rounded to 2 decimal places and never exceeds 1.0, even
    for negative scores in the "none" class.
    """
    if score >= HIGH_THRESHOLD:
        priority, confidence = Priority.HIGH, min(score, 1.0)
    elif score >= MEDIUM_THRESHOLD:
        priority, confidence = Priority.MEDIUM, score
    elif score >= LOW_THRESHOLD:
        priority, confidence = Priority.LOW, score
    else:
        priority, confidence = Priority.NONE, 1 - score

    return priority, min(round(confidence, 2), 1.0)


# ==================== Scorer ====================

class PriorityScorer:
    """
    Suggests a priority class for a task from its title, description and
    deadline, optionally boosted by a text classifier.

    The scorer holds no state of its own; the classifier adapter is injected
    and may be shared with other scorers.
    """

    def __init__(self, classifier: Optional[ClassifierAdapter] = None):
        self.classifier = classifier

    @staticmethod
    def normalize_text(title: str, description: Optional[str] = None) -> str:
        return f"{title or ''} {description or ''}".lower()

    def score(
        self,
        title: str,
        description: Optional[str],
        deadline: Optional[datetime],
        now: datetime
    ) -> PriorityVerdict:
        """
        Score one task.

        Args:
            title: Task title (may be empty)
            description: Optional description
            deadline: Optional aware deadline
            now: Reference instant for the deadline calculation

        Returns:
            PriorityVerdict with reasoning ordered high, medium and low
            keywords, then deadline, then classifier.
        """
        text = self.normalize_text(title, description)
        score = 0.0
        reasoning: List[str] = []

        for keyword_set in LEXICON:
            matched = keyword_set.matches(text)
            if matched:
                score += keyword_set.contribution
                reasoning.append(keyword_set.phrase(matched))

        temporal = deadline_contribution(deadline, now)
        if temporal is not None:
            contribution, phrase = temporal
            score += contribution
            reasoning.append(phrase)

        ai_adjusted = self._has_urgent_sentiment(text)
        if ai_adjusted:
            score += AI_CONTRIBUTION
            reasoning.append(AI_REASONING)

        score = round(score, SCORE_PRECISION)
        priority, confidence = classify_score(score)

        return PriorityVerdict(
            suggested_priority=priority,
            confidence=confidence,
            reasoning=tuple(reasoning) if reasoning else (DEFAULT_REASONING,),
            score=round(score, 2),
            ai_adjusted=ai_adjusted
        )

    def _has_urgent_sentiment(self, text: str) -> bool:
        if self.classifier is None or not self.classifier.is_ready:
            return False

        result = self.classifier.try_classify(text)
        if result is None:
            return False

        label = result.label.lower()
        return any(marker in label for marker in URGENCY_LABELS)
