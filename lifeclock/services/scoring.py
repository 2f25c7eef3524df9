"""
Scoring engine — choice log → per-category scores → aggregate.

Definition
----------
Only choices inside the window (timestamp > now - 30 days) count.

Per category:
  no choices in window → 50 (neutral prior)
  otherwise            → clamp(mean(weight) + trend, 0, 100)

  trend = (mean(last 3 weights) - mean(earlier weights)) * 0.2
          0 when the category has 3 choices or fewer (no earlier slice).

Aggregate = mean of the 8 category scores.

Public API
----------
calculate_scores(choices, now, window_days)        -> ScoreResult
preview_choice_impact(scores, category, weight)    -> ChoiceImpact
project_trajectory(score, timeframe, rng)          -> float
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from lifeclock.models.choice import CATEGORIES, Category
from lifeclock.services.outcomes import ConcreteProjection, project_outcomes
from lifeclock.services.questions import CATEGORY_LABELS, IMPACT_OUTCOMES
from lifeclock.services.store import StoredChoice


SCORE_WINDOW_DAYS = 30
NEUTRAL_SCORE = 50.0
TREND_RECENT_COUNT = 3
TREND_FACTOR = 0.2


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScoreResult:
    category_scores: dict[Category, float]
    aggregate: float
    concrete: ConcreteProjection

    def abstract_dict(self) -> dict[str, float]:
        return {c.value: s for c, s in self.category_scores.items()}


@dataclass(frozen=True)
class ChoiceImpact:
    category: str        # display label
    current_score: float
    new_score: float
    delta: str           # "+25%" / "-25%"
    outcome: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return min(high, max(low, value))


def _mean(values: list[int]) -> float:
    return sum(values) / len(values)


def recent_choices(
    choices: Iterable[StoredChoice],
    now: datetime,
    window_days: int = SCORE_WINDOW_DAYS,
) -> list[StoredChoice]:
    """Choices strictly newer than the cutoff, oldest first."""
    cutoff = now - timedelta(days=window_days)
    recent = [c for c in choices if c.timestamp > cutoff]
    return sorted(recent, key=lambda c: (c.timestamp, c.id))


def calculate_trend(choices: list[StoredChoice]) -> float:
    """`choices` must be ordered oldest → newest."""
    if len(choices) <= TREND_RECENT_COUNT:
        return 0.0
    recent = [c.weight for c in choices[-TREND_RECENT_COUNT:]]
    older = [c.weight for c in choices[:-TREND_RECENT_COUNT]]
    return (_mean(recent) - _mean(older)) * TREND_FACTOR


def score_category(choices: list[StoredChoice]) -> float:
    if not choices:
        return NEUTRAL_SCORE
    avg_weight = _mean([c.weight for c in choices])
    return _clamp(avg_weight + calculate_trend(choices))


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def calculate_scores(
    choices: Iterable[StoredChoice],
    now: datetime,
    window_days: int = SCORE_WINDOW_DAYS,
) -> ScoreResult:
    window = recent_choices(choices, now, window_days)

    by_category: dict[Category, list[StoredChoice]] = {c: [] for c in CATEGORIES}
    for choice in window:
        by_category[choice.category].append(choice)

    scores = {c: score_category(by_category[c]) for c in CATEGORIES}
    aggregate = _mean(list(scores.values())) if scores else NEUTRAL_SCORE

    return ScoreResult(
        category_scores=scores,
        aggregate=aggregate,
        concrete=project_outcomes(aggregate),
    )


def preview_choice_impact(
    category_scores: dict[Category, float],
    category: Category | str,
    weight: int,
) -> ChoiceImpact:
    """
    Estimated effect of one more choice on its category score.
    Weight above 50 pushes the score up by |weight - 50| / 2, otherwise down.
    """
    category = Category(category)
    current = category_scores.get(category, NEUTRAL_SCORE)
    magnitude = abs(weight - 50) / 2
    positive = weight > 50
    new_score = _clamp(current + (magnitude if positive else -magnitude))
    delta = math.floor(new_score - current + 0.5)
    positive_text, negative_text = IMPACT_OUTCOMES[category]
    return ChoiceImpact(
        category=CATEGORY_LABELS[category],
        current_score=current,
        new_score=new_score,
        delta=f"+{delta}%" if new_score > current else f"{delta}%",
        outcome=positive_text if positive else negative_text,
    )


# ---------------------------------------------------------------------------
# Trajectory narration (seeded)
# ---------------------------------------------------------------------------

# (positive, negative, neutral) change ranges per horizon: (low, high)
_TRAJECTORY_RANGES: dict[str, tuple[tuple[float, float], tuple[float, float], tuple[float, float]]] = {
    "short": ((2, 10), (-7, -1), (-3, 3)),       # weeks
    "mid":   ((8, 28), (-19, -4), (-8, 8)),      # months
    "long":  ((15, 55), (-45, -10), (-17.5, 17.5)),  # years
}

TIMEFRAMES = tuple(_TRAJECTORY_RANGES)


def project_trajectory(score: float, timeframe: str, rng: random.Random) -> float:
    """
    Where a category score may drift over a horizon.

    Momentum is positive above 60, negative below 40, neutral otherwise.
    Improvements above 80 and declines below 20 are halved. The result stays
    within [5, 95]. `rng` must be seeded by the caller.
    """
    if timeframe not in _TRAJECTORY_RANGES:
        raise ValueError(f"unknown timeframe {timeframe!r}; expected one of {TIMEFRAMES}")
    positive, negative, neutral = _TRAJECTORY_RANGES[timeframe]
    if score > 60:
        low, high = positive
    elif score < 40:
        low, high = negative
    else:
        low, high = neutral
    change = rng.uniform(low, high)

    if score > 80 and change > 0:
        change *= 0.5
    elif score < 20 and change < 0:
        change *= 0.5
    return _clamp(score + change, 5.0, 95.0)
