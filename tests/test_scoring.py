"""
Tests for the scoring engine and the outcome projector.

Covers:
  - neutral prior for categories without recent choices
  - mean + trend per category, trend edge cases
  - the 30-day window boundary
  - aggregate = mean of the 8 categories
  - concrete domain caps, rounding and ordering
  - choice impact preview and seeded trajectories
"""
import random
from datetime import timedelta

import pytest

from conftest import NOW, make_choice
from lifeclock.models.choice import CATEGORIES, Category
from lifeclock.services.outcomes import CAVEATS, DOMAINS, project_outcomes
from lifeclock.services.scoring import (
    NEUTRAL_SCORE,
    TIMEFRAMES,
    calculate_scores,
    calculate_trend,
    preview_choice_impact,
    project_trajectory,
)


def _log(*weights, category="action", start=NOW - timedelta(days=10)):
    """Stored choices one hour apart, oldest first."""
    return [
        make_choice(category=category, weight=w, at=start + timedelta(hours=i)).with_id(i + 1)
        for i, w in enumerate(weights)
    ]


# ---------------------------------------------------------------------------
# Category scores
# ---------------------------------------------------------------------------

class TestCategoryScores:
    def test_empty_log_is_neutral(self):
        result = calculate_scores([], NOW)
        assert set(result.category_scores) == set(CATEGORIES)
        assert all(s == NEUTRAL_SCORE for s in result.category_scores.values())
        assert result.aggregate == 50.0

    def test_single_choice_has_no_trend(self):
        result = calculate_scores(_log(100), NOW)
        assert result.category_scores[Category.action] == 100.0
        assert result.aggregate == pytest.approx((100 + 7 * 50) / 8)

    def test_two_choices_without_earlier_history(self):
        # last three cover everything, so the earlier mean equals the recent one
        result = calculate_scores(_log(0, 100), NOW)
        assert result.category_scores[Category.action] == 50.0

    def test_improving_trend_adds_to_mean(self):
        # mean 60, recent 100, earlier 0 → trend +20
        result = calculate_scores(_log(0, 0, 100, 100, 100), NOW)
        assert result.category_scores[Category.action] == pytest.approx(80.0)

    def test_declining_trend_subtracts_from_mean(self):
        # mean 25, recent 0, earlier 100 → trend -20
        result = calculate_scores(_log(100, 0, 0, 0), NOW)
        assert result.category_scores[Category.action] == pytest.approx(5.0)

    def test_trend_uses_timestamp_order_not_insertion(self):
        ordered = _log(0, 0, 100, 100, 100)
        shuffled = list(reversed(ordered))
        assert calculate_scores(shuffled, NOW).category_scores[Category.action] == \
            calculate_scores(ordered, NOW).category_scores[Category.action]

    def test_trend_is_zero_without_earlier_slice(self):
        assert calculate_trend([]) == 0.0
        assert calculate_trend(_log(80)) == 0.0
        assert calculate_trend(_log(0, 0, 100)) == 0.0

    def test_trend_with_one_earlier_choice(self):
        assert calculate_trend(_log(0, 50, 50, 50)) == pytest.approx(10.0)

    def test_categories_are_independent(self):
        log = _log(100, category="action") + _log(0, category="presence")
        scores = calculate_scores(log, NOW).category_scores
        assert scores[Category.action] == 100.0
        assert scores[Category.presence] == 0.0
        assert scores[Category.agency] == 50.0

    @pytest.mark.parametrize("weights", [
        (100, 100, 100, 100),
        (0, 0, 0, 0, 0, 0),
        (0, 100, 100, 100),
        (100, 0, 0, 0),
        (37, 64, 12, 99, 3, 78),
    ])
    def test_scores_stay_within_bounds(self, weights):
        result = calculate_scores(_log(*weights), NOW)
        for score in result.category_scores.values():
            assert 0.0 <= score <= 100.0
        assert 0.0 <= result.aggregate <= 100.0


class TestScoringWindow:
    def test_choice_exactly_at_cutoff_is_excluded(self):
        log = [make_choice(weight=100, at=NOW - timedelta(days=30)).with_id(1)]
        assert calculate_scores(log, NOW).category_scores[Category.mindfulness] == 50.0

    def test_choice_just_inside_window_counts(self):
        log = [make_choice(weight=100, at=NOW - timedelta(days=30) + timedelta(seconds=1)).with_id(1)]
        assert calculate_scores(log, NOW).category_scores[Category.mindfulness] == 100.0

    def test_old_choices_ignored(self):
        log = [make_choice(weight=0, at=NOW - timedelta(days=90)).with_id(1)]
        assert calculate_scores(log, NOW).aggregate == 50.0

    def test_custom_window(self):
        log = [make_choice(weight=100, at=NOW - timedelta(days=5)).with_id(1)]
        assert calculate_scores(log, NOW, window_days=3).category_scores[Category.mindfulness] == 50.0


# ---------------------------------------------------------------------------
# Concrete outcomes
# ---------------------------------------------------------------------------

class TestOutcomes:
    def test_zero_aggregate(self):
        result = project_outcomes(0)
        assert (result.financial.optimistic, result.financial.realistic, result.financial.pessimistic) == (40, 14, 0)
        assert result.respect.optimistic == 30
        assert result.respect.pessimistic == 0

    def test_full_aggregate(self):
        result = project_outcomes(100)
        assert (result.financial.optimistic, result.financial.realistic, result.financial.pessimistic) == (70, 35, 21)
        assert result.relationships.optimistic == 65
        assert result.relationships.realistic == 35
        assert result.opportunities.optimistic == 55
        assert result.opportunities.realistic == 28

    def test_caps_are_never_exceeded(self):
        caps = {
            "financial": (80, 60, 40),
            "respect": (70, 50, 30),
            "relationships": (75, 55, 35),
            "opportunities": (65, 45, 25),
        }
        result = project_outcomes(1000)
        for domain, (opt, real, pess) in caps.items():
            d = getattr(result, domain)
            assert d.optimistic <= opt
            assert d.realistic <= real
            assert d.pessimistic <= pess

    @pytest.mark.parametrize("aggregate", [0, 12.5, 33.3, 50, 71.9, 100])
    def test_values_are_ordered_integer_percentages(self, aggregate):
        result = project_outcomes(aggregate)
        for domain in DOMAINS:
            d = getattr(result, domain)
            assert all(isinstance(v, int) for v in (d.optimistic, d.realistic, d.pessimistic))
            assert 0 <= d.pessimistic <= d.realistic <= d.optimistic <= 100

    def test_monotonic_in_aggregate(self):
        low, high = project_outcomes(20), project_outcomes(80)
        for domain in DOMAINS:
            assert getattr(low, domain).optimistic <= getattr(high, domain).optimistic
            assert getattr(low, domain).realistic <= getattr(high, domain).realistic

    def test_caveats_attached(self):
        as_dict = project_outcomes(50).as_dict()
        assert list(as_dict) == list(DOMAINS)
        for domain in DOMAINS:
            assert as_dict[domain]["caveat"] == CAVEATS[domain]

    def test_scores_carry_concrete_projection(self):
        result = calculate_scores([], NOW)
        assert result.concrete == project_outcomes(50.0)


# ---------------------------------------------------------------------------
# Impact preview
# ---------------------------------------------------------------------------

class TestImpactPreview:
    def _neutral(self):
        return {c: 50.0 for c in CATEGORIES}

    def test_positive_choice(self):
        impact = preview_choice_impact(self._neutral(), "action", 100)
        assert impact.category == "Action"
        assert impact.new_score == 75.0
        assert impact.delta == "+25%"
        assert impact.outcome == "Builds momentum and confidence"

    def test_negative_choice(self):
        impact = preview_choice_impact(self._neutral(), Category.selfBelief, 0)
        assert impact.category == "Self-Belief"
        assert impact.new_score == 25.0
        assert impact.delta == "-25%"
        assert impact.outcome == "Increases dependency on others"

    def test_neutral_weight_has_no_effect(self):
        impact = preview_choice_impact(self._neutral(), "presence", 50)
        assert impact.new_score == 50.0
        assert impact.delta == "0%"

    def test_clamped_at_100(self):
        scores = self._neutral()
        scores[Category.agency] = 90.0
        impact = preview_choice_impact(scores, "agency", 100)
        assert impact.new_score == 100.0
        assert impact.delta == "+10%"

    def test_unknown_category_raises(self):
        with pytest.raises(ValueError):
            preview_choice_impact(self._neutral(), "luck", 100)


# ---------------------------------------------------------------------------
# Trajectories
# ---------------------------------------------------------------------------

class TestTrajectory:
    def test_same_seed_same_projection(self):
        a = [project_trajectory(70, t, random.Random(7)) for t in TIMEFRAMES]
        b = [project_trajectory(70, t, random.Random(7)) for t in TIMEFRAMES]
        assert a == b

    @pytest.mark.parametrize("score", [0, 10, 39, 50, 61, 90, 100])
    def test_results_within_bounds(self, score):
        rng = random.Random(score)
        for timeframe in TIMEFRAMES:
            for _ in range(20):
                assert 5.0 <= project_trajectory(score, timeframe, rng) <= 95.0

    def test_positive_momentum_short_term(self):
        rng = random.Random(1)
        for _ in range(20):
            assert 72.0 <= project_trajectory(70, "short", rng) <= 80.0

    def test_decline_halved_near_the_floor(self):
        rng = random.Random(2)
        for _ in range(20):
            assert 6.5 <= project_trajectory(10, "short", rng) <= 9.5

    def test_unknown_timeframe(self):
        with pytest.raises(ValueError):
            project_trajectory(50, "decades", random.Random(0))
