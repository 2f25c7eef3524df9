"""
Tests for LifeClockSession, the per-installation context.

Covers:
  - initialization order and restart from an existing database
  - recording choices with the session clock
  - life parameters: validation before mutation, countdown start
  - reset stops the countdown, asking for the countdown restarts it
  - degraded store: the session keeps working in memory
  - import refreshes the cached log even when it fails part-way
"""
from datetime import date, timedelta

import pytest

from conftest import NOW, FrozenClock
from lifeclock.core.config import Settings
from lifeclock.core.errors import (
    ImportParseError,
    LifeParametersMissingError,
    LifeParametersValidationError,
)
from lifeclock.models.choice import CATEGORIES, Category
from lifeclock.services.lifespan import CountdownStatus
from lifeclock.services.session import DisplayConfig, LifeClockSession
from lifeclock.services.store import PersistentStore


def _record(session, category="action", weight=100, value="acting"):
    return session.record_choice(
        category=category,
        question="There's a difficult task you've been postponing. What do you decide to do?",
        choice_text="Commit to tackling it today, despite the discomfort",
        value=value,
        weight=weight,
    )


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class TestInitialize:
    def test_fresh_install(self, session):
        assert session.initialized
        assert session.choices == []
        assert session.parameters is None
        assert session.timer.status == CountdownStatus.stopped
        assert session.scores().aggregate == 50.0

    def test_restart_restores_choices_and_parameters(self, session, db_url, clock):
        _record(session)
        session.set_life_parameters(date(1990, 5, 17), ["none"])
        session.shutdown()

        restarted = LifeClockSession(PersistentStore.from_url(db_url, clock=clock), clock=clock)
        restarted.initialize()
        assert len(restarted.choices) == 1
        assert restarted.parameters == session.parameters
        assert restarted.timer.running
        restarted.shutdown()

    def test_unavailable_store_still_initializes(self, clock):
        session = LifeClockSession(PersistentStore.in_memory(), clock=clock)
        scores = session.initialize()
        assert session.initialized
        assert scores.aggregate == 50.0
        assert not session.store.available

    def test_from_settings(self, db_url):
        settings = Settings(
            DATABASE_URL=db_url,
            SCORE_WINDOW_DAYS=7,
            COUNTDOWN_TICK_SECONDS=5.0,
            SHOW_SECOND_BOXES=False,
        )
        session = LifeClockSession.from_settings(settings)
        assert session.window_days == 7
        assert session.timer.interval == 5.0
        assert session.display.show_second_boxes is False
        assert session.display.show_minute_boxes is True

    def test_shutdown_stops_timer(self, session):
        session.set_life_parameters(date(1990, 5, 17), ["none"])
        session.shutdown()
        assert not session.timer.running


# ---------------------------------------------------------------------------
# Choices
# ---------------------------------------------------------------------------

class TestRecordChoice:
    def test_timestamped_with_session_clock(self, session, clock):
        clock.advance(minutes=5)
        stored = _record(session)
        assert stored.timestamp == NOW + timedelta(minutes=5)
        assert session.choices == [stored]

    def test_scores_follow_the_log(self, session):
        _record(session, weight=100)
        assert session.scores().category_scores[Category.action] == 100.0

    def test_window_moves_with_the_clock(self, session, clock):
        _record(session, weight=100)
        clock.advance(days=31)
        assert session.scores().category_scores[Category.action] == 50.0

    def test_invalid_weight_rejected(self, session):
        with pytest.raises(ValueError):
            _record(session, weight=101)
        assert session.choices == []

    def test_reset_history(self, session):
        _record(session)
        session.set_life_parameters(date(1990, 5, 17), ["none"])
        session.reset_history()
        assert session.choices == []
        assert session.store.load_all() == []
        assert session.timer.status == CountdownStatus.stopped
        # parameters are kept
        assert session.parameters is not None


# ---------------------------------------------------------------------------
# Life parameters + countdown
# ---------------------------------------------------------------------------

class TestLifeParameters:
    def test_set_starts_countdown(self, session):
        params = session.set_life_parameters(date(1996, 10, 19), ["none"])
        assert params.life_expectancies.realistic == 73
        assert session.timer.running
        assert session.timer.latest is not None
        assert session.store.get_life_parameters() == params

    def test_invalid_parameters_change_nothing(self, session):
        session.set_life_parameters(date(1996, 10, 19), ["none"])
        before = session.parameters
        with pytest.raises(LifeParametersValidationError):
            session.set_life_parameters(date(2030, 1, 1), ["none"])
        assert session.parameters == before
        assert session.store.get_life_parameters() == before

    def test_invalid_first_parameters_leave_countdown_stopped(self, session):
        with pytest.raises(LifeParametersValidationError):
            session.set_life_parameters(None, ["none"])
        assert session.parameters is None
        assert not session.timer.running

    def test_countdown_requires_parameters(self, session):
        with pytest.raises(LifeParametersMissingError):
            session.countdown()

    def test_countdown_restarts_after_reset(self, session):
        session.set_life_parameters(date(1996, 10, 19), ["none"])
        session.reset_history()
        state = session.countdown()
        assert session.timer.running
        assert state.choice_impact_days == 0

    def test_countdown_reflects_choices(self, session):
        session.set_life_parameters(date(1996, 10, 19), ["none"])
        neutral = session.countdown()
        for category in CATEGORIES:
            _record(session, category=category.value, weight=100, value="good")
        better = session.countdown()
        assert better.choice_impact_days == pytest.approx(1095)
        assert better.remaining["realistic"] > neutral.remaining["realistic"]

    def test_countdown_uses_the_clock(self, session, clock):
        session.set_life_parameters(date(1996, 10, 19), ["none"])
        first = session.countdown()
        clock.advance(hours=1)
        second = session.countdown()
        assert first.remaining["realistic"] - second.remaining["realistic"] == timedelta(hours=1)

    def test_lifespan_summary(self, session):
        session.set_life_parameters(date(1996, 10, 19), ["none"])
        summary = session.lifespan_summary()
        assert summary.current_age == 30
        assert summary.remaining_years == 43


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------

class TestDerivedViews:
    def test_preview_impact(self, session):
        impact = session.preview_impact("action", 0)
        assert impact.delta == "-25%"

    def test_trajectories_are_seeded(self, session):
        a = session.trajectories(seed=42)
        b = session.trajectories(seed=42)
        assert a == b
        assert set(a) == {c.value for c in CATEGORIES}
        assert all(set(v) == {"short", "mid", "long"} for v in a.values())

    def test_display_config_roundtrip(self):
        config = DisplayConfig(show_global_clock=False)
        assert config.as_dict() == {
            "show_global_clock": False,
            "show_minute_boxes": True,
            "show_second_boxes": True,
            "show_scenario_clocks": True,
        }


# ---------------------------------------------------------------------------
# Import / export
# ---------------------------------------------------------------------------

class TestSessionTransfer:
    def test_export_then_import_into_new_session(self, session):
        _record(session, weight=100)
        _record(session, category="presence", weight=0, value="escaping")
        text = session.export_json()

        other = LifeClockSession(PersistentStore.in_memory(), clock=FrozenClock())
        other.initialize()
        imported = other.import_data(text, fmt="json")
        assert len(imported) == 2
        assert len(other.choices) == 2
        assert other.scores() == session.scores()

    def test_partial_import_refreshes_cache(self, session):
        good = session.export_csv().split("\n")[0] + "\n" + \
            '2026-10-18,08:30:00,action,"Q","C",acting,100\n' + \
            '2026-10-18,09:30:00,action,"Q","C",acting,oops'
        with pytest.raises(ImportParseError):
            session.import_data(good, fmt="csv")
        assert len(session.choices) == 1

    def test_degraded_store_keeps_session_usable(self, session, monkeypatch):
        _record(session)
        backend = session.store._backend

        def broken(choice):
            raise OSError("disk gone")

        monkeypatch.setattr(backend, "append", broken)
        stored = _record(session, weight=0)
        assert not session.store.available
        assert len(session.choices) == 2
        assert session.reload_choices()[-1] == stored
