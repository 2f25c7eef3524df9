"""
LifeClockSession — the explicit per-installation context.

Owns the store handle, the cached choice log, the current life parameters,
the display flags and the countdown timer. Nothing here is a module-level
singleton; the FastAPI app keeps one instance on `app.state.session`.

Initialization order (strict)
-----------------------------
  1. open store           (failure → in-memory mode, never raises)
  2. load choice log
  3. load life parameters
  4. compute initial scores, start the countdown if parameters exist
"""
from __future__ import annotations

import logging
import random
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from typing import Callable, Iterable, Optional

from lifeclock.core.config import Settings
from lifeclock.core.errors import LifeParametersMissingError
from lifeclock.models.choice import Category
from lifeclock.models.life_parameters import HealthCondition
from lifeclock.services import transfer
from lifeclock.services.lifespan import (
    CountdownState,
    CountdownTimer,
    LifeParameters,
    LifespanSummary,
    build_life_parameters,
    project_countdown,
    summarize_lifespan,
)
from lifeclock.services.scoring import (
    SCORE_WINDOW_DAYS,
    TIMEFRAMES,
    ChoiceImpact,
    ScoreResult,
    calculate_scores,
    preview_choice_impact,
    project_trajectory,
)
from lifeclock.services.store import NewChoice, PersistentStore, StoredChoice

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class DisplayConfig:
    """Presentation flags. The engine never reads these."""
    show_global_clock: bool = True
    show_minute_boxes: bool = True
    show_second_boxes: bool = True
    show_scenario_clocks: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "DisplayConfig":
        return cls(
            show_global_clock=settings.SHOW_GLOBAL_CLOCK,
            show_minute_boxes=settings.SHOW_MINUTE_BOXES,
            show_second_boxes=settings.SHOW_SECOND_BOXES,
            show_scenario_clocks=settings.SHOW_SCENARIO_CLOCKS,
        )

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)


class LifeClockSession:

    def __init__(
        self,
        store: PersistentStore,
        clock: Callable[[], datetime] = _utcnow,
        window_days: int = SCORE_WINDOW_DAYS,
        tick_seconds: float = 1.0,
        display: Optional[DisplayConfig] = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.window_days = window_days
        self.display = display or DisplayConfig()
        self.choices: list[StoredChoice] = []
        self.parameters: Optional[LifeParameters] = None
        self.initialized = False
        self.timer = CountdownTimer(
            compute=self._compute_countdown,
            interval=tick_seconds,
            clock=clock,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "LifeClockSession":
        return cls(
            store=PersistentStore.from_url(settings.DATABASE_URL),
            window_days=settings.SCORE_WINDOW_DAYS,
            tick_seconds=settings.COUNTDOWN_TICK_SECONDS,
            display=DisplayConfig.from_settings(settings),
        )

    # -- lifecycle -----------------------------------------------------------

    def initialize(self) -> ScoreResult:
        self.store.open()
        self.choices = self.store.load_all()
        self.parameters = self.store.get_life_parameters()
        scores = self.scores()
        if self.parameters is not None:
            self.timer.start()
        self.initialized = True
        logger.info(
            "session initialized: %d choices, parameters %s, store %s",
            len(self.choices),
            "set" if self.parameters else "unset",
            "durable" if self.store.available else "in-memory",
        )
        return scores

    def shutdown(self) -> None:
        self.timer.stop()

    # -- choices -------------------------------------------------------------

    def record_choice(
        self,
        category: Category | str,
        question: str,
        choice_text: str,
        value: str,
        weight: int,
    ) -> StoredChoice:
        """Timestamp now, persist, and append to the cached log."""
        stored = self.store.append(NewChoice(
            timestamp=self.clock(),
            category=category,
            question=question,
            choice_text=choice_text,
            value=value,
            weight=weight,
        ))
        self.choices.append(stored)
        return stored

    def reload_choices(self) -> list[StoredChoice]:
        self.choices = self.store.load_all()
        return self.choices

    def reset_history(self) -> None:
        """Clear the choice log and stop the countdown."""
        self.store.clear_choices()
        self.choices = []
        self.timer.stop()

    # -- scores --------------------------------------------------------------

    def scores(self, now: Optional[datetime] = None) -> ScoreResult:
        return calculate_scores(self.choices, now or self.clock(), self.window_days)

    def preview_impact(self, category: Category | str, weight: int) -> ChoiceImpact:
        return preview_choice_impact(self.scores().category_scores, category, weight)

    def trajectories(self, seed: int) -> dict[str, dict[str, float]]:
        """Seeded short/mid/long drift for every category score."""
        rng = random.Random(seed)
        result: dict[str, dict[str, float]] = {}
        for category, score in self.scores().category_scores.items():
            result[category.value] = {
                timeframe: project_trajectory(score, timeframe, rng)
                for timeframe in TIMEFRAMES
            }
        return result

    # -- life parameters -----------------------------------------------------

    def set_life_parameters(
        self,
        date_of_birth: Optional[date],
        conditions: Iterable[HealthCondition | str],
    ) -> LifeParameters:
        """Validate first; only then persist, cache and restart the countdown."""
        params = build_life_parameters(date_of_birth, conditions, self.clock().date())
        self.store.put_life_parameters(params)
        self.parameters = params
        self.timer.start()
        return params

    def require_parameters(self) -> LifeParameters:
        if self.parameters is None:
            raise LifeParametersMissingError()
        return self.parameters

    def lifespan_summary(self) -> LifespanSummary:
        return summarize_lifespan(self.require_parameters(), self.clock().date())

    # -- countdown -----------------------------------------------------------

    def _compute_countdown(self, now: datetime) -> CountdownState:
        params = self.require_parameters()
        return project_countdown(
            now=now,
            birth_date=params.date_of_birth,
            life_expectancies=params.life_expectancies,
            aggregate=self.scores(now).aggregate,
        )

    def countdown(self) -> CountdownState:
        """Fresh state; restarts the timer if it was stopped."""
        self.require_parameters()
        if not self.timer.running:
            return self.timer.start()
        return self.timer.tick()

    # -- import / export -----------------------------------------------------

    def export_payload(self) -> dict:
        now = self.clock()
        return transfer.build_export(self.choices, self.scores(now), now)

    def export_json(self) -> str:
        now = self.clock()
        return transfer.export_json(self.choices, self.scores(now), now)

    def export_csv(self) -> str:
        return transfer.export_csv(self.choices)

    def import_data(
        self,
        text: str,
        fmt: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> list[StoredChoice]:
        """Append every record, then refresh the cache from the store."""
        try:
            return transfer.import_data(self.store, text, fmt=fmt, filename=filename)
        finally:
            self.reload_choices()
