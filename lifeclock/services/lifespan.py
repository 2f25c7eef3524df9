"""
Lifespan projector — life-expectancy estimate and the live countdown.

Life expectancy (years)
-----------------------
  base        = 73
  impact      = sum(CONDITION_IMPACT_YEARS[c] for c in conditions)   ({none} → 0)
  impact     *= 1 - (count - 1) * 0.1                                (count > 1)
  realistic   = max(age + 1, base + impact)
  optimistic  = realistic + (10 if {none} else 7)
  pessimistic = max(age + 1, realistic - (3 if {none} else 6))

The formula is a deliberately simple heuristic, not an actuarial model.

Countdown
---------
  choice_impact_days = ((aggregate - 50) / 50) * 1095
  death(scenario)    = birth + expectancy(scenario) years
                       + choice_impact_days * SCENARIO_IMPACT_MULTIPLIER[scenario]
  remaining          = max(0, death - now)

Public API
----------
calculate_age(birth_date, today)                     -> int
validate_life_parameters(dob, conditions, today)     -> int (age)
estimate_life_expectancy(age, conditions)            -> LifeExpectancies
build_life_parameters(dob, conditions, today)        -> LifeParameters
project_countdown(now, birth_date, expectancies, aggregate) -> CountdownState
summarize_lifespan(params, today)                    -> LifespanSummary
decay_box_counts(total)                              -> (minutes, seconds)
CountdownTimer                                       (Stopped ⇄ Running)
"""
from __future__ import annotations

import asyncio
import calendar
import enum
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Iterable, Optional

from lifeclock.core.errors import LifeParametersValidationError
from lifeclock.models.life_parameters import HealthCondition

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SCENARIOS = ("optimistic", "realistic", "pessimistic")

BASE_LIFE_EXPECTANCY = 73

CONDITION_IMPACT_YEARS: dict[HealthCondition, float] = {
    HealthCondition.none:          0,
    HealthCondition.diabetes:      -6,
    HealthCondition.heart_disease: -8,
    HealthCondition.cancer:        -10,
    HealthCondition.hypertension:  -4,
    HealthCondition.obesity:       -5,
    HealthCondition.smoking:       -10,
    HealthCondition.mental_health: -7,
    HealthCondition.other:         -5,
}

CONDITION_LABELS: dict[HealthCondition, str] = {
    HealthCondition.none:          "None / Healthy",
    HealthCondition.diabetes:      "Diabetes",
    HealthCondition.heart_disease: "Heart Disease",
    HealthCondition.cancer:        "Cancer (in remission)",
    HealthCondition.hypertension:  "High Blood Pressure",
    HealthCondition.obesity:       "Obesity",
    HealthCondition.smoking:       "Smoking Habit",
    HealthCondition.mental_health: "Mental Health Condition",
    HealthCondition.other:         "Other Chronic Condition",
}

DIMINISHING_RETURNS_STEP = 0.1

MIN_AGE = 1
MAX_AGE = 120

# ±3 years at the score extremes, zero at the neutral score
CHOICE_IMPACT_MAX_DAYS = 1095
NEUTRAL_AGGREGATE = 50.0

SCENARIO_IMPACT_MULTIPLIER: dict[str, float] = {
    "pessimistic": 0.5,
    "realistic":   1.0,
    "optimistic":  1.5,
}

DAYS_PER_YEAR = 365.25


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LifeExpectancies:
    optimistic: float
    realistic: float
    pessimistic: float

    def for_scenario(self, scenario: str) -> float:
        return getattr(self, scenario)

    def as_dict(self) -> dict[str, float]:
        return {s: self.for_scenario(s) for s in SCENARIOS}


@dataclass(frozen=True)
class LifeParameters:
    """The singleton parameter record. Replaced wholesale on every update."""
    date_of_birth: date
    health_conditions: frozenset[HealthCondition]
    life_expectancies: LifeExpectancies


@dataclass(frozen=True)
class TimeBreakdown:
    days: int
    hours: int
    minutes: int
    seconds: int

    @classmethod
    def modular(cls, remaining: timedelta) -> "TimeBreakdown":
        """Clock-face view: hours 0–23, minutes and seconds 0–59."""
        total = max(0, remaining // timedelta(seconds=1))
        days, rest = divmod(total, 86400)
        hours, rest = divmod(rest, 3600)
        minutes, seconds = divmod(rest, 60)
        return cls(days=days, hours=hours, minutes=minutes, seconds=seconds)

    @classmethod
    def absolute(cls, remaining: timedelta) -> "TimeBreakdown":
        """Each unit is the whole remaining duration floored to that unit."""
        total = max(0, remaining // timedelta(seconds=1))
        return cls(
            days=total // 86400,
            hours=total // 3600,
            minutes=total // 60,
            seconds=total,
        )


ZERO = TimeBreakdown(0, 0, 0, 0)


@dataclass(frozen=True)
class CountdownState:
    computed_at: datetime
    choice_impact_days: float
    death_dates: dict[str, datetime]
    remaining: dict[str, timedelta]
    scenarios: dict[str, TimeBreakdown]   # modular, per scenario
    total: TimeBreakdown                  # absolute, realistic scenario
    breakdown: TimeBreakdown              # modular, realistic scenario

    @property
    def reached(self) -> bool:
        return self.remaining["realistic"] == timedelta(0)


DECAY_BOX_LIMIT = 1000


def decay_box_counts(total: TimeBreakdown) -> tuple[int, int]:
    """(minute boxes, second boxes) shown by the decay grids, capped."""
    return min(total.minutes, DECAY_BOX_LIMIT), min(total.seconds, DECAY_BOX_LIMIT)


@dataclass
class LifespanSummary:
    current_age: int
    condition_labels: list[str]
    expectancy_range: tuple[float, float]   # (pessimistic, optimistic)
    most_likely: float
    remaining_years: float


# ---------------------------------------------------------------------------
# Age + validation
# ---------------------------------------------------------------------------

def calculate_age(birth_date: date, today: date) -> int:
    """Whole years; not incremented until the birthday has occurred this year."""
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def _coerce_conditions(conditions: Iterable[HealthCondition | str]) -> frozenset[HealthCondition]:
    coerced = set()
    for c in conditions:
        try:
            coerced.add(HealthCondition(c))
        except ValueError:
            raise LifeParametersValidationError(
                f"Unknown health condition: {c!r}.", field="health_conditions"
            ) from None
    return frozenset(coerced)


def validate_life_parameters(
    date_of_birth: Optional[date],
    conditions: Iterable[HealthCondition | str],
    today: date,
) -> int:
    """
    Check a candidate parameter set. Returns the age on success.
    Raises LifeParametersValidationError before anything is mutated.
    """
    if date_of_birth is None:
        raise LifeParametersValidationError(
            "Please select your date of birth.", field="date_of_birth"
        )
    selected = _coerce_conditions(conditions)
    if not selected:
        raise LifeParametersValidationError(
            'Please select at least one health condition (including "none" if applicable).',
            field="health_conditions",
        )
    if HealthCondition.none in selected and len(selected) > 1:
        raise LifeParametersValidationError(
            '"none" cannot be combined with other health conditions.',
            field="health_conditions",
        )
    if date_of_birth > today:
        raise LifeParametersValidationError(
            "Date of birth cannot be in the future.", field="date_of_birth"
        )
    age = calculate_age(date_of_birth, today)
    if age < MIN_AGE or age > MAX_AGE:
        raise LifeParametersValidationError(
            f"Age must be between {MIN_AGE} and {MAX_AGE} years.", field="date_of_birth"
        )
    return age


# ---------------------------------------------------------------------------
# Life expectancy
# ---------------------------------------------------------------------------

def _is_healthy(conditions: frozenset[HealthCondition]) -> bool:
    return conditions == frozenset({HealthCondition.none})


def estimate_life_expectancy(
    age: int,
    conditions: Iterable[HealthCondition | str],
) -> LifeExpectancies:
    selected = _coerce_conditions(conditions)
    healthy = _is_healthy(selected)

    total_impact = 0.0
    if not healthy:
        total_impact = float(sum(CONDITION_IMPACT_YEARS[c] for c in selected))
        if len(selected) > 1:
            total_impact *= 1 - (len(selected) - 1) * DIMINISHING_RETURNS_STEP

    realistic = max(age + 1, BASE_LIFE_EXPECTANCY + total_impact)
    optimistic = realistic + (10 if healthy else 7)
    pessimistic = max(age + 1, realistic - (3 if healthy else 6))
    return LifeExpectancies(
        optimistic=optimistic,
        realistic=realistic,
        pessimistic=pessimistic,
    )


def build_life_parameters(
    date_of_birth: Optional[date],
    conditions: Iterable[HealthCondition | str],
    today: date,
) -> LifeParameters:
    """Validate, then derive the three-scenario expectancy for a new record."""
    conditions = list(conditions)
    age = validate_life_parameters(date_of_birth, conditions, today)
    selected = _coerce_conditions(conditions)
    return LifeParameters(
        date_of_birth=date_of_birth,
        health_conditions=selected,
        life_expectancies=estimate_life_expectancy(age, selected),
    )


def summarize_lifespan(params: LifeParameters, today: date) -> LifespanSummary:
    age = calculate_age(params.date_of_birth, today)
    exp = params.life_expectancies
    if HealthCondition.none in params.health_conditions:
        labels = [CONDITION_LABELS[HealthCondition.none]]
    else:
        labels = sorted(CONDITION_LABELS[c] for c in params.health_conditions)
    return LifespanSummary(
        current_age=age,
        condition_labels=labels,
        expectancy_range=(exp.pessimistic, exp.optimistic),
        most_likely=exp.realistic,
        remaining_years=max(0.0, exp.realistic - age),
    )


# ---------------------------------------------------------------------------
# Countdown
# ---------------------------------------------------------------------------

def _add_years(start: datetime, years: float) -> datetime:
    """
    Whole years move the calendar year (Feb 29 falls back to Feb 28);
    the fractional remainder is added as DAYS_PER_YEAR-based days.
    """
    whole = int(years)
    fraction = years - whole
    target_year = start.year + whole
    day = min(start.day, calendar.monthrange(target_year, start.month)[1])
    shifted = start.replace(year=target_year, day=day)
    return shifted + timedelta(days=fraction * DAYS_PER_YEAR)


def choice_impact_days(aggregate: float) -> float:
    return ((aggregate - NEUTRAL_AGGREGATE) / NEUTRAL_AGGREGATE) * CHOICE_IMPACT_MAX_DAYS


def project_countdown(
    now: datetime,
    birth_date: date,
    life_expectancies: LifeExpectancies,
    aggregate: float,
) -> CountdownState:
    """Recompute every scenario's remaining time. Never negative."""
    birth = datetime.combine(birth_date, time.min, tzinfo=timezone.utc)
    impact = choice_impact_days(aggregate)

    death_dates: dict[str, datetime] = {}
    remaining: dict[str, timedelta] = {}
    scenarios: dict[str, TimeBreakdown] = {}
    for scenario in SCENARIOS:
        adjusted = impact * SCENARIO_IMPACT_MULTIPLIER[scenario]
        death = _add_years(birth, life_expectancies.for_scenario(scenario))
        death += timedelta(days=adjusted)
        left = max(timedelta(0), death - now)
        death_dates[scenario] = death
        remaining[scenario] = left
        scenarios[scenario] = TimeBreakdown.modular(left)

    return CountdownState(
        computed_at=now,
        choice_impact_days=impact,
        death_dates=death_dates,
        remaining=remaining,
        scenarios=scenarios,
        total=TimeBreakdown.absolute(remaining["realistic"]),
        breakdown=scenarios["realistic"],
    )


# ---------------------------------------------------------------------------
# Countdown timer (Stopped ⇄ Running)
# ---------------------------------------------------------------------------

class CountdownStatus(str, enum.Enum):
    stopped = "stopped"
    running = "running"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class CountdownTimer:
    """
    Periodically recomputes a CountdownState while running.

    `compute` is called with the current instant and must not touch the
    store. Ticks are scheduled on the running asyncio loop; without one the
    timer still tracks its status and `tick()` can be driven by hand.
    """
    compute: Callable[[datetime], CountdownState]
    interval: float = 1.0
    clock: Callable[[], datetime] = _utcnow
    on_tick: Optional[Callable[[CountdownState], None]] = None
    status: CountdownStatus = field(default=CountdownStatus.stopped, init=False)
    latest: Optional[CountdownState] = field(default=None, init=False)
    _task: Optional[asyncio.Task] = field(default=None, init=False, repr=False)

    @property
    def running(self) -> bool:
        return self.status == CountdownStatus.running

    def start(self) -> CountdownState:
        """(Re)start: cancel any scheduled tick, compute now, schedule the next."""
        self._cancel()
        self.status = CountdownStatus.running
        state = self.tick()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._task = loop.create_task(self._run())
        logger.debug("countdown started (interval=%ss)", self.interval)
        return state

    def stop(self) -> None:
        self._cancel()
        if self.status == CountdownStatus.running:
            logger.debug("countdown stopped")
        self.status = CountdownStatus.stopped

    def tick(self) -> CountdownState:
        state = self.compute(self.clock())
        self.latest = state
        if self.on_tick is not None:
            self.on_tick(state)
        return state

    def _cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self) -> None:
        while self.status == CountdownStatus.running:
            await asyncio.sleep(self.interval)
            self.tick()
