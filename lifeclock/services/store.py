"""
Persistent store — the choice log and the life-parameter slot.

Layout
------
  ChoiceStore          Protocol every backend implements
  SqlChoiceStore       durable backend (SQLAlchemy; SQLite by default)
  MemoryChoiceStore    session-scoped in-memory mirror
  PersistentStore      adapter used by the rest of the app

Degradation contract
--------------------
PersistentStore never raises from a public operation. The first failure to
open the schema or to run a transaction is logged, flips `available` to
False, and that operation plus every later one in the session is served by
the in-memory mirror. The mirror shadows every successful durable operation,
so flipping mid-session keeps what was already loaded or written.

Schema
------
`ensure_schema()` is idempotent (checkfirst creation). A `choices` table
missing one of its secondary indexes, or a `life_parameters` table without
the versioned columns, counts as a half-created store → unavailable.

Legacy records
--------------
Life-parameter rows carry an explicit `schema_version`. Older versions are
upconverted at the read boundary by the functions in `_RECORD_UPGRADES`.
"""
from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Iterator, Optional, Protocol

from sqlalchemy import delete, inspect, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from lifeclock.core.errors import StoreUnavailableError, TransactionFailureError
from lifeclock.db.base import Base, build_engine
from lifeclock.models.choice import CHOICE_INDEXES, Category, ChoiceRecord
from lifeclock.models.life_parameters import (
    CURRENT_SCHEMA_VERSION,
    LIFE_PARAMETERS_KEY,
    HealthCondition,
    LifeParametersRecord,
)
from lifeclock.services.lifespan import LifeExpectancies, LifeParameters, calculate_age

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Record types
# ---------------------------------------------------------------------------

def _as_utc(ts: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything in the log is UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


@dataclass(frozen=True)
class NewChoice:
    """A choice that has not been persisted yet (no id)."""
    timestamp: datetime
    category: Category
    question: str
    choice_text: str
    value: str
    weight: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", Category(self.category))
        object.__setattr__(self, "timestamp", _as_utc(self.timestamp))
        if isinstance(self.weight, bool) or not isinstance(self.weight, int):
            raise ValueError(f"weight must be an integer, got {self.weight!r}")
        if not 0 <= self.weight <= 100:
            raise ValueError(f"weight must be within 0-100, got {self.weight}")

    def with_id(self, choice_id: int) -> "StoredChoice":
        return StoredChoice(
            id=choice_id,
            timestamp=self.timestamp,
            category=self.category,
            question=self.question,
            choice_text=self.choice_text,
            value=self.value,
            weight=self.weight,
        )


@dataclass(frozen=True)
class StoredChoice:
    """An immutable, persisted choice. `id` is assigned by the store."""
    id: int
    timestamp: datetime
    category: Category
    question: str
    choice_text: str
    value: str
    weight: int

    def without_id(self) -> NewChoice:
        return NewChoice(
            timestamp=self.timestamp,
            category=self.category,
            question=self.question,
            choice_text=self.choice_text,
            value=self.value,
            weight=self.weight,
        )


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


# ---------------------------------------------------------------------------
# Port
# ---------------------------------------------------------------------------

class ChoiceStore(Protocol):
    def open(self) -> None:
        ...

    def append(self, choice: NewChoice) -> StoredChoice:
        ...

    def load_all(self) -> list[StoredChoice]:
        ...

    def clear_choices(self) -> None:
        ...

    def put_life_parameters(self, params: LifeParameters) -> None:
        ...

    def get_life_parameters(self) -> Optional[LifeParameters]:
        ...


# ---------------------------------------------------------------------------
# Legacy record upconversion
# ---------------------------------------------------------------------------

def _upgrade_v1_to_v2(payload: dict, today: date) -> dict:
    """Scalar `life_expectancy` → three scenarios."""
    old = payload.get("life_expectancy")
    if old is None:
        raise ValueError("schema_version 1 record has no life_expectancy")
    age = calculate_age(payload["date_of_birth"], today)
    return {
        **payload,
        "schema_version": 2,
        "life_expectancies": {
            "optimistic": old + 7,
            "realistic": old,
            "pessimistic": max(age + 1, old - 5),
        },
    }


_RECORD_UPGRADES: dict[int, Callable[[dict, date], dict]] = {
    1: _upgrade_v1_to_v2,
}


def migrate_life_parameters(payload: dict, today: date) -> dict:
    """Walk a raw record forward until it reaches CURRENT_SCHEMA_VERSION."""
    version = payload.get("schema_version") or 1
    payload = {**payload, "schema_version": version}
    while version < CURRENT_SCHEMA_VERSION:
        payload = _RECORD_UPGRADES[version](payload, today)
        version = payload["schema_version"]
    return payload


def life_parameters_from_payload(payload: dict, today: date) -> LifeParameters:
    current = migrate_life_parameters(payload, today)
    exp = current["life_expectancies"]
    return LifeParameters(
        date_of_birth=current["date_of_birth"],
        health_conditions=frozenset(HealthCondition(c) for c in current["health_conditions"]),
        life_expectancies=LifeExpectancies(
            optimistic=float(exp["optimistic"]),
            realistic=float(exp["realistic"]),
            pessimistic=float(exp["pessimistic"]),
        ),
    )


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_LIFE_PARAMETER_COLUMNS = ("schema_version", "life_expectancies")


def ensure_schema(engine: Engine) -> None:
    """
    Create missing tables, then verify the result.
    Safe to call on an already-current schema: existing tables are left alone.
    Raises StoreUnavailableError on failure or on a half-created schema.
    """
    try:
        Base.metadata.create_all(engine, checkfirst=True)
        inspector = inspect(engine)
        tables = set(inspector.get_table_names())
        for table in (ChoiceRecord.__tablename__, LifeParametersRecord.__tablename__):
            if table not in tables:
                raise StoreUnavailableError(f"table '{table}' is missing")

        indexes = {ix["name"] for ix in inspector.get_indexes(ChoiceRecord.__tablename__)}
        missing = [name for name in CHOICE_INDEXES if name not in indexes]
        if missing:
            raise StoreUnavailableError(
                f"table 'choices' is missing indexes: {', '.join(missing)}"
            )

        columns = {c["name"] for c in inspector.get_columns(LifeParametersRecord.__tablename__)}
        missing = [name for name in _LIFE_PARAMETER_COLUMNS if name not in columns]
        if missing:
            raise StoreUnavailableError(
                f"table 'life_parameters' is missing columns: {', '.join(missing)}"
            )
    except (SQLAlchemyError, OSError) as exc:
        raise StoreUnavailableError(str(exc)) from exc


# ---------------------------------------------------------------------------
# Durable backend
# ---------------------------------------------------------------------------

def _row_to_choice(row: ChoiceRecord) -> StoredChoice:
    return StoredChoice(
        id=row.id,
        timestamp=_as_utc(row.timestamp),
        category=Category(row.category),
        question=row.question,
        choice_text=row.choice_text,
        value=row.value,
        weight=row.weight,
    )


class SqlChoiceStore:
    """SQLAlchemy backend. Raises StoreUnavailableError / TransactionFailureError."""

    def __init__(self, engine: Engine, clock: Callable[[], datetime] = _utcnow) -> None:
        self.engine = engine
        self._clock = clock
        self._sessions = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    def open(self) -> None:
        ensure_schema(self.engine)

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        """One transaction per logical operation."""
        db = self._sessions()
        try:
            yield db
            db.commit()
        except (SQLAlchemyError, OSError) as exc:
            db.rollback()
            raise TransactionFailureError(operation, str(exc)) from exc
        finally:
            db.close()

    def append(self, choice: NewChoice) -> StoredChoice:
        with self._transaction("append") as db:
            row = ChoiceRecord(
                timestamp=choice.timestamp,
                category=choice.category,
                question=choice.question,
                choice_text=choice.choice_text,
                value=choice.value,
                weight=choice.weight,
            )
            db.add(row)
            db.flush()  # get row.id
            return choice.with_id(row.id)

    def load_all(self) -> list[StoredChoice]:
        with self._transaction("load_all") as db:
            rows = db.scalars(select(ChoiceRecord).order_by(ChoiceRecord.id)).all()
            return [_row_to_choice(r) for r in rows]

    def clear_choices(self) -> None:
        with self._transaction("clear_choices") as db:
            db.execute(delete(ChoiceRecord))

    def put_life_parameters(self, params: LifeParameters) -> None:
        with self._transaction("put_life_parameters") as db:
            db.merge(LifeParametersRecord(
                id=LIFE_PARAMETERS_KEY,
                schema_version=CURRENT_SCHEMA_VERSION,
                date_of_birth=params.date_of_birth,
                health_conditions=json.dumps(sorted(c.value for c in params.health_conditions)),
                life_expectancies=json.dumps(params.life_expectancies.as_dict()),
                life_expectancy=None,
            ))

    def get_life_parameters(self) -> Optional[LifeParameters]:
        with self._transaction("get_life_parameters") as db:
            row = db.get(LifeParametersRecord, LIFE_PARAMETERS_KEY)
            if row is None:
                return None
            payload = {
                "schema_version": row.schema_version,
                "date_of_birth": row.date_of_birth,
                "health_conditions": json.loads(row.health_conditions),
                "life_expectancies": (
                    json.loads(row.life_expectancies) if row.life_expectancies else None
                ),
                "life_expectancy": row.life_expectancy,
            }
        try:
            return life_parameters_from_payload(payload, self._clock().date())
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("ignoring unreadable life parameters record: %s", exc)
            return None


# ---------------------------------------------------------------------------
# In-memory mirror
# ---------------------------------------------------------------------------

class MemoryChoiceStore:
    """Session-scoped store. Ids continue after the highest id seen."""

    def __init__(self) -> None:
        self._choices: list[StoredChoice] = []
        self._params: Optional[LifeParameters] = None
        self._next_id = 1

    def open(self) -> None:
        pass

    def remember(self, stored: StoredChoice) -> None:
        self._choices.append(stored)
        self._next_id = max(self._next_id, stored.id + 1)

    def replace_all(self, choices: list[StoredChoice]) -> None:
        self._choices = []
        for c in choices:
            self.remember(c)

    def append(self, choice: NewChoice) -> StoredChoice:
        stored = choice.with_id(self._next_id)
        self.remember(stored)
        return stored

    def load_all(self) -> list[StoredChoice]:
        return list(self._choices)

    def clear_choices(self) -> None:
        self._choices = []

    def put_life_parameters(self, params: LifeParameters) -> None:
        self._params = params

    def get_life_parameters(self) -> Optional[LifeParameters]:
        return self._params


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------

class PersistentStore:
    """
    The store the rest of the app talks to.
    Uses the durable backend while it works, the mirror once it doesn't.
    """

    def __init__(self, backend: Optional[ChoiceStore]) -> None:
        self._backend = backend
        self._mirror = MemoryChoiceStore()
        self._opened = False
        self.available = False

    @classmethod
    def from_url(cls, url: str, clock: Callable[[], datetime] = _utcnow) -> "PersistentStore":
        try:
            backend = SqlChoiceStore(build_engine(url), clock=clock)
        except (SQLAlchemyError, ValueError) as exc:
            logger.error("cannot create store engine for %s: %s", url, exc)
            backend = None
        return cls(backend)

    @classmethod
    def in_memory(cls) -> "PersistentStore":
        """A store that is unavailable from the start."""
        return cls(None)

    # -- state ---------------------------------------------------------------

    def open(self) -> bool:
        """Initialize the schema. Returns the resulting availability."""
        self._opened = True
        if self._backend is None:
            self._degrade("open", "no durable backend configured")
            return False
        try:
            self._backend.open()
        except Exception as exc:
            self._degrade("open", exc)
        else:
            self.available = True
            logger.info("persistent store ready")
        return self.available

    def _use_backend(self) -> bool:
        if not self._opened:
            self.open()
        return self.available

    def _degrade(self, operation: str, reason: object) -> None:
        if self.available or operation == "open":
            logger.error(
                "persistent store unavailable during %s, continuing in memory: %s",
                operation, reason,
            )
        else:
            logger.warning("%s served from memory: %s", operation, reason)
        self.available = False

    # -- choices -------------------------------------------------------------

    def append(self, choice: NewChoice) -> StoredChoice:
        if self._use_backend():
            try:
                stored = self._backend.append(choice)
            except Exception as exc:
                self._degrade("append", exc)
            else:
                self._mirror.remember(stored)
                return stored
        logger.warning("choice kept in memory only (store unavailable)")
        return self._mirror.append(choice)

    def load_all(self) -> list[StoredChoice]:
        if self._use_backend():
            try:
                choices = self._backend.load_all()
            except Exception as exc:
                self._degrade("load_all", exc)
            else:
                self._mirror.replace_all(choices)
                return choices
        return self._mirror.load_all()

    def clear_choices(self) -> None:
        if self._use_backend():
            try:
                self._backend.clear_choices()
            except Exception as exc:
                self._degrade("clear_choices", exc)
        self._mirror.clear_choices()

    # -- life parameters -----------------------------------------------------

    def put_life_parameters(self, params: LifeParameters) -> None:
        if self._use_backend():
            try:
                self._backend.put_life_parameters(params)
            except Exception as exc:
                self._degrade("put_life_parameters", exc)
        self._mirror.put_life_parameters(params)

    def get_life_parameters(self) -> Optional[LifeParameters]:
        if self._use_backend():
            try:
                params = self._backend.get_life_parameters()
            except Exception as exc:
                self._degrade("get_life_parameters", exc)
            else:
                if params is not None:
                    self._mirror.put_life_parameters(params)
                return params
        return self._mirror.get_life_parameters()
