"""
Shared pytest fixtures.

Every test gets its own SQLite file under tmp_path and a controllable clock,
so no Postgres and no wall-clock timing is involved.
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from lifeclock.main import app
from lifeclock.services.session import LifeClockSession
from lifeclock.services.store import NewChoice, PersistentStore

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_choice(
    category="mindfulness",
    weight=100,
    at: datetime = NOW,
    question="Right now, how do you choose to engage with this moment?",
    choice_text="Actively direct my full attention to this present experience",
    value="mindful",
) -> NewChoice:
    return NewChoice(
        timestamp=at,
        category=category,
        question=question,
        choice_text=choice_text,
        value=value,
        weight=weight,
    )


@pytest.fixture()
def clock():
    return FrozenClock()


@pytest.fixture()
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'lifeclock.db'}"


@pytest.fixture()
def store(db_url, clock):
    s = PersistentStore.from_url(db_url, clock=clock)
    s.open()
    return s


@pytest.fixture()
def session(store, clock):
    s = LifeClockSession(store=store, clock=clock)
    s.initialize()
    yield s
    s.shutdown()


@pytest.fixture()
def client(session):
    app.state.session = session
    with TestClient(app) as c:
        yield c
    app.state.session = None
