"""
Request dependencies.

Routes are `async def` so that restarting the countdown (parameter updates,
GET /predictions/countdown) happens on the event loop that drives its ticks.
Store calls are short SQLite transactions for a single local user and run
inline on that loop.
"""
from fastapi import Request

from lifeclock.services.session import LifeClockSession


def get_session(request: Request) -> LifeClockSession:
    """The single session created at start-up (see lifeclock/main.py)."""
    return request.app.state.session
