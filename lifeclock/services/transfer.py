"""
Import / export of the choice log.

JSON export
  {exportDate, choiceHistory: [...], currentScores: {abstract, concrete}}

CSV export
  Date,Time,Category,Question,Choice,Value,Weight
  Date/Time are the UTC date and HH:MM:SS of the timestamp. Question and
  Choice are always double-quoted with inner quotes doubled.

Import appends every parsed record through the store (which assigns fresh
ids). There is no rollback: records written before a malformed one stay.
Text fields and timestamps must be JSON strings; CSV rows must have exactly
the seven header columns.
"""
from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from lifeclock.core.errors import ImportParseError
from lifeclock.services.scoring import ScoreResult
from lifeclock.services.store import NewChoice, PersistentStore, StoredChoice


CSV_HEADERS = ["Date", "Time", "Category", "Question", "Choice", "Value", "Weight"]

IMPORT_FORMATS = ("json", "csv")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _iso(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_iso(raw: str) -> datetime:
    if not isinstance(raw, str):
        raise TypeError(f"timestamp must be an ISO 8601 string, got {raw!r}")
    ts = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def export_filename(now: datetime, fmt: str) -> str:
    return f"life-prediction-data-{now.date().isoformat()}.{fmt}"


def choice_to_dict(choice: StoredChoice) -> dict[str, Any]:
    return {
        "id": choice.id,
        "timestamp": _iso(choice.timestamp),
        "category": choice.category.value,
        "question": choice.question,
        "choice": choice.choice_text,
        "value": choice.value,
        "weight": choice.weight,
    }


def choice_from_dict(data: dict[str, Any]) -> NewChoice:
    """Any `id` in `data` is ignored. Raises KeyError / TypeError / ValueError."""
    choice_text = data["choice"] if "choice" in data else data["choiceText"]
    fields = (("question", data["question"]), ("choice", choice_text), ("value", data["value"]))
    for name, text in fields:
        if not isinstance(text, str):
            raise TypeError(f"{name} must be a string, got {text!r}")
    weight = data["weight"]
    if isinstance(weight, float) and weight.is_integer():
        weight = int(weight)
    return NewChoice(
        timestamp=_parse_iso(data["timestamp"]),
        category=data["category"],
        question=data["question"],
        choice_text=choice_text,
        value=data["value"],
        weight=weight,
    )


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def build_export(
    choices: Iterable[StoredChoice],
    scores: ScoreResult,
    now: datetime,
) -> dict[str, Any]:
    return {
        "exportDate": _iso(now),
        "choiceHistory": [choice_to_dict(c) for c in choices],
        "currentScores": {
            "abstract": scores.abstract_dict(),
            "concrete": scores.concrete.as_dict(),
        },
    }


def export_json(choices: Iterable[StoredChoice], scores: ScoreResult, now: datetime) -> str:
    return json.dumps(build_export(choices, scores, now), indent=2)


def export_csv(choices: Iterable[StoredChoice]) -> str:
    lines = [",".join(CSV_HEADERS)]
    for c in choices:
        ts = c.timestamp.astimezone(timezone.utc)
        lines.append(",".join([
            ts.strftime("%Y-%m-%d"),
            ts.strftime("%H:%M:%S"),
            c.category.value,
            _quote(c.question),
            _quote(c.choice_text),
            c.value,
            str(c.weight),
        ]))
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

def import_json(store: PersistentStore, text: str) -> list[StoredChoice]:
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise ImportParseError(f"invalid JSON ({exc})") from exc
    if not isinstance(data, dict) or not isinstance(data.get("choiceHistory"), list):
        raise ImportParseError("JSON export must contain a 'choiceHistory' list")

    imported: list[StoredChoice] = []
    for i, record in enumerate(data["choiceHistory"]):
        try:
            if not isinstance(record, dict):
                raise TypeError("record is not an object")
            choice = choice_from_dict(record)
        except (KeyError, TypeError, ValueError) as exc:
            raise ImportParseError(
                f"choiceHistory[{i}] is malformed ({exc})", imported=len(imported)
            ) from exc
        imported.append(store.append(choice))
    return imported


def _choice_from_row(row: list[str]) -> NewChoice:
    if len(row) != len(CSV_HEADERS):
        raise ValueError(f"expected {len(CSV_HEADERS)} fields, got {len(row)}")
    day, clock, category, question, choice_text, value, weight = row
    return NewChoice(
        timestamp=_parse_iso(f"{day.strip()}T{clock.strip()}"),
        category=category.strip(),
        question=question,
        choice_text=choice_text,
        value=value.strip(),
        weight=int(weight),
    )


def import_csv(store: PersistentStore, text: str) -> list[StoredChoice]:
    reader = csv.reader(io.StringIO(text))
    imported: list[StoredChoice] = []
    try:
        header = next(reader, None)
        if header is None:
            raise ImportParseError("CSV is empty")
        for row in reader:
            if not row or all(not field.strip() for field in row):
                continue
            try:
                choice = _choice_from_row(row)
            except ValueError as exc:
                raise ImportParseError(
                    str(exc), line=reader.line_num, imported=len(imported)
                ) from exc
            imported.append(store.append(choice))
    except csv.Error as exc:
        raise ImportParseError(
            f"invalid CSV ({exc})", line=reader.line_num, imported=len(imported)
        ) from exc
    return imported


def import_data(
    store: PersistentStore,
    text: str,
    fmt: Optional[str] = None,
    filename: Optional[str] = None,
) -> list[StoredChoice]:
    """Dispatch on an explicit format, else on the filename suffix."""
    if fmt is None and filename:
        fmt = filename.rsplit(".", 1)[-1].lower() if "." in filename else None
    if fmt == "json":
        return import_json(store, text)
    if fmt == "csv":
        return import_csv(store, text)
    raise ImportParseError(f"unsupported import format {fmt!r}; expected json or csv")
