"""
ChoiceRecord — the append-only choice log.

Rows are never updated: only inserted or bulk-cleared. The two secondary
indexes are part of the required schema; a `choices` table without them is
treated as a half-created store (see lifeclock/services/store.py).
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column
import enum

from lifeclock.db.base import Base


class Category(str, enum.Enum):
    mindfulness = "mindfulness"
    intention = "intention"
    action = "action"
    appreciation = "appreciation"
    presence = "presence"
    selfBelief = "selfBelief"
    agency = "agency"
    validation = "validation"


CATEGORIES: tuple[Category, ...] = tuple(Category)

CHOICE_INDEXES = ("ix_choices_timestamp", "ix_choices_category")


class ChoiceRecord(Base):
    __tablename__ = "choices"
    __table_args__ = (
        Index(CHOICE_INDEXES[0], "timestamp"),
        Index(CHOICE_INDEXES[1], "category"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    category: Mapped[str] = mapped_column(
        Enum(Category, name="choice_category_enum"), nullable=False
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    choice_text: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[str] = mapped_column(String(64), nullable=False)
    weight: Mapped[int] = mapped_column(Integer, nullable=False)
