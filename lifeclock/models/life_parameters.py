"""
LifeParametersRecord — singleton row keyed by LIFE_PARAMETERS_KEY.

schema_version
  1 — legacy: a single scalar `life_expectancy` (years)
  2 — current: `life_expectancies` JSON {optimistic, realistic, pessimistic}

Version 1 rows are upconverted on read, never rewritten in place.
"""
from datetime import datetime, date
from sqlalchemy import Integer, String, Text, Float, DateTime, Date, func
from sqlalchemy.orm import Mapped, mapped_column
import enum

from lifeclock.db.base import Base


LIFE_PARAMETERS_KEY = "user"
CURRENT_SCHEMA_VERSION = 2


class HealthCondition(str, enum.Enum):
    none = "none"
    diabetes = "diabetes"
    heart_disease = "heart_disease"
    cancer = "cancer"
    hypertension = "hypertension"
    obesity = "obesity"
    smoking = "smoking"
    mental_health = "mental_health"
    other = "other"


class LifeParametersRecord(Base):
    __tablename__ = "life_parameters"

    id: Mapped[str] = mapped_column(String(16), primary_key=True, default=LIFE_PARAMETERS_KEY)
    schema_version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=CURRENT_SCHEMA_VERSION
    )
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    # JSON-encoded list of HealthCondition values
    health_conditions: Mapped[str] = mapped_column(Text, nullable=False)
    life_expectancies: Mapped[str | None] = mapped_column(
        Text, nullable=True,
        comment="JSON-encoded {optimistic, realistic, pessimistic} (schema_version 2)",
    )
    life_expectancy: Mapped[float | None] = mapped_column(
        Float, nullable=True,
        comment="Legacy scalar expectancy (schema_version 1)",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
