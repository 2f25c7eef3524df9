"""
Outcome projector — aggregate score → concrete-domain probability ranges.

Pure function of one input. Personal behavior only moves the needle so far:
every domain is capped well below 100 and carries a fixed caveat.

  base        = aggregate * 0.3
  murphy      = 0.7
  unpredict   = 0.4

  domain          optimistic          realistic                  pessimistic
  financial       min(80, base+40)    min(60, (base+20)*murphy)  min(40, base*murphy)
  respect         min(70, base+30)    min(50, (base+15)*murphy)  min(30, base*murphy*unpredict)
  relationships   min(75, base+35)    min(55, (base+20)*murphy)  min(35, base*murphy*unpredict)
  opportunities   min(65, base+25)    min(45, (base+10)*murphy)  min(25, base*murphy*unpredict)
"""
from __future__ import annotations

import math
from dataclasses import dataclass


MURPHY_MULTIPLIER = 0.7
UNPREDICTABILITY_FACTOR = 0.4
BASE_INFLUENCE_FACTOR = 0.3

DOMAINS = ("financial", "respect", "relationships", "opportunities")

CAVEATS: dict[str, str] = {
    "financial": (
        "Economic collapse, automation displacement, or systemic failure "
        "could override all personal efforts"
    ),
    "respect": (
        "Social respect is highly volatile and often depends on factors "
        "beyond personal character"
    ),
    "relationships": (
        "Even strong personal development cannot guarantee relationship "
        "outcomes due to others' unpredictable choices"
    ),
    "opportunities": (
        "External forces, timing, and systemic barriers often block "
        "opportunities regardless of preparation"
    ),
}


@dataclass(frozen=True)
class DomainProjection:
    optimistic: int
    realistic: int
    pessimistic: int
    caveat: str

    def as_dict(self) -> dict:
        return {
            "optimistic": self.optimistic,
            "realistic": self.realistic,
            "pessimistic": self.pessimistic,
            "caveat": self.caveat,
        }


@dataclass(frozen=True)
class ConcreteProjection:
    financial: DomainProjection
    respect: DomainProjection
    relationships: DomainProjection
    opportunities: DomainProjection

    def as_dict(self) -> dict[str, dict]:
        return {d: getattr(self, d).as_dict() for d in DOMAINS}


def _percent(value: float) -> int:
    """Round half up and keep within [0, 100]."""
    return min(100, max(0, math.floor(value + 0.5)))


def _domain(name: str, optimistic: float, realistic: float, pessimistic: float) -> DomainProjection:
    return DomainProjection(
        optimistic=_percent(optimistic),
        realistic=_percent(realistic),
        pessimistic=_percent(pessimistic),
        caveat=CAVEATS[name],
    )


def project_outcomes(aggregate: float) -> ConcreteProjection:
    base = aggregate * BASE_INFLUENCE_FACTOR
    murphy = MURPHY_MULTIPLIER
    unpredict = UNPREDICTABILITY_FACTOR

    return ConcreteProjection(
        financial=_domain(
            "financial",
            min(80, base + 40),
            min(60, (base + 20) * murphy),
            min(40, base * murphy),
        ),
        respect=_domain(
            "respect",
            min(70, base + 30),
            min(50, (base + 15) * murphy),
            min(30, base * murphy * unpredict),
        ),
        relationships=_domain(
            "relationships",
            min(75, base + 35),
            min(55, (base + 20) * murphy),
            min(35, base * murphy * unpredict),
        ),
        opportunities=_domain(
            "opportunities",
            min(65, base + 25),
            min(45, (base + 10) * murphy),
            min(25, base * murphy * unpredict),
        ),
    )
