"""
Operator Report for audit compliance.

Every operator that performs an approximation emits an OpReport that:
1. Lists all approximation triggers (domain projection, floors, guards)
2. Declares whether the domain constraint was hit (domain_projection)
3. Carries the magnitude of the projection in metrics

An exact op must not list triggers; a projecting op must not claim exactness.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class OpReport:
    """
    Audit-compliant operation report.

    Attributes:
        name: Operator name (e.g., "ConstrainEllipsoid")
        exact: True if operation is exact (no approximation)
        approximation_triggers: List of what caused approximation
        closed_form: True if no iterative solver was used
        domain_projection: Whether domain constraint was hit
        metrics: Additional metrics for debugging
        notes: Human-readable explanation
        timestamp: When the report was generated
    """
    name: str
    exact: bool
    approximation_triggers: list = field(default_factory=list)
    closed_form: bool = True
    domain_projection: bool = False
    metrics: dict = field(default_factory=dict)
    notes: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def validate(self) -> None:
        """
        Validate the report satisfies audit requirements.

        Raises ValueError if validation fails.
        """
        if self.exact and self.approximation_triggers:
            raise ValueError("Exact op cannot declare approximation triggers.")
        if self.exact and self.domain_projection:
            raise ValueError("Exact op cannot report a domain projection.")
        if self.domain_projection and not self.approximation_triggers:
            raise ValueError("Domain projection must name its approximation trigger.")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "exact": self.exact,
            "approximation_triggers": list(self.approximation_triggers),
            "closed_form": self.closed_form,
            "domain_projection": self.domain_projection,
            "metrics": dict(self.metrics),
            "notes": self.notes,
            "timestamp": self.timestamp,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)
