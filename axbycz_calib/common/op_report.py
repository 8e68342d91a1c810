"""
Operator Report for solve diagnostics.

Every operator (mean/covariance, hypothesis generation, selection) emits an
OpReport that:
1. Names the operator and whether its result is exact
2. Lists all approximation triggers (iteration cap, noise-floor subtraction,
   indefinite or ill-conditioned covariance, ...)
3. Declares whether an iterative solver was used
4. Carries free-form metrics for debugging

Reports are attached to results so callers can inspect non-fatal conditions
(ConvergenceFailure, NumericalDegeneracy) without parsing logs.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class OpReport:
    """
    Operation report.

    Attributes:
        name: Operator name (e.g., "KarcherMeanCov")
        exact: True if operation is exact (no approximation)
        approximation_triggers: List of what caused approximation
        closed_form: True if no iterative solver was used
        solver_used: Name of solver if iterative (e.g., "KarcherMean")
        degenerate: True if a numerical degeneracy was detected
        metrics: Additional metrics for debugging
        notes: Human-readable explanation
        timestamp: When the report was generated
    """
    name: str
    exact: bool
    approximation_triggers: list[str] = field(default_factory=list)
    closed_form: bool = False
    solver_used: Optional[str] = None
    degenerate: bool = False
    metrics: dict = field(default_factory=dict)
    notes: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def add_trigger(self, trigger: str) -> None:
        """Record an approximation trigger once; the op is no longer exact."""
        if trigger not in self.approximation_triggers:
            self.approximation_triggers.append(trigger)
        self.exact = False

    def validate(self) -> None:
        """
        Validate the report is internally consistent.

        Raises ValueError if validation fails.
        """
        if self.exact and self.approximation_triggers:
            raise ValueError("Exact op cannot declare approximation triggers.")

        if self.closed_form and self.solver_used is not None:
            raise ValueError("Closed-form op must not list a solver.")

        if self.degenerate and not self.approximation_triggers:
            raise ValueError("Degenerate op must name the triggering condition.")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "exact": self.exact,
            "approximation_triggers": list(self.approximation_triggers),
            "closed_form": self.closed_form,
            "solver_used": self.solver_used,
            "degenerate": self.degenerate,
            "metrics": dict(self.metrics),
            "notes": self.notes,
            "timestamp": self.timestamp,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)
