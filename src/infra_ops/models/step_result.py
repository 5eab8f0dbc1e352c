"""StepResult and TeardownReport data classes."""

from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import Any

OK = "OK"
SKIPPED = "SKIPPED"
WARNING = "WARNING"
FAILED = "FAILED"
DRY_RUN = "DRY_RUN"


@dataclass
class StepResult:
    """Outcome of a single teardown step."""

    name: str
    status: str
    detail: str = ""
    resources: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status in (OK, SKIPPED, DRY_RUN)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class TeardownReport:
    """Ordered record of every step run for an environment."""

    environment: str
    region: str
    cluster_name: str
    dry_run: bool = False
    steps: list[StepResult] = field(default_factory=list)
    duration_seconds: float = 0.0

    def add(self, step: StepResult) -> StepResult:
        self.steps.append(step)
        return step

    @property
    def warnings(self) -> list[StepResult]:
        return [step for step in self.steps if step.status == WARNING]

    @property
    def succeeded(self) -> bool:
        return all(step.succeeded for step in self.steps)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "environment": self.environment,
            "region": self.region,
            "cluster_name": self.cluster_name,
            "dry_run": self.dry_run,
            "succeeded": self.succeeded,
            "duration_seconds": round(self.duration_seconds, 1),
            "steps": [step.to_dict() for step in self.steps],
        }
