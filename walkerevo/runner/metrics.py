from __future__ import annotations

from pydantic import BaseModel, Field, computed_field


class SchedulerMetrics(BaseModel):
    """Counters kept by the evaluation scheduler."""

    steps: int = Field(default=0, description="Physics steps seen by the scheduler")
    simulated_time: float = Field(default=0.0, description="Sum of clamped step deltas, in seconds")
    evaluations_started: int = 0
    evaluations_completed: int = 0
    rounds_completed: int = 0
    peak_in_flight: int = Field(default=0, description="Highest number of simultaneous evaluations")

    @computed_field
    @property
    def evaluations_active(self) -> int:
        return max(0, self.evaluations_started - self.evaluations_completed)

    def to_dict(self) -> dict[str, int | float]:
        return {
            "steps": self.steps,
            "simulated_time": self.simulated_time,
            "evaluations_started": self.evaluations_started,
            "evaluations_completed": self.evaluations_completed,
            "evaluations_active": self.evaluations_active,
            "rounds_completed": self.rounds_completed,
            "peak_in_flight": self.peak_in_flight,
        }
