from __future__ import annotations

from collections import deque

from pydantic import BaseModel, Field, computed_field


class EngineMetrics(BaseModel):
    """Running totals over all generations."""

    total_generations: int = Field(default=0, description="Total number of generations run")
    walkers_reaped: int = Field(default=0, description="Total walkers marked for replacement")
    crossover_children: int = Field(default=0, description="Total walkers sown by crossover")
    random_walkers: int = Field(default=0, description="Total walkers sown with random weights")
    mutants: int = Field(default=0, description="Total walkers that had at least one weight mutated")
    unfilled_requests: int = Field(default=0, description="Sow requests that found no reaped slot left")
    non_determinism_warnings: int = Field(default=0, description="Generations whose best walker regressed")
    best_distance: float = Field(default=0.0, description="Best distance accepted so far")
    recent_best_distances: deque = Field(
        default_factory=lambda: deque(maxlen=10),
        description="Rolling window of per-generation best distances",
    )

    @computed_field
    @property
    def avg_recent_best(self) -> float:
        return sum(self.recent_best_distances) / max(1, len(self.recent_best_distances))

    def to_dict(self) -> dict[str, int | float]:
        return {
            "total_generations": self.total_generations,
            "walkers_reaped": self.walkers_reaped,
            "crossover_children": self.crossover_children,
            "random_walkers": self.random_walkers,
            "mutants": self.mutants,
            "unfilled_requests": self.unfilled_requests,
            "non_determinism_warnings": self.non_determinism_warnings,
            "best_distance": self.best_distance,
            "avg_recent_best": self.avg_recent_best,
        }

    model_config = {"arbitrary_types_allowed": True}
