from __future__ import annotations

from pydantic import BaseModel, Field


class GenerationReport(BaseModel):
    """Outcome of one rank/reap/sow cycle. Slot lists hold slot indices."""

    generation: int
    ranking: list[int] = Field(description="Slot indices ordered best to worst")
    distances: list[float] = Field(description="Distance walked per rank")
    reaped: list[int] = Field(default_factory=list)
    crossover_children: list[int] = Field(default_factory=list)
    randomized: list[int] = Field(default_factory=list)
    mutation_rates: dict[int, float] = Field(
        default_factory=dict, description="Mutation rate applied per mutated slot"
    )
    mutated_weights: int = 0
    unfilled_requests: int = 0
    best_distance: float = 0.0
    non_deterministic: bool = False

    @property
    def sown(self) -> int:
        return len(self.crossover_children) + len(self.randomized)