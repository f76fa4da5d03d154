from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

FRACTION_TOLERANCE = 1e-6

_PI_4 = 0.25 * math.pi
_PI_8 = 0.125 * math.pi


class MorphologyConfig(BaseModel):
    """Geometry of a radially symmetric walker: a root capsule with legs made
    of a thigh and a shin each. Every segment carries one touch sensor and
    every leg contributes a hip and a knee hinge."""

    num_legs: int = Field(default=6, ge=1)
    root_body_radius: float = Field(default=0.25, gt=0)
    root_body_height: float = Field(default=0.1, gt=0)
    leg_radius: float = Field(default=0.1, gt=0)
    leg_length: float = Field(default=0.45, gt=0)
    fore_leg_radius: float = Field(default=0.08, gt=0)
    fore_leg_length: float = Field(default=0.75, gt=0)
    hip_limits: tuple[float, float] = Field(default=(-0.75 * _PI_4, _PI_8))
    knee_limits: tuple[float, float] = Field(default=(-_PI_8, 0.2))

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def segment_count(self) -> int:
        return 2 * self.num_legs + 1

    @computed_field
    @property
    def joint_count(self) -> int:
        return self.segment_count - 1

    @model_validator(mode="after")
    def _check_limits(self) -> "MorphologyConfig":
        for name in ("hip_limits", "knee_limits"):
            lower, upper = getattr(self, name)
            if lower >= upper:
                raise ValueError(f"{name}: lower limit {lower} must be below upper limit {upper}")
        return self

    def joint_limits(self) -> list[tuple[float, float]]:
        """Limits per joint, ordered hip_0, knee_0, hip_1, knee_1, ..."""
        limits: list[tuple[float, float]] = []
        for _ in range(self.num_legs):
            limits.append(self.hip_limits)
            limits.append(self.knee_limits)
        return limits


class WalkerConfig(BaseModel):
    """Controller and motor settings shared by every walker."""

    motor_strength: float = Field(default=0.5, gt=0)
    control_frequency: float = Field(default=3.0, gt=0, description="Controller updates per simulated second")
    velocity_epsilon: float = Field(default=1e-4, gt=0)
    morphology: MorphologyConfig = Field(default_factory=MorphologyConfig)

    @property
    def control_period(self) -> float:
        return 1.0 / self.control_frequency


class SchedulerConfig(BaseModel):
    """Admission control and timing of physical evaluations."""

    parallel_evaluations: int = Field(default=10, ge=1)
    evaluation_duration: float = Field(default=10.0, gt=0)
    max_step_delta: float = Field(default=1.0 / 60.0, gt=0)
    rebuild_on_activation: bool = True
    start_position: tuple[float, float, float] = (0.0, 0.0, 0.0)


class EvolutionConfig(BaseModel):
    """Population quotas of the rank/reap/sow cycle.

    elite + mutation + reap must cover the whole population; crossover
    children are carved out of the reaped share, the remainder of which is
    refilled with random weights.
    """

    population_size: int = Field(default=50, ge=2)
    reap_fraction: float = Field(default=0.3, ge=0, le=1)
    crossover_fraction: float = Field(default=0.2, ge=0, le=1)
    elite_fraction: float = Field(default=0.2, ge=0, le=1)
    mutation_fraction: float = Field(default=0.5, ge=0, le=1)
    elite_parent_bias: float = Field(default=0.8, ge=0, le=1)
    mutation_rate: float = Field(default=0.5, ge=0, le=1)
    seed: int | None = None

    @model_validator(mode="after")
    def _check_quotas(self) -> "EvolutionConfig":
        total = self.elite_fraction + self.mutation_fraction + self.reap_fraction
        if abs(total - 1.0) > FRACTION_TOLERANCE:
            raise ValueError(
                "elite_fraction + mutation_fraction + reap_fraction must equal 1.0, "
                f"got {self.elite_fraction} + {self.mutation_fraction} + {self.reap_fraction} = {total}"
            )
        if self.crossover_fraction > self.reap_fraction + FRACTION_TOLERANCE:
            raise ValueError(
                f"crossover_fraction ({self.crossover_fraction}) cannot exceed "
                f"reap_fraction ({self.reap_fraction})"
            )
        return self


class LoggingConfig(BaseModel):
    log_dir: str = "logs"
    level: str = "INFO"
    console_level: str | None = Field(default=None, description="Console sink level; defaults to level")
    rotation: str = "50 MB"
    retention: str = "30 days"


class TrackingConfig(BaseModel):
    enabled: bool = False
    logdir: str = "runs"


class SimulationConfig(BaseModel):
    """Top-level configuration handed to the simulation runner."""

    walker: WalkerConfig = Field(default_factory=WalkerConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    evolution: EvolutionConfig = Field(default_factory=EvolutionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    tracking: TrackingConfig = Field(default_factory=TrackingConfig)
    physics_dt: float = Field(default=1.0 / 60.0, gt=0)
    steps_per_yield: int = Field(default=60, gt=0)
    max_generations: int | None = Field(
        default=None,
        gt=0,
        description="Maximum number of generations to run (None = unlimited)",
    )
    speedup_report_interval: float = Field(
        default=2000.0, gt=0, description="Simulated seconds between speedup reports"
    )
