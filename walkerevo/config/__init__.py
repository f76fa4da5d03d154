from walkerevo.config.loader import config_from_mapping, load_config
from walkerevo.config.models import (
    EvolutionConfig,
    LoggingConfig,
    MorphologyConfig,
    SchedulerConfig,
    SimulationConfig,
    TrackingConfig,
    WalkerConfig,
)
from walkerevo.config.resolvers import register_resolvers

__all__ = [
    "EvolutionConfig",
    "LoggingConfig",
    "MorphologyConfig",
    "SchedulerConfig",
    "SimulationConfig",
    "TrackingConfig",
    "WalkerConfig",
    "config_from_mapping",
    "load_config",
    "register_resolvers",
]
