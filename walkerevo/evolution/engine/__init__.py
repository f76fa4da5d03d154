from walkerevo.evolution.engine.core import EvolutionEngine, rank_population
from walkerevo.evolution.engine.metrics import EngineMetrics
from walkerevo.evolution.engine.report import GenerationReport

__all__ = ["EngineMetrics", "EvolutionEngine", "GenerationReport", "rank_population"]
