from walkerevo.evolution.bands import PopulationBands, ReapCursor
from walkerevo.evolution.engine import EngineMetrics, EvolutionEngine, GenerationReport, rank_population
from walkerevo.evolution.operators import crossover, mutate
from walkerevo.evolution.selectors import EliteParentSelector

__all__ = [
    "EliteParentSelector",
    "EngineMetrics",
    "EvolutionEngine",
    "GenerationReport",
    "PopulationBands",
    "ReapCursor",
    "crossover",
    "mutate",
    "rank_population",
]
