from walkerevo.runner.metrics import SchedulerMetrics
from walkerevo.runner.runner import SimulationRunner
from walkerevo.runner.scheduler import EvaluationScheduler

__all__ = ["EvaluationScheduler", "SchedulerMetrics", "SimulationRunner"]
