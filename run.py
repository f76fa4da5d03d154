import asyncio
from datetime import datetime, timezone
import time

from dotenv import load_dotenv
import hydra
from loguru import logger
from omegaconf import DictConfig

from walkerevo.config import config_from_mapping, register_resolvers
from walkerevo.config.models import SimulationConfig
from walkerevo.runner import SimulationRunner
from walkerevo.utils.logger_setup import setup_logger
from walkerevo.utils.serve import serve_until_signal


async def run_simulation(config: SimulationConfig) -> None:
    start_time = time.time()

    logger.info("🔄 Starting walker evolution")
    logger.info(f"🕐 Start time: {datetime.now(timezone.utc).isoformat()}")
    logger.info("Configuration:")
    logger.info(f"  - Population: {config.evolution.population_size} walkers")
    logger.info(f"  - Parallel evaluations: {config.scheduler.parallel_evaluations}")
    logger.info(f"  - Evaluation duration: {config.scheduler.evaluation_duration}s")
    max_gens = config.max_generations
    logger.info(f"  - Max generations: {max_gens if max_gens else 'unlimited'}")

    runner = SimulationRunner(config)

    async def _stop() -> None:
        runner.stop()

    try:
        task = asyncio.create_task(runner.run(), name="simulation-runner")
        await serve_until_signal(stop_coros=(_stop(),), on_stop=(task,))
        if task.done() and not task.cancelled():
            task.result()
    except Exception as e:  # pylint: disable=broad-except
        logger.error(f"❌ Simulation failed: {e}")
        raise
    finally:
        logger.info("🧹 Starting cleanup...")
        status = await runner.get_status()
        runner.close()
        duration = time.time() - start_time
        logger.info(
            "Generations: {}, best distance: {:.3f} m",
            status["total_generations"],
            status["best_distance"],
        )
        logger.info(f"Total duration: {duration:.2f} seconds ({duration / 3600:.2f} hours)")


@hydra.main(version_base=None, config_path="config", config_name="config")
def main(cfg: DictConfig) -> None:
    """Main entrypoint with Hydra configuration management."""
    load_dotenv()
    config = config_from_mapping(cfg)

    log_file_path = setup_logger(
        log_dir=config.logging.log_dir,
        level=config.logging.level,
        rotation=config.logging.rotation,
        retention=config.logging.retention,
        seed=config.evolution.seed,
        console_level=config.logging.console_level,
    )
    logger.info(
        "Working directory: {}.",
        hydra.core.hydra_config.HydraConfig.get().runtime.output_dir,
    )
    logger.info(f"Log file: {log_file_path}")
    asyncio.run(run_simulation(config))


if __name__ == "__main__":
    register_resolvers()
    main()
