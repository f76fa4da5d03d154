"""Loguru sinks for a simulation run.

Each run gets its own log file keyed by the evolution seed, so runs that
share a log directory can be told apart and a reproducible run can be
matched to its log. Every file record carries the seed as well. The console
may log at a coarser level than the file, since the per-walker evaluation
messages are only useful when reading a log after the fact.
"""

from __future__ import annotations

from datetime import datetime, timezone
import os
import sys

from loguru import logger

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | seed={extra[seed]} | "
    "{name}:{function}:{line} | {message}"
)
PLAIN_CONSOLE_FORMAT = "{time:HH:mm:ss.SSS} | {level: <8} | {message}"
COLOR_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<yellow>{line}</yellow> | <level>{message}</level>"
)


def run_log_name(seed: int | None, now: datetime | None = None) -> str:
    """File name of a run's log: ``walkers_seed<seed>_<UTC timestamp>.log``."""
    now = now or datetime.now(timezone.utc)
    tag = f"seed{seed}" if seed is not None else "unseeded"
    return f"walkers_{tag}_{now.strftime('%Y%m%d_%H%M%S')}.log"


def setup_logger(
    log_dir: str = "logs",
    level: str = "INFO",
    rotation: str = "50 MB",
    retention: str = "30 days",
    enable_colors: bool = True,
    seed: int | None = None,
    console_level: str | None = None,
) -> str:
    """
    Replace loguru's sinks with a console sink and a per-run file sink.

    Args:
        log_dir: Directory for log files
        level: Level of the file sink (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        rotation: Log rotation policy (e.g., "50 MB", "1 day")
        retention: Log retention policy (e.g., "30 days", "1 month")
        enable_colors: Whether to enable colored console output
        seed: Evolution seed; names the log file and tags every file record
        console_level: Level of the console sink, defaults to ``level``

    Returns:
        Path to the log file
    """
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, run_log_name(seed))

    logger.remove()
    logger.configure(extra={"seed": seed if seed is not None else "-"})

    colorize = enable_colors and sys.stdout.isatty()
    logger.add(
        sys.stdout,
        level=console_level or level,
        format=COLOR_CONSOLE_FORMAT if colorize else PLAIN_CONSOLE_FORMAT,
        colorize=colorize,
    )
    logger.add(
        log_file,
        level=level,
        format=FILE_FORMAT,
        rotation=rotation,
        retention=retention,
        compression="zip",
        encoding="utf-8",
        backtrace=True,
        diagnose=True,
    )

    logger.debug("[Logger] file={}, level={}, console_level={}", log_file, level, console_level or level)
    return log_file
