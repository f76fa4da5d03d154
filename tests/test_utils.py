from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import os
from pathlib import Path
import signal

from loguru import logger

from walkerevo.utils.logger_setup import run_log_name, setup_logger
from walkerevo.utils.serve import serve_until_signal
from walkerevo.utils.trackers import NullWriter, TBWriter
from walkerevo.utils.trackers.base import render_tag


def test_setup_logger_writes_seeded_run_file(tmp_path):
    log_file = setup_logger(log_dir=str(tmp_path), level="DEBUG", enable_colors=False, seed=7)
    logger.info("[Test] hello {}", "walkers")
    logger.complete()

    assert Path(log_file).parent == tmp_path
    assert Path(log_file).name.startswith("walkers_seed7_")
    contents = Path(log_file).read_text()
    assert "[Test] hello walkers" in contents
    assert "seed=7" in contents


def test_console_level_filters_only_console(tmp_path, capsys):
    log_file = setup_logger(
        log_dir=str(tmp_path), level="DEBUG", enable_colors=False, console_level="WARNING"
    )
    logger.debug("[Test] walker finished")
    logger.complete()

    assert "walker finished" not in capsys.readouterr().out
    assert "walker finished" in Path(log_file).read_text()


def test_run_log_name():
    now = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)
    assert run_log_name(3, now) == "walkers_seed3_20240501_123000.log"
    assert run_log_name(None, now) == "walkers_unseeded_20240501_123000.log"


def test_render_tag_sanitizes_segments():
    assert render_tag(["evolution", "island 1"], "best/distance") == "evolution/island_1/best_distance"
    assert render_tag([], "speedup") == "speedup"


def test_null_writer_accepts_everything():
    writer = NullWriter()
    assert writer.bind(["x"]) is writer
    writer.scalar("a", 1.0, step=0)
    writer.hist("b", [1.0, 2.0], step=0)
    writer.text("c", "d", step=0)
    writer.close()


def test_tb_writer_shares_file_between_bound_writers(tmp_path):
    writer = TBWriter(tmp_path)
    child = writer.bind(["evolution"])
    child.scalar("best_distance", 1.5, step=0)
    child.hist("distances", [1.0, 2.0], step=0)
    child.hist("empty", [], step=0)
    writer.text("note", "hello", step=0)
    writer.close()
    writer.close()

    assert child.path == ["evolution"]
    assert len(list(tmp_path.glob("events.out.tfevents.*"))) == 1


async def test_serve_returns_when_task_finishes():
    stopped = []

    async def work():
        await asyncio.sleep(0.01)

    async def on_stop():
        stopped.append(True)

    task = asyncio.create_task(work())
    await asyncio.wait_for(serve_until_signal(stop_coros=(on_stop(),), on_stop=(task,)), timeout=5)
    assert stopped == [True]


async def test_serve_returns_on_sigterm():
    forever = asyncio.create_task(asyncio.sleep(3600))
    loop = asyncio.get_running_loop()
    loop.call_later(0.01, os.kill, os.getpid(), signal.SIGTERM)

    await asyncio.wait_for(serve_until_signal(on_stop=(forever,)), timeout=5)
    assert forever.cancelled()
