from __future__ import annotations

from pathlib import Path
import time
from typing import Any

from loguru import logger
from tensorboardX import SummaryWriter

from walkerevo.utils.trackers.base import LogWriter, render_tag


class TBWriter(LogWriter):
    """Writes generation statistics to a TensorBoard event file.

    Bound writers share the parent's ``SummaryWriter`` and only prepend
    their path to every tag; closing any of them closes the file.
    """

    def __init__(
        self,
        logdir: str | Path,
        *,
        path: list[str] | None = None,
        summary_writer_kwargs: dict[str, Any] | None = None,
        _writer: SummaryWriter | None = None,
    ):
        self.logdir = Path(logdir).resolve()
        self.path = list(path or [])
        if _writer is None:
            self.logdir.mkdir(parents=True, exist_ok=True)
            _writer = SummaryWriter(str(self.logdir), **(summary_writer_kwargs or {}))
            logger.info("[TBWriter] Writing events to {}", self.logdir)
        self._writer: SummaryWriter | None = _writer

    def bind(self, path: list[str]) -> "TBWriter":
        return TBWriter(self.logdir, path=[*self.path, *path], _writer=self._writer)

    def scalar(self, metric: str, value: float, *, step: int) -> None:
        if self._writer is None:
            return
        self._writer.add_scalar(
            render_tag(self.path, metric), float(value), global_step=step, walltime=time.time()
        )

    def hist(self, metric: str, values: list[float], *, step: int) -> None:
        if self._writer is None or len(values) == 0:
            return
        self._writer.add_histogram(
            render_tag(self.path, metric), list(values), global_step=step, walltime=time.time()
        )

    def text(self, tag: str, text: str, *, step: int) -> None:
        if self._writer is None:
            return
        self._writer.add_text(render_tag(self.path, tag), text, global_step=step, walltime=time.time())

    def close(self) -> None:
        if self._writer is None:
            return
        writer, self._writer = self._writer, None
        try:
            writer.flush()
        finally:
            writer.close()
