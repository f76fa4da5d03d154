from __future__ import annotations

from abc import ABC, abstractmethod


def _sanitize(s: str) -> str:
    return "".join(ch if ch.isalnum() or ch in "-_.=," else "_" for ch in str(s))


def render_tag(path: list[str], metric: str) -> str:
    return "/".join(_sanitize(x) for x in [*path, metric] if x)


class LogWriter(ABC):
    @abstractmethod
    def bind(self, path: list[str]) -> "LogWriter":
        pass

    @abstractmethod
    def scalar(self, metric: str, value: float, *, step: int) -> None:
        pass

    @abstractmethod
    def hist(self, metric: str, values: list[float], *, step: int) -> None:
        pass

    @abstractmethod
    def text(self, tag: str, text: str, *, step: int) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass


class NullWriter(LogWriter):
    """Discards everything; used when tracking is disabled."""

    def bind(self, path: list[str]) -> "NullWriter":
        return self

    def scalar(self, metric: str, value: float, *, step: int) -> None:
        pass

    def hist(self, metric: str, values: list[float], *, step: int) -> None:
        pass

    def text(self, tag: str, text: str, *, step: int) -> None:
        pass

    def close(self) -> None:
        pass
