"""Loading and validating simulation configs.

Configs come either as plain mappings, as OmegaConf/Hydra nodes or as YAML
files. Whatever the source, validation goes through the pydantic models and
any failure is surfaced as a single :class:`ConfigurationError` listing every
offending field.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from loguru import logger
from omegaconf import DictConfig, OmegaConf
from pydantic import ValidationError

from walkerevo.config.models import SimulationConfig
from walkerevo.config.resolvers import register_resolvers
from walkerevo.exceptions import ConfigurationError


def _format_errors(exc: ValidationError) -> str:
    lines = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"]) or "<root>"
        lines.append(f"  - {location}: {err['msg']}")
    return "\n".join(lines)


def config_from_mapping(data: Mapping[str, Any] | DictConfig | None) -> SimulationConfig:
    if data is None:
        data = {}
    if isinstance(data, DictConfig):
        register_resolvers()
        data = OmegaConf.to_container(data, resolve=True)
    try:
        return SimulationConfig.model_validate(dict(data))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid simulation configuration:\n{_format_errors(exc)}") from exc


def load_config(source: str | Path | Mapping[str, Any] | DictConfig | None = None) -> SimulationConfig:
    """Build a validated :class:`SimulationConfig` from a YAML path or mapping."""
    if source is None or isinstance(source, (Mapping, DictConfig)):
        return config_from_mapping(source)

    path = Path(source)
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}")

    register_resolvers()
    node = OmegaConf.load(path)
    if not isinstance(node, DictConfig):
        raise ConfigurationError(f"Config file {path} must contain a mapping at the top level")
    config = config_from_mapping(node)
    logger.debug("[Config] Loaded {}", path)
    return config
