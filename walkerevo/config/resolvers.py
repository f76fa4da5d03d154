import math

from omegaconf import OmegaConf


def register_resolvers() -> None:
    """Register OmegaConf resolvers used by the YAML configs (idempotent)."""
    resolvers = {
        "eval": eval,
        "pi": lambda scale=1.0: math.pi * float(scale),
        "inv": lambda value: 1.0 / float(value),
    }
    for name, fn in resolvers.items():
        if not OmegaConf.has_resolver(name):
            OmegaConf.register_new_resolver(name, fn)
