class WalkerEvoError(Exception):
    """Base for all walkerevo exceptions."""

    pass


class ConfigurationError(WalkerEvoError, ValueError):
    """Malformed or inconsistent configuration."""

    pass


class EvolutionError(WalkerEvoError):
    """Generation (rank/reap/sow) failures."""

    pass


class PhysicsError(WalkerEvoError):
    """Invalid use of the physics world collaborator."""

    pass


class WalkerStateError(WalkerEvoError):
    """Invalid walker state transition."""

    pass
