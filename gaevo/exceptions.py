class GaEvoError(Exception):
    """Base for all GaEvo exceptions."""

    pass


# High-level families
class ConfigurationError(GaEvoError, ValueError):
    """Invalid operator or engine parameters."""

    pass


class EncodingError(GaEvoError, ValueError):
    """Malformed genes, chromosomes or genotypes."""

    pass


class EvolutionError(GaEvoError):
    """Evolution process failures."""

    pass


# Evolution subtypes
class EngineStateError(EvolutionError):
    """Engine methods called out of order."""

    pass
