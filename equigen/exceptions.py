"""Custom exceptions for the equigen package."""


class EquigenError(Exception):
    """Base exception for equigen package."""
    pass


class ConfigurationError(EquigenError):
    """Breed profile or catalog is incomplete, malformed, or unusable."""
    pass


class ValidationError(EquigenError, ValueError):
    """Caller-supplied parameters are missing, wrong-typed, or out of range."""
    pass


class GenotypeError(EquigenError, ValueError):
    """Genotype references an unknown locus or allele, or a malformed pair."""
    pass
