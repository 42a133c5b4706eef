"""Exceptions raised by the plate assay calculations."""


class PlateAssayError(ValueError):
    """Base class for all plate assay errors."""


class DataFormatError(PlateAssayError):
    """Grid dimensions or replicate grouping don't match the assay layout."""


class ConfigurationError(PlateAssayError):
    """Assay parameters can't produce a result (e.g. a degenerate standard curve)."""


class ComputationError(PlateAssayError):
    """A derived quantity would be undefined or physically meaningless."""
