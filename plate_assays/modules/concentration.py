"""Protein concentration from averaged signal via the standard curve."""

from .config import ASSAY_SAMPLE_VOLUME_UL
from .errors import ConfigurationError
from .standard_curve import StandardCurve


def calculate_concentration(
    signal: float,
    curve: StandardCurve,
    sample_volume_ul: float = ASSAY_SAMPLE_VOLUME_UL,
) -> float:
    """Concentration in µg/µL: protein mass from the curve over the volume assayed."""
    if sample_volume_ul <= 0:
        raise ConfigurationError(
            f"Assay sample volume must be positive, got {sample_volume_ul}"
        )
    return (signal * curve.slope + curve.intercept) / sample_volume_ul


def calculate_concentrations(
    signals,
    curve: StandardCurve,
    sample_volume_ul: float = ASSAY_SAMPLE_VOLUME_UL,
) -> tuple[float | None, ...]:
    """Concentrations for a sequence of signals; ``None`` entries pass through."""
    return tuple(
        None if s is None else calculate_concentration(s, curve, sample_volume_ul)
        for s in signals
    )
