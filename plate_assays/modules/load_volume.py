"""Volume of sample to load to deliver a target protein mass."""

from .config import DEFAULT_TARGET_MASS_UG
from .errors import ComputationError, ConfigurationError


def calculate_load_volume(
    concentration: float,
    target_mass_ug: float = DEFAULT_TARGET_MASS_UG,
) -> float:
    """Return the load volume in µL for a concentration in µg/µL.

    Raises:
        ComputationError: If the concentration is zero or negative.
        ConfigurationError: If the target mass isn't positive.
    """
    if target_mass_ug <= 0:
        raise ConfigurationError(f"Target mass must be positive, got {target_mass_ug} ug")
    if concentration <= 0:
        raise ComputationError(
            f"Can't derive a load volume from a concentration of {concentration} ug/uL"
        )
    return target_mass_ug / concentration


def calculate_load_volumes(
    concentrations,
    target_mass_ug: float = DEFAULT_TARGET_MASS_UG,
) -> tuple[float | None, ...]:
    """Load volumes for a sequence of concentrations; ``None`` entries pass through."""
    return tuple(
        None if c is None else calculate_load_volume(c, target_mass_ug)
        for c in concentrations
    )
