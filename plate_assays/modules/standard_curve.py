"""Standard curve regression fitting for BCA assays."""

import logging
from dataclasses import dataclass

import numpy as np
from scipy import stats

from .config import STANDARD_MASSES_UG
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StandardCurve:
    """Least-squares line relating averaged signal to protein mass (µg)."""

    slope: float
    intercept: float
    r_squared: float
    n_points: int

    @property
    def equation(self) -> str:
        return f"ug = {self.slope:.6f}x + {self.intercept:.6f}"

    def predict(self, signal):
        """Protein mass for an averaged signal. Accepts scalars or arrays."""
        return self.slope * np.asarray(signal, dtype=float) + self.intercept


def fit_standard_curve(
    std_avgs,
    masses=STANDARD_MASSES_UG,
) -> StandardCurve:
    """Fit mass = slope * signal + intercept by ordinary least squares.

    Args:
        std_avgs: Background-subtracted standard averages, in ladder order.
        masses: Known protein mass of each standard (µg).

    Raises:
        ConfigurationError: If the points can't define a line (mismatched
            lengths, fewer than two points, or fewer than two distinct signals).
    """
    x = np.asarray(std_avgs, dtype=float)
    y = np.asarray(masses, dtype=float)

    if x.shape != y.shape:
        raise ConfigurationError(
            f"Got {x.size} standard averages for {y.size} standard masses"
        )
    if x.size < 2:
        raise ConfigurationError("At least two standards are needed to fit a curve")
    if np.unique(x).size < 2:
        raise ConfigurationError(
            "Standard curve is degenerate: all standards have the same signal"
        )

    result = stats.linregress(x, y)
    curve = StandardCurve(
        slope=float(result.slope),
        intercept=float(result.intercept),
        r_squared=float(result.rvalue ** 2),
        n_points=int(x.size),
    )
    logger.debug("Standard curve: %s (R² = %.4f)", curve.equation, curve.r_squared)
    return curve
