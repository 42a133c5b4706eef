"""BCA protein assay: from a plate grid to per-sample load volumes."""

import logging
from dataclasses import dataclass
from datetime import datetime

import pandas as pd

from .concentration import calculate_concentrations
from .config import (
    ASSAY_SAMPLE_VOLUME_UL,
    DEFAULT_TARGET_MASS_UG,
    ReplicateMode,
    SampleGating,
    parse_replicate_mode,
)
from .errors import ConfigurationError
from .grid import PlateGrid
from .load_volume import calculate_load_volumes
from .replicates import average_replicates
from .standard_curve import StandardCurve, fit_standard_curve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampleRecord:
    """One sample's averaged signal and derived quantities.

    ``signal``, ``concentration`` and ``load_volume`` are ``None`` for a well
    with no detectable sample (only reported with SampleGating.MARK).
    """

    name: str
    wells: tuple[str, ...]
    signal: float | None
    concentration: float | None
    load_volume: float | None


@dataclass(frozen=True)
class AssayRun:
    """Everything computed for one BCA plate."""

    curve: StandardCurve
    background: float
    std_avgs: tuple[float, ...]
    samples: tuple[SampleRecord, ...]
    target_mass_ug: float
    replicate_mode: ReplicateMode
    gating: SampleGating
    sample_volume_ul: float = ASSAY_SAMPLE_VOLUME_UL
    created_at: datetime | None = None

    @property
    def slope(self) -> float:
        return self.curve.slope

    @property
    def intercept(self) -> float:
        return self.curve.intercept

    @property
    def sample_avgs(self) -> tuple[float | None, ...]:
        return tuple(s.signal for s in self.samples)

    @property
    def sample_concentrations(self) -> tuple[float | None, ...]:
        return tuple(s.concentration for s in self.samples)

    @property
    def load_volumes(self) -> tuple[float | None, ...]:
        return tuple(s.load_volume for s in self.samples)

    @property
    def sample_names(self) -> tuple[str, ...]:
        return tuple(s.name for s in self.samples)

    def to_frame(self) -> pd.DataFrame:
        """Results table, one row per reported sample."""
        rows = [
            {
                "Sample Name": s.name,
                "Wells": ", ".join(s.wells),
                "Signal": s.signal,
                "Concentration_ug_per_uL": s.concentration,
                "Load_Volume_uL": s.load_volume,
            }
            for s in self.samples
        ]
        columns = [
            "Sample Name", "Wells", "Signal", "Concentration_ug_per_uL", "Load_Volume_uL",
        ]
        return pd.DataFrame(rows, columns=columns)


def resolve_sample_names(names, n_samples: int) -> list[str]:
    """Pair caller-supplied names with the computed samples.

    Falls back to 'Sample 1' .. 'Sample n' when no names are given or the
    list is too short; extra names are ignored.
    """
    defaults = [f"Sample {i + 1}" for i in range(n_samples)]
    if not names:
        return defaults
    names = [names] if isinstance(names, str) else list(names)
    if len(names) < n_samples:
        logger.warning(
            "Got %d sample names for %d samples; using default names",
            len(names), n_samples,
        )
        return defaults
    if len(names) > n_samples:
        logger.debug("Ignoring %d extra sample name(s)", len(names) - n_samples)
    return names[:n_samples]


def run_bca_assay(
    grid: PlateGrid,
    target_mass_ug: float = DEFAULT_TARGET_MASS_UG,
    replicate_mode: ReplicateMode | int | str = ReplicateMode.DUPLICATE,
    sample_names=None,
    *,
    gating: SampleGating | str = SampleGating.DROP,
    sample_volume_ul: float = ASSAY_SAMPLE_VOLUME_UL,
    created_at: datetime | None = None,
) -> AssayRun:
    """Run the BCA pipeline on one plate.

    Stages: replicate averaging -> standard curve -> concentrations ->
    load volumes -> sample names.

    Args:
        grid: 8x12 plate with standards in the first replicate block.
        target_mass_ug: Protein mass each load volume should deliver.
        replicate_mode: Duplicate or triplicate wells per standard/sample.
        sample_names: Optional names, in sample scan order.
        gating: How wells without sample are reported (see SampleGating).
        sample_volume_ul: Volume of sample in each assay well.
        created_at: Timestamp recorded on the run, if the caller wants one.

    Raises:
        DataFormatError: The grid doesn't fit the replicate layout.
        ConfigurationError: The standard curve can't be fit, or a volume or
            mass parameter isn't positive.
        ComputationError: A reported sample has a non-positive concentration.
    """
    mode = parse_replicate_mode(replicate_mode)
    gating = SampleGating(gating)
    if target_mass_ug <= 0:
        raise ConfigurationError(f"Target mass must be positive, got {target_mass_ug} ug")
    if sample_volume_ul <= 0:
        raise ConfigurationError(
            f"Assay sample volume must be positive, got {sample_volume_ul}"
        )

    averages = average_replicates(grid, mode, gating=gating)
    curve = fit_standard_curve(averages.std_avgs)

    sample_avgs = averages.sample_avgs
    concentrations = calculate_concentrations(sample_avgs, curve, sample_volume_ul)
    volumes = calculate_load_volumes(concentrations, target_mass_ug)
    names = resolve_sample_names(sample_names, len(sample_avgs))

    samples = tuple(
        SampleRecord(name, well.wells, signal, conc, vol)
        for name, well, signal, conc, vol in zip(
            names, averages.reported_wells, sample_avgs, concentrations, volumes
        )
    )
    logger.info(
        "BCA run: %d samples, %s, target %.1f ug",
        len(samples), curve.equation, target_mass_ug,
    )
    return AssayRun(
        curve=curve,
        background=averages.background,
        std_avgs=averages.std_avgs,
        samples=samples,
        target_mass_ug=target_mass_ug,
        replicate_mode=mode,
        gating=gating,
        sample_volume_ul=sample_volume_ul,
        created_at=created_at,
    )
