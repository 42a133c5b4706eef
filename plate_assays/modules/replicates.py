"""Replicate averaging with background subtraction for BCA plates."""

import logging
from dataclasses import dataclass

import numpy as np

from .config import STANDARD_ROWS, ReplicateMode, SampleGating, parse_replicate_mode
from .errors import DataFormatError
from .grid import PlateGrid
from .plate_utils import group_wells, replicate_blocks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampleWell:
    """One sample replicate group and its background-subtracted average."""

    wells: tuple[str, ...]
    signal: float

    @property
    def present(self) -> bool:
        """True if the averaged signal is above background."""
        return self.signal > 0


@dataclass(frozen=True)
class ReplicateAverages:
    """Averaged standards and samples for one plate.

    ``wells`` holds every sample group in scan order, ungated.
    ``sample_avgs`` is the gated view handed to the curve calculators.
    """

    background: float
    std_avgs: tuple[float, ...]
    wells: tuple[SampleWell, ...]
    gating: SampleGating = SampleGating.DROP

    @property
    def reported_wells(self) -> tuple[SampleWell, ...]:
        """Sample groups that appear in ``sample_avgs``."""
        if self.gating is SampleGating.DROP:
            return tuple(w for w in self.wells if w.present)
        return self.wells

    @property
    def sample_avgs(self) -> tuple[float | None, ...]:
        if self.gating is SampleGating.DROP:
            return tuple(w.signal for w in self.wells if w.present)
        return tuple(w.signal if w.present else None for w in self.wells)


def average_replicates(
    grid: PlateGrid,
    replicate_mode: ReplicateMode | int | str = ReplicateMode.DUPLICATE,
    standard_rows: int = STANDARD_ROWS,
    gating: SampleGating | str = SampleGating.DROP,
) -> ReplicateAverages:
    """Average standard and sample replicate groups and subtract background.

    Standards occupy the first ``replicate_mode`` columns, one standard per
    row. The background is the average of the first (zero) standard. Sample
    groups are the following blocks of ``replicate_mode`` columns, scanned
    block by block and top to bottom within a block.

    Args:
        grid: The 8x12 plate.
        replicate_mode: Wells per replicate group (duplicate or triplicate).
        standard_rows: Number of standards read down the standard block.
        gating: DROP removes sample groups whose average is <= 0,
            MARK keeps them as ``None`` in ``sample_avgs``.

    Raises:
        DataFormatError: If the layout doesn't fit the grid.
    """
    mode = parse_replicate_mode(replicate_mode)
    gating = SampleGating(gating)
    values = grid.values
    n_rows, n_cols = values.shape

    if not 1 <= standard_rows <= n_rows:
        raise DataFormatError(
            f"{standard_rows} standard rows don't fit a plate of {n_rows} rows"
        )
    sample_blocks = replicate_blocks(mode.value, n_cols)
    std_cols = list(range(mode.value))

    background = float(np.mean(values[0, std_cols]))
    logger.debug("Background (zero standard, %s): %.4f", mode.name.lower(), background)

    std_avgs = tuple(
        float(np.mean(values[row, std_cols])) - background
        for row in range(standard_rows)
    )

    wells = []
    for cols in sample_blocks:
        for row in range(n_rows):
            avg = float(np.mean(values[row, list(cols)])) - background
            wells.append(SampleWell(group_wells(row, cols), avg))

    result = ReplicateAverages(background, std_avgs, tuple(wells), gating)
    absent = sum(1 for w in wells if not w.present)
    logger.info(
        "Averaged %d standards and %d sample groups (%d at or below background)",
        len(std_avgs), len(wells), absent,
    )
    return result
