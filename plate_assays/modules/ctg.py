"""CellTiter-Glo viability: normalize plate halves to their control wells."""

import logging
from dataclasses import dataclass
from datetime import datetime

import numpy as np
import pandas as pd

from .config import CTG_COLUMN_LABELS, CTG_CONTROL_COLUMNS, CTG_HALF_ROWS, PLATE_COLS
from .errors import ComputationError, DataFormatError
from .grid import GridSource, PlateHalf, iter_plate_halves

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class NormalizedDataset:
    """One plate half as raw reads and as percent of control."""

    plate_index: int
    position: str
    name: str
    raw: np.ndarray
    control_average: float
    normalized: np.ndarray

    def to_frame(self) -> pd.DataFrame:
        """Normalized grid with drug-concentration column labels."""
        return pd.DataFrame(self.normalized.copy(), columns=list(CTG_COLUMN_LABELS))


@dataclass(frozen=True)
class CTGRun:
    """Normalized halves for every plate, ordered plate 1 top, plate 1 bottom, ..."""

    datasets: tuple[NormalizedDataset, ...]
    created_at: datetime | None = None
    column_labels: tuple[str, ...] = CTG_COLUMN_LABELS

    @property
    def normalized_datasets(self) -> tuple[np.ndarray, ...]:
        return tuple(d.normalized for d in self.datasets)

    @property
    def control_averages(self) -> tuple[float, ...]:
        return tuple(d.control_average for d in self.datasets)

    def to_frame(self) -> pd.DataFrame:
        """Long table: one row per well of every plate half."""
        rows = []
        for d in self.datasets:
            for r in range(d.normalized.shape[0]):
                for c, label in enumerate(self.column_labels):
                    rows.append({
                        "Dataset": d.name,
                        "Plate": d.plate_index + 1,
                        "Half": d.position,
                        "Row": r + 1,
                        "Column": c + 1,
                        "Treatment": label,
                        "Raw": float(d.raw[r, c]),
                        "Percent_Viability": float(d.normalized[r, c]),
                    })
        columns = [
            "Dataset", "Plate", "Half", "Row", "Column", "Treatment", "Raw",
            "Percent_Viability",
        ]
        return pd.DataFrame(rows, columns=columns)


def control_average(values) -> float:
    """Mean of the 16 untreated wells: columns 1, 2, 11 and 12 of all four rows."""
    values = np.asarray(values, dtype=float)
    if values.shape != (CTG_HALF_ROWS, PLATE_COLS):
        raise DataFormatError(
            f"Plate half must be {CTG_HALF_ROWS}x{PLATE_COLS}, got shape {values.shape}"
        )
    return float(np.mean(values[:, list(CTG_CONTROL_COLUMNS)]))


def default_dataset_name(plate_index: int, position: str) -> str:
    return f"Plate {plate_index + 1} {position}"


def normalize_half(half: PlateHalf, name: str | None = None) -> NormalizedDataset:
    """Express every well of *half* as a percentage of its control average.

    Raises:
        ComputationError: If the control wells average to zero.
    """
    avg = control_average(half.values)
    if avg == 0:
        raise ComputationError(
            f"Control wells of {default_dataset_name(half.plate_index, half.position)} "
            "average to zero; percent of control is undefined"
        )
    normalized = half.values / avg * 100
    normalized.setflags(write=False)
    return NormalizedDataset(
        plate_index=half.plate_index,
        position=half.position,
        name=name or default_dataset_name(half.plate_index, half.position),
        raw=half.values,
        control_average=avg,
        normalized=normalized,
    )


def normalize_halves(
    halves,
    dataset_names=None,
    *,
    created_at: datetime | None = None,
) -> CTGRun:
    """Normalize a sequence of plate halves, keeping their order and identity."""
    halves = list(halves)
    names = [default_dataset_name(h.plate_index, h.position) for h in halves]
    if dataset_names:
        dataset_names = list(dataset_names)
        if len(dataset_names) < len(halves):
            logger.warning(
                "Got %d dataset names for %d plate halves; using default names",
                len(dataset_names), len(halves),
            )
        else:
            names = dataset_names[:len(halves)]

    datasets = tuple(normalize_half(h, n) for h, n in zip(halves, names))
    for d in datasets:
        logger.debug("%s: control average %.2f", d.name, d.control_average)
    logger.info(
        "Normalized %d plate halves from %d plate(s)",
        len(datasets), len({d.plate_index for d in datasets}),
    )
    return CTGRun(datasets=datasets, created_at=created_at)


def normalize_plates(
    source: GridSource,
    dataset_names=None,
    *,
    created_at: datetime | None = None,
) -> CTGRun:
    """Read every plate from *source* and normalize its top and bottom halves.

    Raises:
        DataFormatError: If a plate isn't a complete 8x12 grid.
        ComputationError: If a half's control wells average to zero.
    """
    return normalize_halves(
        iter_plate_halves(source), dataset_names, created_at=created_at
    )
