"""Immutable plate grids and the sources they are read from."""

import logging
from dataclasses import dataclass
from typing import Iterator, Protocol

import numpy as np
import pandas as pd

from .config import (
    CTG_HALF_ROWS,
    CTG_HALVES,
    PLATE_COLS,
    PLATE_ROWS,
    PLATE_SEPARATOR_ROWS,
)
from .errors import DataFormatError
from .plate_utils import COLS, ROWS, well_to_str

logger = logging.getLogger(__name__)


def _frozen_array(values, shape: tuple[int, int], what: str) -> np.ndarray:
    """Copy *values* into a read-only float array of exactly *shape*."""
    try:
        arr = np.array(values, dtype=float)
    except (TypeError, ValueError) as err:
        raise DataFormatError(f"{what} must contain only numeric values: {err}") from err
    if arr.shape != shape:
        raise DataFormatError(
            f"{what} must be {shape[0]}x{shape[1]}, got "
            f"{'x'.join(str(n) for n in arr.shape) or 'a scalar'}"
        )
    missing = np.argwhere(~np.isfinite(arr))
    if len(missing):
        # Halves are indexed within the half, so only name wells on full plates.
        if shape == (PLATE_ROWS, PLATE_COLS):
            where = ", ".join(well_to_str(int(r), int(c)) for r, c in missing[:5])
        else:
            where = ", ".join(f"({int(r)}, {int(c)})" for r, c in missing[:5])
        raise DataFormatError(f"{what} has {len(missing)} missing or non-finite value(s): {where}")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class PlateHalf:
    """The top or bottom 4 rows of one physical plate."""

    plate_index: int
    position: str
    values: np.ndarray

    def __post_init__(self):
        if self.position not in CTG_HALVES:
            raise ValueError(f"Unknown plate half: '{self.position}'. Use 'top' or 'bottom'.")
        object.__setattr__(
            self, "values",
            _frozen_array(self.values, (CTG_HALF_ROWS, PLATE_COLS), "Plate half"),
        )


@dataclass(frozen=True, eq=False)
class PlateGrid:
    """An 8x12 matrix of plate reader measurements.

    The dimensions are exact: a short or ragged grid, a missing well or a
    non-numeric value raises DataFormatError instead of being defaulted.
    """

    values: np.ndarray

    def __post_init__(self):
        object.__setattr__(
            self, "values",
            _frozen_array(self.values, (PLATE_ROWS, PLATE_COLS), "Plate grid"),
        )

    @classmethod
    def from_rows(cls, rows) -> "PlateGrid":
        return cls(rows)

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "PlateGrid":
        """Build a grid from an 8x12 DataFrame, ignoring its labels."""
        return cls(frame.to_numpy())

    def cell(self, row: int, col: int) -> float:
        return float(self.values[row, col])

    def halves(self, plate_index: int = 0) -> tuple[PlateHalf, PlateHalf]:
        """Split into (top, bottom) halves of CTG_HALF_ROWS rows each."""
        return (
            PlateHalf(plate_index, "top", self.values[:CTG_HALF_ROWS]),
            PlateHalf(plate_index, "bottom", self.values[CTG_HALF_ROWS:]),
        )

    def to_frame(self) -> pd.DataFrame:
        """Return the grid as a DataFrame with row index A-H and columns 1-12."""
        df = pd.DataFrame(self.values.copy(), index=list(ROWS), columns=list(COLS))
        df.index.name = "Row"
        return df


class GridSource(Protocol):
    """Anything that can hand over plate measurements one plate at a time."""

    def dimensions(self) -> tuple[int, int]: ...

    def cell(self, row: int, col: int) -> float: ...

    def has_next_plate(self) -> bool: ...

    def advance_to_next_plate(self) -> None: ...


class FrameGridSource:
    """GridSource over a DataFrame holding one or more stacked plates.

    Values are read by position, so any row/column labels are ignored.
    Consecutive plates are separated by ``separator_rows`` blank rows; the
    next plate exists when the first cell of its block holds a value.
    """

    def __init__(
        self,
        frame: pd.DataFrame,
        plate_rows: int = PLATE_ROWS,
        plate_cols: int = PLATE_COLS,
        separator_rows: int = PLATE_SEPARATOR_ROWS,
    ):
        self._frame = frame
        self._plate_rows = plate_rows
        self._plate_cols = plate_cols
        self._stride = plate_rows + separator_rows
        self._start = 0
        self.plate_index = 0

    def dimensions(self) -> tuple[int, int]:
        n_rows, n_cols = self._frame.shape
        return (
            max(0, min(self._plate_rows, n_rows - self._start)),
            n_cols,
        )

    def cell(self, row: int, col: int) -> float:
        return float(self._frame.iat[self._start + row, col])

    def has_next_plate(self) -> bool:
        next_start = self._start + self._stride
        if next_start >= len(self._frame) or self._frame.shape[1] == 0:
            return False
        return bool(pd.notna(self._frame.iat[next_start, 0]))

    def advance_to_next_plate(self) -> None:
        if not self.has_next_plate():
            raise DataFormatError(f"No plate follows plate {self.plate_index + 1}")
        self._start += self._stride
        self.plate_index += 1


def read_plate(source: GridSource) -> PlateGrid:
    """Read the current plate from *source* into a PlateGrid.

    Raises:
        DataFormatError: If the source isn't 8x12 or a cell isn't numeric.
    """
    n_rows, n_cols = source.dimensions()
    if (n_rows, n_cols) != (PLATE_ROWS, PLATE_COLS):
        raise DataFormatError(
            f"Expected a {PLATE_ROWS}x{PLATE_COLS} plate, got {n_rows}x{n_cols}"
        )
    rows = []
    for r in range(n_rows):
        row = []
        for c in range(n_cols):
            try:
                row.append(source.cell(r, c))
            except (TypeError, ValueError) as err:
                raise DataFormatError(
                    f"Well {well_to_str(r, c)} is not numeric: {err}"
                ) from err
        rows.append(row)
    return PlateGrid(rows)


def iter_plate_halves(source: GridSource) -> Iterator[PlateHalf]:
    """Yield top and bottom halves of every plate until the source runs out."""
    plate_index = 0
    while True:
        grid = read_plate(source)
        logger.debug("Read plate %d", plate_index + 1)
        yield from grid.halves(plate_index)
        if not source.has_next_plate():
            break
        source.advance_to_next_plate()
        plate_index += 1
