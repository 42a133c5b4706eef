"""Well IDs and replicate-block layout helpers."""

from .config import PLATE_COLS, PLATE_ROWS
from .errors import DataFormatError


ROWS = list("ABCDEFGH")
COLS = list(range(1, PLATE_COLS + 1))


def well_to_str(row: int, col: int) -> str:
    """Convert zero-indexed (row, col) to a well string like 'A1'."""
    if not (0 <= row < PLATE_ROWS and 0 <= col < PLATE_COLS):
        raise ValueError(f"Row/col out of range: ({row}, {col})")
    return f"{ROWS[row]}{COLS[col]}"


def replicate_blocks(mode: int, n_cols: int = PLATE_COLS) -> list[tuple[int, ...]]:
    """Split the columns after the standard block into replicate groups.

    The first ``mode`` columns hold the standards. Every following run of
    ``mode`` columns is one sample replicate group, e.g. duplicates give
    (2, 3), (4, 5), ... (10, 11).

    Raises:
        DataFormatError: If the sample columns don't divide into whole groups.
    """
    remaining = n_cols - mode
    if remaining < 0 or remaining % mode:
        raise DataFormatError(
            f"{n_cols} columns can't be split into replicate groups of {mode}"
        )
    return [tuple(range(start, start + mode)) for start in range(mode, n_cols, mode)]


def group_wells(row: int, cols: tuple[int, ...]) -> tuple[str, ...]:
    """Well IDs for one row of a replicate group, e.g. (0, (2, 3)) -> ('A3', 'A4')."""
    return tuple(well_to_str(row, c) for c in cols)
