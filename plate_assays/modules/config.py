"""Fixed plate layouts and assay constants."""

from enum import Enum, IntEnum

from .errors import DataFormatError


# Physical 96-well plate
PLATE_ROWS = 8
PLATE_COLS = 12

# BCA: seven-point BSA ladder read down the first replicate block, in µg.
STANDARD_ROWS = 7
STANDARD_MASSES_UG = (0.0, 1.0, 2.0, 5.0, 10.0, 20.0, 40.0)

# Microliters of sample loaded into each assay well.
ASSAY_SAMPLE_VOLUME_UL = 2.5

# Protein mass to load per lane unless the caller asks otherwise.
DEFAULT_TARGET_MASS_UG = 20.0

# CTG: each plate is analysed as a top and bottom half of 4 rows.
CTG_HALF_ROWS = 4
CTG_HALVES = ("top", "bottom")
CTG_CONTROL_COLUMNS = (0, 1, 10, 11)
CTG_COLUMN_LABELS = (
    "control", "control",
    "0.003uM", "0.01uM", "0.03uM", "0.1uM", "0.3uM", "1uM", "3uM", "10uM",
    "control", "control",
)

# Blank rows between consecutive plates in a multi-plate export.
PLATE_SEPARATOR_ROWS = 1


class ReplicateMode(IntEnum):
    """Number of wells per replicate group."""

    DUPLICATE = 2
    TRIPLICATE = 3


class SampleGating(str, Enum):
    """How sample wells with a non-positive average are reported.

    DROP removes them from the sample sequence. MARK keeps one entry per
    sample well and reports ``None`` where no sample was detected.
    """

    DROP = "drop"
    MARK = "mark"


def parse_replicate_mode(mode) -> ReplicateMode:
    """Accept a ReplicateMode, 2/3, or 'duplicate'/'triplicate'.

    Raises:
        DataFormatError: If the value doesn't name a supported replicate mode.
    """
    if isinstance(mode, ReplicateMode):
        return mode
    if isinstance(mode, str):
        key = mode.strip().upper()
        if key in ReplicateMode.__members__:
            return ReplicateMode[key]
    elif isinstance(mode, int) and not isinstance(mode, bool):
        if mode in (m.value for m in ReplicateMode):
            return ReplicateMode(mode)
    raise DataFormatError(
        f"Unknown replicate mode: '{mode}'. Use 'duplicate' or 'triplicate'."
    )
