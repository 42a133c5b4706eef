"""Tests for the CTG control normalization."""

import logging
from datetime import datetime

import numpy as np
import pandas as pd
import pytest

from plate_assays.modules.config import CTG_COLUMN_LABELS
from plate_assays.modules.ctg import (
    control_average,
    normalize_half,
    normalize_halves,
    normalize_plates,
)
from plate_assays.modules.errors import ComputationError, DataFormatError
from plate_assays.modules.grid import FrameGridSource, PlateHalf

CONTROL_COLS = [0, 1, 10, 11]


def _ctg_plate(seed, control=50000.0):
    """Random luminescence plate with controls near *control*."""
    rng = np.random.default_rng(seed)
    data = rng.uniform(1000, 60000, size=(8, 12))
    data[:, CONTROL_COLS] = control + rng.normal(0, 500, size=(8, 4))
    return data


def _source(*plates):
    blocks = []
    for i, plate in enumerate(plates):
        if i:
            blocks.append(np.full((1, 12), np.nan))
        blocks.append(plate)
    return FrameGridSource(pd.DataFrame(np.vstack(blocks)))


class TestControlAverage:
    def test_uses_sixteen_control_wells(self):
        values = np.zeros((4, 12))
        values[:, 0] = 1.0
        values[:, 1] = 2.0
        values[:, 10] = 3.0
        values[:, 11] = 4.0
        values[:, 2:10] = 1000.0  # treated wells don't count
        assert control_average(values) == pytest.approx(2.5)

    def test_wrong_shape(self):
        with pytest.raises(DataFormatError):
            control_average(np.ones((8, 12)))


class TestNormalizeHalf:
    def test_percent_of_control(self):
        values = np.full((4, 12), 200.0)
        values[0, 5] = 50.0
        result = normalize_half(PlateHalf(0, "top", values))
        assert result.control_average == pytest.approx(200.0)
        assert result.normalized[0, 5] == pytest.approx(25.0)
        assert result.normalized[3, 3] == pytest.approx(100.0)

    def test_keeps_raw_values(self):
        values = np.full((4, 12), 10.0)
        result = normalize_half(PlateHalf(1, "bottom", values))
        assert result.raw[0, 0] == 10.0
        assert (result.plate_index, result.position) == (1, "bottom")
        assert result.name == "Plate 2 bottom"

    def test_zero_controls(self):
        values = np.ones((4, 12))
        values[:, CONTROL_COLS] = 0.0
        with pytest.raises(ComputationError, match="Plate 1 top"):
            normalize_half(PlateHalf(0, "top", values))

    def test_result_read_only(self):
        result = normalize_half(PlateHalf(0, "top", np.ones((4, 12))))
        with pytest.raises(ValueError):
            result.normalized[0, 0] = 1.0

    def test_to_frame_labels(self):
        df = normalize_half(PlateHalf(0, "top", np.ones((4, 12)))).to_frame()
        assert list(df.columns) == list(CTG_COLUMN_LABELS)
        assert df.shape == (4, 12)


class TestNormalizePlates:
    @pytest.mark.parametrize("n_plates", [1, 2, 3])
    def test_two_halves_per_plate(self, n_plates):
        run = normalize_plates(_source(*[_ctg_plate(i) for i in range(n_plates)]))
        assert len(run.datasets) == 2 * n_plates
        assert len(run.normalized_datasets) == 2 * n_plates
        assert len(run.control_averages) == 2 * n_plates

    def test_controls_average_to_100(self):
        run = normalize_plates(_source(_ctg_plate(1), _ctg_plate(2, control=30000.0)))
        for grid in run.normalized_datasets:
            assert grid[:, CONTROL_COLS].mean() == pytest.approx(100.0)

    def test_halves_keep_identity(self):
        first, second = _ctg_plate(3), _ctg_plate(4)
        run = normalize_plates(_source(first, second))
        assert [(d.plate_index, d.position) for d in run.datasets] == [
            (0, "top"), (0, "bottom"), (1, "top"), (1, "bottom"),
        ]
        np.testing.assert_allclose(run.datasets[3].raw, second[4:])
        expected = first[:4] / first[:4, CONTROL_COLS].mean() * 100
        np.testing.assert_allclose(run.normalized_datasets[0], expected)

    def test_control_averages_are_raw(self):
        plate = _ctg_plate(5)
        run = normalize_plates(_source(plate))
        assert run.control_averages[1] == pytest.approx(plate[4:, CONTROL_COLS].mean())

    def test_column_labels(self):
        run = normalize_plates(_source(_ctg_plate(6)))
        assert run.column_labels == CTG_COLUMN_LABELS

    def test_created_at(self):
        stamp = datetime(2019, 9, 22)
        run = normalize_plates(_source(_ctg_plate(7)), created_at=stamp)
        assert run.created_at == stamp

    def test_incomplete_plate(self):
        data = _ctg_plate(8)
        data[6, 6] = np.nan
        with pytest.raises(DataFormatError, match="G7"):
            normalize_plates(_source(data))


class TestDatasetNames:
    def test_default_names(self):
        run = normalize_plates(_source(_ctg_plate(1), _ctg_plate(2)))
        assert [d.name for d in run.datasets] == [
            "Plate 1 top", "Plate 1 bottom", "Plate 2 top", "Plate 2 bottom",
        ]

    def test_supplied_names(self):
        run = normalize_plates(_source(_ctg_plate(1)), ["HCT-116", "TC-71"])
        assert [d.name for d in run.datasets] == ["HCT-116", "TC-71"]

    def test_short_names_fall_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            run = normalize_plates(_source(_ctg_plate(1), _ctg_plate(2)), ["only"])
        assert run.datasets[0].name == "Plate 1 top"
        assert "default names" in caplog.text


class TestNormalizeHalves:
    def test_accepts_any_half_sequence(self):
        halves = [
            PlateHalf(4, "bottom", np.full((4, 12), 2.0)),
            PlateHalf(0, "top", np.full((4, 12), 8.0)),
        ]
        run = normalize_halves(halves)
        assert [d.plate_index for d in run.datasets] == [4, 0]
        assert list(run.control_averages) == [2.0, 8.0]

    def test_long_table(self):
        run = normalize_halves([PlateHalf(0, "top", np.full((4, 12), 5.0))])
        df = run.to_frame()
        assert len(df) == 48
        assert set(df["Percent_Viability"]) == {100.0}
        assert df.iloc[2]["Treatment"] == "0.003uM"
        assert df.iloc[0]["Half"] == "top"
