"""Tests for blockprint.distance — CIEDE2000."""

from __future__ import annotations

import numpy as np
import pytest

from blockprint.distance import delta_e2000, delta_e2000_matrix
from blockprint.models import LabColor

# Reference pairs from Sharma, Wu & Dalal (2005).
SHARMA_PAIRS = [
    ((50.0, 2.6772, -79.7751), (50.0, 0.0, -82.7485), 2.0425),
    ((50.0, 0.0, 0.0), (50.0, -1.0, 2.0), 2.3669),
    ((50.0, 2.5, 0.0), (73.0, 25.0, -18.0), 27.1492),
    ((50.0, 2.5, 0.0), (61.0, -5.0, 29.0), 22.8977),
    ((50.0, 2.5, 0.0), (56.0, -27.0, -3.0), 31.9030),
    ((60.2574, -34.0099, 36.2677), (60.4626, -34.1751, 39.4387), 1.2644),
]


def _random_labs(count: int, seed: int = 11) -> np.ndarray:
    rng = np.random.default_rng(seed)
    labs = np.empty((count, 3))
    labs[:, 0] = rng.uniform(0, 100, count)
    labs[:, 1:] = rng.uniform(-110, 110, (count, 2))
    return labs


class TestDeltaE2000:
    """Tests for the scalar implementation."""

    @pytest.mark.parametrize("lab1, lab2, expected", SHARMA_PAIRS)
    def test_reference_values(
        self,
        lab1: tuple[float, float, float],
        lab2: tuple[float, float, float],
        expected: float,
    ) -> None:
        assert delta_e2000(lab1, lab2) == pytest.approx(expected, abs=1e-4)

    def test_identical_colors_are_zero(self) -> None:
        for lab in _random_labs(100):
            assert delta_e2000(lab, lab) == pytest.approx(0.0, abs=1e-12)

    def test_symmetric(self) -> None:
        labs = _random_labs(60)
        for a in labs[:30]:
            for b in labs[30:]:
                assert delta_e2000(a, b) == pytest.approx(delta_e2000(b, a), rel=1e-12)

    @pytest.mark.parametrize("lab1, lab2, _expected", SHARMA_PAIRS)
    def test_reference_pairs_symmetric(
        self,
        lab1: tuple[float, float, float],
        lab2: tuple[float, float, float],
        _expected: float,
    ) -> None:
        assert delta_e2000(lab1, lab2) == pytest.approx(delta_e2000(lab2, lab1))

    def test_hue_wraparound_symmetric(self) -> None:
        a = (60.0, 40.0, -5.0)  # hue just below 360
        b = (60.0, 40.0, 5.0)  # hue just above 0
        assert delta_e2000(a, b) == pytest.approx(delta_e2000(b, a), rel=1e-12)
        assert delta_e2000(a, b) < 10.0

    def test_non_negative(self) -> None:
        labs = _random_labs(40, seed=3)
        for a in labs:
            for b in labs:
                assert delta_e2000(a, b) >= 0.0

    def test_accepts_lab_color_models(self) -> None:
        black = LabColor(L=0, a=0, b=0)
        white = LabColor(L=100, a=0, b=0)
        assert delta_e2000(black, white) == pytest.approx(
            delta_e2000((0, 0, 0), (100, 0, 0))
        )
        assert delta_e2000(black, white) > 50.0


class TestDeltaE2000Matrix:
    """Tests for the vectorised implementation."""

    def test_matches_scalar(self) -> None:
        src = _random_labs(25, seed=1)
        ref = _random_labs(9, seed=2)
        matrix = delta_e2000_matrix(src, ref)
        assert matrix.shape == (25, 9)
        for i, a in enumerate(src):
            for j, b in enumerate(ref):
                assert matrix[i, j] == pytest.approx(delta_e2000(a, b), abs=1e-9)

    @pytest.mark.parametrize("lab1, lab2, expected", SHARMA_PAIRS)
    def test_reference_values(
        self,
        lab1: tuple[float, float, float],
        lab2: tuple[float, float, float],
        expected: float,
    ) -> None:
        out = delta_e2000_matrix(np.array([lab1]), np.array([lab2]))
        assert out[0, 0] == pytest.approx(expected, abs=1e-4)

    def test_identical_rows_give_identical_columns(self) -> None:
        src = _random_labs(10)
        ref = np.array([[40.0, 10.0, 10.0], [40.0, 10.0, 10.0]])
        out = delta_e2000_matrix(src, ref)
        assert np.array_equal(out[:, 0], out[:, 1])

    def test_empty_source(self) -> None:
        out = delta_e2000_matrix(np.empty((0, 3)), _random_labs(4))
        assert out.shape == (0, 4)
