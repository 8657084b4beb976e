"""CIEDE2000 color difference.

``delta_e2000`` is the scalar reference; ``delta_e2000_matrix`` evaluates
the same formula for every (color, palette entry) pair at once and is
what the quantizer uses.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from blockprint.models import LabColor

_POW25_7 = 25.0**7

LabLike = LabColor | Sequence[float]


def _components(lab: LabLike) -> tuple[float, float, float]:
    if isinstance(lab, LabColor):
        return lab.L, lab.a, lab.b
    return float(lab[0]), float(lab[1]), float(lab[2])


def _hue_deg(b: float, a_prime: float) -> float:
    h = math.degrees(math.atan2(b, a_prime))
    return h + 360.0 if h < 0.0 else h


def delta_e2000(lab1: LabLike, lab2: LabLike) -> float:
    """CIEDE2000 distance between two Lab colors (kL = kC = kH = 1)."""
    L1, a1, b1 = _components(lab1)
    L2, a2, b2 = _components(lab2)

    avg_L = (L1 + L2) / 2.0

    C1 = math.hypot(a1, b1)
    C2 = math.hypot(a2, b2)
    avg_C = (C1 + C2) / 2.0

    G = 0.5 * (1.0 - math.sqrt(avg_C**7 / (avg_C**7 + _POW25_7)))
    a1p = (1.0 + G) * a1
    a2p = (1.0 + G) * a2

    C1p = math.hypot(a1p, b1)
    C2p = math.hypot(a2p, b2)
    avg_Cp = (C1p + C2p) / 2.0

    h1p = _hue_deg(b1, a1p)
    h2p = _hue_deg(b2, a2p)

    dhp = h2p - h1p
    if abs(dhp) > 180.0:
        dhp = dhp + 360.0 if h2p <= h1p else dhp - 360.0

    if abs(h1p - h2p) > 180.0:
        avg_hp = (h1p + h2p + 360.0) / 2.0
    else:
        avg_hp = (h1p + h2p) / 2.0

    T = (
        1.0
        - 0.17 * math.cos(math.radians(avg_hp - 30.0))
        + 0.24 * math.cos(math.radians(2.0 * avg_hp))
        + 0.32 * math.cos(math.radians(3.0 * avg_hp + 6.0))
        - 0.20 * math.cos(math.radians(4.0 * avg_hp - 63.0))
    )

    dLp = L2 - L1
    dCp = C2p - C1p
    dHp = 2.0 * math.sqrt(C1p * C2p) * math.sin(math.radians(dhp / 2.0))

    dL50 = (avg_L - 50.0) ** 2
    S_l = 1.0 + (0.015 * dL50) / math.sqrt(20.0 + dL50)
    S_c = 1.0 + 0.045 * avg_Cp
    S_h = 1.0 + 0.015 * avg_Cp * T

    d_theta = 30.0 * math.exp(-(((avg_hp - 275.0) / 25.0) ** 2))
    R_c = 2.0 * math.sqrt(avg_Cp**7 / (avg_Cp**7 + _POW25_7))
    R_t = -R_c * math.sin(math.radians(2.0 * d_theta))

    term_c = dCp / S_c
    term_h = dHp / S_h
    # Rounding can push the sum a hair below zero for identical colors.
    total = (dLp / S_l) ** 2 + term_c**2 + term_h**2 + R_t * term_c * term_h
    return math.sqrt(max(0.0, total))


def delta_e2000_matrix(labs: np.ndarray, palette_labs: np.ndarray) -> np.ndarray:
    """CIEDE2000 for every pair of rows.

    Args:
        labs: float array [N, 3] of source colors.
        palette_labs: float array [M, 3] of reference colors.

    Returns:
        float64 array [N, M]; ``out[i, j]`` is the distance from
        ``labs[i]`` to ``palette_labs[j]``.
    """
    src = np.asarray(labs, dtype=np.float64).reshape(-1, 3)
    ref = np.asarray(palette_labs, dtype=np.float64).reshape(-1, 3)

    L1 = src[:, 0:1]
    a1 = src[:, 1:2]
    b1 = src[:, 2:3]
    L2 = ref[None, :, 0]
    a2 = ref[None, :, 1]
    b2 = ref[None, :, 2]

    avg_L = (L1 + L2) / 2.0

    C1 = np.hypot(a1, b1)
    C2 = np.hypot(a2, b2)
    avg_C = (C1 + C2) / 2.0
    avg_C7 = avg_C**7

    G = 0.5 * (1.0 - np.sqrt(avg_C7 / (avg_C7 + _POW25_7)))
    a1p = (1.0 + G) * a1
    a2p = (1.0 + G) * a2

    C1p = np.hypot(a1p, b1)
    C2p = np.hypot(a2p, b2)
    avg_Cp = (C1p + C2p) / 2.0

    h1p = np.degrees(np.arctan2(b1, a1p))
    h1p = np.where(h1p < 0.0, h1p + 360.0, h1p)
    h2p = np.degrees(np.arctan2(b2, a2p))
    h2p = np.where(h2p < 0.0, h2p + 360.0, h2p)

    raw = h2p - h1p
    dhp = np.where(
        np.abs(raw) > 180.0,
        np.where(h2p <= h1p, raw + 360.0, raw - 360.0),
        raw,
    )

    avg_hp = np.where(
        np.abs(h1p - h2p) > 180.0,
        (h1p + h2p + 360.0) / 2.0,
        (h1p + h2p) / 2.0,
    )

    T = (
        1.0
        - 0.17 * np.cos(np.radians(avg_hp - 30.0))
        + 0.24 * np.cos(np.radians(2.0 * avg_hp))
        + 0.32 * np.cos(np.radians(3.0 * avg_hp + 6.0))
        - 0.20 * np.cos(np.radians(4.0 * avg_hp - 63.0))
    )

    dLp = L2 - L1
    dCp = C2p - C1p
    dHp = 2.0 * np.sqrt(C1p * C2p) * np.sin(np.radians(dhp / 2.0))

    dL50 = (avg_L - 50.0) ** 2
    S_l = 1.0 + (0.015 * dL50) / np.sqrt(20.0 + dL50)
    S_c = 1.0 + 0.045 * avg_Cp
    S_h = 1.0 + 0.015 * avg_Cp * T

    d_theta = 30.0 * np.exp(-(((avg_hp - 275.0) / 25.0) ** 2))
    avg_Cp7 = avg_Cp**7
    R_c = 2.0 * np.sqrt(avg_Cp7 / (avg_Cp7 + _POW25_7))
    R_t = -R_c * np.sin(np.radians(2.0 * d_theta))

    term_c = dCp / S_c
    term_h = dHp / S_h
    total = (dLp / S_l) ** 2 + term_c**2 + term_h**2 + R_t * term_c * term_h
    return np.sqrt(np.maximum(total, 0.0))


__all__ = ["delta_e2000", "delta_e2000_matrix"]
