"""Color space conversions (sRGB, linear RGB, CIE XYZ, CIE Lab; D65).

Scalar helpers work on single 8-bit colors and return :class:`LabColor`.
``rgb_array_to_lab`` applies the same formulas to whole images with numpy.
"""

from __future__ import annotations

import numpy as np

from blockprint.models import LabColor

# Linear sRGB -> XYZ (D65)
_RGB_TO_XYZ = np.array(
    [
        [0.4124, 0.3576, 0.1805],
        [0.2126, 0.7152, 0.0722],
        [0.0193, 0.1192, 0.9505],
    ],
    dtype=np.float64,
)
_XYZ_TO_RGB = np.linalg.inv(_RGB_TO_XYZ)

# Reference white (D65)
XN, YN, ZN = 0.95047, 1.00000, 1.08883

_EPSILON = 0.008856
_KAPPA = 7.787
_OFFSET = 16.0 / 116.0


# sRGB <-> linear


def _pivot_rgb(n: float) -> float:
    return n / 12.92 if n <= 0.04045 else ((n + 0.055) / 1.055) ** 2.4


def _unpivot_rgb(n: float) -> float:
    return n * 12.92 if n <= 0.0031308 else 1.055 * n ** (1.0 / 2.4) - 0.055


# XYZ <-> Lab


def _pivot_xyz(t: float) -> float:
    return t ** (1.0 / 3.0) if t > _EPSILON else _KAPPA * t + _OFFSET


def _unpivot_xyz(f: float) -> float:
    cube = f * f * f
    return cube if cube > _EPSILON else (f - _OFFSET) / _KAPPA


def rgb_to_xyz(r: int, g: int, b: int) -> tuple[float, float, float]:
    """8-bit sRGB to CIE XYZ (Y of white is 1.0)."""
    rr = _pivot_rgb(r / 255.0)
    gg = _pivot_rgb(g / 255.0)
    bb = _pivot_rgb(b / 255.0)
    x = rr * 0.4124 + gg * 0.3576 + bb * 0.1805
    y = rr * 0.2126 + gg * 0.7152 + bb * 0.0722
    z = rr * 0.0193 + gg * 0.1192 + bb * 0.9505
    return (x, y, z)


def xyz_to_lab(x: float, y: float, z: float) -> LabColor:
    """CIE XYZ to Lab relative to the D65 white point."""
    fx = _pivot_xyz(x / XN)
    fy = _pivot_xyz(y / YN)
    fz = _pivot_xyz(z / ZN)
    return LabColor(
        L=max(0.0, 116.0 * fy - 16.0),
        a=500.0 * (fx - fy),
        b=200.0 * (fy - fz),
    )


def rgb_to_lab(r: int, g: int, b: int) -> LabColor:
    """8-bit sRGB to CIE Lab (D65)."""
    return xyz_to_lab(*rgb_to_xyz(r, g, b))


def lab_to_xyz(lab: LabColor) -> tuple[float, float, float]:
    """Inverse of :func:`xyz_to_lab`."""
    fy = (lab.L + 16.0) / 116.0
    fx = fy + lab.a / 500.0
    fz = fy - lab.b / 200.0
    return (_unpivot_xyz(fx) * XN, _unpivot_xyz(fy) * YN, _unpivot_xyz(fz) * ZN)


def xyz_to_rgb(x: float, y: float, z: float) -> tuple[int, int, int]:
    """CIE XYZ to 8-bit sRGB, clamping out-of-gamut values."""
    linear = _XYZ_TO_RGB @ np.array([x, y, z], dtype=np.float64)
    out: list[int] = []
    for channel in linear:
        n = _unpivot_rgb(min(1.0, max(0.0, float(channel))))
        out.append(int(round(min(1.0, max(0.0, n)) * 255.0)))
    return (out[0], out[1], out[2])


def lab_to_rgb(lab: LabColor) -> tuple[int, int, int]:
    """CIE Lab to 8-bit sRGB (approximate inverse of :func:`rgb_to_lab`)."""
    return xyz_to_rgb(*lab_to_xyz(lab))


def rgb_array_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Vectorised 8-bit sRGB to Lab.

    Args:
        rgb: array[..., 3] of 0..255 channel values (any integer or float dtype).

    Returns:
        float64 array[..., 3] of ``(L, a, b)``, same leading shape.
    """
    srgb = np.asarray(rgb, dtype=np.float64)[..., :3] / 255.0
    linear = np.where(srgb <= 0.04045, srgb / 12.92, ((srgb + 0.055) / 1.055) ** 2.4)
    xyz = linear @ _RGB_TO_XYZ.T
    xyz = xyz / np.array([XN, YN, ZN], dtype=np.float64)
    f = np.where(xyz > _EPSILON, np.cbrt(xyz), _KAPPA * xyz + _OFFSET)

    out = np.empty(f.shape, dtype=np.float64)
    out[..., 0] = np.maximum(0.0, 116.0 * f[..., 1] - 16.0)
    out[..., 1] = 500.0 * (f[..., 0] - f[..., 1])
    out[..., 2] = 200.0 * (f[..., 1] - f[..., 2])
    return out


__all__ = [
    "lab_to_rgb",
    "lab_to_xyz",
    "rgb_array_to_lab",
    "rgb_to_lab",
    "rgb_to_xyz",
    "xyz_to_lab",
    "xyz_to_rgb",
]
