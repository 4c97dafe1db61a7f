"""Helpers for showing images: depth reduction, colour maps and zoom steps."""

from __future__ import annotations

import numpy as np

# Colour map names with their OpenCV colour map numbers.
COLOUR_MAPS: dict[str, int] = {
    "Cividis": 17,
    "Inferno": 14,
    "Magma": 13,
    "Hot": 11,
    "Bone": 1,
    "Plasma": 15,
    "Jet": 2,
    "Rainbow": 4,
    "Ocean": 5,
    "Viridis": 16,
}

DEFAULT_COLOUR_MAP = "Magma"

_ZOOM_IN_FACTOR = 1.2
_ZOOM_OUT_FACTOR = 0.8


def scale_to_8bit(
    image: np.ndarray, minval: float = -1.0, maxval: float = -1.0
) -> np.ndarray:
    """Map ``minval..maxval`` onto 0..255 and return an 8-bit image.

    If either bound is negative, the image's own minimum and maximum are used.
    Values outside the range saturate.
    """
    data = np.asarray(image, dtype=np.float32)
    if data.size == 0:
        return data.astype(np.uint8)
    if minval < 0 or maxval < 0:
        minval = float(data.min())
        maxval = float(data.max())
    value_range = maxval - minval
    if value_range == 0:
        return np.zeros(data.shape, dtype=np.uint8)
    scaled = (data - np.float32(minval)) * np.float32(255.0 / value_range)
    return np.clip(np.rint(scaled), 0, 255).astype(np.uint8)


def colour_map_names() -> list[str]:
    """Return the names of the available colour maps."""
    return list(COLOUR_MAPS)


def zoom_step(value: int, zoom_in: bool) -> int:
    """Return the zoom percentage after one step in or out from ``value``."""
    factor = _ZOOM_IN_FACTOR if zoom_in else _ZOOM_OUT_FACTOR
    return int(value * factor)