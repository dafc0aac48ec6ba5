"""
Colour conversion for composited grids.

The engine and trail work in HSB with hue in degrees (0-360) and
saturation/brightness on a 0-255 scale. Consumers that draw or encode
frames need RGB.
"""

import numpy as np


def hsb_to_rgb(
    hue: np.ndarray,
    saturation: np.ndarray,
    brightness: np.ndarray,
) -> np.ndarray:
    """
    Convert HSB grids to RGB.

    Args:
        hue: Hue in degrees (0-360).
        saturation: Saturation (0-255).
        brightness: Brightness (0-255).

    Returns:
        (..., 3) uint8 RGB array with the input shape plus a channel axis.
    """
    h = (np.asarray(hue, dtype=np.float32) / 360.0) % 1.0
    s = np.clip(np.asarray(saturation, dtype=np.float32) / 255.0, 0, 1)
    v = np.clip(np.asarray(brightness, dtype=np.float32) / 255.0, 0, 1)
    h, s, v = np.broadcast_arrays(h, s, v)

    rgb = _hsv_to_rgb_array(h, s, v)
    return np.round(rgb * 255).astype(np.uint8)


def _hsv_to_rgb_array(
    h: np.ndarray,
    s: np.ndarray,
    v: np.ndarray,
) -> np.ndarray:
    """
    Vectorized HSV to RGB conversion.

    Args:
        h, s, v: Arrays of same shape, values in [0, 1].

    Returns:
        (..., 3) float array in [0, 1].
    """
    h6 = (h * 6.0) % 6.0
    i = np.minimum(h6.astype(np.int32), 5)
    f = h6 - i

    p = v * (1.0 - s)
    q = v * (1.0 - s * f)
    t = v * (1.0 - s * (1.0 - f))

    # Channel sources per sector
    sectors = (
        (v, t, p),
        (q, v, p),
        (p, v, t),
        (p, q, v),
        (t, p, v),
        (v, p, q),
    )
    rgb = np.zeros(h.shape + (3,), dtype=np.float32)
    for sector, (r, g, b) in enumerate(sectors):
        mask = i == sector
        rgb[mask, 0] = r[mask]
        rgb[mask, 1] = g[mask]
        rgb[mask, 2] = b[mask]

    return rgb


def brightness_to_symbols(brightness: np.ndarray, ramp: str = " .:-=+*#%@") -> list:
    """
    Map a brightness grid (0-255) onto a character ramp, one string per row.
    """
    levels = np.clip(np.asarray(brightness, dtype=np.float32) / 255.0, 0, 1)
    idx = np.minimum((levels * len(ramp)).astype(np.int32), len(ramp) - 1)
    return ["".join(ramp[k] for k in row) for row in idx]
