"""Prepare a cropped HUD region for Tesseract.

HUD text is usually small, anti-aliased and drawn over busy gameplay. Each
region goes through two steps before OCR:

1. Nearest-neighbor upscale by an integer factor. No smoothing, so glyph
   edges stay hard.
2. Grayscale contrast stretch around mid-gray:
       gray = clamp((mean(b, g, r) - 128) * gain + 128, 0, 255)
   written back to all three channels.
"""

import cv2
import numpy as np


DEFAULT_UPSCALE = 3
CONTRAST_GAIN = 1.6


def upscale_nearest(region: np.ndarray, factor: int = DEFAULT_UPSCALE) -> np.ndarray:
    """Magnify a region by an integer factor without interpolation."""
    factor = int(factor)
    if factor < 1:
        raise ValueError(f'Upscale factor must be >= 1, got {factor}')
    h, w = region.shape[:2]
    if h == 0 or w == 0:
        return np.zeros((h * factor, w * factor) + region.shape[2:], dtype=region.dtype)
    if factor == 1:
        return region.copy()
    return cv2.resize(region, (w * factor, h * factor),
                      interpolation=cv2.INTER_NEAREST)


def contrast_stretch(region: np.ndarray, gain: float = CONTRAST_GAIN) -> np.ndarray:
    """Convert to gray (channel mean) and stretch contrast around 128.

    Returns a uint8 array with the same shape as the input; all three
    channels carry the same gray value.
    """
    if region.size == 0:
        return region.copy()
    gray = region.astype(np.float32).mean(axis=2)
    gray = (gray - 128.0) * gain + 128.0
    gray = np.clip(np.rint(gray), 0, 255).astype(np.uint8)
    return np.repeat(gray[:, :, np.newaxis], region.shape[2], axis=2)


def prep_for_ocr(region: np.ndarray, upscale: int = DEFAULT_UPSCALE,
                 gain: float = CONTRAST_GAIN) -> np.ndarray:
    return contrast_stretch(upscale_nearest(region, upscale), gain)
