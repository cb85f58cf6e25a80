"""Cut the two candidate HUD regions out of a captured frame.

Most shooters draw health/ammo either in the bottom-left or the bottom-right
corner. We always read both corners and let the region arbiter decide which
text to trust:

  +-------------------------------+
  |                               |
  |                               |
  |-----------+       +-----------|  <- H * (1 - keep_h)
  |  left     |       |   right   |
  |  region   |       |   region  |
  +-----------+-------+-----------+
   W * keep_w           W * keep_w

Frames are BGR numpy arrays (H, W, 3) as delivered by ffmpeg's bgr24 output.
All functions are pure; the input frame is never modified.
"""

import math
from dataclasses import dataclass

import cv2
import numpy as np


DEFAULT_KEEP_W = 0.50
DEFAULT_KEEP_H = 0.45

# Capture canvas is half the stream resolution before cropping
DEFAULT_CAPTURE_SCALE = 0.5

SIDES = ('left', 'right')


@dataclass
class CropSettings:
    """Active HUD crop geometry (fractions of the captured frame)."""
    keep_w: float = DEFAULT_KEEP_W
    keep_h: float = DEFAULT_KEEP_H

    def reset(self) -> None:
        self.keep_w = DEFAULT_KEEP_W
        self.keep_h = DEFAULT_KEEP_H


def _clamp_fraction(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def crop_size(frame_w: int, frame_h: int,
              keep_w: float, keep_h: float) -> tuple[int, int]:
    """Return (crop_w, crop_h) for the given frame size and fractions."""
    crop_w = math.floor(frame_w * _clamp_fraction(keep_w))
    crop_h = math.floor(frame_h * _clamp_fraction(keep_h))
    return crop_w, crop_h


def crop_bottom(frame: np.ndarray, side: str,
                keep_w: float = DEFAULT_KEEP_W,
                keep_h: float = DEFAULT_KEEP_H) -> np.ndarray:
    """Crop the bottom `keep_h` of the frame on the given side.

    Args:
        frame: BGR frame (H, W, 3).
        side: 'left' or 'right': which edge the region is flush with.
        keep_w: Fraction of the frame width to keep, clamped to [0, 1].
        keep_h: Fraction of the frame height to keep (measured up from the
                bottom edge), clamped to [0, 1].

    Returns:
        A copy of the region, shape (floor(H*keep_h), floor(W*keep_w), 3).
        Zero fractions give a zero-area array; callers must tolerate it.
    """
    if side not in SIDES:
        raise ValueError(f'Unknown crop side: {side!r}')

    h, w = frame.shape[:2]
    crop_w, crop_h = crop_size(w, h, keep_w, keep_h)

    y1 = h - crop_h
    x1 = 0 if side == 'left' else w - crop_w
    return frame[y1:h, x1:x1 + crop_w].copy()


def crop_bottom_left(frame: np.ndarray, keep_w: float = DEFAULT_KEEP_W,
                     keep_h: float = DEFAULT_KEEP_H) -> np.ndarray:
    return crop_bottom(frame, 'left', keep_w, keep_h)


def crop_bottom_right(frame: np.ndarray, keep_w: float = DEFAULT_KEEP_W,
                      keep_h: float = DEFAULT_KEEP_H) -> np.ndarray:
    return crop_bottom(frame, 'right', keep_w, keep_h)


def downscale_frame(frame: np.ndarray,
                    scale: float = DEFAULT_CAPTURE_SCALE) -> np.ndarray:
    """Resize a raw stream frame to the capture canvas size.

    Output size is floor(W*scale) x floor(H*scale). A scale of 1.0 (or a
    result with a zero dimension) returns the frame unchanged in size so the
    caller's "frame too small" check sees the real dimensions.
    """
    h, w = frame.shape[:2]
    out_w = math.floor(w * scale)
    out_h = math.floor(h * scale)
    if scale == 1.0 or out_w == 0 or out_h == 0:
        return frame
    return cv2.resize(frame, (out_w, out_h), interpolation=cv2.INTER_AREA)
