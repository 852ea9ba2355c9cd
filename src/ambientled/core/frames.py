"""Frame buffers and color math on ``(led_count, 3)`` uint8 arrays."""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

from ambientled.models import Color, Strip

Frame = npt.NDArray[np.uint8]


def black_frame(led_count: int) -> Frame:
    """Create an all-black frame."""
    return np.zeros((led_count, 3), dtype=np.uint8)


def solid_frame(led_count: int, color: Color) -> Frame:
    """Create a frame with every LED set to ``color``."""
    return np.tile(np.array(color.to_rgb_tuple(), dtype=np.uint8), (led_count, 1))


def as_frame(colors: npt.ArrayLike | Sequence[Color], led_count: int) -> Frame:
    """
    Convert colors to a frame, checking the LED count.

    Args:
        colors: An ``(n, 3)`` array, a sequence of (r, g, b) tuples or Colors
        led_count: Expected number of LEDs

    Returns:
        A new ``(led_count, 3)`` uint8 array

    Raises:
        ValueError: If the shape does not match or a channel is outside 0..255
    """
    if isinstance(colors, Sequence) and colors and isinstance(colors[0], Color):
        colors = [color.to_rgb_tuple() for color in colors]

    array = np.asarray(colors)
    if array.shape != (led_count, 3):
        raise ValueError(f"Expected a frame of shape ({led_count}, 3), got {array.shape}")
    if array.dtype != np.uint8:
        if array.size and (array.min() < 0 or array.max() > 255):
            raise ValueError("Channel values must be between 0 and 255")
        array = array.astype(np.uint8)
    return array.copy()


def blend_frame(target: Frame, displayed: Frame, factor: float) -> Frame:
    """
    Blend ``target`` toward ``displayed`` channel by channel.

    Computes ``target*factor + displayed*(1-factor)`` rounded half-up, the
    same rule as ``Color.lerp``.

    Half-up rounding never reaches 0 when fading down with ``factor`` 0.5
    or less: at 0.5, 255 fades 128, 64, ... 2, 1 and then stays at 1.
    Factors above 0.5 do reach black.

    Example:
        >>> blend_frame(np.array([[255, 0, 0]], np.uint8), black_frame(1), 0.5)
        array([[128,   0,   0]], dtype=uint8)
    """
    mixed = target.astype(np.float64) * factor + displayed.astype(np.float64) * (1.0 - factor)
    return np.clip(np.floor(mixed + 0.5), 0, 255).astype(np.uint8)


def apply_correction(frame: Frame, strip: Strip) -> Frame:
    """
    Apply the strip's per-channel reduction and brightness cap.

    Each channel is scaled by its reduction factor; LEDs whose channel sum
    then exceeds ``max_brightness`` are scaled down proportionally. Values
    are truncated so the cap is never exceeded.
    """
    scaled = frame.astype(np.float64) * np.asarray(strip.reductions, dtype=np.float64)
    totals = scaled.sum(axis=1, keepdims=True)
    limit = float(strip.max_brightness)
    with np.errstate(divide="ignore", invalid="ignore"):
        scale = np.where(totals > limit, limit / totals, 1.0)
    return np.floor(scaled * scale).astype(np.uint8)
