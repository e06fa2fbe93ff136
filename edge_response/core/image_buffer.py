"""
Image buffer: dense single-channel 8-bit intensity grid shared by every stage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


class NoImageLoadedError(Exception):
    """An operation requiring image data was invoked without one."""


class ImageValidationError(ValueError):
    """Raw pixel data does not describe a valid single-channel 8-bit image."""


@dataclass(frozen=True, eq=False)
class ImageBuffer:
    """
    Row-major grid of unsigned 8-bit samples, shape (height, width).

    The pixel array is copied on construction and marked read-only, so a
    buffer can be handed to any stage (or a display collaborator) without
    risk of partial mutation. New content always means a new ImageBuffer.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        _validate_pixels(self.pixels)
        frozen = np.array(self.pixels, dtype=np.uint8, copy=True, order="C")
        frozen.flags.writeable = False
        object.__setattr__(self, "pixels", frozen)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "ImageBuffer":
        return cls(array)

    @classmethod
    def from_bytes(cls, data: bytes, width: int, height: int) -> "ImageBuffer":
        """Wrap an already-decoded dense buffer of width*height samples."""
        if width <= 0 or height <= 0:
            raise ImageValidationError(f"Image dimensions must be positive, got {width}x{height}")
        if len(data) != width * height:
            raise ImageValidationError(
                f"Buffer holds {len(data)} samples, expected {width * height} for {width}x{height}"
            )
        array = np.frombuffer(data, dtype=np.uint8).reshape(height, width)
        return cls(array)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def shape(self):
        return self.pixels.shape

    def to_bytes(self) -> bytes:
        """Dense row-major copy of the samples, for display upload."""
        return self.pixels.tobytes(order="C")

    def __repr__(self) -> str:
        return f"ImageBuffer(width={self.width}, height={self.height})"


def _validate_pixels(pixels: np.ndarray) -> None:
    if not isinstance(pixels, np.ndarray):
        raise ImageValidationError("pixels must be numpy.ndarray")
    if pixels.dtype != np.uint8:
        raise ImageValidationError("pixels must have dtype uint8")
    if pixels.ndim != 2:
        raise ImageValidationError("pixels must be a single-channel (H, W) array")
    if pixels.shape[0] <= 0 or pixels.shape[1] <= 0:
        raise ImageValidationError(f"Image dimensions must be positive, got {pixels.shape}")


def require_image(image: Optional[ImageBuffer]) -> ImageBuffer:
    """Return the image, or raise NoImageLoadedError if it is unset or empty."""
    if image is None or image.pixels.size == 0:
        raise NoImageLoadedError("No image loaded")
    return image
