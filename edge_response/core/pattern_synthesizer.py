import logging
from dataclasses import dataclass

import cv2
import numpy as np

from edge_response.core.image_buffer import ImageBuffer, ImageValidationError

logger = logging.getLogger(__name__)


@dataclass
class SynthesizerConfig:
    kernel_size: int = 5
    sigma: float = 2.0
    foreground: int = 255
    background: int = 0
    default_width: int = 500
    default_height: int = 500
    default_radius: int = 200


class PatternSynthesizer:
    """Blurred filled-disk calibration images."""

    def __init__(self, config: SynthesizerConfig = SynthesizerConfig()) -> None:
        self.config: SynthesizerConfig = config

    def synthesize(self, width: int, height: int, radius: int) -> ImageBuffer:
        """
        Draw a solid disk centered at (width // 2, height // 2) and blur it.

        A radius larger than half the smaller dimension is clipped by the
        image edges. The output is deterministic for identical arguments.

        Args:
            width: Image width in pixels (> 0)
            height: Image height in pixels (> 0)
            radius: Disk radius in pixels (>= 0)

        Returns:
            ImageBuffer of exactly width x height samples
        """
        if width <= 0 or height <= 0:
            raise ImageValidationError(f"Image dimensions must be positive, got {width}x{height}")
        if radius < 0:
            raise ImageValidationError(f"Radius must be non-negative, got {radius}")

        ksize = self.config.kernel_size
        canvas = np.full((height, width), self.config.background, dtype=np.uint8)
        cv2.circle(canvas, (width // 2, height // 2), int(radius), int(self.config.foreground), -1)
        canvas = cv2.GaussianBlur(canvas, (ksize, ksize), self.config.sigma)

        logger.debug(f"Synthesized {width}x{height} disk image, radius={radius}")
        return ImageBuffer(canvas)

    def generate_test_image(self) -> ImageBuffer:
        return self.synthesize(
            self.config.default_width,
            self.config.default_height,
            self.config.default_radius,
        )
