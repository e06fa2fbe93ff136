import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from edge_response.core.image_buffer import ImageBuffer, require_image

logger = logging.getLogger(__name__)


class InvalidROIError(ValueError):
    pass


@dataclass(frozen=True)
class ROI:
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_tuple(cls, rect: Tuple[int, int, int, int]) -> "ROI":
        x, y, w, h = rect
        return cls(int(x), int(y), int(w), int(h))

    def fits_within(self, image: ImageBuffer) -> bool:
        return (
            self.x >= 0
            and self.y >= 0
            and self.width > 0
            and self.height > 0
            and self.x + self.width <= image.width
            and self.y + self.height <= image.height
        )


@dataclass
class QualityConfig:
    default_roi: Tuple[int, int, int, int] = (100, 100, 100, 100)


@dataclass
class QualityReport:
    noise_level: float
    cnr: Optional[float] = None
    roi: Optional[ROI] = None


def compute_noise_level(image: Optional[ImageBuffer]) -> float:
    """Population standard deviation of every sample in the image."""
    image = require_image(image)
    _, stddev = cv2.meanStdDev(image.pixels)
    return float(stddev[0][0])


def compute_cnr(image: Optional[ImageBuffer], roi: ROI) -> float:
    """
    Contrast-to-noise ratio of a rectangle: mean / standard deviation.

    A perfectly uniform region (standard deviation exactly zero) yields
    math.inf instead of a division error; callers must check for it.

    Raises:
        NoImageLoadedError: image is unset or empty
        InvalidROIError: the rectangle is not fully inside the image
    """
    image = require_image(image)
    if not roi.fits_within(image):
        raise InvalidROIError(
            f"ROI ({roi.x}, {roi.y}, {roi.width}x{roi.height}) "
            f"is outside the {image.width}x{image.height} image"
        )

    region = image.pixels[roi.y : roi.y + roi.height, roi.x : roi.x + roi.width]
    mean, stddev = cv2.meanStdDev(np.ascontiguousarray(region))
    mean_val = float(mean[0][0])
    std_val = float(stddev[0][0])

    if std_val == 0.0:
        logger.warning(f"ROI {roi} has zero variance, CNR is infinite")
        return math.inf
    return mean_val / std_val


def compute_quality_metrics(image: Optional[ImageBuffer], roi: Optional[ROI] = None) -> QualityReport:
    noise = compute_noise_level(image)
    if roi is None:
        return QualityReport(noise_level=noise)
    return QualityReport(noise_level=noise, cnr=compute_cnr(image, roi), roi=roi)
