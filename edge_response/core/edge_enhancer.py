import logging
from dataclasses import dataclass
from typing import Optional

import cv2

from edge_response.core.image_buffer import ImageBuffer, require_image

logger = logging.getLogger(__name__)


@dataclass
class EnhancerConfig:
    laplacian_ksize: int = 3


def enhance_edges(image: Optional[ImageBuffer], config: EnhancerConfig = EnhancerConfig()) -> ImageBuffer:
    """Add the (8-bit, saturated) Laplacian back onto the image."""
    image = require_image(image)
    laplacian = cv2.Laplacian(image.pixels, cv2.CV_8U, ksize=config.laplacian_ksize)
    enhanced = cv2.add(image.pixels, laplacian)
    logger.debug(f"Edge enhancement applied to {image.width}x{image.height} image")
    return ImageBuffer(enhanced)
