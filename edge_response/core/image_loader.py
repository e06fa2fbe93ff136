import logging
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from edge_response.core.image_buffer import ImageBuffer, ImageValidationError
from edge_response.utils.file_io import FileIO

logger = logging.getLogger(__name__)


class ImageLoader:
    """
    Ingestion boundary: turns files or already-decoded arrays into an
    ImageBuffer. Decode failures are reported as None so that analysis
    stages see them as "no image loaded".
    """

    def __init__(self) -> None:
        self.file_io = FileIO()

    def load_from_file(self, filepath: Path) -> Optional[ImageBuffer]:
        image = self.file_io.load_image(filepath)
        if image is None or image.size == 0:
            logger.warning(f"Failed to load image from {filepath}")
            return None
        buffer = ImageBuffer(image)
        logger.info(f"Image loaded from {filepath}: {buffer.width}x{buffer.height}")
        return buffer

    def load_from_array(self, image: Optional[np.ndarray]) -> Optional[ImageBuffer]:
        if image is None or image.size == 0:
            logger.warning("Received empty image array")
            return None
        if image.ndim == 3 and image.shape[2] == 3:
            image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        elif image.ndim == 3 and image.shape[2] == 4:
            image = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        try:
            return ImageBuffer(image)
        except ImageValidationError as e:
            logger.warning(f"Rejected image array: {e}")
            return None
