import logging
from dataclasses import dataclass
from typing import List, Optional

import cv2
import numpy as np

from edge_response.core.image_buffer import ImageBuffer, require_image
from edge_response.utils.cancellation import CancellationToken, check_cancelled

logger = logging.getLogger(__name__)


class NoCircleDetectedError(Exception):
    pass


@dataclass(frozen=True)
class Circle:
    center_x: float
    center_y: float
    radius: float
    votes: int = 0


@dataclass
class DetectorConfig:
    canny_low: float = 100
    canny_high: float = 200
    hough_dp: float = 1.0
    hough_min_dist_ratio: float = 0.125
    hough_param1: float = 200
    hough_param2: float = 20
    min_radius: int = 0
    max_radius: int = 0
    vote_band_px: float = 1.0
    hough_input: str = "image"


class CircleDetector:
    def __init__(self, config: DetectorConfig = DetectorConfig()) -> None:
        self.config: DetectorConfig = config

    def detect(self, image: Optional[ImageBuffer], cancel_token: Optional[CancellationToken] = None) -> Circle:
        """Return the candidate circle with the highest accumulator score."""
        candidates = self.detect_candidates(image, cancel_token)
        best = candidates[0]
        logger.info(
            f"Circle detected: center=({best.center_x:.1f}, {best.center_y:.1f}), "
            f"radius={best.radius:.1f}, votes={best.votes} ({len(candidates)} candidates)"
        )
        return best

    def detect_candidates(
        self, image: Optional[ImageBuffer], cancel_token: Optional[CancellationToken] = None
    ) -> List[Circle]:
        """
        Run edge detection and the Hough circle transform, then rank every
        candidate by its own edge support.

        By default the transform is given the intensity image: its internal
        Canny pass with param1=200 reproduces the (100, 200) edge map, and
        the vote directions come from smooth intensity gradients instead of
        the two-sided gradients of a one-pixel edge line. Set
        hough_input="edges" to vote on the binary edge map directly.

        The transform's output order is not trusted as a confidence ranking:
        each candidate is re-scored as the number of edge pixels lying within
        `vote_band_px` of its circumference, and candidates are sorted by that
        score (descending, stable with respect to the transform's order).

        Raises:
            NoImageLoadedError: image is unset or empty
            NoCircleDetectedError: the transform returned no candidates
        """
        image = require_image(image)
        check_cancelled(cancel_token)

        edges = cv2.Canny(image.pixels, self.config.canny_low, self.config.canny_high)
        check_cancelled(cancel_token)

        min_dist = max(1.0, edges.shape[0] * self.config.hough_min_dist_ratio)
        circles = cv2.HoughCircles(
            self._transform_input(image, edges),
            cv2.HOUGH_GRADIENT,
            dp=self.config.hough_dp,
            minDist=min_dist,
            param1=self.config.hough_param1,
            param2=self.config.hough_param2,
            minRadius=self.config.min_radius,
            maxRadius=self.config.max_radius,
        )

        if circles is None or np.size(circles) == 0:
            logger.warning("No circles detected in the image")
            raise NoCircleDetectedError("No circles detected")

        circles = np.asarray(circles, dtype=np.float64).reshape(-1, 3)
        edge_ys, edge_xs = np.nonzero(edges)

        candidates = []
        for cx, cy, r in circles:
            votes = self._count_votes(edge_xs, edge_ys, cx, cy, r)
            candidates.append(Circle(center_x=float(cx), center_y=float(cy), radius=float(r), votes=votes))

        candidates.sort(key=lambda c: c.votes, reverse=True)
        return candidates

    def _transform_input(self, image: ImageBuffer, edges: np.ndarray) -> np.ndarray:
        # HOUGH_GRADIENT runs Canny(param1 / 2, param1) on its input and takes
        # vote directions from Sobel gradients of that same input
        if self.config.hough_input == "edges":
            return edges
        if self.config.hough_input != "image":
            raise ValueError(f"Unknown hough_input: {self.config.hough_input!r}")
        return image.pixels

    def _count_votes(self, edge_xs: np.ndarray, edge_ys: np.ndarray, cx: float, cy: float, r: float) -> int:
        if edge_xs.size == 0:
            return 0
        dist = np.hypot(edge_xs - cx, edge_ys - cy)
        return int(np.count_nonzero(np.abs(dist - r) <= self.config.vote_band_px))
