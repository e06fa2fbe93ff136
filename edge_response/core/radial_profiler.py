import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import numpy as np
from scipy.signal import savgol_filter

from edge_response.core.circle_detector import Circle
from edge_response.core.image_buffer import ImageBuffer, require_image
from edge_response.utils.cancellation import CancellationToken, check_cancelled

logger = logging.getLogger(__name__)


@dataclass
class RadialProfile:
    radii: np.ndarray
    mean_intensity: np.ndarray
    sample_count: np.ndarray

    def __len__(self) -> int:
        return int(self.radii.size)

    def __iter__(self) -> Iterator[Tuple[int, float]]:
        for r, mean in zip(self.radii, self.mean_intensity):
            yield int(r), float(mean)

    def as_pairs(self) -> List[Tuple[int, float]]:
        return list(self)


@dataclass
class ProfilerConfig:
    theta_samples: int = 360
    max_workers: int = 1
    smoothing_enabled: bool = False
    smoothing_method: str = "savgol"
    savgol_window_length: int = 11
    savgol_polyorder: int = 3
    moving_average_window: int = 5


class RadialProfiler:
    def __init__(self, config: ProfilerConfig = ProfilerConfig()):
        self.config = config

    def extract_profile(
        self,
        image: Optional[ImageBuffer],
        circle: Circle,
        cancel_token: Optional[CancellationToken] = None,
    ) -> RadialProfile:
        """
        Mean intensity on rings of integer radius 0..round(circle.radius).

        Each ring is sampled at `theta_samples` evenly spaced angles; sample
        coordinates are rounded to the nearest pixel and only in-bounds
        samples contribute. A radius without any in-bounds sample is left
        out, so the returned radii may skip values.
        """
        image = require_image(image)
        if circle is None:
            raise ValueError("Circle object cannot be None.")
        if circle.radius < 0:
            raise ValueError(f"Circle radius must be non-negative, got {circle.radius}")

        max_radius = int(np.rint(circle.radius))
        all_radii = np.arange(max_radius + 1)

        theta = np.deg2rad(np.arange(self.config.theta_samples) * 360.0 / self.config.theta_samples)
        cos_t = np.cos(theta)
        sin_t = np.sin(theta)

        def run(radii: np.ndarray) -> List[Tuple[int, float, int]]:
            return self._sample_rings(image.pixels, circle.center_x, circle.center_y, radii, cos_t, sin_t, cancel_token)

        workers = max(1, int(self.config.max_workers))
        if workers > 1 and all_radii.size > 1:
            chunks = [c for c in np.array_split(all_radii, min(workers, all_radii.size)) if c.size]
            with ThreadPoolExecutor(max_workers=workers) as executor:
                rings = [ring for part in executor.map(run, chunks) for ring in part]
        else:
            rings = run(all_radii)

        profile = RadialProfile(
            radii=np.array([r for r, _, _ in rings], dtype=np.int64),
            mean_intensity=np.array([m for _, m, _ in rings], dtype=np.float64),
            sample_count=np.array([n for _, _, n in rings], dtype=np.int64),
        )
        skipped = all_radii.size - len(profile)
        if skipped:
            logger.debug(f"{skipped} radii had no in-bounds samples and were omitted")

        if self.config.smoothing_enabled:
            profile = self._smooth_profile(profile)

        return profile

    @staticmethod
    def _sample_rings(
        pixels: np.ndarray,
        cx: float,
        cy: float,
        radii: np.ndarray,
        cos_t: np.ndarray,
        sin_t: np.ndarray,
        cancel_token: Optional[CancellationToken],
    ) -> List[Tuple[int, float, int]]:
        h, w = pixels.shape
        rings = []
        for r in radii:
            check_cancelled(cancel_token)
            xs = np.rint(cx + r * cos_t).astype(np.int64)
            ys = np.rint(cy + r * sin_t).astype(np.int64)
            inside = (xs >= 0) & (xs < w) & (ys >= 0) & (ys < h)
            count = int(np.count_nonzero(inside))
            if count == 0:
                continue
            total = int(pixels[ys[inside], xs[inside]].sum(dtype=np.int64))
            rings.append((int(r), total / count, count))
        return rings

    def _smooth_profile(self, profile: RadialProfile) -> RadialProfile:
        values = profile.mean_intensity

        if self.config.smoothing_method == "savgol" and len(values) >= self.config.savgol_window_length:
            values = savgol_filter(values, self.config.savgol_window_length, self.config.savgol_polyorder)
        elif self.config.smoothing_method == "moving_average" and len(values) >= self.config.moving_average_window:
            window = self.config.moving_average_window
            weights = np.ones(window) / window
            valid = np.convolve(values, weights, mode="valid")
            # edge padding keeps the input length
            pad_len = (window - 1) // 2
            values = np.pad(valid, (pad_len, len(values) - len(valid) - pad_len), mode="edge")

        return RadialProfile(profile.radii, np.asarray(values, dtype=np.float64), profile.sample_count)
