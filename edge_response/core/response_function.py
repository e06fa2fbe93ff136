from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from edge_response.core.radial_profiler import RadialProfile


@dataclass
class ResponseFunction:
    """
    First difference of a radial profile.

    values[i] = mean[i+1] - mean[i] over consecutive profile entries, and
    radii[i] is the radius of the outer entry. Gaps left by omitted radii are
    bridged without rescaling, which understates the local slope across a gap.
    """

    values: np.ndarray
    radii: np.ndarray

    def __len__(self) -> int:
        return int(self.values.size)

    def steepest_falloff(self) -> Optional[Tuple[int, float]]:
        """(radius, value) of the most negative entry, or None if empty."""
        if self.values.size == 0:
            return None
        idx = int(np.argmin(self.values))
        return int(self.radii[idx]), float(self.values[idx])


def derive_response_function(profile: RadialProfile) -> ResponseFunction:
    if len(profile) < 2:
        return ResponseFunction(values=np.zeros(0, dtype=np.float64), radii=np.zeros(0, dtype=np.int64))
    return ResponseFunction(
        values=np.diff(np.asarray(profile.mean_intensity, dtype=np.float64)),
        radii=np.asarray(profile.radii[1:], dtype=np.int64),
    )
