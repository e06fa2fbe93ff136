"""
Core Algorithm Modules

Contains the computational components of the edge response analysis:
- ImageBuffer: Immutable 8-bit single-channel image container
- PatternSynthesizer: Blurred-disk calibration image generation
- CircleDetector: Dominant circular edge detection (Canny + Hough)
- RadialProfiler: Angularly averaged intensity per integer radius
- ResponseFunction: First difference of a radial profile
- QualityMetrics: Noise level and region CNR
"""

from edge_response.core.circle_detector import CircleDetector
from edge_response.core.image_buffer import ImageBuffer
from edge_response.core.pattern_synthesizer import PatternSynthesizer
from edge_response.core.quality_metrics import compute_cnr, compute_noise_level
from edge_response.core.radial_profiler import RadialProfiler
from edge_response.core.response_function import ResponseFunction

__all__ = [
    "ImageBuffer",
    "PatternSynthesizer",
    "CircleDetector",
    "RadialProfiler",
    "ResponseFunction",
    "compute_noise_level",
    "compute_cnr",
]
