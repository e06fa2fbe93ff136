"""
Analysis Pipeline Module

Connects the core stages into the edge response workflow:

    ImageBuffer → CircleDetector → RadialProfiler → derive_response_function

and carries the session state (current image, last result, status message)
as an explicit immutable value instead of process-wide globals.
"""

import logging
from dataclasses import asdict, dataclass, fields, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

from edge_response.core.circle_detector import Circle, CircleDetector, DetectorConfig, NoCircleDetectedError
from edge_response.core.edge_enhancer import EnhancerConfig, enhance_edges
from edge_response.core.image_buffer import ImageBuffer, ImageValidationError, NoImageLoadedError, require_image
from edge_response.core.image_loader import ImageLoader
from edge_response.core.pattern_synthesizer import PatternSynthesizer, SynthesizerConfig
from edge_response.core.quality_metrics import (
    ROI,
    InvalidROIError,
    QualityConfig,
    compute_cnr,
    compute_noise_level,
)
from edge_response.core.radial_profiler import ProfilerConfig, RadialProfile, RadialProfiler
from edge_response.core.response_function import ResponseFunction, derive_response_function
from edge_response.data.config_manager import ConfigManager
from edge_response.utils.cancellation import CancellationToken, OperationCancelledError, check_cancelled

logger = logging.getLogger(__name__)

C = TypeVar("C")


@dataclass(frozen=True)
class EdgeResponseResult:
    circle: Circle
    profile: RadialProfile
    response: ResponseFunction


@dataclass(frozen=True)
class SessionState:
    """
    Snapshot of what a front end displays.

    `result` always describes `image`: any operation that replaces the image,
    and any failed response calculation, returns a state with result=None.
    """

    image: Optional[ImageBuffer] = None
    result: Optional[EdgeResponseResult] = None
    status: str = ""


class AnalysisPipeline:
    def __init__(
        self,
        synthesizer_config: Optional[SynthesizerConfig] = None,
        detector_config: Optional[DetectorConfig] = None,
        profiler_config: Optional[ProfilerConfig] = None,
        quality_config: Optional[QualityConfig] = None,
        enhancer_config: Optional[EnhancerConfig] = None,
    ):
        self.synthesizer = PatternSynthesizer(synthesizer_config or SynthesizerConfig())
        self.circle_detector = CircleDetector(detector_config or DetectorConfig())
        self.radial_profiler = RadialProfiler(profiler_config or ProfilerConfig())
        self.quality_config = quality_config or QualityConfig()
        self.enhancer_config = enhancer_config or EnhancerConfig()
        self.image_loader = ImageLoader()

        logger.info("AnalysisPipeline initialized")

    @classmethod
    def from_config(cls, manager: ConfigManager) -> "AnalysisPipeline":
        """
        Build a pipeline from the `synthesizer`, `detector`, `profiler`,
        `quality` and `enhancer` sections of a configuration. Missing keys
        keep their defaults; unknown keys are logged and ignored.
        """
        quality = _build_config(QualityConfig, manager.section("quality"), "quality")
        quality.default_roi = tuple(quality.default_roi)
        return cls(
            synthesizer_config=_build_config(SynthesizerConfig, manager.section("synthesizer"), "synthesizer"),
            detector_config=_build_config(DetectorConfig, manager.section("detector"), "detector"),
            profiler_config=_build_config(ProfilerConfig, manager.section("profiler"), "profiler"),
            quality_config=quality,
            enhancer_config=_build_config(EnhancerConfig, manager.section("enhancer"), "enhancer"),
        )

    def to_config(self) -> ConfigManager:
        """Effective stage settings, in the layout from_config reads."""
        quality = asdict(self.quality_config)
        quality["default_roi"] = list(quality["default_roi"])
        return ConfigManager(data={
            "synthesizer": asdict(self.synthesizer.config),
            "detector": asdict(self.circle_detector.config),
            "profiler": asdict(self.radial_profiler.config),
            "quality": quality,
            "enhancer": asdict(self.enhancer_config),
        })

    @property
    def default_roi(self) -> ROI:
        return ROI.from_tuple(self.quality_config.default_roi)

    # ------------------------------------------------------------------
    # Pure operations
    # ------------------------------------------------------------------
    def analyze(
        self, image: Optional[ImageBuffer], cancel_token: Optional[CancellationToken] = None
    ) -> EdgeResponseResult:
        """
        Detect the dominant circle, profile it and derive the response function.

        Raises:
            NoImageLoadedError: image is unset or empty
            NoCircleDetectedError: no circular edge was found
            OperationCancelledError: cancel_token was triggered
        """
        start_time = datetime.now()
        image = require_image(image)

        logger.debug("Step 1: Detecting circle")
        circle = self.circle_detector.detect(image, cancel_token)

        logger.debug("Step 2: Extracting radial profile")
        profile = self.radial_profiler.extract_profile(image, circle, cancel_token)
        check_cancelled(cancel_token)

        logger.debug("Step 3: Deriving response function")
        response = derive_response_function(profile)

        processing_time = (datetime.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Response function calculated: {len(response)} entries from "
            f"{len(profile)} profile radii, time={processing_time:.1f}ms"
        )
        return EdgeResponseResult(circle=circle, profile=profile, response=response)

    def load(self, filepath: Path) -> Optional[ImageBuffer]:
        return self.image_loader.load_from_file(filepath)

    # ------------------------------------------------------------------
    # Session operations: state in, new state out
    # ------------------------------------------------------------------
    def generate_test_image(self, state: SessionState) -> SessionState:
        image = self.synthesizer.generate_test_image()
        return SessionState(image=image, result=None, status="Test image generated")

    def synthesize(self, state: SessionState, width: int, height: int, radius: int) -> SessionState:
        try:
            image = self.synthesizer.synthesize(width, height, radius)
        except ImageValidationError as e:
            logger.warning(f"Synthesis rejected: {e}")
            return replace(state, status=f"Invalid synthesis parameters: {e}")
        return SessionState(image=image, result=None, status="Test image synthesized")

    def load_image(self, state: SessionState, filepath: Path) -> SessionState:
        image = self.load(filepath)
        if image is None:
            return SessionState(image=None, result=None, status="Failed to load image")
        return SessionState(image=image, result=None, status="Image loaded")

    def calculate_response(
        self, state: SessionState, cancel_token: Optional[CancellationToken] = None
    ) -> SessionState:
        try:
            result = self.analyze(state.image, cancel_token)
        except NoImageLoadedError:
            return replace(state, result=None, status="No image loaded")
        except NoCircleDetectedError:
            return replace(state, result=None, status="No circles detected")
        except OperationCancelledError:
            return replace(state, result=None, status="Operation cancelled")
        return replace(state, result=result, status="Response function calculated")

    def enhance_edges(self, state: SessionState) -> SessionState:
        try:
            enhanced = enhance_edges(state.image, self.enhancer_config)
        except NoImageLoadedError:
            return replace(state, status="No image loaded")
        return SessionState(image=enhanced, result=None, status="Edge enhancement applied")

    def measure_noise(self, state: SessionState) -> Tuple[Optional[float], SessionState]:
        try:
            noise = compute_noise_level(state.image)
        except NoImageLoadedError:
            return None, replace(state, status="No image loaded")
        return noise, replace(state, status=f"Noise Level: {noise:.6f}")

    def measure_cnr(self, state: SessionState, roi: Optional[ROI] = None) -> Tuple[Optional[float], SessionState]:
        roi = roi or self.default_roi
        try:
            cnr = compute_cnr(state.image, roi)
        except NoImageLoadedError:
            return None, replace(state, status="No image loaded")
        except InvalidROIError:
            return None, replace(state, status="Invalid ROI")
        return cnr, replace(state, status=f"CNR: {cnr:.6f}")


def _build_config(config_cls: Type[C], values: Dict[str, Any], section: str) -> C:
    known = {f.name for f in fields(config_cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        logger.warning(f"Ignoring unknown {section} config keys: {unknown}")
    return config_cls(**{k: v for k, v in values.items() if k in known})
