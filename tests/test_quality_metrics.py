import math

import numpy as np
import pytest

from edge_response.core.image_buffer import ImageBuffer, NoImageLoadedError
from edge_response.core.quality_metrics import (
    ROI,
    InvalidROIError,
    QualityConfig,
    compute_cnr,
    compute_noise_level,
    compute_quality_metrics,
)


def test_quality_config_default_roi():
    assert QualityConfig().default_roi == (100, 100, 100, 100)


def test_noise_level_uniform_is_zero(uniform_image):
    assert compute_noise_level(uniform_image) == 0.0


def test_noise_level_is_population_std():
    pixels = np.zeros((10, 10), dtype=np.uint8)
    pixels[:, 5:] = 200
    assert compute_noise_level(ImageBuffer(pixels)) == pytest.approx(100.0)


def test_noise_level_unset_image():
    with pytest.raises(NoImageLoadedError):
        compute_noise_level(None)


def test_cnr_uniform_region_is_infinite(uniform_image):
    cnr = compute_cnr(uniform_image, ROI(10, 10, 50, 50))
    assert math.isinf(cnr)
    assert cnr > 0


def test_cnr_across_boundary_is_finite(split_image):
    # half 50, half 200: mean 125, std 75
    cnr = compute_cnr(split_image, ROI(50, 0, 100, 100))
    assert math.isfinite(cnr)
    assert cnr == pytest.approx(125.0 / 75.0)


def test_cnr_roi_outside_image(uniform_image):
    roi = ROI(uniform_image.width - 10, 0, 50, 50)
    with pytest.raises(InvalidROIError):
        compute_cnr(uniform_image, roi)


@pytest.mark.parametrize(
    "rect",
    [(-1, 0, 10, 10), (0, -1, 10, 10), (0, 0, 0, 10), (0, 0, 10, 0), (0, 190, 10, 11)],
)
def test_cnr_invalid_rectangles(uniform_image, rect):
    with pytest.raises(InvalidROIError):
        compute_cnr(uniform_image, ROI.from_tuple(rect))


def test_cnr_full_image_roi_is_valid(split_image):
    cnr = compute_cnr(split_image, ROI(0, 0, split_image.width, split_image.height))
    assert cnr == pytest.approx(125.0 / 75.0)


def test_cnr_unset_image_checked_first():
    with pytest.raises(NoImageLoadedError):
        compute_cnr(None, ROI(-5, -5, 1, 1))


def test_quality_report(split_image):
    report = compute_quality_metrics(split_image, ROI(50, 0, 100, 100))
    assert report.noise_level == pytest.approx(75.0)
    assert report.cnr == pytest.approx(125.0 / 75.0)
    assert report.roi == ROI(50, 0, 100, 100)


def test_quality_report_without_roi(split_image):
    report = compute_quality_metrics(split_image)
    assert report.cnr is None
    assert report.roi is None
