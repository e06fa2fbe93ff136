import numpy as np
import pytest

from edge_response.core.image_buffer import ImageBuffer
from edge_response.core.pattern_synthesizer import PatternSynthesizer


@pytest.fixture
def synthesizer():
    return PatternSynthesizer()


@pytest.fixture
def disk_image(synthesizer):
    # 400x400, blurred disk of radius 120 centered at (200, 200)
    return synthesizer.synthesize(400, 400, 120)


@pytest.fixture
def uniform_image():
    return ImageBuffer(np.full((200, 200), 128, dtype=np.uint8))


@pytest.fixture
def split_image():
    """Left half 50, right half 200 (sharp vertical boundary at x=100)."""
    pixels = np.full((200, 200), 50, dtype=np.uint8)
    pixels[:, 100:] = 200
    return ImageBuffer(pixels)
