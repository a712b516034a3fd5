import numpy as np
import pytest

from labelstack import LabeledArray


@pytest.fixture
def xyc_stack():
    """4 x 3 image with 2 channels; value = 100 * c + 10 * x + y."""
    x, y, c = np.meshgrid(np.arange(4), np.arange(3), np.arange(2), indexing="ij")
    data = (100 * c + 10 * x + y).astype(np.uint16)
    return LabeledArray(data, ["x", "y", "c"], tag="xyc")


@pytest.fixture
def xyzct_stack():
    rng = np.random.default_rng(42)
    data = rng.integers(0, 255, size=(6, 5, 3, 2, 4)).astype(np.uint8)
    return LabeledArray(
        data, ["x", "y", "z", "c", "t"], voxel_size={"x": 0.2, "y": 0.2, "z": 1.0}
    )


@pytest.fixture
def binary_mask():
    data = np.zeros((4, 3), dtype=np.uint8)
    data[1:3, 1:] = 1
    return LabeledArray(data, ["x", "y"])

