import numpy as np
import pytest

from config import Config
from core.point import Point


# Irregular offsets so no two clusters split into identical sub-groups
CLUSTER_OFFSETS = [
    (0.0, 0.0),
    (0.012, -0.004),
    (-0.007, 0.011),
    (0.003, 0.009),
    (-0.010, -0.006),
]

# Four tight groups on the axes, one per initial centroid of a k = 4 run
DIAMOND_CENTERS = [(1.0, 0.0), (0.0, 1.0), (-1.0, 0.0), (0.0, -1.0)]


def make_diamond(offsets=CLUSTER_OFFSETS):
    return [Point(cx + dx, cy + dy) for cx, cy in DIAMOND_CENTERS for dx, dy in offsets]


@pytest.fixture
def diamond_points():
    return make_diamond()


@pytest.fixture
def exact_diamond_points():
    """Same layout with every group collapsed onto its center."""
    return make_diamond(offsets=[(0.0, 0.0)] * 5)


@pytest.fixture
def uniform_points():
    rng = np.random.default_rng(7)
    return [Point(x, y) for x, y in rng.uniform(0.0, 1.0, size=(200, 2))]


@pytest.fixture
def config(tmp_path):
    """Config with a small run and output redirected to tmp_path."""
    return type("TestConfig", (Config,), {
        "NUM_POINTS": 40,
        "RANDOM_SEED": 42,
        "MAX_K": 6,
        "MAX_ITERATIONS": 100,
        "CONVERGENCE_TOLERANCE": None,
        "EMPTY_CLUSTER_POLICY": "keep",
        "OUTPUT_DIR": str(tmp_path / "maps"),
    })
