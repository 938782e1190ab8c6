import copy
import math
import pickle
from collections import Counter

import numpy as np
import pytest
from sklearn.cluster import KMeans

from core.exceptions import DegenerateClusterError, EngineStateError, InvalidArgumentError
from core.point import Point
from utils.data_generator import DataGenerator
from utils.kmeans import (
    EngineState,
    KMeansEngine,
    assign_points,
    calculate_wcss,
    initial_centroids,
    run_kmeans,
    update_centroids,
)


# =============================================================================
# Initialization
# =============================================================================

def test_initialize_rejects_bad_input():
    engine = KMeansEngine()
    with pytest.raises(InvalidArgumentError):
        engine.initialize([], 3)
    with pytest.raises(InvalidArgumentError):
        engine.initialize([Point(0, 0)], 0)
    assert engine.state is EngineState.UNINITIALIZED


@pytest.mark.parametrize("k", [2, 3, 4, 6, 7])
def test_initial_centroids_on_bounding_circle(k):
    square = [Point(1, 1), Point(-1, 1), Point(-1, -1), Point(1, -1)]
    radius = math.sqrt(2)

    centroids = initial_centroids(square, k)

    assert len(centroids) == k
    for i, centroid in enumerate(centroids):
        angle = 2 * math.pi * i / k
        assert centroid.distance_to(Point(0, 0)) == pytest.approx(radius)
        assert centroid.x == pytest.approx(radius * math.cos(angle), abs=1e-12)
        assert centroid.y == pytest.approx(radius * math.sin(angle), abs=1e-12)


def test_single_centroid_is_offset_by_radius():
    # mean (1, 0), radius 1: the centroid lands on the circle, not the mean
    assert initial_centroids([Point(0, 0), Point(2, 0)], 1) == [Point(2, 0)]


def test_initialize_returns_centroids_and_sets_state():
    engine = KMeansEngine()
    centroids = engine.initialize([Point(0, 0), Point(2, 0)], 2)
    assert centroids == engine.centroids
    assert engine.state is EngineState.INITIALIZED


# =============================================================================
# Run / state machine
# =============================================================================

def test_run_requires_initialize():
    engine = KMeansEngine()
    with pytest.raises(EngineStateError):
        engine.run(10)
    with pytest.raises(EngineStateError):
        engine.get_clusters()


def test_run_only_once_per_initialize(diamond_points):
    engine = KMeansEngine()
    engine.initialize(diamond_points, 4)
    engine.run(100)
    with pytest.raises(EngineStateError):
        engine.run(100)

    engine.initialize(diamond_points, 4)
    assert engine.run(100) == engine.centroids


def test_run_rejects_empty_budget(diamond_points):
    engine = KMeansEngine()
    engine.initialize(diamond_points, 2)
    with pytest.raises(InvalidArgumentError):
        engine.run(0)


def test_single_point_converges_in_one_iteration():
    point = Point(0.3, 0.7)
    engine = KMeansEngine()
    engine.initialize([point], 1)

    assert engine.run(100) == [point]
    assert engine.n_iter == 1
    assert engine.state is EngineState.CONVERGED
    assert engine.get_clusters() == [[point]]
    assert engine.result().wcss == 0.0


def test_iteration_limit_reached(uniform_points):
    engine = KMeansEngine()
    engine.initialize(uniform_points, 6)
    engine.run(1)
    assert engine.n_iter == 1
    assert engine.state is EngineState.ITERATION_LIMIT_REACHED
    assert not engine.converged


def test_diamond_recovers_the_four_groups(diamond_points):
    result = run_kmeans(diamond_points, 4)

    assert result.converged
    assert [len(cluster) for cluster in result.clusters] == [5, 5, 5, 5]
    for cluster in result.clusters:
        # every member of a cluster belongs to the same group
        assert len({(round(p.x), round(p.y)) for p in cluster}) == 1


# =============================================================================
# Invariants
# =============================================================================

@pytest.mark.parametrize("k", [1, 2, 3, 5, 8, 13])
def test_clusters_partition_the_input(uniform_points, k):
    engine = KMeansEngine()
    engine.initialize(uniform_points, k)
    engine.run(100)
    clusters = engine.get_clusters()

    assert len(clusters) == k
    assert sum(len(cluster) for cluster in clusters) == len(uniform_points)
    assert Counter(p for cluster in clusters for p in cluster) == Counter(uniform_points)
    for point, label in zip(uniform_points, engine.labels):
        assert point in clusters[label]


def test_wcss_never_increases(uniform_points):
    engine = KMeansEngine()
    engine.initialize(uniform_points, 5)
    engine.run(100)

    history = engine.wcss_history
    assert len(history) == engine.n_iter
    for before, after in zip(history, history[1:]):
        assert after <= before + 1e-9


def test_converged_centroids_are_a_fixed_point(uniform_points):
    engine = KMeansEngine()
    engine.initialize(uniform_points, 4)
    centroids = engine.run(500)
    assert engine.converged

    labels = assign_points(uniform_points, centroids)
    assert labels == engine.labels
    assert update_centroids(uniform_points, labels, centroids) == centroids


def test_input_is_not_mutated(uniform_points):
    snapshot = list(uniform_points)
    run_kmeans(uniform_points, 3)
    assert uniform_points == snapshot


def test_result_matches_engine_state(uniform_points):
    engine = KMeansEngine()
    engine.initialize(uniform_points, 3)
    engine.run(100)
    result = engine.result()

    assert result.k == 3
    assert list(result.centroids) == engine.centroids
    assert [list(c) for c in result.clusters] == engine.get_clusters()
    assert result.wcss == pytest.approx(calculate_wcss(engine.centroids, engine.get_clusters()))
    assert result.wcss == pytest.approx(result.wcss_history[-1])


# =============================================================================
# Step functions
# =============================================================================

def test_assignment_ties_go_to_lowest_index():
    assert assign_points([Point(0, 0)], [Point(1, 0), Point(-1, 0)]) == [0]
    assert assign_points([Point(0, 0)], [Point(2, 0), Point(-1, 0)]) == [1]


def test_calculate_wcss():
    centroids = [Point(0, 0), Point(10, 10)]
    clusters = [[Point(1, 0), Point(0, 2)], [Point(10, 13)]]
    assert calculate_wcss(centroids, clusters) == 1 + 4 + 9


def test_empty_cluster_keep_policy():
    points = [Point(0, 0), Point(0.1, 0), Point(0.2, 0)]
    centroids = [Point(0, 0), Point(10, 10)]
    labels = assign_points(points, centroids)
    assert labels == [0, 0, 0]

    updated = update_centroids(points, labels, centroids, policy="keep")
    assert updated[0].x == pytest.approx(0.1)
    assert updated[0].y == 0.0
    assert updated[1] == Point(10, 10)


def test_empty_cluster_reseed_policy():
    points = [Point(0, 0), Point(0.1, 0), Point(0.2, 0)]
    centroids = [Point(0, 0), Point(10, 10)]

    updated = update_centroids(points, [0, 0, 0], centroids, policy="reseed")
    # the point farthest from its own centroid (0, 0)
    assert updated[1] == Point(0.2, 0)


def test_empty_cluster_raise_policy():
    centroids = [Point(0, 0), Point(10, 10)]
    with pytest.raises(DegenerateClusterError) as excinfo:
        update_centroids([Point(0, 0)], [0], centroids, policy="raise", iteration=3)
    assert excinfo.value.cluster_index == 1
    assert excinfo.value.iteration == 3


def test_engine_raise_policy_marks_failure():
    # with k = 3 one of the two upper/lower centroids never wins a point
    points = [Point(0, 0), Point(1, 0)]
    engine = KMeansEngine(empty_cluster_policy="raise")
    engine.initialize(points, 3)
    with pytest.raises(DegenerateClusterError):
        engine.run(100)
    assert engine.state is EngineState.FAILED

    result = run_kmeans(points, 3, empty_cluster_policy="keep")
    assert result.converged
    assert sorted(len(cluster) for cluster in result.clusters) == [0, 1, 1]


def test_engine_rejects_bad_configuration():
    with pytest.raises(InvalidArgumentError):
        KMeansEngine(empty_cluster_policy="ignore")
    with pytest.raises(InvalidArgumentError):
        KMeansEngine(tolerance=-1.0)


def test_tolerance_stops_no_later_than_exact_equality(uniform_points):
    exact = run_kmeans(uniform_points, 6, max_iterations=500)
    loose = run_kmeans(uniform_points, 6, max_iterations=500, tolerance=1e-3)

    assert loose.converged
    assert loose.n_iter <= exact.n_iter


# =============================================================================
# Reference implementation
# =============================================================================

def test_matches_scikit_learn_lloyd_from_same_start():
    df = DataGenerator().generate_blobs([(0, 0), (5, 0), (2.5, 4)], points_per_center=30,
                                        spread=0.3, seed=3)
    points = [Point(x, y) for x, y in zip(df["x"], df["y"])]
    start = initial_centroids(points, 3)

    result = run_kmeans(points, 3)
    reference = KMeans(
        n_clusters=3,
        init=np.array([c.as_tuple() for c in start]),
        n_init=1,
        max_iter=100,
        tol=0.0,
        algorithm="lloyd",
    ).fit(df[["x", "y"]].to_numpy())

    assert result.converged
    assert list(result.labels) == reference.labels_.tolist()
    np.testing.assert_allclose(
        np.array([c.as_tuple() for c in result.centroids]),
        reference.cluster_centers_,
        atol=1e-9,
    )
    assert result.wcss == pytest.approx(reference.inertia_)


def test_engine_reseed_policy_with_more_clusters_than_points():
    points = [Point(0, 0), Point(1, 0)]
    result = run_kmeans(points, 3, empty_cluster_policy="reseed")

    # the third centroid is reseeded onto (0, 0) and loses the tie to cluster 1
    assert result.converged
    assert result.centroids == (Point(1, 0), Point(0, 0), Point(0, 0))
    assert result.clusters == ((Point(1, 0),), (Point(0, 0),), ())
    assert result.labels == (1, 0)
    assert result.wcss == 0.0
    assert Counter(p for cluster in result.clusters for p in cluster) == Counter(points)


def test_engine_reseed_policy_partitions_the_input(uniform_points):
    result = run_kmeans(uniform_points, 8, empty_cluster_policy="reseed")

    assert sum(len(cluster) for cluster in result.clusters) == len(uniform_points)
    assert Counter(p for cluster in result.clusters for p in cluster) == Counter(uniform_points)


def test_counts_must_be_integers():
    points = [Point(0, 0), Point(1, 0), Point(2, 0)]
    for k in (2.0, True, "2"):
        with pytest.raises(InvalidArgumentError):
            initial_centroids(points, k)

    assert len(initial_centroids(points, np.int64(2))) == 2

    engine = KMeansEngine()
    engine.initialize(points, 2)
    with pytest.raises(InvalidArgumentError):
        engine.run(2.5)
    assert engine.state is EngineState.INITIALIZED


def test_result_survives_copy_and_pickle(diamond_points):
    result = run_kmeans(diamond_points, 4)

    assert copy.deepcopy(result) == result
    restored = pickle.loads(pickle.dumps(result))
    assert restored == result
    assert restored.centroids == result.centroids
