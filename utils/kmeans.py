"""KMeans engine - Lloyd iterations with circular deterministic seeding."""
from __future__ import annotations

import math
from enum import Enum
from typing import NamedTuple, Sequence

import numpy as np

from core.exceptions import DegenerateClusterError, EngineStateError, InvalidArgumentError
from core.point import Point, squared_distance


EMPTY_CLUSTER_POLICIES = ("keep", "reseed", "raise")


class EngineState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    CONVERGED = "converged"
    ITERATION_LIMIT_REACHED = "iteration_limit_reached"
    FAILED = "failed"


class KMeansResult(NamedTuple):
    """Plain result of one finished engine run."""
    k: int
    centroids: tuple[Point, ...]
    clusters: tuple[tuple[Point, ...], ...]
    labels: tuple[int, ...]
    n_iter: int
    converged: bool
    wcss: float
    wcss_history: tuple[float, ...]


# =============================================================================
# Step functions
# =============================================================================

def require_count(name: str, value, minimum: int = 1) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidArgumentError(f"{name} must be an integer (got {value!r})")
    if value < minimum:
        raise InvalidArgumentError(f"{name} must be >= {minimum} (got {value})")


def _as_array(points: Sequence[Point]) -> np.ndarray:
    return np.array([[p.x, p.y] for p in points], dtype=float).reshape(-1, 2)


def initial_centroids(points: Sequence[Point], k: int) -> list[Point]:
    """
    Place k centroids evenly on the data's bounding circle.

    The circle is centred on the mean C of all points and its radius R is the
    largest distance from any point to C. Centroid i sits at angle 2*pi*i/k,
    so with k == 1 the only centroid is C + (R, 0), not C itself.
    """
    if not points:
        raise InvalidArgumentError("Point set is empty")
    require_count("k", k)

    center = Point.mean(points)
    radius = max(p.distance_to(center) for p in points)

    return [
        Point(radius * math.cos(2 * math.pi * i / k) + center.x,
              radius * math.sin(2 * math.pi * i / k) + center.y)
        for i in range(k)
    ]


def assign_points(points: Sequence[Point], centroids: Sequence[Point]) -> list[int]:
    """Index of the nearest centroid for every point (ties go to the lowest index)."""
    coords = _as_array(points)
    centers = _as_array(centroids)
    diff = coords[:, np.newaxis, :] - centers[np.newaxis, :, :]
    distances = np.sqrt(np.sum(diff ** 2, axis=2))
    return np.argmin(distances, axis=1).tolist()


def group_by_label(points: Sequence[Point], labels: Sequence[int], k: int) -> list[list[Point]]:
    clusters: list[list[Point]] = [[] for _ in range(k)]
    for point, label in zip(points, labels):
        clusters[label].append(point)
    return clusters


def update_centroids(points: Sequence[Point], labels: Sequence[int],
                     centroids: Sequence[Point], policy: str = "keep",
                     iteration: int = 0) -> list[Point]:
    """
    Recompute every centroid as the mean of its members.

    Empty clusters follow ``policy``:
        keep   - the previous centroid is carried over unchanged
        reseed - the centroid jumps to the point farthest from its own centroid
        raise  - DegenerateClusterError
    """
    coords = _as_array(points)
    label_array = np.asarray(labels, dtype=int)
    new_centroids = list(centroids)
    empty = []

    for i in range(len(centroids)):
        members = coords[label_array == i]
        if len(members) == 0:
            empty.append(i)
            continue
        mean = members.mean(axis=0)
        new_centroids[i] = Point(mean[0], mean[1])

    if not empty:
        return new_centroids

    if policy == "raise":
        raise DegenerateClusterError(empty[0], iteration)

    if policy == "reseed":
        own = _as_array([centroids[label] for label in labels])
        spread = np.sum((coords - own) ** 2, axis=1)
        # stable sort keeps input order among equally distant points
        candidates = np.argsort(-spread, kind="stable").tolist()
        for i, point_index in zip(empty, candidates):
            new_centroids[i] = points[point_index]

    return new_centroids


def centroids_changed(old: Sequence[Point], new: Sequence[Point],
                      tolerance: float | None = None) -> bool:
    if tolerance is None:
        return any(a != b for a, b in zip(old, new))
    return any(a.distance_to(b) > tolerance for a, b in zip(old, new))


def calculate_wcss(centroids: Sequence[Point], clusters: Sequence[Sequence[Point]]) -> float:
    """Within-cluster sum of squared distances to each cluster's centroid."""
    wcss = 0.0
    for centroid, cluster in zip(centroids, clusters):
        for point in cluster:
            wcss += squared_distance(point, centroid)
    return wcss


# =============================================================================
# Engine
# =============================================================================

class KMeansEngine:
    """
    Single k-means run for a fixed k.

    Usage:
        engine = KMeansEngine()
        engine.initialize(points, k)
        centroids = engine.run(100)
        clusters = engine.get_clusters()

    run() may be called once per initialize(); re-running requires
    re-initializing.
    """

    def __init__(self, tolerance: float | None = None, empty_cluster_policy: str = "keep") -> None:
        if empty_cluster_policy not in EMPTY_CLUSTER_POLICIES:
            raise InvalidArgumentError(
                f"Unknown empty cluster policy: {empty_cluster_policy!r} "
                f"(expected one of {', '.join(EMPTY_CLUSTER_POLICIES)})"
            )
        if tolerance is not None and tolerance < 0:
            raise InvalidArgumentError(f"tolerance must be >= 0 (got {tolerance})")
        self.tolerance = tolerance
        self.empty_cluster_policy = empty_cluster_policy
        self.state = EngineState.UNINITIALIZED
        self._points: tuple[Point, ...] = ()
        self._k = 0
        self._centroids: list[Point] = []
        self._labels: list[int] = []
        self._clusters: list[list[Point]] | None = None
        self._n_iter = 0
        self._wcss_history: list[float] = []

    def initialize(self, points: Sequence[Point], k: int) -> list[Point]:
        centroids = initial_centroids(points, k)
        self._points = tuple(points)
        self._k = k
        self._centroids = centroids
        self._labels = []
        self._clusters = None
        self._n_iter = 0
        self._wcss_history = []
        self.state = EngineState.INITIALIZED
        return list(centroids)

    def run(self, max_iterations: int) -> list[Point]:
        if self.state is EngineState.UNINITIALIZED:
            raise EngineStateError("initialize() must be called before run()")
        if self.state is not EngineState.INITIALIZED:
            raise EngineStateError("run() was already called; initialize() again to re-run")
        require_count("max_iterations", max_iterations)

        self.state = EngineState.ITERATION_LIMIT_REACHED
        for iteration in range(max_iterations):
            self._labels = assign_points(self._points, self._centroids)
            self._clusters = group_by_label(self._points, self._labels, self._k)

            try:
                new_centroids = update_centroids(
                    self._points, self._labels, self._centroids,
                    policy=self.empty_cluster_policy, iteration=iteration,
                )
            except DegenerateClusterError:
                self.state = EngineState.FAILED
                raise
            changed = centroids_changed(self._centroids, new_centroids, self.tolerance)
            self._centroids = new_centroids
            self._n_iter = iteration + 1
            self._wcss_history.append(calculate_wcss(self._centroids, self._clusters))

            if not changed:
                self.state = EngineState.CONVERGED
                break

        return list(self._centroids)

    def get_clusters(self) -> list[list[Point]]:
        if self._clusters is None:
            raise EngineStateError("get_clusters() is only valid after run()")
        return [list(cluster) for cluster in self._clusters]

    @property
    def k(self) -> int:
        return self._k

    @property
    def centroids(self) -> list[Point]:
        return list(self._centroids)

    @property
    def labels(self) -> list[int]:
        return list(self._labels)

    @property
    def n_iter(self) -> int:
        return self._n_iter

    @property
    def converged(self) -> bool:
        return self.state is EngineState.CONVERGED

    @property
    def wcss_history(self) -> list[float]:
        return list(self._wcss_history)

    def result(self) -> KMeansResult:
        clusters = self.get_clusters()
        return KMeansResult(
            k=self._k,
            centroids=tuple(self._centroids),
            clusters=tuple(tuple(cluster) for cluster in clusters),
            labels=tuple(self._labels),
            n_iter=self._n_iter,
            converged=self.converged,
            wcss=calculate_wcss(self._centroids, clusters),
            wcss_history=tuple(self._wcss_history),
        )

    def __repr__(self):
        return f"KMeansEngine(k={self._k}, state={self.state.value}, n_iter={self._n_iter})"


def run_kmeans(points: Sequence[Point], k: int, max_iterations: int = 100,
               tolerance: float | None = None, empty_cluster_policy: str = "keep") -> KMeansResult:
    """Run a fresh engine to completion and return only its result."""
    engine = KMeansEngine(tolerance=tolerance, empty_cluster_policy=empty_cluster_policy)
    engine.initialize(points, k)
    engine.run(max_iterations)
    return engine.result()
