"""Cluster Count Selection - elbow heuristic over the WCSS curve."""
from __future__ import annotations

import math
from typing import NamedTuple, Sequence

from core.exceptions import DegenerateClusterError, InvalidArgumentError
from core.point import Point
from utils.kmeans import require_count, run_kmeans


MIN_MAX_K = 3


class ElbowResult(NamedTuple):
    """
    Outcome of a k = 1..max_k sweep.

    wcss_values[i] belongs to k = i + 1 (nan when that run failed).
    ratios[i] is the elbow ratio of sample i; the first and last samples are
    never candidates and always hold inf.
    """
    optimal_k: int
    max_k: int
    wcss_values: tuple[float, ...]
    ratios: tuple[float, ...]


def compute_wcss_values(points: Sequence[Point], max_k: int, max_iterations: int = 100,
                        tolerance: float | None = None,
                        empty_cluster_policy: str = "keep") -> list[float]:
    """WCSS of a fresh k-means run for every k in 1..max_k."""
    wcss_values = []
    for k in range(1, max_k + 1):
        try:
            result = run_kmeans(points, k, max_iterations=max_iterations, tolerance=tolerance,
                                empty_cluster_policy=empty_cluster_policy)
        except DegenerateClusterError:
            wcss_values.append(math.nan)
            continue
        wcss_values.append(result.wcss)
    return wcss_values


def elbow_ratios(wcss_values: Sequence[float]) -> list[float]:
    """
    Ratio of successive WCSS decreases for every interior sample.

        ratio(i) = |wcss[i] - wcss[i+1]| / |wcss[i-1] - wcss[i]|

    Undefined ratios (zero denominator, nan input) are inf so they never win.
    """
    n = len(wcss_values)
    ratios = [math.inf] * n
    for i in range(1, n - 1):
        numerator = abs(wcss_values[i] - wcss_values[i + 1])
        denominator = abs(wcss_values[i - 1] - wcss_values[i])
        if denominator == 0 or not math.isfinite(numerator) or not math.isfinite(denominator):
            continue
        ratios[i] = numerator / denominator
    return ratios


def elbow_index(wcss_values: Sequence[float]) -> int:
    """
    0-based index of the sample with the smallest ratio.

    Ties go to the lowest index. Returns 0 when no ratio is defined.
    """
    best_index = 0
    min_ratio = math.inf
    for i, ratio in enumerate(elbow_ratios(wcss_values)):
        if ratio < min_ratio:
            min_ratio = ratio
            best_index = i
    return best_index


class ClusterCountSelector:
    """Picks the number of clusters with the elbow heuristic."""

    def __init__(self, max_iterations: int = 100, tolerance: float | None = None,
                 empty_cluster_policy: str = "keep") -> None:
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.empty_cluster_policy = empty_cluster_policy

    def evaluate(self, points: Sequence[Point], max_k: int) -> ElbowResult:
        """Run the sweep and return the full WCSS curve with its ratios."""
        require_count("max_k", max_k)
        if max_k < MIN_MAX_K:
            raise InvalidArgumentError(
                f"max_k must be >= {MIN_MAX_K} to form a ratio of WCSS differences (got {max_k})"
            )
        if not points:
            raise InvalidArgumentError("Point set is empty")

        wcss_values = compute_wcss_values(
            points, max_k,
            max_iterations=self.max_iterations,
            tolerance=self.tolerance,
            empty_cluster_policy=self.empty_cluster_policy,
        )
        ratios = elbow_ratios(wcss_values)

        # sample i holds the WCSS of k = i + 1
        optimal_k = elbow_index(wcss_values) + 1

        return ElbowResult(
            optimal_k=optimal_k,
            max_k=max_k,
            wcss_values=tuple(wcss_values),
            ratios=tuple(ratios),
        )

    def select_optimal_k(self, points: Sequence[Point], max_k: int) -> int:
        return self.evaluate(points, max_k).optimal_k
