"""Clustering Service - handles point clustering operations."""
from collections import Counter

from core.cluster import Cluster
from services.selection import ClusterCountSelector
from utils.kmeans import run_kmeans


class ClusteringService:
    """Service for clustering points into groups."""

    def __init__(self, config, max_iterations=None):
        self.config = config
        self.max_iterations = max_iterations or config.MAX_ITERATIONS
        self.tolerance = config.CONVERGENCE_TOLERANCE
        self.empty_cluster_policy = config.EMPTY_CLUSTER_POLICY
        self.result = None
        self.selector = ClusterCountSelector(
            max_iterations=self.max_iterations,
            tolerance=self.tolerance,
            empty_cluster_policy=self.empty_cluster_policy
        )

    def select_num_clusters(self, points, max_k=None):
        """
        Pick the number of clusters with the elbow heuristic.

        Args:
            points: List of Point objects
            max_k: Largest k to try (defaults to config.MAX_K)

        Returns:
            ElbowResult with the optimal k and the WCSS curve
        """
        if max_k is None:
            max_k = self.config.MAX_K
        return self.selector.evaluate(points, max_k)

    def cluster_points(self, points, num_clusters):
        """
        Cluster points into groups.

        Args:
            points: List of Point objects
            num_clusters: Number of clusters to create

        Returns:
            List of Cluster objects with points assigned
        """
        self.result = run_kmeans(
            points,
            num_clusters,
            max_iterations=self.max_iterations,
            tolerance=self.tolerance,
            empty_cluster_policy=self.empty_cluster_policy
        )

        clusters = []
        for i, centroid in enumerate(self.result.centroids):
            cluster = Cluster(id=i, centroid=centroid)
            for point in self.result.clusters[i]:
                cluster.add_point(point)
            clusters.append(cluster)

        return clusters

    def validate_partition(self, clusters, points):
        """
        Check that every input point sits in exactly one cluster.

        Args:
            clusters: List of Cluster objects
            points: The original input points

        Returns:
            Tuple of (is_valid, list of violations)
        """
        violations = []

        expected = Counter(points)
        actual = Counter(point for cluster in clusters for point in cluster.points)

        for point, count in expected.items():
            if actual[point] != count:
                violations.append({
                    'point': point.as_tuple(),
                    'expected': count,
                    'found': actual[point]
                })

        for point in actual.keys() - expected.keys():
            violations.append({
                'point': point.as_tuple(),
                'expected': 0,
                'found': actual[point]
            })

        return len(violations) == 0, violations
