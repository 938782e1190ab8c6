"""Exceptions raised by the clustering core."""


class ClusteringError(Exception):
    """Base class for all clustering errors."""


class InvalidArgumentError(ClusteringError, ValueError):
    """Raised for empty point sets, k < 1, max_k < 3 and similar bad input."""


class DegenerateClusterError(ClusteringError, ArithmeticError):
    """A cluster lost all of its members during an iteration."""

    def __init__(self, cluster_index, iteration):
        self.cluster_index = cluster_index
        self.iteration = iteration
        super().__init__(
            f"Cluster {cluster_index} has no members after iteration {iteration}"
        )


class EngineStateError(ClusteringError, RuntimeError):
    """An engine operation was called in the wrong state."""
