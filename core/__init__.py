"""Core models for the clustering engine."""
from core.point import Point
from core.cluster import Cluster
from core.exceptions import (
    ClusteringError,
    InvalidArgumentError,
    DegenerateClusterError,
    EngineStateError,
)

__all__ = [
    "Point",
    "Cluster",
    "ClusteringError",
    "InvalidArgumentError",
    "DegenerateClusterError",
    "EngineStateError",
]
