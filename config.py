"""
Configuration settings for the clustering system.

This module centralizes all configuration parameters for point generation,
clustering, cluster-count selection and visualization.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _optional_float(name):
    value = os.getenv(name, "").strip()
    return float(value) if value else None


def _optional_int(name):
    value = os.getenv(name, "").strip()
    return int(value) if value else None


class Config:
    """Central configuration for the clustering system."""

    # =========================================================================
    # Point Generation
    # =========================================================================
    NUM_POINTS: int = int(os.getenv("NUM_POINTS", "100"))
    RANDOM_SEED: int | None = _optional_int("RANDOM_SEED")  # None → fresh points each run

    # =========================================================================
    # Clustering
    # =========================================================================
    MAX_K: int = int(os.getenv("MAX_K", "10"))
    MAX_ITERATIONS: int = int(os.getenv("MAX_ITERATIONS", "100"))  # Per k-means run

    # None → centroids must match exactly to count as converged
    CONVERGENCE_TOLERANCE: float | None = _optional_float("CONVERGENCE_TOLERANCE")

    # "keep" (default), "reseed" or "raise"
    # keep   → an empty cluster keeps its centroid until it wins points again
    # reseed → an empty cluster jumps to the point farthest from its centroid
    # raise  → DegenerateClusterError; the elbow sweep skips that k
    EMPTY_CLUSTER_POLICY: str = os.getenv("EMPTY_CLUSTER_POLICY", "keep")

    # =========================================================================
    # Visualization
    # =========================================================================
    OUTPUT_DIR: str = os.getenv("OUTPUT_DIR", "maps")
    CLUSTER_PALETTE: list[str] = [
        "#FF0000", "#0000FF", "#008000", "#FFA500", "#FF00FF"
    ]

    @classmethod
    def as_dict(cls) -> dict:
        """Clustering defaults as a plain dict."""
        return {
            'num_points': cls.NUM_POINTS,
            'random_seed': cls.RANDOM_SEED,
            'max_k': cls.MAX_K,
            'max_iterations': cls.MAX_ITERATIONS,
            'convergence_tolerance': cls.CONVERGENCE_TOLERANCE,
            'empty_cluster_policy': cls.EMPTY_CLUSTER_POLICY,
            'output_dir': cls.OUTPUT_DIR,
        }
