"""Data Generator - generates synthetic 2-D point sets."""
import numpy as np
import pandas as pd


class DataGenerator:
    """Generates points uniformly inside a rectangular area."""

    def __init__(self, bounds=(0.0, 0.0, 1.0, 1.0)):
        # (min_x, min_y, max_x, max_y), upper edges excluded
        self.bounds = bounds

    def generate(self, n=100, seed=None):
        """
        Generate n random points inside the bounds.

        Args:
            n: Number of points to generate
            seed: Random seed for reproducibility (None for fresh randomness)

        Returns:
            DataFrame with id, x, y columns
        """
        rng = np.random.default_rng(seed)
        min_x, min_y, max_x, max_y = self.bounds

        xs = rng.uniform(min_x, max_x, size=n)
        ys = rng.uniform(min_y, max_y, size=n)

        df = pd.DataFrame({
            "id": np.arange(1, n + 1),
            "x": xs,
            "y": ys,
        })

        return df

    def generate_blobs(self, centers, points_per_center=25, spread=0.02, seed=None):
        """
        Generate normally distributed points around the given centers.

        Args:
            centers: List of (x, y) tuples
            points_per_center: Number of points drawn around each center
            spread: Standard deviation of each blob
            seed: Random seed for reproducibility

        Returns:
            DataFrame with id, x, y, blob columns
        """
        rng = np.random.default_rng(seed)
        rows = []

        for blob, (cx, cy) in enumerate(centers):
            offsets = rng.normal(0.0, spread, size=(points_per_center, 2))
            for dx, dy in offsets:
                rows.append((cx + dx, cy + dy, blob))

        df = pd.DataFrame(rows, columns=["x", "y", "blob"])
        df.insert(0, "id", np.arange(1, len(df) + 1))

        return df
