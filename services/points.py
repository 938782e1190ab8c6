"""Point Service - handles point set generation and conversion."""
from core.exceptions import InvalidArgumentError
from core.point import Point
from utils.data_generator import DataGenerator


class PointService:
    """Service for generating and converting point sets."""

    def __init__(self, config):
        self.config = config
        self.data_generator = DataGenerator()

    def generate_points(self, count, seed=None):
        """
        Generate uniformly distributed points in [0, 1) x [0, 1).

        Args:
            count: Number of points to generate
            seed: Random seed for reproducibility

        Returns:
            List of Point objects
        """
        df = self.data_generator.generate(n=count, seed=seed)
        return self.points_from_frame(df)

    def generate_blobs(self, centers, points_per_center=25, spread=0.02, seed=None):
        """Generate points grouped around the given centers."""
        df = self.data_generator.generate_blobs(
            centers,
            points_per_center=points_per_center,
            spread=spread,
            seed=seed
        )
        return self.points_from_frame(df)

    @staticmethod
    def points_from_frame(df):
        """Convert a DataFrame with x, y columns into Points."""
        return [Point(row.x, row.y) for row in df.itertuples(index=False)]

    @staticmethod
    def points_from_pairs(pairs):
        """
        Convert [[x, y], ...] into Points.

        Raises:
            InvalidArgumentError: if an entry is not a pair of numbers
        """
        points = []
        for i, pair in enumerate(pairs):
            try:
                x, y = pair
                points.append(Point(float(x), float(y)))
            except (TypeError, ValueError):
                raise InvalidArgumentError(f"Point {i} is not an [x, y] pair: {pair!r}") from None
        return points
