"""Cluster model - one cluster of a finished k-means run."""
from core.point import squared_distance


class Cluster:
    """A cluster of points sharing a common centroid."""

    def __init__(self, id, centroid):
        self.id = id
        self.centroid = centroid
        self.points = []

    def add_point(self, point):
        """Add a point to this cluster."""
        self.points.append(point)

    def get_point_count(self):
        return len(self.points)

    def is_empty(self):
        return len(self.points) == 0

    def get_point_locations(self):
        """Return list of (x, y) tuples for member points."""
        return [point.as_tuple() for point in self.points]

    def wcss(self):
        """Sum of squared distances from members to the centroid."""
        return sum(squared_distance(point, self.centroid) for point in self.points)

    def max_distance(self):
        """Distance from the centroid to its farthest member (0 if empty)."""
        if self.is_empty():
            return 0.0
        return max(point.distance_to(self.centroid) for point in self.points)

    def get_stats(self):
        """Return statistics about this cluster."""
        return {
            'id': self.id,
            'centroid': self.centroid.as_tuple(),
            'n_points': self.get_point_count(),
            'wcss': self.wcss(),
            'max_distance': self.max_distance(),
        }

    def __repr__(self):
        return f"Cluster(id={self.id}, points={len(self.points)})"

    def __str__(self):
        return f"Cluster {self.id}: {self.get_point_count()} points around ({self.centroid.x:.3f}, {self.centroid.y:.3f})"
