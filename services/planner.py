"""Clustering Planner - main orchestrator for a clustering run."""
import math

from core.exceptions import EngineStateError
from services.points import PointService
from services.clustering import ClusteringService
from services.visualization import VisualizationService


class ClusteringPlanner:
    """Main orchestrator that coordinates all services for a clustering run."""

    def __init__(self, config):
        self.config = config

        # Data containers
        self.points = []
        self.clusters = []
        self.elbow = None

        # Services
        self.point_service = PointService(config)
        self.clustering_service = ClusteringService(config)
        self.visualization_service = VisualizationService(config)

        # State
        self.stats = {}

    def generate_points(self, count=None, seed=None):
        """Generate the input point set."""
        count = count or self.config.NUM_POINTS
        seed = seed if seed is not None else self.config.RANDOM_SEED

        print(f"[1] Generating {count} points...")
        self.points = self.point_service.generate_points(count, seed)
        print(f"    OK: {len(self.points)} points generated")

        return self.points

    def select_num_clusters(self, max_k=None):
        """Find the optimal number of clusters with the elbow heuristic."""
        max_k = max_k or self.config.MAX_K

        print(f"[2] Selecting cluster count (k = 1..{max_k})...")
        self.elbow = self.clustering_service.select_num_clusters(self.points, max_k)

        for i, wcss in enumerate(self.elbow.wcss_values):
            k = i + 1
            ratio = self.elbow.ratios[i]
            wcss_text = f"{wcss:.4f}" if math.isfinite(wcss) else "failed (empty cluster)"
            ratio_text = f", ratio {ratio:.4f}" if math.isfinite(ratio) else ""
            marker = "  ←" if k == self.elbow.optimal_k else ""
            print(f"   k={k}: WCSS {wcss_text}{ratio_text}{marker}")

        print(f"    OK: optimal number of clusters: {self.elbow.optimal_k}")

        return self.elbow.optimal_k

    def create_clusters(self, num_clusters=None):
        """Cluster the points with the selected k."""
        if num_clusters is None:
            if self.elbow is None:
                raise EngineStateError("No cluster count selected; call select_num_clusters() first")
            num_clusters = self.elbow.optimal_k

        print(f"[3] Creating {num_clusters} clusters...")
        self.clusters = self.clustering_service.cluster_points(self.points, num_clusters)

        result = self.clustering_service.result
        status = "converged" if result.converged else "iteration limit reached"
        print(f"    OK: {len(self.clusters)} clusters created "
              f"({result.n_iter} iterations, {status})")

        for cluster in self.clusters:
            print(f"   {cluster}")

        return self.clusters

    def validate_clusters(self):
        """Check that the clusters partition the input."""
        is_valid, violations = self.clustering_service.validate_partition(self.clusters, self.points)

        if is_valid:
            print(f"    OK: every point assigned to exactly one cluster")
        else:
            print(f"   WARNING: {len(violations)} points not partitioned correctly")

        return is_valid

    def generate_maps(self):
        """Generate HTML visualizations."""
        print(f"[4] Generating maps...")

        files = self.visualization_service.create_all_maps(self.points, self.clusters, self.elbow)

        print(f"    OK: {files[0]} (points)")
        print(f"    OK: {files[1]} (clusters)")
        if len(files) > 2:
            print(f"    OK: {files[2]} (elbow curve)")

        return files

    def calculate_statistics(self):
        """Calculate summary statistics."""
        result = self.clustering_service.result

        sizes = [cluster.get_point_count() for cluster in self.clusters]

        self.stats = {
            'total_points': len(self.points),
            'num_clusters': len(self.clusters),
            'optimal_k': self.elbow.optimal_k if self.elbow else None,
            'iterations': result.n_iter if result else 0,
            'converged': result.converged if result else False,
            'wcss': round(result.wcss, 6) if result else None,
            'smallest_cluster': min(sizes) if sizes else 0,
            'largest_cluster': max(sizes) if sizes else 0,
        }

        return self.stats

    def print_summary(self):
        """Print execution summary."""
        stats = self.calculate_statistics()

        print("\n" + "=" * 50)
        print("                    SUMMARY")
        print("=" * 50)
        print(f"✓ Total Points: {stats['total_points']}")
        print(f"✓ Optimal k: {stats['optimal_k']}")
        print(f"✓ Clusters: {stats['num_clusters']}")
        print(f"✓ Iterations: {stats['iterations']} ({'converged' if stats['converged'] else 'not converged'})")
        print(f"✓ WCSS: {stats['wcss']}")
        print(f"✓ Cluster Sizes: {stats['smallest_cluster']}-{stats['largest_cluster']} points")
        print("=" * 50 + "\n")

    def run(self, render=True):
        """Execute the full clustering pipeline."""
        print("\n" + "=" * 50)
        print("        K-MEANS CLUSTERING")
        print("=" * 50)
        print(f"   Config: {self.config.NUM_POINTS} points, max k {self.config.MAX_K}, "
              f"{self.config.MAX_ITERATIONS} iterations")
        print("=" * 50 + "\n")

        self.generate_points()
        self.select_num_clusters()
        self.create_clusters()
        self.validate_clusters()
        if render:
            self.generate_maps()
        self.print_summary()

        return self.stats
