"""Visualization Service - renders points, clusters and the elbow curve as HTML."""
import hashlib
import math
import os
import random

import folium


class VisualizationService:
    """Service for creating Folium visualizations on a flat (non-geographic) plane."""

    def __init__(self, config):
        self.config = config
        self.output_dir = config.OUTPUT_DIR
        self.palette = list(config.CLUSTER_PALETTE)
        self.cluster_colors = {}

    def _get_cluster_color(self, cluster_id):
        """Palette color for the first clusters, a stable hashed color after that."""
        if cluster_id < len(self.palette):
            return self.palette[cluster_id]

        if cluster_id not in self.cluster_colors:
            seed_str = f"cluster_{cluster_id}_color_seed"
            hash_value = int(hashlib.md5(seed_str.encode()).hexdigest(), 16)
            rng = random.Random(hash_value)

            golden_ratio = 0.618033988749895
            hue = int((cluster_id * golden_ratio * 360) % 360)
            hue = (hue + rng.randint(-30, 30)) % 360
            saturation = rng.randint(65, 95)
            lightness = rng.randint(40, 70)

            self.cluster_colors[cluster_id] = f'hsl({hue}, {saturation}%, {lightness}%)'
        return self.cluster_colors[cluster_id]

    @staticmethod
    def _location(x, y):
        # Simple CRS takes [row, column] = [y, x]
        return [y, x]

    def _new_map(self, xs, ys):
        """Create an empty plane fitted to the given coordinates."""
        min_x, max_x = min(xs), max(xs)
        min_y, max_y = min(ys), max(ys)

        m = folium.Map(
            location=self._location((min_x + max_x) / 2, (min_y + max_y) / 2),
            zoom_start=8,
            min_zoom=-10,
            crs='Simple',
            tiles=None
        )
        if max_x > min_x or max_y > min_y:
            m.fit_bounds([self._location(min_x, min_y), self._location(max_x, max_y)])
        return m

    def _save(self, m, name):
        os.makedirs(self.output_dir, exist_ok=True)
        filename = os.path.join(self.output_dir, name)
        m.save(filename)
        return filename

    def build_points_map(self, points):
        """Plane with all input points in a single color."""
        m = self._new_map([p.x for p in points], [p.y for p in points])

        for i, point in enumerate(points):
            folium.CircleMarker(
                location=self._location(point.x, point.y),
                radius=3,
                color='#000000',
                fill=True,
                fill_opacity=0.7,
                popup=f"<b>Point {i}</b><br>({point.x:.4f}, {point.y:.4f})"
            ).add_to(m)

        return m

    def build_clusters_map(self, clusters):
        """Plane with points colored by cluster and a large marker per centroid."""
        xs = [c.centroid.x for c in clusters] + [p.x for c in clusters for p in c.points]
        ys = [c.centroid.y for c in clusters] + [p.y for c in clusters for p in c.points]
        m = self._new_map(xs, ys)

        for cluster in clusters:
            color = self._get_cluster_color(cluster.id)

            for point in cluster.points:
                folium.CircleMarker(
                    location=self._location(point.x, point.y),
                    radius=3,
                    color=color,
                    fill=True,
                    fill_opacity=0.8,
                    popup=f"<b>Cluster:</b> {cluster.id}<br>({point.x:.4f}, {point.y:.4f})"
                ).add_to(m)

        # Centroids on top of their members
        for cluster in clusters:
            folium.CircleMarker(
                location=self._location(cluster.centroid.x, cluster.centroid.y),
                radius=10,
                color='#000000',
                fill=True,
                fill_color='#000000',
                fill_opacity=1.0,
                popup=f"<b>Cluster {cluster.id}</b><br>"
                      f"{cluster.get_point_count()} points<br>"
                      f"WCSS {cluster.wcss():.4f}"
            ).add_to(m)

        return m

    def build_elbow_map(self, elbow):
        """
        WCSS curve drawn on the plane.

        k runs along the horizontal axis; WCSS is scaled into [0, max_k - 1]
        so both axes share a comparable range. The selected k is highlighted.
        """
        samples = [(i + 1, w) for i, w in enumerate(elbow.wcss_values) if math.isfinite(w)]
        if not samples:
            return self._new_map([1, elbow.max_k], [0, 1])

        top = max(w for _, w in samples) or 1.0
        scale = (elbow.max_k - 1) / top
        curve = [(k, w * scale) for k, w in samples]

        m = self._new_map([k for k, _ in curve], [y for _, y in curve])

        folium.PolyLine(
            [self._location(k, y) for k, y in curve],
            color='#2563eb',
            weight=3,
            opacity=0.8,
            popup="<b>WCSS by k</b>"
        ).add_to(m)

        for (k, wcss), (_, y) in zip(samples, curve):
            selected = k == elbow.optimal_k
            ratio = elbow.ratios[k - 1]
            ratio_text = f"{ratio:.4f}" if math.isfinite(ratio) else "n/a"
            folium.CircleMarker(
                location=self._location(k, y),
                radius=8 if selected else 4,
                color='#dc2626' if selected else '#2563eb',
                fill=True,
                fill_opacity=0.9,
                popup=f"<b>k = {k}</b>{' (selected)' if selected else ''}<br>"
                      f"WCSS {wcss:.4f}<br>"
                      f"Ratio {ratio_text}"
            ).add_to(m)

        return m

    def create_points_map(self, points):
        return self._save(self.build_points_map(points), "points.html")

    def create_clusters_map(self, clusters):
        return self._save(self.build_clusters_map(clusters), "clusters.html")

    def create_elbow_map(self, elbow):
        return self._save(self.build_elbow_map(elbow), "elbow.html")

    def create_all_maps(self, points, clusters, elbow=None):
        """Create all visualizations and return the written file names."""
        files = [
            self.create_points_map(points),
            self.create_clusters_map(clusters),
        ]
        if elbow is not None:
            files.append(self.create_elbow_map(elbow))
        return files
