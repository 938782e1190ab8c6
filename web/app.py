"""
Flask Web Application for the clustering engine.

Provides a JSON API and an HTML view for:
- Generating sample point sets
- Clustering points with a fixed or automatically selected k
- Inspecting the elbow (WCSS) curve
"""
import math
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import Flask, jsonify, request
from dotenv import load_dotenv

load_dotenv()

from config import Config
from core.exceptions import InvalidArgumentError
from services.clustering import ClusteringService
from services.points import PointService
from services.visualization import VisualizationService

app = Flask(__name__)
app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'dev-secret-key')

point_service = PointService(Config)
visualization_service = VisualizationService(Config)


def _finite_or_none(value):
    return value if math.isfinite(value) else None


def _read_points(body):
    """Extract the point list from a request body."""
    if not isinstance(body, dict) or 'points' not in body:
        raise InvalidArgumentError("Request body must be a JSON object with a 'points' list")
    if not isinstance(body['points'], list):
        raise InvalidArgumentError("'points' must be a list of [x, y] pairs")
    return point_service.points_from_pairs(body['points'])


def _read_int(source, name, default):
    value = source.get(name, default)
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    raise InvalidArgumentError(f"'{name}' must be an integer (got {value!r})")


def _elbow_to_dict(elbow):
    return {
        'optimal_k': elbow.optimal_k,
        'max_k': elbow.max_k,
        'wcss': [_finite_or_none(w) for w in elbow.wcss_values],
        'ratios': [_finite_or_none(r) for r in elbow.ratios],
    }


def _clusters_to_dict(clusters, result):
    return {
        'k': result.k,
        'iterations': result.n_iter,
        'converged': result.converged,
        'wcss': result.wcss,
        'centroids': [list(c.as_tuple()) for c in result.centroids],
        'labels': list(result.labels),
        'clusters': [{
            'id': cluster.id,
            'centroid': list(cluster.centroid.as_tuple()),
            'points': [list(p) for p in cluster.get_point_locations()],
            'wcss': cluster.wcss(),
        } for cluster in clusters],
    }


# =============================================================================
# Web Pages
# =============================================================================

@app.route('/map')
def clusters_page():
    """Render a fresh clustering of generated points."""
    try:
        n = _read_int(request.args, 'n', Config.NUM_POINTS)
        seed = _read_int(request.args, 'seed', Config.RANDOM_SEED)
        if n < 1:
            raise InvalidArgumentError("'n' must be >= 1")

        points = point_service.generate_points(n, seed)
        clustering_service = ClusteringService(Config)
        elbow = clustering_service.select_num_clusters(points)
        clusters = clustering_service.cluster_points(points, elbow.optimal_k)

        m = visualization_service.build_clusters_map(clusters)
        return m.get_root().render()
    except InvalidArgumentError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        return jsonify({'error': str(e)}), 500


# =============================================================================
# REST API
# =============================================================================

@app.route('/api/health')
def api_health():
    return jsonify({'status': 'ok'})


@app.route('/api/config')
def api_config():
    """Get clustering defaults."""
    return jsonify(Config.as_dict())


@app.route('/api/points')
def api_points():
    """Generate uniformly distributed sample points."""
    try:
        n = _read_int(request.args, 'n', Config.NUM_POINTS)
        seed = _read_int(request.args, 'seed', Config.RANDOM_SEED)
        if n < 1:
            raise InvalidArgumentError("'n' must be >= 1")

        points = point_service.generate_points(n, seed)
        return jsonify({'points': [list(p.as_tuple()) for p in points]})
    except InvalidArgumentError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@app.route('/api/cluster', methods=['POST'])
def api_cluster():
    """
    Cluster the posted points.

    Body: { "points": [[x, y], ...], "k": int?, "max_k": int?, "max_iterations": int? }
    When "k" is omitted the elbow heuristic picks it.
    """
    try:
        body = request.get_json(silent=True)
        points = _read_points(body)
        k = _read_int(body, 'k', None)
        max_k = _read_int(body, 'max_k', Config.MAX_K)

        max_iterations = _read_int(body, 'max_iterations', None)
        if max_iterations is not None and max_iterations < 1:
            raise InvalidArgumentError("'max_iterations' must be >= 1")
        clustering_service = ClusteringService(Config, max_iterations=max_iterations)

        elbow = None
        if k is None:
            elbow = clustering_service.select_num_clusters(points, max_k)
            k = elbow.optimal_k

        clusters = clustering_service.cluster_points(points, k)

        response = _clusters_to_dict(clusters, clustering_service.result)
        if elbow is not None:
            response['elbow'] = _elbow_to_dict(elbow)

        return jsonify(response)
    except InvalidArgumentError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@app.route('/api/elbow', methods=['POST'])
def api_elbow():
    """
    Compute the WCSS curve and the elbow k for the posted points.

    Body: { "points": [[x, y], ...], "max_k": int? }
    """
    try:
        body = request.get_json(silent=True)
        points = _read_points(body)
        max_k = _read_int(body, 'max_k', Config.MAX_K)

        clustering_service = ClusteringService(Config)
        elbow = clustering_service.select_num_clusters(points, max_k)

        return jsonify(_elbow_to_dict(elbow))
    except InvalidArgumentError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        return jsonify({'error': str(e)}), 500


# =============================================================================
# Run Server
# =============================================================================

if __name__ == '__main__':
    print("\n" + "="*50)
    print("  K-Means Clustering API")
    print("="*50)
    print("  Open: http://localhost:5000/map")
    print("="*50 + "\n")
    app.run(debug=True, port=5000)
