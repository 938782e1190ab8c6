"""K-Means Clustering - Main Entry Point"""
from config import Config
from services.planner import ClusteringPlanner


if __name__ == "__main__":
    planner = ClusteringPlanner(Config)
    planner.run()
