"""Service layer: generation, clustering, selection, rendering and orchestration."""
