"""Service layer: index lifecycle and query orchestration."""
