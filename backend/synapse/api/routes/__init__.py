"""API Routes — explicitly registered routers (no auto-discovery)."""
