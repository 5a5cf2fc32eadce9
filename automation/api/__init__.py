"""HTTP surface (FastAPI routers and dependencies)."""
