"""HTTP API routers for API Pulse."""
