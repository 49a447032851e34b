"""HTTP server for Slack Events API deliveries (FastAPI + uvicorn)."""
