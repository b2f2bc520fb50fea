"""REST API for NurseCare (FastAPI)."""
