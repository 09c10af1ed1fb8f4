"""Web gateway: FastAPI app, routers and middleware."""
