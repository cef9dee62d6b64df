"""API routers. Each module exposes create_router(services)."""
