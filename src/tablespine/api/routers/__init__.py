"""API routers: catalog surface and generic data surface."""
