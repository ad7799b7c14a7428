"""
API Package
-----------
FastAPI routers for the /api/v1 surface.
"""
