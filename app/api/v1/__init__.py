"""API v1: aggregated router."""

from app.api.v1.router import api_router

__all__ = ["api_router"]
