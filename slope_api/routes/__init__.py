"""API route package for the FastAPI application."""

from .internal import internal_router
from .slope import slope_router

__all__ = ["internal_router", "slope_router"]
