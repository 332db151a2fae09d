"""
HTTP routers.
"""

from .ior import router as ior_router
from .ude import router as ude_router

__all__ = ["ior_router", "ude_router"]
