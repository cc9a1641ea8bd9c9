# Routers package
from . import auth_router
from . import analysis_router

__all__ = [
    "auth_router",
    "analysis_router",
]
