# Models package (re-export feature modules for stable imports)
from .users.user import User
from .analysis.analysis import Analysis

__all__ = [
    "User",
    "Analysis",
]
