from .misc import router as misc_router
from .reachability import router as reachability_router

__all__ = ["misc_router", "reachability_router"]
