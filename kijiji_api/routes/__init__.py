from .listings import router as listings_router
from .stats import router as stats_router

__all__ = ["listings_router", "stats_router"]
