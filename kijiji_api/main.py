"""
Kijiji Vehicles API: read access to captured listings, snapshots and exports.

Run with `uvicorn kijiji_api.main:app`.
"""
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kijiji_scraper.errors import StorageError, StorageUnavailable

from .config import config
from .database import get_store, get_statistics
from .routes import listings_router, stats_router

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(config.LOG_FILE_PATH, encoding="utf-8"),
    ],
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # schema is created on first start so an empty install serves empty lists
    get_store().init()
    logger.info(f"Serving listings from {config.DB_PATH}")
    yield
    logger.info("Kijiji Vehicles API stopped")


async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"{request.method} {request.url.path}: {exc}")
    status = 503 if isinstance(exc, StorageUnavailable) else 500
    return JSONResponse(status_code=status, content={"detail": "Storage error"})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    app = FastAPI(
        title=config.API_TITLE,
        version=config.API_VERSION,
        description=config.API_DESCRIPTION,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/health")
    async def health():
        """Liveness plus the saved listing count."""
        stats = get_statistics()
        return {
            "status": "healthy",
            "version": config.API_VERSION,
            "database": config.DB_PATH,
            "listings": stats["total_listings"],
        }

    app.include_router(listings_router)
    app.include_router(stats_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("kijiji_api.main:app", host=config.HOST, port=config.PORT,
                log_level=config.LOG_LEVEL.lower())
