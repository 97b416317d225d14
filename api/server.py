"""
Mona API Server - persistence and board endpoints for the client board.
"""

import logging
from datetime import datetime

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.account_router import account_router
from api.board_router import board_router
from api.data_router import data_router
from api.deps import get_store
from api.response_models import HealthResponse
from api.views_router import views_router
from mona import __version__, config
from mona.cache import get_cache
from mona.observability import CorrelationIdMiddleware, configure_logging
from mona.store import ClientStore

logger = logging.getLogger(__name__)

# FastAPI app initialization
app = FastAPI(
    title="Mona API",
    description="Client board: accounts, client storage and board projections",
    version=__version__,
)

# CORS middleware - configurable via CORS_ORIGINS env var
# Dev default: allow all origins; Production: set CORS_ORIGINS to comma-separated list
cors_origins = (
    ["*"] if config.CORS_ORIGINS == "*" else [o.strip() for o in config.CORS_ORIGINS.split(",")]
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(account_router)
app.include_router(data_router)
app.include_router(views_router)
app.include_router(board_router)


@app.get("/api/health", response_model=HealthResponse)
async def health_check(store: ClientStore = Depends(get_store)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "store": store.backend_name,
        "timestamp": datetime.now().isoformat(),
        "cache": get_cache().stats().to_dict(),
    }


# ==== Main ====


def main(host: str | None = None, port: int | None = None):
    """Run the server."""
    configure_logging(config.LOG_LEVEL, config.LOG_JSON)
    host = host or config.HOST
    port = port or config.PORT
    logger.info(f"Mona API listening on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
