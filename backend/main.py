"""
FileShare: FastAPI application entry point.

Publishes and browses the LAN for other instances on startup,
serves the peer list API and receives uploaded files.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import init_routes, router, upload_router
from config import API_HOST, API_PORT, APP_NAME, DEVICE_NAME, DOWNLOADS_DIR
from discovery.registry import PeerRegistry
from discovery.service import DiscoveryService
from transfer.storage import ensure_downloads_dir

# --- Logging ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# --- Service singletons ---
peer_registry = PeerRegistry()
discovery_service = DiscoveryService(peer_registry, DEVICE_NAME, API_PORT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start/stop background services."""
    logger.info(f"Starting {APP_NAME} services...")

    try:
        ensure_downloads_dir(DOWNLOADS_DIR)
        await discovery_service.start()

        logger.info(
            f"{APP_NAME} ready, "
            f"listening on http://{API_HOST}:{API_PORT}, "
            f"saving to {DOWNLOADS_DIR}"
        )

        yield

    except Exception as e:
        logger.error(f"Startup failed: {e}", exc_info=True)
        raise
    finally:
        logger.info(f"Shutting down {APP_NAME} services...")
        await discovery_service.stop()


# --- FastAPI app ---
app = FastAPI(
    title=APP_NAME,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Inject services into routes
init_routes(peer_registry, DEVICE_NAME, API_PORT, DOWNLOADS_DIR)
app.include_router(router)
app.include_router(upload_router)


def main() -> None:
    import uvicorn

    uvicorn.run(
        app,
        host=API_HOST,
        port=API_PORT,
        log_level="info",
    )


if __name__ == "__main__":
    main()
