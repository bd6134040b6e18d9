# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from storefront.api.routers import cart, health, orders, profile
from storefront.data.database import init_db
from storefront.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    try:
        init_db()
        logger.info("Database tables ready")
    except Exception as e:
        logger.error("Failed to create tables", error=str(e))
        raise
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(profile.router)
    app.include_router(cart.router)
    app.include_router(orders.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
