# phonedeals/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from phonedeals.api.errors import register_exception_handlers
from phonedeals.api.routers import (
    admin,
    carts,
    health,
    listings,
    notifications,
    orders,
    phones,
    sessions,
    users,
    wishlists,
)
from phonedeals.data.database import Base, engine
from phonedeals.data import models  # noqa: F401 (registers every table on Base.metadata)
from phonedeals.services.notification_service import NotificationBroadcaster
from phonedeals.services.session_store import SessionStore
from phonedeals.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()

    logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created")
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise

    app.state.broadcaster = NotificationBroadcaster()
    app.state.session_store = SessionStore()

    yield

    app.state.broadcaster.close()
    app.state.session_store.close()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title="OldPhoneDeals",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(health.router)
    app.include_router(phones.router)
    app.include_router(sessions.router)
    app.include_router(users.router)
    app.include_router(listings.router)
    app.include_router(carts.router)
    app.include_router(wishlists.router)
    app.include_router(orders.router)
    app.include_router(admin.router)
    app.include_router(notifications.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
