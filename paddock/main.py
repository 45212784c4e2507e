import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from paddock.auth_config import auth_backend, fastapi_users
from paddock.core.clock import utcnow
from paddock.core.config import settings
from paddock.db import check_database_health
from paddock.schemas.user import UserCreate, UserRead, UserUpdate
from paddock.services.migration_service import run_migrations

from .api.routes import blocks, conversations, hosts, messages

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting application...")
    try:
        if settings.RUN_MIGRATIONS_ON_STARTUP:
            await run_migrations()
        await check_database_health()
        logger.info("Database health check passed - application ready")
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        logger.error("Application startup aborted due to database issues")
        raise

    yield

    logger.info("Application shutting down...")


app = FastAPI(title="Paddock messaging", lifespan=lifespan)


app.include_router(
    fastapi_users.get_auth_router(auth_backend), prefix="/auth/jwt", tags=["auth"]
)
app.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/auth",
    tags=["auth"],
)
app.include_router(
    fastapi_users.get_users_router(UserRead, UserUpdate),
    prefix="/users",
    tags=["users"],
)
app.include_router(conversations.conversations_router_instance)
app.include_router(messages.messages_router_instance)
app.include_router(hosts.hosts_router_instance)
app.include_router(blocks.blocks_router_instance)


@app.get("/health")
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    return {"status": "healthy", "timestamp": utcnow().isoformat()}
