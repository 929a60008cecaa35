"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from pizzeria import __version__
from pizzeria.api import inventory, orders
from pizzeria.api.deps import get_state
from pizzeria.config import get_settings
from pizzeria.errors import PizzeriaError
from pizzeria.state.manager import StateManager, get_state_manager
from pizzeria.utils.logging import get_logger, setup_logging

# Setup logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("application_starting", environment=get_settings().environment)

    state_manager = await get_state_manager()
    logger.info("state_manager_initialized")

    yield

    logger.info("application_shutting_down")
    await state_manager.disconnect()


app = FastAPI(
    title="Pizzeria Order Service",
    description="Build-a-pizza ordering with stock reservation and order tracking",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PizzeriaError)
async def pizzeria_error_handler(request: Request, exc: PizzeriaError) -> JSONResponse:
    """Business rule violations go back to the caller with a precise reason."""
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=exc.code,
        detail=exc.message,
    )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.code},
        headers=headers,
    )


@app.exception_handler(RedisError)
async def storage_error_handler(request: Request, exc: RedisError) -> JSONResponse:
    logger.error("storage_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "error": "StorageError"},
    )


@app.get("/health")
async def health_check(state_manager: StateManager = Depends(get_state)) -> JSONResponse:
    """Health check endpoint."""
    try:
        await state_manager.ping()
    except RedisError as e:
        logger.warning("health_check_failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "service": "pizzeria", "redis": "down"},
        )
    return JSONResponse(content={"status": "healthy", "service": "pizzeria", "redis": "up"})


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "message": "Pizzeria Order Service API",
        "docs": "/docs",
        "health": "/health",
    }


app.include_router(orders.router, prefix="/api/v1")
app.include_router(inventory.router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "pizzeria.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development",
    )
