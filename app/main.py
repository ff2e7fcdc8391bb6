from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from app.config import get_settings
from app.database import init_db, close_db
from app.api import products, health
from app.utils.errors import register_exception_handlers

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")

    logger.info("Creating database tables...")
    init_db()

    yield

    # Shutdown
    logger.info("Shutting down application...")
    close_db()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    A REST API for managing a product inventory.

    - **Products**: list, search, filter and paginate; fetch, create, update and delete
    - **Metrics**: inventory value, price statistics, low-stock and price rankings
    - **Health**: liveness and database readiness probes

    ## Errors
    Every error uses the same envelope: `{"error", "message", "details"}`.
    Validation failures return 400 with one entry in `details` per violated field.
    """,
    version=settings.APP_VERSION,
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT"
    },
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API routers
app.include_router(health.router)
app.include_router(products.router)


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health"
    }
