"""FastAPI application for the On-Call Coverage API."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from oncall import config
from oncall.db import init_db

from api.routers import coverage, shifts

logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    path = init_db()
    logger.info("Using on-call database at %s", path)
    yield


# Create FastAPI app
app = FastAPI(
    title="On-Call Coverage API",
    description="""
    REST API for on-call scheduling.

    Provides access to:
    - On-call schedule management
    - Coverage gap and overlap detection
    - Gap reports for managers
    """,
    version="0.2.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Coverage first so /on-call/coverage is not captured by /on-call/{schedule_id}
app.include_router(coverage.router, prefix="/api")
app.include_router(shifts.router, prefix="/api")


@app.get("/api/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.2.0"}


@app.get("/")
def root():
    """Root endpoint - redirect to docs."""
    return {
        "message": "On-Call Coverage API",
        "docs": "/api/docs",
        "health": "/api/health",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
