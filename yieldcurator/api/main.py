"""FastAPI application for Yield Curator."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from yieldcurator.api.routers import curate
from yieldcurator.api.schemas.response import HealthResponse
from yieldcurator.logger import get_logger

logger = get_logger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Yield Curator API",
    description="Risk-scored DeFi yield curation, allocation and backtesting",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware - allow requests from the web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(curate.router, prefix="/api/curate", tags=["curate"])


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    logger.info("Starting Yield Curator API server")
    logger.info("API documentation available at /docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down Yield Curator API server")


@app.get("/", response_model=HealthResponse)
async def root():
    """Root endpoint with basic API information."""
    return HealthResponse(status="running", version="1.0.0")


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version="1.0.0")
