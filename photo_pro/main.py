"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import edits, health
from .core.editor import PhotoEditor
from .providers import GeminiClient
from .utils.config import Config, load_config
from .utils.logger import get_logger, set_log_level

logger = get_logger(__name__)


def create_client(config: Config) -> GeminiClient:
    """Build the Gemini client handle from loaded configuration."""
    return GeminiClient(
        api_key=config.api_key,
        model=config.gemini_model,
        base_url=config.gemini_base_url,
        timeout=config.timeout_gemini_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown.

    Loads configuration once and refuses to start without the API
    credential. The client handle is threaded into the editor explicitly.
    """
    logger.info("Application starting up...")

    try:
        config = load_config()
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    set_log_level(config.log_level)

    gemini = create_client(config)
    await gemini.initialize()

    app.state.config = config
    app.state.gemini = gemini
    app.state.editor = PhotoEditor(client=gemini)

    logger.info("Application startup complete", extra={"model": config.gemini_model})

    try:
        yield
    finally:
        logger.info("Application shutting down...")
        await gemini.close()
        app.state.editor = None
        logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="AI Photo Pro",
    description="Edit photos with natural-language instructions",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware; the API takes no cookies or auth headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(edits.router, prefix="/api/edit", tags=["edit"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "photo-pro",
        "version": __version__,
        "status": "running",
        "docs": "/docs",
    }


def run():
    """Console entry point; refuses to start without the API credential."""
    import uvicorn

    port = load_config().port

    uvicorn.run(
        "photo_pro.main:app",
        host="0.0.0.0",
        port=port,
        log_level="info",
    )


if __name__ == "__main__":
    run()
