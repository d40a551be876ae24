import logging
from typing import Dict

from fastapi import FastAPI

from journey_import.config import settings
from journey_import.routes import router as api_router


def configure_logging() -> None:
    """Configure logging for the application."""
    # Set logging level from environment variable
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if settings.is_production:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    else:
        logging.getLogger("uvicorn.access").setLevel(logging.INFO)

    # Share page fetches would otherwise log every request
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at {settings.LOG_LEVEL} level")
    logger.info(f"Environment: {settings.ENVIRONMENT_NAME}")


# Configure logging before creating the app
configure_logging()

app = FastAPI(
    title=settings.API_TITLE,
    version=settings.VERSION,
    description="Turn shared AI conversations, exports and pasted transcripts into steps",
)

app.include_router(api_router)


@app.get("/")
async def root() -> Dict[str, str]:
    """Get basic API information."""
    return {"message": settings.API_TITLE}


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Check API health status."""
    return {"status": "healthy"}
