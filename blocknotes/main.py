"""FastAPI application entry point."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blocknotes import __version__
from blocknotes.api.router import router as pages_router
from blocknotes.config import get_settings
from blocknotes.dependencies import logger

settings = get_settings()

app = FastAPI(title="Blocknotes", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pages_router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "storage_path": str(settings.storage_path),
    }


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {"name": "Blocknotes", "version": __version__, "docs": "/docs"}


logger.info("app_startup", extra={"storage_path": str(settings.storage_path)})
