"""FastAPI application entrypoint for the EmbedVideo service."""
from __future__ import annotations

from typing import Final

from fastapi import FastAPI

from embedvideo.api.http import router as api_router
from embedvideo.core.config import Settings, get_settings
from embedvideo.core.logging import setup_logging


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Notes
    -----
    - Logging is configured up front based on settings; settings are loaded once.
    - The resolver and its HTTP client are built lazily on first use.

    Returns
    -------
    FastAPI
        The configured FastAPI application.
    """

    settings: Settings = get_settings()
    setup_logging(settings.debug)

    app: FastAPI = FastAPI(title=settings.app_name)
    app.include_router(api_router)

    @app.get("/health", tags=["system"])
    def health() -> dict[str, str]:
        """Health check endpoint; does not perform external calls."""

        resp: dict[str, str] = {"status": "ok"}
        resp["ffprobe"] = "present" if settings.ffprobe_location.is_file() else "missing"
        return resp

    return app


app: Final[FastAPI] = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("embedvideo.main:app", host="127.0.0.1", port=8000, reload=True)
