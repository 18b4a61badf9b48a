"""
FastAPI layer exposing mockup previews.

Endpoints:
 - GET /
 - GET /health
 - GET /{product}-preview?url=<artworkUrl>
 - GET /cutout?url=<artworkUrl>
"""

from __future__ import annotations

import logging
from typing import Callable, Optional
from urllib.parse import urlparse

from fastapi import FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from . import config
from .cache import PreviewCache
from .errors import InvalidArtworkUrlError, PreviewError, UpstreamFetchError
from .mockups import build_mockup_specs
from .pipeline import PreviewRenderer, build_remover

settings = config.get_settings()
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


def _validate_artwork_url(url: Optional[str]) -> str:
    if not url:
        raise InvalidArtworkUrlError()
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise InvalidArtworkUrlError()
    return url


def _error_response(exc: PreviewError) -> JSONResponse:
    if exc.status_code < 500:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
    body = {"error": exc.message, "detail": exc.detail}
    if exc.stage:
        body["stage"] = exc.stage
    if isinstance(exc, UpstreamFetchError) and exc.status is not None:
        body["status"] = exc.status
    return JSONResponse(status_code=exc.status_code, content=body)


def _png_or_error(route: str, url: Optional[str], produce: Callable[[str], bytes]) -> Response:
    try:
        artwork_url = _validate_artwork_url(url)
        png_bytes = produce(artwork_url)
    except PreviewError as exc:
        if exc.status_code >= 500:
            logger.error("%s failed url=%s stage=%s: %s", route, url, exc.stage, exc.detail)
        else:
            logger.info("%s rejected url=%s: %s", route, url, exc.detail)
        return _error_response(exc)
    except Exception as exc:  # noqa: BLE001
        logger.exception("%s failed url=%s: %s", route, url, exc)
        return JSONResponse(
            status_code=500,
            content={"error": f"Internal error in {route}", "detail": str(exc) or type(exc).__name__},
        )
    return Response(content=png_bytes, media_type="image/png")


def create_app(renderer: Optional[PreviewRenderer] = None) -> FastAPI:
    """Build the application; the renderer (and its cache) lives as long as the app."""
    app = FastAPI(title="Mockup Preview Service", version="0.1.0")
    if renderer is None:
        renderer = PreviewRenderer(
            remover=build_remover(settings),
            cache=PreviewCache(),
            mockups=build_mockup_specs(settings),
        )
    app.state.renderer = renderer

    @app.get("/", response_class=PlainTextResponse)
    def index():
        return f"mockup-preview-service ({renderer.remover.name}) is running."

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/cutout")
    def cutout(url: Optional[str] = None):
        return _png_or_error("/cutout", url, renderer.cutout)

    @app.get("/{product}-preview")
    def preview(product: str, url: Optional[str] = None):
        return _png_or_error(
            f"/{product}-preview", url, lambda artwork_url: renderer.render(product, artwork_url)
        )

    return app


app = create_app()
