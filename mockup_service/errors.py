"""Exceptions raised by the preview pipeline, mapped to HTTP statuses by the API layer."""

from __future__ import annotations

from typing import Optional


class PreviewError(Exception):
    """Base class for request-level preview failures."""

    status_code = 500
    message = "Preview rendering failed"

    def __init__(self, detail: str = "", *, stage: Optional[str] = None):
        super().__init__(detail or self.message)
        self.detail = detail or self.message
        self.stage = stage


class InvalidArtworkUrlError(PreviewError):
    status_code = 400
    message = "Parameter 'url' is missing or invalid."


class UnknownProductError(PreviewError):
    status_code = 404
    message = "Unknown product"


class UpstreamFetchError(PreviewError):
    message = "Could not fetch image"

    def __init__(self, url: str, status: Optional[int] = None, detail: str = "", *, stage: Optional[str] = None):
        if not detail:
            detail = f"HTTP {status}" if status is not None else "network error"
        super().__init__(detail, stage=stage)
        self.url = url
        self.status = status


class ImageDecodeError(PreviewError):
    message = "Invalid image data"


class MockupMetadataError(PreviewError):
    message = "Could not read mockup dimensions"


class MockupNotConfiguredError(PreviewError):
    message = "Mockup URL is not configured"


class BackgroundRemovalError(Exception):
    """Recoverable: callers fall back to the RGBA-coerced original."""
