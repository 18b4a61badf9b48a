"""HTTP download helpers for artwork, mockup and overlay images."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import urlparse

import requests

from . import config
from .errors import UpstreamFetchError
from .imaging import ImagePayload

logger = logging.getLogger(__name__)


def _filename_from_url(url: str) -> str:
    name = PurePosixPath(urlparse(url).path).name
    return name or "image"


def download_image(url: str, timeout: Optional[int] = None) -> ImagePayload:
    """
    Fetch an image over HTTP.

    Raises:
        UpstreamFetchError: on network failures and non-2xx responses.
    """
    if timeout is None:
        timeout = config.get_settings().request_timeout_seconds
    try:
        resp = requests.get(url, timeout=(5, timeout))
    except requests.RequestException as exc:
        raise UpstreamFetchError(url, detail=f"{type(exc).__name__}: {exc}") from exc

    if not resp.ok:
        raise UpstreamFetchError(url, status=resp.status_code)

    mime_type = resp.headers.get("Content-Type", "application/octet-stream").split(";")[0].strip()
    logger.debug("fetch: %s -> %d bytes (%s)", url, len(resp.content), mime_type)
    return ImagePayload(data=resp.content, mime_type=mime_type, filename=_filename_from_url(url))
