"""
Uploads to the external image host.

Uploads are best effort: any failure is logged and reported as ``None`` so the
offer/profile write can proceed without an image.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from troq.core.config import get_settings

logger = logging.getLogger(__name__)

OFFERS_FOLDER = "troq_offers"
AVATARS_FOLDER = "troq_avatars"


@dataclass
class Upload:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class MediaService:
    """Thin client for the media host's multipart upload endpoint."""

    def __init__(self, upload_url: str | None = None, api_key: str | None = None, timeout: float | None = None,
                 transport: httpx.BaseTransport | None = None) -> None:
        settings = get_settings()
        self.upload_url = upload_url if upload_url is not None else settings.media_upload_url
        self.api_key = api_key if api_key is not None else settings.media_api_key
        self.timeout = timeout if timeout is not None else settings.media_upload_timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.upload_url)

    def upload(self, upload: Upload | None, *, folder: str) -> Optional[str]:
        """Send the image and return its hosted URL, or None when anything fails."""
        if upload is None or not upload.content:
            return None
        if not self.enabled:
            logger.warning("MEDIA_UPLOAD_URL not configured; skipping upload of %s", upload.filename)
            return None
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        files = {"file": (upload.filename, upload.content, upload.content_type)}
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.upload_url, data={"folder": folder}, files=files, headers=headers)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Image upload to %s failed: %s", self.upload_url, exc)
            return None
        url = (payload.get("secure_url") or payload.get("url")) if isinstance(payload, dict) else None
        if not url:
            logger.error("Media host answered without a URL: %r", payload)
            return None
        logger.info("Image uploaded: %s", url)
        return url
