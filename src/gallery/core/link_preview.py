"""Link preview client used to pre-fill a project's image URL."""

import httpx

from src.gallery.core.config import get_settings
from src.gallery.core.logging import get_logger

logger = get_logger(__name__)


class LinkPreviewClient:
    """Client for the microlink metadata API.

    Best effort only: any transport error, non-200 response, or missing image
    yields None, and registration never depends on the result.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings()
        self.base_url = base_url or settings.link_preview_api_url
        self.timeout = timeout or settings.link_preview_timeout_seconds
        self._client = client

    async def fetch_image_url(self, url: str) -> str | None:
        """Return a representative image URL for `url`, or None if there is none."""
        url = url.strip()
        if not url:
            return None
        try:
            if self._client is not None:
                response = await self._client.get(self.base_url, params={"url": url})
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(self.base_url, params={"url": url})
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Link preview request failed", url=url, error=str(e))
            return None

        if not isinstance(payload, dict) or payload.get("status") != "success":
            status = payload.get("status") if isinstance(payload, dict) else None
            logger.info("Link preview unavailable", url=url, status=status)
            return None
        data = payload.get("data")
        image = data.get("image") if isinstance(data, dict) else None
        image_url = image.get("url") if isinstance(image, dict) else None
        return image_url if isinstance(image_url, str) and image_url else None
