"""
Pollinations image provider (Flux backend)

Flux needs explicit pixel dimensions. The image is fetched over HTTP and
returned inline as a data URI so later stages do not depend on the
Pollinations URL staying reachable.
"""

from typing import Optional
from urllib.parse import quote

import httpx

from shortmaker import config
from shortmaker.config.constants import IMAGE_CALL_TIMEOUT
from shortmaker.core import (
    MalformedOutputError,
    ProviderTimeoutError,
    classify_provider_error,
    encode_data_uri,
    get_logger,
)

from .base import ImageProvider, ImageRequest

logger = get_logger(__name__, component="pollinations_provider")

PROVIDER_NAME = "pollinations"


class PollinationsImageProvider(ImageProvider):
    """Pollinations image endpoint client

    Args:
        base_url: Service root, defaults to POLLINATIONS_BASE_URL
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = IMAGE_CALL_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or config.POLLINATIONS_BASE_URL).rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def build_url(self, request: ImageRequest) -> str:
        params = {
            "width": request.width or 1024,
            "height": request.height or 1024,
            "nologo": "true",
            "model": request.model_id or "flux",
        }
        if request.seed is not None:
            params["seed"] = request.seed
        query = "&".join(f"{key}={value}" for key, value in params.items())
        return f"{self.base_url}/prompt/{quote(request.prompt, safe='')}?{query}"

    async def generate_image(self, request: ImageRequest) -> str:
        url = self.build_url(request)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise ProviderTimeoutError(
                f"Image generation timed out after {self.timeout:g}s", PROVIDER_NAME
            ) from exc
        except httpx.HTTPError as exc:
            raise classify_provider_error(exc, PROVIDER_NAME, "Image generation") from exc

        mime_type = response.headers.get("content-type", "").split(";", 1)[0].strip().lower()
        if not mime_type.startswith("image/") or not response.content:
            raise MalformedOutputError(
                f"Pollinations returned {mime_type or 'no content type'} instead of an image",
                PROVIDER_NAME,
            )
        logger.debug(f"Fetched Flux image ({len(response.content)} bytes)")
        return encode_data_uri(response.content, mime_type)


__all__ = ["PollinationsImageProvider"]
