"""HTTP client for image generation endpoints.

Requests go to an OpenAI-compatible ``images/generations`` endpoint and the
first returned image is decoded from base64. HTTP 429 is surfaced as
``RateLimitedError`` so callers can retry it; every other failure is a
``ProviderFailureError``.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from config.exceptions import ProviderFailureError, ProviderResponseParseError, RateLimitedError
from config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class ImagePayload:
    """Decoded image bytes plus their MIME type."""
    data: bytes
    mime_type: str = "image/png"

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class HttpImageClient:
    """Blocking image-generation client; run it off the event loop."""

    def __init__(
        self,
        url: str,
        api_key: Optional[str],
        model: str,
        size: str = "1024x1024",
        timeout: float = 120.0,
    ):
        self.url = url
        self.api_key = api_key
        self.model = model
        self.size = size
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpImageClient":
        return cls(
            url=settings.image_api_url,
            api_key=settings.image_api_key,
            model=settings.image_model,
            size=settings.image_size,
            timeout=settings.image_timeout_seconds,
        )

    def generate(self, prompt: str) -> ImagePayload:
        """Generate one image for ``prompt``.

        Raises:
            RateLimitedError: The endpoint answered HTTP 429.
            ProviderFailureError: Missing key, transport error or non-200 status.
            ProviderResponseParseError: The response carried no image.
        """
        if not self.api_key:
            raise ProviderFailureError("Image API key missing")

        payload = {"model": self.model, "prompt": prompt, "n": 1, "size": self.size}
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            response = requests.post(self.url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise ProviderFailureError(f"Image request failed: {e}") from e

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitedError(
                "Image request rate limited (429)",
                retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if response.status_code != 200:
            raise ProviderFailureError(
                f"Image request failed with status {response.status_code}",
                {"body": response.text[:200]},
            )

        try:
            encoded = response.json()["data"][0]["b64_json"]
            data = base64.b64decode(encoded)
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderResponseParseError("Image response carried no image", raw_response=response.text) from e

        logger.debug("Image generated: %d bytes", len(data))
        return ImagePayload(data=data)
