"""WhatsApp Cloud API client (template messages + media upload).

One attempt per call: no retries, no backoff. A failure surfaces as a
MessagingError subclass carrying the HTTP status and response body, so the
batch dispatcher can record it as-is.
"""

from __future__ import annotations

import base64
import binascii
import logging
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

import httpx

from sheetdash.config.model import Credentials, GlobalConfig
from sheetdash.core.exceptions import MediaUploadError, SendError
from sheetdash.services.templates import TemplateMessage

logger = logging.getLogger(__name__)


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """Split "data:<mime>;base64,<payload>" into (mime, raw bytes)."""
    try:
        meta, encoded = data_url.split(",", 1)
        mime = meta.split(":", 1)[1].split(";", 1)[0]
        raw = base64.b64decode(encoded, validate=True)
    except (IndexError, ValueError, binascii.Error) as e:
        raise MediaUploadError(f"Invalid image data URL: {e}") from e
    if not mime:
        raise MediaUploadError("Image data URL has no MIME type")
    return mime, raw


def default_file_name(mime: str, now: Optional[datetime] = None) -> str:
    """file_<iso timestamp with ':' and '.' replaced>.<subtype>"""
    now = now or datetime.now(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S-%f")[:-3] + "Z"
    return f"file_{stamp}.{mime.split('/')[-1]}"


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text[:500] if response.text else None


class WhatsAppClient:
    """Async client for the Graph API messages / media endpoints of one phone number."""

    def __init__(
        self,
        credentials: Credentials,
        global_config: GlobalConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.global_config = global_config
        self.base_url = (
            f"{global_config.graph_api_base}/{global_config.graph_api_version}/{credentials.phone_number_id}"
        )
        self.headers = {"Authorization": f"Bearer {credentials.whatsapp_token}"}
        self._client = httpx.AsyncClient(
            timeout=global_config.request_timeout,
            headers=self.headers,
            transport=transport,
        )

    async def __aenter__(self) -> WhatsAppClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def recipient(self, number: str) -> str:
        return f"{self.global_config.country_code}{number.strip()}"

    async def upload_media(self, data_url: str) -> str:
        """
        Upload an image and return its media id.

        Raises:
            MediaUploadError: on a malformed data URL, transport error or non-2xx response
        """
        mime, raw = decode_data_url(data_url)
        files = {"file": (default_file_name(mime), raw, mime)}
        data = {"type": mime, "messaging_product": self.global_config.messaging_product}

        try:
            response = await self._client.post(f"{self.base_url}/media", data=data, files=files)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise MediaUploadError(
                f"Error uploading file: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                response=_response_body(e.response),
            ) from e
        except httpx.HTTPError as e:
            raise MediaUploadError(f"Error uploading file: {e}") from e

        media_id = _response_body(response)
        media_id = media_id.get("id") if isinstance(media_id, dict) else None
        if not media_id:
            raise MediaUploadError("Error uploading file: no media id in response", status_code=response.status_code)

        logger.info("Media uploaded", extra={"media_id": media_id, "mime": mime, "size": len(raw)})
        return str(media_id)

    async def send_template(self, message: TemplateMessage, number: str) -> dict:
        """
        Send one template message to a number (country code is prepended).

        Raises:
            SendError: on transport error or non-2xx response
        """
        to = self.recipient(number)
        payload = message.to_payload(to)

        try:
            response = await self._client.post(f"{self.base_url}/messages", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Messaging API rejected message",
                extra={"to": to, "status_code": e.response.status_code, "template": message.template_name},
            )
            raise SendError(
                f"Message to {to} failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                response=_response_body(e.response),
            ) from e
        except httpx.HTTPError as e:
            logger.warning("Messaging API connection error", extra={"to": to, "error": str(e)})
            raise SendError(f"Message to {to} failed: {e}") from e

        logger.info("Message sent", extra={"to": to, "template": message.template_name})
        return _response_body(response) or {}
