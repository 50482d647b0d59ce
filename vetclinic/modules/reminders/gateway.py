"""Semaphore SMS gateway client."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from vetclinic.core.config import settings
from vetclinic.core.exceptions import GatewayError

logger = logging.getLogger(__name__)


class SmsGateway(Protocol):
    async def send(self, number: str, message: str) -> None:
        """Deliver one message or raise GatewayError."""


class SemaphoreGateway:
    """Posts form-encoded messages to the Semaphore API.

    A 2xx response means the provider accepted the message, which is all the
    reminder flags record. Timeouts and transport errors count as failures.
    """

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        sender_name: str | None = None,
        timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_url = api_url or settings.sms_api_url
        self.api_key = settings.sms_api_key if api_key is None else api_key
        self.sender_name = sender_name or settings.sms_sender_name
        self.timeout_seconds = timeout_seconds or settings.sms_timeout_seconds
        self._client = client

    async def send(self, number: str, message: str) -> None:
        if not self.api_key:
            raise GatewayError("SMS gateway is not configured")

        data = {
            "apikey": self.api_key,
            "number": number,
            "message": message,
            "sendername": self.sender_name,
        }
        client = self._client
        created_client = False
        if client is None:
            client = httpx.AsyncClient(timeout=self.timeout_seconds)
            created_client = True
        try:
            response = await client.post(self.api_url, data=data)
        except httpx.TimeoutException as exc:
            raise GatewayError("SMS gateway timed out") from exc
        except httpx.HTTPError as exc:
            raise GatewayError("SMS gateway is unavailable") from exc
        finally:
            if created_client:
                await client.aclose()

        if not response.is_success:
            logger.warning("SMS gateway rejected message to %s: %s %s", number, response.status_code, response.text)
            raise GatewayError(f"SMS gateway error {response.status_code}: {response.text[:200]}")
