"""
MODULE: services/whatsapp.py
PURPOSE: Outbound WhatsApp messages through a company's Evolution API instance.

Each company stores its own Evolution credentials:
    evolution_api_url, evolution_api_key, whatsapp_instance_name

Sending never raises on HTTP or transport errors. The caller has already
persisted the appointment, so a failed send is logged and reported only.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class EvolutionGateway:
    """Send text messages through one Evolution API instance."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        instance_name: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.instance_name = instance_name
        self.timeout = timeout
        self._transport = transport

    @property
    def send_text_url(self) -> str:
        return f"{self.base_url}/message/sendText/{self.instance_name}"

    async def send_text(self, number: str, text: str) -> bool:
        """POST a text message; True when the API answers 2xx."""

        if not text or not text.strip():
            logger.warning("[WHATSAPP] Refusing to send an empty message to %s", number)
            return False
        if not number:
            logger.warning("[WHATSAPP] No phone number to send to")
            return False

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as http_client:
                response = await http_client.post(
                    self.send_text_url,
                    json={"number": number, "text": text},
                    headers={
                        "Content-Type": "application/json",
                        "apikey": self.api_key,
                    },
                )
        except httpx.HTTPError as exc:
            logger.error("[WHATSAPP] Send to %s failed: %s", number, exc)
            return False

        if 200 <= response.status_code < 300:
            logger.info("[WHATSAPP] Message sent to %s (status=%s)", number, response.status_code)
            return True
        logger.error(
            "[WHATSAPP] Send to %s rejected: %s - %s",
            number, response.status_code, response.text[:500],
        )
        return False


def gateway_for_company(
    company: Optional[Dict[str, Any]],
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Optional[EvolutionGateway]:
    """Build the company's gateway, or None if WhatsApp is not configured."""

    if not company:
        return None
    base_url = company.get("evolution_api_url")
    api_key = company.get("evolution_api_key")
    instance = company.get("whatsapp_instance_name")
    if not (base_url and api_key and instance):
        logger.info("[WHATSAPP] Company %s has no Evolution API credentials", company.get("id"))
        return None
    return EvolutionGateway(base_url, api_key, instance, transport=transport)
