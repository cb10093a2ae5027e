"""Evolution API gateway: request shape and failure handling."""

from __future__ import annotations

import asyncio
import json

import httpx

from services.whatsapp import EvolutionGateway, gateway_for_company


def _gateway(handler) -> EvolutionGateway:
    return EvolutionGateway(
        "https://evo.example.com/",
        "key-123",
        "magnus",
        transport=httpx.MockTransport(handler),
    )


class TestSendText:

    def test_posts_number_and_text(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"status": "PENDING"})

        assert asyncio.run(_gateway(handler).send_text("5511999990000", "Olá")) is True

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://evo.example.com/message/sendText/magnus"
        assert request.headers["apikey"] == "key-123"
        assert json.loads(request.content) == {"number": "5511999990000", "text": "Olá"}

    def test_error_status_returns_false(self):
        gateway = _gateway(lambda request: httpx.Response(401, text="Unauthorized"))

        assert asyncio.run(gateway.send_text("5511999990000", "Olá")) is False

    def test_transport_error_returns_false(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert asyncio.run(_gateway(handler).send_text("5511999990000", "Olá")) is False

    def test_empty_text_is_not_sent(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200)

        assert asyncio.run(_gateway(handler).send_text("5511999990000", "  ")) is False
        assert asyncio.run(_gateway(handler).send_text("", "Olá")) is False
        assert seen == []


class TestGatewayForCompany:

    def test_configured_company(self):
        company = {
            "id": 2,
            "evolution_api_url": "https://evo.example.com",
            "evolution_api_key": "key-123",
            "whatsapp_instance_name": "magnus",
        }

        gateway = gateway_for_company(company)

        assert gateway is not None
        assert gateway.send_text_url == "https://evo.example.com/message/sendText/magnus"

    def test_missing_credentials(self):
        assert gateway_for_company({"id": 3, "evolution_api_url": "https://evo.example.com"}) is None
        assert gateway_for_company(None) is None
