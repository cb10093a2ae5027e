"""Pytest configuration and shared booking-store fixtures."""

import sys
from pathlib import Path
from typing import Any, Dict

import pytest

# Ensure project root is on PYTHONPATH
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


SUMMARY_TEXT = (
    "📋 *Detalhes do Agendamento*\n"
    "👤 Nome: Maria Silva\n"
    "💇 Serviço: Corte de Cabelo (R$ 60,00)\n"
    "👨 Profissional: Magnus\n"
    "📅 Data: 05/07/2025\n"
    "🕐 Horário: 14:30\n"
    "\n"
    "Está tudo correto? Responda SIM para confirmar."
)


def build_sample_db() -> Dict[str, Any]:
    """A small store: one barbershop with WhatsApp, one salon without."""

    return {
        "companies": [
            {
                "id": 2,
                "name": "Barbearia Magnus",
                "evolution_api_url": "https://evo.example.com/",
                "evolution_api_key": "key-123",
                "whatsapp_instance_name": "magnus",
            },
            {"id": 3, "name": "Studio Bela"},
        ],
        "services": [
            {"id": 14, "company_id": 2, "name": "Corte de Cabelo Masculino", "price": "60.00", "duration": 30},
            {"id": 15, "company_id": 2, "name": "Barba", "price": "35.00", "duration": 20},
            {"id": 16, "company_id": 2, "name": "Corte Infantil", "price": "40.00", "duration": 30},
            {"id": 17, "company_id": 2, "name": "Corte Degradê", "price": "70.00", "duration": 45, "is_active": False},
            {"id": 21, "company_id": 3, "name": "Corte de Cabelo Feminino", "price": "90.00", "duration": 60},
        ],
        "professionals": [
            {"id": 10, "company_id": 2, "name": "Magnus"},
            {"id": 11, "company_id": 2, "name": "João Pedro"},
            {"id": 30, "company_id": 3, "name": "Magnus Silva"},
        ],
        "conversations": [
            {"id": 111, "company_id": 2, "phone_number": "5511999990000", "contact_name": "Maria"},
            {"id": 112, "company_id": 3, "phone_number": "5511888880000", "contact_name": "Ana"},
        ],
        "messages": [
            {
                "id": 1, "conversation_id": 111, "role": "user",
                "content": "Oi, quero marcar um corte", "timestamp": "2025-07-04T10:00:00",
            },
            {
                "id": 2, "conversation_id": 111, "role": "assistant",
                "content": "Claro! 💇 Serviço: Corte de Cabelo Masculino. Para qual data?",
                "timestamp": "2025-07-04T10:01:00",
            },
            {
                "id": 3, "conversation_id": 111, "role": "user",
                "content": "Amanhã às 14:30, meu nome é Maria Silva", "timestamp": "2025-07-04T10:02:00",
            },
            {
                "id": 4, "conversation_id": 111, "role": "assistant",
                "content": SUMMARY_TEXT, "timestamp": "2025-07-04T10:03:00",
            },
            {
                "id": 5, "conversation_id": 112, "role": "assistant",
                "content": "Olá! Qual serviço você gostaria de agendar?", "timestamp": "2025-07-04T09:00:00",
            },
        ],
        "appointments": [],
        "config": {},
    }


@pytest.fixture
def sample_db() -> Dict[str, Any]:
    """In-memory store, fresh for each test."""
    return build_sample_db()


@pytest.fixture
def db_path(tmp_path, monkeypatch) -> Path:
    """Sample store written to disk and exposed through AGENDAY_DB_PATH."""
    from workflows.io.database import save_db

    path = tmp_path / "agenday_database.json"
    save_db(build_sample_db(), path)
    monkeypatch.setenv("AGENDAY_DB_PATH", str(path))
    return path
