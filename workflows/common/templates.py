"""pt-BR WhatsApp texts for the booking confirmation flow."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from workflows.common.datetime_parse import format_date_br

_RESTATE_REASONS = {
    "no_confirmation_message": "Não encontrei o resumo do seu agendamento.",
    "no_service": "Não consegui identificar o serviço escolhido.",
    "no_professional": "Não consegui identificar o profissional escolhido.",
    "invalid_date": "A data informada não é válida.",
}


def format_booking_summary(
    client_name: str,
    service_name: str,
    date_text: str,
    time_text: str,
    professional_name: Optional[str] = None,
    price: Optional[Any] = None,
) -> str:
    """The summary the assistant sends before asking for a "SIM"."""

    service_line = f"💇 Serviço: {service_name}"
    if price is not None:
        service_line += f" (R$ {_format_price(price)})"
    lines = [
        "📋 *Detalhes do Agendamento*",
        f"👤 Nome: {client_name}",
        service_line,
    ]
    if professional_name:
        lines.append(f"👨 Profissional: {professional_name}")
    lines.extend([
        f"📅 Data: {date_text}",
        f"🕐 Horário: {time_text}",
        "",
        "Está tudo correto? Responda SIM para confirmar.",
    ])
    return "\n".join(lines)


def format_booking_confirmed(
    client_name: str,
    service_name: str,
    appointment_date: date,
    appointment_time: str,
    professional_name: Optional[str] = None,
    price: Optional[Any] = None,
) -> str:
    """Message sent to the client once the appointment row exists."""

    lines = [
        "✅ *Agendamento confirmado!*",
        "",
        "📋 *Detalhes do Agendamento*",
        f"👤 Nome: {client_name}",
        f"✅ Serviço: {service_name}",
    ]
    if professional_name:
        lines.append(f"👨 Profissional: {professional_name}")
    lines.extend([
        f"📅 Data: {format_date_br(appointment_date)}",
        f"⏰ Horário: {appointment_time}",
    ])
    if price is not None:
        lines.append(f"💰 Valor: R$ {_format_price(price)}")
    lines.extend(["", "Obrigado pela preferência! 😊"])
    return "\n".join(lines)


def format_restatement_prompt(reason: str) -> str:
    """Ask the client to send the booking details again."""

    intro = _RESTATE_REASONS.get(reason, "Não consegui concluir o seu agendamento.")
    return (
        f"{intro} Pode me informar novamente o seu nome, o serviço, "
        "a data (DD/MM/AAAA) e o horário desejado?"
    )


def _format_price(price: Any) -> str:
    try:
        return f"{float(price):.2f}".replace(".", ",")
    except (TypeError, ValueError):
        return str(price)
