"""
Affirmation detection for WhatsApp booking replies.

Decides whether the client's reply to a booking summary ("Está tudo
correto? Responda SIM") is a confirmation. Keyword based, no LLM call.
A negative signal anywhere in the reply always wins ("sim, mas não nesse
horário" is not a confirmation).
"""

import re
import unicodedata
from dataclasses import dataclass, field
from typing import List

# Matched against accent-free, lowercased, punctuation-free text
AFFIRMATIVE_SIGNALS_PT = [
    "sim", "s", "ok", "okay", "confirmo", "confirmado", "confirmar",
    "pode confirmar", "pode ser", "isso", "isso mesmo", "certo", "correto",
    "esta correto", "tudo certo", "perfeito", "fechado", "claro",
    "beleza", "blz", "com certeza",
]

AFFIRMATIVE_SIGNALS_EN = ["yes", "yep", "sure", "confirmed"]

AFFIRMATIVE_EMOJI = ["👍", "✅", "👌"]

NEGATIVE_SIGNALS_PT = [
    "nao", "n", "cancelar", "cancela", "cancelado", "errado", "incorreto",
    "desisto", "mudar", "alterar", "trocar", "outro horario", "outra data",
]

NEGATIVE_SIGNALS_EN = ["cancel", "wrong"]

# "no" is also the pt-BR contraction of "em o" ("no sábado"); only a bare reply counts
NEGATIVE_WHOLE_REPLIES = ["no", "nope"]

# Replies longer than this are conversation, not a yes/no answer
MAX_REPLY_WORDS = 12


@dataclass
class AffirmationResult:
    is_affirmative: bool = False
    is_negative: bool = False
    matched_patterns: List[str] = field(default_factory=list)


def normalize_reply(text: str) -> str:
    """Lowercase, drop accents and punctuation, collapse whitespace."""

    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = re.sub(r"[^\w\s]", " ", stripped.lower())
    return " ".join(cleaned.split())


def _has_phrase(padded: str, phrase: str) -> bool:
    return f" {phrase} " in padded


def classify_reply(text: str) -> AffirmationResult:
    """Scan a reply for affirmative and negative signals."""

    result = AffirmationResult()
    normalized = normalize_reply(text)
    padded = f" {normalized} "

    for signal in NEGATIVE_SIGNALS_PT + NEGATIVE_SIGNALS_EN:
        if _has_phrase(padded, signal):
            result.is_negative = True
            result.matched_patterns.append(f"negative:{signal}")
            break
    else:
        if normalized in NEGATIVE_WHOLE_REPLIES:
            result.is_negative = True
            result.matched_patterns.append(f"negative:{normalized}")

    if result.is_negative:
        return result

    if len(normalized.split()) > MAX_REPLY_WORDS:
        result.matched_patterns.append("too_long")
        return result

    for signal in AFFIRMATIVE_SIGNALS_PT + AFFIRMATIVE_SIGNALS_EN:
        if _has_phrase(padded, signal):
            result.is_affirmative = True
            result.matched_patterns.append(f"affirmative:{signal}")
            return result

    for emoji in AFFIRMATIVE_EMOJI:
        if emoji in (text or ""):
            result.is_affirmative = True
            result.matched_patterns.append(f"affirmative_emoji:{emoji}")
            return result

    return result


def is_affirmative_reply(text: str) -> bool:
    return classify_reply(text).is_affirmative


def is_negative_reply(text: str) -> bool:
    return classify_reply(text).is_negative
