"""
Affirmation Detection Tests

Replies to the booking summary ("Está tudo correto? Responda SIM") must be
classified reliably: a missed "sim" leaves the client without a booking, a
false positive books something the client rejected.
"""

from __future__ import annotations

import pytest

from detection.affirmation import classify_reply, is_affirmative_reply, is_negative_reply, normalize_reply


class TestAffirmativeReplies:

    @pytest.mark.parametrize("text", [
        "sim",
        "Sim",
        "SIM!",
        "s",
        "ok",
        "Ok, pode confirmar",
        "Isso mesmo",
        "tá certo, tudo certo",
        "Perfeito 😊",
        "Confirmo",
        "yes",
        "👍",
        "Sim, no sábado está ótimo",
        "ok, no horário combinado",
    ])
    def test_confirms(self, text):
        assert is_affirmative_reply(text)

    def test_matched_pattern_is_reported(self):
        result = classify_reply("Sim!")

        assert result.is_affirmative
        assert result.matched_patterns == ["affirmative:sim"]


class TestNonAffirmativeReplies:

    @pytest.mark.parametrize("text", [
        "não",
        "Nao, está errado",
        "sim, mas quero mudar o horário",
        "cancela por favor",
        "Prefiro outra data",
        "no",
        "No!",
    ])
    def test_negative_wins(self, text):
        result = classify_reply(text)

        assert result.is_negative
        assert not result.is_affirmative

    @pytest.mark.parametrize("text", [
        "quanto custa?",
        "Qual o endereço?",
        "",
        "   ",
    ])
    def test_no_signal(self, text):
        result = classify_reply(text)

        assert not result.is_affirmative
        assert not result.is_negative

    def test_long_messages_are_not_answers(self):
        text = "sim eu queria saber se vocês também atendem aos domingos porque meu marido trabalha a semana toda"

        result = classify_reply(text)

        assert not result.is_affirmative
        assert "too_long" in result.matched_patterns

    def test_is_negative_reply(self):
        assert is_negative_reply("Não quero")
        assert not is_negative_reply("sim")


def test_normalize_reply():
    assert normalize_reply("  Tá CERTO!!  ") == "ta certo"
