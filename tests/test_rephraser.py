from types import SimpleNamespace

import httpx
import openai
import pytest

from conftest import fake_completion_client, run
from idea_validator.rephraser import REPHRASE_MAX_TOKENS, REPHRASE_TEMPERATURE, QueryRephraser

IDEA = "An app that matches dog walkers with busy owners"


def test_rephrase_returns_trimmed_completion() -> None:
    client = fake_completion_client("  What is the market demand for on-demand dog walking apps?  ")
    rephraser = QueryRephraser(client, "llama-3.1-8b-instant")

    query = run(rephraser.rephrase(IDEA))

    assert query == "What is the market demand for on-demand dog walking apps?"
    call = client.chat.completions.calls[0]
    assert call["model"] == "llama-3.1-8b-instant"
    assert call["temperature"] == REPHRASE_TEMPERATURE
    assert call["max_tokens"] == REPHRASE_MAX_TOKENS
    assert IDEA in call["messages"][1]["content"]


@pytest.mark.parametrize(
    "error",
    [
        openai.APIConnectionError(request=httpx.Request("POST", "https://api.groq.com")),
        RuntimeError("socket closed"),
    ],
)
def test_rephrase_falls_back_on_provider_error(error: Exception) -> None:
    rephraser = QueryRephraser(fake_completion_client(error=error), "model")

    assert run(rephraser.rephrase(IDEA)) == IDEA


@pytest.mark.parametrize("text", [None, "", "   "])
def test_rephrase_falls_back_on_empty_output(text) -> None:
    rephraser = QueryRephraser(fake_completion_client(text), "model")

    assert run(rephraser.rephrase(IDEA)) == IDEA


def test_rephrase_without_client_uses_original() -> None:
    assert run(QueryRephraser(None, "model").rephrase(IDEA)) == IDEA


def test_rephrase_falls_back_when_message_is_missing() -> None:
    class Completions:
        async def create(self, **kwargs):
            return SimpleNamespace(choices=[SimpleNamespace(message=None)])

    client = SimpleNamespace(chat=SimpleNamespace(completions=Completions()))

    assert run(QueryRephraser(client, "model").rephrase(IDEA)) == IDEA
