"""Tests for the OpenAI limits adapter."""

import asyncio
import json

import pytest

from nutrition_guard.adapters.openai_limits_client import OpenAILimitsClient


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str) -> None:
        self.responses = _FakeResponses(output_text)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def test_openai_limits_client_parses_output() -> None:
    fake = _FakeOpenAI(json.dumps({"reasoning": "ok"}))
    client = OpenAILimitsClient(client=fake)

    result = asyncio.run(
        client.generate(
            model="gpt-5-nano",
            reasoning_effort="low",
            store=False,
            schema={"type": "object"},
            prompt="Set limits",
        )
    )

    assert result == {"reasoning": "ok"}
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["reasoning"] == {"effort": "low"}
    assert payload["text"]["format"]["strict"] is True  # type: ignore[index]
    assert payload["text"]["format"]["name"] == "computed_limits"  # type: ignore[index]


def test_openai_limits_client_omits_empty_reasoning() -> None:
    fake = _FakeOpenAI("{}")
    client = OpenAILimitsClient(client=fake)

    asyncio.run(
        client.generate(
            model="gpt-5-nano",
            reasoning_effort=None,
            store=True,
            schema={},
            prompt="Set limits",
        )
    )

    assert fake.responses.last_payload is not None
    assert "reasoning" not in fake.responses.last_payload
    assert fake.responses.last_payload["store"] is True


def test_openai_limits_client_rejects_empty_output() -> None:
    client = OpenAILimitsClient(client=_FakeOpenAI(""))

    with pytest.raises(RuntimeError):
        asyncio.run(
            client.generate(
                model="gpt-5-nano",
                reasoning_effort="low",
                store=False,
                schema={},
                prompt="Set limits",
            )
        )


def test_openai_limits_client_close() -> None:
    fake = _FakeOpenAI("{}")

    asyncio.run(OpenAILimitsClient(client=fake).close())

    assert fake.closed
