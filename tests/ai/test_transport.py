"""Transport and configuration tests; the OpenAI client is mocked."""

from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest
from pydantic import ValidationError

from broadside.ai import transport as transport_module
from broadside.ai.config import ExternalSourceConfig
from broadside.ai.external import ExternalMoveSource
from broadside.ai.transport import OpenAIChatTransport, TransportError, extract_completion_text
from broadside.engine.board import create_empty_board


def test_extract_prefers_message_content() -> None:
    payload = {"choices": [{"message": {"content": "  C4 \n"}, "text": "A1"}]}
    assert extract_completion_text(payload) == "C4"


def test_extract_accepts_legacy_text() -> None:
    assert extract_completion_text({"choices": [{"message": {"content": None}, "text": "J10"}]}) == "J10"
    assert extract_completion_text({"choices": [{"text": "B2"}]}) == "B2"


@pytest.mark.parametrize("payload", [{}, {"choices": []}, {"choices": [{"message": {}}]}])
def test_extract_rejects_empty_payloads(payload) -> None:
    with pytest.raises(TransportError):
        extract_completion_text(payload)


def test_openai_transport_sends_single_user_message(monkeypatch: pytest.MonkeyPatch) -> None:
    client = MagicMock()
    client.chat.completions.create.return_value.model_dump.return_value = {
        "choices": [{"message": {"role": "assistant", "content": "E7"}}]
    }
    factory = MagicMock(return_value=client)
    monkeypatch.setattr(transport_module, "OpenAI", factory)

    config = ExternalSourceConfig(endpoint="http://llm:1234/", model="m", temperature=0.2, max_tokens=10)
    transport = OpenAIChatTransport()
    assert transport.complete("prompt", config) == "E7"
    transport.complete("prompt", config)

    factory.assert_called_once()
    assert factory.call_args.kwargs["base_url"] == "http://llm:1234/v1"
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
    assert kwargs["max_tokens"] == 10
    assert kwargs["model"] == "m"
    assert kwargs["temperature"] == 0.2


def test_openai_transport_wraps_sdk_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    client = MagicMock()
    client.chat.completions.create.side_effect = transport_module.OpenAIError("down")
    client.models.list.side_effect = transport_module.OpenAIError("down")
    monkeypatch.setattr(transport_module, "OpenAI", MagicMock(return_value=client))

    transport = OpenAIChatTransport()
    with pytest.raises(TransportError):
        transport.complete("prompt", ExternalSourceConfig())
    with pytest.raises(TransportError):
        transport.list_models(ExternalSourceConfig())


def test_openai_transport_lists_model_ids(monkeypatch: pytest.MonkeyPatch) -> None:
    client = MagicMock()
    first, second = MagicMock(id="a"), MagicMock(id="b")
    client.models.list.return_value.data = [first, second]
    monkeypatch.setattr(transport_module, "OpenAI", MagicMock(return_value=client))

    assert OpenAIChatTransport().list_models(ExternalSourceConfig()) == ["a", "b"]


def test_config_validates_ranges() -> None:
    with pytest.raises(ValidationError):
        ExternalSourceConfig(temperature=1.5)
    with pytest.raises(ValidationError):
        ExternalSourceConfig(max_tokens=0)


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BROADSIDE_LLM_ENDPOINT", "http://remote:8080/v1")
    monkeypatch.setenv("BROADSIDE_LLM_TEMPERATURE", "0.3")
    monkeypatch.setenv("BROADSIDE_LLM_DEBUG", "yes")

    config = ExternalSourceConfig.from_env(model="override", max_tokens=None)
    assert config.endpoint == "http://remote:8080/v1"
    assert config.base_url == "http://remote:8080/v1"
    assert config.temperature == pytest.approx(0.3)
    assert config.debug is True
    assert config.model == "override"
    assert config.max_tokens == 10


def _html_server(monkeypatch: pytest.MonkeyPatch) -> list[httpx.Request]:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200, text="<html>LM Studio is loading</html>", headers={"content-type": "text/html"}
        )

    real_openai = transport_module.OpenAI
    monkeypatch.setattr(
        transport_module,
        "OpenAI",
        lambda **kwargs: real_openai(
            **kwargs, http_client=httpx.Client(transport=httpx.MockTransport(handler))
        ),
    )
    return requests


def test_non_json_completion_body_is_a_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    requests = _html_server(monkeypatch)

    with pytest.raises(TransportError, match="not JSON"):
        OpenAIChatTransport().complete("prompt", ExternalSourceConfig())
    assert requests[0].url.path == "/v1/chat/completions"


def test_non_json_completion_body_falls_back_to_legal_move(monkeypatch: pytest.MonkeyPatch) -> None:
    _html_server(monkeypatch)
    source = ExternalMoveSource(transport=OpenAIChatTransport(), sleep=lambda _: None)
    board = create_empty_board()

    assert board.is_untargeted(source.choose_target(board))
    assert source.used_fallback
    assert all("not JSON" in (record.error or "") for record in source.last_attempts)
