import base64

import pytest
import requests

from app.core.config import settings
from app.core.exceptions import AIError, AIKillSwitchError
from app.services.completion_client import call_completion, image_block, text_block


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


def _reply(text):
    return {"choices": [{"message": {"content": text}}]}


@pytest.fixture
def post(monkeypatch):
    calls = []
    responses = []

    def _post(url, json=None, headers=None, timeout=None):
        calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        result = responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr("app.services.completion_client.requests.post", _post)
    _post.calls = calls
    _post.responses = responses
    return _post


def test_sends_bearer_model_and_token_budget(post):
    post.responses.append(FakeResponse(payload=_reply("Hello")))

    assert call_completion("Write a review", max_tokens=123, system="Be brief") == "Hello"

    call = post.calls[0]
    assert call["url"] == settings.ai.base_url
    assert call["headers"]["Authorization"] == "Bearer test-key"
    assert call["json"]["model"] == "test/model"
    assert call["json"]["max_tokens"] == 123
    assert call["json"]["messages"] == [
        {"role": "system", "content": "Be brief"},
        {"role": "user", "content": "Write a review"},
    ]
    assert call["timeout"] == settings.ai.timeout_seconds


def test_default_token_budget(post):
    post.responses.append(FakeResponse(payload=_reply("ok")))
    call_completion("prompt")
    assert post.calls[0]["json"]["max_tokens"] == settings.ai.max_tokens


def test_content_blocks_are_passed_through(post):
    post.responses.append(FakeResponse(payload=_reply("ok")))
    blocks = [text_block("Read this"), image_block(b"\x89PNG", "image/png")]

    call_completion(blocks)

    sent = post.calls[0]["json"]["messages"][-1]["content"]
    assert sent[0] == {"type": "text", "text": "Read this"}
    assert sent[1]["image_url"]["url"] == "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()


def test_non_success_status_raises_ai_error(post):
    post.responses.append(FakeResponse(status_code=529))
    with pytest.raises(AIError, match="529"):
        call_completion("prompt")


def test_timeout_raises_ai_error(post):
    post.responses.append(requests.exceptions.Timeout())
    with pytest.raises(AIError, match="timeout"):
        call_completion("prompt")


def test_connection_error_raises_ai_error(post):
    post.responses.append(requests.exceptions.ConnectionError("refused"))
    with pytest.raises(AIError):
        call_completion("prompt")


@pytest.mark.parametrize("payload", [None, {}, {"choices": []}, _reply("   ")])
def test_unexpected_payload_raises_ai_error(post, payload):
    post.responses.append(FakeResponse(payload=payload))
    with pytest.raises(AIError):
        call_completion("prompt")


def test_no_retry_by_default(post):
    post.responses.extend([FakeResponse(status_code=500), FakeResponse(payload=_reply("late"))])
    with pytest.raises(AIError):
        call_completion("prompt")
    assert len(post.calls) == 1


def test_retries_when_configured(post, monkeypatch):
    monkeypatch.setattr(settings.ai, "max_attempts", 2)
    monkeypatch.setattr("app.services.completion_client.wait_exponential", lambda **kw: lambda rs: 0)
    post.responses.extend([FakeResponse(status_code=500), FakeResponse(payload=_reply("second"))])

    assert call_completion("prompt") == "second"
    assert len(post.calls) == 2


def test_kill_switch_blocks_calls(post, monkeypatch):
    monkeypatch.setattr(settings.ai, "kill_switch", True)
    with pytest.raises(AIKillSwitchError):
        call_completion("prompt")
    assert post.calls == []


def test_missing_api_key(post, monkeypatch):
    monkeypatch.setattr(settings.ai, "openrouter_api_key", None)
    with pytest.raises(AIError, match="OPENROUTER_API_KEY"):
        call_completion("prompt")
    assert post.calls == []
