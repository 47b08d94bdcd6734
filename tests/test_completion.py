from unittest.mock import MagicMock

import httpx
import openai
import pytest

from browser_pilot.completion import (
    CompletionClient,
    CompletionRequestError,
    RateLimitExceeded,
    TokenLimitExceeded,
    classify_api_error,
)

REQUEST = httpx.Request("POST", "https://api.test/v1/chat/completions")


def _api_error(code):
    return openai.APIError("request failed", REQUEST, body={"code": code, "message": "request failed"})


def _response(content):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


def _client(**kwargs):
    sdk = MagicMock()
    return CompletionClient(api_key="test", client=sdk, **kwargs), sdk


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def test_classify_rate_limit_by_code():
    assert type(classify_api_error(_api_error("rate_limit_exceeded"))) is RateLimitExceeded


def test_classify_rate_limit_by_status():
    exc = openai.RateLimitError(
        "slow down", response=httpx.Response(429, request=REQUEST), body=None
    )
    assert type(classify_api_error(exc)) is RateLimitExceeded


@pytest.mark.parametrize("code", ["token_limit_exceeded", "context_length_exceeded"])
def test_classify_token_limit(code):
    assert type(classify_api_error(_api_error(code))) is TokenLimitExceeded


def test_classify_other_errors():
    assert type(classify_api_error(_api_error("server_error"))) is CompletionRequestError
    assert type(classify_api_error(openai.APIConnectionError(request=REQUEST))) is CompletionRequestError


# ---------------------------------------------------------------------------
# CompletionClient
# ---------------------------------------------------------------------------


def test_complete_sends_system_and_input_blocks():
    client, sdk = _client(model="gpt-test", max_tokens=512)
    sdk.chat.completions.create.return_value = _response("  {\"ok\": true}\n")

    assert client.complete("instructions", ["", "current state"]) == '{"ok": true}'

    kwargs = sdk.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-test"
    assert kwargs["max_tokens"] == 512
    system, user = kwargs["messages"]
    assert system == {"role": "system", "content": [{"type": "text", "text": "instructions"}]}
    assert user == {"role": "user", "content": [{"type": "text", "text": "current state"}]}


def test_complete_omits_token_budget_when_unset():
    client, sdk = _client()
    sdk.chat.completions.create.return_value = _response("x")
    client.complete("s", ["u"])
    assert "max_tokens" not in sdk.chat.completions.create.call_args.kwargs


def test_complete_translates_sdk_errors():
    client, sdk = _client()
    error = _api_error("token_limit_exceeded")
    sdk.chat.completions.create.side_effect = error

    with pytest.raises(TokenLimitExceeded) as info:
        client.complete("s", ["u"])
    assert info.value.__cause__ is error


def test_complete_rejects_empty_completion():
    client, sdk = _client()
    sdk.chat.completions.create.return_value = _response(None)
    with pytest.raises(CompletionRequestError, match="empty"):
        client.complete("s", ["u"])


def test_classify_exhausted_quota_as_other_error():
    exc = openai.RateLimitError(
        "quota exhausted",
        response=httpx.Response(429, request=REQUEST),
        body={"code": "insufficient_quota", "message": "quota exhausted"},
    )
    assert type(classify_api_error(exc)) is CompletionRequestError
