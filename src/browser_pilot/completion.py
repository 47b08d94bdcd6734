# completion.py
# Completion collaborator: one request in, one text completion or one
# classified error out. The agent never sees an SDK exception.

import openai
from openai import OpenAI

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"

RATE_LIMIT_CODES = frozenset({"rate_limit_exceeded"})
# 429s that waiting will not fix.
QUOTA_CODES = frozenset({"insufficient_quota"})
TOKEN_LIMIT_CODES = frozenset({"token_limit_exceeded", "context_length_exceeded"})


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CompletionRequestError(Exception):
    """A completion request failed. Recoverable unless subclassed otherwise."""


class RateLimitExceeded(CompletionRequestError):
    """The provider throttled the request. Recoverable after a long backoff."""


class TokenLimitExceeded(CompletionRequestError):
    """The prompt no longer fits the model. Fatal to the run."""


def classify_api_error(exc: openai.APIError) -> CompletionRequestError:
    code = getattr(exc, "code", None)
    if code in QUOTA_CODES:
        return CompletionRequestError(str(exc))
    if isinstance(exc, openai.RateLimitError) or code in RATE_LIMIT_CODES:
        return RateLimitExceeded(str(exc))
    if code in TOKEN_LIMIT_CODES:
        return TokenLimitExceeded(str(exc))
    return CompletionRequestError(str(exc))


# ---------------------------------------------------------------------------
# CompletionClient
# ---------------------------------------------------------------------------


class CompletionClient:
    """
    Thin wrapper over the OpenAI chat completions API.

    Example:
        client = CompletionClient(api_key="sk-...", model="gpt-4o-mini")
        text = client.complete("You are ...", ["history", "current state"])
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        max_tokens: int | None = None,
        base_url: str = DEFAULT_BASE_URL,
        organization: str | None = None,
        project: str | None = None,
        client: OpenAI | None = None,
    ) -> None:
        self._model = model
        self._max_tokens = max_tokens
        self._client = client or OpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            project=project,
        )

    @property
    def model(self) -> str:
        return self._model

    def build_messages(self, system: str, inputs: list[str]) -> list[dict]:
        return [
            {"role": "system", "content": [{"type": "text", "text": system}]},
            {
                "role": "user",
                "content": [{"type": "text", "text": text} for text in inputs if text],
            },
        ]

    def complete(self, system: str, inputs: list[str]) -> str:
        """
        Send the instruction block and input blocks as one request.

        Raises RateLimitExceeded, TokenLimitExceeded or CompletionRequestError.
        """
        kwargs = {}
        if self._max_tokens:
            kwargs["max_tokens"] = self._max_tokens
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=self.build_messages(system, inputs),
                **kwargs,
            )
        except openai.APIError as exc:
            raise classify_api_error(exc) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise CompletionRequestError("Model returned an empty completion.")
        return content.strip()
