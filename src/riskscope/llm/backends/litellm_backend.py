"""LiteLLM provider backend (claude, gemini, ollama, bedrock)."""

from riskscope.llm.backends.base import AnalysisBackend, BackendCallError
from riskscope.llm.client import LLMClient, LLMError, LLMResponse
from riskscope.models.outcome import BackendSelection, FailureReason

_REASONS_BY_KIND = {
    "auth": FailureReason.NOT_AUTHENTICATED,
    "rate_limit": FailureReason.RATE_LIMITED,
    "timeout": FailureReason.TIMEOUT,
    "connection": FailureReason.TRANSPORT,
    "malformed": FailureReason.MALFORMED_RESPONSE,
}


class LiteLLMBackend(AnalysisBackend):
    """Adapts LLMClient to the backend contract."""

    def __init__(self, selection: BackendSelection, client: LLMClient) -> None:
        super().__init__(selection, client.timeout)
        self.client = client

    def render_request(self, prompt: str) -> str:
        return prompt

    def execute(self, request: str) -> LLMResponse:
        try:
            return self.client.complete(request)
        except LLMError as e:
            reason = _REASONS_BY_KIND.get(e.kind, FailureReason.GENERIC)
            raise BackendCallError(reason, str(e)) from e

    def parse_response(self, raw: LLMResponse) -> str:
        text = raw.content.strip()
        if not text:
            raise BackendCallError(FailureReason.EMPTY_RESPONSE, "LLM returned an empty response")
        return text
