"""Direct Gemini REST API backend (keyed).

Request body:
    {"contents": [{"parts": [{"text": "<prompt>"}]}]}

Response shape used:
    {"candidates": [{"content": {"parts": [{"text": "<analysis>"}]}}]}
"""

import logging
from typing import Any

import requests

from riskscope.config import GeminiAPIConfig
from riskscope.llm.backends.base import AnalysisBackend, BackendCallError, BackendConfigError
from riskscope.models.outcome import BackendSelection, FailureReason

logger = logging.getLogger(__name__)

_STATUS_REASONS = {
    429: FailureReason.RATE_LIMITED,
    401: FailureReason.NOT_AUTHENTICATED,
    403: FailureReason.NOT_AUTHENTICATED,
}


class GeminiAPIBackend(AnalysisBackend):
    """Calls generateContent on the Gemini API with an API key."""

    def __init__(
        self,
        selection: BackendSelection,
        config: GeminiAPIConfig,
        timeout: int,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(selection, timeout)
        api_key = config.resolve_api_key()
        if not api_key:
            raise BackendConfigError("Gemini API backend requires an API key")

        self.api_key = api_key
        self.url = config.endpoint.format(model=selection.model or config.model)
        self.session = session or requests.Session()

    def render_request(self, prompt: str) -> dict[str, Any]:
        return {"contents": [{"parts": [{"text": prompt}]}]}

    def execute(self, request: dict[str, Any]) -> Any:
        try:
            resp = self.session.post(
                self.url,
                params={"key": self.api_key},
                json=request,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise BackendCallError(FailureReason.TIMEOUT, f"Gemini API timed out: {e}") from e
        except requests.RequestException as e:
            raise BackendCallError(FailureReason.TRANSPORT, f"Gemini API request failed: {e}") from e

        if not resp.ok:
            reason = _STATUS_REASONS.get(resp.status_code, FailureReason.BAD_STATUS)
            logger.warning("Gemini error %s: %s", resp.status_code, resp.text[:500])
            raise BackendCallError(reason, f"Gemini API returned HTTP {resp.status_code}")

        try:
            return resp.json()
        except ValueError as e:
            raise BackendCallError(
                FailureReason.MALFORMED_RESPONSE, "Gemini API returned invalid JSON"
            ) from e

    def parse_response(self, raw: Any) -> str:
        try:
            text = raw["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise BackendCallError(
                FailureReason.MALFORMED_RESPONSE,
                "Gemini API response missing candidates[0].content.parts[0].text",
            ) from e

        if not isinstance(text, str):
            raise BackendCallError(FailureReason.MALFORMED_RESPONSE, "Gemini API text is not a string")
        return text
