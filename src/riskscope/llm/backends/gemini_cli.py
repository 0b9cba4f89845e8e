"""Local Gemini CLI backend.

Uses the credential the CLI already holds (gcloud login, cached OAuth, or its own
API key). Invocation:

    gemini --model <model> --output-format json --sandbox=false --prompt <prompt>

The JSON output carries the analysis text in its "response" field.
"""

import json
import re
import subprocess

from riskscope.llm.backends.base import (
    AnalysisBackend,
    BackendCallError,
    BackendConfigError,
    classify_error_output,
)
from riskscope.llm.backends.process import error_output, run_backend_command
from riskscope.models.outcome import BackendSelection, FailureReason

ERROR_SIGNATURES: list[tuple[FailureReason, tuple[str, ...]]] = [
    (FailureReason.RATE_LIMITED, ("429", "RESOURCE_EXHAUSTED", "quota", "rate limit")),
    (FailureReason.NOT_AUTHENTICATED, ("UNAUTHENTICATED", "not authenticated", "login", "API key")),
]

_FENCE_OPEN = re.compile(r"^```[\w-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapping the whole text.

    Args:
        text: Response text, possibly wrapped in ``` fences

    Returns:
        Text without surrounding fence markers, whitespace-trimmed
    """
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = _FENCE_OPEN.sub("", stripped, count=1)
        stripped = _FENCE_CLOSE.sub("", stripped, count=1)
    return stripped.strip()


class GeminiCLIBackend(AnalysisBackend):
    """Runs the locally installed gemini binary."""

    def __init__(self, selection: BackendSelection, timeout: int) -> None:
        super().__init__(selection, timeout)
        if not selection.command:
            raise BackendConfigError("Gemini CLI backend requires a resolved command")
        if not selection.model:
            raise BackendConfigError("Gemini CLI backend requires a model")

    def render_request(self, prompt: str) -> list[str]:
        return [
            self.selection.command or "",
            "--model",
            self.selection.model or "",
            "--output-format",
            "json",
            "--sandbox=false",
            "--prompt",
            prompt,
        ]

    def execute(self, request: list[str]) -> subprocess.CompletedProcess[str]:
        result = run_backend_command(request, self.timeout)
        if result.returncode != 0:
            output = error_output(result)
            reason = classify_error_output(output, ERROR_SIGNATURES)
            raise BackendCallError(
                reason,
                f"gemini exited with code {result.returncode}: {output.strip()[:300]}",
            )
        return result

    def parse_response(self, raw: subprocess.CompletedProcess[str]) -> str:
        try:
            data = json.loads(raw.stdout)
        except json.JSONDecodeError as e:
            raise BackendCallError(
                FailureReason.MALFORMED_RESPONSE, f"gemini output is not JSON: {e}"
            ) from e

        if not isinstance(data, dict) or not isinstance(data.get("response"), str):
            raise BackendCallError(
                FailureReason.MALFORMED_RESPONSE, "gemini output has no 'response' text"
            )

        text = strip_code_fences(data["response"])
        if not text:
            raise BackendCallError(FailureReason.EMPTY_RESPONSE, "gemini returned an empty response")
        return text
