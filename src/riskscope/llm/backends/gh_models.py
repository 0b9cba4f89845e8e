"""Hosted GitHub Models backend via the gh CLI.

Requires the gh-models extension and an account entitled to the model:

    gh models run <model> <prompt> --max-tokens <n>
"""

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
    (FailureReason.ACCESS_DENIED, ("403", "forbidden", "no access", "not have access")),
]


class GHModelsBackend(AnalysisBackend):
    """Runs `gh models run` against a hosted model."""

    def __init__(self, selection: BackendSelection, timeout: int, max_tokens: int) -> None:
        super().__init__(selection, timeout)
        if not selection.command:
            raise BackendConfigError("gh models backend requires a resolved command")
        if not selection.model:
            raise BackendConfigError("gh models backend requires a model")
        if max_tokens <= 0:
            raise BackendConfigError(f"max_tokens must be positive. Got: {max_tokens}")
        self.max_tokens = max_tokens

    def render_request(self, prompt: str) -> list[str]:
        return [
            self.selection.command or "",
            "models",
            "run",
            self.selection.model or "",
            prompt,
            "--max-tokens",
            str(self.max_tokens),
        ]

    def execute(self, request: list[str]) -> subprocess.CompletedProcess[str]:
        result = run_backend_command(request, self.timeout)
        if result.returncode != 0:
            output = error_output(result)
            reason = classify_error_output(output, ERROR_SIGNATURES)
            raise BackendCallError(
                reason,
                f"gh models exited with code {result.returncode}: {output.strip()[:300]}",
            )
        return result

    def parse_response(self, raw: subprocess.CompletedProcess[str]) -> str:
        text = raw.stdout.strip()
        if not text:
            raise BackendCallError(FailureReason.EMPTY_RESPONSE, "gh models returned no output")
        return text
