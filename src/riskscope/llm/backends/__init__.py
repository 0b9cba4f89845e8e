"""Analysis backends.

Implementations:
- GeminiAPIBackend: direct Gemini REST API (API key)
- GeminiCLIBackend: local gemini binary (ambient credential)
- GHModelsBackend: hosted models via `gh models run`
- LiteLLMBackend: any LiteLLM provider
"""

from riskscope.config import AnalysisConfig
from riskscope.llm.backends.base import (
    AnalysisBackend,
    BackendCallError,
    BackendConfigError,
)
from riskscope.llm.backends.gemini_api import GeminiAPIBackend
from riskscope.llm.backends.gemini_cli import GeminiCLIBackend
from riskscope.llm.backends.gh_models import GHModelsBackend
from riskscope.llm.backends.litellm_backend import LiteLLMBackend
from riskscope.llm.client import LLMClient
from riskscope.models.outcome import BackendKind, BackendSelection


def create_backend(selection: BackendSelection, config: AnalysisConfig) -> AnalysisBackend:
    """Build the backend implementation for a selection.

    Factory function; the only place that branches on backend kind.

    Args:
        selection: The run's backend selection
        config: Analysis configuration

    Returns:
        Configured AnalysisBackend

    Raises:
        BackendConfigError: If the selection is NONE or cannot be built
    """
    if selection.kind is BackendKind.GEMINI_API:
        return GeminiAPIBackend(selection, config.gemini_api, config.timeout)
    if selection.kind is BackendKind.GEMINI_CLI:
        return GeminiCLIBackend(selection, config.timeout)
    if selection.kind is BackendKind.GH_MODELS:
        return GHModelsBackend(selection, config.timeout, config.gh_models.max_tokens)
    if selection.kind is BackendKind.LITELLM:
        return LiteLLMBackend(selection, LLMClient(config.llm, timeout=config.timeout))

    raise BackendConfigError(f"No backend implementation for selection: {selection.kind.value}")


__all__ = [
    "AnalysisBackend",
    "BackendCallError",
    "BackendConfigError",
    "GHModelsBackend",
    "GeminiAPIBackend",
    "GeminiCLIBackend",
    "LiteLLMBackend",
    "create_backend",
]
