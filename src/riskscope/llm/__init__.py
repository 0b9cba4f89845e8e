"""LLM integration module for riskscope.

- prompts: Deterministic batch prompt rendering
- detector: Backend probing and per-run selection
- backends: Interchangeable backend implementations
- client: LiteLLM wrapper used by the litellm backend
"""

from riskscope.llm.backends import (
    AnalysisBackend,
    BackendCallError,
    BackendConfigError,
    create_backend,
)
from riskscope.llm.client import LLMClient, LLMError, LLMResponse
from riskscope.llm.detector import (
    BackendDetector,
    ProbeCandidate,
    build_probe_candidates,
    resolve_backend,
)
from riskscope.llm.prompts import (
    BATCH_ANALYSIS_PREAMBLE,
    PLACEHOLDER_ANALYSIS,
    build_batch_prompt,
)

__all__ = [
    "AnalysisBackend",
    "BATCH_ANALYSIS_PREAMBLE",
    "BackendCallError",
    "BackendConfigError",
    "BackendDetector",
    "LLMClient",
    "LLMError",
    "LLMResponse",
    "PLACEHOLDER_ANALYSIS",
    "ProbeCandidate",
    "build_batch_prompt",
    "build_probe_candidates",
    "create_backend",
    "resolve_backend",
]
