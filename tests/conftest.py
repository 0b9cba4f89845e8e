"""Shared pytest fixtures for riskscope tests.

Fixtures are organized by category:
- Finding fixtures: Findings with and without issues
- Configuration fixtures: Engine configs that never sleep or touch the network
- Backend fixtures: Scripted in-memory backends
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from riskscope.config import AnalysisConfig
from riskscope.llm.backends.base import AnalysisBackend, BackendCallError
from riskscope.models.findings import Dependency, Ecosystem, Finding, Issue
from riskscope.models.outcome import BackendKind, BackendSelection, FailureReason

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def findings_file(fixtures_dir: Path) -> Path:
    """Return the sample findings JSON file."""
    return fixtures_dir / "findings.json"


# =============================================================================
# Finding Fixtures
# =============================================================================


def make_finding(name: str, version: str = "1.0.0", issue_count: int = 1) -> Finding:
    """Build a finding with `issue_count` open issues."""
    issues = tuple(
        Issue(state="open", title=f"{name} issue {i + 1}") for i in range(issue_count)
    )
    return Finding(
        dependency=Dependency(name=name, version=version, ecosystem=Ecosystem.NODE),
        issues=issues,
    )


@pytest.fixture
def finding_factory() -> Callable[..., Finding]:
    """Return the finding factory."""
    return make_finding


@pytest.fixture
def twelve_candidates() -> list[Finding]:
    """Twelve findings, each with at least one issue."""
    return [make_finding(f"dep-{i:02d}") for i in range(12)]


@pytest.fixture
def mixed_findings() -> list[Finding]:
    """Findings interleaving candidates and issue-free dependencies."""
    return [
        make_finding("serde", "1.0.190", issue_count=2),
        make_finding("tokio", "1.35.0", issue_count=0),
        make_finding("reqwest", "0.11.22", issue_count=1),
        make_finding("anyhow", "1.0.75", issue_count=0),
        make_finding("clap", "4.4.0", issue_count=3),
    ]


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def analysis_config() -> AnalysisConfig:
    """Engine config with batch size 5 and the default pause."""
    return AnalysisConfig(backend="auto", batch_size=5, rate_limit_delay=5.0)


@pytest.fixture
def sleep_calls() -> list[float]:
    """Recorder used as the rate limiter's sleep function."""
    return []


@pytest.fixture
def fake_sleep(sleep_calls: list[float]) -> Callable[[float], None]:
    """Sleep replacement that records delays instead of sleeping."""
    return sleep_calls.append


@pytest.fixture(autouse=True)
def _no_gemini_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's GEMINI_API_KEY from changing backend selection."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


# =============================================================================
# Backend Fixtures
# =============================================================================


class ScriptedBackend(AnalysisBackend):
    """In-memory backend returning scripted results per call.

    Each script entry is either analysis text or a FailureReason to raise.
    The last entry repeats once the script runs out.
    """

    def __init__(self, script: list[Any]) -> None:
        super().__init__(BackendSelection(kind=BackendKind.GEMINI_CLI, command="gemini"), timeout=5)
        self.script = list(script)
        self.prompts: list[str] = []

    def render_request(self, prompt: str) -> str:
        return prompt

    def execute(self, request: str) -> Any:
        self.prompts.append(request)
        index = min(len(self.prompts) - 1, len(self.script) - 1)
        step = self.script[index]
        if isinstance(step, FailureReason):
            raise BackendCallError(step, "scripted failure")
        return step

    def parse_response(self, raw: Any) -> str:
        return raw

    @property
    def calls(self) -> int:
        return len(self.prompts)


@pytest.fixture
def scripted_backend() -> Callable[[list[Any]], ScriptedBackend]:
    """Return a factory for scripted backends."""
    return ScriptedBackend
