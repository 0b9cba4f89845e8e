"""Dependency risk analysis engine.

Turns findings into insights:

    findings -> relevance filter -> batch planner
             -> {prompt builder -> backend} per batch, paced by the rate limiter
             -> insight aggregator -> insights (one per candidate, input order)

Batches run strictly one after another. A failed batch yields placeholder
insights and never discards the results of other batches.
"""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from riskscope.config import AnalysisConfig
from riskscope.llm.backends import AnalysisBackend, create_backend
from riskscope.llm.detector import BackendDetector, resolve_backend
from riskscope.llm.prompts import PLACEHOLDER_ANALYSIS, build_batch_prompt
from riskscope.models.findings import Finding, Insight
from riskscope.models.outcome import AnalysisOutcome, BackendSelection
from riskscope.utils.logging import run_fields

logger = logging.getLogger(__name__)

Batch = tuple[Finding, ...]


def filter_candidates(findings: Sequence[Finding]) -> list[Finding]:
    """Keep only findings with at least one reported issue, in input order."""
    return [finding for finding in findings if finding.has_issues]


def plan_batches(candidates: Sequence[Finding], batch_size: int) -> list[Batch]:
    """Split candidates into contiguous, order-preserving batches.

    Args:
        candidates: Findings to analyze
        batch_size: Maximum findings per batch

    Returns:
        ceil(len(candidates) / batch_size) batches; the last may be smaller

    Raises:
        ValueError: If batch_size is less than 1
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1. Got: {batch_size}")
    return [
        tuple(candidates[start : start + batch_size])
        for start in range(0, len(candidates), batch_size)
    ]


class RateLimiter:
    """Fixed pause between consecutive batches.

    Flat pacing sized to stay under an external requests-per-minute ceiling;
    not a backoff. The engine calls wait() only between batches.
    """

    def __init__(
        self,
        delay_seconds: float,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self.pauses = 0

    def wait(self) -> None:
        self.pauses += 1
        if self.delay_seconds > 0:
            logger.info(
                "Rate limit pause (%.1fs)...",
                self.delay_seconds,
                extra=run_fields(delay=self.delay_seconds, pause=self.pauses),
            )
            self._sleep(self.delay_seconds)


def aggregate_insights(batch: Batch, outcome: AnalysisOutcome) -> list[Insight]:
    """Expand one batch outcome into one insight per finding.

    Every finding in a successful batch shares the batch's analysis text; every
    finding in a failed batch gets the placeholder.
    """
    if outcome.ok and outcome.text is not None:
        text, failed = outcome.text, False
    else:
        text, failed = PLACEHOLDER_ANALYSIS, True

    return [
        Insight(
            dependency_name=finding.dependency.name,
            version=finding.dependency.version,
            analysis=text,
            failed=failed,
        )
        for finding in batch
    ]


@dataclass
class AnalysisReport:
    """Summary of one engine run.

    Attributes:
        insights: One insight per candidate finding, in input order
        selection: Backend used for the run
        batches: Number of batches executed
        failed_batches: Number of batches that fell back to placeholders
        notices: User-facing notices raised during the run
    """

    insights: list[Insight] = field(default_factory=list)
    selection: BackendSelection = field(default_factory=BackendSelection.none)
    batches: int = 0
    failed_batches: int = 0
    notices: list[str] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return self.failed_batches > 0

    def notice(self, message: str, **fields: Any) -> None:
        """Record a user-facing notice and log it as a warning with run context."""
        self.notices.append(message)
        logger.warning(message, extra=run_fields(**fields))


def run_batches(
    batches: Sequence[Batch],
    backend: AnalysisBackend,
    limiter: RateLimiter,
    report: AnalysisReport,
) -> list[Insight]:
    """Execute batches in order, pacing between them.

    Args:
        batches: Planned batches
        backend: Backend for this run
        limiter: Rate limiter invoked between batches
        report: Report updated with batch counts

    Returns:
        Insights for all batches, in batch order
    """
    insights: list[Insight] = []
    total = len(batches)

    for index, batch in enumerate(batches):
        if index > 0:
            limiter.wait()

        context = {
            "batch": index + 1,
            "batches": total,
            "deps": len(batch),
            "backend": backend.name,
        }
        logger.info(
            "Batch %d/%d (%d deps)...", index + 1, total, len(batch), extra=run_fields(**context)
        )
        prompt = build_batch_prompt(batch)
        outcome = backend.analyze(prompt)
        report.batches += 1

        if outcome.ok:
            logger.info("Batch %d/%d succeeded", index + 1, total, extra=run_fields(**context))
        else:
            report.failed_batches += 1
            reason = outcome.reason.value if outcome.reason else "unknown"
            report.notice(
                f"Batch {index + 1}/{total} failed ({reason}): {outcome.detail}",
                reason=reason,
                **context,
            )

        insights.extend(aggregate_insights(batch, outcome))

    return insights


class InsightEngine:
    """Runs dependency risk analysis with a backend fixed for the run.

    Usage:
        engine = InsightEngine(config.analysis)
        report = engine.analyze(findings)
    """

    def __init__(
        self,
        config: AnalysisConfig,
        detector: BackendDetector | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Analysis configuration
            detector: Backend detector (built from config when None)
            sleep: Sleep function used by the rate limiter
        """
        self.config = config
        self.detector = detector
        self.sleep = sleep

    def analyze(
        self,
        findings: Sequence[Finding],
        selection: BackendSelection | None = None,
        backend: AnalysisBackend | None = None,
    ) -> AnalysisReport:
        """Analyze findings and return one insight per candidate.

        Args:
            findings: Findings from the issue search, in display order
            selection: Pre-resolved backend selection (resolved here when None)
            backend: Pre-built backend (built from the selection when None)

        Returns:
            AnalysisReport with ordered insights

        Raises:
            BackendConfigError: If the selected backend cannot be constructed
        """
        report = AnalysisReport()

        candidates = filter_candidates(findings)
        if not candidates:
            report.notices.append("No issues found in dependencies. Nothing to analyze.")
            logger.info(report.notices[-1])
            return report

        if backend is not None:
            selection = backend.selection
        elif selection is None:
            selection = resolve_backend(self.config, self.detector)
        report.selection = selection

        if not selection.available:
            report.notice(
                "No analysis backend available (no API key and no gemini/gh CLI "
                "detected). Skipping intelligence analysis."
            )
            return report

        if backend is None:
            backend = create_backend(selection, self.config)

        batches = plan_batches(candidates, self.config.batch_size)
        logger.info(
            "Analyzing %d dependencies with issues using %s: %d batches of up to %d",
            len(candidates),
            backend.name,
            len(batches),
            self.config.batch_size,
        )

        limiter = RateLimiter(self.config.rate_limit_delay, self.sleep)
        report.insights = run_batches(batches, backend, limiter, report)

        logger.info(
            "Analysis complete: %d insights (%d/%d batches failed)",
            len(report.insights),
            report.failed_batches,
            report.batches,
            extra=run_fields(
                backend=backend.name,
                insights=len(report.insights),
                failed_batches=report.failed_batches,
            ),
        )
        return report


def analyze_findings(
    findings: Sequence[Finding],
    config: AnalysisConfig | None = None,
) -> list[Insight]:
    """Analyze findings with a backend chosen from the configuration.

    Args:
        findings: Findings to analyze
        config: Analysis configuration (defaults when None)

    Returns:
        One insight per finding with issues, in input order
    """
    engine = InsightEngine(config or AnalysisConfig())
    return engine.analyze(findings).insights
