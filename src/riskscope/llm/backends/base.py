"""Abstract base class for analysis backends.

All backends MUST implement this interface. Each backend:
1. Renders a backend-specific request from the prompt text
2. Executes the request (network call or external process) under a timeout
3. Parses the raw response into analysis text
4. Raises BackendCallError for any failure, which analyze() converts to an outcome

Adding a backend MUST NOT require changes to the engine.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from riskscope.models.outcome import AnalysisOutcome, BackendSelection, FailureReason

logger = logging.getLogger(__name__)


class AnalysisBackend(ABC):
    """Interchangeable analysis provider.

    Attributes:
        selection: The run's backend selection
        timeout: Per-call timeout in seconds
    """

    def __init__(self, selection: BackendSelection, timeout: int) -> None:
        """Initialize the backend.

        Args:
            selection: Backend selection produced for this run
            timeout: Per-call timeout in seconds
        """
        self.selection = selection
        self.timeout = timeout

    @property
    def name(self) -> str:
        return self.selection.kind.value

    @abstractmethod
    def render_request(self, prompt: str) -> Any:
        """Build the backend-specific request for a prompt."""

    @abstractmethod
    def execute(self, request: Any) -> Any:
        """Send the request and return the raw response.

        Raises:
            BackendCallError: On transport failure, timeout, or error status
        """

    @abstractmethod
    def parse_response(self, raw: Any) -> str:
        """Extract analysis text from a raw response.

        Raises:
            BackendCallError: If the response is malformed or empty
        """

    def analyze(self, prompt: str) -> AnalysisOutcome:
        """Run one backend call for a rendered prompt.

        Args:
            prompt: Rendered batch prompt

        Returns:
            Success with analysis text, or a classified failure
        """
        request = self.render_request(prompt)
        try:
            raw = self.execute(request)
            text = self.parse_response(raw)
        except BackendCallError as e:
            logger.debug("%s call failed: %s", self.name, e)
            return AnalysisOutcome.failure(e.reason, str(e))
        return AnalysisOutcome.success(text)


class BackendCallError(Exception):
    """Raised when a single backend call fails."""

    def __init__(self, reason: FailureReason, message: str) -> None:
        self.reason = reason
        self.message = message
        super().__init__(f"{reason.value}: {message}")


class BackendConfigError(Exception):
    """Raised when a backend cannot be constructed from the configuration."""


def classify_error_output(
    output: str,
    signatures: list[tuple[FailureReason, tuple[str, ...]]],
) -> FailureReason:
    """Classify process error output by the first matching signature group.

    Args:
        output: Combined stderr/stdout of the failed process
        signatures: (reason, substrings) pairs checked in order, case-insensitively

    Returns:
        Matching FailureReason, GENERIC if nothing matches
    """
    lowered = output.lower()
    for reason, needles in signatures:
        if any(needle.lower() in lowered for needle in needles):
            return reason
    return FailureReason.GENERIC
