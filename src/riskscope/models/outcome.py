"""Backend selection and per-batch outcome entities."""

from dataclasses import dataclass
from enum import Enum


class BackendKind(Enum):
    """Analysis backend families."""

    GEMINI_API = "gemini_api"  # direct keyed API
    GEMINI_CLI = "gemini_cli"  # local CLI, ambient credential
    GH_MODELS = "gh_models"  # hosted CLI, subscription-gated
    LITELLM = "litellm"
    NONE = "none"


@dataclass(frozen=True)
class BackendSelection:
    """Backend chosen for a run.

    Determined once per run and passed by parameter to every backend call.

    Attributes:
        kind: Selected backend family
        command: Resolved invocation handle (binary path) for CLI backends
        model: Model identifier the backend will be asked to use
    """

    kind: BackendKind
    command: str | None = None
    model: str | None = None

    @property
    def available(self) -> bool:
        """Return True if a backend was selected."""
        return self.kind is not BackendKind.NONE

    @classmethod
    def none(cls) -> "BackendSelection":
        """Selection used when no backend is usable."""
        return cls(kind=BackendKind.NONE)


class FailureReason(Enum):
    """Classified cause of a failed backend call."""

    RATE_LIMITED = "rate_limited"
    NOT_AUTHENTICATED = "not_authenticated"
    ACCESS_DENIED = "access_denied"
    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    BAD_STATUS = "bad_status"
    MALFORMED_RESPONSE = "malformed_response"
    EMPTY_RESPONSE = "empty_response"
    GENERIC = "generic"


@dataclass(frozen=True)
class AnalysisOutcome:
    """Result of analyzing one batch: text on success, a reason on failure."""

    text: str | None = None
    reason: FailureReason | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def success(cls, text: str) -> "AnalysisOutcome":
        return cls(text=text)

    @classmethod
    def failure(cls, reason: FailureReason, detail: str = "") -> "AnalysisOutcome":
        return cls(reason=reason, detail=detail)
