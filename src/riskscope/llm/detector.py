"""Backend detection.

Probes the local environment for analysis backends in a fixed priority order and
selects exactly one for the whole run. The candidate list is plain data so the
order can be inspected and tested independently of the probing.
"""

import logging
from dataclasses import dataclass, field

from riskscope.config import AnalysisConfig
from riskscope.models.outcome import BackendKind, BackendSelection
from riskscope.utils.preflight import PreflightChecker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeCandidate:
    """A backend binary to probe.

    Attributes:
        kind: Backend family the binary belongs to
        binary: Binary name to locate on PATH
        probe_args: Arguments of a harmless version/status query
        model: Model identifier the backend will use if selected
    """

    kind: BackendKind
    binary: str
    probe_args: list[str] = field(default_factory=lambda: ["--version"])
    model: str | None = None


def build_probe_candidates(
    config: AnalysisConfig,
    kinds: frozenset[BackendKind] | None = None,
) -> list[ProbeCandidate]:
    """Build the ordered probe list for a configuration.

    Local Gemini CLI spellings come first, then the hosted gh models CLI.

    Args:
        config: Analysis configuration
        kinds: Restrict candidates to these backend kinds (all when None)

    Returns:
        Candidates in probe priority order
    """
    candidates = [
        ProbeCandidate(
            kind=BackendKind.GEMINI_CLI,
            binary=binary,
            probe_args=["--version"],
            model=config.gemini_cli.model,
        )
        for binary in config.gemini_cli.binaries
    ]
    candidates.append(
        ProbeCandidate(
            kind=BackendKind.GH_MODELS,
            binary=config.gh_models.binary,
            probe_args=["models", "--help"],
            model=config.gh_models.model,
        )
    )

    if kinds is not None:
        candidates = [c for c in candidates if c.kind in kinds]
    return candidates


class BackendDetector:
    """Selects the first working backend binary.

    Detection runs at most once per detector; later calls return the cached
    selection without probing again.
    """

    def __init__(
        self,
        candidates: list[ProbeCandidate],
        checker: PreflightChecker | None = None,
    ) -> None:
        """Initialize the detector.

        Args:
            candidates: Candidates in priority order
            checker: Preflight checker used for PATH lookup and probes
        """
        self.candidates = list(candidates)
        self.checker = checker or PreflightChecker()
        self._selection: BackendSelection | None = None

    def detect(self) -> BackendSelection:
        """Return the selected backend, probing on first call only."""
        if self._selection is None:
            self._selection = self._probe_candidates()
        return self._selection

    def _probe_candidates(self) -> BackendSelection:
        for candidate in self.candidates:
            available, path = self.checker.check_command_available(candidate.binary)
            if not available or path is None:
                logger.debug("Probe miss: %s not on PATH", candidate.binary)
                continue

            if not self.checker.run_probe(path, candidate.probe_args):
                logger.debug(
                    "Probe miss: %s %s failed",
                    path,
                    " ".join(candidate.probe_args),
                )
                continue

            logger.info("Detected %s backend: %s", candidate.kind.value, path)
            return BackendSelection(kind=candidate.kind, command=path, model=candidate.model)

        logger.debug("No backend binary detected (%d candidates probed)", len(self.candidates))
        return BackendSelection.none()


_KIND_BY_MODE = {
    "gemini_cli": BackendKind.GEMINI_CLI,
    "gh_models": BackendKind.GH_MODELS,
}


def resolve_backend(
    config: AnalysisConfig,
    detector: BackendDetector | None = None,
    checker: PreflightChecker | None = None,
) -> BackendSelection:
    """Apply the configured selection policy.

    - auto: keyed Gemini API when a key is present, else the first detected binary
    - gemini_api: keyed Gemini API, or no backend when the key is missing
    - gemini_cli / gh_models: detection restricted to that backend
    - litellm: the configured LiteLLM provider
    - none: no backend

    Args:
        config: Analysis configuration
        detector: Detector to use (built from the config when None)
        checker: Preflight checker for a detector built here

    Returns:
        The run's BackendSelection
    """
    mode = config.backend

    if mode == "none":
        return BackendSelection.none()

    if mode == "litellm":
        return BackendSelection(kind=BackendKind.LITELLM, model=config.llm.get_litellm_model_name())

    if mode in ("auto", "gemini_api"):
        if config.gemini_api.resolve_api_key():
            return BackendSelection(kind=BackendKind.GEMINI_API, model=config.gemini_api.model)
        if mode == "gemini_api":
            return BackendSelection.none()

    if detector is None:
        kinds = frozenset({_KIND_BY_MODE[mode]}) if mode in _KIND_BY_MODE else None
        detector = BackendDetector(
            build_probe_candidates(config, kinds),
            checker or PreflightChecker(timeout=config.probe_timeout),
        )
    return detector.detect()
