"""Preflight checks for analysis backends.

Locates backend binaries on PATH, runs their harmless status probes, and reports
which backends a run could use. Missing backends are never fatal: a run without
any backend returns no insights.
"""

import importlib.util
import shutil
import subprocess
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from riskscope.config import AnalysisConfig


@dataclass
class ToolCheck:
    """Result of checking a single backend or tool.

    Attributes:
        name: Tool name
        available: Whether tool is available
        version: Tool version if available
        required: Whether tool is required for this run
        path: Path to executable if available
        message: Status message (human-readable context)
    """

    name: str
    available: bool
    version: str | None = None
    required: bool = False
    path: str | None = None
    message: str = ""


@dataclass
class PreflightResult:
    """Result of preflight validation.

    Attributes:
        success: Whether all required tools are available
        checks: Individual tool check results
        errors: Error messages for missing required tools
        warnings: Warning messages for missing optional tools
    """

    success: bool = True
    checks: list[ToolCheck] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_check(self, check: ToolCheck) -> None:
        """Add a tool check result."""
        self.checks.append(check)

        if not check.available:
            if check.required:
                self.success = False
                self.errors.append(f"Required tool not found: {check.name}")
            else:
                self.warnings.append(f"Optional tool not found: {check.name}")

    @property
    def any_available(self) -> bool:
        """Return True if at least one check succeeded."""
        return any(c.available for c in self.checks)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "success": self.success,
            "checks": [
                {
                    "name": c.name,
                    "available": c.available,
                    "version": c.version,
                    "required": c.required,
                    "path": c.path,
                    "message": c.message,
                }
                for c in self.checks
            ],
            "errors": self.errors,
            "warnings": self.warnings,
        }


class PreflightChecker:
    """Validates backend availability.

    Usage:
        checker = PreflightChecker()
        result = checker.check_backends(config.analysis)
        if not result.any_available:
            ...
    """

    def __init__(self, timeout: int = 10) -> None:
        """Initialize preflight checker.

        Args:
            timeout: Timeout in seconds for probe and version commands
        """
        self.timeout = timeout

    def check_command_available(self, command: str) -> tuple[bool, str | None]:
        """Check if a command is available in PATH.

        Args:
            command: Command name to check

        Returns:
            Tuple of (available, path)
        """
        path = shutil.which(command)
        return path is not None, path

    def run_probe(self, command: str, probe_args: list[str]) -> bool:
        """Run a harmless status command and report whether it succeeded.

        Args:
            command: Resolved command to invoke
            probe_args: Arguments selecting a version/status query

        Returns:
            True if the command exited with status 0
        """
        try:
            result = subprocess.run(
                [command, *probe_args],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except (subprocess.TimeoutExpired, FileNotFoundError, OSError):
            return False
        return result.returncode == 0

    def get_command_version(
        self,
        command: str,
        version_args: list[str] | None = None,
    ) -> str | None:
        """Get version string for a command.

        Args:
            command: Command to get version for
            version_args: Arguments to get version (default: ["--version"])

        Returns:
            Version string if available, None otherwise
        """
        if version_args is None:
            version_args = ["--version"]

        try:
            result = subprocess.run(
                [command, *version_args],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
            if result.returncode == 0:
                # Return first line of output (usually contains version)
                output = result.stdout.strip() or result.stderr.strip()
                return output.split("\n")[0] if output else None
        except (subprocess.TimeoutExpired, FileNotFoundError, OSError):
            pass
        return None

    def check_litellm(self, required: bool = False) -> ToolCheck:
        """Check if the LiteLLM package is importable.

        Args:
            required: Whether LiteLLM is required

        Returns:
            ToolCheck result
        """
        litellm_spec = importlib.util.find_spec("litellm")
        if litellm_spec is None:
            return ToolCheck(
                name="litellm",
                available=False,
                required=required,
                message="Install with: pip install litellm",
            )

        return ToolCheck(
            name="litellm",
            available=True,
            required=required,
            path=litellm_spec.origin,
            message="Unified LLM interface (Python package)",
        )

    def check_gemini_api_key(self, config: "AnalysisConfig") -> ToolCheck:
        """Check whether a Gemini API key is configured.

        Only presence is checked; no request is sent.

        Args:
            config: Analysis configuration

        Returns:
            ToolCheck result
        """
        if config.gemini_api.resolve_api_key():
            return ToolCheck(
                name="gemini-api",
                available=True,
                message=f"API key configured (model: {config.gemini_api.model})",
            )
        return ToolCheck(
            name="gemini-api",
            available=False,
            message="Set analysis.gemini_api.api_key or the GEMINI_API_KEY env var",
        )

    def check_backends(self, config: "AnalysisConfig") -> PreflightResult:
        """Report every backend candidate for this configuration.

        Args:
            config: Analysis configuration

        Returns:
            PreflightResult with one check per candidate
        """
        # Imported lazily: the detector module depends on this one
        from riskscope.llm.detector import build_probe_candidates

        result = PreflightResult()
        result.add_check(self.check_gemini_api_key(config))

        for candidate in build_probe_candidates(config):
            available, path = self.check_command_available(candidate.binary)
            if not available or path is None:
                result.add_check(
                    ToolCheck(
                        name=candidate.binary,
                        available=False,
                        message=f"{candidate.kind.value}: not found on PATH",
                    )
                )
                continue

            probe_ok = self.run_probe(path, candidate.probe_args)
            version = self.get_command_version(path) if probe_ok else None
            result.add_check(
                ToolCheck(
                    name=candidate.binary,
                    available=probe_ok,
                    version=version,
                    path=path,
                    message=(
                        f"{candidate.kind.value}: probe succeeded"
                        if probe_ok
                        else f"{candidate.kind.value}: probe "
                        f"'{' '.join(candidate.probe_args)}' failed"
                    ),
                )
            )

        if config.backend == "litellm":
            result.add_check(self.check_litellm(required=True))

        return result
