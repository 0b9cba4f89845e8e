"""Unit tests for backend preflight checks."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from riskscope.config import AnalysisConfig, GeminiAPIConfig
from riskscope.utils.preflight import PreflightChecker, PreflightResult, ToolCheck


class TestPreflightResult:
    """Tests for PreflightResult."""

    def test_optional_missing_is_warning(self) -> None:
        result = PreflightResult()
        result.add_check(ToolCheck(name="gh", available=False))

        assert result.success
        assert result.warnings == ["Optional tool not found: gh"]
        assert not result.any_available

    def test_required_missing_is_error(self) -> None:
        result = PreflightResult()
        result.add_check(ToolCheck(name="litellm", available=False, required=True))

        assert not result.success
        assert result.errors == ["Required tool not found: litellm"]

    def test_to_dict(self) -> None:
        result = PreflightResult()
        result.add_check(ToolCheck(name="gemini", available=True, path="/usr/bin/gemini"))

        data = result.to_dict()

        assert data["success"] is True
        assert data["checks"][0]["name"] == "gemini"
        assert data["checks"][0]["path"] == "/usr/bin/gemini"


class TestRunProbe:
    """Tests for PreflightChecker.run_probe."""

    def test_exit_zero_succeeds(self) -> None:
        checker = PreflightChecker(timeout=3)
        done = subprocess.CompletedProcess(args=[], returncode=0, stdout="1.0", stderr="")

        with patch("subprocess.run", return_value=done) as run:
            assert checker.run_probe("/usr/bin/gh", ["models", "--help"])

        assert run.call_args[0][0] == ["/usr/bin/gh", "models", "--help"]
        assert run.call_args[1]["timeout"] == 3

    def test_nonzero_exit_fails(self) -> None:
        done = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="unknown")

        with patch("subprocess.run", return_value=done):
            assert not PreflightChecker().run_probe("gh", ["models", "--help"])

    @pytest.mark.parametrize(
        "error",
        [subprocess.TimeoutExpired("gemini", 10), FileNotFoundError("gemini"), PermissionError()],
    )
    def test_errors_fail_quietly(self, error: Exception) -> None:
        with patch("subprocess.run", side_effect=error):
            assert not PreflightChecker().run_probe("gemini", ["--version"])


class TestCheckBackends:
    """Tests for PreflightChecker.check_backends."""

    def test_reports_every_candidate(self) -> None:
        """One check for the API key plus one per probe candidate."""
        checker = PreflightChecker()
        checker.check_command_available = MagicMock(  # type: ignore[method-assign]
            side_effect=lambda name: (name == "gh", "/usr/bin/gh" if name == "gh" else None)
        )
        checker.run_probe = MagicMock(return_value=True)  # type: ignore[method-assign]
        checker.get_command_version = MagicMock(return_value="gh 2.60.0")  # type: ignore[method-assign]

        result = checker.check_backends(AnalysisConfig())

        names = [c.name for c in result.checks]
        assert names == ["gemini-api", "gemini", "gemini.cmd", "gemini.exe", "gh"]
        gh_check = result.checks[-1]
        assert gh_check.available
        assert gh_check.version == "gh 2.60.0"
        assert result.any_available
        checker.run_probe.assert_called_once_with("/usr/bin/gh", ["models", "--help"])

    def test_failed_probe_is_unavailable(self) -> None:
        checker = PreflightChecker()
        checker.check_command_available = MagicMock(return_value=(True, "/bin/x"))  # type: ignore[method-assign]
        checker.run_probe = MagicMock(return_value=False)  # type: ignore[method-assign]

        result = checker.check_backends(AnalysisConfig())

        assert not result.any_available
        assert "probe" in result.checks[1].message

    def test_api_key_counts_as_available(self) -> None:
        checker = PreflightChecker()
        checker.check_command_available = MagicMock(return_value=(False, None))  # type: ignore[method-assign]

        result = checker.check_backends(AnalysisConfig(gemini_api=GeminiAPIConfig(api_key="k")))

        assert result.checks[0].available
        assert result.any_available

    def test_litellm_mode_requires_package(self) -> None:
        checker = PreflightChecker()
        checker.check_command_available = MagicMock(return_value=(False, None))  # type: ignore[method-assign]

        with patch("importlib.util.find_spec", return_value=None):
            result = checker.check_backends(AnalysisConfig(backend="litellm"))

        assert result.checks[-1].name == "litellm"
        assert not result.success
