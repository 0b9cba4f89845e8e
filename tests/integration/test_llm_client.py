"""Integration tests for the LiteLLM client and the litellm backend.

Tests LLMClient with mocked LiteLLM responses to verify correct integration
behavior without making actual API calls.
"""

from unittest.mock import MagicMock, patch

import litellm
import pytest

from riskscope.config import AnalysisConfig, LLMConfig
from riskscope.engine import InsightEngine
from riskscope.llm.client import LLMClient, LLMError
from riskscope.models.findings import Finding


@pytest.fixture
def mock_litellm_response() -> MagicMock:
    """Create a mock LiteLLM response."""
    mock_response = MagicMock()
    mock_response.choices = [
        MagicMock(
            message=MagicMock(content="Known Anomalies: none reported"),
            finish_reason="stop",
        )
    ]
    mock_response.model = "ollama/llama3.2"
    mock_response.usage = MagicMock(prompt_tokens=10, completion_tokens=5, total_tokens=15)
    return mock_response


class TestLLMClientCompletion:
    """Tests for LLMClient.complete method."""

    def test_completion_kwargs(self, mock_litellm_response: MagicMock) -> None:
        """Ollama calls carry the model prefix, api_base, zero temperature and timeout."""
        client = LLMClient(LLMConfig(provider="ollama", model="llama3.2"), timeout=30)

        with patch("litellm.completion", return_value=mock_litellm_response) as mock_call:
            response = client.complete("Hello!")

        call_kwargs = mock_call.call_args[1]
        assert call_kwargs["model"] == "ollama/llama3.2"
        assert call_kwargs["api_base"] == "http://localhost:11434"
        assert call_kwargs["temperature"] == 0
        assert call_kwargs["timeout"] == 30
        assert "api_key" not in call_kwargs
        assert response.content == "Known Anomalies: none reported"
        assert response.usage["total_tokens"] == 15

    def test_api_key_and_system_prompt(self, mock_litellm_response: MagicMock) -> None:
        """Cloud providers pass the key; the system prompt comes first."""
        client = LLMClient(LLMConfig(provider="claude", model="claude-sonnet-4", api_key="k"))

        with patch("litellm.completion", return_value=mock_litellm_response) as mock_call:
            client.complete("Hello!", system_prompt="Be terse.", max_tokens=100)

        call_kwargs = mock_call.call_args[1]
        assert call_kwargs["api_key"] == "k"
        assert call_kwargs["max_tokens"] == 100
        assert [m["role"] for m in call_kwargs["messages"]] == ["system", "user"]
        assert "api_base" not in call_kwargs


class TestLLMClientErrors:
    """Tests for LLMClient error handling."""

    @pytest.fixture
    def client(self) -> LLMClient:
        return LLMClient(LLMConfig(provider="ollama", model="llama3.2"))

    def test_authentication_error(self, client: LLMClient) -> None:
        with patch("litellm.completion") as mock_call:
            mock_call.side_effect = litellm.exceptions.AuthenticationError(
                message="Invalid API key", llm_provider="ollama", model="llama3.2"
            )

            with pytest.raises(LLMError, match="Authentication failed") as exc_info:
                client.complete("Hello!")

        assert exc_info.value.kind == "auth"

    def test_rate_limit_error(self, client: LLMClient) -> None:
        with patch("litellm.completion") as mock_call:
            mock_call.side_effect = litellm.exceptions.RateLimitError(
                message="Rate limit exceeded", llm_provider="ollama", model="llama3.2"
            )

            with pytest.raises(LLMError) as exc_info:
                client.complete("Hello!")

        assert exc_info.value.kind == "rate_limit"

    def test_connection_error(self, client: LLMClient) -> None:
        with patch("litellm.completion") as mock_call:
            mock_call.side_effect = litellm.exceptions.APIConnectionError(
                message="Connection refused", llm_provider="ollama", model="llama3.2"
            )

            with pytest.raises(LLMError, match="Connection failed") as exc_info:
                client.complete("Hello!")

        assert exc_info.value.kind == "connection"

    def test_generic_error(self, client: LLMClient) -> None:
        with patch("litellm.completion", side_effect=Exception("Unknown error")):
            with pytest.raises(LLMError, match="LLM completion failed") as exc_info:
                client.complete("Hello!")

        assert exc_info.value.kind == "other"

    @pytest.mark.parametrize("choices", [[], None])
    def test_response_without_choices(self, client: LLMClient, choices: object) -> None:
        """A response with no usable choice is malformed, not an IndexError."""
        response = MagicMock()
        response.choices = choices

        with patch("litellm.completion", return_value=response):
            with pytest.raises(LLMError, match="has no message") as exc_info:
                client.complete("Hello!")

        assert exc_info.value.kind == "malformed"


class TestLiteLLMEngine:
    """End-to-end engine runs through the litellm backend."""

    def test_engine_with_litellm_backend(
        self,
        twelve_candidates: list[Finding],
        mock_litellm_response: MagicMock,
        fake_sleep,
        sleep_calls: list[float],
    ) -> None:
        """backend: litellm routes every batch through litellm.completion."""
        config = AnalysisConfig(backend="litellm", batch_size=5, rate_limit_delay=2.0)
        engine = InsightEngine(config, sleep=fake_sleep)

        with patch("litellm.completion", return_value=mock_litellm_response) as mock_call:
            report = engine.analyze(twelve_candidates)

        assert mock_call.call_count == 3
        assert sleep_calls == [2.0, 2.0]
        assert len(report.insights) == 12
        assert report.insights[0].analysis == "Known Anomalies: none reported"

    def test_connection_failure_is_placeholder(
        self,
        twelve_candidates: list[Finding],
        fake_sleep,
    ) -> None:
        """A provider outage degrades every batch without raising."""
        config = AnalysisConfig(backend="litellm", batch_size=6)
        engine = InsightEngine(config, sleep=fake_sleep)

        with patch("litellm.completion") as mock_call:
            mock_call.side_effect = litellm.exceptions.APIConnectionError(
                message="Connection refused", llm_provider="ollama", model="llama3.2"
            )
            report = engine.analyze(twelve_candidates)

        assert len(report.insights) == 12
        assert all(i.failed for i in report.insights)
        assert report.failed_batches == 2
        assert any("transport" in n for n in report.notices)

    def test_empty_choices_is_placeholder(
        self,
        twelve_candidates: list[Finding],
        fake_sleep,
    ) -> None:
        """A provider answering with no choices degrades the batch."""
        response = MagicMock()
        response.choices = []
        config = AnalysisConfig(backend="litellm", batch_size=12)
        engine = InsightEngine(config, sleep=fake_sleep)

        with patch("litellm.completion", return_value=response):
            report = engine.analyze(twelve_candidates)

        assert len(report.insights) == 12
        assert report.failed_batches == 1
        assert "malformed_response" in report.notices[0]
