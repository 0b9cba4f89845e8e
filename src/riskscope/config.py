"""riskscope configuration system.

Configuration is primarily YAML-based with minimal CLI overrides (--backend, --batch-size).
Supports environment variable substitution (${VAR}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.riskscope/config.yaml
3. ./riskscope.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# Environment variable consulted when no API key is configured
GEMINI_API_KEY_ENV = "GEMINI_API_KEY"

VALID_BACKENDS = frozenset({"auto", "gemini_api", "gemini_cli", "gh_models", "litellm", "none"})
VALID_PROVIDERS = frozenset({"claude", "gemini", "ollama", "bedrock"})

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class GeminiAPIConfig:
    """Direct Gemini REST API settings (keyed backend).

    Attributes:
        model: Model identifier placed in the endpoint path
        api_key: API key; falls back to GEMINI_API_KEY when unset
        endpoint: Endpoint template, formatted with the model name
    """

    model: str = "gemini-3-pro-preview"
    api_key: str | None = None
    endpoint: str = (
        "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
    )

    def __post_init__(self) -> None:
        """Validate API settings."""
        if not self.model or not self.model.strip():
            raise ValueError("gemini_api.model cannot be empty")
        if "{model}" not in self.endpoint:
            raise ValueError("gemini_api.endpoint must contain a {model} placeholder")

    def resolve_api_key(self) -> str | None:
        """Return the configured key, or the environment key, or None."""
        key = self.api_key or os.environ.get(GEMINI_API_KEY_ENV)
        return key.strip() if key and key.strip() else None


@dataclass
class GeminiCLIConfig:
    """Local Gemini CLI settings.

    Attributes:
        model: Model passed with --model
        binaries: Binary name spellings to probe, in priority order
    """

    model: str = "gemini-2.5-pro"
    binaries: list[str] = field(default_factory=lambda: ["gemini", "gemini.cmd", "gemini.exe"])

    def __post_init__(self) -> None:
        """Validate CLI settings."""
        if not self.binaries:
            raise ValueError("gemini_cli.binaries must list at least one binary name")


@dataclass
class GHModelsConfig:
    """Hosted GitHub Models CLI settings (gh models extension).

    Attributes:
        binary: gh binary name
        model: Model identifier passed to `gh models run`
        max_tokens: Token cap passed with --max-tokens
    """

    binary: str = "gh"
    model: str = "openai/gpt-4.1"
    max_tokens: int = 4096

    def __post_init__(self) -> None:
        """Validate hosted CLI settings."""
        if self.max_tokens <= 0:
            raise ValueError(f"gh_models.max_tokens must be positive. Got: {self.max_tokens}")


@dataclass
class LLMConfig:
    """LiteLLM provider settings for the litellm backend.

    Attributes:
        provider: LLM provider (claude, gemini, ollama, bedrock)
        model: Model identifier
        api_key: API key (not required for Ollama or Bedrock)
        api_base: API base URL (required for Ollama)
        max_tokens: Maximum response tokens
    """

    provider: str = "ollama"
    model: str = "llama3.2"
    api_key: str | None = None
    api_base: str | None = None
    max_tokens: int = 4096

    def __post_init__(self) -> None:
        """Validate LLM configuration."""
        self.provider = self.provider.lower().strip()
        if self.provider not in VALID_PROVIDERS:
            raise ValueError(f"Invalid LLM provider: {self.provider}. Valid: {sorted(VALID_PROVIDERS)}")

        # API key required for cloud providers (bedrock uses AWS credentials)
        if self.provider in {"claude", "gemini"} and not self.api_key:
            raise ValueError(f"API key required for {self.provider}")

        # API base defaults for Ollama
        if self.provider == "ollama" and not self.api_base:
            self.api_base = "http://localhost:11434"

        if not self.model or not self.model.strip():
            raise ValueError("Model identifier cannot be empty")
        self.model = self.model.strip()

        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive. Got: {self.max_tokens}")

    def get_litellm_model_name(self) -> str:
        """Get the model name in LiteLLM format.

        Returns:
            Model name formatted for LiteLLM
        """
        # LiteLLM uses provider/model format for some providers
        if self.provider == "ollama":
            return f"ollama/{self.model}"
        elif self.provider == "bedrock":
            return f"bedrock/{self.model}"
        elif self.provider == "gemini":
            return f"gemini/{self.model}"
        else:
            # Claude uses anthropic/ prefix in LiteLLM
            return f"anthropic/{self.model}"


@dataclass
class AnalysisConfig:
    """Analysis engine configuration.

    Defaults are sized for the Gemini free tier (15 requests/min): 10 findings per
    call and 5 seconds between calls keeps a run at 12 requests/min.

    Attributes:
        backend: Backend selection mode (auto, gemini_api, gemini_cli, gh_models,
            litellm, none)
        batch_size: Findings per backend call
        rate_limit_delay: Seconds to pause between batches
        timeout: Per-call timeout in seconds
        probe_timeout: Timeout in seconds for backend presence probes
    """

    backend: str = "auto"
    batch_size: int = 10
    rate_limit_delay: float = 5.0
    timeout: int = 120
    probe_timeout: int = 10
    gemini_api: GeminiAPIConfig = field(default_factory=GeminiAPIConfig)
    gemini_cli: GeminiCLIConfig = field(default_factory=GeminiCLIConfig)
    gh_models: GHModelsConfig = field(default_factory=GHModelsConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)

    def __post_init__(self) -> None:
        """Validate engine tunables."""
        self.backend = self.backend.lower().strip()
        if self.backend not in VALID_BACKENDS:
            raise ValueError(f"Invalid backend: {self.backend}. Valid: {sorted(VALID_BACKENDS)}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be at least 1. Got: {self.batch_size}")
        if self.rate_limit_delay < 0:
            raise ValueError(f"rate_limit_delay cannot be negative. Got: {self.rate_limit_delay}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive. Got: {self.timeout}")
        if self.probe_timeout <= 0:
            raise ValueError(f"probe_timeout must be positive. Got: {self.probe_timeout}")


@dataclass
class OutputConfig:
    """Output configuration.

    Attributes:
        path: Output file path (None prints to stdout)
        format: Output format (text, json)
    """

    path: str | None = None
    format: str = "text"

    def __post_init__(self) -> None:
        """Validate output format."""
        valid_formats = {"text", "json"}
        if self.format not in valid_formats:
            raise ValueError(f"Invalid output format: {self.format}. Valid: {sorted(valid_formats)}")


@dataclass
class RiskscopeConfig:
    """Top-level riskscope configuration.

    Attributes:
        analysis: Engine and backend settings
        output: Output path and format
    """

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    # Runtime overrides (set by CLI)
    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax for environment variable substitution.
    Example: ${GEMINI_API_KEY} -> value of GEMINI_API_KEY

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ValueError: If a referenced variable is not set
    """
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return pattern.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.riskscope/config.yaml
    2. ./riskscope.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".riskscope" / "config.yaml",
        start_path / "riskscope.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def _load_analysis_config(data: dict[str, Any]) -> AnalysisConfig:
    defaults = AnalysisConfig()

    api_data = data.get("gemini_api") or {}
    cli_data = data.get("gemini_cli") or {}
    gh_data = data.get("gh_models") or {}
    llm_data = data.get("llm") or {}

    gemini_api = GeminiAPIConfig(
        model=api_data.get("model", defaults.gemini_api.model),
        api_key=api_data.get("api_key") or None,
        endpoint=api_data.get("endpoint", defaults.gemini_api.endpoint),
    )
    gemini_cli = GeminiCLIConfig(
        model=cli_data.get("model", defaults.gemini_cli.model),
        binaries=list(cli_data.get("binaries", defaults.gemini_cli.binaries)),
    )
    gh_models = GHModelsConfig(
        binary=gh_data.get("binary", defaults.gh_models.binary),
        model=gh_data.get("model", defaults.gh_models.model),
        max_tokens=int(gh_data.get("max_tokens", defaults.gh_models.max_tokens)),
    )
    llm = LLMConfig(
        provider=llm_data.get("provider", defaults.llm.provider),
        model=llm_data.get("model", defaults.llm.model),
        api_key=llm_data.get("api_key") or None,
        api_base=llm_data.get("api_base") or None,
        max_tokens=int(llm_data.get("max_tokens", defaults.llm.max_tokens)),
    )

    return AnalysisConfig(
        backend=str(data.get("backend", defaults.backend)),
        batch_size=int(data.get("batch_size", defaults.batch_size)),
        rate_limit_delay=float(data.get("rate_limit_delay", defaults.rate_limit_delay)),
        timeout=int(data.get("timeout", defaults.timeout)),
        probe_timeout=int(data.get("probe_timeout", defaults.probe_timeout)),
        gemini_api=gemini_api,
        gemini_cli=gemini_cli,
        gh_models=gh_models,
        llm=llm,
    )


def load_config_from_dict(data: dict[str, Any]) -> RiskscopeConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        RiskscopeConfig instance

    Raises:
        ValueError: If a value fails validation
    """
    data = substitute_env_vars(data)

    config = RiskscopeConfig()

    if "analysis" in data:
        config.analysis = _load_analysis_config(data["analysis"] or {})

    if "output" in data:
        output_data = data["output"] or {}
        config.output = OutputConfig(
            path=output_data.get("path", config.output.path),
            format=output_data.get("format", config.output.format),
        )

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> RiskscopeConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        RiskscopeConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path) as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = RiskscopeConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# riskscope configuration

analysis:
  # auto: keyed Gemini API if a key is set, else probe gemini CLI, then gh models
  backend: "auto"        # auto, gemini_api, gemini_cli, gh_models, litellm, none
  batch_size: 10         # findings per backend call
  rate_limit_delay: 5    # seconds between calls (Gemini free tier: 15 req/min)
  timeout: 120           # per-call timeout in seconds
  probe_timeout: 10      # presence probe timeout in seconds

  gemini_api:
    model: "gemini-3-pro-preview"
    # api_key: "${GEMINI_API_KEY}"  # defaults to the GEMINI_API_KEY env var

  gemini_cli:
    model: "gemini-2.5-pro"
    binaries: ["gemini", "gemini.cmd", "gemini.exe"]

  gh_models:
    binary: "gh"
    model: "openai/gpt-4.1"
    max_tokens: 4096

  # Only used with backend: litellm
  llm:
    provider: "ollama"   # ollama, claude, gemini, bedrock
    model: "llama3.2"
    api_base: "http://localhost:11434"
    max_tokens: 4096

output:
  format: "text"         # text, json
  # path: "insights.json"
'''
