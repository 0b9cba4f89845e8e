"""riskscope - Dependency risk insights from issue-tracker findings.

riskscope takes dependencies together with the issues found about them and asks an
LLM backend for a risk summary: known anomalies, anti-patterns to avoid, and the
safe way to use each version.

Core principles:
- One backend per run: keyed Gemini API, local gemini CLI, or hosted gh models
- Batching plus fixed pacing keeps runs under external rate ceilings
- Failure isolation: a failed batch never discards other batches' results
- Stable output: exactly one insight per dependency with issues, in input order
"""

__version__ = "0.1.0"
__author__ = "riskscope Contributors"
