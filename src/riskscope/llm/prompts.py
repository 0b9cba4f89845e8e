"""Prompt templates for dependency risk analysis.

One prompt is rendered per batch of findings. Rendering is pure: the same batch
always produces the same prompt text, so prompts can be tested without a backend.
"""

from collections.abc import Sequence

from riskscope.models.findings import Finding

# =============================================================================
# Batch Analysis Preamble
# =============================================================================

BATCH_ANALYSIS_PREAMBLE = (
    "You are a Senior Software Engineer analyzing GitHub issues for multiple libraries.\n"
    "For EACH library below, provide:\n"
    "1. **Known Anomalies**: Bugs or quirks in THIS SPECIFIC version\n"
    "2. **Anti-patterns to Avoid**: Common mistakes found in issues\n"
    "3. **Intelligent Pattern**: The recommended way to use this version safely\n\n"
    "Be concise but specific. Focus on actionable insights.\n\n"
)

# Substituted for real analysis text when a batch's backend call fails.
# Must never collide with text a backend could plausibly return.
PLACEHOLDER_ANALYSIS = "[riskscope] Analysis unavailable: the backend call for this batch failed."


def format_finding(index: int, finding: Finding) -> str:
    """Render one finding as a prompt section.

    Args:
        index: 1-based position of the finding within its batch
        finding: Finding to render

    Returns:
        Prompt section text, ending with a blank line
    """
    dependency = finding.dependency
    lines = [
        "---",
        f"## Library {index}: {dependency.name} (version {dependency.version})",
        "### Issues Found:",
    ]
    lines.extend(f"- [{issue.state}] {issue.title}" for issue in finding.issues)
    return "\n".join(lines) + "\n\n"


def build_batch_prompt(batch: Sequence[Finding]) -> str:
    """Build the analysis prompt for a batch of findings.

    Args:
        batch: Findings to analyze together, in batch order

    Returns:
        Complete prompt text (preamble followed by one section per finding)
    """
    sections = [format_finding(i, finding) for i, finding in enumerate(batch, start=1)]
    return BATCH_ANALYSIS_PREAMBLE + "".join(sections)
