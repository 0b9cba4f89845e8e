"""riskscope data models.

This module exports all core entities used throughout the application:
- Finding: A dependency plus the issues discovered about it
- Dependency / Issue / Ecosystem: Finding components
- Insight: Analysis text for one candidate finding
- BackendSelection / BackendKind: The backend chosen for a run
- AnalysisOutcome / FailureReason: Result of one batch call
"""

from riskscope.models.findings import Dependency, Ecosystem, Finding, Insight, Issue
from riskscope.models.outcome import (
    AnalysisOutcome,
    BackendKind,
    BackendSelection,
    FailureReason,
)

__all__ = [
    "AnalysisOutcome",
    "BackendKind",
    "BackendSelection",
    "Dependency",
    "Ecosystem",
    "FailureReason",
    "Finding",
    "Insight",
    "Issue",
]
