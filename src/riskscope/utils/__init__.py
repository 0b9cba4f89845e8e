"""riskscope utility modules.

- logging: stderr logging with human/verbose/JSON modes and per-batch run context
- preflight: Backend availability checks
"""

from riskscope.utils.logging import LogMode, run_fields, setup_logging
from riskscope.utils.preflight import PreflightChecker, PreflightResult, ToolCheck

__all__ = [
    "LogMode",
    "run_fields",
    "setup_logging",
    "PreflightChecker",
    "PreflightResult",
    "ToolCheck",
]
