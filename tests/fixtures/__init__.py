"""Test fixtures for riskscope.

Files:
- findings.json: Findings as produced by the upstream issue search
"""

from pathlib import Path

# Path to fixtures directory
FIXTURES_DIR = Path(__file__).parent

FINDINGS_PATH = FIXTURES_DIR / "findings.json"
