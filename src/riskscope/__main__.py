"""Entry point for running riskscope as a module.

Usage:
    python -m riskscope [command] [options]

Example:
    python -m riskscope analyze findings.json --json
    python -m riskscope check
"""

from riskscope.cli import app

if __name__ == "__main__":
    app()
