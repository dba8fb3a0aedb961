"""
Entry point for running Agent Compliance Eval as a module.

Enables execution via:
    python -m agent_compliance_eval [command] [options]

Examples:
    python -m agent_compliance_eval scenarios
    python -m agent_compliance_eval evaluate -s CS-DATA-REQUEST -r "..."
"""

from agent_compliance_eval.cli import app

if __name__ == "__main__":
    app()
