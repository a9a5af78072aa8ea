"""flowctl - version control and CI/CD tooling for n8n workflow definitions."""

__version__ = "0.1.0"
