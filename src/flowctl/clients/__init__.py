"""API clients for external services."""

from flowctl.clients.n8n import N8nClient

__all__ = ["N8nClient"]
