"""Mock n8n API server command."""

import click

from flowctl.core.context import pass_context, FlowCtlContext
from flowctl.mock.server import DEFAULT_HOST, DEFAULT_PORT, run_server


@click.command("mock-server")
@click.option("--host", default=DEFAULT_HOST, show_default=True, help="Interface to bind")
@click.option("--port", "-p", type=int, default=DEFAULT_PORT, show_default=True, help="Port to listen on")
@click.option("--no-seed", is_flag=True, help="Start without the seeded test workflow")
@pass_context
def mock_server(ctx: FlowCtlContext, host: str, port: int, no_seed: bool) -> None:
    """Run an in-memory mock of the n8n workflows API.

    Any API key is accepted except "invalid-key" (403); a missing key is
    rejected with 401.

    \b
    Examples:
        flowctl mock-server
        N8N_BASE_URL=http://localhost:5678 N8N_API_KEY=test flowctl list
    """
    ctx.output.print_info(f"Mock n8n API running on http://{host}:{port} (Ctrl+C to stop)")
    run_server(host=host, port=port, seed=not no_seed)
