"""Run the HTTP API."""

import click
import uvicorn
from emitrack.api.app import create_app


@click.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True, envvar="EMITRACK_HOST")
@click.option("--port", type=int, default=5000, show_default=True, envvar="EMITRACK_PORT")
@click.option(
    "--secret-key",
    envvar="EMITRACK_SECRET_KEY",
    help="Secret used to verify bearer tokens",
)
@click.pass_context
def serve(ctx, host: str, port: int, secret_key: str | None):
    """Serve the REST API on the selected database.

    Examples:
        emitrack serve --port 8000
        emitrack --db-path ./finance.db serve --host 0.0.0.0
    """
    app = create_app(database=ctx.obj["db"], secret_key=secret_key)
    click.echo(f"Serving emitrack API on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)


def register_commands(cli):
    """Register serve command with main CLI."""
    cli.add_command(serve)
