"""Command-line front-end for the voting workflows."""

import logging
import time
from typing import List, Optional

import typer
from pythonjsonlogger.json import JsonFormatter

from .config import Settings
from .exceptions import VotingError, user_message
from .gateway import NodeGateway
from .monitor import NetworkStatusMonitor
from .types import TxResult
from .workflows import VotingWorkflows, explorer_transaction_url

app = typer.Typer(help="Deploy and interact with a voting contract on an Alephium node.")


def configure_logging(json_logs: bool, verbose: bool) -> None:
    handler = logging.StreamHandler()
    if json_logs:
        handler.setFormatter(JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING, handlers=[handler], force=True
    )


@app.callback()
def main(
    ctx: typer.Context,
    node_host: Optional[str] = typer.Option(None, help="Node URL (default $ALEPHIUM_NODE_HOST)"),
    wallet_name: Optional[str] = typer.Option(None, help="Wallet name (default $ALEPHIUM_WALLET_NAME)"),
    wallet_password: Optional[str] = typer.Option(
        None, help="Wallet password (default $ALEPHIUM_WALLET_PASSWORD)"
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Log as JSON lines"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every request"),
):
    configure_logging(json_logs, verbose)
    try:
        settings = Settings.from_env()
    except ValueError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)
    if node_host:
        settings.node_host = node_host.rstrip("/")
    if wallet_name:
        settings.wallet_name = wallet_name
    if wallet_password:
        settings.wallet_password = wallet_password
    ctx.obj = settings


def _workflows(settings: Settings) -> VotingWorkflows:
    gateway = NodeGateway(settings.node_host, timeout=settings.request_timeout)
    return VotingWorkflows(gateway, settings.wallet_name, settings.wallet_password)


def _report(settings: Settings, result: TxResult) -> None:
    typer.echo(f"Transaction id: {result.tx_id}")
    typer.echo(
        f"Check your transaction here {explorer_transaction_url(settings.explorer_url, result.tx_id)}. "
        "Reload the explorer page if the transaction is not found."
    )


def _fail(error: VotingError) -> None:
    typer.echo(f"Error: {user_message(error)}", err=True)
    raise typer.Exit(code=1)


@app.command()
def deploy(
    ctx: typer.Context,
    title: str = typer.Option(..., help="Title of the voting"),
    voter: List[str] = typer.Option([], help="Voter address (repeatable, defaults to the administrator)"),
):
    """Deploy a new voting contract administered by the wallet's active address."""
    settings: Settings = ctx.obj
    try:
        result = _workflows(settings).deploy_voting(title, voter)
    except VotingError as e:
        _fail(e)
    _report(settings, result)


@app.command()
def allocate(ctx: typer.Context, deployment_tx_id: str):
    """Allocate one voting token to every voter."""
    settings: Settings = ctx.obj
    try:
        result = _workflows(settings).allocate_tokens(deployment_tx_id)
    except VotingError as e:
        _fail(e)
    _report(settings, result)


@app.command()
def vote(
    ctx: typer.Context,
    deployment_tx_id: str,
    choice: bool = typer.Option(..., "--yes/--no", help="Vote yes or no"),
):
    """Cast a vote."""
    settings: Settings = ctx.obj
    try:
        result = _workflows(settings).vote(deployment_tx_id, choice)
    except VotingError as e:
        _fail(e)
    _report(settings, result)


@app.command()
def close(ctx: typer.Context, deployment_tx_id: str):
    """Close the voting."""
    settings: Settings = ctx.obj
    try:
        result = _workflows(settings).close(deployment_tx_id)
    except VotingError as e:
        _fail(e)
    _report(settings, result)


@app.command()
def state(ctx: typer.Context, deployment_tx_id: str):
    """Show the current state of a voting."""
    settings: Settings = ctx.obj
    try:
        contract_state = _workflows(settings).show_state(deployment_tx_id)
    except VotingError as e:
        _fail(e)
    typer.echo(f"Title: {contract_state.title}")
    typer.echo(f"Yes: {contract_state.yes_count}")
    typer.echo(f"No: {contract_state.no_count}")
    typer.echo(f"Closed: {str(contract_state.is_closed).lower()}")
    typer.echo(f"Initialized: {str(contract_state.initialized).lower()}")
    typer.echo(f"Administrator: {contract_state.administrator}")
    typer.echo(f"Voters: {', '.join(contract_state.voters)}")


@app.command()
def network(ctx: typer.Context):
    """Probe the node once and print its network."""
    settings: Settings = ctx.obj
    monitor = NetworkStatusMonitor(NodeGateway(settings.node_host, timeout=settings.request_timeout))
    status = monitor.poll_once()
    typer.echo(status.label)
    if not status.is_safe_for_testing:
        typer.echo("Warning: not connected to testnet", err=True)


@app.command()
def watch(ctx: typer.Context):
    """Print the node's network status whenever it changes, until interrupted."""
    settings: Settings = ctx.obj
    monitor = NetworkStatusMonitor(
        NodeGateway(settings.node_host, timeout=settings.request_timeout),
        interval=settings.poll_interval,
    )
    monitor.subscribe(lambda status: typer.echo(status.label))
    with monitor:
        try:
            while monitor.running:
                time.sleep(settings.poll_interval)
        except KeyboardInterrupt:
            pass


if __name__ == "__main__":
    app()
