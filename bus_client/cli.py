"""
bus_client/cli.py

Administration CLI for the event bus.

Features:
- Check bus liveness
- List and delete topics
- Publish a single event
- Manage this client's subscriptions

Connection settings come from config/settings.yaml (or BUS_CLIENT_CONFIG)
and can be overridden with --url/--uuid or BUS_URL/BUS_UUID.

Usage:
    bus-client topics
    bus-client publish create widgets https://app.example.com/widgets/1
    bus-client subscribe -t widgets -t kitten -c https://app.example.com/events
    bus-client unsubscribe widgets
"""

import logging
import sys
from functools import wraps
from typing import Optional, Union

import click
from rich.console import Console
from rich.table import Table

from bus_client.client import Client
from bus_client.errors import BusClientError
from bus_client.utils.logger import setup_logging

logger = logging.getLogger("bus_client")
console = Console()


class EpochParamType(click.ParamType):
    """Epoch timestamp; integer input stays an int."""

    name = "epoch"

    def convert(self, value, param, ctx):
        if isinstance(value, (int, float)):
            return value
        try:
            return int(value)
        except ValueError:
            pass
        try:
            return float(value)
        except ValueError:
            self.fail(f"{value!r} is not a numeric timestamp", param, ctx)


EPOCH = EpochParamType()


def _handle_errors(command):
    """Print bus client errors in red and exit with status 1."""
    @wraps(command)
    def wrapper(*args, **kwargs):
        try:
            return command(*args, **kwargs)
        except BusClientError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            sys.exit(1)
    return wrapper


def _client(ctx: click.Context, lazy: bool = True) -> Client:
    options = dict(ctx.obj or {})
    options["lazy"] = lazy
    return Client.from_settings(**options)


@click.group(name="bus-client")
@click.option("--url", envvar="BUS_URL", default=None, help="Bus base URL (https)")
@click.option("--uuid", envvar="BUS_UUID", default=None, help="Client identifier")
@click.option("--timeout", type=int, default=None, help="Request timeout in milliseconds")
@click.option("--insecure", is_flag=True, help="Do not verify the bus TLS certificate")
@click.pass_context
def cli(ctx: click.Context, url: Optional[str], uuid: Optional[str], timeout: Optional[int], insecure: bool):
    """
    Event bus administration commands.

    Publish events and manage topics and subscriptions.
    """
    setup_logging()
    ctx.obj = {"url": url, "uuid": uuid, "timeout": timeout}
    if insecure:
        ctx.obj["verify_ssl"] = False


@cli.command(name="pulse")
@click.pass_context
@_handle_errors
def pulse(ctx: click.Context):
    """Check that the bus is reachable."""
    with _client(ctx, lazy=False):
        console.print("[green]✓ Bus is alive[/green]")


@cli.command(name="topics")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON instead of a table")
@click.pass_context
@_handle_errors
def list_topics(ctx: click.Context, as_json: bool):
    """List topics with their publisher and event count."""
    with _client(ctx) as client:
        topics = client.list_topics()

    if as_json:
        console.print_json(data=[t.attributes() for t in topics])
        return

    table = Table(title="Topics")
    table.add_column("Name", style="cyan")
    table.add_column("Publisher", style="magenta")
    table.add_column("Events", justify="right", style="green")

    for topic in topics:
        table.add_row(topic.name, topic.publisher, str(topic.events))

    console.print(table)


@cli.command(name="delete-topic")
@click.argument("topic")
@click.confirmation_option(prompt="Delete this topic and all its events?")
@click.pass_context
@_handle_errors
def delete_topic(ctx: click.Context, topic: str):
    """Delete a topic this client publishes to."""
    with _client(ctx) as client:
        client.delete_topic(topic)
    console.print(f"[green]✓ Topic {topic} deleted[/green]")


@cli.command(name="publish")
@click.argument("kind", type=click.Choice(["create", "update", "delete", "noop"]))
@click.argument("topic")
@click.argument("callback")
@click.option("--timestamp", "-t", type=EPOCH, default=None, help="Event epoch timestamp")
@click.pass_context
@_handle_errors
def publish(ctx: click.Context, kind: str, topic: str, callback: str, timestamp: Optional[Union[int, float]]):
    """Publish one event on TOPIC for the entity at CALLBACK."""
    with _client(ctx) as client:
        result = client.send_event(kind, topic, callback, timestamp)

    if result:
        console.print(f"[green]✓ Event queued[/green] (task {result})")
    else:
        console.print(f"[green]✓ Event published[/green] {kind} {topic}")


@cli.command(name="subscribe")
@click.option("--topic", "-t", "topics", multiple=True, required=True, help="Topic to subscribe to (repeatable)")
@click.option("--callback", "-c", required=True, help="HTTPS URL receiving event batches")
@click.option("--timeout", type=int, default=None, help="Batch delivery timeout in milliseconds")
@click.option("--max", "max_events", type=int, default=None, help="Maximum events per batch")
@click.pass_context
@_handle_errors
def subscribe(ctx: click.Context, topics: tuple, callback: str, timeout: Optional[int], max_events: Optional[int]):
    """Subscribe a callback to one or more topics."""
    options = {"topics": list(topics), "callback": callback}
    if timeout is not None:
        options["timeout"] = timeout
    if max_events is not None:
        options["max"] = max_events

    with _client(ctx) as client:
        client.subscribe(options)
    console.print(f"[green]✓ Subscribed to {', '.join(topics)}[/green]")


@cli.command(name="unsubscribe")
@click.argument("topics", nargs=-1, required=True)
@click.pass_context
@_handle_errors
def unsubscribe(ctx: click.Context, topics: tuple):
    """Unsubscribe from the given topics."""
    with _client(ctx) as client:
        client.unsubscribe(*topics)
    console.print(f"[green]✓ Unsubscribed from {', '.join(topics)}[/green]")


@cli.command(name="unsubscribe-all")
@click.confirmation_option(prompt="Remove every subscription for this client?")
@click.pass_context
@_handle_errors
def unsubscribe_all(ctx: click.Context):
    """Remove all subscriptions for this client."""
    with _client(ctx) as client:
        client.unsubscribe_all()
    console.print("[green]✓ All subscriptions removed[/green]")


if __name__ == "__main__":
    cli()
