"""Command-line interface for Event Gateway configuration."""

import logging
import sys
from typing import Any

import click
import yaml

from .exceptions import EventGatewayError

CONFIG_OPTIONS = [
    click.option(
        "--config",
        "-c",
        "config_path",
        default="serverless.yml",
        show_default=True,
        type=click.Path(exists=True, dir_okay=False),
        help="Service definition file.",
    ),
    click.option("--stage", "-s", help="Stage (default: provider.stage or dev)."),
    click.option("--region", "-r", help="AWS region (default: provider.region or us-east-1)."),
    click.option(
        "--apikey",
        envvar="EVENT_GATEWAY_TOKEN",
        help="Event Gateway API key, used when serverless.yml declares none.",
    ),
]

STATE_OPTION = click.option(
    "--state-file",
    envvar="EG_STATE_PATH",
    help="State file path (default: ./.egstate.json).",
)

ENDPOINT_OPTION = click.option(
    "--endpoint-url",
    help="AWS endpoint URL (e.g., http://localhost:4566 for LocalStack).",
)

SYMBOLS = {
    "unsubscribe": "-",
    "delete_function": "-",
    "register_function": "+",
    "subscribe": "+",
}


def _config_options(func: Any) -> Any:
    for option in reversed(CONFIG_OPTIONS):
        func = option(func)
    return func


def _load_manifest(config_path: str, stage: str | None, region: str | None) -> Any:
    from sls_eventgateway_provisioner.manifest import ServiceManifest

    try:
        return ServiceManifest.from_file(config_path, stage=stage, region=region)
    except (ValueError, yaml.YAMLError) as e:
        click.echo(f"Error: {config_path}: {e}", err=True)
        sys.exit(1)


def _describe(change: Any) -> str:
    symbol = SYMBOLS.get(change.action, "?")
    if change.action == "subscribe" and change.data:
        detail = change.data["event"]
        if "method" in change.data:
            detail = f"{change.data['method']} {change.data['path']}"
        return f"  {symbol} {change.action} {change.function}: {detail}"
    if change.function:
        return f"  {symbol} {change.action} {change.function} ({change.target})"
    return f"  {symbol} {change.action} {change.target}"


@click.group()
@click.version_option(package_name="sls-eventgateway")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Event Gateway configuration for Serverless services."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@_config_options
@STATE_OPTION
@ENDPOINT_OPTION
@click.option(
    "--max-workers",
    type=click.IntRange(1, 32),
    default=1,
    show_default=True,
    help="Concurrent teardown calls per phase.",
)
@click.option(
    "--upsert/--no-upsert",
    default=False,
    help="Gateway replaces functions on re-registration (default: tolerate conflicts).",
)
def sync(
    config_path: str,
    stage: str | None,
    region: str | None,
    apikey: str | None,
    state_file: str | None,
    endpoint_url: str | None,
    max_workers: int,
    upsert: bool,
) -> None:
    """Reconcile gateway functions and subscriptions with the deployed stack."""
    from sls_eventgateway_provisioner.handler import configure_event_gateway

    manifest = _load_manifest(config_path, stage, region)

    click.echo("")
    click.echo("Event Gateway Plugin")
    try:
        outcome = configure_event_gateway(
            manifest,
            state_path=state_file,
            apikey=apikey,
            endpoint_url=endpoint_url,
            register_is_upsert=upsert,
            max_workers=max_workers,
        )
    except EventGatewayError as e:
        click.echo(f"✗ Event Gateway configuration failed: {e}", err=True)
        sys.exit(1)

    result = outcome.result
    for name, function_id in result.registrations:
        click.echo(f'EventGateway: Function "{name}" registered. (ID: {function_id})')
    for name, event in result.subscriptions_created:
        click.echo(f'EventGateway: Function "{name}" subscribed to "{event}" event.')
    click.echo(
        f"Removed: {result.unsubscribed} subscription(s), {result.deleted} function(s)."
    )
    click.echo(
        f"Created: {result.registered} function(s), {result.subscribed} subscription(s)."
    )
    click.echo("")
    click.echo(f"Endpoint URL: {outcome.endpoint_url}")


@cli.command()
@_config_options
@STATE_OPTION
@ENDPOINT_OPTION
def plan(
    config_path: str,
    stage: str | None,
    region: str | None,
    apikey: str | None,
    state_file: str | None,
    endpoint_url: str | None,
) -> None:
    """Preview gateway calls without making them."""
    from sls_eventgateway_provisioner.handler import plan_event_gateway

    manifest = _load_manifest(config_path, stage, region)
    try:
        changes = plan_event_gateway(
            manifest, state_path=state_file, apikey=apikey, endpoint_url=endpoint_url
        )
    except EventGatewayError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not changes:
        click.echo("No changes. No functions declare Event Gateway events.")
        return

    click.echo(f"Plan: {len(changes)} call(s)\n")
    for change in changes:
        click.echo(_describe(change))


@cli.command()
@_config_options
@click.option("--event", "-e", required=True, help="Event you want to emit.")
@click.option("--data", "-d", required=True, help="Data for the event you want to emit.")
def emit(
    config_path: str,
    stage: str | None,
    region: str | None,
    apikey: str | None,
    event: str,
    data: str,
) -> None:
    """Emit event to hosted Event Gateway."""
    from .client import EventGatewayClient
    from .config import GatewayConfig
    from .emit import emit_event

    manifest = _load_manifest(config_path, stage, region)
    try:
        config = GatewayConfig.from_dict(manifest.eventgateway, apikey=apikey)
        with EventGatewayClient(config) as client:
            emit_event(client, event, data)
    except EventGatewayError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Event emitted: {event}")
    click.echo("Run sls logs -f <functionName> to verify your subscribed function was triggered.")


@cli.command()
@STATE_OPTION
@click.option("--yes", is_flag=True, help="Do not prompt for confirmation.")
def reset(state_file: str | None, yes: bool) -> None:
    """Forget previously created gateway objects (deletes the state file)."""
    from .state import StateStore

    store = StateStore.open(state_file)
    if not yes:
        click.confirm(
            f"Delete {store.path}? Objects it tracks will no longer be cleaned up.",
            abort=True,
        )
    try:
        removed = store.clear()
    except EventGatewayError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo("State file removed." if removed else "No state file found.")


@cli.command("cfn-template")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["yaml", "json"]),
    default="yaml",
    show_default=True,
)
def cfn_template(output_format: str) -> None:
    """Print the IAM user fragment to merge into the stack template."""
    import json

    from .template import iam_user_fragment

    fragment = iam_user_fragment()
    if output_format == "json":
        click.echo(json.dumps(fragment, indent=2))
    else:
        click.echo(yaml.dump(fragment, default_flow_style=False, sort_keys=False))


if __name__ == "__main__":
    cli()
