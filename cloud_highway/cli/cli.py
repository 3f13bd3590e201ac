import json
from typing import Any, Optional

import click

from cloud_highway import __version__ as CLOUD_HIGHWAY_VERSION
from cloud_highway.common.config.config import Config
from cloud_highway.common.exceptions import InvalidArgumentError, NoResultError, StoreUnavailableError
from cloud_highway.common.models.endpoints import Endpoints
from cloud_highway.common.models.region import Region
from cloud_highway.common.setup.setup_tables import main as setup_tables_func
from cloud_highway.common.teardown.teardown_tables import main as teardown_tables_func
from cloud_highway.prober.components.network_prober_factory import NetworkProberFactory
from cloud_highway.prober.latency_prober import LatencyProber
from cloud_highway.query_engine.components.latency_store import LatencyStore
from cloud_highway.query_engine.query_engine import QueryEngine

DOMAIN_ERRORS = (InvalidArgumentError, NoResultError, StoreUnavailableError)


def _parse_region(identifier: str) -> Region:
    try:
        return Region.from_identifier(identifier)
    except ValueError as e:
        raise click.ClickException(f"Invalid region identifier {identifier}, expected provider@code.") from e


def _echo_json(value: Any) -> None:
    click.echo(json.dumps(value, indent=2))


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    ctx.ensure_object(dict)
    ctx.obj["config"] = Config.from_environment()


def _query_engine(ctx: click.Context) -> QueryEngine:
    return QueryEngine.from_config(ctx.obj["config"])


@cli.command("setup_tables", help="Setup the latency and cache tables.")
@click.pass_context
def setup_tables(ctx: click.Context) -> None:
    setup_tables_func(ctx.obj["config"])


@cli.command("teardown", help="Remove the latency and cache tables.")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def teardown(ctx: click.Context, yes: bool) -> None:
    if yes or click.confirm("Are you sure you want to remove all tables? This action cannot be undone."):
        teardown_tables_func(ctx.obj["config"])
        click.echo("Teardown completed.")
    else:
        click.echo("Teardown aborted.")


@cli.command("latency", help="Get the latency from SRC to DST, both given as provider@code.")
@click.argument("src", required=True)
@click.argument("dst", required=True)
@click.pass_context
def latency(ctx: click.Context, src: str, dst: str) -> None:
    source = _parse_region(src)
    destination = _parse_region(dst)
    try:
        ping = _query_engine(ctx).get_latency(source.provider, source.code, destination.provider, destination.code)
    except DOMAIN_ERRORS as e:
        raise click.ClickException(str(e)) from e
    _echo_json({"ping": ping})


@cli.command("best_region", help="Get the destination region with the lowest latency from SRC.")
@click.argument("src", required=True)
@click.option(
    "--candidate",
    "-c",
    "candidates",
    multiple=True,
    help="A destination candidate as provider@code. Defaults to all regions.",
)
@click.pass_context
def best_region(ctx: click.Context, src: str, candidates: tuple[str, ...]) -> None:
    source = _parse_region(src)
    dst_candidates: Optional[list[str]] = list(candidates) if candidates else None
    try:
        result = _query_engine(ctx).get_best_destination_region(source.provider, source.code, dst_candidates)
    except DOMAIN_ERRORS as e:
        raise click.ClickException(str(e)) from e
    _echo_json({"result": result})


@cli.command("all_regions", help="List the latencies from SRC to all other regions.")
@click.argument("src", required=True)
@click.pass_context
def all_regions(ctx: click.Context, src: str) -> None:
    source = _parse_region(src)
    try:
        data = _query_engine(ctx).get_all_destination_regions(source.provider, source.code)
    except DOMAIN_ERRORS as e:
        raise click.ClickException(str(e)) from e
    _echo_json({"data": data})


@cli.command("all_data", help="Dump every latency record. This reads the whole table.")
@click.option("--acknowledgement", "-a", required=True, help="The acknowledgement token for a full dump.")
@click.pass_context
def all_data(ctx: click.Context, acknowledgement: str) -> None:
    try:
        data = _query_engine(ctx).get_all_data(acknowledgement)
    except DOMAIN_ERRORS as e:
        raise click.ClickException(str(e)) from e
    _echo_json({"data": data})


@cli.command("probe", help="Run one probe cycle from SRC and store the results.")
@click.argument("src", required=True)
@click.pass_context
def probe(ctx: click.Context, src: str) -> None:
    config: Config = ctx.obj["config"]
    source = _parse_region(src)

    try:
        network_prober = NetworkProberFactory.get_network_prober(source.provider, source.code)
    except NotImplementedError as e:
        raise click.ClickException(f"Probing from provider {source.provider} is not supported locally.") from e
    except (RuntimeError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    latency_store = LatencyStore(
        Endpoints(config).get_datastore_client(), config.latency_table, config.max_dst_region_candidates
    )
    try:
        prober = LatencyProber(
            source, config.region_catalog(), latency_store, network_prober, attempts=config.probe_attempts
        )
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    _echo_json(prober.run())


@cli.command("version", help="Print the version of cloud_highway.")
def version() -> None:
    click.echo(CLOUD_HIGHWAY_VERSION)


__version__ = CLOUD_HIGHWAY_VERSION


def main() -> None:
    cli()  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":
    main()
