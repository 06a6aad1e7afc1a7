"""Command-line interface for gql-sdkgen."""

import asyncio
import dataclasses
import logging
from pathlib import Path

import click

from .core.config import GeneratorConfig
from .core.crawler import SchemaCrawler
from .core.errors import ConfigError, GenerationError, SchemaError, TransportError
from .core.generator import emit
from .core.local_schema import LocalSchemaTransport
from .core.sink import DirectorySink


def parse_headers(values: tuple[str, ...]) -> dict[str, str]:
    """Parse ``Name: value`` pairs given on the command line."""
    headers = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected 'Name: value', got {value!r}", param_hint="--header")
        headers[name.strip()] = content.strip()
    return headers


@click.group()
@click.version_option(package_name="gql-sdkgen")
def main():
    """Typed Python SDK generator for GraphQL endpoints.

    Crawl a server's schema through introspection and generate a client
    package from it.
    """
    pass


@main.command()
@click.argument("api_host")
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False),
    help="Output directory for the generated package (default: current directory).",
)
@click.option("--package", "-p", "package_name", help="Dotted name of the generated package.")
@click.option(
    "--properties",
    type=click.Path(exists=True, dir_okay=False),
    help="Properties file with OutputLocation, PackageName, RateLimit, "
    "MaxParallelRequests and request headers.",
)
@click.option(
    "--header",
    "-H",
    "headers",
    multiple=True,
    help="Request header as 'Name: value'. May be repeated.",
)
@click.option("--rate-limit", type=click.IntRange(min=0), help="Delay between request waves, in ms.")
@click.option("--max-parallel", type=click.IntRange(min=1), help="Maximum concurrent requests.")
@click.option(
    "--schema",
    "-s",
    type=click.Path(exists=True),
    help="Crawl a local .graphqls file or directory instead of the live endpoint.",
)
@click.option(
    "--template-dir",
    type=click.Path(exists=True, file_okay=False),
    help="Directory with templates overriding the built-in ones.",
)
@click.option("--keep-going", is_flag=True, help="Report failing artifacts instead of stopping.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
def generate(
    api_host: str,
    output: str | None,
    package_name: str | None,
    properties: str | None,
    headers: tuple[str, ...],
    rate_limit: int | None,
    max_parallel: int | None,
    schema: str | None,
    template_dir: str | None,
    keep_going: bool,
    verbose: bool,
):
    """Generate a client SDK for the GraphQL endpoint API_HOST.

    Examples:

        gql-sdkgen generate https://api.github.com/graphql -p github -H "Authorization: bearer TOKEN"

        gql-sdkgen generate https://api.yelp.com/v3/graphql --properties yelp.properties

        gql-sdkgen generate http://localhost/graphql -s ./schema -o ./generated
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if properties:
            config = GeneratorConfig.from_properties(api_host, properties)
        else:
            config = GeneratorConfig(api_host)
        overrides = {}
        if output:
            overrides["output_location"] = output
        if package_name:
            overrides["package_name"] = package_name
        if headers:
            overrides["headers"] = {**config.headers, **parse_headers(headers)}
        if rate_limit is not None:
            overrides["rate_limit"] = rate_limit / 1000.0
        if max_parallel is not None:
            overrides["max_parallel_requests"] = max_parallel
        config = dataclasses.replace(config, **overrides)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    output_path = Path(config.output_location).resolve()
    if verbose:
        click.echo(f"Endpoint: {config.api_host}")
        click.echo(f"Output: {output_path}")
        click.echo(f"Package: {config.package_name}")

    try:
        transport = LocalSchemaTransport.from_path(schema) if schema else None
        click.echo("Crawling schema...")
        crawler = SchemaCrawler(config.api_host, transport, config.to_settings())
        type_graph = asyncio.run(crawler.build_model())
    except (SchemaError, TransportError) as e:
        raise click.ClickException(str(e)) from e

    if verbose:
        click.echo(f"  Types: {len(type_graph.class_map)}")
        click.echo(f"  Query root: {type_graph.query_class.name}")
        if type_graph.mutation_class is not None:
            click.echo(f"  Mutation root: {type_graph.mutation_class.name}")

    click.echo("Generating code...")
    try:
        report = emit(
            config.package_name,
            DirectorySink(str(output_path)),
            type_graph,
            template_dir=template_dir,
            fail_fast=not keep_going,
        )
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Done! Generated {len(report.artifacts)} files in {output_path}")
    click.echo(f"Entry points: {', '.join(report.entry_points)}")
    if not report.ok:
        for failure in report.failures:
            click.echo(f"  Failed: {failure}", err=True)
        raise click.ClickException(f"{len(report.failures)} artifacts could not be generated")


if __name__ == "__main__":
    main()
