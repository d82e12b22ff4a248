"""CLI interface for pgdart."""

import json
import logging
from pathlib import Path
from typing import Optional, Tuple

import click

from .core import DartGenerator
from .exceptions import PgDartError
from .schema import load_metadata
from .schema.columns import column_target_type
from .schema.types import describe
from .schema.mapper import DEFAULT_LOCALES
from .diagnostics import create_reporter


def _report_error(e: PgDartError, verbose: bool) -> None:
    click.echo(f"\n❌ {e.error_code}: {e.message}", err=True)
    if e.context:
        click.echo(f"📍 Context: {e.context}", err=True)
    if e.suggestions:
        click.echo("\n💡 Suggestions:", err=True)
        for suggestion in e.suggestions:
            click.echo(f"   • {suggestion}", err=True)
    if verbose:
        click.echo(f"\n🔍 Correlation ID: {e.correlation_id}", err=True)


@click.group()
def cli():
    """pgdart - Dart data models from Postgres schema metadata."""
    pass


@cli.command()
@click.argument('metadata', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False), default=None,
              help='File to write the Dart source to (default: stdout)')
@click.option('--schema', 'schemas', multiple=True, help='Only render tables and views of this schema')
@click.option('--locale', 'locales', multiple=True, help='Locale every enum translation must cover')
@click.option('--check-function', 'check_functions', multiple=True,
              help='Check-constraint function that validates a column against a JSON schema')
@click.option('--diagnostics', 'diagnostics_format', type=click.Choice(['console', 'json', 'none']),
              default='console', help='Diagnostics output format (written to stderr)')
@click.option('--verbose', '-v', is_flag=True, help='Verbose logging and error output')
def generate(metadata: str, output: Optional[str], schemas: Tuple[str, ...], locales: Tuple[str, ...],
             check_functions: Tuple[str, ...], diagnostics_format: str, verbose: bool):
    """Generate Dart models from a schema metadata snapshot."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    options = {'supported_locales': locales or DEFAULT_LOCALES, 'include_schemas': schemas or None}
    if check_functions:
        options['schema_check_functions'] = check_functions

    try:
        snapshot = load_metadata(metadata)
        generator = DartGenerator(**options)
        resolution = generator.resolve(snapshot)
        source = generator.generate(snapshot, resolution)
    except PgDartError as e:
        _report_error(e, verbose)
        raise click.Abort()

    if output:
        Path(output).write_text(source, encoding='utf-8')
        click.echo(f"✅ Wrote {len(resolution.declarables)} declarations to {output}", err=True)
    else:
        click.echo(source, nl=False)

    if diagnostics_format != 'none' and len(resolution.diagnostics):
        click.echo(create_reporter(resolution.diagnostics, diagnostics_format).report(), err=True)


@cli.command()
@click.argument('metadata', type=click.Path(exists=True, dir_okay=False))
@click.option('--locale', 'locales', multiple=True, help='Locale every enum translation must cover')
@click.option('--json', 'as_json', is_flag=True, help='Print the types as JSON')
def types(metadata: str, locales: Tuple[str, ...], as_json: bool):
    """List required types in resolution order."""
    try:
        snapshot = load_metadata(metadata)
        resolution = DartGenerator(supported_locales=locales or DEFAULT_LOCALES).resolve(snapshot)
    except PgDartError as e:
        _report_error(e, verbose=False)
        raise click.Abort()

    if as_json:
        payload = {
            "types": [
                dict(name=schema_type.name, id=schema_type.id, **describe(target))
                for schema_type, target in resolution.registry.catalog_entries()
            ],
            "columns": {
                column_name: describe(target)
                for column_name, target in resolution.registry.column_entries().items()
            },
        }
        click.echo(json.dumps(payload, indent=2))
        return

    for schema_type, target in resolution.registry.catalog_entries():
        click.echo(f"{schema_type.name} ({schema_type.id}) -> {target.type_name()}")

    for column_name, target in resolution.registry.column_entries().items():
        click.echo(f"column {column_name} -> {target.type_name()}")


@cli.command()
@click.argument('metadata', type=click.Path(exists=True, dir_okay=False))
def tables(metadata: str):
    """List tables and views with their Dart column types."""
    try:
        snapshot = load_metadata(metadata)
        generator = DartGenerator()
        resolution = generator.resolve(snapshot)
    except PgDartError as e:
        _report_error(e, verbose=False)
        raise click.Abort()

    columns_by_table = snapshot.columns_by_table()
    for title, relations in (("📊 Tables:", generator.selected_tables(snapshot)),
                             ("📈 Views:", generator.selected_views(snapshot))):
        if not relations:
            continue
        click.echo(title)
        for relation in relations:
            columns = columns_by_table.get(relation.id, [])
            click.echo(f"  - {relation.schema}.{relation.name} ({len(columns)} columns)")
            for column in columns:
                target = column_target_type(column, resolution.registry)
                click.echo(f"      {column.name}: {target.type_name()}")


if __name__ == '__main__':
    cli()
