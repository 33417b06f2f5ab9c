"""CLI entry point for wadl-codegen."""

import logging
from pathlib import Path

import click
import yaml

from wadl_codegen.config import GeneratorOptions, load_options
from wadl_codegen.errors import WadlCodegenError
from wadl_codegen.generator.walker import CODE_TYPE_GRAMMAR, CODE_TYPE_WEB, SourceGenerator


def _options(config_path: Path | None, **overrides) -> GeneratorOptions:
    try:
        return load_options(config_path, **overrides)
    except (yaml.YAMLError, ValueError) as e:
        raise click.ClickException(f"Invalid config {config_path}: {e}")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug output.")
def main(verbose: bool):
    """wadl-codegen: generate JAX-RS resource classes from WADL documents."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("wadl_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output directory for generated sources.")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML file with generator options.")
@click.option("-p", "--package", default=None, help="Package of the generated resource classes.")
@click.option("--resource", "resource_name", default=None, help="Generate only the first resource, under this name.")
@click.option("--impl", is_flag=True, help="Also generate implementation classes.")
@click.option("--no-interfaces", is_flag=True, help="Generate classes instead of interfaces.")
@click.option("--enums", is_flag=True, help="Generate enums for params with options.")
@click.option("--skip-schema", is_flag=True, help="Do not compile the grammar.")
@click.option("--inherit-params", is_flag=True, help="Pass resource-level params down to sub-resource methods.")
@click.option("--multiple-xml-reps", is_flag=True, help="One method overload per request XML representation.")
@click.option("--async", "async_methods", multiple=True, help="Method name or id to make suspended-async ('*' for all).")
@click.option("--response", "response_methods", multiple=True, help="Method name or id that must return Response ('*' for all).")
@click.option("--grammar-only", is_flag=True, help="Only compile the grammar.")
def generate(wadl_path: Path, output: Path, config_path: Path | None, package: str | None,
             resource_name: str | None, impl: bool, no_interfaces: bool, enums: bool,
             skip_schema: bool, inherit_params: bool, multiple_xml_reps: bool,
             async_methods: tuple[str, ...], response_methods: tuple[str, ...], grammar_only: bool):
    """Generate Java sources from a WADL document."""
    options = _options(
        config_path,
        package_name=package,
        resource_name=resource_name,
        generate_impl=impl or None,
        generate_interfaces=False if no_interfaces else None,
        generate_enums=enums or None,
        skip_schema_generation=skip_schema or None,
        inherit_resource_params=inherit_params or None,
        support_multiple_xml_reps=multiple_xml_reps or None,
        suspended_async_methods=set(async_methods) or None,
        response_methods=set(response_methods) or None,
    )

    click.echo(f"Reading {wadl_path}...")
    generator = SourceGenerator(options)
    try:
        result = generator.generate(
            wadl_path.read_text(encoding="utf-8"),
            output,
            wadl_path=wadl_path.resolve().as_posix(),
            code_type=CODE_TYPE_GRAMMAR if grammar_only else CODE_TYPE_WEB,
        )
    except WadlCodegenError as e:
        raise click.ClickException(str(e))

    click.echo(f"Found {len(result.type_names)} schema types.")
    for file_path in result.written_files:
        click.echo(f"  Created {file_path}")
    click.echo(f"Generated {len(result.written_files)} files in {output}")


@main.command()
@click.argument("wadl_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML file with generator options.")
def describe(wadl_path: Path, config_path: Path | None):
    """Print the resource classes a WADL document would produce, as YAML."""
    options = _options(config_path)
    try:
        result = SourceGenerator(options).build(
            wadl_path.read_text(encoding="utf-8"), wadl_path=wadl_path.resolve().as_posix())
    except WadlCodegenError as e:
        raise click.ClickException(str(e))
    data = result.model_dump(mode="json", exclude={"written_files"})
    click.echo(yaml.safe_dump(data, sort_keys=False, allow_unicode=True))
