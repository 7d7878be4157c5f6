"""CLI entry point for openapi-downgrade."""

from pathlib import Path

import click

from openapi_downgrade.config import ConvertOptions
from openapi_downgrade.converter import BatchConverter


def _default_output_folder(source: Path) -> Path:
    """Write next to the input: the folder itself, or the file's folder."""
    return source if source.is_dir() else source.parent


@click.command()
@click.option("-s", "--specsource", "spec_source", required=True, type=click.Path(path_type=Path), help="Folder or File containing the OpenAPI specification.")
@click.option("-o", "--outputfolder", "output_folder", default=None, type=click.Path(file_okay=False, path_type=Path), help="Folder to write the resulting specifications in.")
@click.option("-v", "--verbose", is_flag=True, help="Show verbose messages.")
@click.option("-g", "--genOpId", "gen_op_id", is_flag=True, help="Generate missing OperationId members.")
@click.option("--continue-on-error", is_flag=True, help="Convert every file even if one fails; exit 1 at the end.")
@click.pass_context
def main(ctx: click.Context, spec_source: Path, output_folder: Path | None, verbose: bool, gen_op_id: bool, continue_on_error: bool):
    """Convert OpenAPI v3 specifications to Swagger (OpenAPI v2) JSON."""
    options = ConvertOptions(
        output_folder=output_folder or _default_output_folder(spec_source),
        verbose=verbose,
        generate_operation_ids=gen_op_id,
        continue_on_error=continue_on_error,
    )

    if verbose:
        click.echo(f"Specification file/folder: {spec_source}")
        click.echo(f"Output folder       : {options.output_folder}")
        click.echo(f"Verbose             : {verbose}")
        click.echo(f"Generate OperationId Members: {gen_op_id}")

    converter = BatchConverter(options)
    ctx.exit(int(converter.convert_source(spec_source)))
