"""Command-line interface for absquant."""

import functools
import logging
import sys

import click

from absquant.config import ToolConfig, validate_configuration
from absquant.constants.methods import NORMALISATION_METHODS
from absquant.errors import AbsQuantError, ConfigurationError
from absquant.pipeline import Pipeline

logger = logging.getLogger(__name__)


def run_options(func):
    """Options describing one run, shared by ``run`` and ``plan``."""
    options = [
        click.option("--mode", required=True, help="Acquisition mode: DDA, DIA or directDIA"),
        click.option("--approach", required=True, help="Quantification approach: label, unlabel or free"),
        click.option("--open-source-dia", is_flag=True, help="Search DIA data with DIA-NN instead of Spectronaut"),
        click.option(
            "--input-dir",
            "-i",
            required=True,
            type=click.Path(exists=True, file_okay=False),
            help="Directory containing the raw MS files",
        ),
        click.option("--experiment-name", "-n", required=True, help="Experiment name used in output file names"),
        click.option("--fasta-file", required=True, type=click.Path(exists=True, dir_okay=False), help="FASTA file"),
        click.option(
            "--total-protein-file",
            required=True,
            type=click.Path(exists=True, dir_okay=False),
            help="Total protein amount per sample",
        ),
        click.option("--dda-results-file", help="Proteome Discoverer peptide-groups export (DDA)"),
        click.option("--spectral-library-file", help="Spectral library (DIA)"),
        click.option("--bgs-fasta-file", help="Spectronaut .bgsfasta file (directDIA with Spectronaut)"),
        click.option("--is-concentration-file", help="Internal standard concentrations (label, unlabel)"),
        click.option(
            "--method",
            "methods",
            multiple=True,
            help=f"Normalisation method, repeatable. Default: all of {', '.join(NORMALISATION_METHODS)}",
        ),
        click.option("--verbose", "-v", is_flag=True, help="Verbose output"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _validate(verbose: bool, methods: tuple, **arguments):
    setup_logging(verbose)
    try:
        return validate_configuration(methods=methods or None, **arguments)
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e


def _abort_on_pipeline_error(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigurationError as e:
            raise click.UsageError(str(e)) from e
        except AbsQuantError as e:
            logger.error(str(e))
            raise SystemExit(1) from e

    return wrapper


@click.group()
@click.version_option(package_name="absquant")
def cli():
    """absquant: absolute protein quantification pipeline"""
    pass


@cli.command()
@run_options
@click.option("--tool-config", "-c", type=click.Path(exists=True, dir_okay=False), help="Tool configuration YAML")
@click.option("--max-workers", type=click.IntRange(min=1), help="Parallel invocations of per-sample tools")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Time limit per tool run in seconds")
@_abort_on_pipeline_error
def run(tool_config, max_workers, timeout, verbose, methods, **arguments):
    """
    Run the quantification pipeline.
    """
    config = _validate(verbose, methods, **arguments)

    tools = ToolConfig.from_yaml(tool_config) if tool_config else ToolConfig()
    if max_workers is not None:
        tools.max_workers = max_workers
    if timeout is not None:
        tools.timeout = timeout

    result = Pipeline(config, tool_config=tools).run()

    logger.info(f"Pipeline completed, results in {result.output_dir}")
    for path in result.outputs.values():
        click.echo(path)


@cli.command()
@run_options
def plan(verbose, methods, **arguments):
    """
    Validate the inputs and print the stages a run would execute.
    """
    config = _validate(verbose, methods, **arguments)
    for i, stage in enumerate(Pipeline(config).plan(), start=1):
        details = [f"tool={stage.tool}" if stage.tool else "in-process"]
        if stage.settings:
            details.append(f"settings={stage.settings}")
        click.echo(f"{i:2d}. {stage.name} ({', '.join(details)})")


@cli.command("write-tool-config")
@click.argument("path", type=click.Path(dir_okay=False))
def write_tool_config(path):
    """
    Write the default tool configuration to PATH for editing.
    """
    ToolConfig().to_yaml(path)
    click.echo(f"Wrote {path}")


def main() -> None:
    """Entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)  # Standard exit code for SIGINT
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


def setup_logging(verbose: bool) -> None:
    """
    Configure logging for the application.

    Parameters
    ----------
    verbose : bool
        If True, set log level to DEBUG; otherwise INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )

    logging.getLogger("alphabase").setLevel(logging.ERROR)


if __name__ == "__main__":
    main()
