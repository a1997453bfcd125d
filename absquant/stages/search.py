"""Spectral search stages (DIA-NN, Spectronaut)."""

import logging
import shutil
from pathlib import Path

from absquant.config.tools import ToolConfig
from absquant.constants.artifacts import Artifacts, ReportSource
from absquant.context import RunContext
from absquant.errors import ArtifactResolutionError
from absquant.invoker import ToolInvoker
from absquant.io.reports import derive_samples
from absquant.io.tables import read_table, write_table
from absquant.stages.base import Stage, build_invocation

logger = logging.getLogger(__name__)

# Output file patterns of the search engines, searched below their output directory
REPORT_PATTERNS = {
    ReportSource.DIANN: ["report.parquet", "report.tsv", "*report*.parquet", "*report*.tsv"],
    ReportSource.SPECTRONAUT: ["*Report*.tsv", "*Report*.xls", "*report*.tsv", "*report*.xls"],
}
LIBRARY_PATTERNS = ["*-lib.parquet", "*.speclib", "*lib*.tsv"]
_NOT_A_REPORT = ("-lib", "stats", "protein_description", "matrix")


def locate_output(output_dir: str, patterns: list[str], what: str, exclude: tuple[str, ...] = ()) -> str:
    """
    Find a file written by an external tool.

    Patterns are tried in order; within one pattern the most recently
    modified match wins.

    Raises
    ------
    ArtifactResolutionError
        If no file below ``output_dir`` matches.
    """
    root = Path(output_dir)
    for pattern in patterns:
        matches = [
            p for p in root.rglob(pattern) if p.is_file() and not any(token in p.name for token in exclude)
        ]
        if matches:
            return str(max(matches, key=lambda p: p.stat().st_mtime))
    raise ArtifactResolutionError(f"No {what} found in {output_dir} (looked for {', '.join(patterns)})")


def _publish_report(ctx: RunContext, source_report: str) -> str:
    """Store the engine's report as the run's primary TSV report."""
    target = ctx.path(Artifacts.PRIMARY_REPORT)
    if source_report.lower().endswith(".parquet"):
        write_table(read_table(source_report), target)
    else:
        shutil.copyfile(source_report, target)
    return ctx.register(Artifacts.PRIMARY_REPORT, target)


def run_search(stage: Stage, ctx: RunContext, tools: ToolConfig, invoker: ToolInvoker) -> None:
    """
    Run one search engine pass and register what it produced.

    Depending on ``stage.outputs`` the pass yields the primary report (from
    which the sample identifiers are derived), a spectral library, or both.
    """
    config = ctx.config
    if Artifacts.SPECTRAL_LIBRARY in stage.outputs and Artifacts.PRIMARY_REPORT not in stage.outputs:
        output_dir = ctx.path(Artifacts.LIBRARY_OUTPUT_DIR)
    else:
        output_dir = ctx.path(Artifacts.SEARCH_OUTPUT_DIR)
    Path(output_dir).mkdir(parents=True, exist_ok=True)

    if Artifacts.SPECTRAL_LIBRARY in stage.inputs:
        library = ctx.resolve(Artifacts.SPECTRAL_LIBRARY)
    else:
        library = config.spectral_library_file

    if stage.engine == ReportSource.SPECTRONAUT and config.bgs_fasta_file:
        fasta = config.bgs_fasta_file
    else:
        fasta = config.fasta_file

    values = {
        "input_dir": config.input_dir,
        "library": library,
        "fasta": fasta,
        "settings": tools.settings_profile(stage.engine, stage.labelled_settings),
        "output_dir": output_dir,
        "name": ctx.experiment_name,
        "file_type": tools.file_type,
    }
    invoker.invoke(build_invocation(stage, ctx, tools, values, cwd=output_dir))

    if Artifacts.SPECTRAL_LIBRARY in stage.outputs:
        library_file = locate_output(output_dir, LIBRARY_PATTERNS, "spectral library")
        ctx.register(Artifacts.SPECTRAL_LIBRARY, library_file)
        logger.info(f"Spectral library: {library_file}")

    if Artifacts.PRIMARY_REPORT in stage.outputs:
        report = locate_output(output_dir, REPORT_PATTERNS[stage.engine], f"{stage.engine} report", _NOT_A_REPORT)
        primary = _publish_report(ctx, report)
        ctx.sample_identifiers = derive_samples(primary, ctx.report_source)
        logger.info(f"Found {len(ctx.sample_identifiers)} samples in {primary}")
