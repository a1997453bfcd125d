"""In-process stages: FASTA rewriting, DDA conversion and IS extraction."""

import logging

from absquant.config.tools import ToolConfig
from absquant.constants.artifacts import Artifacts
from absquant.context import RunContext
from absquant.invoker import ToolInvoker
from absquant.io.fasta import write_id_fasta
from absquant.io.reports import convert_pd_peptide_groups, extract_internal_standards, read_total_protein_samples
from absquant.stages.base import Stage

logger = logging.getLogger(__name__)


def run_fasta_id(stage: Stage, ctx: RunContext, tools: ToolConfig, invoker: ToolInvoker) -> None:
    target = ctx.path(Artifacts.ID_FASTA)
    write_id_fasta(ctx.config.fasta_file, target)
    ctx.register(Artifacts.ID_FASTA, target)


def run_dda_conversion(stage: Stage, ctx: RunContext, tools: ToolConfig, invoker: ToolInvoker) -> None:
    # The conversion needs the sample list, so it comes from the total protein table
    # rather than from the report it produces.
    ctx.sample_identifiers = read_total_protein_samples(ctx.config.total_protein_file)
    logger.info(f"Found {len(ctx.sample_identifiers)} samples in {ctx.config.total_protein_file}")

    target = ctx.path(Artifacts.PRIMARY_REPORT)
    convert_pd_peptide_groups(ctx.config.dda_results_file, target, ctx.sample_identifiers)
    ctx.register(Artifacts.PRIMARY_REPORT, target)


def run_is_extraction(stage: Stage, ctx: RunContext, tools: ToolConfig, invoker: ToolInvoker) -> None:
    subtracted, intensities = extract_internal_standards(
        report_file=ctx.resolve(Artifacts.PRIMARY_REPORT),
        source=ctx.report_source,
        is_concentration_file=ctx.config.is_concentration_file,
        subtracted_report_file=ctx.path(Artifacts.IS_SUBTRACTED_REPORT),
        is_intensity_file=ctx.path(Artifacts.IS_INTENSITIES),
        samples=ctx.sample_identifiers,
    )
    ctx.register(Artifacts.IS_SUBTRACTED_REPORT, subtracted)
    ctx.register(Artifacts.IS_INTENSITIES, intensities)
