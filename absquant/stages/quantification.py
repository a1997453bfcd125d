"""Absolute quantification stage."""

import logging
import os
from pathlib import Path

from absquant.config.tools import ToolConfig
from absquant.constants.artifacts import Artifacts
from absquant.context import RunContext
from absquant.errors import StageInvocationError
from absquant.invoker import ToolInvoker
from absquant.stages.base import Stage, build_invocation

logger = logging.getLogger(__name__)


def run_quantification(stage: Stage, ctx: RunContext, tools: ToolConfig, invoker: ToolInvoker) -> None:
    """
    Convert the normalised intensities of every method into concentrations.

    The tool receives the approach, experiment name, intermediate directory,
    samples, methods and total protein table, plus the IS intensities and IS
    concentrations (label), the IS concentrations (unlabel) or the ID-only
    FASTA (free).
    """
    config = ctx.config
    output_dir = ctx.path(Artifacts.QUANT_OUTPUT_DIR)
    Path(output_dir).mkdir(parents=True, exist_ok=True)

    for method in config.methods:
        ctx.resolve(Artifacts.PROTEIN_INTENSITIES, algorithm=method)

    values = {
        "approach": config.approach.value,
        "experiment": ctx.experiment_name,
        "intermediate_dir": ctx.intermediate_dir,
        "samples": ",".join(ctx.sample_identifiers),
        "methods": ",".join(config.methods),
        "total_protein_file": config.total_protein_file,
        "output_dir": output_dir,
        "is_concentration_file": config.is_concentration_file,
        "id_fasta": ctx.resolve(Artifacts.ID_FASTA),
    }
    if config.is_label:
        values["is_intensities"] = ctx.resolve(Artifacts.IS_INTENSITIES)

    extra = tools.quantification_extras.get(config.approach.value, [])
    invoker.invoke(build_invocation(stage, ctx, tools, values, cwd=output_dir, extra=extra))

    for method in config.methods:
        path = ctx.path(Artifacts.QUANT_OUTPUT, algorithm=method)
        if not os.path.isfile(path):
            raise StageInvocationError(stage.name, f"no concentration table for {method}: {path}")
        ctx.register(Artifacts.QUANT_OUTPUT, path, algorithm=method)
    logger.info(f"Absolute quantification produced {len(config.methods)} concentration tables")
