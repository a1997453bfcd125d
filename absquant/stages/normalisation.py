"""Peptide-to-protein normalisation stages."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

import pandas as pd
from tqdm import tqdm

from absquant.config.tools import ToolConfig
from absquant.constants.artifacts import Artifacts
from absquant.constants.methods import NORMALISATION_METHODS, InputShape
from absquant.context import RunContext
from absquant.errors import StageInvocationError
from absquant.invoker import Invocation, ToolInvoker
from absquant.io.method_io import (
    combine_sample_outputs,
    long_input,
    matrix_input,
    read_sample_output,
    read_wide_output,
    sample_input,
)
from absquant.io.reports import read_report
from absquant.io.tables import write_table
from absquant.stages.base import Stage, build_invocation
from absquant.stages.selector import normalisation_input

logger = logging.getLogger(__name__)


def _expected_output(stage: Stage, output_dir: str, output_file: str) -> str:
    path = os.path.join(output_dir, output_file)
    if not os.path.isfile(path):
        raise StageInvocationError(stage.name, f"expected output {path} was not written")
    return path


def _invoke_all(invocations: list[Invocation], invoker: ToolInvoker, max_workers: int, desc: str) -> None:
    """
    Run independent invocations, in parallel when ``max_workers > 1``.

    Every started invocation finishes before the first failure is raised.
    """
    if max_workers <= 1:
        for invocation in tqdm(invocations, desc=desc, disable=len(invocations) < 2):
            invoker.invoke(invocation)
        return

    errors = []
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {pool.submit(invoker.invoke, invocation): invocation for invocation in invocations}
        for future in tqdm(as_completed(futures), total=len(futures), desc=desc):
            exc = future.exception()
            if exc is not None:
                logger.error(f"{futures[future].stage} failed for sample {futures[future].sample}: {exc}")
                errors.append(exc)
    if errors:
        raise errors[0]


def _run_per_sample(
    stage: Stage, ctx: RunContext, tools: ToolConfig, invoker: ToolInvoker, report: pd.DataFrame, values: dict
) -> pd.DataFrame:
    method = stage.method
    invocations = []
    for sample in ctx.sample_identifiers:
        workdir = ctx.path(Artifacts.METHOD_DIR, sample=sample, algorithm=method)
        input_file = ctx.path(Artifacts.METHOD_INPUT, sample=sample, algorithm=method)
        write_table(sample_input(report, sample), input_file)
        ctx.register(Artifacts.METHOD_INPUT, input_file, sample=sample, algorithm=method)
        sample_values = dict(values, input=input_file, output_dir=workdir, sample=sample)
        invocations.append(build_invocation(stage, ctx, tools, sample_values, cwd=workdir, sample=sample))

    _invoke_all(invocations, invoker, tools.max_workers, desc=method)

    output_file = tools.method_output(method)
    outputs = {}
    for sample in ctx.sample_identifiers:
        workdir = ctx.path(Artifacts.METHOD_DIR, sample=sample, algorithm=method)
        outputs[sample] = read_sample_output(_expected_output(stage, workdir, output_file))
    return combine_sample_outputs(outputs, ctx.sample_identifiers)


def _run_global(
    stage: Stage, ctx: RunContext, tools: ToolConfig, invoker: ToolInvoker, report: pd.DataFrame, values: dict
) -> pd.DataFrame:
    method = stage.method
    shape = NORMALISATION_METHODS[method].input_shape
    workdir = ctx.path(Artifacts.METHOD_DIR, algorithm=method)
    input_file = ctx.path(Artifacts.METHOD_INPUT, algorithm=method)

    if shape == InputShape.MATRIX:
        table = matrix_input(report, ctx.sample_identifiers)
    else:
        table = long_input(report)
    write_table(table, input_file)
    ctx.register(Artifacts.METHOD_INPUT, input_file, algorithm=method)

    invoker.invoke(build_invocation(stage, ctx, tools, dict(values, input=input_file, output_dir=workdir), cwd=workdir))
    output = _expected_output(stage, workdir, tools.method_output(method))
    return read_wide_output(output, ctx.sample_identifiers)


def run_normalisation(stage: Stage, ctx: RunContext, tools: ToolConfig, invoker: ToolInvoker) -> None:
    """
    Convert the input report for one method, run its tool and store the
    per-protein intensities in the method's intensity table.
    """
    method = stage.method
    report_file = ctx.resolve(normalisation_input(ctx.config))
    report = read_report(report_file, ctx.report_source)
    values = {"fasta": ctx.resolve(Artifacts.ID_FASTA), "method": method}

    if NORMALISATION_METHODS[method].per_sample:
        intensities = _run_per_sample(stage, ctx, tools, invoker, report, values)
    else:
        intensities = _run_global(stage, ctx, tools, invoker, report, values)

    target = ctx.path(Artifacts.PROTEIN_INTENSITIES, algorithm=method)
    Path(target).parent.mkdir(parents=True, exist_ok=True)
    write_table(intensities, target)
    ctx.register(Artifacts.PROTEIN_INTENSITIES, target, algorithm=method)
    logger.info(f"{method}: {len(intensities)} proteins in {target}")
