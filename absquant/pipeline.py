"""Pipeline for absolute protein quantification."""

import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from absquant.config.base import ConfigBase
from absquant.config.run import RunConfiguration, validate_configuration
from absquant.config.tools import ToolConfig
from absquant.constants.artifacts import Artifacts
from absquant.context import RunContext
from absquant.errors import StageInvocationError
from absquant.invoker import ToolInvoker
from absquant.stages import EXECUTORS, Stage, check_stage_tools, select_stages

logger = logging.getLogger(__name__)


@dataclass
class RunResult(ConfigBase):
    """Final outputs of a run."""

    output_dir: str
    outputs: dict[str, str] = field(default_factory=dict)
    samples: list[str] = field(default_factory=list)
    stages: list[str] = field(default_factory=list)


def collect_outputs(ctx: RunContext) -> dict[str, str]:
    """
    Copy the concentration table of every configured method to the run root.

    Returns
    -------
    dict
        ``{method: final table path}``.

    Raises
    ------
    StageInvocationError
        If the quantification output of a method is missing.
    """
    outputs = {}
    for method in ctx.config.methods:
        source = ctx.path(Artifacts.QUANT_OUTPUT, algorithm=method)
        if not os.path.isfile(source):
            raise StageInvocationError("output_collection", f"missing concentration table for {method}: {source}")
        target = ctx.path(Artifacts.FINAL_CONCENTRATIONS, algorithm=method)
        shutil.copyfile(source, target)
        outputs[method] = ctx.register(Artifacts.FINAL_CONCENTRATIONS, target, algorithm=method)
    return outputs


class Pipeline:
    """
    Absolute quantification pipeline.

    Workflow:
    1. check tool templates, create run directories, write run_config.yaml
    2. fasta_id
    3. search or DDA conversion, derive samples
    4. is_extraction (label only)
    5. normalisation, one stage per method
    6. absolute_quantification
    7. collect_outputs(), write run_result.yaml
    """

    def __init__(
        self,
        config: RunConfiguration,
        tool_config: Optional[ToolConfig] = None,
        invoker: Optional[ToolInvoker] = None,
        timestamp: Optional[datetime] = None,
    ):
        self.config = config
        self.tool_config = tool_config or ToolConfig()
        self.invoker = invoker or ToolInvoker(timeout=self.tool_config.timeout)
        self.timestamp = timestamp
        self.context: Optional[RunContext] = None

    @classmethod
    def from_arguments(cls, tool_config: Optional[ToolConfig] = None, invoker=None, timestamp=None, **arguments):
        """Validate raw run arguments and build a pipeline."""
        return cls(validate_configuration(**arguments), tool_config=tool_config, invoker=invoker, timestamp=timestamp)

    def plan(self) -> list[Stage]:
        """Stages the run will execute, without touching the disk."""
        return select_stages(self.config)

    def run(self) -> RunResult:
        """Full pipeline."""
        stages = self.plan()
        check_stage_tools(stages, self.config, self.tool_config)
        logger.info(
            f"Running {self.config.experiment_name}: mode={self.config.mode}, approach={self.config.approach}, "
            f"open_source_dia={self.config.open_source_dia}, {len(stages)} stages"
        )

        ctx = RunContext(self.config, timestamp=self.timestamp)
        self.context = ctx
        ctx.create_directories()
        self.config.to_yaml(ctx.path(Artifacts.RUN_CONFIG))

        for i, stage in enumerate(stages, start=1):
            logger.info(f"[{i}/{len(stages)}] {stage.name}")
            self.run_stage(stage, ctx)

        outputs = collect_outputs(ctx)
        for method, path in outputs.items():
            logger.info(f"{method}: {path}")

        result = RunResult(
            output_dir=ctx.output_dir,
            outputs=outputs,
            samples=list(ctx.sample_identifiers),
            stages=[stage.name for stage in stages],
        )
        result.to_yaml(ctx.path(Artifacts.RUN_RESULT))
        return result

    def run_stage(self, stage: Stage, ctx: RunContext) -> None:
        # stage inputs qualified by algorithm or sample are resolved by the executors
        for name in stage.inputs:
            ctx.resolve(name)
        EXECUTORS[stage.kind](stage, ctx, self.tool_config, self.invoker)
