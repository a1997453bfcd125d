from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from absquant.config.run import RunConfiguration
from absquant.config.tools import ToolConfig
from absquant.constants.artifacts import Artifacts
from absquant.constants.methods import NORMALISATION_METHODS
from absquant.context import RunContext
from absquant.errors import ConfigurationError
from absquant.invoker import Invocation


class StageKind:
    """Kinds of stages; each kind has one executor."""

    FASTA = "fasta"
    SEARCH = "search"
    CONVERSION = "conversion"
    IS_EXTRACTION = "is_extraction"
    NORMALISATION = "normalisation"
    QUANTIFICATION = "quantification"


def always(config: RunConfiguration) -> bool:
    return True


@dataclass(frozen=True)
class Stage:
    """
    A statically defined unit of work.

    Attributes
    ----------
    name : str
        Stage name, also used for its log file.
    kind : str
        One of :class:`StageKind`.
    predicate : callable
        Selects the stage for a run configuration.
    tool : str, optional
        External tool key in :class:`~absquant.config.tools.ToolConfig`;
        None for stages run in-process.
    engine : str, optional
        Search engine whose settings profiles apply.
    settings : str, optional
        Settings profile, ``"label"`` or ``"default"``.
    inputs, outputs : tuple of str
        Logical artifact names read and written.
    method : str, optional
        Normalisation method of per-method stages.
    """

    name: str
    kind: str
    predicate: Callable[[RunConfiguration], bool] = field(default=always, compare=False, repr=False)
    tool: Optional[str] = None
    engine: Optional[str] = None
    settings: Optional[str] = None
    inputs: tuple[str, ...] = ()
    outputs: tuple[str, ...] = ()
    method: Optional[str] = None

    @property
    def is_external(self) -> bool:
        return self.tool is not None

    @property
    def labelled_settings(self) -> bool:
        return self.settings == "label"


def build_invocation(
    stage: Stage,
    ctx: RunContext,
    tools: ToolConfig,
    values: dict[str, Any],
    cwd: str,
    sample: Optional[str] = None,
    extra: Optional[list[str]] = None,
) -> Invocation:
    """Render the command of an external stage into an :class:`Invocation`."""
    return Invocation(
        stage=stage.name,
        tool=stage.tool,
        command=tools.command(stage.tool, values, extra=extra),
        cwd=cwd,
        log_file=ctx.path(Artifacts.STAGE_LOG, sample=sample, stage=stage.name),
        sample=sample,
    )


def _provided_values(stage: Stage, config: RunConfiguration) -> set[str]:
    # names the executor of each stage kind fills in
    if stage.kind == StageKind.SEARCH:
        provided = {"input_dir", "fasta", "settings", "output_dir", "name", "file_type"}
        if config.spectral_library_file or Artifacts.SPECTRAL_LIBRARY in stage.inputs:
            provided.add("library")
    elif stage.kind == StageKind.NORMALISATION:
        provided = {"input", "fasta", "method", "output_dir"}
        if NORMALISATION_METHODS[stage.method].per_sample:
            provided.add("sample")
    elif stage.kind == StageKind.QUANTIFICATION:
        provided = {
            "approach",
            "experiment",
            "intermediate_dir",
            "samples",
            "methods",
            "total_protein_file",
            "output_dir",
            "id_fasta",
        }
        if config.is_concentration_file:
            provided.add("is_concentration_file")
        if config.is_label:
            provided.add("is_intensities")
    else:
        provided = set()
    return provided


def check_stage_tools(stages: list[Stage], config: RunConfiguration, tools: ToolConfig) -> None:
    """
    Check that every external stage of a plan can be rendered.

    Raises
    ------
    ConfigurationError
        If a tool, settings profile or method output name is not configured, or an
        argument template uses a placeholder the stage has no value for.
    """
    for stage in stages:
        if not stage.is_external:
            continue
        if stage.settings:
            tools.settings_profile(stage.engine, stage.labelled_settings)
        if stage.method:
            tools.method_output(stage.method)
        extra = None
        if stage.kind == StageKind.QUANTIFICATION:
            extra = tools.quantification_extras.get(config.approach.value, [])
        missing = sorted(tools.placeholders(stage.tool, extra) - _provided_values(stage, config))
        if missing:
            raise ConfigurationError(
                f"Arguments of tool '{stage.tool}' in stage {stage.name} use placeholders without a value: "
                f"{', '.join(missing)}"
            )
