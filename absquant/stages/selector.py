"""Decision table selecting the stages of a run."""

from absquant.config.run import Approach, Mode, RunConfiguration
from absquant.constants.artifacts import Artifacts, ReportSource
from absquant.constants.methods import NORMALISATION_METHODS
from absquant.stages.base import Stage, StageKind


def _mode(mode: Mode, open_source=None, label=None):
    """Predicate on mode, optionally on the DIA tool choice and on approach == label."""

    def predicate(config: RunConfiguration) -> bool:
        if config.mode is not mode:
            return False
        if open_source is not None and config.open_source_dia != open_source:
            return False
        if label is not None and config.is_label != label:
            return False
        return True

    return predicate


def _label(config: RunConfiguration) -> bool:
    return config.approach is Approach.LABEL


_REPORT = (Artifacts.PRIMARY_REPORT,)

# Order matters: selected stages run in table order.
STAGE_TABLE: tuple[Stage, ...] = (
    Stage("fasta_id", StageKind.FASTA, outputs=(Artifacts.ID_FASTA,)),
    # DIA with a spectral library
    Stage(
        "diann_search",
        StageKind.SEARCH,
        _mode(Mode.DIA, open_source=True, label=True),
        tool="diann_search",
        engine=ReportSource.DIANN,
        settings="label",
        outputs=_REPORT,
    ),
    Stage(
        "diann_search",
        StageKind.SEARCH,
        _mode(Mode.DIA, open_source=True, label=False),
        tool="diann_search",
        engine=ReportSource.DIANN,
        settings="default",
        outputs=_REPORT,
    ),
    Stage(
        "spectronaut_search",
        StageKind.SEARCH,
        _mode(Mode.DIA, open_source=False),
        tool="spectronaut_search",
        engine=ReportSource.SPECTRONAUT,
        settings="default",
        outputs=_REPORT,
    ),
    # library-free DIA
    Stage(
        "diann_library",
        StageKind.SEARCH,
        _mode(Mode.DIRECT_DIA, open_source=True, label=True),
        tool="diann_library",
        engine=ReportSource.DIANN,
        settings="label",
        outputs=(Artifacts.SPECTRAL_LIBRARY,),
    ),
    Stage(
        "diann_search",
        StageKind.SEARCH,
        _mode(Mode.DIRECT_DIA, open_source=True, label=True),
        tool="diann_search",
        engine=ReportSource.DIANN,
        settings="label",
        inputs=(Artifacts.SPECTRAL_LIBRARY,),
        outputs=_REPORT,
    ),
    Stage(
        "diann_direct",
        StageKind.SEARCH,
        _mode(Mode.DIRECT_DIA, open_source=True, label=False),
        tool="diann_direct",
        engine=ReportSource.DIANN,
        settings="default",
        outputs=(Artifacts.PRIMARY_REPORT, Artifacts.SPECTRAL_LIBRARY),
    ),
    Stage(
        "spectronaut_direct",
        StageKind.SEARCH,
        _mode(Mode.DIRECT_DIA, open_source=False, label=True),
        tool="spectronaut_direct",
        engine=ReportSource.SPECTRONAUT,
        settings="label",
        outputs=_REPORT,
    ),
    Stage(
        "spectronaut_direct",
        StageKind.SEARCH,
        _mode(Mode.DIRECT_DIA, open_source=False, label=False),
        tool="spectronaut_direct",
        engine=ReportSource.SPECTRONAUT,
        settings="default",
        outputs=_REPORT,
    ),
    # DDA
    Stage("dda_conversion", StageKind.CONVERSION, _mode(Mode.DDA), outputs=_REPORT),
    Stage(
        "is_extraction",
        StageKind.IS_EXTRACTION,
        _label,
        inputs=_REPORT,
        outputs=(Artifacts.IS_SUBTRACTED_REPORT, Artifacts.IS_INTENSITIES),
    ),
)


def normalisation_input(config: RunConfiguration) -> str:
    """Logical name of the report handed to normalisation."""
    return Artifacts.IS_SUBTRACTED_REPORT if config.is_label else Artifacts.PRIMARY_REPORT


def normalisation_stage(config: RunConfiguration, method: str) -> Stage:
    return Stage(
        f"normalisation_{method}",
        StageKind.NORMALISATION,
        tool=NORMALISATION_METHODS[method].tool,
        inputs=(normalisation_input(config), Artifacts.ID_FASTA),
        outputs=(Artifacts.PROTEIN_INTENSITIES,),
        method=method,
    )


def quantification_stage(config: RunConfiguration) -> Stage:
    inputs = {
        Approach.LABEL: (Artifacts.ID_FASTA, Artifacts.IS_INTENSITIES),
        Approach.UNLABEL: (Artifacts.ID_FASTA,),
        Approach.FREE: (Artifacts.ID_FASTA,),
    }[config.approach]
    return Stage(
        "absolute_quantification",
        StageKind.QUANTIFICATION,
        tool="absolute_quantification",
        inputs=inputs,
        outputs=(Artifacts.QUANT_OUTPUT,),
    )


def select_stages(config: RunConfiguration) -> list[Stage]:
    """
    Return the ordered stages of a run.

    The fixed part comes from :data:`STAGE_TABLE`; one normalisation stage
    per configured method and the absolute quantification stage follow.

    Parameters
    ----------
    config : RunConfiguration
        Validated run configuration.

    Returns
    -------
    list of Stage
        Stages in execution order.
    """
    stages = [stage for stage in STAGE_TABLE if stage.predicate(config)]
    stages.extend(normalisation_stage(config, method) for method in config.methods)
    stages.append(quantification_stage(config))
    return stages
