"""File naming convention shared by every pipeline stage."""

import hashlib
from datetime import datetime
from pathlib import Path
from typing import Optional

from absquant.config.run import Mode, RunConfiguration
from absquant.constants.artifacts import REPORT_SUFFIX, Artifacts, ReportSource

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
INTERMEDIATE_DIRNAME = "intermediate_results"


def report_source_for(config: RunConfiguration) -> str:
    """Return which engine produces the primary report of a run."""
    if config.mode is Mode.DDA:
        return ReportSource.PD
    if config.open_source_dia:
        return ReportSource.DIANN
    return ReportSource.SPECTRONAUT


class ArtifactNamer:
    """
    Deterministic mapping from logical artifact names to paths of one run.

    Parameters
    ----------
    config : RunConfiguration
        Validated run configuration.
    timestamp : datetime
        Start time of the run, part of the run directory name.
    """

    def __init__(self, config: RunConfiguration, timestamp: datetime):
        self.config = config
        self.timestamp = timestamp
        self.experiment = config.experiment_name
        self.report_source = report_source_for(config)

    @property
    def run_root(self) -> Path:
        stamp = self.timestamp.strftime(TIMESTAMP_FORMAT)
        name = f"{stamp}_{self.experiment}_{self.config.mode}_{self.config.approach}"
        return Path(self.config.input_dir) / name

    @property
    def intermediate(self) -> Path:
        return self.run_root / INTERMEDIATE_DIRNAME

    def path(
        self,
        name: str,
        sample: Optional[str] = None,
        algorithm: Optional[str] = None,
        stage: Optional[str] = None,
    ) -> str:
        """
        Resolve a logical artifact name to a path.

        Parameters
        ----------
        name : str
            One of the :class:`~absquant.constants.artifacts.Artifacts` names.
        sample : str, optional
            Sample identifier, for sample-qualified artifacts.
        algorithm : str, optional
            Normalisation method, for per-algorithm artifacts.
        stage : str, optional
            Stage name, for stage log files.

        Returns
        -------
        str
            The artifact path.

        Raises
        ------
        ValueError
            If the name is unknown or a required sample/algorithm is missing.
        """
        exp = self.experiment
        inter = self.intermediate

        if name == Artifacts.RUN_ROOT:
            return str(self.run_root)
        if name == Artifacts.INTERMEDIATE:
            return str(inter)
        if name == Artifacts.RUN_CONFIG:
            return str(self.run_root / "run_config.yaml")
        if name == Artifacts.RUN_RESULT:
            return str(self.run_root / "run_result.yaml")
        if name == Artifacts.ID_FASTA:
            return str(inter / f"{exp}_ID.fasta")
        if name == Artifacts.PRIMARY_REPORT:
            return str(inter / f"{exp}_{REPORT_SUFFIX[self.report_source]}.tsv")
        if name == Artifacts.IS_SUBTRACTED_REPORT:
            return str(inter / f"{exp}_NL.tsv")
        if name == Artifacts.IS_INTENSITIES:
            return str(inter / f"{exp}_ISpep_int.csv")
        if name == Artifacts.SEARCH_OUTPUT_DIR:
            return str(inter / self.report_source)
        if name == Artifacts.LIBRARY_OUTPUT_DIR:
            return str(inter / f"{self.report_source}_library")
        if name == Artifacts.QUANT_OUTPUT_DIR:
            return str(inter / "absolute_quantification")
        if name == Artifacts.STAGE_LOG:
            if not stage:
                raise ValueError(f"Artifact '{name}' requires a stage")
            suffix = f"_{_safe(sample)}" if sample else ""
            return str(inter / "logs" / f"{_safe(stage)}{suffix}.log")

        _require(name, algorithm=algorithm)
        if name == Artifacts.METHOD_DIR:
            method_dir = inter / algorithm
            return str(method_dir / _safe(sample) if sample else method_dir)
        if name == Artifacts.METHOD_INPUT:
            method_dir = Path(self.path(Artifacts.METHOD_DIR, sample=sample, algorithm=algorithm))
            stem = f"{exp}_{algorithm}_{_safe(sample)}" if sample else f"{exp}_{algorithm}"
            return str(method_dir / f"{stem}_input.tsv")
        if name == Artifacts.PROTEIN_INTENSITIES:
            return str(inter / f"{exp}_prot_int_{algorithm}.csv")
        if name == Artifacts.QUANT_OUTPUT:
            return str(Path(self.path(Artifacts.QUANT_OUTPUT_DIR)) / f"{exp}_prot_conc_{algorithm}.csv")
        if name == Artifacts.FINAL_CONCENTRATIONS:
            return str(self.run_root / f"{exp}_prot_conc_{algorithm}.csv")

        raise ValueError(f"Unknown artifact name: {name}")


def _require(name: str, algorithm: Optional[str]) -> None:
    if not algorithm:
        raise ValueError(f"Artifact '{name}' requires an algorithm")


def _safe(value: str) -> str:
    """Make a sample identifier usable as a single path component."""
    value = str(value)
    cleaned = "".join(c if c.isalnum() or c in "-_." else "_" for c in value)
    if cleaned != value:
        # keep distinct identifiers distinct after cleaning
        cleaned = f"{cleaned}_{hashlib.sha1(value.encode()).hexdigest()[:8]}"
    return cleaned
