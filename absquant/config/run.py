"""Run configuration and its validation."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from absquant.config.base import ConfigBase
from absquant.constants.methods import DEFAULT_METHODS, NORMALISATION_METHODS
from absquant.errors import ConfigurationError

BGS_FASTA_SUFFIX = ".bgsfasta"


class Mode(str, Enum):
    """MS acquisition mode."""

    DDA = "DDA"
    DIA = "DIA"
    DIRECT_DIA = "directDIA"

    def __str__(self) -> str:
        return self.value


class Approach(str, Enum):
    """Absolute quantification approach."""

    LABEL = "label"
    UNLABEL = "unlabel"
    FREE = "free"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RunConfiguration(ConfigBase):
    """
    Validated, immutable inputs of one pipeline run.

    Direct construction applies the same rules as :func:`validate_configuration`. The latter
    also stores conditional inputs that the (mode, approach, open_source_dia) combination does
    not use as None.
    """

    mode: Mode
    approach: Approach
    input_dir: str
    experiment_name: str
    fasta_file: str
    total_protein_file: str
    open_source_dia: bool = False
    dda_results_file: Optional[str] = None
    spectral_library_file: Optional[str] = None
    bgs_fasta_file: Optional[str] = None
    is_concentration_file: Optional[str] = None
    methods: tuple[str, ...] = DEFAULT_METHODS

    def __post_init__(self):
        # directly constructed configurations go through the same rules
        mode, approach, methods = _check_rules(
            mode=self.mode,
            approach=self.approach,
            input_dir=self.input_dir,
            experiment_name=self.experiment_name,
            fasta_file=self.fasta_file,
            total_protein_file=self.total_protein_file,
            open_source_dia=self.open_source_dia,
            dda_results_file=self.dda_results_file,
            spectral_library_file=self.spectral_library_file,
            bgs_fasta_file=self.bgs_fasta_file,
            is_concentration_file=self.is_concentration_file,
            methods=self.methods,
        )
        object.__setattr__(self, "mode", mode)
        object.__setattr__(self, "approach", approach)
        object.__setattr__(self, "methods", methods)
        object.__setattr__(self, "open_source_dia", bool(self.open_source_dia))

    @property
    def is_label(self) -> bool:
        return self.approach is Approach.LABEL

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "RunConfiguration":
        return validate_configuration(**config_dict)


def _parse_enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigurationError(f"Invalid {field_name} '{value}': must be one of {allowed}") from None


def _parse_methods(methods: Optional[Iterable[str]]) -> tuple[str, ...]:
    if methods is None:
        return DEFAULT_METHODS
    methods = tuple(methods)
    if not methods:
        raise ConfigurationError("At least one normalisation method must be configured")
    unknown = [m for m in methods if m not in NORMALISATION_METHODS]
    if unknown:
        raise ConfigurationError(
            f"Unknown normalisation method(s) {', '.join(unknown)}: "
            f"must be among {', '.join(NORMALISATION_METHODS)}"
        )
    duplicated = sorted({m for m in methods if methods.count(m) > 1})
    if duplicated:
        raise ConfigurationError(f"Normalisation method(s) configured more than once: {', '.join(duplicated)}")
    return methods


def _check_rules(
    mode,
    approach,
    input_dir: Optional[str],
    experiment_name: Optional[str],
    fasta_file: Optional[str],
    total_protein_file: Optional[str],
    open_source_dia: bool,
    dda_results_file: Optional[str],
    spectral_library_file: Optional[str],
    bgs_fasta_file: Optional[str],
    is_concentration_file: Optional[str],
    methods: Optional[Iterable[str]],
) -> tuple[Mode, Approach, tuple[str, ...]]:
    """Apply the validation rules in order; return the parsed mode, approach and methods."""
    mode = _parse_enum(Mode, mode, "mode")
    approach = _parse_enum(Approach, approach, "approach")

    if mode is Mode.DDA:
        if not dda_results_file:
            raise ConfigurationError("DDA mode requires a DDA results file")
        if not os.path.exists(dda_results_file):
            raise ConfigurationError(f"DDA results file does not exist: {dda_results_file}")

    if mode is Mode.DIA and not spectral_library_file:
        raise ConfigurationError("DIA mode requires a spectral library file")

    if mode is Mode.DIRECT_DIA and not open_source_dia:
        if not bgs_fasta_file or BGS_FASTA_SUFFIX not in bgs_fasta_file:
            raise ConfigurationError(f"directDIA mode with Spectronaut requires a '{BGS_FASTA_SUFFIX}' file")

    if approach in (Approach.LABEL, Approach.UNLABEL) and not is_concentration_file:
        raise ConfigurationError(f"The '{approach}' approach requires an IS concentration file")

    required = {
        "experiment name": experiment_name,
        "input directory": input_dir,
        "FASTA file": fasta_file,
        "total protein file": total_protein_file,
    }
    for label, value in required.items():
        if not value:
            raise ConfigurationError(f"Missing required {label}")

    return mode, approach, _parse_methods(methods)


def validate_configuration(
    mode: str,
    approach: str,
    input_dir: Optional[str] = None,
    experiment_name: Optional[str] = None,
    fasta_file: Optional[str] = None,
    total_protein_file: Optional[str] = None,
    open_source_dia: bool = False,
    dda_results_file: Optional[str] = None,
    spectral_library_file: Optional[str] = None,
    bgs_fasta_file: Optional[str] = None,
    is_concentration_file: Optional[str] = None,
    methods: Optional[Iterable[str]] = None,
) -> RunConfiguration:
    """
    Check raw run inputs and build a :class:`RunConfiguration`.

    Rules are evaluated in a fixed order and the first violation is raised:

    1. ``mode`` is one of DDA, DIA, directDIA.
    2. ``approach`` is one of label, unlabel, free.
    3. DDA needs an existing DDA results file.
    4. DIA needs a spectral library.
    5. directDIA with Spectronaut needs a file containing ``.bgsfasta``.
    6. label and unlabel need an IS-concentration file.
    7. Experiment name, input directory, FASTA and total-protein files are given.
    8. The normalisation methods are known and unique.

    Parameters
    ----------
    mode, approach : str
        Acquisition mode and quantification approach.
    open_source_dia : bool
        Use DIA-NN instead of Spectronaut for DIA and directDIA data.
    methods : iterable of str, optional
        Normalisation methods to run. Defaults to all known methods.

    Returns
    -------
    RunConfiguration
        The validated configuration.

    Raises
    ------
    ConfigurationError
        Naming the first violated rule.
    """
    mode, approach, methods = _check_rules(
        mode=mode,
        approach=approach,
        input_dir=input_dir,
        experiment_name=experiment_name,
        fasta_file=fasta_file,
        total_protein_file=total_protein_file,
        open_source_dia=open_source_dia,
        dda_results_file=dda_results_file,
        spectral_library_file=spectral_library_file,
        bgs_fasta_file=bgs_fasta_file,
        is_concentration_file=is_concentration_file,
        methods=methods,
    )

    return RunConfiguration(
        mode=mode,
        approach=approach,
        input_dir=input_dir,
        experiment_name=experiment_name,
        fasta_file=fasta_file,
        total_protein_file=total_protein_file,
        open_source_dia=bool(open_source_dia),
        dda_results_file=dda_results_file if mode is Mode.DDA else None,
        spectral_library_file=spectral_library_file if mode is Mode.DIA else None,
        bgs_fasta_file=bgs_fasta_file if mode is Mode.DIRECT_DIA and not open_source_dia else None,
        is_concentration_file=is_concentration_file if approach is not Approach.FREE else None,
        methods=methods,
    )
