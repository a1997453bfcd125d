"""Configuration for the external tools driven by the pipeline."""

import string
from dataclasses import dataclass, field
from typing import Any, Optional

from absquant.config.base import ConfigBase
from absquant.errors import ConfigurationError


def _default_executables() -> dict[str, list[str]]:
    return {
        "diann_search": ["diann"],
        "diann_library": ["diann"],
        "diann_direct": ["diann"],
        "spectronaut_search": ["spectronaut"],
        "spectronaut_direct": ["spectronaut"],
        "protein_inference": ["Rscript", "protein_inference.R"],
        "lfaq": ["LFAQ"],
        "xtop": ["xTop"],
        "absolute_quantification": ["Rscript", "absolute_quantification.R"],
    }


def _default_arguments() -> dict[str, list[str]]:
    return {
        "diann_search": [
            "--dir", "{input_dir}",
            "--lib", "{library}",
            "--fasta", "{fasta}",
            "--cfg", "{settings}",
            "--out", "{output_dir}/report.parquet",
        ],
        "diann_library": [
            "--fasta", "{fasta}",
            "--fasta-search",
            "--predictor",
            "--gen-spec-lib",
            "--cfg", "{settings}",
            "--out-lib", "{output_dir}/report-lib.parquet",
        ],
        "diann_direct": [
            "--dir", "{input_dir}",
            "--fasta", "{fasta}",
            "--fasta-search",
            "--predictor",
            "--gen-spec-lib",
            "--cfg", "{settings}",
            "--out", "{output_dir}/report.parquet",
            "--out-lib", "{output_dir}/report-lib.parquet",
        ],
        "spectronaut_search": [
            "-d", "{input_dir}",
            "-a", "{library}",
            "-s", "{settings}",
            "-o", "{output_dir}",
            "-n", "{name}",
            "-filter", "{file_type}",
        ],
        "spectronaut_direct": [
            "-direct",
            "-d", "{input_dir}",
            "-fasta", "{fasta}",
            "-s", "{settings}",
            "-o", "{output_dir}",
            "-n", "{name}",
            "-filter", "{file_type}",
        ],
        "protein_inference": [
            "--input", "{input}",
            "--fasta", "{fasta}",
            "--method", "{method}",
            "--output", "{output_dir}",
        ],
        "lfaq": ["{input}", "{fasta}", "{output_dir}"],
        "xtop": ["--input", "{input}", "--output", "{output_dir}"],
        "absolute_quantification": [
            "--approach", "{approach}",
            "--experiment", "{experiment}",
            "--intermediate", "{intermediate_dir}",
            "--samples", "{samples}",
            "--methods", "{methods}",
            "--total-protein", "{total_protein_file}",
            "--output", "{output_dir}",
        ],
    }  # fmt: skip


def _default_quantification_extras() -> dict[str, list[str]]:
    return {
        "label": ["--is-intensity", "{is_intensities}", "--is-concentration", "{is_concentration_file}"],
        "unlabel": ["--is-concentration", "{is_concentration_file}"],
        "free": ["--fasta", "{id_fasta}"],
    }


def _default_settings() -> dict[str, dict[str, str]]:
    return {
        "diann": {"default": "settings/diann_default.cfg", "label": "settings/diann_label.cfg"},
        "spectronaut": {"default": "settings/spectronaut_default.prop", "label": "settings/spectronaut_label.prop"},
    }


def _default_method_outputs() -> dict[str, str]:
    return {
        "Top3": "Top3_protein_intensity.tsv",
        "Topall": "Topall_protein_intensity.tsv",
        "iBAQ": "iBAQ_protein_intensity.tsv",
        "APEX": "APEX_protein_intensity.tsv",
        "NSAF": "NSAF_protein_intensity.tsv",
        "LFAQ": "ProteinResults.txt",
        "xTop": "xTop_protein_intensity.tsv",
    }


@dataclass
class ToolConfig(ConfigBase):
    """
    External tool configuration.

    Each tool key maps to an executable (program plus fixed leading arguments)
    and an argument template. Template items may contain ``{placeholders}``
    which are filled per invocation.
    """

    executables: dict[str, list[str]] = field(default_factory=_default_executables)
    arguments: dict[str, list[str]] = field(default_factory=_default_arguments)
    quantification_extras: dict[str, list[str]] = field(default_factory=_default_quantification_extras)
    settings: dict[str, dict[str, str]] = field(default_factory=_default_settings)
    method_outputs: dict[str, str] = field(default_factory=_default_method_outputs)
    file_type: str = ".raw"
    max_workers: int = 1
    timeout: Optional[float] = None

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]):
        # Partial tables in YAML files override the defaults key by key
        defaults = cls()
        config_dict = dict(config_dict or {})
        for name in ("executables", "arguments", "quantification_extras", "settings", "method_outputs"):
            if name in config_dict:
                merged = dict(getattr(defaults, name))
                merged.update(config_dict[name] or {})
                config_dict[name] = merged
        return super().from_dict(config_dict)

    def settings_profile(self, engine: str, label: bool) -> str:
        """Return the settings file of a search engine, labelled or default."""
        profile = "label" if label else "default"
        try:
            return self.settings[engine][profile]
        except KeyError:
            raise ConfigurationError(f"No '{profile}' settings profile configured for {engine}") from None

    def method_output(self, method: str) -> str:
        try:
            return self.method_outputs[method]
        except KeyError:
            raise ConfigurationError(f"No output file configured for normalisation method {method}") from None

    def command(self, tool: str, values: dict[str, Any], extra: Optional[list[str]] = None) -> list[str]:
        """
        Build the command line of a tool.

        Parameters
        ----------
        tool : str
            Tool key in ``executables`` and ``arguments``.
        values : dict
            Values for the template placeholders.
        extra : list of str, optional
            Additional argument template appended after the tool's own.

        Returns
        -------
        list of str
            Executable followed by the rendered arguments.

        Raises
        ------
        ConfigurationError
            If the tool is unknown or a placeholder has no value.
        """
        if tool not in self.executables:
            raise ConfigurationError(f"No executable configured for tool '{tool}'")
        template = list(self.arguments.get(tool, [])) + list(extra or [])
        return list(self.executables[tool]) + [_render(tool, item, values) for item in template]

    def placeholders(self, tool: str, extra: Optional[list[str]] = None) -> set[str]:
        """Names of the placeholders in the argument template of a tool."""
        if tool not in self.executables:
            raise ConfigurationError(f"No executable configured for tool '{tool}'")
        template = list(self.arguments.get(tool, [])) + list(extra or [])
        return {name for item in template for _, name, _, _ in string.Formatter().parse(item) if name is not None}


def _render(tool: str, item: str, values: dict[str, Any]) -> str:
    for _, name, _, _ in string.Formatter().parse(item):
        if name is not None and values.get(name) is None:
            raise ConfigurationError(f"Argument '{item}' of tool '{tool}' needs a value for '{name}'")
    return item.format(**{k: str(v) for k, v in values.items() if v is not None})
