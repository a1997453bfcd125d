"""Tests for config/tools.py - external tool configuration."""

import pytest

from absquant.config import ToolConfig
from absquant.errors import ConfigurationError


class TestCommand:
    """Rendering of argument templates."""

    def test_renders_placeholders(self):
        tools = ToolConfig(
            executables={"xtop": ["python", "xtop.py"]},
            arguments={"xtop": ["--input", "{input}", "--out={output_dir}/result.tsv"]},
        )
        command = tools.command("xtop", {"input": "in.tsv", "output_dir": "/tmp/out"})
        assert command == ["python", "xtop.py", "--input", "in.tsv", "--out=/tmp/out/result.tsv"]

    def test_extra_arguments_are_appended(self):
        tools = ToolConfig()
        command = tools.command(
            "absolute_quantification",
            {
                "approach": "free",
                "experiment": "exp",
                "intermediate_dir": "/i",
                "samples": "S1,S2",
                "methods": "Top3",
                "total_protein_file": "tp.csv",
                "output_dir": "/o",
                "id_fasta": "id.fasta",
            },
            extra=tools.quantification_extras["free"],
        )
        assert command[:2] == ["Rscript", "absolute_quantification.R"]
        assert command[-2:] == ["--fasta", "id.fasta"]

    def test_missing_value(self):
        with pytest.raises(ConfigurationError, match="library"):
            ToolConfig().command("diann_search", {"input_dir": "/raw", "fasta": "f.fasta"})

    def test_unknown_tool(self):
        with pytest.raises(ConfigurationError, match="No executable"):
            ToolConfig().command("maxquant", {})

    def test_unused_values_are_ignored(self):
        command = ToolConfig().command("lfaq", {"input": "a", "fasta": "b", "output_dir": "c", "sample": "S1"})
        assert command == ["LFAQ", "a", "b", "c"]

    def test_placeholders(self):
        tools = ToolConfig()
        assert tools.placeholders("xtop") == {"input", "output_dir"}
        assert tools.placeholders("lfaq", extra=["--sample", "{sample}"]) == {"input", "fasta", "output_dir", "sample"}

    def test_placeholders_unknown_tool(self):
        with pytest.raises(ConfigurationError, match="No executable"):
            ToolConfig().placeholders("maxquant")


class TestSettingsProfile:
    """Search engine settings profiles."""

    def test_label_and_default(self):
        tools = ToolConfig()
        assert tools.settings_profile("diann", label=True) == "settings/diann_label.cfg"
        assert tools.settings_profile("diann", label=False) == "settings/diann_default.cfg"

    def test_missing_profile(self):
        tools = ToolConfig(settings={"diann": {"default": "d.cfg"}})
        with pytest.raises(ConfigurationError, match="label"):
            tools.settings_profile("diann", label=True)


class TestYaml:
    """Loading tool configurations from YAML."""

    def test_partial_override_keeps_defaults(self, tmp_path):
        path = tmp_path / "tools.yaml"
        path.write_text("executables:\n  diann_search: [/opt/diann/diann-linux]\nmax_workers: 4\n")

        tools = ToolConfig.from_yaml(str(path))

        assert tools.executables["diann_search"] == ["/opt/diann/diann-linux"]
        assert tools.executables["lfaq"] == ["LFAQ"]
        assert tools.max_workers == 4
        assert tools.timeout is None

    def test_round_trip(self, tmp_path):
        path = tmp_path / "tools.yaml"
        ToolConfig(timeout=60.0).to_yaml(str(path))
        assert ToolConfig.from_yaml(str(path)) == ToolConfig(timeout=60.0)
