"""Tests for config/run.py - run configuration validation."""

import pytest

from absquant.config import Approach, Mode, RunConfiguration, validate_configuration
from absquant.constants.methods import DEFAULT_METHODS
from absquant.errors import ConfigurationError


class TestEnumeratedValues:
    """Rules 1 and 2: mode and approach values."""

    @pytest.mark.parametrize("mode", ["dda", "SWATH", "", None, "directdia"])
    def test_rejects_unknown_mode(self, base_arguments, mode):
        with pytest.raises(ConfigurationError, match="mode"):
            validate_configuration(mode=mode, approach="free", **base_arguments)

    @pytest.mark.parametrize("approach", ["Label", "labelled", "", None])
    def test_rejects_unknown_approach(self, base_arguments, approach):
        with pytest.raises(ConfigurationError, match="approach"):
            validate_configuration(mode="DIA", approach=approach, spectral_library_file="lib.tsv", **base_arguments)

    def test_mode_checked_before_approach(self, base_arguments):
        with pytest.raises(ConfigurationError, match="mode"):
            validate_configuration(mode="bad", approach="bad", **base_arguments)

    def test_enum_values(self, base_arguments):
        config = validate_configuration(
            mode="directDIA", approach="free", open_source_dia=True, **base_arguments
        )
        assert config.mode is Mode.DIRECT_DIA
        assert config.approach is Approach.FREE
        assert f"{config.mode}_{config.approach}" == "directDIA_free"


class TestDDAResultsFile:
    """Rule 3: DDA needs an existing results file."""

    def test_missing(self, base_arguments):
        with pytest.raises(ConfigurationError, match="DDA results file"):
            validate_configuration(mode="DDA", approach="free", **base_arguments)

    def test_nonexistent(self, base_arguments, tmp_path):
        with pytest.raises(ConfigurationError, match="does not exist"):
            validate_configuration(
                mode="DDA", approach="free", dda_results_file=str(tmp_path / "nope.txt"), **base_arguments
            )

    def test_existing(self, base_arguments, dda_results_file):
        config = validate_configuration(mode="DDA", approach="free", dda_results_file=dda_results_file, **base_arguments)
        assert config.dda_results_file == dda_results_file


class TestSpectralLibrary:
    """Rule 4: DIA needs a spectral library."""

    @pytest.mark.parametrize("open_source_dia", [True, False])
    def test_missing(self, base_arguments, open_source_dia):
        with pytest.raises(ConfigurationError, match="spectral library"):
            validate_configuration(mode="DIA", approach="free", open_source_dia=open_source_dia, **base_arguments)

    def test_provided(self, base_arguments):
        config = validate_configuration(mode="DIA", approach="free", spectral_library_file="lib.tsv", **base_arguments)
        assert config.spectral_library_file == "lib.tsv"


class TestBgsFasta:
    """Rule 5: directDIA with Spectronaut needs a .bgsfasta file."""

    def test_missing(self, base_arguments):
        with pytest.raises(ConfigurationError, match=".bgsfasta"):
            validate_configuration(mode="directDIA", approach="free", **base_arguments)

    @pytest.mark.parametrize("name", ["x.fasta", "x.BGSFASTA", "x_bgsfasta"])
    def test_wrong_suffix(self, base_arguments, name):
        with pytest.raises(ConfigurationError, match=".bgsfasta"):
            validate_configuration(mode="directDIA", approach="free", bgs_fasta_file=name, **base_arguments)

    @pytest.mark.parametrize("name", ["x.bgsfasta", "/data/human.bgsfasta.gz"])
    def test_substring_match(self, base_arguments, name):
        config = validate_configuration(mode="directDIA", approach="free", bgs_fasta_file=name, **base_arguments)
        assert config.bgs_fasta_file == name

    def test_not_needed_with_diann(self, base_arguments):
        config = validate_configuration(mode="directDIA", approach="free", open_source_dia=True, **base_arguments)
        assert config.bgs_fasta_file is None


class TestISConcentrationFile:
    """Rule 6: label and unlabel need IS concentrations."""

    @pytest.mark.parametrize("approach", ["label", "unlabel"])
    def test_missing(self, base_arguments, approach):
        with pytest.raises(ConfigurationError, match="IS concentration"):
            validate_configuration(mode="DIA", approach=approach, spectral_library_file="lib.tsv", **base_arguments)

    @pytest.mark.parametrize("approach", ["label", "unlabel"])
    def test_provided(self, base_arguments, approach, is_concentration_file):
        config = validate_configuration(
            mode="DIA",
            approach=approach,
            spectral_library_file="lib.tsv",
            is_concentration_file=is_concentration_file,
            **base_arguments,
        )
        assert config.is_concentration_file == is_concentration_file

    def test_free_needs_none(self, base_arguments):
        config = validate_configuration(mode="DIA", approach="free", spectral_library_file="lib.tsv", **base_arguments)
        assert config.is_concentration_file is None


class TestRuleOrder:
    """The first violated rule is reported."""

    def test_mode_input_before_approach_input(self, base_arguments):
        # both the library (rule 4) and the IS file (rule 6) are missing
        with pytest.raises(ConfigurationError, match="spectral library"):
            validate_configuration(mode="DIA", approach="label", **base_arguments)

    def test_bgsfasta_before_is_file(self, base_arguments):
        with pytest.raises(ConfigurationError, match=".bgsfasta"):
            validate_configuration(mode="directDIA", approach="unlabel", bgs_fasta_file="x.fasta", **base_arguments)


class TestRequiredInputs:
    """Experiment name and the always-required files."""

    @pytest.mark.parametrize("missing", ["experiment_name", "input_dir", "fasta_file", "total_protein_file"])
    def test_missing(self, base_arguments, missing):
        arguments = dict(base_arguments, **{missing: None})
        with pytest.raises(ConfigurationError, match="required"):
            validate_configuration(mode="DIA", approach="free", spectral_library_file="lib.tsv", **arguments)


class TestMethods:
    """Configured normalisation methods."""

    def test_default_is_all(self, base_arguments):
        config = validate_configuration(mode="DIA", approach="free", spectral_library_file="lib.tsv", **base_arguments)
        assert config.methods == DEFAULT_METHODS
        assert len(config.methods) == 7

    def test_single_method(self, base_arguments):
        config = validate_configuration(
            mode="DIA", approach="free", spectral_library_file="lib.tsv", methods=["iBAQ"], **base_arguments
        )
        assert config.methods == ("iBAQ",)

    @pytest.mark.parametrize("methods", [[], ["top3"], ["Top3", "aLFQ"], ["Top3", "Top3"]])
    def test_invalid(self, base_arguments, methods):
        with pytest.raises(ConfigurationError):
            validate_configuration(
                mode="DIA", approach="free", spectral_library_file="lib.tsv", methods=methods, **base_arguments
            )


class TestRunConfiguration:
    """RunConfiguration behaviour."""

    def test_immutable(self, base_arguments):
        config = validate_configuration(mode="DIA", approach="free", spectral_library_file="lib.tsv", **base_arguments)
        with pytest.raises(AttributeError):
            config.mode = Mode.DDA

    def test_unused_inputs_are_dropped(self, base_arguments, is_concentration_file):
        config = validate_configuration(
            mode="DIA",
            approach="free",
            spectral_library_file="lib.tsv",
            bgs_fasta_file="x.bgsfasta",
            is_concentration_file=is_concentration_file,
            **base_arguments,
        )
        assert config.bgs_fasta_file is None
        assert config.is_concentration_file is None
        assert config.dda_results_file is None

    def test_yaml_round_trip(self, base_arguments, tmp_path):
        config = validate_configuration(
            mode="DIA", approach="free", spectral_library_file="lib.tsv", methods=["Top3", "xTop"], **base_arguments
        )
        path = tmp_path / "run_config.yaml"
        config.to_yaml(str(path))

        assert "mode: DIA" in path.read_text()
        assert RunConfiguration.from_yaml(str(path)) == config

    def test_direct_construction_is_validated(self, base_arguments):
        with pytest.raises(ConfigurationError, match="spectral library"):
            RunConfiguration(mode=Mode.DIA, approach=Approach.FREE, open_source_dia=True, **base_arguments)

    def test_direct_construction_coerces_strings(self, base_arguments, dda_results_file):
        config = RunConfiguration(
            mode="DDA", approach="free", dda_results_file=dda_results_file, methods=["iBAQ"], **base_arguments
        )
        assert config.mode is Mode.DDA
        assert config.approach is Approach.FREE
        assert config.methods == ("iBAQ",)

    def test_direct_construction_rejects_unknown_mode(self, base_arguments):
        with pytest.raises(ConfigurationError, match="Invalid mode"):
            RunConfiguration(mode="SWATH", approach="free", **base_arguments)


class TestDirectDIAUnlabel:
    """directDIA with Spectronaut and an external IS standard."""

    def test_valid(self, base_arguments, is_concentration_file):
        config = validate_configuration(
            mode="directDIA",
            approach="unlabel",
            bgs_fasta_file="x.bgsfasta",
            is_concentration_file=is_concentration_file,
            **base_arguments,
        )
        assert config.mode is Mode.DIRECT_DIA
        assert config.approach is Approach.UNLABEL
        assert config.bgs_fasta_file == "x.bgsfasta"
        assert config.is_concentration_file == is_concentration_file
        assert not config.is_label
