"""Logical artifact names shared by the stages."""


class Artifacts:
    """Logical names resolved to file paths by the ArtifactNamer."""

    RUN_ROOT = "run_root"
    INTERMEDIATE = "intermediate"
    RUN_CONFIG = "run_config"
    RUN_RESULT = "run_result"
    ID_FASTA = "id_fasta"
    PRIMARY_REPORT = "primary_report"
    IS_SUBTRACTED_REPORT = "is_subtracted_report"
    IS_INTENSITIES = "is_intensities"
    SEARCH_OUTPUT_DIR = "search_output_dir"
    LIBRARY_OUTPUT_DIR = "library_output_dir"
    SPECTRAL_LIBRARY = "spectral_library"
    METHOD_DIR = "method_dir"
    METHOD_INPUT = "method_input"
    PROTEIN_INTENSITIES = "protein_intensities"
    QUANT_OUTPUT_DIR = "quant_output_dir"
    QUANT_OUTPUT = "quant_output"
    FINAL_CONCENTRATIONS = "final_concentrations"
    STAGE_LOG = "stage_log"


class ReportSource:
    """Search engine or converter that produced the primary report."""

    DIANN = "diann"
    SPECTRONAUT = "spectronaut"
    PD = "pd"


REPORT_SUFFIX = {
    ReportSource.DIANN: "DIANNreport",
    ReportSource.SPECTRONAUT: "SNreport",
    ReportSource.PD: "PDreport",
}

# Column names of the tables written by the pipeline itself
PROTEIN_COL = "Protein"
PEPTIDE_COL = "Peptide"
SAMPLE_COL = "Sample"
INTENSITY_COL = "Intensity"
