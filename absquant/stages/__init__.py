from absquant.stages.base import Stage, StageKind, check_stage_tools
from absquant.stages.normalisation import run_normalisation
from absquant.stages.preprocessing import run_dda_conversion, run_fasta_id, run_is_extraction
from absquant.stages.quantification import run_quantification
from absquant.stages.search import run_search
from absquant.stages.selector import STAGE_TABLE, select_stages

EXECUTORS = {
    StageKind.FASTA: run_fasta_id,
    StageKind.SEARCH: run_search,
    StageKind.CONVERSION: run_dda_conversion,
    StageKind.IS_EXTRACTION: run_is_extraction,
    StageKind.NORMALISATION: run_normalisation,
    StageKind.QUANTIFICATION: run_quantification,
}

__all__ = ["EXECUTORS", "STAGE_TABLE", "Stage", "StageKind", "check_stage_tools", "select_stages"]
