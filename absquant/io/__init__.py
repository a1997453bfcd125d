from .fasta import accession_from_header, write_id_fasta
from .reports import (
    convert_pd_peptide_groups,
    derive_samples,
    extract_internal_standards,
    read_report,
    read_total_protein_samples,
)
from .tables import read_table, write_table

__all__ = [
    "accession_from_header",
    "convert_pd_peptide_groups",
    "derive_samples",
    "extract_internal_standards",
    "read_report",
    "read_table",
    "read_total_protein_samples",
    "write_id_fasta",
    "write_table",
]
