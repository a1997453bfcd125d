"""FASTA header rewriting."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def accession_from_header(header: str) -> str:
    """
    Extract the protein accession from a FASTA header line.

    UniProt headers (``>sp|P12345|NAME_HUMAN Description``) yield the middle
    field, any other header its first whitespace-delimited token.

    Examples
    --------
    >>> accession_from_header(">sp|P12345|ALBU_HUMAN Serum albumin OS=Homo sapiens")
    'P12345'
    >>> accession_from_header(">P12345 some description")
    'P12345'
    """
    token = header.lstrip(">").strip().split(maxsplit=1)
    if not token:
        return ""
    parts = token[0].split("|")
    if len(parts) >= 2 and parts[1]:
        return parts[1]
    return parts[0]


def write_id_fasta(fasta_file: str, output_file: str) -> int:
    """
    Write a copy of a FASTA file whose headers contain only the accession.

    Parameters
    ----------
    fasta_file : str
        Source FASTA.
    output_file : str
        Destination path.

    Returns
    -------
    int
        Number of protein entries written.
    """
    n_proteins = 0
    Path(output_file).parent.mkdir(parents=True, exist_ok=True)
    with open(fasta_file) as src, open(output_file, "w") as dst:
        for line in src:
            if line.startswith(">"):
                dst.write(f">{accession_from_header(line)}\n")
                n_proteins += 1
            elif line.strip():
                dst.write(line.rstrip("\r\n") + "\n")
    logger.info(f"Wrote {n_proteins} protein entries to {output_file}")
    return n_proteins
