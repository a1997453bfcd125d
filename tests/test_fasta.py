"""Tests for io/fasta.py"""

import pytest

from absquant.io.fasta import accession_from_header, write_id_fasta


@pytest.mark.parametrize(
    "header, accession",
    [
        (">sp|P12345|ALBU_HUMAN Serum albumin OS=Homo sapiens", "P12345"),
        (">tr|A0A024R161|A0A024R161_HUMAN Guanine nucleotide-binding protein", "A0A024R161"),
        (">P12345 some description", "P12345"),
        (">P12345", "P12345"),
        (">iRT_standard|IRT", "IRT"),
        (">", ""),
    ],
)
def test_accession_from_header(header, accession):
    assert accession_from_header(header) == accession


def test_write_id_fasta(fasta_file, tmp_path):
    output = tmp_path / "out" / "exp_ID.fasta"

    n_proteins = write_id_fasta(fasta_file, str(output))

    assert n_proteins == 2
    assert output.read_text() == ">P1\nMKPEPTIDEAK\nPEPTIDEBR\n>P2\nMPEPTIDECK\n"


def test_write_id_fasta_drops_blank_lines(tmp_path):
    source = tmp_path / "in.fasta"
    source.write_text(">sp|Q1|X_HUMAN desc\r\nMKR\r\n\r\n>sp|Q2|Y_HUMAN desc\r\nMAK\r\n")
    output = tmp_path / "out.fasta"

    assert write_id_fasta(str(source), str(output)) == 2
    assert output.read_text() == ">Q1\nMKR\n>Q2\nMAK\n"
