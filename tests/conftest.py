"""Shared fixtures: input files and a recording stand-in for the external tools."""

from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest

from absquant.errors import StageInvocationError

SAMPLES = ["S1", "S2"]
TIMESTAMP = datetime(2024, 1, 2, 3, 4, 5)
IS_PEPTIDE = "ISPEPTIDEK"


def _arg(command: list[str], flag: str) -> str:
    return command[command.index(flag) + 1]


def _diann_rows() -> pd.DataFrame:
    rows = []
    for sample, scale in zip(SAMPLES, (1.0, 2.0)):
        rows += [
            (sample, "P1", "PEPTIDEA", "PEPTIDEA", 100.0 * scale),
            (sample, "P1", "PEPTIDEB", "PEPTIDEB", 50.0 * scale),
            (sample, "P2", "PEPTIDEC", "PEPTIDEC", 10.0 * scale),
            (sample, "P1", IS_PEPTIDE, IS_PEPTIDE, 30.0 * scale),
            (sample, "P1", IS_PEPTIDE, f"{IS_PEPTIDE}(UniMod:259)", 1000.0 * scale),
        ]
    return pd.DataFrame(
        rows, columns=["Run", "Protein.Group", "Stripped.Sequence", "Modified.Sequence", "Precursor.Quantity"]
    )


def write_diann_report(invocation) -> None:
    _diann_rows().to_csv(Path(invocation.cwd) / "report.tsv", sep="\t", index=False)
    pd.DataFrame({"Run": ["x"]}).to_csv(Path(invocation.cwd) / "report.stats.tsv", sep="\t", index=False)


def write_diann_direct(invocation) -> None:
    write_diann_report(invocation)
    (Path(invocation.cwd) / "report-lib.tsv").write_text("Precursor.Id\nPEPTIDEA2\n")


def write_diann_library(invocation) -> None:
    (Path(invocation.cwd) / "report-lib.tsv").write_text("Precursor.Id\nPEPTIDEA2\n")


def write_spectronaut_report(invocation) -> None:
    df = _diann_rows().rename(
        columns={
            "Run": "R.FileName",
            "Protein.Group": "PG.ProteinGroups",
            "Stripped.Sequence": "PEP.StrippedSequence",
            "Modified.Sequence": "FG.LabeledSequence",
            "Precursor.Quantity": "FG.Quantity",
        }
    )
    df["FG.LabeledSequence"] = df["FG.LabeledSequence"].str.replace("(UniMod:259)", "[Label:13C(6)15N(2)]", regex=False)
    run_dir = Path(invocation.cwd) / "20240102_030405_exp"
    run_dir.mkdir(parents=True, exist_ok=True)
    df.to_csv(run_dir / "exp_Report.tsv", sep="\t", index=False)


def write_protein_inference(invocation) -> None:
    method = _arg(invocation.command, "--method")
    long = pd.read_csv(_arg(invocation.command, "--input"), sep="\t")
    wide = long.pivot_table(index="Protein", columns="Sample", values="Intensity", aggfunc="sum").reset_index()
    wide.to_csv(Path(invocation.cwd) / f"{method}_protein_intensity.tsv", sep="\t", index=False)


def write_xtop(invocation) -> None:
    matrix = pd.read_csv(_arg(invocation.command, "--input"), sep="\t")
    matrix.drop(columns="Peptide").groupby("Protein").sum().reset_index().to_csv(
        Path(invocation.cwd) / "xTop_protein_intensity.tsv", sep="\t", index=False
    )


def write_lfaq(invocation) -> None:
    per_sample = pd.read_csv(invocation.command[1], sep="\t")
    per_sample.groupby("Protein", as_index=False)["Intensity"].sum().to_csv(
        Path(invocation.cwd) / "ProteinResults.txt", sep="\t", index=False
    )


def write_concentrations(invocation) -> None:
    experiment = _arg(invocation.command, "--experiment")
    for method in _arg(invocation.command, "--methods").split(","):
        pd.DataFrame({"Protein": ["P1", "P2"], "S1": [1.0, 2.0], "S2": [3.0, 4.0]}).to_csv(
            Path(invocation.cwd) / f"{experiment}_prot_conc_{method}.csv", index=False
        )


HANDLERS = {
    "diann_search": write_diann_report,
    "diann_direct": write_diann_direct,
    "diann_library": write_diann_library,
    "spectronaut_search": write_spectronaut_report,
    "spectronaut_direct": write_spectronaut_report,
    "protein_inference": write_protein_inference,
    "xtop": write_xtop,
    "lfaq": write_lfaq,
    "absolute_quantification": write_concentrations,
}


class RecordingInvoker:
    """
    Records invocations and writes the files the real tool would.

    Parameters
    ----------
    fail_at : int or str, optional
        Invocation index or stage name at which to raise StageInvocationError.
    skip : set of str, optional
        Tools that "succeed" without writing any output.
    """

    def __init__(self, fail_at=None, skip=()):
        self.invocations = []
        self.fail_at = fail_at
        self.skip = set(skip)

    def invoke(self, invocation) -> None:
        index = len(self.invocations)
        self.invocations.append(invocation)
        if self.fail_at in (index, invocation.stage):
            raise StageInvocationError(invocation.stage, "injected failure", returncode=1)
        Path(invocation.cwd).mkdir(parents=True, exist_ok=True)
        if invocation.tool not in self.skip:
            HANDLERS[invocation.tool](invocation)

    @property
    def stages(self) -> list[str]:
        return [invocation.stage for invocation in self.invocations]


@pytest.fixture
def invoker():
    return RecordingInvoker()


@pytest.fixture
def input_dir(tmp_path):
    raw = tmp_path / "raw"
    raw.mkdir()
    (raw / "S1.raw").touch()
    (raw / "S2.raw").touch()
    return str(raw)


@pytest.fixture
def fasta_file(tmp_path):
    path = tmp_path / "human.fasta"
    path.write_text(
        ">sp|P1|PROT1_HUMAN Protein one OS=Homo sapiens\n"
        "MKPEPTIDEAK\nPEPTIDEBR\n"
        ">sp|P2|PROT2_HUMAN Protein two OS=Homo sapiens\n"
        "MPEPTIDECK\n"
    )
    return str(path)


@pytest.fixture
def total_protein_file(tmp_path):
    path = tmp_path / "total_protein.csv"
    pd.DataFrame({"Sample": SAMPLES, "TotalProtein": [50.0, 60.0]}).to_csv(path, index=False)
    return str(path)


@pytest.fixture
def is_concentration_file(tmp_path):
    path = tmp_path / "is_concentration.csv"
    pd.DataFrame({"Protein": ["P1"], "Peptide": [IS_PEPTIDE], "Concentration": [5.0]}).to_csv(path, index=False)
    return str(path)


@pytest.fixture
def dda_results_file(tmp_path):
    path = tmp_path / "pd_peptide_groups.txt"
    pd.DataFrame(
        {
            "Master Protein Accessions": ["P1", "P1", "P2"],
            "Annotated Sequence": ["[K].PEPTIDEA.[R]", "[R].PEPTIDEB.[K]", "[K].PEPTIDEC.[-]"],
            "Abundance: F1: Sample": [100.0, 50.0, None],
            "Abundance: F2: Sample": [200.0, 100.0, 20.0],
            "Abundance Ratio: (F2) / (F1)": [2.0, 2.0, None],
        }
    ).to_csv(path, sep="\t", index=False)
    return str(path)


@pytest.fixture
def base_arguments(input_dir, fasta_file, total_protein_file):
    return {
        "input_dir": input_dir,
        "experiment_name": "exp",
        "fasta_file": fasta_file,
        "total_protein_file": total_protein_file,
    }


@pytest.fixture
def timestamp():
    return TIMESTAMP


@pytest.fixture
def make_invoker():
    """Factory for RecordingInvoker instances with injected failures."""
    return RecordingInvoker
