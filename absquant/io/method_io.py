"""Input and output tables of the normalisation tools."""

import pandas as pd

from absquant.constants.artifacts import INTENSITY_COL, PEPTIDE_COL, PROTEIN_COL, SAMPLE_COL
from absquant.errors import ArtifactResolutionError
from absquant.io.tables import read_table


def _peptide_intensities(report: pd.DataFrame) -> pd.DataFrame:
    # precursors (charge states, modified forms) of one peptide are summed
    return report.groupby(["protein", "peptide", "sample"], sort=False, as_index=False)["intensity"].sum()


def long_input(report: pd.DataFrame) -> pd.DataFrame:
    """One row per protein, peptide and sample."""
    df = _peptide_intensities(report)
    return df.rename(
        columns={"protein": PROTEIN_COL, "peptide": PEPTIDE_COL, "sample": SAMPLE_COL, "intensity": INTENSITY_COL}
    )[[PROTEIN_COL, PEPTIDE_COL, SAMPLE_COL, INTENSITY_COL]]


def matrix_input(report: pd.DataFrame, samples: list[str]) -> pd.DataFrame:
    """One row per peptide, one intensity column per sample; absent values are 0."""
    df = _peptide_intensities(report)
    matrix = (
        df.pivot_table(index=["protein", "peptide"], columns="sample", values="intensity", aggfunc="sum")
        .reindex(columns=samples)
        .fillna(0.0)
        .reset_index()
        .rename(columns={"protein": PROTEIN_COL, "peptide": PEPTIDE_COL})
    )
    matrix.columns.name = None
    return matrix


def sample_input(report: pd.DataFrame, sample: str) -> pd.DataFrame:
    """Peptide intensities of a single sample."""
    df = _peptide_intensities(report[report["sample"] == sample])
    return df.rename(columns={"protein": PROTEIN_COL, "peptide": PEPTIDE_COL, "intensity": INTENSITY_COL})[
        [PROTEIN_COL, PEPTIDE_COL, INTENSITY_COL]
    ]


def read_wide_output(path: str, samples: list[str]) -> pd.DataFrame:
    """
    Read a tool output with one protein column followed by sample columns.

    Returns
    -------
    pd.DataFrame
        ``Protein`` followed by one column per sample, in ``samples`` order.

    Raises
    ------
    ArtifactResolutionError
        If a sample column is missing.
    """
    df = read_table(path)
    df.columns = [str(c) for c in df.columns]
    protein_col = df.columns[0]
    missing = [s for s in samples if s not in df.columns]
    if missing:
        raise ArtifactResolutionError(f"Sample column(s) {', '.join(missing)} missing from {path}")
    out = df[[protein_col] + list(samples)].rename(columns={protein_col: PROTEIN_COL})
    return out.reset_index(drop=True)


def read_sample_output(path: str) -> pd.Series:
    """Read a per-sample tool output: protein in the first column, intensity in the last."""
    df = read_table(path)
    if df.shape[1] < 2:
        raise ArtifactResolutionError(f"Expected a protein and an intensity column in {path}")
    values = pd.to_numeric(df.iloc[:, -1], errors="coerce")
    series = pd.Series(values.to_numpy(), index=df.iloc[:, 0].astype(str))
    return series.groupby(level=0, sort=False).sum()


def combine_sample_outputs(outputs: dict[str, pd.Series], samples: list[str]) -> pd.DataFrame:
    """Join per-sample protein intensities into one wide table."""
    df = pd.concat([outputs[s].rename(s) for s in samples], axis=1).fillna(0.0)
    df.index.name = PROTEIN_COL
    return df.reset_index()
