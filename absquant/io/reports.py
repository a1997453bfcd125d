"""Reading and rewriting of search engine reports."""

import logging
import re

import pandas as pd

from absquant.constants.artifacts import INTENSITY_COL, PEPTIDE_COL, PROTEIN_COL, SAMPLE_COL
from absquant.errors import ArtifactResolutionError
from absquant.io.tables import REPORT_COLUMNS, column_mapping, find_column, read_table, write_table

logger = logging.getLogger(__name__)

ROLES = ["sample", "protein", "peptide", "intensity"]


def read_report(path: str, source: str) -> pd.DataFrame:
    """
    Read a primary report into the pipeline's column roles.

    Parameters
    ----------
    path : str
        Report file.
    source : str
        Report source, a section of ``report_columns.yaml``.

    Returns
    -------
    pd.DataFrame
        Columns ``sample``, ``protein``, ``peptide`` and ``intensity``. Rows
        without a positive intensity are dropped.
    """
    mapping = column_mapping(source)
    df = read_table(path, usecols=[mapping[role] for role in ROLES])
    df = df.rename(columns={mapping[role]: role for role in ROLES})
    df["sample"] = df["sample"].astype(str)
    df["intensity"] = pd.to_numeric(df["intensity"], errors="coerce")
    df = df[df["intensity"] > 0].reset_index(drop=True)
    return df


def derive_samples(path: str, source: str) -> list[str]:
    """Return the unique values of a report's sample column, in order of appearance."""
    sample_col = column_mapping(source)["sample"]
    df = read_table(path, usecols=[sample_col])
    samples = df[sample_col].dropna().astype(str).unique().tolist()
    if not samples:
        raise ArtifactResolutionError(f"No samples found in column '{sample_col}' of {path}")
    _check_sample_names(samples, path)
    return samples


def read_total_protein_samples(path: str) -> list[str]:
    """Return the sample column of the total protein amount table."""
    df = read_table(path)
    sample_col = find_column(df, column_mapping("total_protein")["sample"], path)
    samples = df[sample_col].dropna().astype(str).unique().tolist()
    if not samples:
        raise ArtifactResolutionError(f"No samples listed in {path}")
    _check_sample_names(samples, path)
    return samples


def _check_sample_names(samples: list[str], path: str) -> None:
    # sample lists are handed to the quantification tool comma separated
    bad = [s for s in samples if "," in s]
    if bad:
        raise ArtifactResolutionError(f"Sample identifiers must not contain commas: {'; '.join(bad)} in {path}")


def _strip_annotation(annotated: str) -> str:
    """``[K].PEPTIDEk.[R]`` -> ``PEPTIDEK``"""
    parts = str(annotated).split(".")
    core = parts[1] if len(parts) == 3 else parts[0]
    return core.upper()


def convert_pd_peptide_groups(peptide_groups_file: str, output_file: str, samples: list[str]) -> pd.DataFrame:
    """
    Convert a Proteome Discoverer peptide-groups export to a long report.

    Abundance columns (``Abundance: F1: Sample, ...``) are assigned to
    ``samples`` by position.

    Parameters
    ----------
    peptide_groups_file : str
        Tab separated peptide-groups export.
    output_file : str
        Destination report, columns Sample, Protein, Peptide, Intensity.
    samples : list of str
        Sample identifiers in abundance-column order.

    Returns
    -------
    pd.DataFrame
        The written report.
    """
    mapping = column_mapping("pd_peptide_groups")
    df = read_table(peptide_groups_file)

    if mapping["protein"] not in df.columns:
        raise ArtifactResolutionError(f"Column '{mapping['protein']}' not found in {peptide_groups_file}")
    if mapping["peptide"] in df.columns:
        peptides = df[mapping["peptide"]].astype(str).str.upper()
    elif mapping["annotated_peptide"] in df.columns:
        peptides = df[mapping["annotated_peptide"]].map(_strip_annotation)
    else:
        raise ArtifactResolutionError(f"No peptide sequence column found in {peptide_groups_file}")

    abundance_cols = [c for c in df.columns if str(c).startswith(mapping["abundance_prefix"])]
    if len(abundance_cols) != len(samples):
        raise ArtifactResolutionError(
            f"{peptide_groups_file} has {len(abundance_cols)} abundance columns but {len(samples)} samples are listed"
        )

    wide = pd.DataFrame({PROTEIN_COL: df[mapping["protein"]].astype(str), PEPTIDE_COL: peptides})
    for col, sample in zip(abundance_cols, samples):
        wide[sample] = pd.to_numeric(df[col], errors="coerce")

    report = wide.melt(
        id_vars=[PROTEIN_COL, PEPTIDE_COL],
        value_vars=samples,
        var_name=SAMPLE_COL,
        value_name=INTENSITY_COL,
    )
    report = report[report[INTENSITY_COL] > 0]
    report = report[[SAMPLE_COL, PROTEIN_COL, PEPTIDE_COL, INTENSITY_COL]].reset_index(drop=True)
    write_table(report, output_file)
    logger.info(f"Converted {len(df)} peptide groups from {len(samples)} samples")
    return report


def _is_heavy(modified: pd.Series) -> pd.Series:
    pattern = "|".join(re.escape(marker) for marker in REPORT_COLUMNS["heavy_label_markers"])
    return modified.astype(str).str.contains(pattern, regex=True)


def extract_internal_standards(
    report_file: str,
    source: str,
    is_concentration_file: str,
    subtracted_report_file: str,
    is_intensity_file: str,
    samples: list[str],
) -> tuple[str, str]:
    """
    Split internal standard peptides off a report.

    Rows whose stripped sequence is listed in the IS-concentration file's
    ``Peptide`` column are IS signal. When the report carries modified
    sequences, only isotope-labelled rows count as IS so the endogenous
    light form of the same peptide stays in the report.

    Parameters
    ----------
    report_file : str
        Primary search report.
    source : str
        Report source of ``report_file``.
    is_concentration_file : str
        Table of spiked-in IS peptides with a ``Peptide`` column.
    subtracted_report_file : str
        Destination of the report without IS rows, in the source layout.
    is_intensity_file : str
        Destination of the IS intensities, one row per IS peptide and one
        column per sample.
    samples : list of str
        Sample order of the IS intensity columns.

    Returns
    -------
    tuple[str, str]
        The subtracted report and IS intensity paths.
    """
    mapping = column_mapping(source)
    is_table = read_table(is_concentration_file)
    peptide_col = find_column(is_table, "peptide", is_concentration_file)
    is_peptides = set(is_table[peptide_col].dropna().astype(str).str.upper())

    report = read_table(report_file)
    for role in ROLES:
        if mapping[role] not in report.columns:
            raise ArtifactResolutionError(f"Column '{mapping[role]}' not found in {report_file}")

    is_mask = report[mapping["peptide"]].astype(str).str.upper().isin(is_peptides)
    modified_col = mapping.get("modified_peptide")
    if modified_col and modified_col in report.columns:
        is_mask &= _is_heavy(report[modified_col])

    if not is_mask.any():
        raise ArtifactResolutionError(
            f"None of the {len(is_peptides)} internal standard peptides were found in {report_file}"
        )

    write_table(report[~is_mask], subtracted_report_file)

    is_rows = report.loc[is_mask, [mapping[role] for role in ROLES]]
    is_rows = is_rows.rename(columns={mapping[role]: role for role in ROLES})
    is_rows["sample"] = is_rows["sample"].astype(str)
    is_rows["intensity"] = pd.to_numeric(is_rows["intensity"], errors="coerce")
    is_intensities = (
        is_rows.pivot_table(
            index=["protein", "peptide"],
            columns="sample",
            values="intensity",
            aggfunc="sum",
        )
        .reindex(columns=samples)
        .fillna(0.0)
        .reset_index()
        .rename(columns={"protein": PROTEIN_COL, "peptide": PEPTIDE_COL})
    )
    is_intensities.columns.name = None
    write_table(is_intensities, is_intensity_file)

    logger.info(f"Extracted {len(is_intensities)} internal standard peptides ({int(is_mask.sum())} report rows)")
    return subtracted_report_file, is_intensity_file
