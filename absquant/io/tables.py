from pathlib import Path
from typing import Optional

import pandas as pd
from alphabase.yaml_utils import load_yaml

from absquant.errors import ArtifactResolutionError

PACKAGE_DIR = Path(__file__).parent.parent
CONFIG_DIR = PACKAGE_DIR / "constants"
REPORT_COLUMNS_PATH = CONFIG_DIR / "report_columns.yaml"


def _load_report_columns() -> dict:
    if not REPORT_COLUMNS_PATH.exists():
        raise FileNotFoundError(f"Configuration file not found: {REPORT_COLUMNS_PATH}")
    return load_yaml(REPORT_COLUMNS_PATH)


REPORT_COLUMNS = _load_report_columns()


def column_mapping(section: str) -> dict:
    """Return one section of the report column configuration."""
    try:
        return REPORT_COLUMNS[section]
    except KeyError:
        raise ValueError(f"'{section}' section not found in {REPORT_COLUMNS_PATH.name}") from None


def separator_for(path: str) -> str:
    """CSV files are comma separated, everything else is tab separated."""
    return "," if str(path).lower().endswith(".csv") else "\t"


def read_table(path: str, usecols: Optional[list[str]] = None) -> pd.DataFrame:
    """
    Read a tabular file by its extension.

    Parquet files are read with pyarrow; ``.csv`` as comma separated and any
    other extension (``.tsv``, ``.txt``, Spectronaut's ``.xls``) as tab separated.

    Parameters
    ----------
    path : str
        File to read.
    usecols : list of str, optional
        Columns to load. All of them must exist.

    Returns
    -------
    pd.DataFrame
        The table.

    Raises
    ------
    ArtifactResolutionError
        If the file is missing or lacks one of ``usecols``.
    """
    if not Path(path).is_file():
        raise ArtifactResolutionError(f"File not found: {path}")

    if str(path).lower().endswith(".parquet"):
        df = pd.read_parquet(path)
    else:
        df = pd.read_csv(path, sep=separator_for(path), low_memory=False)

    if usecols is not None:
        missing = [c for c in usecols if c not in df.columns]
        if missing:
            raise ArtifactResolutionError(
                f"Column(s) {', '.join(missing)} not found in {path}. Available columns: {list(df.columns)}"
            )
        df = df[usecols]
    return df


def write_table(df: pd.DataFrame, path: str) -> str:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, sep=separator_for(path), index=False)
    return str(path)


def find_column(df: pd.DataFrame, name: str, path: str) -> str:
    """Find a column by case-insensitive name."""
    for column in df.columns:
        if str(column).strip().lower() == name.lower():
            return column
    raise ArtifactResolutionError(f"Column '{name}' not found in {path}. Available columns: {list(df.columns)}")
