"""Normalisation methods known to the pipeline."""

from dataclasses import dataclass


class InputShape:
    """Layouts a normalisation tool expects its peptide intensities in."""

    LONG = "long"  # one row per (protein, peptide, sample)
    MATRIX = "matrix"  # one row per peptide, one column per sample
    PER_SAMPLE = "per_sample"  # one long file per sample


@dataclass(frozen=True)
class NormalisationMethod:
    """Static description of one peptide-to-protein normalisation method."""

    name: str
    tool: str
    input_shape: str
    per_sample: bool = False


NORMALISATION_METHODS: dict[str, NormalisationMethod] = {
    "Top3": NormalisationMethod("Top3", tool="protein_inference", input_shape=InputShape.LONG),
    "Topall": NormalisationMethod("Topall", tool="protein_inference", input_shape=InputShape.LONG),
    "iBAQ": NormalisationMethod("iBAQ", tool="protein_inference", input_shape=InputShape.LONG),
    "APEX": NormalisationMethod("APEX", tool="protein_inference", input_shape=InputShape.LONG),
    "NSAF": NormalisationMethod("NSAF", tool="protein_inference", input_shape=InputShape.LONG),
    "LFAQ": NormalisationMethod("LFAQ", tool="lfaq", input_shape=InputShape.PER_SAMPLE, per_sample=True),
    "xTop": NormalisationMethod("xTop", tool="xtop", input_shape=InputShape.MATRIX),
}

DEFAULT_METHODS: tuple[str, ...] = tuple(NORMALISATION_METHODS)
