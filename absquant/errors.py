"""Exceptions raised by the quantification pipeline."""

from typing import Optional


class AbsQuantError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(AbsQuantError, ValueError):
    """The run configuration violates a validation rule."""


class StageInvocationError(AbsQuantError):
    """An external stage failed or did not produce its expected output."""

    def __init__(self, stage: str, message: str, returncode: Optional[int] = None):
        self.stage = stage
        self.returncode = returncode
        super().__init__(f"Stage '{stage}' failed: {message}")


class ArtifactResolutionError(AbsQuantError):
    """An expected artifact could not be located or read."""
