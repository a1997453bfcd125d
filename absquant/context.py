"""Mutable state of one pipeline execution."""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from absquant.artifacts import ArtifactNamer
from absquant.config.run import RunConfiguration
from absquant.constants.artifacts import Artifacts
from absquant.errors import ArtifactResolutionError

logger = logging.getLogger(__name__)


class RunContext:
    """
    State threaded through the stages of a single run.

    Holds the resolved sample identifiers and the registry of produced
    artifacts. Stages register what they write and resolve what they read,
    so a missing upstream file surfaces as an :class:`ArtifactResolutionError`.

    Parameters
    ----------
    config : RunConfiguration
        Validated run configuration.
    timestamp : datetime, optional
        Run start time. Defaults to now.
    """

    def __init__(self, config: RunConfiguration, timestamp: Optional[datetime] = None):
        self.config = config
        self.timestamp = timestamp or datetime.now()
        self.namer = ArtifactNamer(config, self.timestamp)
        self.experiment_name = config.experiment_name
        self.output_dir = self.namer.path(Artifacts.RUN_ROOT)
        self.intermediate_dir = self.namer.path(Artifacts.INTERMEDIATE)
        self.report_source = self.namer.report_source
        self.sample_identifiers: list[str] = []
        self.artifacts: dict[str, str] = {}

    def path(
        self,
        name: str,
        sample: Optional[str] = None,
        algorithm: Optional[str] = None,
        stage: Optional[str] = None,
    ) -> str:
        return self.namer.path(name, sample=sample, algorithm=algorithm, stage=stage)

    @staticmethod
    def key(name: str, sample: Optional[str] = None, algorithm: Optional[str] = None) -> str:
        """Registry key of an artifact, qualified by algorithm and sample."""
        return "/".join(part for part in (name, algorithm, sample) if part)

    def register(self, name: str, path: str, sample: Optional[str] = None, algorithm: Optional[str] = None) -> str:
        key = self.key(name, sample=sample, algorithm=algorithm)
        self.artifacts[key] = str(path)
        logger.debug(f"Registered {key}: {path}")
        return str(path)

    def resolve(self, name: str, sample: Optional[str] = None, algorithm: Optional[str] = None) -> str:
        """
        Return the path of a produced artifact.

        Raises
        ------
        ArtifactResolutionError
            If the artifact was never registered or its file is gone.
        """
        key = self.key(name, sample=sample, algorithm=algorithm)
        path = self.artifacts.get(key)
        if path is None:
            raise ArtifactResolutionError(f"Artifact '{key}' has not been produced")
        if not os.path.exists(path):
            raise ArtifactResolutionError(f"Artifact '{key}' is missing on disk: {path}")
        return path

    def create_directories(self) -> None:
        """
        Create the run root and intermediate directories.

        Raises
        ------
        ArtifactResolutionError
            If either directory already exists or cannot be created.
        """
        for name in (Artifacts.RUN_ROOT, Artifacts.INTERMEDIATE):
            directory = Path(self.path(name))
            try:
                directory.mkdir()
            except FileExistsError:
                raise ArtifactResolutionError(f"Output directory already exists: {directory}") from None
            except OSError as e:
                raise ArtifactResolutionError(f"Cannot create output directory {directory}: {e}") from e
            self.register(name, str(directory))
        logger.info(f"Created output directory {self.output_dir}")
