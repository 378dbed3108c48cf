"""Provenance tracking for reproducible count tables."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from blast_intersections.config.schema import PipelineConfig


class ProvenanceTracker:
    """
    Tracks provenance metadata for a counting run.

    Records pipeline version, config hash, effective settings and
    per-genome processing steps.
    """

    def __init__(self, pipeline_version: str, config: PipelineConfig):
        """
        Initialize provenance tracker.

        Args:
            pipeline_version: Pipeline version string (e.g., "0.1.0")
            config: PipelineConfig instance
        """
        self.pipeline_version = pipeline_version
        self.config_hash = config.config_hash()
        self.settings = config.model_dump(mode="json")
        self.processing_steps = []
        self.created_at = datetime.now(timezone.utc)

    def record_step(self, step_name: str, details: Optional[dict] = None) -> None:
        """
        Record a processing step.

        Args:
            step_name: Name of the processing step
            details: Optional dictionary of additional details
        """
        step = {
            "step_name": step_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if details:
            step["details"] = details
        self.processing_steps.append(step)

    def get_steps(self) -> list[dict]:
        """
        Get all recorded processing steps.

        Returns:
            List of processing step dictionaries, in recording order
        """
        return self.processing_steps

    def create_metadata(self) -> dict:
        """
        Create full provenance metadata dictionary.

        Returns:
            Dictionary with all provenance information
        """
        return {
            "pipeline_version": self.pipeline_version,
            "config_hash": self.config_hash,
            "settings": self.settings,
            "created_at": self.created_at.isoformat(),
            "processing_steps": self.processing_steps,
        }

    def save_sidecar(self, output_path: Path) -> Path:
        """
        Save provenance metadata as a JSON sidecar file.

        Args:
            output_path: Path to the main output file.
                         Sidecar will be saved as {path}.provenance.json

        Returns:
            Path of the written sidecar
        """
        output_path = Path(output_path)
        sidecar_path = output_path.with_suffix(".provenance.json")
        sidecar_path.parent.mkdir(parents=True, exist_ok=True)

        with open(sidecar_path, "w") as f:
            json.dump(self.create_metadata(), f, indent=2, default=str)
        return sidecar_path

    @staticmethod
    def load_sidecar(sidecar_path: Path) -> dict:
        """
        Load provenance metadata from a sidecar file.

        Args:
            sidecar_path: Path to the .provenance.json file

        Returns:
            Provenance metadata dictionary
        """
        with open(sidecar_path) as f:
            return json.load(f)

    @classmethod
    def from_config(
        cls,
        config: PipelineConfig,
        version: Optional[str] = None
    ) -> "ProvenanceTracker":
        """
        Create ProvenanceTracker from a PipelineConfig.

        Args:
            config: PipelineConfig instance
            version: Pipeline version string. If None, uses blast_intersections.__version__
        """
        if version is None:
            from blast_intersections import __version__
            version = __version__

        return cls(version, config)
