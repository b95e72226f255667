"""YAML manifest parser."""
import yaml

from .schema import Manifest


class ManifestParser:
    """Parser for YAML infrastructure manifests."""

    @staticmethod
    def load(file_path: str) -> Manifest:
        """Load and validate a YAML manifest file.

        Args:
            file_path: Path to the YAML manifest file.

        Returns:
            Manifest: Validated manifest object.

        Raises:
            FileNotFoundError: If the manifest file doesn't exist.
            ValidationError: If the manifest is invalid.
            yaml.YAMLError: If the YAML is malformed.
        """
        with open(file_path, 'r') as f:
            data = yaml.safe_load(f)
        return ManifestParser.parse(data)

    @staticmethod
    def parse(data) -> Manifest:
        """Validate manifest data that has already been loaded.

        Args:
            data: Mapping produced by a YAML or JSON loader.

        Returns:
            Manifest: Validated manifest object.

        Raises:
            ValidationError: If the data does not match the manifest schema.
        """
        return Manifest.model_validate(data)
