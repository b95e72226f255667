"""Tests for manifest parser."""
import textwrap

import pytest
from pydantic import ValidationError

from armforge.manifest.parser import ManifestParser
from armforge.manifest.schema import Manifest, ScaleSetProperties


def test_valid_manifest(tmp_path):
    """Test parsing a valid manifest."""
    yaml_content = textwrap.dedent("""
    metadata:
      name: test
      version: "1.0"
    region: eastus
    tags:
      env: test
    services:
      - name: my-net
        type: Microsoft.Network/virtualNetworks
        properties:
          address_spaces: ["10.0.0.0/16"]
    """)
    manifest_path = tmp_path / "test_manifest.yaml"
    manifest_path.write_text(yaml_content)

    manifest = ManifestParser.load(str(manifest_path))
    assert isinstance(manifest, Manifest)
    assert manifest.metadata.name == "test"
    assert manifest.region == "eastus"
    assert manifest.tags == {"env": "test"}
    assert len(manifest.services) == 1
    assert manifest.services[0].name == "my-net"
    assert manifest.services[0].depends_on == []


def test_invalid_manifest(tmp_path):
    """Test parsing an invalid manifest."""
    yaml_content = textwrap.dedent("""
    metadata:
      name: test
    """)
    manifest_path = tmp_path / "test_manifest.yaml"
    manifest_path.write_text(yaml_content)

    with pytest.raises(ValidationError):
        ManifestParser.load(str(manifest_path))


def test_nonexistent_file():
    """Test loading a nonexistent file."""
    with pytest.raises(FileNotFoundError):
        ManifestParser.load("nonexistent.yaml")


def test_service_properties_reject_unknown_keys():
    """Test that typed service properties catch typos."""
    with pytest.raises(ValidationError):
        ScaleSetProperties.model_validate({"vm": {"username": "azureuser"}, "capacty": 3})


def test_service_property_defaults():
    """Test the defaults applied to scale set properties."""
    props = ScaleSetProperties.model_validate({"vm": {"username": "azureuser", "image": "UbuntuServer_2204LTS"}})
    assert props.upgrade_mode == "Automatic"
    assert props.scale_in_policy == "Default"
    assert props.vm.size == "Standard_B1s"
    assert props.capacity is None


def test_parse_loaded_data():
    """Test validating manifest data that was read elsewhere."""
    manifest = ManifestParser.parse({
        "metadata": {"name": "inline", "version": "2"},
        "services": [{"name": "db", "type": "Microsoft.DocumentDb/databaseAccounts"}],
    })
    assert manifest.region == ""
    assert manifest.services[0].properties == {}

    with pytest.raises(ValidationError):
        ManifestParser.parse({"metadata": {"name": "inline", "version": "2"}})
