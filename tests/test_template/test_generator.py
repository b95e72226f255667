"""Tests for the manifest-driven template generator."""
import io
import json
import textwrap
from pathlib import Path

import pytest
from rich.console import Console

from armforge.errors import ConfigurationError, ReferenceResolutionError
from armforge.template.generator import TemplateGenerator

MANIFEST = textwrap.dedent("""
metadata:
  name: web
  version: "1.0"
region: eastus
tags:
  env: test
services:
  - name: my-net
    type: Microsoft.Network/virtualNetworks
    properties:
      address_spaces: ["10.100.200.0/24"]
      subnets:
        - name: scale-set-subnet
          prefix: 10.100.200.0/28
  - name: my-scale-set
    type: Microsoft.Compute/virtualMachineScaleSets
    properties:
      capacity: 3
      upgrade_mode: Rolling
      scale_in_policy: OldestVM
      automatic_repair_minutes: 10
      health_extension:
        protocol: http
        port: 80
        path: /healthcheck
      vm:
        username: azureuser
        image: UbuntuServer_2204LTS
        vnet: my-net
        subnet: scale-set-subnet
  - name: appdb
    type: Microsoft.DocumentDb/databaseAccounts
    region: westeurope
    depends_on: [my-scale-set]
    properties:
      kind: Gremlin
      consistency:
        level: BoundedStaleness
        max_staleness_prefix: 100
        max_interval_in_seconds: 300
      containers:
        - name: people
          partition_key: ["/city"]
""")


def write_manifest(tmp_path, content=MANIFEST):
    manifest_path = tmp_path / "infra.yaml"
    manifest_path.write_text(content)
    return str(manifest_path)


def test_generator(tmp_path):
    """Test ARM template generation from a manifest."""
    output_dir = tmp_path / "out"
    generator = TemplateGenerator(write_manifest(tmp_path), str(output_dir))
    template_path = generator.generate()

    assert Path(template_path) == output_dir / "azuredeploy.json"
    doc = json.loads(Path(template_path).read_text())
    names = [r["name"] for r in doc["resources"]]
    assert names == ["my-net", "my-scale-set", "appdb-account", "appdb-account/appdb", "appdb-account/appdb/people"]
    assert "password-for-my-scale-set" in doc["parameters"]

    scale_set = doc["resources"][1]
    assert scale_set["tags"] == {"env": "test"}
    assert scale_set["dependsOn"] == ["[resourceId('Microsoft.Network/virtualNetworks', 'my-net')]"]
    assert scale_set["properties"]["upgradePolicy"]["mode"] == "Rolling"

    account = doc["resources"][2]
    assert account["location"] == "westeurope"
    assert account["dependsOn"] == ["[resourceId('Microsoft.Compute/virtualMachineScaleSets', 'my-scale-set')]"]
    assert account["properties"]["consistencyPolicy"]["maxIntervalInSeconds"] == 300
    assert account["properties"]["locations"] == [{"locationName": "westeurope"}]


def test_generator_defaults_to_manifest_directory(tmp_path):
    """Test that the template lands next to the manifest by default."""
    template_path = TemplateGenerator(write_manifest(tmp_path)).generate()
    assert Path(template_path) == tmp_path / "azuredeploy.json"


def test_generation_is_deterministic(tmp_path):
    """Test that generating twice writes identical files."""
    generator = TemplateGenerator(write_manifest(tmp_path))
    first = Path(generator.generate()).read_text()
    second = Path(generator.generate()).read_text()
    assert first == second


def test_debug_output(tmp_path):
    """Test that debug mode reports progress on the console."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=200)
    TemplateGenerator(write_manifest(tmp_path), debug=True, console=console).generate()
    output = buffer.getvalue()
    assert "Debug: Added Microsoft.Compute/virtualMachineScaleSets 'my-scale-set'" in output
    assert "Linked 5 resources and 1 parameters" in output


def test_unsupported_service_type(tmp_path):
    """Test that unknown service types are rejected."""
    content = textwrap.dedent("""
    metadata:
      name: web
      version: "1.0"
    region: eastus
    services:
      - name: site
        type: Microsoft.Web/staticSites
    """)
    generator = TemplateGenerator(write_manifest(tmp_path, content))
    with pytest.raises(ConfigurationError):
        generator.build_template()


def test_unresolved_dependency(tmp_path):
    """Test that a dependency on an undeclared service fails before writing."""
    content = textwrap.dedent("""
    metadata:
      name: web
      version: "1.0"
    region: eastus
    services:
      - name: my-net
        type: Microsoft.Network/virtualNetworks
        depends_on: [missing]
        properties:
          address_spaces: ["10.0.0.0/16"]
    """)
    generator = TemplateGenerator(write_manifest(tmp_path, content))
    with pytest.raises(ReferenceResolutionError):
        generator.generate()
    assert not (tmp_path / "azuredeploy.json").exists()


def test_unknown_image(tmp_path):
    """Test that image names are checked against the known images."""
    content = textwrap.dedent("""
    metadata:
      name: web
      version: "1.0"
    region: eastus
    services:
      - name: my-scale-set
        type: Microsoft.Compute/virtualMachineScaleSets
        properties:
          vm:
            username: azureuser
            image: BeOS_5
    """)
    generator = TemplateGenerator(write_manifest(tmp_path, content))
    with pytest.raises(ConfigurationError):
        generator.build_template()


def test_dependency_on_cosmos_service_targets_account(tmp_path):
    """Test that depending on a Cosmos DB service by name waits for its account."""
    content = textwrap.dedent("""
    metadata:
      name: web
      version: "1.0"
    region: eastus
    services:
      - name: store
        type: Microsoft.DocumentDb/databaseAccounts
      - name: net
        type: Microsoft.Network/virtualNetworks
        depends_on: [store]
        properties:
          address_spaces: ["10.0.0.0/16"]
    """)
    template = TemplateGenerator(write_manifest(tmp_path, content)).build_template()
    (net,) = template.find("net")
    assert net.depends_on == ("[resourceId('Microsoft.DocumentDb/databaseAccounts', 'store-account')]",)


def test_tcp_health_extension_rejects_path(tmp_path):
    """Test that a TCP health probe with a request path is rejected."""
    content = textwrap.dedent("""
    metadata:
      name: web
      version: "1.0"
    region: eastus
    services:
      - name: my-scale-set
        type: Microsoft.Compute/virtualMachineScaleSets
        properties:
          health_extension:
            protocol: tcp
            port: 22
            path: /health
          vm:
            username: azureuser
            image: UbuntuServer_2204LTS
    """)
    generator = TemplateGenerator(write_manifest(tmp_path, content))
    with pytest.raises(ConfigurationError) as exc_info:
        generator.build_template()
    assert exc_info.value.field == "extensions.application_health.protocol"
