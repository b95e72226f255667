"""Tests for assembling deployments."""
import pytest

from armforge.arm.identity import ResourceName
from armforge.arm.models import ArmParameter
from armforge.arm.network import VirtualNetwork
from armforge.builders.vnet import subnet, vnet
from armforge.errors import ConfigurationError
from armforge.template import writer
from armforge.template.deployment import arm


def network(name):
    return vnet().name(name).add_address_spaces(["10.1.0.0/16"])


def test_resources_inherit_deployment_location():
    """Test that builders without a location use the deployment's."""
    template = arm().location("westeurope").add_resource(network("net")).build()
    assert template.resources[0].resource.location == "westeurope"


def test_resource_location_overrides_deployment():
    """Test that a builder's own location wins."""
    template = arm().location("westeurope").add_resource(network("net").location("eastus")).build()
    assert template.resources[0].resource.location == "eastus"


def test_missing_location_fails():
    """Test that a resource needs a location from somewhere."""
    with pytest.raises(ConfigurationError) as exc_info:
        arm().add_resource(network("net")).build()
    assert exc_info.value.field == "location"


def test_prebuilt_records_are_accepted():
    """Test that records can be added next to builders."""
    record = VirtualNetwork(name=ResourceName("raw"), location="eastus", address_spaces=("10.2.0.0/16",))
    template = arm().location("eastus").add_resources([record, network("net").depends_on("raw")]).build()
    doc = writer.to_dict(template)
    assert [r["name"] for r in doc["resources"]] == ["raw", "net"]
    assert doc["resources"][1]["dependsOn"] == ["[resourceId('Microsoft.Network/virtualNetworks', 'raw')]"]


def test_identical_parameters_are_merged():
    """Test that the same parameter declared twice appears once."""
    template = (
        arm()
        .location("eastus")
        .add_parameter(ArmParameter.secure("shared"))
        .add_parameter(ArmParameter.secure("shared"))
        .build()
    )
    assert [p.name for p in template.parameters] == ["shared"]


def test_conflicting_parameters_fail():
    """Test that one parameter name cannot carry two definitions."""
    deployment = arm().add_parameter(ArmParameter("p")).add_parameter(ArmParameter("p", "int"))
    with pytest.raises(ConfigurationError):
        deployment.build()


def test_duplicate_outputs_fail():
    """Test that output names are unique."""
    deployment = arm().add_output("id", "a").add_output("id", "b")
    with pytest.raises(ConfigurationError):
        deployment.build()


def test_vnet_builder_projection():
    """Test the virtual network builder output."""
    builder = (
        vnet()
        .name("my-net")
        .add_address_spaces(["10.100.200.0/24"])
        .add_subnets([subnet().name("scale-set-subnet").prefix("10.100.200.0/28")])
        .add_tag("env", "test")
    )
    doc = writer.to_dict(arm().location("eastus").add_resource(builder).build())
    resource = doc["resources"][0]
    assert resource["tags"] == {"env": "test"}
    assert resource["properties"]["addressSpace"]["addressPrefixes"] == ["10.100.200.0/24"]
    assert resource["properties"]["subnets"] == [
        {"name": "scale-set-subnet", "properties": {"addressPrefix": "10.100.200.0/28"}}
    ]


def test_vnet_builder_validation():
    """Test that networks need a valid address space and unique subnets."""
    with pytest.raises(ConfigurationError):
        vnet().name("net").build("eastus")
    with pytest.raises(ConfigurationError):
        vnet().name("net").add_address_spaces(["not-a-cidr"]).build("eastus")
    duplicated = network("net").add_subnets([
        subnet().name("a").prefix("10.1.0.0/24"),
        subnet().name("a").prefix("10.1.1.0/24"),
    ])
    with pytest.raises(ConfigurationError):
        duplicated.build("eastus")
