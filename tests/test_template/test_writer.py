"""Tests for the template writer."""
import json

from armforge.arm.identity import ResourceName
from armforge.arm.models import ArmOutput, ArmParameter
from armforge.arm.network import VirtualNetwork
from armforge.template import writer
from armforge.template.models import LinkedResource, Template


def sample_template():
    vnet = VirtualNetwork(
        name=ResourceName("net"),
        location="eastus",
        address_spaces=("10.0.0.0/16",),
    )
    return Template(
        resources=(LinkedResource(vnet),),
        parameters=(ArmParameter.secure("secret"), ArmParameter("size", "int", 3)),
        outputs=(ArmOutput("netId", "[resourceId('Microsoft.Network/virtualNetworks', 'net')]"),),
    )


def test_document_skeleton():
    """Test the top-level layout of the document."""
    doc = writer.to_dict(sample_template())
    assert doc["$schema"] == writer.SCHEMA
    assert doc["contentVersion"] == "1.0.0.0"
    assert list(doc) == ["$schema", "contentVersion", "parameters", "variables", "resources", "outputs"]
    assert doc["outputs"]["netId"]["type"] == "string"


def test_parameters():
    """Test that parameters emit their type and only a default when one is set."""
    doc = writer.to_dict(sample_template())
    assert doc["parameters"]["secret"] == {"type": "securestring"}
    assert doc["parameters"]["size"] == {"type": "int", "defaultValue": 3}


def test_unset_fields_are_absent():
    """Test that None values are dropped and dependsOn is always present."""
    resource = writer.to_dict(sample_template())["resources"][0]
    assert "tags" not in resource
    assert resource["dependsOn"] == []
    assert resource["location"] == "eastus"
    assert resource["apiVersion"] == "2023-04-01"


def test_output_is_deterministic():
    """Test that writing the same template twice gives identical text."""
    template = sample_template()
    first = writer.to_json(template)
    assert first == writer.to_json(template)
    assert first == writer.to_json(sample_template())
    assert json.loads(first) == writer.to_dict(template)
