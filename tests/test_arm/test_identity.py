"""Tests for resource names and identities."""
import pytest

from armforge.arm.identity import (
    RESOURCE_TYPES,
    SQL_CONTAINERS,
    SUBNETS,
    VIRTUAL_NETWORKS,
    ResourceName,
    ResourceType,
    parameter_expression,
)
from armforge.errors import ConfigurationError


@pytest.mark.parametrize("value", ["", "   ", " padded", "a/b"])
def test_invalid_names_are_rejected(value):
    """Test that malformed names fail at construction."""
    with pytest.raises(ConfigurationError):
        ResourceName(value)


def test_resource_id_expression():
    """Test the resourceId expression of a top-level resource."""
    resource_id = VIRTUAL_NETWORKS.resource_id("my-net")
    assert resource_id.name == "my-net"
    assert resource_id.eval() == "[resourceId('Microsoft.Network/virtualNetworks', 'my-net')]"


def test_nested_resource_id():
    """Test that nested identities join their path for the name and list it in the expression."""
    resource_id = SQL_CONTAINERS.resource_id("acct", "db", "items")
    assert resource_id.name == "acct/db/items"
    assert resource_id.arm_expression == (
        "resourceId('Microsoft.DocumentDb/databaseAccounts/sqlDatabases/containers', 'acct', 'db', 'items')"
    )


def test_identity_equality():
    """Test that identities compare type, API version and path."""
    assert SUBNETS.resource_id("net", "sub") == SUBNETS.resource_id(ResourceName("net"), "sub")
    assert SUBNETS.resource_id("net", "sub") != SUBNETS.resource_id("net", "other")
    newer = ResourceType(VIRTUAL_NETWORKS.type, "2099-01-01")
    assert newer.resource_id("net") != VIRTUAL_NETWORKS.resource_id("net")


def test_quotes_are_escaped():
    """Test that single quotes in names are doubled inside expressions."""
    assert parameter_expression("it's") == "[parameters('it''s')]"


def test_registry_is_read_only():
    """Test that the resource type registry cannot be modified."""
    assert RESOURCE_TYPES["Microsoft.Network/virtualNetworks"] is VIRTUAL_NETWORKS
    with pytest.raises(TypeError):
        RESOURCE_TYPES["Custom/type"] = VIRTUAL_NETWORKS
