"""Virtual network builder."""
import ipaddress
from typing import List, Optional

from ..arm.identity import ResourceName
from ..arm.models import ArmResource
from ..arm.network import Subnet, VirtualNetwork
from ..errors import ConfigurationError
from .base import ResourceBuilder


class SubnetBuilder:
    """Builds a subnet declared inline in a virtual network."""

    def __init__(self):
        self._name: Optional[str] = None
        self._prefix: Optional[str] = None

    def name(self, value: str) -> "SubnetBuilder":
        self._name = value
        return self

    def prefix(self, value: str) -> "SubnetBuilder":
        self._prefix = value
        return self

    def build(self, owner: str) -> Subnet:
        if not self._name:
            raise ConfigurationError(owner, "subnets.name", "a subnet must have a name")
        if not self._prefix:
            raise ConfigurationError(owner, f"subnets[{self._name}].prefix", "an address prefix is required")
        _check_cidr(owner, f"subnets[{self._name}].prefix", self._prefix)
        return Subnet(ResourceName(self._name), self._prefix)


class VirtualNetworkBuilder(ResourceBuilder):
    """Builds a virtual network and its subnets."""

    resource_kind = "virtual network"

    def __init__(self):
        super().__init__()
        self._address_spaces: List[str] = []
        self._subnets: List[SubnetBuilder] = []

    def add_address_spaces(self, prefixes: List[str]) -> "VirtualNetworkBuilder":
        self._address_spaces.extend(prefixes)
        return self

    def add_subnets(self, subnets: List[SubnetBuilder]) -> "VirtualNetworkBuilder":
        self._subnets.extend(subnets)
        return self

    def build(self, location: Optional[str] = None) -> List[ArmResource]:
        name = self._require_name()
        if not self._address_spaces:
            raise ConfigurationError(name.value, "address_spaces", "at least one address space is required")
        for prefix in self._address_spaces:
            _check_cidr(name.value, "address_spaces", prefix)

        subnets = [subnet.build(name.value) for subnet in self._subnets]
        seen = set()
        for subnet in subnets:
            if subnet.name in seen:
                raise ConfigurationError(name.value, "subnets", f"duplicate subnet '{subnet.name}'")
            seen.add(subnet.name)

        return [
            VirtualNetwork(
                name=name,
                location=self._resolve_location(location),
                address_spaces=tuple(self._address_spaces),
                subnets=tuple(subnets),
                tags=dict(self._tags),
                depends_on=self._explicit_dependencies(),
            )
        ]


def _check_cidr(owner: str, field: str, prefix: str) -> None:
    try:
        ipaddress.ip_network(prefix, strict=False)
    except ValueError as e:
        raise ConfigurationError(owner, field, f"'{prefix}' is not a valid CIDR block") from e


def vnet() -> VirtualNetworkBuilder:
    return VirtualNetworkBuilder()


def subnet() -> SubnetBuilder:
    return SubnetBuilder()
