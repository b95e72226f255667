"""Virtual network resources."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from .identity import SUBNETS, VIRTUAL_NETWORKS, ResourceId, ResourceName
from .models import ArmResource, Reference, resource_header


@dataclass(frozen=True)
class Subnet:
    name: ResourceName
    prefix: str

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name.value,
            "properties": {"addressPrefix": self.prefix},
        }


@dataclass(frozen=True)
class VirtualNetwork(ArmResource):
    """A virtual network with its subnets declared inline."""
    name: ResourceName
    location: str
    address_spaces: Tuple[str, ...]
    subnets: Tuple[Subnet, ...] = ()
    tags: Dict[str, str] = field(default_factory=dict)
    depends_on: Tuple[Reference, ...] = ()

    @property
    def resource_id(self) -> ResourceId:
        return VIRTUAL_NETWORKS.resource_id(self.name)

    def subnet_id(self, subnet: ResourceName) -> ResourceId:
        return SUBNETS.resource_id(self.name, subnet)

    def inline_children(self) -> List[ResourceId]:
        return [self.subnet_id(subnet.name) for subnet in self.subnets]

    def references(self) -> List[Reference]:
        return list(self.depends_on)

    def json_model(self) -> Dict[str, Any]:
        return {
            **resource_header(self.resource_id, self.location, self.tags),
            "properties": {
                "addressSpace": {"addressPrefixes": list(self.address_spaces)},
                "subnets": [subnet.to_json() for subnet in self.subnets],
            },
        }
