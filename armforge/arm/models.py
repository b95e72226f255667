"""Shared data models for ARM template generation."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from .identity import ResourceId, parameter_expression

# A cross-reference from one resource to another: either a constructed
# identity or a plain name that the linker resolves against the template.
Reference = Union[ResourceId, str]

PARAMETER_TYPES = ("string", "securestring", "int", "bool", "object", "array")


@dataclass(frozen=True)
class ArmParameter:
    """ARM template parameter definition."""
    name: str
    type: str = "string"
    default_value: Optional[Union[str, int, bool, Dict, List]] = None

    def __post_init__(self):
        if self.type not in PARAMETER_TYPES:
            raise ValueError(f"Unsupported parameter type '{self.type}' for parameter '{self.name}'")

    @classmethod
    def secure(cls, name: str) -> "ArmParameter":
        return cls(name=name, type="securestring")

    @property
    def reference(self) -> str:
        """Expression that reads this parameter inside the template."""
        return parameter_expression(self.name)

    def to_json(self) -> Dict[str, Any]:
        return {"type": self.type, "defaultValue": self.default_value}


@dataclass(frozen=True)
class ArmOutput:
    """ARM template output definition."""
    name: str
    value: str
    type: str = "string"

    def to_json(self) -> Dict[str, Any]:
        return {"type": self.type, "value": self.value}


def resource_header(
    resource_id: ResourceId,
    location: Optional[str] = None,
    tags: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Common top-level fields shared by every resource entry."""
    return {
        "type": resource_id.resource_type.type,
        "apiVersion": resource_id.resource_type.api_version,
        "name": resource_id.name,
        "location": location,
        "tags": dict(tags) if tags else None,
    }


class ArmResource(ABC):
    """A single resource in a template.

    Records are immutable values produced by builders. ``json_model`` returns the
    resource entry without ``dependsOn``; the dependency linker computes that from
    ``references``.
    """

    @property
    @abstractmethod
    def resource_id(self) -> ResourceId:
        """Identity of this resource."""

    @abstractmethod
    def json_model(self) -> Dict[str, Any]:
        """JSON projection of this resource, excluding ``dependsOn``."""

    def references(self) -> List[Reference]:
        """Resources that must be deployed before this one."""
        return []

    def parameters(self) -> List[ArmParameter]:
        """Deployment parameters this resource reads."""
        return []

    def inline_children(self) -> List[ResourceId]:
        """Child resources declared inside this record, such as subnets."""
        return []

    def child_references(self) -> List[ResourceId]:
        """Inline children of other records in the same template that this resource points at."""
        return []
