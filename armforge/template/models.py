"""Data models for a linked deployment template."""
from dataclasses import dataclass
from typing import Tuple

from ..arm.models import ArmOutput, ArmParameter, ArmResource


@dataclass(frozen=True)
class LinkedResource:
    """A resource record paired with its resolved ``dependsOn`` expressions."""
    resource: ArmResource
    depends_on: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Template:
    """Everything the writer needs to produce one deployment document."""
    resources: Tuple[LinkedResource, ...]
    parameters: Tuple[ArmParameter, ...] = ()
    outputs: Tuple[ArmOutput, ...] = ()

    def find(self, name: str) -> Tuple[LinkedResource, ...]:
        """Resources whose ARM name matches ``name``."""
        return tuple(r for r in self.resources if r.resource.resource_id.name == name)
