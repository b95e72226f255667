"""Common surface of resource builders."""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from ..arm.identity import ResourceName
from ..arm.models import ArmResource, Reference
from ..errors import ConfigurationError


class ResourceBuilder(ABC):
    """Accumulates configuration for one resource through chained setters.

    ``build`` validates the accumulated state and returns the primary record
    together with any auxiliary records it implies. It never mutates the
    builder, so a builder can be evaluated more than once.
    """

    resource_kind = "resource"

    def __init__(self):
        self._name: Optional[str] = None
        self._location: Optional[str] = None
        self._tags: Dict[str, str] = {}
        self._depends_on: List[Reference] = []

    def name(self, value: str) -> "ResourceBuilder":
        self._name = value
        return self

    def location(self, value: str) -> "ResourceBuilder":
        self._location = value
        return self

    def add_tags(self, tags: Dict[str, str]) -> "ResourceBuilder":
        self._tags.update(tags)
        return self

    def add_tag(self, key: str, value: str) -> "ResourceBuilder":
        self._tags[key] = value
        return self

    def depends_on(self, *references: Reference) -> "ResourceBuilder":
        """Add explicit dependencies, by resource name or by resource identity."""
        self._depends_on.extend(references)
        return self

    @property
    def label(self) -> str:
        """Identifies the resource in error messages, even before it is named."""
        return self._name or f"<unnamed {self.resource_kind}>"

    def _require_name(self) -> ResourceName:
        if not self._name:
            raise ConfigurationError(self.label, "name", f"a {self.resource_kind} must have a name")
        return ResourceName(self._name)

    def _resolve_location(self, default_location: Optional[str]) -> str:
        location = self._location or default_location
        if not location:
            raise ConfigurationError(
                self.label, "location", "no location set on the resource or the deployment"
            )
        return location

    def _explicit_dependencies(self) -> Tuple[Reference, ...]:
        return tuple(self._depends_on)

    @abstractmethod
    def build(self, location: Optional[str] = None) -> List[ArmResource]:
        """Evaluate the builder into the primary record plus any auxiliary records."""
