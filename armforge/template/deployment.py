"""Collects resource builders into a single linked deployment template."""
from typing import Dict, List, Optional, Union

from ..arm.models import ArmOutput, ArmParameter, ArmResource
from ..builders.base import ResourceBuilder
from ..errors import ConfigurationError
from .linker import link
from .models import Template

ResourceSource = Union[ResourceBuilder, ArmResource]


class ArmDeployment:
    """Fluent surface for one deployment: resources, parameters and outputs."""

    def __init__(self):
        self._location: Optional[str] = None
        self._sources: List[ResourceSource] = []
        self._parameters: List[ArmParameter] = []
        self._outputs: List[ArmOutput] = []

    def location(self, value: str) -> "ArmDeployment":
        """Default location for resources that do not set their own."""
        self._location = value
        return self

    def add_resource(self, resource: ResourceSource) -> "ArmDeployment":
        self._sources.append(resource)
        return self

    def add_resources(self, resources: List[ResourceSource]) -> "ArmDeployment":
        self._sources.extend(resources)
        return self

    def add_parameter(self, parameter: ArmParameter) -> "ArmDeployment":
        self._parameters.append(parameter)
        return self

    def add_output(self, name: str, value: str, type: str = "string") -> "ArmDeployment":
        self._outputs.append(ArmOutput(name=name, value=value, type=type))
        return self

    def _records(self) -> List[ArmResource]:
        records: List[ArmResource] = []
        for source in self._sources:
            if isinstance(source, ResourceBuilder):
                records.extend(source.build(self._location))
            else:
                records.append(source)
        return records

    def _collect_parameters(self, records: List[ArmResource]) -> List[ArmParameter]:
        collected: Dict[str, ArmParameter] = {}
        candidates = list(self._parameters)
        for record in records:
            candidates.extend(record.parameters())
        for parameter in candidates:
            existing = collected.get(parameter.name)
            if existing is not None and existing != parameter:
                raise ConfigurationError(
                    "deployment", f"parameters[{parameter.name}]", "declared twice with different definitions"
                )
            collected[parameter.name] = parameter
        return list(collected.values())

    def _collect_outputs(self) -> List[ArmOutput]:
        names = set()
        for output in self._outputs:
            if output.name in names:
                raise ConfigurationError("deployment", f"outputs[{output.name}]", "output declared twice")
            names.add(output.name)
        return list(self._outputs)

    def build(self) -> Template:
        """Evaluate every builder, then link the resulting records.

        Raises:
            ConfigurationError: If any builder or the deployment itself is misconfigured.
            ReferenceResolutionError: If a dependency cannot be matched to a declared resource.
        """
        records = self._records()
        parameters = self._collect_parameters(records)
        outputs = self._collect_outputs()
        return Template(
            resources=tuple(link(records)),
            parameters=tuple(parameters),
            outputs=tuple(outputs),
        )


def arm() -> ArmDeployment:
    return ArmDeployment()
