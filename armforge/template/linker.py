"""Resolves cross-resource references into ``dependsOn`` arrays."""
from collections import defaultdict
from typing import Dict, List, Sequence, Set

from ..arm.identity import ResourceId
from ..arm.models import ArmResource, Reference
from ..errors import ConfigurationError, ReferenceResolutionError
from .models import LinkedResource


def _index(resources: Sequence[ArmResource]):
    by_id: Dict[ResourceId, ArmResource] = {}
    by_name: Dict[str, List[ResourceId]] = defaultdict(list)
    children: Set[ResourceId] = set()
    for resource in resources:
        resource_id = resource.resource_id
        if resource_id in by_id:
            raise ConfigurationError(str(resource_id), "name", "resource is declared more than once")
        by_id[resource_id] = resource
        by_name[resource_id.name].append(resource_id)
        children.update(resource.inline_children())
    return by_id, by_name, children


def _resolve(
    owner: ResourceId,
    reference: Reference,
    by_id: Dict[ResourceId, ArmResource],
    by_name: Dict[str, List[ResourceId]],
) -> ResourceId:
    if isinstance(reference, ResourceId):
        if reference not in by_id:
            raise ReferenceResolutionError(str(owner), str(reference), "not declared in this template")
        target = reference
    else:
        candidates = by_name.get(reference, [])
        if not candidates:
            raise ReferenceResolutionError(str(owner), reference, "no resource with this name")
        if len(candidates) > 1:
            kinds = ", ".join(c.resource_type.type for c in candidates)
            raise ReferenceResolutionError(str(owner), reference, f"ambiguous between {kinds}")
        target = candidates[0]
    if target == owner:
        raise ReferenceResolutionError(str(owner), str(reference), "a resource cannot depend on itself")
    return target


def link(resources: Sequence[ArmResource]) -> List[LinkedResource]:
    """Compute ``dependsOn`` for every resource in a template.

    Args:
        resources: All records of the template, in output order.

    Returns:
        List[LinkedResource]: The same records, in the same order, with their
        dependencies as ``[resourceId(...)]`` expressions, without duplicates.

    Raises:
        ConfigurationError: If two records share the same identity.
        ReferenceResolutionError: If a reference matches no declared resource,
            or a name matches more than one, or an inline child such as a subnet
            is missing from its parent.
    """
    by_id, by_name, children = _index(resources)
    linked = []
    for resource in resources:
        depends_on: List[str] = []
        for reference in resource.references():
            expression = _resolve(resource.resource_id, reference, by_id, by_name).eval()
            if expression not in depends_on:
                depends_on.append(expression)
        for child in resource.child_references():
            if child not in children:
                raise ReferenceResolutionError(
                    str(resource.resource_id), str(child), "not declared by its parent resource"
                )
        linked.append(LinkedResource(resource, tuple(depends_on)))
    return linked
