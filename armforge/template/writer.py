"""Serializes a linked template into an ARM deployment document."""
import json
from typing import Any, Dict

from .models import LinkedResource, Template

SCHEMA = "https://schema.management.azure.com/schemas/2019-04-01/deploymentTemplate.json#"
CONTENT_VERSION = "1.0.0.0"


def _prune(value: Any) -> Any:
    """Drop ``None`` entries from objects so unset fields are absent."""
    if isinstance(value, dict):
        return {k: _prune(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_prune(v) for v in value]
    return value


def _resource_entry(linked: LinkedResource) -> Dict[str, Any]:
    return {**linked.resource.json_model(), "dependsOn": list(linked.depends_on)}


def to_dict(template: Template) -> Dict[str, Any]:
    """Project a template into the ARM document structure."""
    return _prune({
        "$schema": SCHEMA,
        "contentVersion": CONTENT_VERSION,
        "parameters": {p.name: p.to_json() for p in template.parameters},
        "variables": {},
        "resources": [_resource_entry(r) for r in template.resources],
        "outputs": {o.name: o.to_json() for o in template.outputs},
    })


def to_json(template: Template) -> str:
    """Render a template as indented JSON text."""
    return json.dumps(to_dict(template), indent=2)
