"""Exceptions raised while building and linking ARM templates."""
from typing import Optional


class ArmForgeError(Exception):
    """Base class for all template compilation errors."""


class ConfigurationError(ArmForgeError, ValueError):
    """Invalid builder configuration, raised before any template is produced."""

    def __init__(self, resource: str, field: str, reason: str):
        self.resource = resource
        self.field = field
        self.reason = reason
        super().__init__(f"{resource}: {field}: {reason}")


class ReferenceResolutionError(ArmForgeError, LookupError):
    """A resource references something that is not declared in the template."""

    def __init__(self, resource: str, reference: str, reason: Optional[str] = None):
        self.resource = resource
        self.reference = reference
        message = f"{resource}: cannot resolve reference to '{reference}'"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
