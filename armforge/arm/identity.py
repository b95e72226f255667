"""Resource names, types and identities used across ARM templates."""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple, Union

from ..errors import ConfigurationError


@dataclass(frozen=True)
class ResourceName:
    """A validated resource name segment.

    Names are compared by value and are never empty. A name cannot contain the
    ``/`` separator because qualified paths are joined with it.
    """
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise ConfigurationError("ResourceName", "value", "name cannot be empty")
        if self.value != self.value.strip():
            raise ConfigurationError(self.value, "name", "name cannot start or end with whitespace")
        if "/" in self.value:
            raise ConfigurationError(self.value, "name", "name cannot contain '/'")

    def __str__(self) -> str:
        return self.value


NameLike = Union[str, ResourceName]


def as_name(value: NameLike) -> ResourceName:
    """Coerce a plain string into a ResourceName."""
    return value if isinstance(value, ResourceName) else ResourceName(value)


def quote(value: str) -> str:
    """Quote a literal for use inside an ARM template expression."""
    return "'" + value.replace("'", "''") + "'"


def parameter_expression(name: str) -> str:
    """Indirection to a deployment parameter, resolved by ARM at deploy time."""
    return f"[parameters({quote(name)})]"


@dataclass(frozen=True)
class ResourceType:
    """An ARM resource type paired with the API version used to deploy it."""
    type: str
    api_version: str

    def resource_id(self, *names: NameLike) -> "ResourceId":
        """Build the identity of a resource of this type from its name path."""
        return ResourceId(self, tuple(as_name(n) for n in names))

    def __str__(self) -> str:
        return f"{self.type}@{self.api_version}"


@dataclass(frozen=True)
class ResourceId:
    """Identity of a resource: its type plus the qualified path of names."""
    resource_type: ResourceType
    path: Tuple[ResourceName, ...]

    def __post_init__(self):
        if not self.path:
            raise ConfigurationError(self.resource_type.type, "path", "resource path cannot be empty")

    @property
    def name(self) -> str:
        """Name as written in the resource's own ``name`` field."""
        return "/".join(segment.value for segment in self.path)

    @property
    def arm_expression(self) -> str:
        segments = ", ".join(quote(s.value) for s in self.path)
        return f"resourceId({quote(self.resource_type.type)}, {segments})"

    def eval(self) -> str:
        """Bracketed expression usable as a JSON string value."""
        return f"[{self.arm_expression}]"

    def __str__(self) -> str:
        return f"{self.resource_type.type}/{self.name}"


# Resource type registry. Values are fixed for the lifetime of the process.
VIRTUAL_NETWORKS = ResourceType("Microsoft.Network/virtualNetworks", "2023-04-01")
SUBNETS = ResourceType("Microsoft.Network/virtualNetworks/subnets", "2023-04-01")
VIRTUAL_MACHINE_SCALE_SETS = ResourceType("Microsoft.Compute/virtualMachineScaleSets", "2023-03-01")
DATABASE_ACCOUNTS = ResourceType("Microsoft.DocumentDb/databaseAccounts", "2021-04-15")
SQL_DATABASES = ResourceType("Microsoft.DocumentDb/databaseAccounts/sqlDatabases", "2021-04-15")
SQL_CONTAINERS = ResourceType("Microsoft.DocumentDb/databaseAccounts/sqlDatabases/containers", "2021-04-15")
MONGO_DATABASES = ResourceType("Microsoft.DocumentDb/databaseAccounts/mongodbDatabases", "2021-04-15")
MONGO_COLLECTIONS = ResourceType(
    "Microsoft.DocumentDb/databaseAccounts/mongodbDatabases/collections", "2021-04-15"
)
GREMLIN_DATABASES = ResourceType("Microsoft.DocumentDb/databaseAccounts/gremlinDatabases", "2022-05-15")
GREMLIN_GRAPHS = ResourceType("Microsoft.DocumentDb/databaseAccounts/gremlinDatabases/graphs", "2022-05-15")

RESOURCE_TYPES: Mapping[str, ResourceType] = MappingProxyType({
    rt.type: rt
    for rt in (
        VIRTUAL_NETWORKS,
        SUBNETS,
        VIRTUAL_MACHINE_SCALE_SETS,
        DATABASE_ACCOUNTS,
        SQL_DATABASES,
        SQL_CONTAINERS,
        MONGO_DATABASES,
        MONGO_COLLECTIONS,
        GREMLIN_DATABASES,
        GREMLIN_GRAPHS,
    )
})
