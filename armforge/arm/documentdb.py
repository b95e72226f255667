"""Cosmos DB accounts, databases and containers."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .identity import (
    DATABASE_ACCOUNTS,
    GREMLIN_DATABASES,
    GREMLIN_GRAPHS,
    MONGO_COLLECTIONS,
    MONGO_DATABASES,
    SQL_CONTAINERS,
    SQL_DATABASES,
    ResourceId,
    ResourceName,
    ResourceType,
)
from .models import ArmResource, Reference, resource_header


class DatabaseKind(Enum):
    DOCUMENT = "Document"
    MONGO = "Mongo"
    GREMLIN = "Gremlin"


class IndexKind(Enum):
    HASH = "Hash"
    RANGE = "Range"


class IndexDataType(Enum):
    NUMBER = "Number"
    STRING = "String"


class ConsistencyLevel(Enum):
    SESSION = "Session"
    EVENTUAL = "Eventual"
    CONSISTENT_PREFIX = "ConsistentPrefix"
    STRONG = "Strong"
    BOUNDED_STALENESS = "BoundedStaleness"


@dataclass(frozen=True)
class ConsistencyPolicy:
    """Default consistency level of an account.

    Staleness bounds are carried only by the bounded staleness level.
    """
    level: ConsistencyLevel
    max_staleness_prefix: Optional[int] = None
    max_interval_in_seconds: Optional[int] = None

    def __post_init__(self):
        bounded = self.level is ConsistencyLevel.BOUNDED_STALENESS
        has_bounds = self.max_staleness_prefix is not None and self.max_interval_in_seconds is not None
        no_bounds = self.max_staleness_prefix is None and self.max_interval_in_seconds is None
        if bounded and not has_bounds:
            raise ValueError("BoundedStaleness requires both a staleness prefix and an interval")
        if not bounded and not no_bounds:
            raise ValueError(f"{self.level.value} consistency does not take staleness bounds")

    @classmethod
    def session(cls) -> "ConsistencyPolicy":
        return cls(ConsistencyLevel.SESSION)

    @classmethod
    def eventual(cls) -> "ConsistencyPolicy":
        return cls(ConsistencyLevel.EVENTUAL)

    @classmethod
    def consistent_prefix(cls) -> "ConsistencyPolicy":
        return cls(ConsistencyLevel.CONSISTENT_PREFIX)

    @classmethod
    def strong(cls) -> "ConsistencyPolicy":
        return cls(ConsistencyLevel.STRONG)

    @classmethod
    def bounded_staleness(cls, max_staleness_prefix: int, max_interval_in_seconds: int) -> "ConsistencyPolicy":
        return cls(ConsistencyLevel.BOUNDED_STALENESS, max_staleness_prefix, max_interval_in_seconds)

    def to_json(self) -> Dict[str, Any]:
        return {
            "defaultConsistencyLevel": self.level.value,
            "maxStalenessPrefix": self.max_staleness_prefix,
            "maxIntervalInSeconds": self.max_interval_in_seconds,
        }


class FailoverMode(Enum):
    NO_FAILOVER = "NoFailover"
    AUTO_FAILOVER = "AutoFailover"
    MULTI_MASTER = "MultiMaster"


@dataclass(frozen=True)
class FailoverPolicy:
    """Secondary region behaviour of an account."""
    mode: FailoverMode
    secondary_region: Optional[str] = None

    def __post_init__(self):
        if self.mode is FailoverMode.NO_FAILOVER and self.secondary_region is not None:
            raise ValueError("NoFailover does not take a secondary region")
        if self.mode is not FailoverMode.NO_FAILOVER and not self.secondary_region:
            raise ValueError(f"{self.mode.value} requires a secondary region")

    @classmethod
    def no_failover(cls) -> "FailoverPolicy":
        return cls(FailoverMode.NO_FAILOVER)

    @classmethod
    def auto_failover(cls, secondary_region: str) -> "FailoverPolicy":
        return cls(FailoverMode.AUTO_FAILOVER, secondary_region)

    @classmethod
    def multi_master(cls, secondary_region: str) -> "FailoverPolicy":
        return cls(FailoverMode.MULTI_MASTER, secondary_region)


@dataclass(frozen=True)
class Throughput:
    """Provisioned request units, or ``None`` units for serverless billing."""
    units: Optional[int] = None

    @classmethod
    def provisioned(cls, units: int) -> "Throughput":
        return cls(units)

    @classmethod
    def serverless(cls) -> "Throughput":
        return cls(None)

    @property
    def is_serverless(self) -> bool:
        return self.units is None


def database_type(kind: DatabaseKind) -> ResourceType:
    if kind is DatabaseKind.DOCUMENT:
        return SQL_DATABASES
    if kind is DatabaseKind.MONGO:
        return MONGO_DATABASES
    if kind is DatabaseKind.GREMLIN:
        return GREMLIN_DATABASES
    raise ValueError(f"Unsupported database kind: {kind}")


def container_type(kind: DatabaseKind) -> ResourceType:
    if kind is DatabaseKind.DOCUMENT:
        return SQL_CONTAINERS
    if kind is DatabaseKind.MONGO:
        return MONGO_COLLECTIONS
    if kind is DatabaseKind.GREMLIN:
        return GREMLIN_GRAPHS
    raise ValueError(f"Unsupported database kind: {kind}")


def account_kind(kind: DatabaseKind) -> str:
    if kind is DatabaseKind.MONGO:
        return "MongoDB"
    if kind in (DatabaseKind.DOCUMENT, DatabaseKind.GREMLIN):
        return "GlobalDocumentDB"
    raise ValueError(f"Unsupported database kind: {kind}")


@dataclass(frozen=True)
class DatabaseAccount(ArmResource):
    name: ResourceName
    location: str
    consistency_policy: ConsistencyPolicy = field(default_factory=ConsistencyPolicy.session)
    failover_policy: FailoverPolicy = field(default_factory=FailoverPolicy.no_failover)
    public_network_access: bool = True
    free_tier: bool = False
    serverless: bool = False
    kind: DatabaseKind = DatabaseKind.DOCUMENT
    tags: Dict[str, str] = field(default_factory=dict)
    depends_on: Tuple[Reference, ...] = ()

    @property
    def resource_id(self) -> ResourceId:
        return DATABASE_ACCOUNTS.resource_id(self.name)

    @property
    def enable_automatic_failover(self) -> Optional[bool]:
        return True if self.failover_policy.mode is FailoverMode.AUTO_FAILOVER else None

    @property
    def enable_multiple_write_locations(self) -> Optional[bool]:
        return True if self.failover_policy.mode is FailoverMode.MULTI_MASTER else None

    @property
    def failover_locations(self) -> List[Dict[str, Any]]:
        mode = self.failover_policy.mode
        if mode is FailoverMode.NO_FAILOVER:
            return []
        if mode in (FailoverMode.AUTO_FAILOVER, FailoverMode.MULTI_MASTER):
            return [
                {"locationName": self.location, "failoverPriority": 0},
                {"locationName": self.failover_policy.secondary_region, "failoverPriority": 1},
            ]
        raise ValueError(f"Unsupported failover mode: {mode}")

    @property
    def _requires_locations(self) -> bool:
        return self.serverless or self.kind is DatabaseKind.GREMLIN

    def locations(self) -> Optional[List[Dict[str, Any]]]:
        failover = self.failover_locations
        if failover:
            return failover
        # Gremlin and serverless accounts fail to provision without an explicit location list.
        if self._requires_locations:
            return [{"locationName": self.location}]
        return None

    def capabilities(self) -> Optional[List[Dict[str, str]]]:
        if not self._requires_locations:
            return None
        capabilities = []
        if self.serverless:
            capabilities.append({"name": "EnableServerless"})
        if self.kind is DatabaseKind.GREMLIN:
            capabilities.append({"name": "EnableGremlin"})
        return capabilities

    def references(self) -> List[Reference]:
        return list(self.depends_on)

    def json_model(self) -> Dict[str, Any]:
        return {
            **resource_header(self.resource_id, self.location, self.tags),
            "kind": account_kind(self.kind),
            "properties": {
                "consistencyPolicy": self.consistency_policy.to_json(),
                "databaseAccountOfferType": "Standard",
                "enableAutomaticFailover": self.enable_automatic_failover,
                "enableMultipleWriteLocations": self.enable_multiple_write_locations,
                "locations": self.locations(),
                "publicNetworkAccess": "Enabled" if self.public_network_access else "Disabled",
                "enableFreeTier": self.free_tier,
                "capabilities": self.capabilities(),
            },
        }


@dataclass(frozen=True)
class SqlDatabase(ArmResource):
    """A database inside an account; the resource type follows the account kind."""
    name: ResourceName
    account: ResourceName
    throughput: Throughput
    kind: DatabaseKind = DatabaseKind.DOCUMENT

    @property
    def resource_id(self) -> ResourceId:
        return database_type(self.kind).resource_id(self.account, self.name)

    def references(self) -> List[Reference]:
        return [DATABASE_ACCOUNTS.resource_id(self.account)]

    def json_model(self) -> Dict[str, Any]:
        return {
            **resource_header(self.resource_id),
            "properties": {
                "resource": {"id": self.name.value},
                "options": {
                    "throughput": None if self.throughput.is_serverless else str(self.throughput.units)
                },
            },
        }


@dataclass(frozen=True)
class PartitionKey:
    paths: Tuple[str, ...]
    kind: IndexKind = IndexKind.HASH


@dataclass(frozen=True)
class IncludedPath:
    path: str
    indexes: Tuple[Tuple[IndexDataType, IndexKind], ...] = ()

    def to_json(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "indexes": [
                {"kind": kind.value, "dataType": data_type.value.lower(), "precision": -1}
                for data_type, kind in self.indexes
            ],
        }


@dataclass(frozen=True)
class Container(ArmResource):
    """A container, graph or collection, depending on the account kind."""
    name: ResourceName
    account: ResourceName
    database: ResourceName
    partition_key: PartitionKey
    kind: DatabaseKind = DatabaseKind.DOCUMENT
    unique_keys: Tuple[Tuple[str, ...], ...] = ()
    included_paths: Tuple[IncludedPath, ...] = ()
    excluded_paths: Tuple[str, ...] = ()

    @property
    def resource_id(self) -> ResourceId:
        return container_type(self.kind).resource_id(self.account, self.database, self.name)

    def references(self) -> List[Reference]:
        return [database_type(self.kind).resource_id(self.account, self.database)]

    def _sql_resource(self) -> Dict[str, Any]:
        return {
            "id": self.name.value,
            "partitionKey": {
                "paths": list(self.partition_key.paths),
                "kind": self.partition_key.kind.value,
            },
            "uniqueKeyPolicy": {
                "uniqueKeys": [{"paths": list(paths)} for paths in self.unique_keys]
            },
            "indexingPolicy": {
                "indexingMode": "consistent",
                "includedPaths": [path.to_json() for path in self.included_paths],
                "excludedPaths": [{"path": path} for path in self.excluded_paths],
            },
        }

    def _mongo_resource(self) -> Dict[str, Any]:
        indexes = [{"key": {"keys": ["_id"]}}]
        indexes.extend(
            {"key": {"keys": [p.lstrip("/") for p in paths]}, "options": {"unique": True}}
            for paths in self.unique_keys
        )
        return {
            "id": self.name.value,
            "shardKey": {p.lstrip("/"): self.partition_key.kind.value for p in self.partition_key.paths},
            "indexes": indexes,
        }

    def json_model(self) -> Dict[str, Any]:
        if self.kind in (DatabaseKind.DOCUMENT, DatabaseKind.GREMLIN):
            resource = self._sql_resource()
        elif self.kind is DatabaseKind.MONGO:
            resource = self._mongo_resource()
        else:
            raise ValueError(f"Unsupported database kind: {self.kind}")
        return {
            **resource_header(self.resource_id),
            "properties": {"resource": resource},
        }
