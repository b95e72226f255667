"""Cosmos DB account, database and container builders."""
import re
from typing import List, Optional, Sequence, Tuple

from ..arm.documentdb import (
    ConsistencyLevel,
    ConsistencyPolicy,
    Container,
    DatabaseAccount,
    DatabaseKind,
    FailoverMode,
    FailoverPolicy,
    IncludedPath,
    IndexDataType,
    IndexKind,
    PartitionKey,
    SqlDatabase,
    Throughput,
)
from ..arm.identity import DATABASE_ACCOUNTS, ResourceId, ResourceName
from ..arm.models import ArmResource
from ..errors import ConfigurationError
from .base import ResourceBuilder

ACCOUNT_NAME_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{1,42})[a-z0-9]$")

MIN_THROUGHPUT = 400
MAX_STALENESS_PREFIX = 2147483647
MIN_STALENESS_INTERVAL = 5
MAX_STALENESS_INTERVAL = 86400


class CosmosContainerBuilder:
    """Builds a container (or graph/collection, depending on the account kind)."""

    def __init__(self):
        self._name: Optional[str] = None
        self._partition_key: Optional[PartitionKey] = None
        self._included_paths: List[IncludedPath] = []
        self._excluded_paths: List[str] = []
        self._unique_keys: List[Tuple[str, ...]] = []

    def name(self, value: str) -> "CosmosContainerBuilder":
        self._name = value
        return self

    def partition_key(self, paths: Sequence[str], kind: IndexKind = IndexKind.HASH) -> "CosmosContainerBuilder":
        self._partition_key = PartitionKey(tuple(paths), kind)
        return self

    def add_index(
        self, path: str, indexes: Sequence[Tuple[IndexDataType, IndexKind]]
    ) -> "CosmosContainerBuilder":
        self._included_paths.append(IncludedPath(path, tuple(indexes)))
        return self

    def exclude_path(self, path: str) -> "CosmosContainerBuilder":
        self._excluded_paths.append(path)
        return self

    def add_unique_key(self, paths: Sequence[str]) -> "CosmosContainerBuilder":
        self._unique_keys.append(tuple(paths))
        return self

    def build(self, account: ResourceName, database: ResourceName, kind: DatabaseKind) -> Container:
        owner = f"{account.value}/{database.value}"
        if not self._name:
            raise ConfigurationError(owner, "containers.name", "a container must have a name")
        field = f"containers[{self._name}]"
        if self._partition_key is None or not self._partition_key.paths:
            raise ConfigurationError(owner, f"{field}.partition_key", "a partition key is required")
        for path in self._partition_key.paths:
            if not path.startswith("/"):
                raise ConfigurationError(owner, f"{field}.partition_key", f"path '{path}' must start with '/'")
        if kind is DatabaseKind.MONGO and len(self._partition_key.paths) != 1:
            raise ConfigurationError(owner, f"{field}.partition_key", "Mongo collections take a single shard key")
        for paths in self._unique_keys:
            if not paths:
                raise ConfigurationError(owner, f"{field}.unique_keys", "a unique key needs at least one path")
        for path in [p.path for p in self._included_paths] + self._excluded_paths:
            if not path.startswith("/"):
                raise ConfigurationError(owner, f"{field}.indexing_policy", f"path '{path}' must start with '/'")

        return Container(
            name=ResourceName(self._name),
            account=account,
            database=database,
            partition_key=self._partition_key,
            kind=kind,
            # Unique keys form a set; sorting keeps the output stable.
            unique_keys=tuple(sorted(set(self._unique_keys))),
            included_paths=tuple(self._included_paths),
            excluded_paths=tuple(self._excluded_paths),
        )


class CosmosDbBuilder(ResourceBuilder):
    """Builds a Cosmos DB account with a single database and its containers.

    ``name`` is the database name; the account defaults to ``<name>-account``.
    """

    resource_kind = "cosmos db"

    def __init__(self):
        super().__init__()
        self._account_name: Optional[str] = None
        self._consistency_policy = ConsistencyPolicy.session()
        self._failover_policy = FailoverPolicy.no_failover()
        self._public_network_access = True
        self._free_tier = False
        self._serverless = False
        self._throughput: Optional[int] = None
        self._kind = DatabaseKind.DOCUMENT
        self._containers: List[CosmosContainerBuilder] = []

    def account_name(self, value: str) -> "CosmosDbBuilder":
        self._account_name = value
        return self

    def consistency_policy(self, policy: ConsistencyPolicy) -> "CosmosDbBuilder":
        self._consistency_policy = policy
        return self

    def failover_policy(self, policy: FailoverPolicy) -> "CosmosDbBuilder":
        self._failover_policy = policy
        return self

    def public_network_access(self, enabled: bool) -> "CosmosDbBuilder":
        self._public_network_access = enabled
        return self

    def free_tier(self, enabled: bool = True) -> "CosmosDbBuilder":
        self._free_tier = enabled
        return self

    def serverless(self, enabled: bool = True) -> "CosmosDbBuilder":
        self._serverless = enabled
        return self

    def throughput(self, units: int) -> "CosmosDbBuilder":
        self._throughput = units
        return self

    def kind(self, kind: DatabaseKind) -> "CosmosDbBuilder":
        self._kind = kind
        return self

    def add_containers(self, containers: List[CosmosContainerBuilder]) -> "CosmosDbBuilder":
        self._containers.extend(containers)
        return self

    def _resolve_throughput(self, owner: str) -> Throughput:
        if self._serverless:
            if self._throughput is not None:
                raise ConfigurationError(
                    owner, "throughput", "provisioned throughput cannot be set on a serverless account"
                )
            return Throughput.serverless()
        units = MIN_THROUGHPUT if self._throughput is None else self._throughput
        if units < MIN_THROUGHPUT or units % 100:
            raise ConfigurationError(
                owner, "throughput", f"throughput must be a multiple of 100 and at least {MIN_THROUGHPUT}, got {units}"
            )
        return Throughput.provisioned(units)

    def _validate_account(self, owner: str, location: str) -> None:
        if not ACCOUNT_NAME_PATTERN.match(owner):
            raise ConfigurationError(
                owner, "account_name", "must be 3-44 lowercase letters, digits or hyphens, not starting or ending with '-'"
            )
        if self._serverless and self._free_tier:
            raise ConfigurationError(owner, "free_tier", "free tier is not available for serverless accounts")
        policy = self._consistency_policy
        if policy.level is ConsistencyLevel.BOUNDED_STALENESS:
            if not 1 <= policy.max_staleness_prefix <= MAX_STALENESS_PREFIX:
                raise ConfigurationError(
                    owner, "consistency_policy", f"staleness prefix must be 1-{MAX_STALENESS_PREFIX}"
                )
            if not MIN_STALENESS_INTERVAL <= policy.max_interval_in_seconds <= MAX_STALENESS_INTERVAL:
                raise ConfigurationError(
                    owner,
                    "consistency_policy",
                    f"staleness interval must be {MIN_STALENESS_INTERVAL}-{MAX_STALENESS_INTERVAL} seconds",
                )
        failover = self._failover_policy
        if failover.mode is not FailoverMode.NO_FAILOVER and failover.secondary_region == location:
            raise ConfigurationError(owner, "failover_policy", "secondary region must differ from the primary")

    def _account(self, database: ResourceName) -> ResourceName:
        return ResourceName(self._account_name or f"{database.value}-account")

    def account_id(self) -> ResourceId:
        """Identity of the account resource this builder emits."""
        return DATABASE_ACCOUNTS.resource_id(self._account(self._require_name()))

    def build(self, location: Optional[str] = None) -> List[ArmResource]:
        database = self._require_name()
        account = self._account(database)
        location = self._resolve_location(location)
        self._validate_account(account.value, location)
        throughput = self._resolve_throughput(account.value)

        containers = [c.build(account, database, self._kind) for c in self._containers]
        seen = set()
        for container in containers:
            if container.name in seen:
                raise ConfigurationError(account.value, "containers", f"duplicate container '{container.name}'")
            seen.add(container.name)

        resources: List[ArmResource] = [
            DatabaseAccount(
                name=account,
                location=location,
                consistency_policy=self._consistency_policy,
                failover_policy=self._failover_policy,
                public_network_access=self._public_network_access,
                free_tier=self._free_tier,
                serverless=self._serverless,
                kind=self._kind,
                tags=dict(self._tags),
                depends_on=self._explicit_dependencies(),
            ),
            SqlDatabase(name=database, account=account, throughput=throughput, kind=self._kind),
        ]
        resources.extend(containers)
        return resources


def cosmos_db() -> CosmosDbBuilder:
    return CosmosDbBuilder()


def cosmos_container() -> CosmosContainerBuilder:
    return CosmosContainerBuilder()
