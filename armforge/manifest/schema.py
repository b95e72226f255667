"""Pydantic models for manifest validation."""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SCALE_SET_TYPE = "Microsoft.Compute/virtualMachineScaleSets"
VIRTUAL_NETWORK_TYPE = "Microsoft.Network/virtualNetworks"
COSMOS_DB_TYPE = "Microsoft.DocumentDb/databaseAccounts"


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class SubnetProperties(StrictModel):
    name: str
    prefix: str


class VirtualNetworkProperties(StrictModel):
    """Properties of a Microsoft.Network/virtualNetworks service."""
    address_spaces: List[str] = Field(min_length=1)
    subnets: List[SubnetProperties] = Field(default_factory=list)


class SshKeyProperties(StrictModel):
    path: str
    key_data: str


class VmProfileProperties(StrictModel):
    """VM profile. ``image`` names a common image; ``gallery_image_id`` needs ``os``."""
    username: str
    image: Optional[str] = None
    gallery_image_id: Optional[str] = None
    os: Optional[Literal["Linux", "Windows"]] = None
    size: str = "Standard_B1s"
    os_disk_size: int = 128
    os_disk_type: Literal["Standard_LRS", "StandardSSD_LRS", "Premium_LRS"] = "Standard_LRS"
    diagnostics: bool = False
    vnet: Optional[str] = None
    unmanaged_vnet: Optional[str] = None
    subnet: Optional[str] = None
    password_parameter: Optional[str] = None
    disable_password_authentication: bool = False
    authorized_keys: List[SshKeyProperties] = Field(default_factory=list)
    computer_name_prefix: Optional[str] = None


class OsUpgradeProperties(StrictModel):
    automatic: Optional[bool] = None
    rolling_upgrade: Optional[bool] = None
    automatic_rollback: Optional[bool] = None


class HealthExtensionProperties(StrictModel):
    protocol: Literal["tcp", "http", "https"]
    port: int
    path: Optional[str] = None
    os: Optional[Literal["Linux", "Windows"]] = None


class ScaleSetProperties(StrictModel):
    """Properties of a Microsoft.Compute/virtualMachineScaleSets service."""
    vm: VmProfileProperties
    capacity: Optional[int] = None
    upgrade_mode: Literal["Manual", "Automatic", "Rolling"] = "Automatic"
    os_upgrade: Optional[OsUpgradeProperties] = None
    scale_in_policy: Literal["Default", "OldestVM", "NewestVM"] = "Default"
    scale_in_force_deletion: Optional[bool] = None
    automatic_repair_minutes: Optional[int] = None
    health_extension: Optional[HealthExtensionProperties] = None


class ConsistencyProperties(StrictModel):
    level: Literal["Session", "Eventual", "ConsistentPrefix", "Strong", "BoundedStaleness"] = "Session"
    max_staleness_prefix: Optional[int] = None
    max_interval_in_seconds: Optional[int] = None


class FailoverProperties(StrictModel):
    policy: Literal["NoFailover", "AutoFailover", "MultiMaster"] = "NoFailover"
    secondary_region: Optional[str] = None


class IndexProperties(StrictModel):
    data_type: Literal["Number", "String"]
    kind: Literal["Hash", "Range"] = "Range"


class IncludedPathProperties(StrictModel):
    path: str
    indexes: List[IndexProperties] = Field(default_factory=list)


class ContainerProperties(StrictModel):
    name: str
    partition_key: List[str] = Field(min_length=1)
    partition_key_kind: Literal["Hash", "Range"] = "Hash"
    unique_keys: List[List[str]] = Field(default_factory=list)
    included_paths: List[IncludedPathProperties] = Field(default_factory=list)
    excluded_paths: List[str] = Field(default_factory=list)


class CosmosDbProperties(StrictModel):
    """Properties of a Microsoft.DocumentDb/databaseAccounts service.

    The service name is the database name.
    """
    account_name: Optional[str] = None
    kind: Literal["Document", "Mongo", "Gremlin"] = "Document"
    consistency: ConsistencyProperties = Field(default_factory=ConsistencyProperties)
    failover: FailoverProperties = Field(default_factory=FailoverProperties)
    public_network_access: bool = True
    free_tier: bool = False
    serverless: bool = False
    throughput: Optional[int] = None
    containers: List[ContainerProperties] = Field(default_factory=list)


class Service(BaseModel):
    """Service definition."""
    name: str
    type: str
    region: Optional[str] = None
    tags: Dict[str, str] = Field(default_factory=dict)
    depends_on: List[str] = Field(default_factory=list)
    properties: Dict[str, Any] = Field(default_factory=dict)


class Metadata(BaseModel):
    """Manifest metadata."""
    name: str
    description: Optional[str] = None
    version: str


class Manifest(BaseModel):
    """Root manifest schema."""
    metadata: Metadata
    region: str = ""
    tags: Dict[str, str] = Field(default_factory=dict)
    services: List[Service]
