"""Virtual machine scale set resources."""
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from .identity import VIRTUAL_MACHINE_SCALE_SETS, ResourceId, ResourceName
from .models import ArmParameter, ArmResource, Reference, resource_header


class OS(Enum):
    LINUX = "Linux"
    WINDOWS = "Windows"


class DiskType(Enum):
    STANDARD_LRS = "Standard_LRS"
    STANDARD_SSD_LRS = "StandardSSD_LRS"
    PREMIUM_LRS = "Premium_LRS"


class UpgradeMode(Enum):
    MANUAL = "Manual"
    AUTOMATIC = "Automatic"
    ROLLING = "Rolling"


class ScaleInRule(Enum):
    DEFAULT = "Default"
    OLDEST_VM = "OldestVM"
    NEWEST_VM = "NewestVM"


@dataclass(frozen=True)
class MarketplaceImage:
    """A published image from the Azure marketplace."""
    os: OS
    publisher: str
    offer: str
    sku: str
    version: str = "latest"

    def to_json(self) -> Dict[str, Any]:
        return {
            "publisher": self.publisher,
            "offer": self.offer,
            "sku": self.sku,
            "version": self.version,
        }


@dataclass(frozen=True)
class SharedGalleryImage:
    """An image shared through an Azure compute gallery."""
    os: OS
    image_id: str

    def to_json(self) -> Dict[str, Any]:
        return {"sharedGalleryImageId": self.image_id}


Image = Union[MarketplaceImage, SharedGalleryImage]

UBUNTU_SERVER_2004_LTS = MarketplaceImage(OS.LINUX, "Canonical", "0001-com-ubuntu-server-focal", "20_04-lts-gen2")
UBUNTU_SERVER_2204_LTS = MarketplaceImage(OS.LINUX, "Canonical", "0001-com-ubuntu-server-jammy", "22_04-lts-gen2")
DEBIAN_12 = MarketplaceImage(OS.LINUX, "Debian", "debian-12", "12-gen2")
WINDOWS_SERVER_2019_DATACENTER = MarketplaceImage(
    OS.WINDOWS, "MicrosoftWindowsServer", "WindowsServer", "2019-datacenter-gensecond"
)
WINDOWS_SERVER_2022_DATACENTER = MarketplaceImage(
    OS.WINDOWS, "MicrosoftWindowsServer", "WindowsServer", "2022-datacenter-g2"
)

COMMON_IMAGES: Dict[str, MarketplaceImage] = {
    "UbuntuServer_2004LTS": UBUNTU_SERVER_2004_LTS,
    "UbuntuServer_2204LTS": UBUNTU_SERVER_2204_LTS,
    "Debian_12": DEBIAN_12,
    "WindowsServer_2019Datacenter": WINDOWS_SERVER_2019_DATACENTER,
    "WindowsServer_2022Datacenter": WINDOWS_SERVER_2022_DATACENTER,
}


@dataclass(frozen=True)
class HealthProtocol:
    """Probe protocol of the application health extension.

    TCP probes only check the port; HTTP and HTTPS probes request a path.
    """
    scheme: str
    request_path: Optional[str] = None

    @classmethod
    def tcp(cls) -> "HealthProtocol":
        return cls("tcp")

    @classmethod
    def http(cls, request_path: str) -> "HealthProtocol":
        return cls("http", request_path)

    @classmethod
    def https(cls, request_path: str) -> "HealthProtocol":
        return cls("https", request_path)


@dataclass(frozen=True)
class ApplicationHealthExtension:
    """Reports instance health to the scale set for upgrades and repairs."""
    protocol: HealthProtocol
    port: int
    os: OS
    type_handler_version: str = "1.0"

    @property
    def extension_type(self) -> str:
        return "ApplicationHealthLinux" if self.os is OS.LINUX else "ApplicationHealthWindows"

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.extension_type,
            "properties": {
                "publisher": "Microsoft.ManagedServices",
                "type": self.extension_type,
                "typeHandlerVersion": self.type_handler_version,
                "autoUpgradeMinorVersion": True,
                "settings": {
                    "protocol": self.protocol.scheme,
                    "port": self.port,
                    "requestPath": self.protocol.request_path,
                },
            },
        }


@dataclass(frozen=True)
class SshKey:
    path: str
    key_data: str

    def to_json(self) -> Dict[str, Any]:
        return {"path": self.path, "keyData": self.key_data}


@dataclass(frozen=True)
class VmProfile:
    """Instance template of a scale set: image, size, disk, OS and network."""
    image: Image
    size: str
    admin_username: str
    computer_name_prefix: str
    os_disk_size: int
    os_disk_type: DiskType
    subnet_id: ResourceId
    nic_name: str
    boot_diagnostics: bool = False
    admin_password: Optional[ArmParameter] = None
    disable_password_authentication: bool = False
    authorized_keys: Tuple[SshKey, ...] = ()
    extensions: Tuple[ApplicationHealthExtension, ...] = ()

    @property
    def os(self) -> OS:
        return self.image.os

    def _os_profile(self) -> Dict[str, Any]:
        profile = {
            "computerNamePrefix": self.computer_name_prefix,
            "adminUsername": self.admin_username,
            "adminPassword": self.admin_password.reference if self.admin_password else None,
        }
        if self.os is OS.LINUX:
            profile["linuxConfiguration"] = {
                "disablePasswordAuthentication": self.disable_password_authentication,
                "ssh": {
                    "publicKeys": [key.to_json() for key in self.authorized_keys]
                } if self.authorized_keys else None,
            }
        elif self.os is OS.WINDOWS:
            profile["windowsConfiguration"] = {"provisionVMAgent": True}
        else:
            raise ValueError(f"Unsupported operating system: {self.os}")
        return profile

    def _storage_profile(self) -> Dict[str, Any]:
        return {
            "imageReference": self.image.to_json(),
            "osDisk": {
                "createOption": "FromImage",
                "diskSizeGB": self.os_disk_size,
                "managedDisk": {"storageAccountType": self.os_disk_type.value},
            },
        }

    def _network_profile(self) -> Dict[str, Any]:
        return {
            "networkInterfaceConfigurations": [
                {
                    "name": self.nic_name,
                    "properties": {
                        "primary": True,
                        "ipConfigurations": [
                            {
                                "name": "ipconfig1",
                                "properties": {"subnet": {"id": self.subnet_id.eval()}},
                            }
                        ],
                    },
                }
            ]
        }

    def to_json(self) -> Dict[str, Any]:
        return {
            "osProfile": self._os_profile(),
            "storageProfile": self._storage_profile(),
            "networkProfile": self._network_profile(),
            "diagnosticsProfile": {
                "bootDiagnostics": {"enabled": True}
            } if self.boot_diagnostics else None,
            "extensionProfile": {
                "extensions": [extension.to_json() for extension in self.extensions]
            } if self.extensions else None,
        }


@dataclass(frozen=True)
class AutomaticOsUpgradePolicy:
    enable_automatic_os_upgrade: Optional[bool] = None
    use_rolling_upgrade_policy: Optional[bool] = None
    disable_automatic_rollback: Optional[bool] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "enableAutomaticOSUpgrade": self.enable_automatic_os_upgrade,
            "useRollingUpgradePolicy": self.use_rolling_upgrade_policy,
            "disableAutomaticRollback": self.disable_automatic_rollback,
        }


@dataclass(frozen=True)
class UpgradePolicy:
    mode: UpgradeMode = UpgradeMode.AUTOMATIC
    automatic_os_upgrade: Optional[AutomaticOsUpgradePolicy] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "automaticOSUpgradePolicy": (
                self.automatic_os_upgrade.to_json() if self.automatic_os_upgrade else None
            ),
        }


@dataclass(frozen=True)
class ScaleInPolicy:
    rule: ScaleInRule = ScaleInRule.DEFAULT
    force_deletion: Optional[bool] = None

    def to_json(self) -> Dict[str, Any]:
        return {"rules": [self.rule.value], "forceDeletion": self.force_deletion}


def iso8601_duration(value: timedelta) -> str:
    """Format a timedelta as an ISO 8601 duration such as ``PT1H30M``."""
    total = int(value.total_seconds())
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    text = "PT"
    if hours:
        text += f"{hours}H"
    if minutes:
        text += f"{minutes}M"
    if seconds or text == "PT":
        text += f"{seconds}S"
    return text


@dataclass(frozen=True)
class AutomaticRepairsPolicy:
    grace_period: timedelta

    def to_json(self) -> Dict[str, Any]:
        return {"enabled": True, "gracePeriod": iso8601_duration(self.grace_period)}


@dataclass(frozen=True)
class VirtualMachineScaleSet(ArmResource):
    name: ResourceName
    location: str
    vm_profile: VmProfile
    capacity: Optional[int] = None
    upgrade_policy: UpgradePolicy = field(default_factory=UpgradePolicy)
    scale_in_policy: ScaleInPolicy = field(default_factory=ScaleInPolicy)
    automatic_repairs: Optional[AutomaticRepairsPolicy] = None
    vnet: Optional[ResourceId] = None
    subnet: Optional[ResourceId] = None
    tags: Dict[str, str] = field(default_factory=dict)
    depends_on: Tuple[Reference, ...] = ()

    @property
    def resource_id(self) -> ResourceId:
        return VIRTUAL_MACHINE_SCALE_SETS.resource_id(self.name)

    def references(self) -> List[Reference]:
        refs: List[Reference] = []
        if self.vnet is not None:
            refs.append(self.vnet)
        refs.extend(self.depends_on)
        return refs

    def child_references(self) -> List[ResourceId]:
        return [self.subnet] if self.subnet is not None else []

    def parameters(self) -> List[ArmParameter]:
        return [self.vm_profile.admin_password] if self.vm_profile.admin_password else []

    def json_model(self) -> Dict[str, Any]:
        return {
            **resource_header(self.resource_id, self.location, self.tags),
            "sku": {
                "name": self.vm_profile.size,
                "tier": "Standard",
                "capacity": self.capacity,
            },
            "properties": {
                "upgradePolicy": self.upgrade_policy.to_json(),
                "scaleInPolicy": self.scale_in_policy.to_json(),
                "automaticRepairsPolicy": (
                    self.automatic_repairs.to_json() if self.automatic_repairs else None
                ),
                "virtualMachineProfile": self.vm_profile.to_json(),
            },
        }
