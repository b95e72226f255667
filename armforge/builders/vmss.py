"""Virtual machine scale set builder."""
from datetime import timedelta
from typing import List, Optional

from ..arm.compute import (
    OS,
    ApplicationHealthExtension,
    AutomaticOsUpgradePolicy,
    AutomaticRepairsPolicy,
    HealthProtocol,
    ScaleInPolicy,
    ScaleInRule,
    UpgradeMode,
    UpgradePolicy,
    VirtualMachineScaleSet,
    VmProfile,
)
from ..arm.identity import SUBNETS, VIRTUAL_NETWORKS, ResourceId, ResourceName
from ..arm.models import ArmParameter, ArmResource
from ..arm.network import Subnet, VirtualNetwork
from ..errors import ConfigurationError
from .base import ResourceBuilder
from .vm import VmBuilder, VmConfig

MAX_CAPACITY = 1000

# Windows computer names are limited to 15 characters and the platform appends
# six characters of instance suffix to the prefix.
COMPUTER_NAME_PREFIX_LIMITS = {OS.LINUX: 58, OS.WINDOWS: 9}

MIN_REPAIR_GRACE_PERIOD = timedelta(minutes=10)
MAX_REPAIR_GRACE_PERIOD = timedelta(minutes=90)

DEFAULT_VNET_ADDRESS_SPACE = "10.0.0.0/16"
DEFAULT_SUBNET_PREFIX = "10.0.0.0/24"


class ApplicationHealthExtensionBuilder:
    """Builds the application health extension of a scale set."""

    def __init__(self):
        self._protocol: Optional[HealthProtocol] = None
        self._port: Optional[int] = None
        self._os: Optional[OS] = None

    def protocol(self, value: HealthProtocol) -> "ApplicationHealthExtensionBuilder":
        self._protocol = value
        return self

    def port(self, value: int) -> "ApplicationHealthExtensionBuilder":
        self._port = value
        return self

    def os(self, value: OS) -> "ApplicationHealthExtensionBuilder":
        self._os = value
        return self

    def build(self, owner: str, vm_os: OS) -> ApplicationHealthExtension:
        """Validate the extension against the VM profile it is attached to.

        The extension inherits the profile's OS when none is set.
        """
        field = "extensions.application_health"
        if self._protocol is None:
            raise ConfigurationError(owner, f"{field}.protocol", "a probe protocol is required")
        if self._protocol.scheme not in ("tcp", "http", "https"):
            raise ConfigurationError(
                owner, f"{field}.protocol", f"unsupported protocol '{self._protocol.scheme}'"
            )
        if self._protocol.scheme == "tcp" and self._protocol.request_path is not None:
            raise ConfigurationError(owner, f"{field}.protocol", "TCP probes do not take a request path")
        if self._protocol.scheme != "tcp" and not self._protocol.request_path:
            raise ConfigurationError(
                owner, f"{field}.protocol", f"{self._protocol.scheme.upper()} probes need a request path"
            )
        if self._port is None or not 1 <= self._port <= 65535:
            raise ConfigurationError(owner, f"{field}.port", f"port must be 1-65535, got {self._port}")
        os = self._os or vm_os
        if os is not vm_os:
            raise ConfigurationError(
                owner, f"{field}.os", f"extension targets {os.value} but the VM profile runs {vm_os.value}"
            )
        return ApplicationHealthExtension(protocol=self._protocol, port=self._port, os=os)


class VmScaleSetBuilder(ResourceBuilder):
    """Builds a scale set and, when no network is linked, its virtual network."""

    resource_kind = "scale set"

    def __init__(self):
        super().__init__()
        self._capacity: Optional[int] = None
        self._vm_profile: Optional[VmBuilder] = None
        self._upgrade_mode = UpgradeMode.AUTOMATIC
        self._osupgrade_automatic: Optional[bool] = None
        self._osupgrade_rolling_upgrade: Optional[bool] = None
        self._osupgrade_automatic_rollback: Optional[bool] = None
        self._scale_in_rule = ScaleInRule.DEFAULT
        self._scale_in_force_deletion: Optional[bool] = None
        self._repair_grace_period: Optional[timedelta] = None
        self._extensions: List[ApplicationHealthExtensionBuilder] = []

    def capacity(self, value: int) -> "VmScaleSetBuilder":
        self._capacity = value
        return self

    def vm_profile(self, profile: VmBuilder) -> "VmScaleSetBuilder":
        self._vm_profile = profile
        return self

    def upgrade_mode(self, mode: UpgradeMode) -> "VmScaleSetBuilder":
        self._upgrade_mode = mode
        return self

    def osupgrade_automatic(self, enabled: bool) -> "VmScaleSetBuilder":
        self._osupgrade_automatic = enabled
        return self

    def osupgrade_rolling_upgrade(self, enabled: bool) -> "VmScaleSetBuilder":
        self._osupgrade_rolling_upgrade = enabled
        return self

    def osupgrade_automatic_rollback(self, enabled: bool) -> "VmScaleSetBuilder":
        self._osupgrade_automatic_rollback = enabled
        return self

    def scale_in_policy(self, rule: ScaleInRule) -> "VmScaleSetBuilder":
        self._scale_in_rule = rule
        return self

    def scale_in_force_deletion(self, enabled: bool) -> "VmScaleSetBuilder":
        self._scale_in_force_deletion = enabled
        return self

    def automatic_repair_enabled_after(self, grace_period: timedelta) -> "VmScaleSetBuilder":
        self._repair_grace_period = grace_period
        return self

    def add_extensions(self, extensions: List[ApplicationHealthExtensionBuilder]) -> "VmScaleSetBuilder":
        self._extensions.extend(extensions)
        return self

    def _os_upgrade_policy(self, owner: str) -> Optional[AutomaticOsUpgradePolicy]:
        flags = (
            self._osupgrade_automatic,
            self._osupgrade_rolling_upgrade,
            self._osupgrade_automatic_rollback,
        )
        if all(flag is None for flag in flags):
            return None
        if self._upgrade_mode is UpgradeMode.MANUAL:
            raise ConfigurationError(
                owner, "osupgrade_automatic", "automatic OS upgrades are not supported in Manual upgrade mode"
            )
        if self._osupgrade_rolling_upgrade and not self._osupgrade_automatic:
            raise ConfigurationError(
                owner, "osupgrade_rolling_upgrade", "requires osupgrade_automatic to be enabled"
            )
        return AutomaticOsUpgradePolicy(
            enable_automatic_os_upgrade=self._osupgrade_automatic,
            use_rolling_upgrade_policy=self._osupgrade_rolling_upgrade,
            disable_automatic_rollback=(
                None if self._osupgrade_automatic_rollback is None else not self._osupgrade_automatic_rollback
            ),
        )

    def _scale_in_policy(self, owner: str) -> ScaleInPolicy:
        if self._scale_in_force_deletion is not None and self._upgrade_mode is UpgradeMode.MANUAL:
            raise ConfigurationError(
                owner, "scale_in_force_deletion", "force deletion is not supported in Manual upgrade mode"
            )
        return ScaleInPolicy(rule=self._scale_in_rule, force_deletion=self._scale_in_force_deletion)

    def _repairs_policy(self, owner: str, has_health_extension: bool) -> Optional[AutomaticRepairsPolicy]:
        if self._repair_grace_period is None:
            return None
        if not MIN_REPAIR_GRACE_PERIOD <= self._repair_grace_period <= MAX_REPAIR_GRACE_PERIOD:
            raise ConfigurationError(
                owner, "automatic_repair_enabled_after", "grace period must be between 10 and 90 minutes"
            )
        if not has_health_extension:
            raise ConfigurationError(
                owner, "automatic_repair_enabled_after", "automatic repairs need an application health extension"
            )
        return AutomaticRepairsPolicy(self._repair_grace_period)

    def _computer_name_prefix(self, owner: str, config: VmConfig) -> str:
        prefix = config.computer_name_prefix or owner
        limit = COMPUTER_NAME_PREFIX_LIMITS[config.os]
        if len(prefix) > limit:
            raise ConfigurationError(
                owner,
                "vm_profile.computer_name_prefix",
                f"'{prefix}' exceeds the {limit} character limit for {config.os.value}; set computer_name_prefix",
            )
        return prefix

    def build(self, location: Optional[str] = None) -> List[ArmResource]:
        name = self._require_name()
        owner = name.value
        if self._vm_profile is None:
            raise ConfigurationError(owner, "vm_profile", "a VM profile is required")
        if self._capacity is not None and not 0 <= self._capacity <= MAX_CAPACITY:
            raise ConfigurationError(owner, "capacity", f"capacity must be 0-{MAX_CAPACITY}, got {self._capacity}")
        location = self._resolve_location(location)
        config = self._vm_profile.build(owner)

        extensions = tuple(ext.build(owner, config.os) for ext in self._extensions)
        if len(extensions) > 1:
            raise ConfigurationError(owner, "add_extensions", "only one application health extension is allowed")
        if self._upgrade_mode is UpgradeMode.ROLLING and not extensions:
            raise ConfigurationError(
                owner, "upgrade_mode", "Rolling upgrades need an application health extension"
            )
        upgrade_policy = UpgradePolicy(self._upgrade_mode, self._os_upgrade_policy(owner))
        scale_in_policy = self._scale_in_policy(owner)
        repairs_policy = self._repairs_policy(owner, bool(extensions))
        computer_name_prefix = self._computer_name_prefix(owner, config)

        resources: List[ArmResource] = []
        subnet_name = ResourceName(config.subnet_name or f"{owner}-subnet")
        vnet_dependency: Optional[ResourceId]
        subnet_dependency: Optional[ResourceId]
        if config.vnet is None:
            vnet = VirtualNetwork(
                name=ResourceName(f"{owner}-vnet"),
                location=location,
                address_spaces=(DEFAULT_VNET_ADDRESS_SPACE,),
                subnets=(Subnet(subnet_name, DEFAULT_SUBNET_PREFIX),),
                tags=dict(self._tags),
            )
            resources.append(vnet)
            subnet_id = vnet.subnet_id(subnet_name)
            vnet_dependency = vnet.resource_id
            subnet_dependency = subnet_id
        else:
            subnet_id = SUBNETS.resource_id(config.vnet.name, subnet_name)
            vnet_dependency = VIRTUAL_NETWORKS.resource_id(config.vnet.name) if config.vnet.managed else None
            subnet_dependency = subnet_id if config.vnet.managed else None

        admin_password = None
        if not config.disable_password_authentication:
            admin_password = ArmParameter.secure(config.password_parameter or f"password-for-{owner}")

        profile = VmProfile(
            image=config.image,
            size=config.size,
            admin_username=config.username,
            computer_name_prefix=computer_name_prefix,
            os_disk_size=config.os_disk_size,
            os_disk_type=config.os_disk_type,
            subnet_id=subnet_id,
            nic_name=f"{owner}-nic",
            boot_diagnostics=config.diagnostics,
            admin_password=admin_password,
            disable_password_authentication=config.disable_password_authentication,
            authorized_keys=config.authorized_keys,
            extensions=extensions,
        )
        resources.append(
            VirtualMachineScaleSet(
                name=name,
                location=location,
                vm_profile=profile,
                capacity=self._capacity,
                upgrade_policy=upgrade_policy,
                scale_in_policy=scale_in_policy,
                automatic_repairs=repairs_policy,
                vnet=vnet_dependency,
                subnet=subnet_dependency,
                tags=dict(self._tags),
                depends_on=self._explicit_dependencies(),
            )
        )
        return resources


def vmss() -> VmScaleSetBuilder:
    return VmScaleSetBuilder()


def application_health_extension() -> ApplicationHealthExtensionBuilder:
    return ApplicationHealthExtensionBuilder()
