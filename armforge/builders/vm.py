"""Virtual machine profile builder, embedded in scale sets."""
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from ..arm.compute import OS, DiskType, Image, SharedGalleryImage, SshKey
from ..errors import ConfigurationError


@dataclass(frozen=True)
class VnetLink:
    """A virtual network the VM profile attaches to.

    Managed links point at a network declared in the same template and add a
    deployment dependency; unmanaged links only reference it.
    """
    name: str
    managed: bool = True


@dataclass(frozen=True)
class VmConfig:
    """Validated VM profile settings, before scale set derivations are applied."""
    username: str
    image: Image
    size: str
    os_disk_size: int
    os_disk_type: DiskType
    diagnostics: bool
    vnet: Optional[VnetLink]
    subnet_name: Optional[str]
    password_parameter: Optional[str]
    disable_password_authentication: bool
    authorized_keys: Tuple[SshKey, ...]
    computer_name_prefix: Optional[str]

    @property
    def os(self) -> OS:
        return self.image.os


class VmBuilder:
    """Collects the per-instance settings of a scale set."""

    def __init__(self):
        self._username: Optional[str] = None
        self._image: Optional[Image] = None
        self._size = "Standard_B1s"
        self._os_disk_size = 128
        self._os_disk_type = DiskType.STANDARD_LRS
        self._diagnostics = False
        self._vnet: Optional[VnetLink] = None
        self._subnet_name: Optional[str] = None
        self._password_parameter: Optional[str] = None
        self._disable_password_authentication = False
        self._authorized_keys: List[SshKey] = []
        self._computer_name_prefix: Optional[str] = None

    def username(self, value: str) -> "VmBuilder":
        self._username = value
        return self

    def operating_system(self, image: Union[Image, Tuple[OS, str]]) -> "VmBuilder":
        """Use a marketplace image, or an ``(OS, shared gallery image id)`` pair."""
        if isinstance(image, tuple):
            os, image_id = image
            image = SharedGalleryImage(os, image_id)
        self._image = image
        return self

    def vm_size(self, value: str) -> "VmBuilder":
        self._size = value
        return self

    def os_disk(self, size_gb: int, disk_type: DiskType) -> "VmBuilder":
        self._os_disk_size = size_gb
        self._os_disk_type = disk_type
        return self

    def diagnostics_support(self, enabled: bool = True) -> "VmBuilder":
        self._diagnostics = enabled
        return self

    def link_to_vnet(self, name: str) -> "VmBuilder":
        self._vnet = VnetLink(name)
        return self

    def link_to_unmanaged_vnet(self, name: str) -> "VmBuilder":
        self._vnet = VnetLink(name, managed=False)
        return self

    def subnet_name(self, value: str) -> "VmBuilder":
        self._subnet_name = value
        return self

    def password_parameter(self, name: str) -> "VmBuilder":
        self._password_parameter = name
        return self

    def disable_password_authentication(self, disabled: bool = True) -> "VmBuilder":
        self._disable_password_authentication = disabled
        return self

    def add_authorized_key(self, path: str, key_data: str) -> "VmBuilder":
        self._authorized_keys.append(SshKey(path, key_data))
        return self

    def computer_name_prefix(self, value: str) -> "VmBuilder":
        self._computer_name_prefix = value
        return self

    def build(self, owner: str) -> VmConfig:
        """Validate the profile.

        Args:
            owner: Name of the resource embedding this profile, used in errors.

        Returns:
            VmConfig: The validated profile settings.

        Raises:
            ConfigurationError: If a required setting is missing or inconsistent.
        """
        if not self._username:
            raise ConfigurationError(owner, "vm_profile.username", "an admin username is required")
        if self._image is None:
            raise ConfigurationError(owner, "vm_profile.operating_system", "an image is required")
        if not self._size:
            raise ConfigurationError(owner, "vm_profile.vm_size", "a VM size is required")
        if not 1 <= self._os_disk_size <= 4095:
            raise ConfigurationError(
                owner, "vm_profile.os_disk", f"disk size must be 1-4095 GB, got {self._os_disk_size}"
            )
        if self._disable_password_authentication:
            if self._image.os is OS.WINDOWS:
                raise ConfigurationError(
                    owner,
                    "vm_profile.disable_password_authentication",
                    "Windows images require password authentication",
                )
            if not self._authorized_keys:
                raise ConfigurationError(
                    owner,
                    "vm_profile.disable_password_authentication",
                    "at least one SSH key is required when password authentication is disabled",
                )
            if self._password_parameter:
                raise ConfigurationError(
                    owner,
                    "vm_profile.password_parameter",
                    "cannot be set when password authentication is disabled",
                )
        if self._authorized_keys and self._image.os is OS.WINDOWS:
            raise ConfigurationError(owner, "vm_profile.add_authorized_key", "SSH keys are Linux only")
        if self._subnet_name == "":
            raise ConfigurationError(owner, "vm_profile.subnet_name", "subnet name cannot be empty")

        return VmConfig(
            username=self._username,
            image=self._image,
            size=self._size,
            os_disk_size=self._os_disk_size,
            os_disk_type=self._os_disk_type,
            diagnostics=self._diagnostics,
            vnet=self._vnet,
            subnet_name=self._subnet_name,
            password_parameter=self._password_parameter,
            disable_password_authentication=self._disable_password_authentication,
            authorized_keys=tuple(self._authorized_keys),
            computer_name_prefix=self._computer_name_prefix,
        )


def vm() -> VmBuilder:
    return VmBuilder()
