"""ARM template generator driven by YAML manifests."""
from datetime import timedelta
from pathlib import Path
from typing import Callable, Dict, Optional

from rich.console import Console
from rich.markup import escape

from ..arm.compute import COMMON_IMAGES, OS, DiskType, HealthProtocol, ScaleInRule, UpgradeMode
from ..arm.identity import ResourceId
from ..arm.documentdb import (
    ConsistencyLevel,
    ConsistencyPolicy,
    DatabaseKind,
    FailoverMode,
    FailoverPolicy,
    IndexDataType,
    IndexKind,
)
from ..builders.base import ResourceBuilder
from ..builders.cosmosdb import CosmosContainerBuilder, CosmosDbBuilder
from ..builders.vm import VmBuilder
from ..builders.vmss import ApplicationHealthExtensionBuilder, VmScaleSetBuilder
from ..builders.vnet import SubnetBuilder, VirtualNetworkBuilder
from ..errors import ConfigurationError
from ..manifest.parser import ManifestParser
from ..manifest.schema import (
    COSMOS_DB_TYPE,
    SCALE_SET_TYPE,
    VIRTUAL_NETWORK_TYPE,
    CosmosDbProperties,
    ScaleSetProperties,
    Service,
    VirtualNetworkProperties,
    VmProfileProperties,
)
from . import writer
from .deployment import ArmDeployment
from .models import Template

TEMPLATE_FILE_NAME = "azuredeploy.json"


def _vm_profile(service: Service, props: VmProfileProperties) -> VmBuilder:
    profile = VmBuilder().username(props.username).vm_size(props.size)
    if props.image and props.gallery_image_id:
        raise ConfigurationError(service.name, "vm.image", "set either image or gallery_image_id, not both")
    if props.image:
        if props.image not in COMMON_IMAGES:
            known = ", ".join(sorted(COMMON_IMAGES))
            raise ConfigurationError(service.name, "vm.image", f"unknown image '{props.image}' (known: {known})")
        profile.operating_system(COMMON_IMAGES[props.image])
    elif props.gallery_image_id:
        if props.os is None:
            raise ConfigurationError(service.name, "vm.os", "gallery images need an explicit os")
        profile.operating_system((OS(props.os), props.gallery_image_id))
    profile.os_disk(props.os_disk_size, DiskType(props.os_disk_type))
    profile.diagnostics_support(props.diagnostics)
    if props.vnet and props.unmanaged_vnet:
        raise ConfigurationError(service.name, "vm.vnet", "set either vnet or unmanaged_vnet, not both")
    if props.vnet:
        profile.link_to_vnet(props.vnet)
    if props.unmanaged_vnet:
        profile.link_to_unmanaged_vnet(props.unmanaged_vnet)
    if props.subnet:
        profile.subnet_name(props.subnet)
    if props.password_parameter:
        profile.password_parameter(props.password_parameter)
    if props.disable_password_authentication:
        profile.disable_password_authentication()
    for key in props.authorized_keys:
        profile.add_authorized_key(key.path, key.key_data)
    if props.computer_name_prefix:
        profile.computer_name_prefix(props.computer_name_prefix)
    return profile


def _scale_set(service: Service) -> VmScaleSetBuilder:
    props = ScaleSetProperties.model_validate(service.properties)
    builder = VmScaleSetBuilder()
    builder.vm_profile(_vm_profile(service, props.vm))
    builder.upgrade_mode(UpgradeMode(props.upgrade_mode))
    builder.scale_in_policy(ScaleInRule(props.scale_in_policy))
    if props.capacity is not None:
        builder.capacity(props.capacity)
    if props.os_upgrade:
        if props.os_upgrade.automatic is not None:
            builder.osupgrade_automatic(props.os_upgrade.automatic)
        if props.os_upgrade.rolling_upgrade is not None:
            builder.osupgrade_rolling_upgrade(props.os_upgrade.rolling_upgrade)
        if props.os_upgrade.automatic_rollback is not None:
            builder.osupgrade_automatic_rollback(props.os_upgrade.automatic_rollback)
    if props.scale_in_force_deletion is not None:
        builder.scale_in_force_deletion(props.scale_in_force_deletion)
    if props.automatic_repair_minutes is not None:
        builder.automatic_repair_enabled_after(timedelta(minutes=props.automatic_repair_minutes))
    if props.health_extension:
        ext = props.health_extension
        extension = ApplicationHealthExtensionBuilder()
        extension.protocol(HealthProtocol(ext.protocol, ext.path)).port(ext.port)
        if ext.os:
            extension.os(OS(ext.os))
        builder.add_extensions([extension])
    return builder


def _virtual_network(service: Service) -> VirtualNetworkBuilder:
    props = VirtualNetworkProperties.model_validate(service.properties)
    builder = VirtualNetworkBuilder().add_address_spaces(props.address_spaces)
    builder.add_subnets([SubnetBuilder().name(s.name).prefix(s.prefix) for s in props.subnets])
    return builder


def _consistency(props: CosmosDbProperties) -> ConsistencyPolicy:
    return ConsistencyPolicy(
        ConsistencyLevel(props.consistency.level),
        props.consistency.max_staleness_prefix,
        props.consistency.max_interval_in_seconds,
    )


def _cosmos_db(service: Service) -> CosmosDbBuilder:
    props = CosmosDbProperties.model_validate(service.properties)
    builder = CosmosDbBuilder().kind(DatabaseKind(props.kind))
    if props.account_name:
        builder.account_name(props.account_name)
    try:
        builder.consistency_policy(_consistency(props))
        builder.failover_policy(FailoverPolicy(FailoverMode(props.failover.policy), props.failover.secondary_region))
    except ValueError as e:
        raise ConfigurationError(service.name, "consistency/failover", str(e)) from e
    builder.public_network_access(props.public_network_access)
    builder.free_tier(props.free_tier)
    builder.serverless(props.serverless)
    if props.throughput is not None:
        builder.throughput(props.throughput)
    containers = []
    for c in props.containers:
        container = CosmosContainerBuilder().name(c.name)
        container.partition_key(c.partition_key, IndexKind(c.partition_key_kind))
        for key in c.unique_keys:
            container.add_unique_key(key)
        for included in c.included_paths:
            container.add_index(
                included.path, [(IndexDataType(i.data_type), IndexKind(i.kind)) for i in included.indexes]
            )
        for path in c.excluded_paths:
            container.exclude_path(path)
        containers.append(container)
    builder.add_containers(containers)
    return builder


class TemplateGenerator:
    """Generates an ARM template from a YAML manifest."""

    def __init__(
        self,
        manifest_path: str,
        output_dir: Optional[str] = None,
        debug: bool = False,
        console: Optional[Console] = None,
    ):
        """Initialize the generator.

        Args:
            manifest_path: Path to the YAML manifest file.
            output_dir: Directory for the generated template. Defaults to the manifest's directory.
            debug: If True, print verbose debug information.
            console: Console used for debug output.
        """
        self.manifest_path = manifest_path
        self.manifest = ManifestParser.load(manifest_path)
        self.output_dir = output_dir or str(Path(manifest_path).parent)
        self.debug = debug
        self.console = console or Console()

        # Resource builder mapping
        self.builders: Dict[str, Callable[[Service], ResourceBuilder]] = {
            SCALE_SET_TYPE: _scale_set,
            VIRTUAL_NETWORK_TYPE: _virtual_network,
            COSMOS_DB_TYPE: _cosmos_db,
        }

    def _log(self, message: str) -> None:
        if self.debug:
            self.console.print(f"[blue]Debug: {escape(message)}[/]")

    def _builder_for(self, service: Service) -> ResourceBuilder:
        factory = self.builders.get(service.type)
        if factory is None:
            supported = ", ".join(sorted(self.builders))
            raise ConfigurationError(
                service.name, "type", f"unsupported resource type '{service.type}' (supported: {supported})"
            )
        builder = factory(service).name(service.name)
        if service.region:
            builder.location(service.region)
        builder.add_tags({**self.manifest.tags, **service.tags})
        return builder

    def build_template(self) -> Template:
        """Build and link the template described by the manifest.

        Returns:
            Template: The linked template.

        Raises:
            ConfigurationError: If a service is misconfigured or of an unsupported type.
            ReferenceResolutionError: If a dependency cannot be resolved.
        """
        deployment = ArmDeployment()
        if self.manifest.region:
            deployment.location(self.manifest.region)
        builders = [(service, self._builder_for(service)) for service in self.manifest.services]
        # Cosmos DB services are named after their database; depending on one means its account.
        service_ids: Dict[str, ResourceId] = {
            service.name: builder.account_id()
            for service, builder in builders
            if isinstance(builder, CosmosDbBuilder)
        }
        for service, builder in builders:
            if service.depends_on:
                builder.depends_on(*(service_ids.get(ref, ref) for ref in service.depends_on))
            deployment.add_resource(builder)
            self._log(f"Added {service.type} '{service.name}'")
        template = deployment.build()
        self._log(
            f"Linked {len(template.resources)} resources and {len(template.parameters)} parameters"
        )
        return template

    def generate(self) -> str:
        """Generate the ARM template file.

        Returns:
            str: Path to the generated template.
        """
        self._log(f"Generating ARM template from {self.manifest_path}")
        content = writer.to_json(self.build_template())

        output_path = Path(self.output_dir)
        output_path.mkdir(parents=True, exist_ok=True)
        template_path = output_path / TEMPLATE_FILE_NAME
        template_path.write_text(content + "\n")
        self._log(f"Template written to {template_path}")
        return str(template_path)
