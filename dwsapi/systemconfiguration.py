"""SystemConfiguration resource: the node layout of the system."""

from __future__ import annotations

from dataclasses import dataclass, field

from dwsapi.meta import ObjectMeta

DEFAULT_PORTS_COOLDOWN_IN_SECONDS = 60


@dataclass
class SystemConfigurationExternalComputeNode:
    """A compute node not matched with any storage node."""

    name: str = ""


@dataclass
class SystemConfigurationComputeNodeReference:
    """A compute node that has access to a storage node."""

    name: str = ""
    index: int = 0


@dataclass
class SystemConfigurationStorageNode:
    """A storage node in the system."""

    type: str = ""
    name: str = ""
    computes_access: list[SystemConfigurationComputeNodeReference] = field(default_factory=list)


@dataclass
class SystemConfigurationSpec:
    """Node layout of the system, filled in at installation time.

    ``ports`` holds single port numbers or ranges of the form "START-END",
    inclusive at both ends.
    """

    external_compute_nodes: list[SystemConfigurationExternalComputeNode] = field(
        default_factory=list
    )
    storage_nodes: list[SystemConfigurationStorageNode] = field(default_factory=list)
    ports: list[int | str] = field(default_factory=list)
    ports_cooldown_in_seconds: int = DEFAULT_PORTS_COOLDOWN_IN_SECONDS


@dataclass
class SystemConfigurationStatus:
    """Whether the system configuration has been reconciled."""

    ready: bool = False


@dataclass
class SystemConfiguration:
    """A system configuration resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: SystemConfigurationSpec = field(default_factory=SystemConfigurationSpec)
    status: SystemConfigurationStatus = field(default_factory=SystemConfigurationStatus)

    def computes(self) -> list[str]:
        """Names of the compute nodes attached to storage nodes, in order."""
        return [
            compute.name
            for storage_node in self.spec.storage_nodes
            for compute in storage_node.computes_access
        ]

    def computes_external(self) -> list[str]:
        """Names of the external compute nodes, in order."""
        return [node.name for node in self.spec.external_compute_nodes]