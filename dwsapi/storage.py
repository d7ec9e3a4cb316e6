"""Storage resource: storage hardware and the nodes that can reach it."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from dwsapi.meta import ObjectMeta
from dwsapi.resource import ResourceState, ResourceStatus

# Label key for tagging Storage resources with a driver specific value,
# for example dataworkflowservices.github.io/storage=Rabbit
STORAGE_TYPE_LABEL = "dataworkflowservices.github.io/storage"


class StorageAccessProtocol(str, Enum):
    """Protocol by which storage is accessed."""

    PCIE = "PCIe"

    def __str__(self) -> str:
        return self.value


class StorageType(str, Enum):
    """Kind of storage."""

    NVME = "NVMe"

    def __str__(self) -> str:
        return self.value


def _optional_status(value: ResourceStatus | str | None) -> ResourceStatus | None:
    return None if value is None else ResourceStatus(value)


@dataclass
class StorageSpec:
    """Desired state of a storage resource."""

    state: ResourceState = ResourceState.ENABLED

    def __post_init__(self) -> None:
        self.state = ResourceState(self.state)


@dataclass
class StorageDevice:
    """Details of one storage device."""

    model: str = ""
    serial_number: str = ""
    firmware_version: str = ""
    slot: str = ""
    # Bytes; not all of it may be usable by the driver.
    capacity: int = 0
    # Percent of estimated endurance consumed, for SSDs.
    wear_level: int | None = None
    status: ResourceStatus | None = None

    def __post_init__(self) -> None:
        self.status = _optional_status(self.status)


@dataclass
class Node:
    """Status of a compute or server node."""

    name: str = ""
    status: ResourceStatus | None = None

    def __post_init__(self) -> None:
        self.status = _optional_status(self.status)


@dataclass
class StorageAccess:
    """Nodes that can reach the storage, and how."""

    protocol: StorageAccessProtocol | None = None
    servers: list[Node] = field(default_factory=list)
    computes: list[Node] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.protocol is not None:
            self.protocol = StorageAccessProtocol(self.protocol)


@dataclass
class StorageStatus:
    """Observed state of a storage resource."""

    type: StorageType | None = None
    devices: list[StorageDevice] = field(default_factory=list)
    access: StorageAccess = field(default_factory=StorageAccess)
    # Total accessible bytes as determined by the driver.
    capacity: int = 0
    status: ResourceStatus | None = None
    reboot_required: bool = False
    message: str = ""

    def __post_init__(self) -> None:
        if self.type is not None:
            self.type = StorageType(self.type)
        self.status = _optional_status(self.status)


@dataclass
class Storage:
    """A storage resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: StorageSpec = field(default_factory=StorageSpec)
    status: StorageStatus = field(default_factory=StorageStatus)