"""ClientMount resource: mounts to create on a client node."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from dwsapi.meta import ObjectMeta, ObjectReference
from dwsapi.resource_error import ResourceError

# File system types a mount may have.
MOUNT_TYPES = ("lustre", "xfs", "gfs2", "none")

# Whether the mount target is a file or a directory.
TARGET_TYPES = ("file", "directory")


class ClientMountLVMDeviceType(str, Enum):
    """Type of the block devices backing an LVM volume group."""

    NVME = "nvme"

    def __str__(self) -> str:
        return self.value


class ClientMountDeviceType(str, Enum):
    """How the device to mount is described."""

    LUSTRE = "lustre"
    LVM = "lvm"
    # The device is described in a separate resource that the mounting
    # controller knows how to interpret.
    REFERENCE = "reference"

    def __str__(self) -> str:
        return self.value


class ClientMountState(str, Enum):
    """State of a mount point."""

    MOUNTED = "mounted"
    UNMOUNTED = "unmounted"

    def __str__(self) -> str:
        return self.value


@dataclass
class ClientMountDeviceLustre:
    """Lustre device information for mounting."""

    file_system_name: str = ""
    # Addresses of the form [address]@[lnet]
    mgs_addresses: str = ""


@dataclass
class ClientMountNVMeDesc:
    """Uniquely describes an NVMe namespace."""

    device_serial: str = ""
    namespace_id: str = ""
    namespace_guid: str = ""


@dataclass
class ClientMountDeviceLVM:
    """An LVM logical volume, optionally with the drives that are its PVs."""

    device_type: ClientMountLVMDeviceType = ClientMountLVMDeviceType.NVME
    nvme_info: list[ClientMountNVMeDesc] = field(default_factory=list)
    volume_group: str = ""
    logical_volume: str = ""

    def __post_init__(self) -> None:
        self.device_type = ClientMountLVMDeviceType(self.device_type)


@dataclass
class ClientMountDeviceReference:
    """A reference to another resource holding the device information."""

    object_reference: ObjectReference = field(default_factory=ObjectReference)
    # Optional private data for the driver
    data: int = 0


@dataclass
class ClientMountDevice:
    """The device to mount."""

    type: ClientMountDeviceType
    lustre: ClientMountDeviceLustre | None = None
    lvm: ClientMountDeviceLVM | None = None
    device_reference: ClientMountDeviceReference | None = None

    def __post_init__(self) -> None:
        self.type = ClientMountDeviceType(self.type)


@dataclass
class ClientMountInfo:
    """A single mount."""

    mount_path: str
    device: ClientMountDevice
    type: str
    target_type: str
    user_id: int = 0
    group_id: int = 0
    set_permissions: bool = False
    options: str = ""
    # Name of the compute node sharing this mount; empty if not shared.
    compute: str = ""

    def __post_init__(self) -> None:
        if self.type not in MOUNT_TYPES:
            raise ValueError(f"unsupported mount type: {self.type!r}")
        if self.target_type not in TARGET_TYPES:
            raise ValueError(f"unsupported target type: {self.target_type!r}")


@dataclass
class ClientMountSpec:
    """Desired state of a client mount."""

    node: str
    desired_state: ClientMountState
    mounts: list[ClientMountInfo]

    def __post_init__(self) -> None:
        self.desired_state = ClientMountState(self.desired_state)
        if not self.mounts:
            raise ValueError("a client mount needs at least one mount")


@dataclass
class ClientMountInfoStatus:
    """Status of a single mount point."""

    state: ClientMountState
    ready: bool = False

    def __post_init__(self) -> None:
        self.state = ClientMountState(self.state)


@dataclass
class ClientMountStatus(ResourceError):
    """Observed state of a client mount."""

    mounts: list[ClientMountInfoStatus] = field(default_factory=list)


@dataclass(kw_only=True)
class ClientMount:
    """A client mount resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: ClientMountSpec
    status: ClientMountStatus = field(default_factory=ClientMountStatus)