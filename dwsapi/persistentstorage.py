"""PersistentStorageInstance resource: storage that outlives a single job."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from dwsapi.meta import ObjectMeta, ObjectReference
from dwsapi.resource_error import ResourceError

PERSISTENT_STORAGE_NAME_LABEL = "dataworkflowservices.github.io/persistentstorage.name"
PERSISTENT_STORAGE_NAMESPACE_LABEL = "dataworkflowservices.github.io/persistentstorage.namespace"

# File system types a persistent storage instance may be created with.
FS_TYPES = ("raw", "xfs", "gfs2", "lustre")


class PersistentStorageInstanceState(str, Enum):
    """Lifecycle state of a persistent storage instance."""

    # The resource exists but its storage and file system are not created yet.
    CREATING = "Creating"
    # The storage and file system exist and are ready for use.
    ACTIVE = "Active"
    # Destruction was requested; new reservations against it will fail.
    DESTROYING = "Destroying"

    def __str__(self) -> str:
        return self.value


@dataclass
class PersistentStorageInstanceSpec:
    """Desired state of a persistent storage instance."""

    name: str = ""
    fs_type: str = ""
    dw_directive: str = ""
    user_id: int = 0
    state: PersistentStorageInstanceState = PersistentStorageInstanceState.ACTIVE
    consumer_references: list[ObjectReference] = field(default_factory=list)


@dataclass
class PersistentStorageInstanceStatus(ResourceError):
    """Observed state of a persistent storage instance."""

    servers: ObjectReference = field(default_factory=ObjectReference)
    state: PersistentStorageInstanceState = PersistentStorageInstanceState.CREATING


@dataclass
class PersistentStorageInstance:
    """A persistent storage instance resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: PersistentStorageInstanceSpec = field(default_factory=PersistentStorageInstanceSpec)
    status: PersistentStorageInstanceStatus = field(
        default_factory=PersistentStorageInstanceStatus
    )