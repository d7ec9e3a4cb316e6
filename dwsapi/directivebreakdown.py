"""DirectiveBreakdown resource: storage and compute needs of a directive."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from dwsapi.meta import ObjectMeta, ObjectReference
from dwsapi.resource_error import ResourceError

DIRECTIVE_LIFETIME_JOB = "job"
DIRECTIVE_LIFETIME_PERSISTENT = "persistent"

STORAGE_LIFETIME_PERSISTENT = "persistent"
STORAGE_LIFETIME_JOB = "job"

STORAGE_LIFETIMES = (STORAGE_LIFETIME_JOB, STORAGE_LIFETIME_PERSISTENT)

# File system uses an allocation set may be labelled with.
ALLOCATION_SET_LABELS = ("raw", "xfs", "gfs2", "mgt", "mdt", "mgtmdt", "ost", "")

COLOCATION_TYPES = ("exclusive",)

MIN_SCALE = 1
MAX_SCALE = 10


class AllocationStrategy(str, Enum):
    """How the number of allocations for an allocation set is determined."""

    ALLOCATE_PER_COMPUTE = "AllocatePerCompute"
    ALLOCATE_ACROSS_SERVERS = "AllocateAcrossServers"
    ALLOCATE_SINGLE_SERVER = "AllocateSingleServer"

    def __str__(self) -> str:
        return self.value


class ComputeLocationType(str, Enum):
    """Relationship between compute nodes and a referenced resource."""

    NETWORK = "network"
    PHYSICAL = "physical"

    def __str__(self) -> str:
        return self.value


class ComputeLocationPriority(str, Enum):
    """Whether a location constraint is mandatory or best effort."""

    MANDATORY = "mandatory"
    BEST_EFFORT = "bestEffort"

    def __str__(self) -> str:
        return self.value


@dataclass
class AllocationSetColocationConstraint:
    """How to place an allocation set relative to others sharing a key."""

    type: str
    key: str

    def __post_init__(self) -> None:
        if self.type not in COLOCATION_TYPES:
            raise ValueError(f"unsupported colocation type: {self.type!r}")


@dataclass
class AllocationSetConstraints:
    """Constraints on the storage resources used for an allocation set.

    A scale or count of zero means the value is unset.
    """

    labels: list[str] = field(default_factory=list)
    scale: int = 0
    count: int = 0
    colocation: list[AllocationSetColocationConstraint] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.scale and not MIN_SCALE <= self.scale <= MAX_SCALE:
            raise ValueError(f"scale must be between {MIN_SCALE} and {MAX_SCALE}: {self.scale}")
        if self.count < 0:
            raise ValueError(f"count must be at least 1: {self.count}")


@dataclass
class StorageAllocationSet:
    """The details of an allocation set."""

    allocation_strategy: AllocationStrategy
    minimum_capacity: int
    label: str
    constraints: AllocationSetConstraints = field(default_factory=AllocationSetConstraints)

    def __post_init__(self) -> None:
        self.allocation_strategy = AllocationStrategy(self.allocation_strategy)
        if self.minimum_capacity < 1:
            raise ValueError(f"minimum capacity must be at least 1: {self.minimum_capacity}")
        if self.label not in ALLOCATION_SET_LABELS:
            raise ValueError(f"unsupported allocation set label: {self.label!r}")


@dataclass
class StorageBreakdown:
    """Storage requirements of a directive."""

    lifetime: str
    reference: ObjectReference = field(default_factory=ObjectReference)
    allocation_sets: list[StorageAllocationSet] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.lifetime not in STORAGE_LIFETIMES:
            raise ValueError(f"unsupported lifetime: {self.lifetime!r}")


@dataclass
class ComputeLocationAccess:
    """A kind of access compute nodes must have to a resource."""

    type: ComputeLocationType
    priority: ComputeLocationPriority

    def __post_init__(self) -> None:
        self.type = ComputeLocationType(self.type)
        self.priority = ComputeLocationPriority(self.priority)


@dataclass
class ComputeLocationConstraint:
    """Constraint on which compute nodes may be used, by location."""

    access: list[ComputeLocationAccess]
    reference: ObjectReference


@dataclass
class ComputeConstraints:
    """Constraints to use when picking compute nodes."""

    location: list[ComputeLocationConstraint] = field(default_factory=list)


@dataclass
class ComputeBreakdown:
    """Compute requirements of a directive."""

    constraints: ComputeConstraints = field(default_factory=ComputeConstraints)


@dataclass
class DirectiveBreakdownSpec:
    """The directive to break down."""

    directive: str = ""
    user_id: int = 0


@dataclass
class DirectiveBreakdownStatus(ResourceError):
    """Storage and compute information derived from a directive."""

    storage: StorageBreakdown | None = None
    compute: ComputeBreakdown | None = None
    # Whether allocation sets have been generated
    ready: bool = False


@dataclass
class DirectiveBreakdown:
    """A directive breakdown resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: DirectiveBreakdownSpec = field(default_factory=DirectiveBreakdownSpec)
    status: DirectiveBreakdownStatus = field(default_factory=DirectiveBreakdownStatus)