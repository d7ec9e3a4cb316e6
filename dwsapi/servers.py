"""Servers resource: where allocations for a directive are made."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from dwsapi.meta import ObjectMeta
from dwsapi.resource_error import ResourceError


@dataclass
class ServersSpecStorage:
    """A storage resource and the number of allocations to make on it."""

    name: str
    allocation_count: int

    def __post_init__(self) -> None:
        if self.allocation_count < 1:
            raise ValueError(f"allocation count must be at least 1: {self.allocation_count}")


@dataclass
class ServersSpecAllocationSet:
    """Allocations sharing one size and one label."""

    label: str
    allocation_size: int
    storage: list[ServersSpecStorage] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.allocation_size < 1:
            raise ValueError(f"allocation size must be at least 1: {self.allocation_size}")


@dataclass
class ServersSpec:
    """Desired allocations."""

    allocation_sets: list[ServersSpecAllocationSet] = field(default_factory=list)


@dataclass
class ServersStatusStorage:
    """Status of the allocations on one storage resource."""

    allocation_size: int = 0


@dataclass
class ServersStatusAllocationSet:
    """Status of a set of allocations, keyed by storage name."""

    label: str = ""
    storage: dict[str, ServersStatusStorage] = field(default_factory=dict)


@dataclass
class ServersStatus(ResourceError):
    """Observed state of the allocations."""

    ready: bool = False
    last_update: datetime | None = None
    allocation_sets: list[ServersStatusAllocationSet] = field(default_factory=list)


@dataclass
class Servers:
    """A servers resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: ServersSpec = field(default_factory=ServersSpec)
    status: ServersStatus = field(default_factory=ServersStatus)