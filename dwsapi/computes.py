"""Computes resource: the compute nodes assigned to a workflow."""

from __future__ import annotations

from dataclasses import dataclass, field

from dwsapi.meta import ObjectMeta


@dataclass
class ComputesData:
    """A compute node assigned to a workflow."""

    name: str


@dataclass
class Computes:
    """A computes resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    data: list[ComputesData] = field(default_factory=list)

    def names(self) -> list[str]:
        """Names of the assigned compute nodes, in order."""
        return [compute.name for compute in self.data]