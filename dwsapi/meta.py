"""Object metadata and references shared by every resource kind."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

GROUP = "dataworkflowservices.github.io"
VERSION = "v1alpha2"
GROUP_VERSION = f"{GROUP}/{VERSION}"

# Kinds for which this API version is the conversion hub.
HUB_KINDS = (
    "ClientMount",
    "Computes",
    "DWDirectiveRule",
    "DirectiveBreakdown",
    "PersistentStorageInstance",
    "Servers",
    "Storage",
    "SystemConfiguration",
    "Workflow",
)


@dataclass(frozen=True)
class NamespacedName:
    """The name and namespace that together identify an object."""

    name: str
    namespace: str = ""

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass
class ObjectMeta:
    """Metadata carried by every resource."""

    name: str = ""
    namespace: str = ""
    uid: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    finalizers: list[str] = field(default_factory=list)
    creation_timestamp: datetime | None = None
    deletion_timestamp: datetime | None = None

    def key(self) -> NamespacedName:
        """Return the namespaced name identifying this object."""
        return NamespacedName(name=self.name, namespace=self.namespace)


@dataclass
class ObjectReference:
    """A reference to another resource."""

    kind: str = ""
    namespace: str = ""
    name: str = ""
    uid: str = ""
    api_version: str = ""
    resource_version: str = ""
    field_path: str = ""