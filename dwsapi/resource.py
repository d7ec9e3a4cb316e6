"""State and status enumerations used by resources."""

from enum import Enum


class ResourceState(str, Enum):
    """Desired state of a resource."""

    ENABLED = "Enabled"
    DISABLED = "Disabled"

    def __str__(self) -> str:
        return self.value


class ResourceStatus(str, Enum):
    """Observed status of a resource."""

    STARTING = "Starting"
    READY = "Ready"
    DISABLED = "Disabled"
    NOT_PRESENT = "NotPresent"
    OFFLINE = "Offline"
    FAILED = "Failed"
    DEGRADED = "Degraded"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value