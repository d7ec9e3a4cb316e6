"""Workflow resource: states, spec, status and severity mapping."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from dwsapi.meta import ObjectMeta, ObjectReference
from dwsapi.resource_error import ResourceErrorSeverity

WORKFLOW_NAME_LABEL = "dataworkflowservices.github.io/workflow.name"
WORKFLOW_NAMESPACE_LABEL = "dataworkflowservices.github.io/workflow.namespace"
WORKFLOW_UID_LABEL = "dataworkflowservices.github.io/workflow.uid"

STATUS_PENDING = "Pending"
STATUS_QUEUED = "Queued"
STATUS_RUNNING = "Running"
STATUS_COMPLETED = "Completed"
STATUS_TRANSIENT_CONDITION = "TransientCondition"
STATUS_ERROR = "Error"
STATUS_DRIVER_WAIT = "DriverWait"


class WorkflowState(str, Enum):
    """The ordered states of a workflow."""

    UNSET = ""
    PROPOSAL = "Proposal"
    SETUP = "Setup"
    DATA_IN = "DataIn"
    PRE_RUN = "PreRun"
    POST_RUN = "PostRun"
    DATA_OUT = "DataOut"
    TEARDOWN = "Teardown"

    def __str__(self) -> str:
        return self.value

    def next_state(self) -> WorkflowState:
        """Return the state following this one; Teardown has none."""
        if self is WorkflowState.TEARDOWN:
            raise ValueError(f"no state follows {self.value}")
        members = list(WorkflowState)
        return members[members.index(self) + 1]

    def is_last(self) -> bool:
        return self is WorkflowState.TEARDOWN

    def is_after(self, other: WorkflowState) -> bool:
        """Report whether this state comes after ``other``."""
        state = WorkflowState(other)
        while not state.is_last():
            state = state.next_state()
            if state is self:
                return True
        return False


_SEVERITY_STATUS = {
    ResourceErrorSeverity.MINOR: STATUS_RUNNING,
    ResourceErrorSeverity.MAJOR: STATUS_TRANSIENT_CONDITION,
    ResourceErrorSeverity.FATAL: STATUS_ERROR,
}


def severity_to_status(severity: ResourceErrorSeverity | str) -> str:
    """Return the workflow status string for a severity."""
    try:
        return _SEVERITY_STATUS[ResourceErrorSeverity(severity)]
    except ValueError:
        raise ValueError(f"unknown severity: {severity}") from None


def severity_string_to_status(severity: str) -> str:
    """Like severity_to_status, case-insensitive, with '' meaning minor."""
    lowered = str(severity).lower()
    if lowered in ("", "minor"):
        return severity_to_status(ResourceErrorSeverity.MINOR)
    if lowered == "major":
        return severity_to_status(ResourceErrorSeverity.MAJOR)
    if lowered == "fatal":
        return severity_to_status(ResourceErrorSeverity.FATAL)
    raise ValueError(f"unknown severity: {severity}")


@dataclass
class WorkflowSpec:
    """Desired state of a workflow."""

    desired_state: WorkflowState = WorkflowState.UNSET
    wlm_id: str = ""
    job_id: int | str = 0
    user_id: int = 0
    group_id: int = 0
    hurry: bool = False
    dw_directives: list[str] = field(default_factory=list)


@dataclass
class WorkflowDriverStatus:
    """Status reported by an integration driver."""

    driver_id: str = ""
    task_id: str = ""
    dwd_index: int = 0
    watch_state: WorkflowState = WorkflowState.UNSET
    last_hb: int = 0
    completed: bool = False
    status: str = ""
    message: str = ""
    error: str = ""
    complete_time: datetime | None = None


@dataclass
class WorkflowStatus:
    """Observed state of a workflow."""

    state: WorkflowState = WorkflowState.UNSET
    ready: bool = False
    status: str = ""
    message: str = ""
    env: dict[str, str] = field(default_factory=dict)
    drivers: list[WorkflowDriverStatus] = field(default_factory=list)
    directive_breakdowns: list[ObjectReference] = field(default_factory=list)
    computes: ObjectReference = field(default_factory=ObjectReference)
    desired_state_change: datetime | None = None
    ready_change: datetime | None = None
    elapsed_time_last_state: str = ""


@dataclass
class Workflow:
    """A workflow resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: WorkflowSpec = field(default_factory=WorkflowSpec)
    status: WorkflowStatus = field(default_factory=WorkflowStatus)