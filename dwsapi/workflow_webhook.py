"""Admission checks and defaults for Workflow resources."""

from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Callable, Sequence
from typing import Any, Protocol

from dwsapi.dwdirectiverule import DirectiveRuleSpec, DWDirectiveRule
from dwsapi.workflow import STATUS_COMPLETED, STATUS_PENDING, Workflow, WorkflowDriverStatus, WorkflowState

log = logging.getLogger(__name__)

FIELD_INVALID = "Invalid value"
FIELD_FORBIDDEN = "Forbidden"
FIELD_INTERNAL = "Internal error"

OnValidDirective = Callable[[int, DirectiveRuleSpec], None]
DirectiveValidator = Callable[[Sequence[DirectiveRuleSpec], Sequence[str], OnValidDirective], None]


class RuleClient(Protocol):
    """Source of stored directive rule sets."""

    def list(self, kind: type, namespace: str) -> Sequence[Any]:
        """Return every object of ``kind`` in ``namespace``."""


class FieldError(Exception):
    """A rejected field of a resource."""

    def __init__(self, type: str, field: str, detail: str, value: Any = None) -> None:
        self.type = type
        self.field = field
        self.detail = detail
        self.value = value
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.type == FIELD_INVALID:
            value = f'"{self.value}"' if isinstance(self.value, str) else str(self.value)
            return f"{self.field}: {self.type}: {value}: {self.detail}"
        return f"{self.field}: {self.type}: {self.detail}"


class RuleList:
    """Directive rules read from the stored rule sets."""

    def __init__(self) -> None:
        self.rules: list[DirectiveRuleSpec] = []

    def read_rules(self, client: RuleClient, namespace: str) -> None:
        """Load every rule of every rule set in ``namespace``.

        A rule without a driver label takes the name of its rule set.
        """
        rule_sets = list(client.list(DWDirectiveRule, namespace))
        if not rule_sets:
            raise LookupError(f"unable to find ruleset in namespace: {namespace}")

        self.rules = [
            rule if rule.driver_label else dataclasses.replace(rule, driver_label=rule_set.metadata.name)
            for rule_set in rule_sets
            for rule in rule_set.spec
        ]

    def matched_directive(self, workflow: Workflow, watch_states: str, index: int, label: str) -> None:
        raise NotImplementedError


class MutatingRuleParser(RuleList):
    """Registers drivers on the workflow for every matched directive."""

    def matched_directive(self, workflow: Workflow, watch_states: str, index: int, label: str) -> None:
        if not watch_states:
            return

        registered = {
            driver.watch_state
            for driver in workflow.status.drivers
            if driver.dwd_index == index and driver.driver_id == label
        }

        for name in watch_states.split(","):
            state = WorkflowState(name)
            if state in registered:
                continue
            workflow.status.drivers.append(
                WorkflowDriverStatus(
                    driver_id=label,
                    dwd_index=index,
                    watch_state=state,
                    status=STATUS_PENDING,
                )
            )
            log.info("Registering driver: Driver=%s Watch state=%s", label, state)


class ValidatingRuleParser(RuleList):
    """Checks directives against the rules without changing the workflow."""

    def matched_directive(self, workflow: Workflow, watch_states: str, index: int, label: str) -> None:
        return None


def _forbidden_immutable(name: str) -> FieldError:
    return FieldError(FIELD_FORBIDDEN, f"Spec.{name}", "field is immutable")


def validate_workflow_immutable(new_workflow: Workflow, old_workflow: Workflow) -> None:
    """Raise FieldError if an immutable spec field changed."""
    new, old = new_workflow.spec, old_workflow.spec
    for name, changed in (
        ("WLMID", new.wlm_id != old.wlm_id),
        ("JobID", new.job_id != old.job_id),
        ("UserID", new.user_id != old.user_id),
        ("GroupID", new.group_id != old.group_id),
        ("DWDirectives", list(new.dw_directives) != list(old.dw_directives)),
    ):
        if changed:
            raise _forbidden_immutable(name)


def check_directives(
    workflow: Workflow,
    rule_parser: RuleList,
    client: RuleClient,
    namespace: str,
    validate: DirectiveValidator,
) -> None:
    """Validate the workflow's directives against the stored rules."""
    if not workflow.spec.dw_directives:
        return

    rule_parser.read_rules(client, namespace)

    def on_valid(index: int, rule: DirectiveRuleSpec) -> None:
        rule_parser.matched_directive(workflow, rule.watch_states, index, rule.driver_label)

    validate(rule_parser.rules, workflow.spec.dw_directives, on_valid)


class WorkflowWebhook:
    """Defaulting and validation of workflows on create, update and delete."""

    def __init__(
        self,
        client: RuleClient,
        validate: DirectiveValidator,
        namespace: str | None = None,
    ) -> None:
        self.client = client
        self.validate = validate
        self.namespace = os.environ.get("POD_NAMESPACE", "") if namespace is None else namespace

    def default(self, workflow: Workflow) -> None:
        """Register drivers for the directives and set the workflow environment."""
        log.info("default: name=%s", workflow.metadata.name)
        try:
            check_directives(workflow, MutatingRuleParser(), self.client, self.namespace, self.validate)
        except Exception:  # directive errors are reported by validation
            pass

        workflow.status.env["DW_WORKFLOW_NAME"] = workflow.metadata.name
        workflow.status.env["DW_WORKFLOW_NAMESPACE"] = workflow.metadata.namespace

    def validate_create(self, workflow: Workflow) -> list[str]:
        """Check a new workflow; return warnings or raise."""
        if workflow.spec.desired_state != WorkflowState.PROPOSAL:
            raise FieldError(
                FIELD_INVALID,
                "Spec.DesiredState",
                f"desired state must start in {WorkflowState.PROPOSAL.value}",
                str(workflow.spec.desired_state),
            )
        if workflow.spec.hurry:
            raise FieldError(FIELD_FORBIDDEN, "Spec.Hurry", "the hurry flag may not be set on creation")
        if workflow.status.state != WorkflowState.UNSET:
            raise FieldError(FIELD_FORBIDDEN, "Status.State", "the status state may not be set on creation")

        check_directives(workflow, ValidatingRuleParser(), self.client, self.namespace, self.validate)
        return []

    def validate_update(self, workflow: Workflow, old: Any) -> list[str]:
        """Check a change to a workflow; return warnings or raise."""
        if not isinstance(old, Workflow):
            log.error("old object is not a Workflow resource")
            raise TypeError("invalid Workflow resource")

        if workflow.spec.hurry and workflow.spec.desired_state != WorkflowState.TEARDOWN:
            raise FieldError(
                FIELD_INVALID,
                "Spec.Hurry",
                f"the hurry flag may be set only in {WorkflowState.TEARDOWN.value}",
                workflow.spec.hurry,
            )

        validate_workflow_immutable(workflow, old)

        # The controller's initial setup moves the status to Proposal.
        if old.status.state == WorkflowState.UNSET and workflow.spec.desired_state == WorkflowState.PROPOSAL:
            return []

        for i, driver in enumerate(workflow.status.drivers):
            old_driver = old.status.drivers[i] if i < len(old.status.drivers) else None

            def driver_error(detail: str, i: int = i) -> FieldError:
                return FieldError(FIELD_INTERNAL, f"Status.Drivers[{i}]", detail)

            if driver.watch_state != old.status.state:
                if old_driver != driver:
                    raise driver_error("driver entry for non-current state cannot be changed")
                continue

            if driver.completed:
                if driver.status != STATUS_COMPLETED:
                    raise driver_error("driver cannot be completed without status=Completed")
                if driver.error:
                    raise driver_error("driver cannot be completed when error is present")
            elif old_driver is not None and old_driver.completed:
                raise driver_error("driver cannot change from completed state")

        old_state = WorkflowState(old.status.state)
        new_state = WorkflowState(workflow.spec.desired_state)

        if new_state == WorkflowState.TEARDOWN or new_state == old_state:
            return []

        if old_state.is_after(new_state):
            raise FieldError(
                FIELD_INVALID, "Spec.DesiredState", "DesiredState cannot progress backwards", new_state.value
            )
        if old_state.next_state() != new_state:
            raise FieldError(FIELD_INVALID, "Spec.DesiredState", "states cannot be skipped", new_state.value)
        if not old.status.ready:
            raise FieldError(
                FIELD_INVALID, "Status.State", "current desired state not yet achieved", old_state.value
            )
        return []

    def validate_delete(self, workflow: Workflow) -> list[str]:
        """Deletion is always allowed."""
        return []