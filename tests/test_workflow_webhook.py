import copy

import pytest

from dwsapi.dwdirectiverule import DirectiveRuleSpec, DWDirectiveRule
from dwsapi.meta import ObjectMeta
from dwsapi.workflow import STATUS_COMPLETED, STATUS_PENDING, Workflow, WorkflowDriverStatus, WorkflowSpec, WorkflowState
from dwsapi.workflow_webhook import (
    FIELD_FORBIDDEN,
    FIELD_INTERNAL,
    FIELD_INVALID,
    FieldError,
    MutatingRuleParser,
    RuleList,
    ValidatingRuleParser,
    WorkflowWebhook,
    check_directives,
    validate_workflow_immutable,
)


class FakeClient:
    def __init__(self, rule_sets):
        self.rule_sets = rule_sets
        self.calls = []

    def list(self, kind, namespace):
        self.calls.append((kind, namespace))
        return [r for r in self.rule_sets if r.metadata.namespace == namespace]


def fake_validate(rules, directives, on_valid):
    for index, directive in enumerate(directives):
        if not directive.startswith("#DW"):
            raise ValueError(f"invalid directive: {directive}")
        for rule in rules:
            on_valid(index, rule)


def rule_sets():
    return [
        DWDirectiveRule(
            metadata=ObjectMeta(name="dws", namespace="dws-system"),
            spec=[DirectiveRuleSpec(watch_states="Proposal,Setup")],
        )
    ]


@pytest.fixture
def webhook():
    return WorkflowWebhook(FakeClient(rule_sets()), fake_validate, namespace="dws-system")


@pytest.fixture
def workflow():
    return Workflow(
        metadata=ObjectMeta(name="w1234abcd", namespace="default"),
        spec=WorkflowSpec(desired_state=WorkflowState.PROPOSAL, dw_directives=[]),
    )


def test_default_sets_environment(webhook, workflow):
    webhook.default(workflow)
    assert workflow.status.env["DW_WORKFLOW_NAME"] == workflow.metadata.name
    assert workflow.status.env["DW_WORKFLOW_NAMESPACE"] == workflow.metadata.namespace


def test_default_registers_drivers_once(webhook, workflow):
    workflow.spec.dw_directives = ["#DW jobdw"]
    webhook.default(workflow)
    webhook.default(workflow)
    assert [(d.driver_id, d.dwd_index, d.watch_state, d.status) for d in workflow.status.drivers] == [
        ("dws", 0, WorkflowState.PROPOSAL, STATUS_PENDING),
        ("dws", 0, WorkflowState.SETUP, STATUS_PENDING),
    ]


def test_default_ignores_rule_errors(workflow):
    hook = WorkflowWebhook(FakeClient([]), fake_validate, namespace="dws-system")
    workflow.spec.dw_directives = ["#DW jobdw"]
    hook.default(workflow)
    assert workflow.status.drivers == []
    assert workflow.status.env["DW_WORKFLOW_NAME"] == workflow.metadata.name


def test_create_succeeds(webhook, workflow):
    assert webhook.validate_create(workflow) == []


def test_create_with_hurry_fails(webhook, workflow):
    workflow.spec.hurry = True
    with pytest.raises(FieldError) as info:
        webhook.validate_create(workflow)
    assert info.value.type == FIELD_FORBIDDEN
    assert info.value.field == "Spec.Hurry"


@pytest.mark.parametrize(
    "state",
    [
        WorkflowState.SETUP,
        WorkflowState.DATA_IN,
        WorkflowState.PRE_RUN,
        WorkflowState.POST_RUN,
        WorkflowState.DATA_OUT,
        WorkflowState.TEARDOWN,
    ],
)
def test_create_requires_proposal(webhook, workflow, state):
    workflow.spec.desired_state = state
    with pytest.raises(FieldError) as info:
        webhook.validate_create(workflow)
    assert info.value.type == FIELD_INVALID
    assert "desired state must start in Proposal" in str(info.value)


@pytest.mark.parametrize("state", [s for s in WorkflowState if s is not WorkflowState.UNSET])
def test_create_with_status_state_fails(webhook, workflow, state):
    workflow.status.state = state
    with pytest.raises(FieldError) as info:
        webhook.validate_create(workflow)
    assert info.value.field == "Status.State"


def test_create_without_rulesets_fails(workflow):
    hook = WorkflowWebhook(FakeClient([]), fake_validate, namespace="dws-system")
    workflow.spec.dw_directives = ["#DW jobdw"]
    with pytest.raises(LookupError, match="unable to find ruleset in namespace: dws-system"):
        hook.validate_create(workflow)


def test_create_with_invalid_directive_fails(webhook, workflow):
    workflow.spec.dw_directives = ["not a directive"]
    with pytest.raises(ValueError, match="invalid directive"):
        webhook.validate_create(workflow)


@pytest.mark.parametrize(
    "state",
    [WorkflowState.SETUP, WorkflowState.DATA_IN, WorkflowState.PRE_RUN, WorkflowState.POST_RUN, WorkflowState.DATA_OUT],
)
def test_fails_to_transition_out_of_proposal(webhook, workflow, state):
    old = copy.deepcopy(workflow)
    workflow.spec.desired_state = state
    with pytest.raises(FieldError):
        webhook.validate_update(workflow, old)


@pytest.mark.parametrize(
    "state",
    [WorkflowState.SETUP, WorkflowState.DATA_IN, WorkflowState.PRE_RUN, WorkflowState.POST_RUN, WorkflowState.DATA_OUT],
)
def test_fails_to_transition_out_of_teardown(webhook, workflow, state):
    old = copy.deepcopy(workflow)
    workflow.spec.desired_state = WorkflowState.TEARDOWN
    assert webhook.validate_update(workflow, old) == []

    old = copy.deepcopy(workflow)
    workflow.spec.desired_state = state
    with pytest.raises(FieldError):
        webhook.validate_update(workflow, old)


def test_progression_when_ready(webhook, workflow):
    workflow.status.state = WorkflowState.PROPOSAL
    workflow.status.ready = True
    old = copy.deepcopy(workflow)
    workflow.spec.desired_state = WorkflowState.SETUP
    assert webhook.validate_update(workflow, old) == []


def test_progression_not_ready(webhook, workflow):
    workflow.status.state = WorkflowState.PROPOSAL
    old = copy.deepcopy(workflow)
    workflow.spec.desired_state = WorkflowState.SETUP
    with pytest.raises(FieldError) as info:
        webhook.validate_update(workflow, old)
    assert info.value.field == "Status.State"
    assert "current desired state not yet achieved" in str(info.value)


def test_backwards_progression(webhook, workflow):
    workflow.status.state = WorkflowState.DATA_IN
    workflow.status.ready = True
    old = copy.deepcopy(workflow)
    workflow.spec.desired_state = WorkflowState.PROPOSAL
    with pytest.raises(FieldError, match="DesiredState cannot progress backwards"):
        webhook.validate_update(workflow, old)


def test_skipping_states(webhook, workflow):
    workflow.status.state = WorkflowState.PROPOSAL
    workflow.status.ready = True
    old = copy.deepcopy(workflow)
    workflow.spec.desired_state = WorkflowState.DATA_IN
    with pytest.raises(FieldError, match="states cannot be skipped"):
        webhook.validate_update(workflow, old)


def test_hurry_only_in_teardown(webhook, workflow):
    old = copy.deepcopy(workflow)
    workflow.spec.hurry = True
    with pytest.raises(FieldError) as info:
        webhook.validate_update(workflow, old)
    assert info.value.field == "Spec.Hurry"
    workflow.spec.desired_state = WorkflowState.TEARDOWN
    assert webhook.validate_update(workflow, old) == []


def test_update_requires_workflow(webhook, workflow):
    with pytest.raises(TypeError, match="invalid Workflow resource"):
        webhook.validate_update(workflow, object())


@pytest.mark.parametrize(
    "attr,value,name",
    [
        ("wlm_id", "other", "WLMID"),
        ("job_id", 99, "JobID"),
        ("user_id", 1001, "UserID"),
        ("group_id", 1001, "GroupID"),
        ("dw_directives", ["#DW jobdw"], "DWDirectives"),
    ],
)
def test_immutable_fields(workflow, attr, value, name):
    old = copy.deepcopy(workflow)
    setattr(workflow.spec, attr, value)
    with pytest.raises(FieldError) as info:
        validate_workflow_immutable(workflow, old)
    assert info.value.field == f"Spec.{name}"
    assert "field is immutable" in str(info.value)


def _with_drivers(workflow, *drivers):
    workflow.status.state = WorkflowState.PROPOSAL
    workflow.status.drivers = list(drivers)
    return workflow


def test_driver_for_other_state_cannot_change(webhook, workflow):
    _with_drivers(workflow, WorkflowDriverStatus(driver_id="d", watch_state=WorkflowState.SETUP))
    old = copy.deepcopy(workflow)
    workflow.status.drivers[0].message = "changed"
    with pytest.raises(FieldError) as info:
        webhook.validate_update(workflow, old)
    assert info.value.type == FIELD_INTERNAL
    assert info.value.field == "Status.Drivers[0]"


def test_driver_completed_requires_completed_status(webhook, workflow):
    _with_drivers(workflow, WorkflowDriverStatus(driver_id="d", watch_state=WorkflowState.PROPOSAL))
    old = copy.deepcopy(workflow)
    workflow.status.drivers[0].completed = True
    with pytest.raises(FieldError, match="without status=Completed"):
        webhook.validate_update(workflow, old)


def test_driver_completed_with_error(webhook, workflow):
    _with_drivers(workflow, WorkflowDriverStatus(driver_id="d", watch_state=WorkflowState.PROPOSAL))
    old = copy.deepcopy(workflow)
    workflow.status.drivers[0].completed = True
    workflow.status.drivers[0].status = STATUS_COMPLETED
    workflow.status.drivers[0].error = "boom"
    with pytest.raises(FieldError, match="error is present"):
        webhook.validate_update(workflow, old)


def test_driver_cannot_uncomplete(webhook, workflow):
    _with_drivers(
        workflow,
        WorkflowDriverStatus(
            driver_id="d", watch_state=WorkflowState.PROPOSAL, completed=True, status=STATUS_COMPLETED
        ),
    )
    old = copy.deepcopy(workflow)
    workflow.status.drivers[0].completed = False
    with pytest.raises(FieldError, match="cannot change from completed state"):
        webhook.validate_update(workflow, old)


def test_driver_completion_accepted(webhook, workflow):
    _with_drivers(workflow, WorkflowDriverStatus(driver_id="d", watch_state=WorkflowState.PROPOSAL))
    old = copy.deepcopy(workflow)
    workflow.status.drivers[0].completed = True
    workflow.status.drivers[0].status = STATUS_COMPLETED
    assert webhook.validate_update(workflow, old) == []


def test_validate_delete(webhook, workflow):
    assert webhook.validate_delete(workflow) == []


def test_read_rules_defaults_driver_label():
    sets = [
        DWDirectiveRule(
            metadata=ObjectMeta(name="set-a", namespace="ns"),
            spec=[DirectiveRuleSpec(), DirectiveRuleSpec(driver_label="explicit")],
        )
    ]
    rules = RuleList()
    rules.read_rules(FakeClient(sets), "ns")
    assert [r.driver_label for r in rules.rules] == ["set-a", "explicit"]
    assert sets[0].spec[0].driver_label == ""


def test_validating_parser_leaves_workflow(workflow):
    ValidatingRuleParser().matched_directive(workflow, "Proposal,Setup", 0, "d")
    assert workflow.status.drivers == []


def test_mutating_parser_ignores_empty_watch_states(workflow):
    MutatingRuleParser().matched_directive(workflow, "", 0, "d")
    assert workflow.status.drivers == []


def test_check_directives_skips_without_directives(workflow):
    client = FakeClient(rule_sets())
    check_directives(workflow, MutatingRuleParser(), client, "dws-system", fake_validate)
    assert client.calls == []


def test_check_directives_reads_rules_and_registers(workflow):
    client = FakeClient(rule_sets())
    workflow.spec.dw_directives = ["#DW a", "#DW b"]
    check_directives(workflow, MutatingRuleParser(), client, "dws-system", fake_validate)
    assert client.calls == [(DWDirectiveRule, "dws-system")]
    assert sorted({d.dwd_index for d in workflow.status.drivers}) == [0, 1]


def test_field_error_message():
    error = FieldError(FIELD_INVALID, "Spec.DesiredState", "states cannot be skipped", "DataIn")
    assert str(error) == 'Spec.DesiredState: Invalid value: "DataIn": states cannot be skipped'