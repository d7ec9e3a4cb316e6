# dwsapi

`dwsapi` models the resources that a Data Workflow Services deployment uses
to coordinate a workload manager (WLM) with storage drivers. It has no
dependencies outside the standard library.

## What is in it

- **Metadata** (`dwsapi.meta`): `ObjectMeta` (name, namespace, uid, labels,
  timestamps; `key()` returns a `NamespacedName`), `ObjectReference` and
  `NamespacedName`, whose string form is `namespace/name`.
- **Workflows** (`dwsapi.workflow`): `WorkflowState`, which runs Proposal,
  Setup, DataIn, PreRun, PostRun, DataOut, Teardown, with `next_state()`,
  `is_last()` and `is_after()`; the `WorkflowSpec`, `WorkflowStatus`,
  `WorkflowDriverStatus` and `Workflow` records; and `severity_to_status` and
  `severity_string_to_status`, which map Minor, Major and Fatal to Running,
  TransientCondition and Error and raise `ValueError` for anything else.
- **Resource errors** (`dwsapi.resource_error`): `ResourceErrorInfo` is an
  exception with a severity (`ResourceErrorSeverity`: Minor, Major, Fatal) and
  a type (`ResourceErrorType`: Internal, WLM, User). It is built with
  `new_resource_error` and refined with `with_error`, `with_user_message`,
  `with_fatal`, `with_major`, `with_minor`, `with_internal`, `with_wlm` and
  `with_user`. `ResourceError` holds one in a status and can log it with
  `set_resource_error_and_log`.
- **Resource states** (`dwsapi.resource`): `ResourceState` and
  `ResourceStatus`.
- **Resource types**: `ClientMount` (`dwsapi.clientmount`), `Computes`
  (`dwsapi.computes`), `DirectiveBreakdown` (`dwsapi.directivebreakdown`),
  `Servers` (`dwsapi.servers`), `Storage` (`dwsapi.storage`),
  `SystemConfiguration` (`dwsapi.systemconfiguration`, with `computes()` and
  `computes_external()`), `PersistentStorageInstance`
  (`dwsapi.persistentstorage`) and `DWDirectiveRule` with its
  `DirectiveRuleSpec` (`dwsapi.dwdirectiverule`). Fields restricted to a set
  of values are checked on construction and raise `ValueError`.
- **Owner labels** (`dwsapi.owner_labels`): `add_owner_labels`,
  `matching_owner`, `remove_owner_labels`, `add_workflow_labels`,
  `matching_workflow`, `add_persistent_storage_labels`,
  `matching_persistent_storage`, `inherit_parent_labels` and
  `owner_label_map_func`. `delete_children` and `delete_children_with_labels`
  delete the children of a parent one kind at a time through a client object
  you supply, and return a `DeleteStatus`.
- **Workflow admission** (`dwsapi.workflow_webhook`): `WorkflowWebhook`
  applies defaults (`default`) and checks creates, updates and deletes
  (`validate_create`, `validate_update`, `validate_delete`). Rejected requests
  raise `FieldError`. Directive rules are read through `RuleList.read_rules`;
  `MutatingRuleParser` registers drivers on the workflow for each matched
  directive and `ValidatingRuleParser` only checks.

## Example

```python
from dwsapi.workflow import Workflow, WorkflowState, severity_string_to_status
from dwsapi.workflow_webhook import FieldError, WorkflowWebhook

assert WorkflowState.PROPOSAL.next_state() is WorkflowState.SETUP
assert severity_string_to_status("major") == "TransientCondition"


class NoRules:
    def list(self, kind, namespace):
        return []


def accept_all(rules, directives, on_valid):
    pass


webhook = WorkflowWebhook(NoRules(), accept_all, namespace="default")

workflow = Workflow()
workflow.metadata.name = "example"
workflow.metadata.namespace = "default"
workflow.spec.desired_state = WorkflowState.PROPOSAL

webhook.default(workflow)
assert workflow.status.env["DW_WORKFLOW_NAME"] == "example"

workflow.spec.hurry = True
try:
    webhook.validate_create(workflow)
except FieldError as err:
    print(err)  # Spec.Hurry: Forbidden: the hurry flag may not be set on creation
```

## What it does not do

- It does not parse `#DW` directive strings. `WorkflowWebhook` and
  `check_directives` take a `validate` callable that matches directives to
  rules and calls back for each match; you supply it.
- It does not talk to a cluster. Reading rule sets and deleting children go
  through client objects you pass in, with `list`, `delete_all_of` and
  `delete` methods as described in the module docstrings.
- It runs no controller, admission server or command; it is a library only.
  When no namespace is given, `WorkflowWebhook` reads it from the
  `POD_NAMESPACE` environment variable.

## Running the tests

```
pip install -e .[test]
pytest
```