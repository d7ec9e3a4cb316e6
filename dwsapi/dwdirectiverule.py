"""DWDirectiveRule resource: rules matching directives to drivers."""

from __future__ import annotations

from dataclasses import dataclass, field

from dwsapi.meta import ObjectMeta
from dwsapi.workflow import WorkflowState


@dataclass
class DirectiveRuleSpec:
    """A rule for one directive: which driver handles it and in which states.

    ``watch_states`` is a comma separated list of workflow states.
    """

    driver_label: str = ""
    watch_states: str = ""

    def watch_state_list(self) -> list[WorkflowState]:
        """The watch states as workflow states, in order."""
        if not self.watch_states:
            return []
        return [WorkflowState(state) for state in self.watch_states.split(",")]


@dataclass
class DWDirectiveRule:
    """A set of directive rules."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: list[DirectiveRuleSpec] = field(default_factory=list)