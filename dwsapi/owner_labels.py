"""Labels that tie child resources to their owners, and child deletion."""

from __future__ import annotations

from collections.abc import Iterable, MutableMapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from dwsapi.meta import NamespacedName, ObjectMeta
from dwsapi.persistentstorage import (
    PERSISTENT_STORAGE_NAME_LABEL,
    PERSISTENT_STORAGE_NAMESPACE_LABEL,
    PersistentStorageInstance,
)
from dwsapi.workflow import (
    WORKFLOW_NAME_LABEL,
    WORKFLOW_NAMESPACE_LABEL,
    WORKFLOW_UID_LABEL,
    Workflow,
)

OWNER_KIND_LABEL = "dataworkflowservices.github.io/owner.kind"
OWNER_NAME_LABEL = "dataworkflowservices.github.io/owner.name"
OWNER_NAMESPACE_LABEL = "dataworkflowservices.github.io/owner.namespace"
OWNER_UID_LABEL = "dataworkflowservices.github.io/owner.uid"


class ChildClient(Protocol):
    """The operations on stored resources that child deletion needs."""

    def list(self, kind: type, labels: dict[str, str]) -> Sequence[Any]:
        """Return every object of ``kind`` carrying all of ``labels``."""

    def delete_all_of(self, kind: type, namespace: str, labels: dict[str, str]) -> None:
        """Delete every object of ``kind`` in ``namespace`` carrying ``labels``."""

    def delete(self, obj: Any) -> None:
        """Delete a single object."""


def _meta(obj: Any) -> ObjectMeta:
    return obj if isinstance(obj, ObjectMeta) else obj.metadata


def _kind(obj: Any) -> str:
    return type(obj).__name__


def add_owner_labels(child: Any, owner: Any) -> None:
    """Label ``child`` with the kind, name, namespace and uid of ``owner``."""
    owner_meta = _meta(owner)
    _meta(child).labels.update(
        {
            OWNER_KIND_LABEL: _kind(owner),
            OWNER_NAME_LABEL: owner_meta.name,
            OWNER_NAMESPACE_LABEL: owner_meta.namespace,
            OWNER_UID_LABEL: owner_meta.uid,
        }
    )


def matching_owner(owner: Any) -> dict[str, str]:
    """Labels that select the children of ``owner``."""
    owner_meta = _meta(owner)
    return {
        OWNER_KIND_LABEL: _kind(owner),
        OWNER_NAME_LABEL: owner_meta.name,
        OWNER_NAMESPACE_LABEL: owner_meta.namespace,
    }


def remove_owner_labels(child: Any) -> None:
    """Remove all owner labels from ``child``."""
    labels = _meta(child).labels
    for key in (OWNER_KIND_LABEL, OWNER_NAME_LABEL, OWNER_NAMESPACE_LABEL, OWNER_UID_LABEL):
        labels.pop(key, None)


def add_workflow_labels(child: Any, workflow: Workflow) -> None:
    """Label ``child`` as belonging to ``workflow``."""
    _meta(child).labels.update(
        {
            WORKFLOW_NAME_LABEL: workflow.metadata.name,
            WORKFLOW_NAMESPACE_LABEL: workflow.metadata.namespace,
            WORKFLOW_UID_LABEL: workflow.metadata.uid,
        }
    )


def matching_workflow(workflow: Workflow) -> dict[str, str]:
    """Labels that select the resources of ``workflow``."""
    return {
        WORKFLOW_NAME_LABEL: workflow.metadata.name,
        WORKFLOW_NAMESPACE_LABEL: workflow.metadata.namespace,
    }


def add_persistent_storage_labels(child: Any, persistent_storage: PersistentStorageInstance) -> None:
    """Label ``child`` as belonging to a persistent storage instance."""
    _meta(child).labels.update(
        {
            PERSISTENT_STORAGE_NAME_LABEL: persistent_storage.metadata.name,
            PERSISTENT_STORAGE_NAMESPACE_LABEL: persistent_storage.metadata.namespace,
        }
    )


def matching_persistent_storage(persistent_storage: PersistentStorageInstance) -> dict[str, str]:
    """Labels that select the resources of a persistent storage instance."""
    return {
        PERSISTENT_STORAGE_NAME_LABEL: persistent_storage.metadata.name,
        PERSISTENT_STORAGE_NAMESPACE_LABEL: persistent_storage.metadata.namespace,
    }


def inherit_parent_labels(child: Any, owner: Any) -> None:
    """Copy the labels of ``owner`` to ``child``, except its owner labels."""
    excluded = {OWNER_NAME_LABEL, OWNER_NAMESPACE_LABEL, OWNER_KIND_LABEL}
    _meta(child).labels.update(
        {key: value for key, value in _meta(owner).labels.items() if key not in excluded}
    )


@dataclass
class DeleteStatus:
    """Progress of a child deletion."""

    complete: bool = False
    objects: list[Any] = field(default_factory=list)

    def info(self) -> list[Any]:
        """Alternating keys and values describing the deletion, for logging."""
        args: list[Any] = ["complete", self.complete]
        if self.objects:
            args += ["object", str(_meta(self.objects[0]).key())]
        if len(self.objects) > 1:
            args += ["count", len(self.objects)]
        return args


def _delete_children_single(
    client: ChildClient, kind: type, labels: dict[str, str]
) -> DeleteStatus:
    objects = list(client.list(kind, labels))
    if not objects:
        return DeleteStatus(complete=True)

    namespaces = set()
    for obj in objects:
        namespaces.add(_meta(obj).namespace)
        # Wait for deletes already under way to finish.
        if _meta(obj).deletion_timestamp is not None:
            return DeleteStatus(complete=False, objects=[obj])

    if len(namespaces) == 1:
        client.delete_all_of(kind, _meta(objects[-1]).namespace, labels)
        return DeleteStatus(complete=False, objects=objects)

    first_error: BaseException | None = None
    for obj in objects:
        try:
            client.delete(obj)
        except Exception as exc:  # every object gets its delete attempted
            if first_error is None:
                first_error = exc
    if first_error is not None:
        raise first_error
    return DeleteStatus(complete=False, objects=objects)


def delete_children_with_labels(
    client: ChildClient,
    child_kinds: Iterable[type],
    parent: Any,
    matching_labels: MutableMapping[str, str],
) -> DeleteStatus:
    """Delete the children of ``parent`` that also carry ``matching_labels``.

    Kinds are handled in order; children of one kind must be fully gone
    before any of the next kind are deleted. The owner labels are added to
    ``matching_labels``. Errors from the client propagate.
    """
    matching_labels.update(matching_owner(parent))
    labels = dict(matching_labels)

    for kind in child_kinds:
        status = _delete_children_single(client, kind, labels)
        if not status.complete:
            return status

    return DeleteStatus(complete=True)


def delete_children(client: ChildClient, child_kinds: Iterable[type], parent: Any) -> DeleteStatus:
    """Delete all the children of ``parent``, one kind at a time."""
    return delete_children_with_labels(client, child_kinds, parent, {})


def owner_label_map_func(obj: Any) -> list[NamespacedName]:
    """Map an object to a request for its owner, if it has owner labels."""
    labels = _meta(obj).labels
    name = labels.get(OWNER_NAME_LABEL)
    if name is None:
        return []
    namespace = labels.get(OWNER_NAMESPACE_LABEL)
    if namespace is None:
        return []
    return [NamespacedName(name=name, namespace=namespace)]