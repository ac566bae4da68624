"""Object metadata and references shared by the image API types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ObjectMeta:
    """Identity and bookkeeping fields of a stored object."""

    name: str = ""
    namespace: str = ""
    generation: int = 0
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = {
            "name": self.name,
            "namespace": self.namespace,
            "generation": self.generation,
            "labels": dict(self.labels),
            "annotations": dict(self.annotations),
        }
        return {key: value for key, value in data.items() if value}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ObjectMeta:
        data = data or {}
        return cls(
            name=data.get("name", ""),
            namespace=data.get("namespace", ""),
            generation=int(data.get("generation", 0)),
            labels=dict(data.get("labels") or {}),
            annotations=dict(data.get("annotations") or {}),
        )


@dataclass
class ListMeta:
    """Metadata of a list of objects."""

    resource_version: str = ""
    continue_token: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = {"resourceVersion": self.resource_version, "continue": self.continue_token}
        return {key: value for key, value in data.items() if value}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ListMeta:
        data = data or {}
        return cls(data.get("resourceVersion", ""), data.get("continue", ""))


def _required_name(data: dict[str, Any] | None) -> str:
    name = (data or {}).get("name")
    if not name:
        raise ValueError("object reference requires a name")
    return name


@dataclass
class LocalObjectReference:
    """A reference to an object in the same namespace."""

    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LocalObjectReference:
        return cls(_required_name(data))


@dataclass
class NamespacedObjectReference:
    """A reference to an object, optionally in another namespace."""

    name: str
    namespace: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = {"name": self.name}
        if self.namespace:
            data["namespace"] = self.namespace
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NamespacedObjectReference:
        return cls(_required_name(data), data.get("namespace", ""))


@dataclass
class AccessFrom:
    """Namespace label selectors that may refer to an object across namespaces."""

    namespace_selectors: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "namespaceSelectors": [
                {"matchLabels": dict(labels)} if labels else {}
                for labels in self.namespace_selectors
            ]
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> AccessFrom:
        selectors = (data or {}).get("namespaceSelectors") or []
        return cls([dict(s.get("matchLabels") or {}) for s in selectors])


@dataclass
class ReconcileRequestStatus:
    """The last reconcile request the controller handled."""

    last_handled_reconcile_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        if not self.last_handled_reconcile_at:
            return {}
        return {"lastHandledReconcileAt": self.last_handled_reconcile_at}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ReconcileRequestStatus:
        return cls((data or {}).get("lastHandledReconcileAt", ""))