"""API group versions and a registry mapping kinds to object types.

The image API group reflects metadata from OCI image repositories so it
can be consulted for automation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

IMAGE_GROUP = "image.toolkit.fluxcd.io"


@dataclass(frozen=True)
class GroupVersion:
    """An API group and version."""

    group: str
    version: str

    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    def with_kind(self, kind: str) -> GroupVersionKind:
        return GroupVersionKind(self.group, self.version, kind)

    @classmethod
    def parse(cls, api_version: str) -> GroupVersion:
        if not api_version:
            raise ValueError("empty apiVersion")
        parts = api_version.split("/")
        if len(parts) == 1:
            return cls("", parts[0])
        if len(parts) == 2:
            return cls(parts[0], parts[1])
        raise ValueError(f"unexpected apiVersion {api_version!r}")

    def __str__(self) -> str:
        return self.api_version()


@dataclass(frozen=True)
class GroupVersionKind:
    """An API group, version and kind."""

    group: str
    version: str
    kind: str

    @property
    def group_version(self) -> GroupVersion:
        return GroupVersion(self.group, self.version)


V1BETA1 = GroupVersion(IMAGE_GROUP, "v1beta1")
V1BETA2 = GroupVersion(IMAGE_GROUP, "v1beta2")


class UnknownKindError(KeyError):
    """Raised when a kind is not registered in a scheme."""


class Scheme:
    """Maps group-version-kinds to the classes that decode them."""

    def __init__(self) -> None:
        self._types: dict[GroupVersionKind, type] = {}

    def register(self, group_version: GroupVersion, kind: str, cls: type) -> None:
        gvk = group_version.with_kind(kind)
        existing = self._types.get(gvk)
        if existing is not None and existing is not cls:
            raise ValueError(
                f"{kind} in {group_version} is already registered to {existing.__name__}"
            )
        self._types[gvk] = cls

    def lookup(self, api_version: str, kind: str) -> type:
        gvk = GroupVersion.parse(api_version).with_kind(kind)
        try:
            return self._types[gvk]
        except KeyError:
            raise UnknownKindError(f"no kind {kind!r} registered for {api_version!r}") from None

    def decode(self, data: dict[str, Any]) -> Any:
        api_version = data.get("apiVersion")
        kind = data.get("kind")
        if not api_version or not kind:
            raise ValueError("object has no apiVersion or kind")
        return self.lookup(api_version, kind).from_dict(data)

    def known_kinds(self, group_version: GroupVersion) -> list[str]:
        return sorted(
            gvk.kind for gvk in self._types if gvk.group_version == group_version
        )