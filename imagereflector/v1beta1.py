"""Image policy and image repository types of the v1beta1 API version."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from .conditions import READY_CONDITION, Condition, ConditionStatus, set_status_condition
from .duration import format_duration, format_timestamp, parse_duration, parse_timestamp
from .objects import (
    AccessFrom,
    ListMeta,
    LocalObjectReference,
    NamespacedObjectReference,
    ObjectMeta,
    ReconcileRequestStatus,
)
from .scheme import V1BETA1, Scheme

IMAGE_POLICY_KIND = "ImagePolicy"
IMAGE_POLICY_LIST_KIND = "ImagePolicyList"
IMAGE_POLICY_FINALIZER = "finalizers.fluxcd.io"
IMAGE_REPOSITORY_KIND = "ImageRepository"
IMAGE_REPOSITORY_LIST_KIND = "ImageRepositoryList"
IMAGE_REPOSITORY_FINALIZER = "finalizers.fluxcd.io"

_ORDERS = ("asc", "desc")
_MIN_TIMEOUT = timedelta(seconds=1)
_MAX_SERVICE_ACCOUNT_NAME = 253


def _check_type_meta(data: dict[str, Any], kind: str) -> None:
    api_version = data.get("apiVersion")
    if api_version and api_version != V1BETA1.api_version():
        raise ValueError(
            f"expected apiVersion {V1BETA1.api_version()!r}, got {api_version!r}"
        )
    found = data.get("kind")
    if found and found != kind:
        raise ValueError(f"expected kind {kind!r}, got {found!r}")


def _type_meta(kind: str) -> dict[str, Any]:
    return {"apiVersion": V1BETA1.api_version(), "kind": kind}


def _check_order(order: str) -> None:
    if order not in _ORDERS:
        raise ValueError(f"order must be one of {_ORDERS}, not {order!r}")


@dataclass
class SemVerPolicy:
    """Selects the highest tag within a semantic version range."""

    range: str


@dataclass
class AlphabeticalPolicy:
    """Orders tags alphabetically; ascending selects the last one."""

    order: str = "asc"

    def __post_init__(self) -> None:
        _check_order(self.order)


@dataclass
class NumericalPolicy:
    """Orders tags numerically; ascending selects the largest."""

    order: str = "asc"

    def __post_init__(self) -> None:
        _check_order(self.order)


@dataclass
class ImagePolicyChoice:
    """The policy used to select the latest image; one of the fields is set."""

    semver: SemVerPolicy | None = None
    alphabetical: AlphabeticalPolicy | None = None
    numerical: NumericalPolicy | None = None


@dataclass
class TagFilter:
    """A regular expression to filter tags and a capture to extract from them."""

    pattern: str = ""
    extract: str = ""


@dataclass
class ImagePolicySpec:
    """The parameters for calculating an image policy."""

    image_repository_ref: NamespacedObjectReference
    policy: ImagePolicyChoice = field(default_factory=ImagePolicyChoice)
    filter_tags: TagFilter | None = None


@dataclass
class ImagePolicyStatus:
    """The observed state of an image policy."""

    latest_image: str = ""
    observed_generation: int = 0
    conditions: list[Condition] = field(default_factory=list)


def _conditions_from(data: dict[str, Any]) -> list[Condition]:
    return [Condition.from_dict(c) for c in data.get("conditions") or []]


def _choice_to_dict(choice: ImagePolicyChoice) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if choice.semver is not None:
        data["semver"] = {"range": choice.semver.range}
    if choice.alphabetical is not None:
        data["alphabetical"] = {"order": choice.alphabetical.order}
    if choice.numerical is not None:
        data["numerical"] = {"order": choice.numerical.order}
    return data


def _choice_from_dict(data: dict[str, Any] | None) -> ImagePolicyChoice:
    data = data or {}
    semver = data.get("semver")
    alphabetical = data.get("alphabetical")
    numerical = data.get("numerical")
    if semver is not None and "range" not in semver:
        raise ValueError("semver policy requires a range")
    return ImagePolicyChoice(
        semver=SemVerPolicy(range=semver["range"]) if semver is not None else None,
        alphabetical=(
            AlphabeticalPolicy(order=alphabetical.get("order") or "asc")
            if alphabetical is not None
            else None
        ),
        numerical=(
            NumericalPolicy(order=numerical.get("order") or "asc")
            if numerical is not None
            else None
        ),
    )


def _policy_spec_to_dict(spec: ImagePolicySpec) -> dict[str, Any]:
    data: dict[str, Any] = {
        "imageRepositoryRef": spec.image_repository_ref.to_dict(),
        "policy": _choice_to_dict(spec.policy),
    }
    if spec.filter_tags is not None:
        data["filterTags"] = {
            "pattern": spec.filter_tags.pattern,
            "extract": spec.filter_tags.extract,
        }
    return data


def _policy_spec_from_dict(data: dict[str, Any]) -> ImagePolicySpec:
    ref = data.get("imageRepositoryRef")
    if ref is None:
        raise ValueError("image policy spec requires imageRepositoryRef")
    filter_tags = data.get("filterTags")
    return ImagePolicySpec(
        image_repository_ref=NamespacedObjectReference.from_dict(ref),
        policy=_choice_from_dict(data.get("policy")),
        filter_tags=(
            TagFilter(
                pattern=filter_tags.get("pattern", ""),
                extract=filter_tags.get("extract", ""),
            )
            if filter_tags is not None
            else None
        ),
    )


def _policy_status_to_dict(status: ImagePolicyStatus) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if status.latest_image:
        data["latestImage"] = status.latest_image
    if status.observed_generation:
        data["observedGeneration"] = status.observed_generation
    if status.conditions:
        data["conditions"] = [c.to_dict() for c in status.conditions]
    return data


def _policy_status_from_dict(data: dict[str, Any] | None) -> ImagePolicyStatus:
    data = data or {}
    return ImagePolicyStatus(
        latest_image=data.get("latestImage", ""),
        observed_generation=int(data.get("observedGeneration", 0)),
        conditions=_conditions_from(data),
    )


@dataclass
class ImagePolicy:
    """Selects the latest image from a scanned image repository."""

    spec: ImagePolicySpec
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    status: ImagePolicyStatus = field(default_factory=ImagePolicyStatus)

    def to_dict(self) -> dict[str, Any]:
        data = _type_meta(IMAGE_POLICY_KIND)
        data["metadata"] = self.metadata.to_dict()
        data["spec"] = _policy_spec_to_dict(self.spec)
        data["status"] = _policy_status_to_dict(self.status)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ImagePolicy:
        _check_type_meta(data, IMAGE_POLICY_KIND)
        return cls(
            spec=_policy_spec_from_dict(data.get("spec") or {}),
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            status=_policy_status_from_dict(data.get("status")),
        )


@dataclass
class ImagePolicyList:
    """A list of image policies."""

    items: list[ImagePolicy] = field(default_factory=list)
    metadata: ListMeta = field(default_factory=ListMeta)

    def to_dict(self) -> dict[str, Any]:
        data = _type_meta(IMAGE_POLICY_LIST_KIND)
        data["metadata"] = self.metadata.to_dict()
        data["items"] = [item.to_dict() for item in self.items]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ImagePolicyList:
        _check_type_meta(data, IMAGE_POLICY_LIST_KIND)
        return cls(
            items=[ImagePolicy.from_dict(item) for item in data.get("items") or []],
            metadata=ListMeta.from_dict(data.get("metadata")),
        )


def set_image_policy_readiness(
    policy: ImagePolicy, status: ConditionStatus | str, reason: str, message: str
) -> None:
    """Record the observed generation and set the Ready condition on a policy."""
    policy.status.observed_generation = policy.metadata.generation
    set_status_condition(
        policy.status.conditions,
        Condition(type=READY_CONDITION, status=ConditionStatus(status), reason=reason, message=message),
    )


@dataclass
class ImageRepositorySpec:
    """The parameters for scanning an image repository."""

    image: str = ""
    interval: timedelta = field(default_factory=timedelta)
    timeout: timedelta | None = None
    secret_ref: LocalObjectReference | None = None
    service_account_name: str = ""
    cert_secret_ref: LocalObjectReference | None = None
    suspend: bool = False
    access_from: AccessFrom | None = None
    exclusion_list: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.service_account_name) > _MAX_SERVICE_ACCOUNT_NAME:
            raise ValueError(
                f"service account name longer than {_MAX_SERVICE_ACCOUNT_NAME} characters"
            )


@dataclass
class ScanResult:
    """The outcome of the last scan of an image repository."""

    tag_count: int = 0
    scan_time: datetime | None = None


@dataclass
class ImageRepositoryStatus:
    """The observed state of an image repository."""

    conditions: list[Condition] = field(default_factory=list)
    observed_generation: int = 0
    canonical_image_name: str = ""
    last_scan_result: ScanResult | None = None
    reconcile_request: ReconcileRequestStatus = field(
        default_factory=ReconcileRequestStatus
    )


def _repository_spec_to_dict(spec: ImageRepositorySpec) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if spec.image:
        data["image"] = spec.image
    data["interval"] = format_duration(spec.interval)
    if spec.timeout is not None:
        data["timeout"] = format_duration(spec.timeout)
    if spec.secret_ref is not None:
        data["secretRef"] = spec.secret_ref.to_dict()
    if spec.service_account_name:
        data["serviceAccountName"] = spec.service_account_name
    if spec.cert_secret_ref is not None:
        data["certSecretRef"] = spec.cert_secret_ref.to_dict()
    if spec.suspend:
        data["suspend"] = True
    if spec.access_from is not None:
        data["accessFrom"] = spec.access_from.to_dict()
    if spec.exclusion_list:
        data["exclusionList"] = list(spec.exclusion_list)
    return data


def _optional_ref(data: dict[str, Any] | None) -> LocalObjectReference | None:
    return LocalObjectReference.from_dict(data) if data is not None else None


def _repository_spec_from_dict(data: dict[str, Any]) -> ImageRepositorySpec:
    interval = data.get("interval")
    timeout = data.get("timeout")
    access_from = data.get("accessFrom")
    return ImageRepositorySpec(
        image=data.get("image", ""),
        interval=parse_duration(interval) if interval else timedelta(0),
        timeout=parse_duration(timeout) if timeout else None,
        secret_ref=_optional_ref(data.get("secretRef")),
        service_account_name=data.get("serviceAccountName", ""),
        cert_secret_ref=_optional_ref(data.get("certSecretRef")),
        suspend=bool(data.get("suspend", False)),
        access_from=AccessFrom.from_dict(access_from) if access_from is not None else None,
        exclusion_list=list(data.get("exclusionList") or []),
    )


def _repository_status_to_dict(status: ImageRepositoryStatus) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if status.conditions:
        data["conditions"] = [c.to_dict() for c in status.conditions]
    if status.observed_generation:
        data["observedGeneration"] = status.observed_generation
    if status.canonical_image_name:
        data["canonicalImageName"] = status.canonical_image_name
    if status.last_scan_result is not None:
        result: dict[str, Any] = {"tagCount": status.last_scan_result.tag_count}
        if status.last_scan_result.scan_time is not None:
            result["scanTime"] = format_timestamp(status.last_scan_result.scan_time)
        data["lastScanResult"] = result
    data.update(status.reconcile_request.to_dict())
    return data


def _repository_status_from_dict(data: dict[str, Any] | None) -> ImageRepositoryStatus:
    data = data or {}
    result = data.get("lastScanResult")
    last_scan = None
    if result is not None:
        scan_time = result.get("scanTime")
        last_scan = ScanResult(
            tag_count=int(result.get("tagCount", 0)),
            scan_time=parse_timestamp(scan_time) if scan_time else None,
        )
    return ImageRepositoryStatus(
        conditions=_conditions_from(data),
        observed_generation=int(data.get("observedGeneration", 0)),
        canonical_image_name=data.get("canonicalImageName", ""),
        last_scan_result=last_scan,
        reconcile_request=ReconcileRequestStatus.from_dict(data),
    )


@dataclass
class ImageRepository:
    """An image repository to be scanned for tags."""

    spec: ImageRepositorySpec = field(default_factory=ImageRepositorySpec)
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    status: ImageRepositoryStatus = field(default_factory=ImageRepositoryStatus)

    def timeout(self) -> timedelta:
        """The scan timeout, defaulting to the interval and at least one second."""
        duration = self.spec.timeout if self.spec.timeout is not None else self.spec.interval
        return max(duration, _MIN_TIMEOUT)

    def to_dict(self) -> dict[str, Any]:
        data = _type_meta(IMAGE_REPOSITORY_KIND)
        data["metadata"] = self.metadata.to_dict()
        data["spec"] = _repository_spec_to_dict(self.spec)
        data["status"] = _repository_status_to_dict(self.status)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ImageRepository:
        _check_type_meta(data, IMAGE_REPOSITORY_KIND)
        return cls(
            spec=_repository_spec_from_dict(data.get("spec") or {}),
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            status=_repository_status_from_dict(data.get("status")),
        )


@dataclass
class ImageRepositoryList:
    """A list of image repositories."""

    items: list[ImageRepository] = field(default_factory=list)
    metadata: ListMeta = field(default_factory=ListMeta)

    def to_dict(self) -> dict[str, Any]:
        data = _type_meta(IMAGE_REPOSITORY_LIST_KIND)
        data["metadata"] = self.metadata.to_dict()
        data["items"] = [item.to_dict() for item in self.items]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ImageRepositoryList:
        _check_type_meta(data, IMAGE_REPOSITORY_LIST_KIND)
        return cls(
            items=[ImageRepository.from_dict(item) for item in data.get("items") or []],
            metadata=ListMeta.from_dict(data.get("metadata")),
        )


def set_image_repository_readiness(
    repository: ImageRepository,
    status: ConditionStatus | str,
    reason: str,
    message: str,
) -> None:
    """Record the observed generation and set the Ready condition on a repository."""
    repository.status.observed_generation = repository.metadata.generation
    set_status_condition(
        repository.status.conditions,
        Condition(type=READY_CONDITION, status=ConditionStatus(status), reason=reason, message=message),
    )


def build_scheme() -> Scheme:
    """Return a scheme with the v1beta1 kinds registered."""
    scheme = Scheme()
    scheme.register(V1BETA1, IMAGE_POLICY_KIND, ImagePolicy)
    scheme.register(V1BETA1, IMAGE_POLICY_LIST_KIND, ImagePolicyList)
    scheme.register(V1BETA1, IMAGE_REPOSITORY_KIND, ImageRepository)
    scheme.register(V1BETA1, IMAGE_REPOSITORY_LIST_KIND, ImageRepositoryList)
    return scheme