from datetime import datetime, timedelta, timezone

import pytest

from imagereflector.conditions import (
    READY_CONDITION,
    RECONCILIATION_FAILED_REASON,
    RECONCILIATION_SUCCEEDED_REASON,
    ConditionStatus,
)
from imagereflector.objects import (
    AccessFrom,
    LocalObjectReference,
    NamespacedObjectReference,
    ObjectMeta,
    ReconcileRequestStatus,
)
from imagereflector.v1beta1 import (
    IMAGE_POLICY_KIND,
    IMAGE_REPOSITORY_KIND,
    AlphabeticalPolicy,
    ImagePolicy,
    ImagePolicyChoice,
    ImagePolicyList,
    ImagePolicySpec,
    ImagePolicyStatus,
    ImageRepository,
    ImageRepositoryList,
    ImageRepositorySpec,
    ImageRepositoryStatus,
    NumericalPolicy,
    ScanResult,
    SemVerPolicy,
    TagFilter,
    build_scheme,
    set_image_policy_readiness,
    set_image_repository_readiness,
)


def _policy():
    return ImagePolicy(
        metadata=ObjectMeta(name="app", namespace="default", generation=3),
        spec=ImagePolicySpec(
            image_repository_ref=NamespacedObjectReference(name="repo"),
            policy=ImagePolicyChoice(semver=SemVerPolicy(range=">=1.0.0")),
            filter_tags=TagFilter(pattern="^v(?P<version>.*)$", extract="$version"),
        ),
        status=ImagePolicyStatus(latest_image="repo:v1.2.3"),
    )


def _repository():
    return ImageRepository(
        metadata=ObjectMeta(name="repo", namespace="default", generation=2),
        spec=ImageRepositorySpec(
            image="docker.io/library/alpine",
            interval=timedelta(minutes=5),
            timeout=timedelta(seconds=30),
            secret_ref=LocalObjectReference(name="creds"),
            cert_secret_ref=LocalObjectReference(name="certs"),
            service_account_name="scanner",
            suspend=True,
            access_from=AccessFrom(namespace_selectors=[{"team": "a"}]),
            exclusion_list=["^.*\\.sig$"],
        ),
        status=ImageRepositoryStatus(
            canonical_image_name="docker.io/library/alpine",
            last_scan_result=ScanResult(
                tag_count=4, scan_time=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
            ),
            reconcile_request=ReconcileRequestStatus("now"),
        ),
    )


def test_policy_type_meta():
    data = _policy().to_dict()
    assert data["apiVersion"] == "image.toolkit.fluxcd.io/v1beta1"
    assert data["kind"] == "ImagePolicy"


def test_policy_round_trip():
    policy = _policy()
    assert ImagePolicy.from_dict(policy.to_dict()) == policy


def test_policy_serialised_fields():
    data = _policy().to_dict()
    assert data["spec"]["imageRepositoryRef"] == {"name": "repo"}
    assert data["spec"]["policy"] == {"semver": {"range": ">=1.0.0"}}
    assert data["status"]["latestImage"] == "repo:v1.2.3"


def test_policy_order_defaults_to_asc():
    data = {
        "spec": {
            "imageRepositoryRef": {"name": "repo"},
            "policy": {"alphabetical": {}, "numerical": {}},
        }
    }
    policy = ImagePolicy.from_dict(data)
    assert policy.spec.policy.alphabetical.order == "asc"
    assert policy.spec.policy.numerical.order == "asc"


def test_invalid_order_rejected():
    with pytest.raises(ValueError):
        AlphabeticalPolicy(order="up")
    with pytest.raises(ValueError):
        NumericalPolicy(order="sideways")


def test_policy_missing_ref_rejected():
    with pytest.raises(ValueError):
        ImagePolicy.from_dict({"spec": {"policy": {}}})


def test_policy_wrong_kind_rejected():
    data = _policy().to_dict()
    data["kind"] = IMAGE_REPOSITORY_KIND
    with pytest.raises(ValueError):
        ImagePolicy.from_dict(data)


def test_policy_wrong_api_version_rejected():
    data = _policy().to_dict()
    data["apiVersion"] = "image.toolkit.fluxcd.io/v1beta2"
    with pytest.raises(ValueError):
        ImagePolicy.from_dict(data)


def test_policy_list_round_trip():
    policies = ImagePolicyList(items=[_policy(), _policy()])
    data = policies.to_dict()
    assert data["kind"] == "ImagePolicyList"
    assert ImagePolicyList.from_dict(data) == policies


def test_repository_round_trip():
    repository = _repository()
    assert ImageRepository.from_dict(repository.to_dict()) == repository


def test_repository_serialised_fields():
    data = _repository().to_dict()
    assert data["kind"] == "ImageRepository"
    assert data["spec"]["interval"] == "5m0s"
    assert data["spec"]["timeout"] == "30s"
    assert data["status"]["lastHandledReconcileAt"] == "now"
    assert data["status"]["lastScanResult"]["tagCount"] == 4


def test_repository_list_round_trip():
    repositories = ImageRepositoryList(items=[_repository()])
    assert ImageRepositoryList.from_dict(repositories.to_dict()) == repositories


def test_timeout_prefers_explicit_timeout():
    repository = _repository()
    assert repository.timeout() == repository.spec.timeout


def test_timeout_defaults_to_interval():
    repository = ImageRepository(spec=ImageRepositorySpec(interval=timedelta(minutes=5)))
    assert repository.timeout() == timedelta(minutes=5)


def test_timeout_has_one_second_minimum():
    assert ImageRepository().timeout() == timedelta(seconds=1)
    short = ImageRepository(
        spec=ImageRepositorySpec(interval=timedelta(minutes=1), timeout=timedelta(milliseconds=10))
    )
    assert short.timeout() == timedelta(seconds=1)


def test_service_account_name_length_limited():
    with pytest.raises(ValueError):
        ImageRepositorySpec(service_account_name="a" * 254)


def test_policy_readiness_sets_ready_condition():
    policy = _policy()
    set_image_policy_readiness(
        policy, ConditionStatus.TRUE, RECONCILIATION_SUCCEEDED_REASON, "ok"
    )
    assert policy.status.observed_generation == policy.metadata.generation
    assert len(policy.status.conditions) == 1
    condition = policy.status.conditions[0]
    assert condition.type == READY_CONDITION
    assert condition.status is ConditionStatus.TRUE
    assert condition.reason == RECONCILIATION_SUCCEEDED_REASON


def test_repository_readiness_updates_existing_condition():
    repository = _repository()
    set_image_repository_readiness(
        repository, ConditionStatus.TRUE, RECONCILIATION_SUCCEEDED_REASON, "ok"
    )
    set_image_repository_readiness(
        repository, "False", RECONCILIATION_FAILED_REASON, "failed"
    )
    assert repository.status.observed_generation == repository.metadata.generation
    assert len(repository.status.conditions) == 1
    condition = repository.status.conditions[0]
    assert condition.status is ConditionStatus.FALSE
    assert condition.message == "failed"


def test_scheme_decodes_registered_kinds():
    scheme = build_scheme()
    decoded = scheme.decode(_repository().to_dict())
    assert decoded == _repository()
    assert scheme.decode(_policy().to_dict()) == _policy()


def test_scheme_lookup_policy_kind():
    scheme = build_scheme()
    assert scheme.lookup("image.toolkit.fluxcd.io/v1beta1", IMAGE_POLICY_KIND) is ImagePolicy