# imagereflector

Typed Python models for two resources in the `image.toolkit.fluxcd.io` API
group. An `ImageRepository` describes an image repository to be scanned for
tags. An `ImagePolicy` describes how the latest image is selected from those
tags. The package covers both API versions, `v1beta1` and `v1beta2`.

It has no runtime dependencies.

## What is in it

- `imagereflector.v1beta1` and `imagereflector.v1beta2`: dataclasses for the
  specs, statuses, objects and list types (`ImageRepository`,
  `ImageRepositoryList`, `ImagePolicy`, `ImagePolicyList` and their parts).
  Each object and list type has `to_dict()` and `from_dict()`. These convert
  to and from plain dictionaries in the shape of the JSON documents.
  `from_dict` raises `ValueError` when the document names another `apiVersion`
  or `kind`. Each module has a `build_scheme()` that registers its four kinds.
- `imagereflector.conditions`: `Condition`, `ConditionStatus`, the reason
  constants such as `RECONCILIATION_SUCCEEDED_REASON`, and the functions
  `find_status_condition`, `set_status_condition` and
  `remove_status_condition`.
- `imagereflector.scheme`: `GroupVersion`, `GroupVersionKind` and `Scheme`.
  A `Scheme` maps an `apiVersion` and `kind` to a class and decodes documents
  with it. `V1BETA1` and `V1BETA2` are the two group versions.
- `imagereflector.objects`: `ObjectMeta`, `ListMeta`, `LocalObjectReference`,
  `NamespacedObjectReference`, `AccessFrom` and `ReconcileRequestStatus`.
- `imagereflector.duration`: `parse_duration` and `format_duration` for
  duration strings such as `"1m30s"`, and `parse_timestamp` and
  `format_timestamp` for RFC 3339 timestamps in UTC.

## Installation

```
pip install .
```

## Usage

Decode a document into the right class:

```python
from imagereflector import v1beta2

scheme = v1beta2.build_scheme()
repo = scheme.decode({
    "apiVersion": "image.toolkit.fluxcd.io/v1beta2",
    "kind": "ImageRepository",
    "metadata": {"name": "podinfo", "namespace": "default"},
    "spec": {"image": "ghcr.io/example/podinfo", "interval": "5m"},
})

repo.timeout()         # spec.timeout, else spec.interval; never under 1 second
repo.exclusion_list()  # ["^.*\\.sig$"] unless the spec gives its own list
repo.provider()        # "generic" unless the spec names a provider
repo.requeue_after()   # spec.interval
```

`Scheme.lookup` raises `UnknownKindError`, a `KeyError`, for a kind that is
not registered. `Scheme.decode` raises `ValueError` when the document has no
`apiVersion` or `kind`.

On a `v1beta2.ImagePolicy`, `digest_reflection_policy()` returns
`ReflectionPolicy.NEVER` when the spec does not set one. `interval()` returns
the spec's interval only when the policy is `ALWAYS`, and zero otherwise.
`ImagePolicySpec` requires an `interval` when the policy is `ALWAYS` and
rejects one otherwise. `ImageRef` formats as `name:tag`, or as
`name:tag@digest` when a digest is set.

Report readiness on a `v1beta1` object:

```python
from imagereflector import v1beta1
from imagereflector.conditions import RECONCILIATION_SUCCEEDED_REASON, ConditionStatus

policy = v1beta1.ImagePolicy.from_dict({
    "metadata": {"name": "podinfo", "generation": 2},
    "spec": {
        "imageRepositoryRef": {"name": "podinfo"},
        "policy": {"semver": {"range": ">=1.0.0"}},
    },
})
v1beta1.set_image_policy_readiness(
    policy, ConditionStatus.TRUE, RECONCILIATION_SUCCEEDED_REASON, "latest image found"
)
policy.status.observed_generation  # 2
```

`set_status_condition` adds or updates a condition in place and returns
whether anything changed. The transition time moves only when the status
changes.

Durations:

```python
from datetime import timedelta
from imagereflector.duration import format_duration, parse_duration

parse_duration("1h30m")                 # timedelta(hours=1, minutes=30)
format_duration(timedelta(hours=1))     # "1h0m0s"
```

`parse_duration` drops precision finer than a microsecond. It raises
`ValueError` for text it cannot read.

Some values are checked when the objects are built. Sort orders must be `asc`
or `desc`. Service account names may have at most 253 characters. In
`v1beta2`, the provider must be one of `generic`, `aws`, `azure` or `gcp`,
and the exclusion list may hold at most 25 patterns.

## What it does not do

The package only models the resources. It does not connect to a cluster or
to an image registry. It does not scan repositories for tags. It does not
filter, sort or select tags by a policy, and it does not store anything.

## Running the tests

```
pip install ".[test]"
pytest
```