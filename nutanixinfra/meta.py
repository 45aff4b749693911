"""API group metadata, object metadata, conditions and the kind registry."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Iterable, NamedTuple

VERSION = "v1beta1"
GROUP_NAME = "infrastructure.cluster.x-k8s.io"

CONDITION_TRUE = "True"
CONDITION_FALSE = "False"
CONDITION_UNKNOWN = "Unknown"

CONDITION_SEVERITY_ERROR = "Error"
CONDITION_SEVERITY_WARNING = "Warning"
CONDITION_SEVERITY_INFO = "Info"
CONDITION_SEVERITY_NONE = ""

READY_CONDITION = "Ready"

# Condition reasons and types.
DELETION_FAILED = "DeletionFailed"
VOLUME_GROUP_DETACH_FAILED = "VolumeGroupDetachFailed"

FAILURE_DOMAINS_RECONCILED = "FailureDomainsReconciled"
NO_FAILURE_DOMAINS_RECONCILED = "NoFailureDomainsReconciled"
FAILURE_DOMAINS_RECONCILIATION_FAILED = "FailureDomainsReconciliationFailed"

CLUSTER_CATEGORY_CREATED_CONDITION = "ClusterCategoryCreated"
CLUSTER_CATEGORY_CREATION_FAILED = "ClusterCategoryCreationFailed"

PRISM_CENTRAL_CLIENT_CONDITION = "PrismClientInit"
PRISM_CENTRAL_V4_CLIENT_CONDITION = "PrismClientV4Init"
PRISM_CENTRAL_CLIENT_INITIALIZATION_FAILED = "PrismClientInitFailed"
PRISM_CENTRAL_V4_CLIENT_INITIALIZATION_FAILED = "PrismClientV4InitFailed"

VM_PROVISIONED_CONDITION = "VMProvisioned"
VM_PROVISIONED_TASK_FAILED = "FailedVMTask"
VM_ADDRESSES_ASSIGNED_CONDITION = "VMAddressesAssigned"
VM_ADDRESSES_FAILED = "VMAddressesFailed"
VM_BOOT_TYPE_INVALID = "VMBootTypeInvalid"
CLUSTER_INFRASTRUCTURE_NOT_READY = "ClusterInfrastructureNotReady"
BOOTSTRAP_DATA_NOT_READY = "BootstrapDataNotReady"
CONTROLPLANE_NOT_INITIALIZED = "ControlplaneNotInitialized"

PROJECT_ASSIGNED_CONDITION = "ProjectAssigned"
PROJECT_ASSIGNATION_FAILED = "ProjectAssignationFailed"

CREDENTIAL_REF_SECRET_OWNER_SET_CONDITION = "CredentialRefSecretOwnerSet"
CREDENTIAL_REF_SECRET_OWNER_SET_FAILED = "CredentialRefSecretOwnerSetFailed"
TRUST_BUNDLE_SECRET_OWNER_SET_CONDITION = "TrustBundleSecretOwnerSet"
TRUST_BUNDLE_SECRET_OWNER_SET_FAILED = "TrustBundleSecretOwnerSetFailed"


class _GroupVersionKind(NamedTuple):
    group: str
    version: str
    kind: str

    def __str__(self) -> str:
        return f"{self.group}/{self.version}, Kind={self.kind}"


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with one of its versions."""

    group: str
    version: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    def with_kind(self, kind: str) -> _GroupVersionKind:
        """Return the group, version and kind as one identifier."""
        return _GroupVersionKind(self.group, self.version, kind)

    def __str__(self) -> str:
        return self.api_version


GROUP_VERSION = GroupVersion(GROUP_NAME, VERSION)


@dataclass
class ObjectMeta:
    """Standard metadata carried by every stored object."""

    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.name:
            data["name"] = self.name
        if self.namespace:
            data["namespace"] = self.namespace
        if self.labels:
            data["labels"] = dict(self.labels)
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ObjectMeta":
        data = data or {}
        return cls(
            name=data.get("name", ""),
            namespace=data.get("namespace", ""),
            labels=dict(data.get("labels") or {}),
            annotations=dict(data.get("annotations") or {}),
        )


def _format_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _parse_time(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass
class Condition:
    """The observed state of one aspect of an object."""

    type: str
    status: str
    severity: str = CONDITION_SEVERITY_NONE
    reason: str = ""
    message: str = ""
    last_transition_time: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type, "status": self.status}
        if self.severity:
            data["severity"] = self.severity
        if self.last_transition_time is not None:
            data["lastTransitionTime"] = _format_time(self.last_transition_time)
        if self.reason:
            data["reason"] = self.reason
        if self.message:
            data["message"] = self.message
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Condition":
        try:
            ctype = data["type"]
            status = data["status"]
        except KeyError as exc:
            raise ValueError(f"condition is missing required field {exc.args[0]!r}") from None
        ltt = data.get("lastTransitionTime")
        return cls(
            type=ctype,
            status=status,
            severity=data.get("severity", ""),
            reason=data.get("reason", ""),
            message=data.get("message", ""),
            last_transition_time=_parse_time(ltt) if ltt else None,
        )


def find_condition(conditions: Iterable[Condition], condition_type: str) -> Condition | None:
    """Return the condition of the given type, or None."""
    return next((c for c in conditions if c.type == condition_type), None)


def _same_state(a: Condition, b: Condition) -> bool:
    return (a.status, a.reason, a.severity, a.message) == (
        b.status,
        b.reason,
        b.severity,
        b.message,
    )


def _condition_order(condition: Condition) -> tuple[bool, str]:
    return (condition.type != READY_CONDITION, condition.type)


def set_condition(conditions: Iterable[Condition], condition: Condition) -> list[Condition]:
    """Return a new list with the condition added or replaced.

    The transition time is kept when the state did not change and set to now
    otherwise. The Ready condition sorts first, the rest by type.
    """
    current = list(conditions)
    existing = find_condition(current, condition.type)
    if existing is not None and _same_state(existing, condition):
        condition = replace(condition, last_transition_time=existing.last_transition_time)
    else:
        now = datetime.now(timezone.utc).replace(microsecond=0)
        condition = replace(condition, last_transition_time=now)
    result = [c for c in current if c.type != condition.type]
    result.append(condition)
    result.sort(key=_condition_order)
    return result


class SchemeBuilder:
    """Registry of the object types that belong to one group version."""

    def __init__(self, group_version: GroupVersion = GROUP_VERSION) -> None:
        self.group_version = group_version
        self._types: dict[str, type] = {}

    def register(self, *args: type) -> None:
        """Register types under their class names as kinds."""
        for obj_type in args:
            kind = obj_type.__name__
            known = self._types.get(kind)
            if known is not None and known is not obj_type:
                raise ValueError(
                    f"kind {kind!r} is already registered to a different type "
                    f"in {self.group_version}"
                )
            self._types[kind] = obj_type

    def lookup(self, kind: str) -> type:
        """Return the type registered for a kind."""
        try:
            return self._types[kind]
        except KeyError:
            raise KeyError(f"no kind {kind!r} is registered in {self.group_version}") from None

    def kinds(self) -> list[str]:
        """Return the registered kinds in registration order."""
        return list(self._types)


SCHEME_BUILDER = SchemeBuilder(GROUP_VERSION)