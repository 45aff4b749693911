"""NutanixCluster resources and the Prism Central endpoint they point at."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, ClassVar

from .common import NutanixResourceIdentifier
from .meta import GROUP_VERSION, SCHEME_BUILDER, Condition, ObjectMeta

NUTANIX_CLUSTER_KIND = "NutanixCluster"
NUTANIX_CLUSTER_FINALIZER = "nutanixcluster.infrastructure.cluster.x-k8s.io"
NUTANIX_CLUSTER_CREDENTIAL_FINALIZER = "nutanixcluster/infrastructure.cluster.x-k8s.io"

NAMESPACE_DEFAULT = "default"
SECRET_KIND = "Secret"
TRUST_BUNDLE_KIND_STRING = "String"
TRUST_BUNDLE_KIND_CONFIGMAP = "ConfigMap"

_FAILURE_DOMAIN_NAME = re.compile(r"[a-z0-9]([-a-z0-9]*[a-z0-9])?")
_FAILURE_DOMAIN_NAME_MAX = 64


def _type_meta(kind: str) -> dict[str, Any]:
    return {"apiVersion": GROUP_VERSION.api_version, "kind": kind}


def _check_kind(data: dict[str, Any], expected: str) -> None:
    kind = data.get("kind")
    if kind not in (None, "", expected):
        raise ValueError(f"expected kind {expected!r}, got {kind!r}")


@dataclass
class NutanixCredentialReference:
    """Reference to the object that holds Prism Central credentials."""

    kind: str
    name: str = ""
    namespace: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind, "name": self.name}
        if self.namespace:
            data["namespace"] = self.namespace
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixCredentialReference":
        return cls(
            kind=data.get("kind", ""),
            name=data.get("name", ""),
            namespace=data.get("namespace", ""),
        )


@dataclass
class NutanixTrustBundleReference:
    """Reference to an additional CA bundle, inline or in a ConfigMap."""

    kind: str
    data: str = ""
    name: str = ""
    namespace: str = ""

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"kind": self.kind}
        if self.data:
            result["data"] = self.data
        if self.name:
            result["name"] = self.name
        if self.namespace:
            result["namespace"] = self.namespace
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixTrustBundleReference":
        return cls(
            kind=data.get("kind", ""),
            data=data.get("data", ""),
            name=data.get("name", ""),
            namespace=data.get("namespace", ""),
        )


@dataclass
class NutanixPrismEndpoint:
    """Address and access details of a Prism Central instance."""

    address: str = ""
    port: int = 0
    insecure: bool = False
    additional_trust_bundle: NutanixTrustBundleReference | None = None
    credential_ref: NutanixCredentialReference | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "address": self.address,
            "port": self.port,
            "insecure": self.insecure,
        }
        if self.additional_trust_bundle is not None:
            data["additionalTrustBundle"] = self.additional_trust_bundle.to_dict()
        if self.credential_ref is not None:
            data["credentialRef"] = self.credential_ref.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixPrismEndpoint":
        bundle = data.get("additionalTrustBundle")
        cred = data.get("credentialRef")
        return cls(
            address=data.get("address", ""),
            port=int(data.get("port", 0)),
            insecure=bool(data.get("insecure", False)),
            additional_trust_bundle=(
                NutanixTrustBundleReference.from_dict(bundle) if bundle is not None else None
            ),
            credential_ref=NutanixCredentialReference.from_dict(cred) if cred is not None else None,
        )


@dataclass
class APIEndpoint:
    """Host and port of a control plane endpoint."""

    host: str = ""
    port: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"host": self.host, "port": self.port}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "APIEndpoint":
        data = data or {}
        return cls(host=data.get("host", ""), port=int(data.get("port", 0)))


@dataclass
class NutanixFailureDomain:
    """A Prism Element cluster and its subnets that machines can be spread over."""

    name: str
    cluster: NutanixResourceIdentifier
    subnets: list[NutanixResourceIdentifier]
    control_plane: bool = False

    def __post_init__(self) -> None:
        if not 1 <= len(self.name) <= _FAILURE_DOMAIN_NAME_MAX:
            raise ValueError(
                f"failure domain name must be 1 to {_FAILURE_DOMAIN_NAME_MAX} characters long"
            )
        if not _FAILURE_DOMAIN_NAME.fullmatch(self.name):
            raise ValueError(
                f"invalid failure domain name {self.name!r}: must consist of lower case "
                "alphanumeric characters and '-', and start and end with an alphanumeric character"
            )
        if not self.subnets:
            raise ValueError(f"failure domain {self.name!r} must have at least one subnet")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "cluster": self.cluster.to_dict(),
            "subnets": [s.to_dict() for s in self.subnets],
        }
        if self.control_plane:
            data["controlPlane"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixFailureDomain":
        for key in ("name", "cluster", "subnets"):
            if key not in data:
                raise ValueError(f"failure domain is missing required field {key!r}")
        return cls(
            name=data["name"],
            cluster=NutanixResourceIdentifier.from_dict(data["cluster"]),
            subnets=[NutanixResourceIdentifier.from_dict(s) for s in data["subnets"] or []],
            control_plane=bool(data.get("controlPlane", False)),
        )


@dataclass
class NutanixClusterSpec:
    """Desired state of a NutanixCluster."""

    control_plane_endpoint: APIEndpoint = field(default_factory=APIEndpoint)
    prism_central: NutanixPrismEndpoint | None = None
    failure_domains: list[NutanixFailureDomain] = field(default_factory=list)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for domain in self.failure_domains:
            if domain.name in seen:
                raise ValueError(f"duplicate failure domain name {domain.name!r}")
            seen.add(domain.name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "controlPlaneEndpoint": self.control_plane_endpoint.to_dict(),
            "prismCentral": self.prism_central.to_dict() if self.prism_central else None,
            "failureDomains": [d.to_dict() for d in self.failure_domains],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "NutanixClusterSpec":
        data = data or {}
        prism = data.get("prismCentral")
        return cls(
            control_plane_endpoint=APIEndpoint.from_dict(data.get("controlPlaneEndpoint")),
            prism_central=NutanixPrismEndpoint.from_dict(prism) if prism is not None else None,
            failure_domains=[
                NutanixFailureDomain.from_dict(d) for d in data.get("failureDomains") or []
            ],
        )


@dataclass
class NutanixClusterStatus:
    """Observed state of a NutanixCluster."""

    ready: bool = False
    failure_domains: dict[str, dict[str, Any]] = field(default_factory=dict)
    conditions: list[Condition] = field(default_factory=list)
    failure_reason: str | None = None
    failure_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.ready:
            data["ready"] = True
        if self.failure_domains:
            data["failureDomains"] = {k: dict(v) for k, v in self.failure_domains.items()}
        if self.conditions:
            data["conditions"] = [c.to_dict() for c in self.conditions]
        if self.failure_reason is not None:
            data["failureReason"] = self.failure_reason
        if self.failure_message is not None:
            data["failureMessage"] = self.failure_message
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "NutanixClusterStatus":
        data = data or {}
        return cls(
            ready=bool(data.get("ready", False)),
            failure_domains={
                k: dict(v or {}) for k, v in (data.get("failureDomains") or {}).items()
            },
            conditions=[Condition.from_dict(c) for c in data.get("conditions") or []],
            failure_reason=data.get("failureReason"),
            failure_message=data.get("failureMessage"),
        )


@dataclass
class NutanixCluster:
    """A cluster's infrastructure on Nutanix."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: NutanixClusterSpec = field(default_factory=NutanixClusterSpec)
    status: NutanixClusterStatus = field(default_factory=NutanixClusterStatus)

    is_conversion_hub: ClassVar[bool] = True

    @property
    def conditions(self) -> list[Condition]:
        return self.status.conditions

    @conditions.setter
    def conditions(self, value: list[Condition]) -> None:
        self.status.conditions = list(value)

    def get_prism_central_credential_ref(self) -> NutanixCredentialReference | None:
        """Return the Secret credential reference, None if there is none to use.

        Raises ValueError when Prism Central is set without a credential reference.
        """
        prism = self.spec.prism_central
        if prism is None:
            return None
        if prism.credential_ref is None:
            raise ValueError(
                "credentialRef must be set on prismCentral attribute for cluster "
                f"{self.metadata.name} in namespace {self.metadata.namespace}"
            )
        if prism.credential_ref.kind != SECRET_KIND:
            return None
        return prism.credential_ref

    def get_prism_central_trust_bundle(self) -> NutanixTrustBundleReference | None:
        """Return the trust bundle reference unless it is absent or given inline."""
        prism = self.spec.prism_central
        if (
            prism is None
            or prism.additional_trust_bundle is None
            or prism.additional_trust_bundle.kind == TRUST_BUNDLE_KIND_STRING
        ):
            return None
        return prism.additional_trust_bundle

    def namespaced_name(self) -> str:
        """Return namespace/name, using the default namespace when unset."""
        namespace = self.metadata.namespace or NAMESPACE_DEFAULT
        return f"{namespace}/{self.metadata.name}"

    def to_dict(self) -> dict[str, Any]:
        data = _type_meta(NUTANIX_CLUSTER_KIND)
        data["metadata"] = self.metadata.to_dict()
        data["spec"] = self.spec.to_dict()
        data["status"] = self.status.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixCluster":
        _check_kind(data, NUTANIX_CLUSTER_KIND)
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            spec=NutanixClusterSpec.from_dict(data.get("spec")),
            status=NutanixClusterStatus.from_dict(data.get("status")),
        )


@dataclass
class NutanixClusterList:
    """A list of NutanixCluster objects."""

    items: list[NutanixCluster] = field(default_factory=list)

    is_conversion_hub: ClassVar[bool] = True

    def to_dict(self) -> dict[str, Any]:
        data = _type_meta("NutanixClusterList")
        data["metadata"] = {}
        data["items"] = [i.to_dict() for i in self.items]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixClusterList":
        _check_kind(data, "NutanixClusterList")
        return cls(items=[NutanixCluster.from_dict(i) for i in data.get("items") or []])


@dataclass
class NutanixClusterTemplateResource:
    """The data needed to create a NutanixCluster from a template."""

    spec: NutanixClusterSpec = field(default_factory=NutanixClusterSpec)

    def to_dict(self) -> dict[str, Any]:
        return {"spec": self.spec.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "NutanixClusterTemplateResource":
        data = data or {}
        return cls(spec=NutanixClusterSpec.from_dict(data.get("spec")))


@dataclass
class NutanixClusterTemplate:
    """A template from which NutanixCluster objects are created."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    template: NutanixClusterTemplateResource = field(
        default_factory=NutanixClusterTemplateResource
    )

    def to_dict(self) -> dict[str, Any]:
        data = _type_meta("NutanixClusterTemplate")
        data["metadata"] = self.metadata.to_dict()
        data["spec"] = {"template": self.template.to_dict()}
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixClusterTemplate":
        _check_kind(data, "NutanixClusterTemplate")
        spec = data.get("spec") or {}
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            template=NutanixClusterTemplateResource.from_dict(spec.get("template")),
        )


@dataclass
class NutanixClusterTemplateList:
    """A list of NutanixClusterTemplate objects."""

    items: list[NutanixClusterTemplate] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = _type_meta("NutanixClusterTemplateList")
        data["metadata"] = {}
        data["items"] = [i.to_dict() for i in self.items]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixClusterTemplateList":
        _check_kind(data, "NutanixClusterTemplateList")
        return cls(items=[NutanixClusterTemplate.from_dict(i) for i in data.get("items") or []])


SCHEME_BUILDER.register(
    NutanixCluster,
    NutanixClusterList,
    NutanixClusterTemplate,
    NutanixClusterTemplateList,
)