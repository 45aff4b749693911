"""NutanixMachine resources, machine templates and resource quantities."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import Any, ClassVar

from .common import NutanixBootType, NutanixCategoryIdentifier, NutanixGPU, NutanixResourceIdentifier
from .meta import GROUP_VERSION, SCHEME_BUILDER, Condition, ObjectMeta

NUTANIX_MACHINE_KIND = "NutanixMachine"
NUTANIX_MACHINE_FINALIZER = "nutanixmachine.infrastructure.cluster.x-k8s.io"
NUTANIX_MACHINE_BOOTSTRAP_REF_KIND_SECRET = "Secret"
NUTANIX_MACHINE_BOOTSTRAP_REF_KIND_IMAGE = "Image"
NUTANIX_MACHINE_TEMPLATE_KIND = "NutanixMachineTemplate"

MACHINE_ADDRESS_TYPES = frozenset(
    {"Hostname", "ExternalIP", "InternalIP", "ExternalDNS", "InternalDNS"}
)

_QUANTITY = re.compile(
    r"([+-]?(?:\d+(?:\.\d*)?|\.\d+))"
    r"(?:([eE][+-]?\d+)|(Ki|Mi|Gi|Ti|Pi|Ei|n|u|m|k|M|G|T|P|E))?"
)

_SUFFIXES: dict[str, Decimal] = {
    "": Decimal(1),
    "n": Decimal(10) ** -9,
    "u": Decimal(10) ** -6,
    "m": Decimal(10) ** -3,
    "k": Decimal(10) ** 3,
    "M": Decimal(10) ** 6,
    "G": Decimal(10) ** 9,
    "T": Decimal(10) ** 12,
    "P": Decimal(10) ** 15,
    "E": Decimal(10) ** 18,
    "Ki": Decimal(2) ** 10,
    "Mi": Decimal(2) ** 20,
    "Gi": Decimal(2) ** 30,
    "Ti": Decimal(2) ** 40,
    "Pi": Decimal(2) ** 50,
    "Ei": Decimal(2) ** 60,
}


def parse_quantity(text: str) -> int:
    """Return the integer value of a resource quantity such as "2Gi", rounded up."""
    if not isinstance(text, str):
        text = str(text)
    match = _QUANTITY.fullmatch(text.strip())
    if match is None:
        raise ValueError(f"invalid quantity {text!r}")
    number, exponent, suffix = match.groups()
    try:
        value = Decimal(number + (exponent or ""))
    except InvalidOperation:
        raise ValueError(f"invalid quantity {text!r}") from None
    value *= _SUFFIXES[suffix or ""]
    return int(value.to_integral_value(rounding=ROUND_CEILING))


def _type_meta(kind: str) -> dict[str, Any]:
    return {"apiVersion": GROUP_VERSION.api_version, "kind": kind}


def _check_kind(data: dict[str, Any], expected: str) -> None:
    kind = data.get("kind")
    if kind not in (None, "", expected):
        raise ValueError(f"expected kind {expected!r}, got {kind!r}")


@dataclass
class ObjectReference:
    """Reference to another object in the cluster."""

    kind: str = ""
    namespace: str = ""
    name: str = ""
    uid: str = ""
    api_version: str = ""
    resource_version: str = ""
    field_path: str = ""

    _KEYS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("kind", "kind"),
        ("namespace", "namespace"),
        ("name", "name"),
        ("uid", "uid"),
        ("api_version", "apiVersion"),
        ("resource_version", "resourceVersion"),
        ("field_path", "fieldPath"),
    )

    def to_dict(self) -> dict[str, Any]:
        return {key: getattr(self, attr) for attr, key in self._KEYS if getattr(self, attr)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ObjectReference":
        return cls(**{attr: data.get(key, "") for attr, key in cls._KEYS})


@dataclass
class MachineAddress:
    """One address of a machine."""

    type: str
    address: str

    def __post_init__(self) -> None:
        if self.type not in MACHINE_ADDRESS_TYPES:
            allowed = ", ".join(sorted(MACHINE_ADDRESS_TYPES))
            raise ValueError(f"invalid address type {self.type!r}: must be one of {allowed}")

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "address": self.address}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MachineAddress":
        return cls(type=data.get("type", ""), address=data.get("address", ""))


@dataclass
class NutanixMachineSpec:
    """Desired state of a NutanixMachine."""

    vcpus_per_socket: int
    vcpu_sockets: int
    memory_size: str
    image: NutanixResourceIdentifier
    system_disk_size: str
    provider_id: str = ""
    cluster: NutanixResourceIdentifier | None = None
    subnets: list[NutanixResourceIdentifier] = field(default_factory=list)
    additional_categories: list[NutanixCategoryIdentifier] = field(default_factory=list)
    project: NutanixResourceIdentifier | None = None
    boot_type: NutanixBootType | None = None
    bootstrap_ref: ObjectReference | None = None
    gpus: list[NutanixGPU] = field(default_factory=list)

    _REQUIRED: ClassVar[tuple[str, ...]] = (
        "vcpusPerSocket",
        "vcpuSockets",
        "memorySize",
        "image",
        "systemDiskSize",
    )

    def __post_init__(self) -> None:
        if self.vcpus_per_socket < 1:
            raise ValueError("vcpusPerSocket must be at least 1")
        if self.vcpu_sockets < 1:
            raise ValueError("vcpuSockets must be at least 1")
        self.memory_size = str(self.memory_size)
        self.system_disk_size = str(self.system_disk_size)
        parse_quantity(self.memory_size)
        parse_quantity(self.system_disk_size)
        if self.boot_type is not None and not isinstance(self.boot_type, NutanixBootType):
            try:
                self.boot_type = NutanixBootType(self.boot_type)
            except ValueError:
                raise ValueError(
                    f"invalid boot type {self.boot_type!r}: must be one of legacy, uefi"
                ) from None

    @property
    def memory_size_bytes(self) -> int:
        return parse_quantity(self.memory_size)

    @property
    def system_disk_size_bytes(self) -> int:
        return parse_quantity(self.system_disk_size)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.provider_id:
            data["providerID"] = self.provider_id
        data["vcpusPerSocket"] = self.vcpus_per_socket
        data["vcpuSockets"] = self.vcpu_sockets
        data["memorySize"] = self.memory_size
        data["image"] = self.image.to_dict()
        if self.cluster is not None:
            data["cluster"] = self.cluster.to_dict()
        data["subnet"] = [s.to_dict() for s in self.subnets]
        if self.additional_categories:
            data["additionalCategories"] = [c.to_dict() for c in self.additional_categories]
        if self.project is not None:
            data["project"] = self.project.to_dict()
        if self.boot_type is not None:
            data["bootType"] = self.boot_type.value
        data["systemDiskSize"] = self.system_disk_size
        if self.bootstrap_ref is not None:
            data["bootstrapRef"] = self.bootstrap_ref.to_dict()
        if self.gpus:
            data["gpus"] = [g.to_dict() for g in self.gpus]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixMachineSpec":
        missing = [key for key in cls._REQUIRED if key not in data]
        if missing:
            raise ValueError(f"machine spec is missing required field {missing[0]!r}")
        cluster = data.get("cluster")
        project = data.get("project")
        bootstrap_ref = data.get("bootstrapRef")
        return cls(
            vcpus_per_socket=int(data["vcpusPerSocket"]),
            vcpu_sockets=int(data["vcpuSockets"]),
            memory_size=str(data["memorySize"]),
            image=NutanixResourceIdentifier.from_dict(data["image"]),
            system_disk_size=str(data["systemDiskSize"]),
            provider_id=data.get("providerID", ""),
            cluster=NutanixResourceIdentifier.from_dict(cluster) if cluster else None,
            subnets=[NutanixResourceIdentifier.from_dict(s) for s in data.get("subnet") or []],
            additional_categories=[
                NutanixCategoryIdentifier.from_dict(c)
                for c in data.get("additionalCategories") or []
            ],
            project=NutanixResourceIdentifier.from_dict(project) if project else None,
            boot_type=data.get("bootType") or None,
            bootstrap_ref=ObjectReference.from_dict(bootstrap_ref) if bootstrap_ref else None,
            gpus=[NutanixGPU.from_dict(g) for g in data.get("gpus") or []],
        )


@dataclass
class NutanixMachineStatus:
    """Observed state of a NutanixMachine."""

    ready: bool = False
    addresses: list[MachineAddress] = field(default_factory=list)
    vm_uuid: str = ""
    node_ref: ObjectReference | None = None
    conditions: list[Condition] = field(default_factory=list)
    failure_reason: str | None = None
    failure_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"ready": self.ready}
        if self.addresses:
            data["addresses"] = [a.to_dict() for a in self.addresses]
        if self.vm_uuid:
            data["vmUUID"] = self.vm_uuid
        if self.node_ref is not None:
            data["nodeRef"] = self.node_ref.to_dict()
        if self.conditions:
            data["conditions"] = [c.to_dict() for c in self.conditions]
        if self.failure_reason is not None:
            data["failureReason"] = self.failure_reason
        if self.failure_message is not None:
            data["failureMessage"] = self.failure_message
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "NutanixMachineStatus":
        data = data or {}
        node_ref = data.get("nodeRef")
        return cls(
            ready=bool(data.get("ready", False)),
            addresses=[MachineAddress.from_dict(a) for a in data.get("addresses") or []],
            vm_uuid=data.get("vmUUID", ""),
            node_ref=ObjectReference.from_dict(node_ref) if node_ref else None,
            conditions=[Condition.from_dict(c) for c in data.get("conditions") or []],
            failure_reason=data.get("failureReason"),
            failure_message=data.get("failureMessage"),
        )


@dataclass
class NutanixMachine:
    """A virtual machine on Nutanix that backs a cluster machine."""

    spec: NutanixMachineSpec
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    status: NutanixMachineStatus = field(default_factory=NutanixMachineStatus)

    is_conversion_hub: ClassVar[bool] = True

    @property
    def conditions(self) -> list[Condition]:
        return self.status.conditions

    @conditions.setter
    def conditions(self, value: list[Condition]) -> None:
        self.status.conditions = list(value)

    def to_dict(self) -> dict[str, Any]:
        data = _type_meta(NUTANIX_MACHINE_KIND)
        data["metadata"] = self.metadata.to_dict()
        data["spec"] = self.spec.to_dict()
        data["status"] = self.status.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixMachine":
        _check_kind(data, NUTANIX_MACHINE_KIND)
        if "spec" not in data:
            raise ValueError("machine is missing required field 'spec'")
        return cls(
            spec=NutanixMachineSpec.from_dict(data["spec"]),
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            status=NutanixMachineStatus.from_dict(data.get("status")),
        )


@dataclass
class NutanixMachineList:
    """A list of NutanixMachine objects."""

    items: list[NutanixMachine] = field(default_factory=list)

    is_conversion_hub: ClassVar[bool] = True

    def to_dict(self) -> dict[str, Any]:
        data = _type_meta("NutanixMachineList")
        data["metadata"] = {}
        data["items"] = [i.to_dict() for i in self.items]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixMachineList":
        _check_kind(data, "NutanixMachineList")
        return cls(items=[NutanixMachine.from_dict(i) for i in data.get("items") or []])


@dataclass
class NutanixMachineTemplateResource:
    """The data needed to create a NutanixMachine from a template."""

    spec: NutanixMachineSpec
    metadata: ObjectMeta = field(default_factory=ObjectMeta)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        meta = self.metadata.to_dict()
        if meta:
            data["metadata"] = meta
        data["spec"] = self.spec.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixMachineTemplateResource":
        if "spec" not in data:
            raise ValueError("machine template resource is missing required field 'spec'")
        return cls(
            spec=NutanixMachineSpec.from_dict(data["spec"]),
            metadata=ObjectMeta.from_dict(data.get("metadata")),
        )


@dataclass
class NutanixMachineTemplate:
    """A template from which NutanixMachine objects are created."""

    template: NutanixMachineTemplateResource
    metadata: ObjectMeta = field(default_factory=ObjectMeta)

    is_conversion_hub: ClassVar[bool] = True

    def to_dict(self) -> dict[str, Any]:
        data = _type_meta(NUTANIX_MACHINE_TEMPLATE_KIND)
        data["metadata"] = self.metadata.to_dict()
        data["spec"] = {"template": self.template.to_dict()}
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixMachineTemplate":
        _check_kind(data, NUTANIX_MACHINE_TEMPLATE_KIND)
        spec = data.get("spec") or {}
        if "template" not in spec:
            raise ValueError("machine template is missing required field 'spec.template'")
        return cls(
            template=NutanixMachineTemplateResource.from_dict(spec["template"]),
            metadata=ObjectMeta.from_dict(data.get("metadata")),
        )


@dataclass
class NutanixMachineTemplateList:
    """A list of NutanixMachineTemplate objects."""

    items: list[NutanixMachineTemplate] = field(default_factory=list)

    is_conversion_hub: ClassVar[bool] = True

    def to_dict(self) -> dict[str, Any]:
        data = _type_meta("NutanixMachineTemplateList")
        data["metadata"] = {}
        data["items"] = [i.to_dict() for i in self.items]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixMachineTemplateList":
        _check_kind(data, "NutanixMachineTemplateList")
        return cls(items=[NutanixMachineTemplate.from_dict(i) for i in data.get("items") or []])


SCHEME_BUILDER.register(
    NutanixMachine,
    NutanixMachineList,
    NutanixMachineTemplate,
    NutanixMachineTemplateList,
)