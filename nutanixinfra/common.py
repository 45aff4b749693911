"""Identifier types shared by cluster and machine resources."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

OBSOLETE_DEFAULT_CAPI_CATEGORY_PREFIX = "kubernetes-io-cluster-"
DEFAULT_CAPI_CATEGORY_KEY_FOR_NAME = "KubernetesClusterName"
DEFAULT_CAPI_CATEGORY_DESCRIPTION = "Managed by CAPX"
OBSOLETE_DEFAULT_CAPI_CATEGORY_OWNED_VALUE = "owned"


class NutanixIdentifierType(str, Enum):
    """How a Prism Central resource is identified."""

    UUID = "uuid"
    NAME = "name"


class NutanixBootType(str, Enum):
    """Boot type of a virtual machine."""

    LEGACY = "legacy"
    UEFI = "uefi"


class NutanixGPUIdentifierType(str, Enum):
    """How a GPU is identified."""

    NAME = "name"
    DEVICE_ID = "deviceID"


def _enum_value(enum_type: type[Enum], value: Any, what: str) -> Any:
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_type)
        raise ValueError(f"invalid {what} {value!r}: must be one of {allowed}") from None


@dataclass
class NutanixResourceIdentifier:
    """Identity of a Prism Central resource (cluster, image, subnet, ...)."""

    type: NutanixIdentifierType
    uuid: str | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        self.type = _enum_value(NutanixIdentifierType, self.type, "identifier type")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type.value}
        if self.uuid is not None:
            data["uuid"] = self.uuid
        if self.name is not None:
            data["name"] = self.name
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixResourceIdentifier":
        if "type" not in data:
            raise ValueError("resource identifier is missing required field 'type'")
        return cls(type=data["type"], uuid=data.get("uuid"), name=data.get("name"))


@dataclass
class NutanixCategoryIdentifier:
    """A category key and value in Prism Central."""

    key: str = ""
    value: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.key:
            data["key"] = self.key
        if self.value:
            data["value"] = self.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixCategoryIdentifier":
        return cls(key=data.get("key", ""), value=data.get("value", ""))


@dataclass
class NutanixGPU:
    """A GPU identified by name or device ID."""

    type: NutanixGPUIdentifierType
    device_id: int | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        self.type = _enum_value(NutanixGPUIdentifierType, self.type, "GPU identifier type")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type.value}
        if self.device_id is not None:
            data["deviceID"] = self.device_id
        if self.name is not None:
            data["name"] = self.name
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutanixGPU":
        if "type" not in data:
            raise ValueError("GPU is missing required field 'type'")
        device_id = data.get("deviceID")
        return cls(
            type=data["type"],
            device_id=int(device_id) if device_id is not None else None,
            name=data.get("name"),
        )