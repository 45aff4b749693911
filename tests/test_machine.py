import pytest

from nutanixinfra.common import (
    NutanixBootType,
    NutanixCategoryIdentifier,
    NutanixGPU,
    NutanixGPUIdentifierType,
    NutanixIdentifierType,
    NutanixResourceIdentifier,
)
from nutanixinfra.machine import (
    NUTANIX_MACHINE_BOOTSTRAP_REF_KIND_SECRET,
    MachineAddress,
    NutanixMachine,
    NutanixMachineList,
    NutanixMachineSpec,
    NutanixMachineStatus,
    NutanixMachineTemplate,
    NutanixMachineTemplateList,
    NutanixMachineTemplateResource,
    ObjectReference,
    parse_quantity,
)
from nutanixinfra.meta import SCHEME_BUILDER, Condition, ObjectMeta


def _ident(name):
    return NutanixResourceIdentifier(type=NutanixIdentifierType.NAME, name=name)


def _spec(**overrides):
    values = dict(
        vcpus_per_socket=1,
        vcpu_sockets=2,
        memory_size="4Gi",
        image=_ident("ubuntu"),
        system_disk_size="40Gi",
    )
    values.update(overrides)
    return NutanixMachineSpec(**values)


def test_parse_quantity_plain_number():
    assert parse_quantity("12") == 12


@pytest.mark.parametrize(
    "left, right",
    [
        ("1Gi", "1024Mi"),
        ("1Mi", "1024Ki"),
        ("1k", "1000"),
        ("1e3", "1k"),
        ("1M", "1000k"),
        ("0.5Gi", "512Mi"),
    ],
)
def test_parse_quantity_equivalences(left, right):
    assert parse_quantity(left) == parse_quantity(right)


def test_parse_quantity_scales_linearly():
    assert parse_quantity("40Gi") == 40 * parse_quantity("1Gi")


def test_parse_quantity_rounds_up():
    assert parse_quantity("100m") == 1


@pytest.mark.parametrize("text", ["", "abc", "1Xi", "Gi", "1.2.3", "1 Gi"])
def test_parse_quantity_invalid(text):
    with pytest.raises(ValueError):
        parse_quantity(text)


def test_spec_sizes_in_bytes():
    spec = _spec(memory_size="2Gi", system_disk_size="20Gi")
    assert spec.memory_size_bytes == parse_quantity("2Gi")
    assert spec.system_disk_size_bytes == 10 * spec.memory_size_bytes


@pytest.mark.parametrize(
    "overrides",
    [
        {"vcpus_per_socket": 0},
        {"vcpu_sockets": 0},
        {"memory_size": "lots"},
        {"system_disk_size": ""},
        {"boot_type": "bios"},
    ],
)
def test_spec_validation(overrides):
    with pytest.raises(ValueError):
        _spec(**overrides)


def test_spec_boot_type_from_string():
    assert _spec(boot_type="uefi").boot_type is NutanixBootType.UEFI


def test_spec_round_trip_full():
    spec = _spec(
        provider_id="nutanix://vm-1",
        cluster=_ident("pe1"),
        subnets=[_ident("net1"), _ident("net2")],
        additional_categories=[NutanixCategoryIdentifier(key="AppType", value="Kubernetes")],
        project=_ident("proj"),
        boot_type=NutanixBootType.LEGACY,
        bootstrap_ref=ObjectReference(
            kind=NUTANIX_MACHINE_BOOTSTRAP_REF_KIND_SECRET, name="bootstrap", namespace="ns"
        ),
        gpus=[NutanixGPU(type=NutanixGPUIdentifierType.DEVICE_ID, device_id=7864)],
    )
    data = spec.to_dict()
    assert data["subnet"] == [{"type": "name", "name": "net1"}, {"type": "name", "name": "net2"}]
    assert data["bootType"] == "legacy"
    assert NutanixMachineSpec.from_dict(data) == spec


def test_spec_minimal_dict_omits_optional():
    data = _spec().to_dict()
    assert "providerID" not in data
    assert "gpus" not in data
    assert data["memorySize"] == "4Gi"
    assert NutanixMachineSpec.from_dict(data) == _spec()


def test_spec_from_dict_missing_required():
    data = _spec().to_dict()
    del data["image"]
    with pytest.raises(ValueError):
        NutanixMachineSpec.from_dict(data)


def test_machine_address_type_checked():
    with pytest.raises(ValueError):
        MachineAddress(type="Public", address="1.2.3.4")


def test_machine_round_trip():
    machine = NutanixMachine(
        spec=_spec(),
        metadata=ObjectMeta(name="m1", namespace="ns"),
        status=NutanixMachineStatus(
            ready=True,
            addresses=[MachineAddress(type="InternalIP", address="10.0.0.7")],
            vm_uuid="00000000-0000-0000-0000-000000000001",
            conditions=[Condition(type="VMProvisioned", status="True")],
            failure_reason="CreateError",
        ),
    )
    data = machine.to_dict()
    assert data["kind"] == "NutanixMachine"
    assert data["status"]["vmUUID"] == "00000000-0000-0000-0000-000000000001"
    assert NutanixMachine.from_dict(data) == machine


def test_machine_wrong_kind():
    data = NutanixMachine(spec=_spec()).to_dict()
    data["kind"] = "NutanixCluster"
    with pytest.raises(ValueError):
        NutanixMachine.from_dict(data)


def test_machine_conditions_property():
    machine = NutanixMachine(spec=_spec())
    machine.conditions = [Condition(type="Ready", status="True")]
    assert machine.status.conditions == [Condition(type="Ready", status="True")]


def test_machine_list_round_trip():
    items = NutanixMachineList(
        items=[NutanixMachine(spec=_spec(), metadata=ObjectMeta(name=n)) for n in ("a", "b")]
    )
    restored = NutanixMachineList.from_dict(items.to_dict())
    assert [m.metadata.name for m in restored.items] == ["a", "b"]


def test_template_round_trip():
    template = NutanixMachineTemplate(
        template=NutanixMachineTemplateResource(
            spec=_spec(), metadata=ObjectMeta(labels={"role": "worker"})
        ),
        metadata=ObjectMeta(name="tmpl", namespace="ns"),
    )
    data = template.to_dict()
    assert data["kind"] == "NutanixMachineTemplate"
    assert data["spec"]["template"]["metadata"] == {"labels": {"role": "worker"}}
    assert NutanixMachineTemplate.from_dict(data) == template


def test_template_missing_template():
    with pytest.raises(ValueError):
        NutanixMachineTemplate.from_dict({"kind": "NutanixMachineTemplate", "spec": {}})


def test_template_list_round_trip():
    tmpl = NutanixMachineTemplate(template=NutanixMachineTemplateResource(spec=_spec()))
    restored = NutanixMachineTemplateList.from_dict(
        NutanixMachineTemplateList(items=[tmpl]).to_dict()
    )
    assert restored.items == [tmpl]


def test_kinds_registered():
    assert SCHEME_BUILDER.lookup("NutanixMachine") is NutanixMachine
    assert SCHEME_BUILDER.lookup("NutanixMachineTemplate") is NutanixMachineTemplate
    assert NutanixMachineTemplate.is_conversion_hub is True