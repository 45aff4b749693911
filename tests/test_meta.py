from datetime import datetime, timezone

import pytest

from nutanixinfra.meta import (
    GROUP_NAME,
    GROUP_VERSION,
    VERSION,
    Condition,
    GroupVersion,
    ObjectMeta,
    SchemeBuilder,
    find_condition,
    set_condition,
)


def test_group_version_constants():
    built = GroupVersion(GROUP_NAME, VERSION)
    assert built == GROUP_VERSION
    assert built.group == "infrastructure.cluster.x-k8s.io"
    assert built.version == "v1beta1"
    assert built.api_version == "infrastructure.cluster.x-k8s.io/v1beta1"
    assert GROUP_VERSION.api_version == built.api_version


def test_with_kind():
    gvk = GROUP_VERSION.with_kind("NutanixCluster")
    assert gvk.group == GROUP_NAME
    assert gvk.version == VERSION
    assert gvk.kind == "NutanixCluster"


def test_core_group_api_version_is_version_only():
    assert GroupVersion("", "v1").api_version == "v1"


def test_object_meta_round_trip():
    meta = ObjectMeta(name="test", namespace="ns", labels={"a": "b"})
    assert ObjectMeta.from_dict(meta.to_dict()) == meta


def test_object_meta_empty_dict_omits_fields():
    assert ObjectMeta().to_dict() == {}


class _Alpha:
    pass


class _Beta:
    pass


def test_scheme_builder_register_and_lookup():
    builder = SchemeBuilder(GROUP_VERSION)
    builder.register(_Alpha, _Beta)
    assert builder.lookup("_Alpha") is _Alpha
    assert builder.kinds() == ["_Alpha", "_Beta"]


def test_scheme_builder_reregister_same_type_is_idempotent():
    builder = SchemeBuilder()
    builder.register(_Alpha)
    builder.register(_Alpha)
    assert builder.kinds() == ["_Alpha"]


def test_scheme_builder_conflict():
    builder = SchemeBuilder()
    builder.register(_Alpha)
    other = type("_Alpha", (), {})
    with pytest.raises(ValueError):
        builder.register(other)


def test_scheme_builder_unknown_kind():
    with pytest.raises(KeyError):
        SchemeBuilder().lookup("Missing")


def test_find_condition():
    conds = [Condition("ProjectAssigned", "True"), Condition("VMProvisioned", "False")]
    found = find_condition(conds, "VMProvisioned")
    assert found is conds[1]
    assert find_condition(conds, "Other") is None


def test_set_condition_keeps_time_when_unchanged():
    old = datetime(2020, 1, 1, tzinfo=timezone.utc)
    conds = [Condition("VMProvisioned", "True", last_transition_time=old)]
    result = set_condition(conds, Condition("VMProvisioned", "True"))
    assert len(result) == 1
    assert result[0].last_transition_time == old


def test_set_condition_updates_time_when_changed():
    old = datetime(2020, 1, 1, tzinfo=timezone.utc)
    conds = [Condition("VMProvisioned", "True", last_transition_time=old)]
    result = set_condition(
        conds, Condition("VMProvisioned", "False", severity="Error", reason="FailedVMTask")
    )
    assert len(result) == 1
    assert result[0].status == "False"
    assert result[0].last_transition_time > old
    assert conds[0].status == "True"


def test_condition_round_trip():
    cond = Condition(
        "ProjectAssigned",
        "False",
        severity="Error",
        reason="ProjectAssignationFailed",
        message="failed to retrieve project",
        last_transition_time=datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc),
    )
    assert Condition.from_dict(cond.to_dict()) == cond


def test_condition_missing_status():
    with pytest.raises(ValueError):
        Condition.from_dict({"type": "Ready"})