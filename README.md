# nutanixinfra

Python models for the infrastructure resources that describe clusters and
virtual machines on Nutanix Prism Central: `NutanixCluster`,
`NutanixMachine`, their templates and lists, and the status conditions
reported on them. The package has no dependencies outside the standard
library.

## Installation

```
pip install nutanixinfra
```

## Modules

- `nutanixinfra.meta` — the API group and version (`GroupVersion`, with the
  ready-made `GROUP_VERSION` for `infrastructure.cluster.x-k8s.io/v1beta1`),
  object metadata (`ObjectMeta`: name, namespace, labels, annotations),
  status conditions (`Condition`, `find_condition`, `set_condition`), the
  condition type and reason constants, and `SchemeBuilder`, a registry that
  maps kind names to model classes. The shared `SCHEME_BUILDER` has the
  cluster and machine kinds registered once their modules are imported.
- `nutanixinfra.common` — identifiers shared by all resources:
  `NutanixResourceIdentifier` (by UUID or name), `NutanixCategoryIdentifier`
  and `NutanixGPU`, with the `NutanixIdentifierType`, `NutanixBootType` and
  `NutanixGPUIdentifierType` enumerations.
- `nutanixinfra.cluster` — `NutanixCluster` with its spec and status,
  `NutanixFailureDomain`, `APIEndpoint`, the Prism Central endpoint
  (`NutanixPrismEndpoint`) with its `NutanixCredentialReference` and
  `NutanixTrustBundleReference`, `NutanixClusterList`, and the template types
  `NutanixClusterTemplate`, `NutanixClusterTemplateResource` and
  `NutanixClusterTemplateList`.
- `nutanixinfra.machine` — `NutanixMachine` with `NutanixMachineSpec` and
  `NutanixMachineStatus`, `ObjectReference`, `MachineAddress`,
  `NutanixMachineList`, `NutanixMachineTemplate`,
  `NutanixMachineTemplateResource`, `NutanixMachineTemplateList`, and
  `parse_quantity`, which turns a quantity such as `"4Gi"` into an integer
  (rounded up).

Every resource converts to and from the plain-dictionary form used in
manifests with `to_dict()` and the class method `from_dict()`. Invalid
values — an unknown identifier or boot type, a malformed failure-domain
name, a failure domain without subnets, duplicate failure-domain names,
fewer than one vCPU or socket, an unparsable quantity, a missing required
field, or a `kind` that does not match — raise `ValueError`.

## Example

```python
from nutanixinfra.cluster import (
    NutanixCluster,
    NutanixClusterSpec,
    NutanixCredentialReference,
    NutanixPrismEndpoint,
)
from nutanixinfra.meta import CONDITION_TRUE, Condition, ObjectMeta, set_condition

cluster = NutanixCluster(
    metadata=ObjectMeta(name="test"),
    spec=NutanixClusterSpec(
        prism_central=NutanixPrismEndpoint(
            address="pc.example.com",
            port=9440,
            credential_ref=NutanixCredentialReference(kind="Secret", name="creds"),
        ),
    ),
)

print(cluster.namespaced_name())                        # default/test
print(cluster.get_prism_central_credential_ref().name)  # creds

cluster.conditions = set_condition(
    cluster.conditions, Condition(type="PrismClientInit", status=CONDITION_TRUE)
)
```

`get_prism_central_credential_ref()` returns `None` when no Prism Central
endpoint is set or the reference is not of kind `Secret`, and raises
`ValueError` when the endpoint has no credential reference at all.
`get_prism_central_trust_bundle()` returns `None` when there is no trust
bundle or it is given inline (kind `String`).

`set_condition` returns a new list: it keeps the transition time when the
condition's state is unchanged, sets it to now otherwise, and sorts the
`Ready` condition first and the rest by type.

## What it does not do

The package only describes resources. It does not talk to Prism Central or
to a Kubernetes API server, does not create or delete virtual machines,
and runs no controller or reconciliation loop. It has no command-line
command.

## Running the tests

```
pip install -e ".[test]"
pytest
```