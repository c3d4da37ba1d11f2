"""Unit tests for esx_vnic.reconciler.VnicReconciler against an in-memory host."""

from __future__ import annotations

from dataclasses import replace

import pytest

from esx_vnic.client.errors import (
    HostRequestError,
    ImmutableFieldError,
    InvalidIdentifierError,
    MutuallyExclusiveFieldsError,
    ServiceBindingError,
    UnsupportedNetStackError,
    VnicCreateError,
    VnicDeleteError,
    VnicNotFoundError,
    VnicReadError,
    VnicUpdateError,
)
from esx_vnic.model.identifier import VnicId
from esx_vnic.model.vnic import (
    DesiredVnicConfig,
    Ipv4Config,
    Ipv6Config,
    NetStack,
    RemoteVnicSpec,
    RemoteVnicState,
)
from esx_vnic.reconciler import VnicReconciler

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_desired(**kwargs: object) -> DesiredVnicConfig:
    base: dict[str, object] = {
        "host": "host-42",
        "portgroup": "pg-vmk",
        "ipv4": Ipv4Config(address="192.168.1.10", netmask="255.255.255.0", gateway="192.168.1.1"),
        "mtu": 1500,
    }
    base.update(kwargs)
    return DesiredVnicConfig(**base)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

class TestCreate:
    def test_create_returns_read_back_state(self, gateway) -> None:
        result = VnicReconciler(gateway).create(make_desired())
        assert result.id == VnicId("host-42", "vmk1")
        assert str(result.id) == "host-42_vmk1"
        assert result.config is not None
        assert result.config.portgroup == "pg-vmk"
        assert result.config.ipv4 == make_desired().ipv4
        assert result.config.mac == "00:50:56:00:00:01"

    def test_create_passes_portgroup_to_add(self, gateway) -> None:
        VnicReconciler(gateway).create(make_desired())
        (call,) = gateway.calls_named("add_interface")
        assert call[2] == "pg-vmk"

    def test_distributed_attachment_passes_empty_portgroup(self, gateway) -> None:
        desired = make_desired(
            portgroup="", distributed_switch_port="uuid1", distributed_port_group="dvpg-1"
        )
        result = VnicReconciler(gateway).create(desired)
        (call,) = gateway.calls_named("add_interface")
        assert call[2] == ""
        assert result.config is not None
        assert result.config.distributed_switch_port == "uuid1"

    def test_create_with_services_selects_each_once(self, gateway) -> None:
        result = VnicReconciler(gateway).create(make_desired(services=("vmotion",)))
        assert gateway.calls_named("select_service") == [("select_service", "vmotion", "vmk1")]
        assert gateway.calls_named("deselect_service") == []
        assert result.config is not None
        assert result.config.services == ("vmotion",)

    def test_create_without_services_binds_nothing(self, gateway) -> None:
        VnicReconciler(gateway).create(make_desired())
        assert gateway.calls_named("select_service") == []

    def test_validation_happens_before_remote_calls(self, gateway) -> None:
        with pytest.raises(MutuallyExclusiveFieldsError):
            VnicReconciler(gateway).create(make_desired(distributed_switch_port="uuid1"))
        assert gateway.calls == []

    def test_host_id_with_separator_rejected(self, gateway) -> None:
        with pytest.raises(InvalidIdentifierError):
            VnicReconciler(gateway).create(make_desired(host="host_42"))
        assert gateway.calls == []

    def test_unknown_stack_cannot_be_created(self, gateway) -> None:
        with pytest.raises(UnsupportedNetStackError):
            VnicReconciler(gateway).create(make_desired(net_stack=NetStack.OTHER))
        assert gateway.calls == []

    def test_unknown_host_is_create_error(self, gateway) -> None:
        with pytest.raises(VnicCreateError) as exc_info:
            VnicReconciler(gateway).create(make_desired(host="host-99"))
        assert exc_info.value.phase == "add"

    def test_add_failure_wraps_gateway_error(self, gateway, gateway_error) -> None:
        gateway.fail["add_interface"] = gateway_error
        with pytest.raises(VnicCreateError) as exc_info:
            VnicReconciler(gateway).create(make_desired())
        assert exc_info.value.cause is gateway_error
        assert exc_info.value.__cause__ is gateway_error

    def test_service_failure_leaves_interface_in_place(self, gateway, gateway_error) -> None:
        gateway.fail["select_service"] = {"management": gateway_error}
        with pytest.raises(ServiceBindingError) as exc_info:
            VnicReconciler(gateway).create(make_desired(services=("vmotion", "management")))
        err = exc_info.value
        assert err.vnic_id == "host-42_vmk1"
        assert err.phase == "select"
        assert err.service == "management"
        # No rollback: the interface and the first binding survive.
        assert [v.device for v in gateway.vnics["host-42"]] == ["vmk1"]
        assert gateway.bindings["host-42"]["vmotion"] == {"vmk1"}
        assert gateway.calls_named("remove_interface") == []


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------

class TestRead:
    def test_read_by_string_id(self, gateway) -> None:
        reconciler = VnicReconciler(gateway)
        reconciler.create(make_desired())
        result = reconciler.read("host-42_vmk1")
        assert result.exists
        assert result.config is not None
        assert result.config.host == "host-42"

    def test_missing_interface_is_tombstone(self, gateway) -> None:
        result = VnicReconciler(gateway).read("host-42_vmk7")
        assert result.id is None
        assert result.config is None
        assert not result.exists

    def test_missing_host_is_tombstone(self, gateway) -> None:
        assert not VnicReconciler(gateway).read("host-99_vmk1").exists

    def test_first_matching_device_wins(self, gateway) -> None:
        reconciler = VnicReconciler(gateway)
        reconciler.create(make_desired())
        gateway.vnics["host-42"].append(RemoteVnicState(device="vmk1", portgroup="other"))
        result = reconciler.read("host-42_vmk1")
        assert result.config is not None
        assert result.config.portgroup == "pg-vmk"

    def test_services_not_queried_on_other_stacks(self, gateway) -> None:
        reconciler = VnicReconciler(gateway)
        reconciler.create(make_desired(net_stack=NetStack.VMOTION))
        gateway.calls.clear()
        result = reconciler.read("host-42_vmk1")
        assert gateway.calls_named("list_service_bindings") == []
        assert result.config is not None
        assert result.config.net_stack is NetStack.VMOTION

    def test_transport_failure_is_read_error(self, gateway) -> None:
        gateway.fail["fetch_interfaces"] = HostRequestError("https://vc", ConnectionError("refused"))
        with pytest.raises(VnicReadError):
            VnicReconciler(gateway).read("host-42_vmk1")

    def test_malformed_id_rejected(self, gateway) -> None:
        with pytest.raises(InvalidIdentifierError):
            VnicReconciler(gateway).read("vmk1")


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------

class TestUpdate:
    def test_adding_a_service_selects_only_the_new_one(self, gateway) -> None:
        reconciler = VnicReconciler(gateway)
        created = reconciler.create(make_desired(services=("vmotion",)))
        assert created.id is not None
        gateway.calls.clear()

        result = reconciler.update(created.id, make_desired(services=("vmotion", "management")))

        assert gateway.calls_named("select_service") == [
            ("select_service", "management", "vmk1")
        ]
        assert gateway.calls_named("deselect_service") == []
        assert result.config is not None
        assert result.config.services == ("management", "vmotion")

    def test_removing_a_service_deselects_it(self, gateway) -> None:
        reconciler = VnicReconciler(gateway)
        reconciler.create(make_desired(services=("vmotion", "management")))
        gateway.calls.clear()
        reconciler.update("host-42_vmk1", make_desired(services=("management",)))
        assert gateway.calls_named("select_service") == []
        assert gateway.calls_named("deselect_service") == [
            ("deselect_service", "vmotion", "vmk1")
        ]

    def test_no_change_skips_update_call(self, gateway) -> None:
        reconciler = VnicReconciler(gateway)
        reconciler.create(make_desired())
        gateway.calls.clear()
        result = reconciler.update("host-42_vmk1", make_desired())
        assert gateway.calls_named("update_interface") == []
        assert result.exists

    def test_mtu_change_is_applied(self, gateway) -> None:
        reconciler = VnicReconciler(gateway)
        reconciler.create(make_desired())
        result = reconciler.update("host-42_vmk1", make_desired(mtu=9000))
        assert len(gateway.calls_named("update_interface")) == 1
        assert result.config is not None
        assert result.config.mtu == 9000

    def test_ipv6_baseline_is_current_remote_state(self, gateway) -> None:
        reconciler = VnicReconciler(gateway)
        reconciler.create(
            make_desired(ipv6=Ipv6Config(addresses=("2001:db8::1/64", "2001:db8::2/64")))
        )
        result = reconciler.update(
            "host-42_vmk1",
            make_desired(ipv6=Ipv6Config(addresses=("2001:DB8::1/64", "2001:db8::3/64"))),
        )
        (call,) = gateway.calls_named("update_interface")
        spec = call[3]
        changes = [(c.address, c.operation) for c in spec.ip.ipv6.address_changes]
        assert changes == [("2001:db8::2", "remove"), ("2001:db8::3", "add")]
        assert result.config is not None
        assert result.config.ipv6 is not None
        assert set(result.config.ipv6.addresses) == {"2001:db8::1/64", "2001:db8::3/64"}

    def test_missing_interface_is_hard_failure(self, gateway) -> None:
        with pytest.raises(VnicNotFoundError):
            VnicReconciler(gateway).update("host-42_vmk9", make_desired())

    def test_net_stack_is_immutable(self, gateway) -> None:
        reconciler = VnicReconciler(gateway)
        reconciler.create(make_desired())
        with pytest.raises(ImmutableFieldError) as exc_info:
            reconciler.update("host-42_vmk1", make_desired(net_stack=NetStack.VMOTION))
        assert exc_info.value.field_name == "net_stack"
        assert gateway.calls_named("update_interface") == []

    def test_update_failure_wraps_gateway_error(self, gateway, gateway_error) -> None:
        reconciler = VnicReconciler(gateway)
        reconciler.create(make_desired())
        gateway.fail["update_interface"] = gateway_error
        with pytest.raises(VnicUpdateError) as exc_info:
            reconciler.update("host-42_vmk1", make_desired(mtu=9000))
        assert exc_info.value.phase == "update"
        assert exc_info.value.vnic_id == "host-42_vmk1"

    def test_update_is_idempotent(self, gateway) -> None:
        reconciler = VnicReconciler(gateway)
        reconciler.create(make_desired())
        desired = make_desired(mtu=9000, services=("vmotion",))
        first = reconciler.update("host-42_vmk1", desired)
        gateway.calls.clear()
        second = reconciler.update("host-42_vmk1", desired)
        assert first == second
        assert gateway.calls_named("update_interface") == []
        assert gateway.calls_named("select_service") == []

    def test_invalid_desired_rejected_before_remote_calls(self, gateway) -> None:
        with pytest.raises(MutuallyExclusiveFieldsError):
            VnicReconciler(gateway).update(
                "host-42_vmk1", make_desired(distributed_switch_port="uuid1")
            )
        assert gateway.calls == []

    def test_unknown_stack_key_is_written_back_unchanged(self, gateway) -> None:
        gateway.vnics["host-42"].append(
            RemoteVnicState(
                device="vmk5",
                key="key-vim.host.VirtualNic-vmk5",
                portgroup="pg-custom",
                spec=RemoteVnicSpec(
                    mtu=1500, net_stack=NetStack.OTHER, net_stack_key="customStack"
                ),
            )
        )
        reconciler = VnicReconciler(gateway)
        current = reconciler.read("host-42_vmk5")
        assert current.config is not None
        assert current.config.net_stack is NetStack.OTHER

        result = reconciler.update("host-42_vmk5", replace(current.config, mtu=9000))

        (call,) = gateway.calls_named("update_interface")
        assert call[3].net_stack_key == "customStack"
        assert gateway.vnic("host-42", "vmk5").spec.net_stack_key == "customStack"
        assert result.config is not None
        assert result.config.mtu == 9000
        assert result.config.net_stack is NetStack.OTHER


# ---------------------------------------------------------------------------
# Plan (check mode)
# ---------------------------------------------------------------------------

class TestPlan:
    def test_plan_does_not_apply(self, gateway) -> None:
        reconciler = VnicReconciler(gateway)
        reconciler.create(make_desired())
        gateway.calls.clear()
        plan = reconciler.plan("host-42_vmk1", make_desired(mtu=9000, services=("vsan",)))
        assert plan.kinds() == {"mtu", "services"}
        assert gateway.calls_named("update_interface") == []
        assert gateway.calls_named("select_service") == []

    def test_plan_for_missing_interface(self, gateway) -> None:
        with pytest.raises(VnicNotFoundError):
            VnicReconciler(gateway).plan("host-42_vmk1", make_desired())


# ---------------------------------------------------------------------------
# Delete / import
# ---------------------------------------------------------------------------

class TestDeleteAndImport:
    def test_delete_then_read_is_tombstone(self, gateway) -> None:
        reconciler = VnicReconciler(gateway)
        reconciler.create(make_desired(services=("vmotion",)))
        result = reconciler.delete("host-42_vmk1")
        assert not result.exists
        assert gateway.vnics["host-42"] == []
        assert not reconciler.read("host-42_vmk1").exists

    def test_delete_failure_wraps_gateway_error(self, gateway, gateway_error) -> None:
        reconciler = VnicReconciler(gateway)
        reconciler.create(make_desired())
        gateway.fail["remove_interface"] = gateway_error
        with pytest.raises(VnicDeleteError) as exc_info:
            reconciler.delete("host-42_vmk1")
        assert exc_info.value.phase == "remove"
        assert exc_info.value.cause is gateway_error
        assert [v.device for v in gateway.vnics["host-42"]] == ["vmk1"]

    def test_delete_on_missing_interface_is_tombstone(self, gateway) -> None:
        result = VnicReconciler(gateway).delete("host-42_vmk1")
        assert not result.exists
        assert gateway.calls_named("remove_interface") == []

    def test_second_delete_is_tombstone(self, gateway) -> None:
        reconciler = VnicReconciler(gateway)
        reconciler.create(make_desired())
        assert not reconciler.delete("host-42_vmk1").exists
        assert not reconciler.delete("host-42_vmk1").exists
        assert len(gateway.calls_named("remove_interface")) == 1

    def test_delete_on_missing_host_is_tombstone(self, gateway) -> None:
        assert not VnicReconciler(gateway).delete("host-99_vmk1").exists

    def test_delete_scan_failure_wraps_gateway_error(self, gateway, gateway_error) -> None:
        gateway.fail["fetch_interfaces"] = gateway_error
        with pytest.raises(VnicDeleteError):
            VnicReconciler(gateway).delete("host-42_vmk1")

    def test_import_sets_host_and_nic(self, gateway) -> None:
        result = VnicReconciler(gateway).import_vnic("host-42_vnic3")
        assert result.id == VnicId("host-42", "vnic3")
        assert result.config is not None
        assert result.config.host == "host-42"
        assert gateway.calls == []
