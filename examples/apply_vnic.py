#!/usr/bin/env python3
"""Demonstrate planning and applying a vNIC change.

Usage (dry-run, default):
    VNIC_ID=host-42_vmk1 python examples/apply_vnic.py

Usage (live apply):
    APPLY=1 VNIC_ID=host-42_vmk1 python examples/apply_vnic.py

Usage (create a new interface, VNIC_ID unset):
    APPLY=1 VNIC_HOST=host-42 python examples/apply_vnic.py

The desired configuration below:
  - Attaches the interface to the "vMotion" standard portgroup.
  - Assigns a static IPv4 address and a 9000 byte MTU.
  - Binds the vmotion service.

Connection settings come from ESX_VNIC_* variables (see esx_vnic.settings).
Set APPLY=1 only when you are ready to push changes to the host.
"""

from __future__ import annotations

import logging
import os
import pprint

from esx_vnic.client.gateway import HTTPHostNetworkGateway
from esx_vnic.model.vnic import DesiredVnicConfig, Ipv4Config
from esx_vnic.reconciler import VnicReconciler
from esx_vnic.settings import GatewaySettings
from esx_vnic.utils.render import render_plan

VNIC_ID = os.getenv("VNIC_ID", "")
HOST = os.getenv("VNIC_HOST", VNIC_ID.partition("_")[0] or "host-42")
APPLY = os.getenv("APPLY", "0") == "1"

logging.basicConfig(level=logging.INFO)

# ---------------------------------------------------------------------------
# Build the desired configuration
# ---------------------------------------------------------------------------
desired = DesiredVnicConfig(
    host=HOST,
    portgroup="vMotion",
    ipv4=Ipv4Config(address="10.10.20.11", netmask="255.255.255.0", gateway="10.10.20.1"),
    mtu=9000,
    services=("vmotion",),
)

# ---------------------------------------------------------------------------
# Connect and apply (or dry-run)
# ---------------------------------------------------------------------------
with HTTPHostNetworkGateway.from_settings(GatewaySettings.from_env()) as gateway:
    reconciler = VnicReconciler(gateway)
    if not VNIC_ID:
        if APPLY:
            result = reconciler.create(desired)
            print(f"\n=== created {result.id} ===\n")
            pprint.pprint(result.config)
        else:
            print("\n[INFO] VNIC_ID not set: APPLY=1 would create this interface:\n")
            pprint.pprint(desired)
    elif APPLY:
        result = reconciler.update(VNIC_ID, desired)
        print(f"\n=== LIVE APPLY {VNIC_ID} ===\n")
        pprint.pprint(result.config)
    else:
        plan = reconciler.plan(VNIC_ID, desired)
        print(f"\n=== DRY-RUN {VNIC_ID} ===\n")
        pprint.pprint(render_plan(plan))
        print(
            "\n[INFO] No changes were applied. "
            "Set APPLY=1 to push the plan above to the host."
        )
