#!/usr/bin/env python3
"""Smoke-test script: read one VMkernel interface and print its normalized state.

Environment variables
---------------------
ESX_VNIC_URL            Management endpoint URL (required)
ESX_VNIC_VERIFY_TLS     Set to "false" to skip TLS verification (default: true)
ESX_VNIC_SESSION_TOKEN  Pre-issued API session token
VNIC_ID                 Composite identifier, e.g. host-42_vmk1 (required)
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import sys

from esx_vnic.client.errors import VnicError
from esx_vnic.client.gateway import HTTPHostNetworkGateway
from esx_vnic.reconciler import VnicReconciler
from esx_vnic.settings import GatewaySettings


def main() -> None:
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "WARNING"))

    vnic_id = os.environ.get("VNIC_ID", "")
    if not vnic_id:
        print("ERROR: VNIC_ID is not set.", file=sys.stderr)
        sys.exit(1)

    try:
        settings = GatewaySettings.from_env()
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    with HTTPHostNetworkGateway.from_settings(settings) as gateway:
        try:
            resource = VnicReconciler(gateway).read(vnic_id)
        except VnicError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            sys.exit(1)

    if not resource.exists:
        print(f"{vnic_id}: not found")
        return
    print(json.dumps(dataclasses.asdict(resource.config), indent=2))


if __name__ == "__main__":
    main()
