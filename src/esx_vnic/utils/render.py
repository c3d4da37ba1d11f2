"""Diff renderer for vNIC plans."""

from __future__ import annotations

from typing import Any

from esx_vnic.utils.vnic_diff import VnicPlan


def render_plan(plan: VnicPlan) -> dict[str, Any]:
    """Serialize *plan* to a JSON-serializable dict.

    Returns:
        A dict with keys:

        - ``"vnic_id"``: composite identifier of the interface.
        - ``"total_changes"``: number of changed fields.
        - ``"changes"``: list of change dicts (``kind``, ``details``).
    """
    return {
        "vnic_id": plan.vnic_id,
        "total_changes": len(plan.changes),
        "changes": [{"kind": c.kind, "details": c.details} for c in plan.changes],
    }
