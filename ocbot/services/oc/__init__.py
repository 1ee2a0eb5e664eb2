"""
OC Watch Bot - OC Tracking Package
==================================

Structure:
    - reconcile.py: Pure state transitions and summary rendering
    - alerts.py: 24h escalation alerts and their reaction collectors
    - service.py: The update cycle that applies a plan
"""

from ocbot.services.oc.reconcile import (
    AlertDue,
    OutOfOCEntry,
    UpdatePlan,
    plan_update,
)
from ocbot.services.oc.alerts import AlertNotifier
from ocbot.services.oc.service import OCUpdateService

__all__ = [
    "AlertDue",
    "OutOfOCEntry",
    "UpdatePlan",
    "plan_update",
    "AlertNotifier",
    "OCUpdateService",
]
