"""
OC Watch Bot - Schedulers Package
=================================
"""

from ocbot.services.schedulers.oc_update import OCUpdateScheduler

__all__ = ["OCUpdateScheduler"]
