"""
OC Watch Bot - Torn API Package
===============================
"""

from ocbot.services.torn.client import TornClient, parse_members_payload

__all__ = ["TornClient", "parse_members_payload"]
