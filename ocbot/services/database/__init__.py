"""
OC Watch Bot - Database Module
==============================

SQLite store shared by the update cycle and the command handlers.

Structure:
    - core.py: Connection management and table init
    - config.py: Key/value settings
    - members.py: Faction member rows and infraction tally
    - alerts.py: Escalation alert cooldown cursor
"""

from .core import DatabaseCore, DatabaseUnavailableError
from .config import ConfigMixin
from .members import MembersMixin
from .alerts import AlertsMixin


class Database(
    ConfigMixin,
    MembersMixin,
    AlertsMixin,
    DatabaseCore,
):
    """
    Complete database class combining all mixins.

    DatabaseCore must be last so its __init__ runs.
    """
    pass


__all__ = [
    "Database",
    "DatabaseUnavailableError",
]
