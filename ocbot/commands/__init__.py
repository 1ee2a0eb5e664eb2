"""
OC Watch Bot - Slash Commands Package
=====================================

Available Commands:
- /ping - Liveness check
"""

from ocbot.commands.ping import PingCog

__all__ = ["PingCog"]
