"""
OC Watch Bot - Handlers Package
===============================

Event handlers for bot lifecycle and Discord events.
"""

from ocbot.handlers.ready import on_ready_handler
from ocbot.handlers.shutdown import shutdown_handler
from ocbot.handlers.commands import on_message_handler

__all__ = [
    "on_ready_handler",
    "shutdown_handler",
    "on_message_handler",
]
