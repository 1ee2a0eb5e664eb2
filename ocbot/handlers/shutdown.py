"""
OC Watch Bot - Shutdown Handler
===============================

Stops the update loop, drops pending alert collectors and closes the
Torn HTTP session before the gateway connection goes away.
"""

import asyncio
from typing import TYPE_CHECKING, Awaitable, List, Tuple

from ocbot.core.logger import logger

if TYPE_CHECKING:
    from ocbot.bot import OCWatchBot


# =============================================================================
# Constants
# =============================================================================

SHUTDOWN_TIMEOUT = 10.0  # Upper bound for all cleanups together


# =============================================================================
# Cleanup Steps
# =============================================================================

def _collect_cleanups(bot: "OCWatchBot") -> List[Tuple[str, Awaitable[None]]]:
    """Named cleanup coroutines for the services that are actually live."""
    steps: List[Tuple[str, Awaitable[None]]] = []

    scheduler = getattr(bot, "oc_scheduler", None)
    if scheduler is not None and scheduler.is_running():
        steps.append(("OC Update Scheduler", scheduler.stop()))

    service = getattr(bot, "oc_service", None)
    notifier = getattr(service, "notifier", None)
    if notifier is not None and notifier.active_collectors:
        steps.append((f"Alert Collectors ({notifier.active_collectors})", notifier.cancel_all()))

    torn = getattr(bot, "torn", None)
    if torn is not None:
        steps.append(("Torn Client", torn.close()))

    return steps


async def _run_cleanup(name: str, step: Awaitable[None]) -> bool:
    """Await one cleanup step; report failure through the return value."""
    try:
        await step
    except asyncio.CancelledError:
        logger.debug("Cleanup Cancelled", [("Step", name)])
        return True
    except Exception as e:
        logger.warning("Cleanup Step Failed", [
            ("Step", name),
            ("Error Type", type(e).__name__),
            ("Error", str(e)),
        ])
        return False

    logger.debug("Cleanup Step Done", [("Step", name)])
    return True


# =============================================================================
# Shutdown Handler
# =============================================================================

async def shutdown_handler(bot: "OCWatchBot") -> None:
    """
    Run every cleanup step concurrently, bounded by SHUTDOWN_TIMEOUT.

    A failing step is logged and never prevents the others from running.
    """
    steps = _collect_cleanups(bot)
    logger.info("Shutting Down OC Watch Bot", [
        ("Steps", ", ".join(name for name, _ in steps) or "none"),
        ("Timeout", f"{SHUTDOWN_TIMEOUT}s"),
    ])

    if steps:
        try:
            async with asyncio.timeout(SHUTDOWN_TIMEOUT):
                outcomes = await asyncio.gather(
                    *(_run_cleanup(name, step) for name, step in steps),
                    return_exceptions=True,
                )
        except asyncio.TimeoutError:
            logger.warning("Shutdown Cleanup Timed Out", [
                ("Timeout", f"{SHUTDOWN_TIMEOUT}s"),
            ])
        else:
            failed = sum(1 for ok in outcomes if ok is not True)
            logger.info("Shutdown Cleanup Finished", [
                ("OK", str(len(outcomes) - failed)),
                ("Failed", str(failed)),
            ])

    logger.tree("Bot Shutdown Complete", [
        ("Status", "Update loop stopped, sessions closed"),
    ], emoji="👋")


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["shutdown_handler", "SHUTDOWN_TIMEOUT"]
