"""Background loop that takes silent astrologers offline."""
import asyncio
import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from nakshatra_talks.db.sessions import get_session
from nakshatra_talks.services.catalog import AstrologerCatalog

logger = logging.getLogger(__name__)


def sweep_once(bind: Engine, stale_after_seconds: float) -> int:
    """Run one sweep in its own unit of work."""
    with get_session(bind) as session:
        return AstrologerCatalog(session).sweep_stale(stale_after_seconds)


async def run_presence_sweep(
    bind: Engine,
    interval_seconds: float,
    stale_after_seconds: float,
    stop_event: asyncio.Event,
) -> None:
    """Sweep every ``interval_seconds`` until ``stop_event`` is set.

    A failed round is logged and the loop keeps going; the next round retries.
    """
    while not stop_event.is_set():
        try:
            changed = await asyncio.to_thread(sweep_once, bind, stale_after_seconds)
            if changed:
                logger.info("Marked %d stale astrologer(s) offline", changed)
        except SQLAlchemyError as exc:
            logger.warning("Presence sweep failed: %s", exc)
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            pass
