import asyncio
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from app.pydantic_models import Participant
from app.services.clock import Clock, epoch_ms
from app.services.message_store import MessageStore
from app.services.registry import ParticipantRegistry

log = logging.getLogger("PRESENCE_SWEEPER")

LEAVE_TEXT = "sai da sala..."


class PresenceSweeper:
    """
    drops participants whose last heartbeat is older than the absence timeout

    one cycle = find stale -> conditional bulk delete -> bulk insert of leave notices.
    The delete re-checks last_status against the cutoff, so whoever sent a heartbeat while the
    cycle was running survives, and only the participants actually removed get a leave notice.

    a failing cycle is logged and skipped, the loop keeps going
    """

    def __init__(
        self,
        registry: ParticipantRegistry,
        store: MessageStore,
        absence_timeout_secs: float = 10.0,
        interval_secs: float = 15.0,
        clock: Clock = datetime.now,
    ) -> None:
        self._registry = registry
        self._store = store
        self._absence_timeout = timedelta(seconds=absence_timeout_secs)
        self._interval_secs = interval_secs
        self._clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        # idempotent, safe to call from every lifespan
        if self.running:
            return
        self._task = asyncio.create_task(self._sweep_loop())
        log.info(
            f"Presence sweeper started (interval={self._interval_secs}s, "
            f"timeout={self._absence_timeout.total_seconds()}s)"
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        log.info("Presence sweeper stopped")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval_secs)
            try:
                await self.sweep_once()
            except Exception:
                log.exception("Sweep failed, skipping this cycle")

    async def sweep_once(self) -> List[Participant]:
        """run one cycle now; returns who was dropped"""
        cutoff = epoch_ms(self._clock() - self._absence_timeout)

        stale = await self._registry.find_stale(cutoff)
        if not stale:
            log.debug("Sweep: nobody to drop")
            return []

        removed = await self._registry.remove_stale([p.name for p in stale], cutoff)
        if not removed:
            return []

        notices = [self._store.status_message(p.name, LEAVE_TEXT) for p in removed]
        await self._store.announce_many(notices)

        log.info(f"Sweep dropped {len(removed)}: {', '.join(p.name for p in removed)}")
        return removed
