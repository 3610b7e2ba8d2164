"""Background task that deactivates rooms past their deadline."""

import asyncio
import logging
from typing import Optional

from roomserver.config import SWEEP_INTERVAL_SECONDS
from roomserver.services.room_service import RoomService
from roomserver.services.session_service import SessionService

logger = logging.getLogger(__name__)


class RoomExpirySweeper:
    """
    Periodically flips expired rooms to inactive and drops stale sessions.

    Reads re-check deadlines on their own; the sweep only frees room codes
    sooner than the next lazy check would.
    """

    def __init__(
        self,
        interval_seconds: int = SWEEP_INTERVAL_SECONDS,
        room_service: Optional[RoomService] = None,
        session_service: Optional[SessionService] = None,
    ):
        """
        Initialize sweeper task.

        Args:
            interval_seconds: Time between sweeps
            room_service: Room registry to sweep (default: new RoomService)
            session_service: Session store to purge when a TTL is set
        """
        self.interval_seconds = interval_seconds
        self.room_service = room_service or RoomService()
        self.session_service = session_service or SessionService()
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the background sweep task."""
        if self._running:
            logger.warning("Expiry sweeper already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"Started room expiry sweeper (interval: {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the background sweep task."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Stopped room expiry sweeper")

    async def _run(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)

                if not self._running:
                    break

                await asyncio.to_thread(self.sweep_once)

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in expiry sweeper: {e}", exc_info=True)

    def sweep_once(self) -> int:
        """
        Execute one sweep cycle.

        Returns:
            Number of rooms deactivated
        """
        expired = self.room_service.expire_rooms()
        purged = self.session_service.purge_expired_sessions()

        if expired or purged:
            logger.info(f"Sweep complete: {expired} room(s) expired, {purged} session(s) purged")
        else:
            logger.debug("Sweep complete: nothing to do")
        return expired
