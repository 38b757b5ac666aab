# logiscan/domain/scanning/session.py
import logging
import time
from typing import Callable, Optional, Union
from sqlalchemy.ext.asyncio import AsyncSession

from logiscan.core.config import settings
from logiscan.core.errors import TooFast
from logiscan.db.models.assets import Asset
from logiscan.db.models.events import Event
from logiscan.db.models.scan_lists import ScanList
from .engine import ScanOutcome, record_scan

logger = logging.getLogger(__name__)


class ScanThrottle:
    """Debounce for scanner input: at most one accepted scan per interval.

    A rejected scan does not move the window; any scan that gets through is
    handed to the engine, whether the engine then accepts it or not.
    """

    def __init__(
        self,
        min_interval: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.min_interval = settings.SCAN_MIN_INTERVAL_SECONDS if min_interval is None else min_interval
        self._clock = clock
        self.last_accepted_at: Optional[float] = None

    def check(self) -> None:
        now = self._clock()
        if self.last_accepted_at is not None:
            elapsed = now - self.last_accepted_at
            if elapsed < self.min_interval:
                logger.debug("scan ignored, %.2fs since the previous one", elapsed)
                raise TooFast(elapsed, self.min_interval)
        self.last_accepted_at = now


class ScanSession:
    """One operator scanning against one explicit scan list."""

    def __init__(
        self,
        scan_list: ScanList,
        *,
        event: Optional[Event] = None,
        performed_by: Optional[str] = None,
        pick_first_available: bool = False,
        throttle: Optional[ScanThrottle] = None,
    ):
        self.scan_list = scan_list
        self.event = event
        self.performed_by = performed_by
        self.pick_first_available = pick_first_available
        self.throttle = throttle or ScanThrottle()

    async def scan(
        self,
        db: AsyncSession,
        scanned: Union[str, Asset]
    ) -> ScanOutcome:
        self.throttle.check()
        return await record_scan(
            db,
            self.scan_list,
            scanned,
            event=self.event,
            pick_first_available=self.pick_first_available,
            performed_by=self.performed_by,
        )
