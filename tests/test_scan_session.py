import pytest
from sqlalchemy import func, select

from logiscan.core.errors import AssetNotExpected, TooFast
from logiscan.db.models.movements import Movement
from logiscan.domain.scanning.session import ScanSession, ScanThrottle

from factories import make_scan_list, make_stock

pytestmark = pytest.mark.asyncio


class FakeClock:
    def __init__(self, *ticks):
        self.ticks = list(ticks)

    def __call__(self):
        return self.ticks.pop(0)


async def test_throttle_first_scan_always_passes():
    throttle = ScanThrottle(min_interval=1.0, clock=FakeClock(5.0))
    throttle.check()
    assert throttle.last_accepted_at == 5.0


async def test_throttle_rejection_does_not_move_the_window():
    throttle = ScanThrottle(min_interval=1.0, clock=FakeClock(0.0, 0.3, 0.9, 1.0))
    throttle.check()

    with pytest.raises(TooFast):
        throttle.check()
    with pytest.raises(TooFast):
        throttle.check()
    throttle.check()
    assert throttle.last_accepted_at == 1.0


async def test_second_scan_too_soon_changes_nothing(session):
    await make_stock(session, "LED-01", ["A1", "A2"])
    event, scan_list = await make_scan_list(session, [("LED-01", 2)])
    scanning = ScanSession(
        scan_list,
        event=event,
        throttle=ScanThrottle(min_interval=1.0, clock=FakeClock(0.0, 0.3)),
    )

    await scanning.scan(session, "A1")
    version = scan_list.version
    with pytest.raises(TooFast) as excinfo:
        await scanning.scan(session, "A2")

    assert excinfo.value.elapsed == pytest.approx(0.3)
    item = scan_list.items[0]
    assert item.quantity_scanned == 1
    assert item.scanned_assets == ["A1"]
    assert scan_list.version == version
    result = await session.execute(select(func.count()).select_from(Movement))
    assert result.scalar_one() == 1


async def test_scan_after_the_interval_is_accepted(session):
    await make_stock(session, "LED-01", ["A1", "A2"])
    event, scan_list = await make_scan_list(session, [("LED-01", 2)])
    scanning = ScanSession(
        scan_list,
        event=event,
        performed_by="op-7",
        throttle=ScanThrottle(min_interval=1.0, clock=FakeClock(0.0, 1.2)),
    )

    await scanning.scan(session, "A1")
    outcome = await scanning.scan(session, "A2")

    assert outcome.triggered_completion
    assert outcome.movement.performed_by == "op-7"


async def test_rejected_scan_still_counts_for_the_throttle(session):
    await make_stock(session, "LED-01", ["A1"])
    await make_stock(session, "XYZ-99", ["Z1"])
    event, scan_list = await make_scan_list(session, [("LED-01", 1)])
    scanning = ScanSession(
        scan_list,
        event=event,
        throttle=ScanThrottle(min_interval=1.0, clock=FakeClock(0.0, 0.5)),
    )

    with pytest.raises(AssetNotExpected):
        await scanning.scan(session, "Z1")
    with pytest.raises(TooFast):
        await scanning.scan(session, "A1")
