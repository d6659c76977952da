from datetime import date, datetime, time, timezone

from src.timeclock.timeclock.attendance.factory import PunctualityStrategyFactory
from src.timeclock.timeclock.attendance.strategies.base import OvertimeDecision
from src.timeclock.timeclock.attendance.strategies.late_strategy import LateStrategy
from src.timeclock.timeclock.attendance.strategies.normal_strategy import NormalStrategy
from src.timeclock.timeclock.attendance.strategies.overtime_strategy import OvertimeStrategy
from src.timeclock.timeclock.departments.model import Department
from src.timeclock.timeclock.schedules.model import Schedule
from src.timeclock.timeclock.schedules.resolver import ScheduleResolver


def _window():
    dept = Department(
        department_id="ops",
        name="Operations",
        schedule=Schedule(clock_in=time(9, 0), clock_out=time(17, 0), grace_period=15, overtime_threshold=30),
    )
    return ScheduleResolver(default_timezone="UTC").window_for(date(2025, 3, 3), dept)


def _at(hour, minute, second=0):
    return datetime(2025, 3, 3, hour, minute, second, tzinfo=timezone.utc)


def test_factory_clock_in_within_grace_is_not_late():
    window = _window()
    now = _at(9, 10)

    strategy = PunctualityStrategyFactory().for_clock_in(now=now, window=window)

    assert isinstance(strategy, NormalStrategy)
    assert strategy.decide_clock_in(now=now, window=window).is_late is False


def test_factory_clock_in_at_grace_boundary_is_not_late():
    window = _window()

    assert isinstance(PunctualityStrategyFactory().for_clock_in(now=_at(9, 15, 59), window=window), NormalStrategy)


def test_factory_clock_in_after_grace_is_late():
    window = _window()
    now = _at(9, 20)

    strategy = PunctualityStrategyFactory().for_clock_in(now=now, window=window)
    decision = strategy.decide_clock_in(now=now, window=window)

    assert isinstance(strategy, LateStrategy)
    assert decision.is_late is True
    assert decision.late_minutes == 20


def test_no_window_is_never_late_nor_overtime():
    factory = PunctualityStrategyFactory()

    assert isinstance(factory.for_clock_in(now=_at(13, 0), window=None), NormalStrategy)
    assert isinstance(factory.for_overtime(now=_at(23, 0), window=None), NormalStrategy)


def test_overtime_after_threshold():
    window = _window()
    factory = PunctualityStrategyFactory()

    assert isinstance(factory.for_overtime(now=_at(17, 30), window=window), NormalStrategy)

    now = _at(17, 31)
    strategy = factory.for_overtime(now=now, window=window)
    decision = strategy.decide_overtime(now=now, window=window, current=OvertimeDecision())

    assert isinstance(strategy, OvertimeStrategy)
    assert decision == OvertimeDecision(is_overtime=True, overtime_minutes=31)


def test_overtime_is_monotonic():
    window = _window()
    factory = PunctualityStrategyFactory()
    current = OvertimeDecision(is_overtime=True, overtime_minutes=45)

    # later evaluation under the threshold keeps the flag
    now = _at(17, 10)
    kept = factory.for_overtime(now=now, window=window).decide_overtime(now=now, window=window, current=current)
    assert kept == current

    now = _at(17, 40)
    grown = factory.for_overtime(now=now, window=window).decide_overtime(now=now, window=window, current=current)
    assert grown == current
