"""
ChangeGate + Coalescer against a manual clock.
"""

import math

import pytest

from teleop_link.controllers.types import ControlVector
from teleop_link.drive.filters import ChangeGate, Coalescer


def v(lx: float) -> ControlVector:
    return ControlVector(lx=lx)


def test_gate_starts_from_neutral():
    gate = ChangeGate()
    assert not gate.admit(ControlVector.NEUTRAL)
    assert gate.admit(v(0.5))
    assert not gate.admit(v(0.5))
    assert gate.admit(ControlVector.NEUTRAL)


def test_gate_compares_every_component():
    gate = ChangeGate()
    assert gate.admit(ControlVector(ry=0.1))
    assert gate.admit(ControlVector(rx=0.1))
    assert not gate.admit(ControlVector(rx=0.1))


def test_first_submit_is_sent_immediately(scheduler):
    sent = []
    c = Coalescer(sent.append, scheduler, 0.1)

    c.submit(v(0.1))

    assert sent == [v(0.1)]
    assert c.timer_active
    assert c.pending is None


def test_pending_is_last_write_wins(scheduler):
    sent = []
    c = Coalescer(sent.append, scheduler, 0.1)

    c.submit(v(0.1))
    c.submit(v(0.2))
    c.submit(v(0.3))
    assert sent == [v(0.1)]
    assert c.pending == v(0.3)

    scheduler.advance(0.1)
    assert sent == [v(0.1), v(0.3)]


def test_timer_stops_after_an_empty_tick(scheduler):
    sent = []
    c = Coalescer(sent.append, scheduler, 0.1)

    c.submit(v(0.1))
    scheduler.advance(0.1)
    assert not c.timer_active
    assert scheduler.active_tasks() == []

    # back to idle: next submit goes out right away again
    c.submit(v(0.2))
    assert sent == [v(0.1), v(0.2)]


def test_burst_respects_rate_bound_and_delivers_last_value(scheduler):
    sent = []
    c = Coalescer(sent.append, scheduler, 0.1)

    duration = 1.0
    steps = 100
    values = [v(round(-1.0 + 2.0 * i / steps, 6)) for i in range(steps)]
    for value in values:
        c.submit(value)
        scheduler.advance(duration / steps)

    assert len(sent) <= math.ceil(duration / 0.1) + 1

    scheduler.advance(0.3)
    assert sent[-1] == values[-1]
    assert not c.timer_active


def test_discard_drops_pending_and_stops_timer(scheduler):
    sent = []
    c = Coalescer(sent.append, scheduler, 0.1)

    c.submit(v(0.1))
    c.submit(v(0.2))
    c.discard()
    scheduler.advance(1.0)

    assert sent == [v(0.1)]
    assert c.pending is None
    assert not c.timer_active

    c.submit(v(0.9))
    assert sent == [v(0.1)]
    assert c.discarded


def test_interval_must_be_positive(scheduler):
    with pytest.raises(ValueError):
        Coalescer(lambda _: None, scheduler, 0.0)
