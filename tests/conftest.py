"""Shared pytest fixtures for PomodoroTimer tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from pomodorotimer.timer.engine import TimerEngine

from helpers import FakeClock


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(qapp, clock):
    """Fresh TimerEngine on a fixed calendar day."""
    return TimerEngine(parent=None, clock=clock)


@pytest.fixture
def short_engine(engine):
    """Engine with tiny durations so whole cycles run in a few ticks."""
    engine.focus_duration = 5
    engine.short_break_duration = 2
    engine.long_break_duration = 3
    engine.reset()
    return engine
