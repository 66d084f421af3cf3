"""Shared test helpers for PomodoroTimer."""

from datetime import date

from pomodorotimer.timer.engine import TimerEngine

TODAY = date(2026, 3, 2)


class FakeClock:
    """Callable date source whose day can be moved by tests."""

    def __init__(self, today: date = TODAY) -> None:
        self.today = today

    def __call__(self) -> date:
        return self.today


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


def run_ticks(engine: TimerEngine, count: int) -> None:
    for _ in range(count):
        engine.tick()


def complete_phase(engine: TimerEngine) -> None:
    """Run the current phase to zero and through its completion tick."""
    engine.start()
    run_ticks(engine, engine.time_remaining + 1)
