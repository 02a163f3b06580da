# eva/core/clock.py
from __future__ import annotations

from datetime import date, datetime


class Clock:
    """Proveedor de 'ahora'. Los agregados por ventana de tiempo lo reciben inyectado."""

    def now(self) -> datetime:
        return datetime.now()

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    def __init__(self, at: datetime):
        self.at = at

    def now(self) -> datetime:
        return self.at


system_clock = Clock()


def get_clock() -> Clock:
    return system_clock
