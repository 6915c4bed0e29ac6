# pocketpet/engine/game_time.py
from datetime import datetime
from typing import Optional

from pocketpet.core.clock import Clock

DAY_LENGTH_MINUTES = 24  # game minutes per day/night cycle
NIGHT_STARTS_AT = 18
NIGHT_ENDS_AT = 6


class GameTime:
    """Day/night cycle for the pet's world, one game minute per real second by default."""

    def __init__(self, clock: Clock, minutes_per_second: float = 1.0, started_at: Optional[datetime] = None):
        self.clock = clock
        self.minutes_per_second = minutes_per_second
        self.started_at = started_at or clock.now()
        self._offset = 0.0

    @property
    def minutes(self) -> float:
        elapsed = (self.clock.now() - self.started_at).total_seconds()
        return elapsed * self.minutes_per_second + self._offset

    @property
    def cycle_position(self) -> float:
        return self.minutes % DAY_LENGTH_MINUTES

    @property
    def is_night(self) -> bool:
        position = self.cycle_position
        return position >= NIGHT_STARTS_AT or position < NIGHT_ENDS_AT

    def toggle_day_night(self):
        self._offset += DAY_LENGTH_MINUTES / 2
