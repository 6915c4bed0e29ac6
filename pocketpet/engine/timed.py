# pocketpet/engine/timed.py
from dataclasses import dataclass, field
from typing import Dict

import structlog

from pocketpet.engine.context import SimulationContext
from pocketpet.models.pet import PetRecord, PetStatus, clamp

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TimedActionSpec:
    status: PetStatus
    duration_seconds: int
    interval_seconds: int
    step_effects: Dict[str, float] = field(default_factory=dict)
    closing_effects: Dict[str, float] = field(default_factory=dict)

    @property
    def steps(self) -> int:
        return self.duration_seconds // self.interval_seconds


EATING = TimedActionSpec(
    status=PetStatus.EATING, duration_seconds=30, interval_seconds=5,
    step_effects={"hunger": 25 / 6, "happiness": 1, "health": 0.5, "energy": -1},
    closing_effects={"hunger": 5, "happiness": 3},
)

PLAYING = TimedActionSpec(
    status=PetStatus.PLAYING, duration_seconds=90, interval_seconds=10,
    step_effects={"happiness": 20 / 9, "energy": -2, "health": 0.5, "cleanliness": -1, "hunger": -1},
    closing_effects={"happiness": 5, "energy": -5},
)

SLEEPING = TimedActionSpec(
    status=PetStatus.SLEEPING, duration_seconds=180, interval_seconds=10,
    step_effects={"energy": 70 / 18, "health": 1, "hunger": -2},
    closing_effects={"energy": 10, "health": 5},
)


def apply_effects(record: PetRecord, effects: Dict[str, float]):
    for vital, delta in effects.items():
        setattr(record, vital, clamp(getattr(record, vital) + delta))


class TimedActionRunner:
    """Delivers a timed action's increments and closing adjustment.

    The runner remembers the state version from when the action began and
    quietly stops as soon as the record has moved on.
    """

    def __init__(self, context: SimulationContext, spec: TimedActionSpec, version: int):
        self.context = context
        self.spec = spec
        self.version = version

    def still_current(self) -> bool:
        record = self.context.record
        return record.state == self.spec.status and record.state_version == self.version

    def apply_step(self) -> bool:
        if not self.still_current():
            return False
        apply_effects(self.context.record, self.spec.step_effects)
        self.context.commit()
        return True

    def finish(self) -> bool:
        if not self.still_current():
            return False
        record = self.context.record
        apply_effects(record, self.spec.closing_effects)
        record.end_action()
        record.transition(PetStatus.IDLE)
        self.context.commit()
        return True

    async def run(self):
        for _ in range(self.spec.steps):
            await self.context.clock.sleep(self.spec.interval_seconds)
            if not self.apply_step():
                log.debug("timed_action_superseded", action=self.spec.status.value,
                          state=self.context.record.state.value)
                return
        if self.finish():
            log.info("timed_action_completed", action=self.spec.status.value, name=self.context.record.name)
        else:
            log.debug("timed_action_superseded", action=self.spec.status.value,
                      state=self.context.record.state.value)
