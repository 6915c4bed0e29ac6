# pocketpet/engine/decay.py
import asyncio

import structlog

from pocketpet.engine.context import SimulationContext
from pocketpet.models.pet import PetRecord, PetStatus, clamp

log = structlog.get_logger(__name__)

# Baseline attrition per scheduler tick (every 30 seconds)
HUNGER_DECAY = 2.0
HAPPINESS_DECAY = 1.5
HEALTH_DECAY = 0.5
SICK_HEALTH_MULTIPLIER = 3
ENERGY_DECAY = 1.0
CLEANLINESS_DECAY = 0.8
LONELINESS_INCREASE = 1.2
AGE_PER_TICK = 0.5  # minutes

# One-shot decay per minute spent offline
OFFLINE_HUNGER_PER_MINUTE = 0.5
OFFLINE_HAPPINESS_PER_MINUTE = 0.3
OFFLINE_ENERGY_PER_MINUTE = 0.2
OFFLINE_CLEANLINESS_PER_MINUTE = 0.1
OFFLINE_HEALTH_PER_MINUTE = 0.5
OFFLINE_NEGLECT_THRESHOLD = 20

DECAYING_STATES = (PetStatus.IDLE, PetStatus.SICK)


def apply_decay_tick(record: PetRecord) -> bool:
    """Applies one tick of attrition. Pets busy with an action or away are left alone."""
    if record.state not in DECAYING_STATES:
        return False
    health_decay = HEALTH_DECAY * (SICK_HEALTH_MULTIPLIER if record.sickness.is_sick else 1)
    record.hunger = clamp(record.hunger - HUNGER_DECAY)
    record.happiness = clamp(record.happiness - HAPPINESS_DECAY)
    record.health = clamp(record.health - health_decay)
    record.energy = clamp(record.energy - ENERGY_DECAY)
    record.cleanliness = clamp(record.cleanliness - CLEANLINESS_DECAY)
    record.loneliness = clamp(record.loneliness + LONELINESS_INCREASE)
    record.age += AGE_PER_TICK
    return True


def apply_offline_decay(record: PetRecord, minutes_away: int) -> bool:
    if minutes_away <= 0:
        return False
    record.hunger = clamp(record.hunger - minutes_away * OFFLINE_HUNGER_PER_MINUTE)
    record.happiness = clamp(record.happiness - minutes_away * OFFLINE_HAPPINESS_PER_MINUTE)
    record.energy = clamp(record.energy - minutes_away * OFFLINE_ENERGY_PER_MINUTE)
    record.cleanliness = clamp(record.cleanliness - minutes_away * OFFLINE_CLEANLINESS_PER_MINUTE)
    if record.hunger < OFFLINE_NEGLECT_THRESHOLD or record.happiness < OFFLINE_NEGLECT_THRESHOLD:
        record.health = clamp(record.health - minutes_away * OFFLINE_HEALTH_PER_MINUTE)
    log.info("offline_decay_applied", name=record.name, minutes_away=minutes_away,
             hunger=record.hunger, happiness=record.happiness, health=record.health)
    return True


class DecayScheduler:
    def __init__(self, context: SimulationContext, interval_seconds: float = 30):
        self.context = context
        self.interval_seconds = interval_seconds

    def tick(self) -> bool:
        decayed = apply_decay_tick(self.context.record)
        # Resolve even when nothing decayed so hospital/vacation stays can finish
        self.context.commit()
        return decayed

    async def run(self):
        log.info("Decay scheduler started.", interval_seconds=self.interval_seconds)
        while True:
            try:
                await self.context.clock.sleep(self.interval_seconds)
            except asyncio.CancelledError:
                log.info("Decay scheduler cancelled.")
                raise
            try:
                decayed = self.tick()
                log.debug("Decay tick completed.", decayed=decayed, state=self.context.record.state.value)
            except Exception as e:
                log.error("Unhandled error during decay tick.", error=str(e), exc_info=True)
