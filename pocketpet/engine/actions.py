# pocketpet/engine/actions.py
import asyncio
import math
from typing import Set, Union

import structlog

from pocketpet.engine.context import SimulationContext
from pocketpet.engine.timed import EATING, PLAYING, SLEEPING, TimedActionRunner, TimedActionSpec, apply_effects
from pocketpet.models.catalog import get_item
from pocketpet.models.pet import ItemCategory, PetStatus, clamp

log = structlog.get_logger(__name__)

MEDICINE_COST = 20
MEDICINE_HEALTH = 10
HOSPITAL_COST = 50
VACATION_COST = 100
VACATION_MIN_LONELINESS = 50
VACATION_MINUTES = 15
VACATION_DESTINATIONS = ["Beach Resort", "Mountain Retreat", "City Adventure", "Forest Camp", "Spa Retreat"]
WORK_MIN_ENERGY = 30
WORK_ENERGY_COST = 20
WORK_PAY_RANGE = (10, 30)


class ActionEngine:
    """
    Player actions on the live pet.

    Every action returns True when it took effect and False when its
    precondition failed; a rejected action leaves the record untouched.
    """

    def __init__(self, context: SimulationContext):
        self.context = context
        self._runners: Set[asyncio.Task] = set()

    @property
    def record(self):
        return self.context.record

    def _reject(self, action: str, reason: str) -> bool:
        log.debug("action_rejected", action=action, reason=reason, state=self.record.state.value)
        return False

    def _accept(self, action: str, **details) -> bool:
        self.context.commit()
        log.info("action_performed", action=action, name=self.record.name, state=self.record.state.value, **details)
        return True

    # --- Timed actions ---

    def _start_timed(self, spec: TimedActionSpec, timestamp_field: str) -> bool:
        record = self.record
        now = self.context.now()
        version = record.begin_action(spec.status)
        setattr(record, timestamp_field, now)
        record.last_interaction = now
        self.context.commit()
        if not record.action_in_progress:
            # The attempt counts as an interaction, but sickness or exhaustion took over
            return self._reject(spec.status.value, f"pre_empted_by_{record.state.value}")
        runner = TimedActionRunner(self.context, spec, version)
        task = self.context.spawn(runner.run(), name=f"timed-{spec.status.value}")
        self._runners.add(task)
        task.add_done_callback(self._runners.discard)
        log.info("action_performed", action=spec.status.value, name=record.name,
                 duration_seconds=spec.duration_seconds)
        return True

    def feed(self) -> bool:
        if self.record.is_away:
            return self._reject("feed", "away")
        if self.record.hunger > 90:
            return self._reject("feed", "not_hungry")
        return self._start_timed(EATING, "last_fed")

    def play(self) -> bool:
        if self.record.is_away:
            return self._reject("play", "away")
        if self.record.energy < 20 or self.record.happiness > 90:
            return self._reject("play", "too_tired_or_happy")
        return self._start_timed(PLAYING, "last_played")

    def sleep(self) -> bool:
        if self.record.is_away:
            return self._reject("sleep", "away")
        if self.record.energy > 80:
            return self._reject("sleep", "not_tired")
        return self._start_timed(SLEEPING, "last_slept")

    async def cancel_all(self):
        runners = list(self._runners)
        for task in runners:
            task.cancel()
        if runners:
            await asyncio.gather(*runners, return_exceptions=True)

    # --- Instant actions ---

    def clean(self) -> bool:
        record = self.record
        if record.is_away:
            return self._reject("clean", "away")
        if record.cleanliness > 90:
            return self._reject("clean", "already_clean")
        now = self.context.now()
        apply_effects(record, {"cleanliness": 30, "happiness": 10, "health": 5})
        record.last_cleaned = now
        record.last_interaction = now
        return self._accept("clean")

    def give_medicine(self) -> bool:
        record = self.record
        if record.is_away:
            return self._reject("give_medicine", "away")
        if not record.sickness.is_sick or record.money < MEDICINE_COST:
            return self._reject("give_medicine", "not_sick_or_no_money")
        now = self.context.now()
        record.money -= MEDICINE_COST
        record.health = clamp(record.health + MEDICINE_HEALTH)
        record.last_medicine = now
        record.last_interaction = now
        return self._accept("give_medicine", money=record.money)

    def send_to_hospital(self) -> bool:
        record = self.record
        if record.is_away:
            return self._reject("send_to_hospital", "away")
        if not record.sickness.is_sick or record.money < HOSPITAL_COST:
            return self._reject("send_to_hospital", "not_sick_or_no_money")
        now = self.context.now()
        record.money -= HOSPITAL_COST
        record.hospital.is_in_hospital = True
        record.hospital.admission_time = now
        record.hospital.treatment_duration = math.ceil(record.sickness.severity / 10)
        record.last_interaction = now
        record.end_action()
        record.transition(PetStatus.HOSPITAL)
        return self._accept("send_to_hospital", treatment_minutes=record.hospital.treatment_duration)

    def send_on_vacation(self) -> bool:
        record = self.record
        if record.is_away:
            return self._reject("send_on_vacation", "away")
        if record.money < VACATION_COST or record.loneliness < VACATION_MIN_LONELINESS:
            return self._reject("send_on_vacation", "no_money_or_not_lonely")
        now = self.context.now()
        record.money -= VACATION_COST
        record.vacation.is_on_vacation = True
        record.vacation.start_time = now
        record.vacation.duration = VACATION_MINUTES
        record.vacation.destination = self.context.rng.choice(VACATION_DESTINATIONS)
        record.last_interaction = now
        record.end_action()
        record.transition(PetStatus.VACATION)
        return self._accept("send_on_vacation", destination=record.vacation.destination)

    def earn_money(self) -> bool:
        record = self.record
        if record.is_away:
            return self._reject("earn_money", "away")
        if record.energy < WORK_MIN_ENERGY:
            return self._reject("earn_money", "too_tired")
        earnings = self.context.rng.randint(*WORK_PAY_RANGE)
        record.money += earnings
        record.energy = clamp(record.energy - WORK_ENERGY_COST)
        record.last_interaction = self.context.now()
        return self._accept("earn_money", earnings=earnings, money=record.money)

    def purchase(self, item_id: str, category: Union[ItemCategory, str]) -> bool:
        try:
            category = ItemCategory(category)
        except ValueError:
            return self._reject("purchase", "unknown_category")
        record = self.record
        item = get_item(item_id)
        if item is None or item.category != category:
            return self._reject("purchase", "unknown_item")
        if record.money < item.price:
            return self._reject("purchase", "no_money")
        if category == ItemCategory.APPLIANCES and record.inventory.owns(category, item_id):
            return self._reject("purchase", "already_owned")
        record.money -= item.price
        record.inventory.add(category, item_id)
        if category == ItemCategory.FOODS:
            apply_effects(record, item.effects)
        record.last_interaction = self.context.now()
        return self._accept("purchase", item=item_id, price=item.price, money=record.money)
