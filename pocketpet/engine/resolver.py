# pocketpet/engine/resolver.py
import random
from datetime import datetime, timedelta
from typing import Optional

import structlog

from pocketpet.core.clock import minutes_between
from pocketpet.models.pet import EvolutionStage, PetRecord, PetStatus, SicknessType, clamp

log = structlog.get_logger(__name__)

LONELINESS_PER_MINUTE = 0.5
MEDICINE_WINDOW = timedelta(minutes=10)
MEDICINE_SEVERITY_DROP = 2

HOSPITAL_HEALTH_BONUS = 50
VACATION_HAPPINESS_BONUS = 30
VACATION_ENERGY_BONUS = 20
VACATION_LONELINESS_RELIEF = 20

SICKNESS_ROLL_CHANCE = 0.001  # per resolve pass
SICKNESS_RISK_THRESHOLD = 50
SICKNESS_ONSET_CHANCE = 0.1
SICKNESS_TYPES = [SicknessType.COLD, SicknessType.STOMACH, SicknessType.SADNESS, SicknessType.FATIGUE]

# Continuous penalty per resolve pass while sick: (vital, delta)
SICKNESS_PENALTIES = {
    SicknessType.COLD: ("energy", -0.5),
    SicknessType.STOMACH: ("hunger", -1),
    SicknessType.SADNESS: ("happiness", -1),
    SicknessType.FATIGUE: ("energy", -1),
}

# stage -> (next stage, minutes until the one after, None when terminal)
EVOLUTION_STEPS = {
    EvolutionStage.BABY: (EvolutionStage.CHILD, 60),
    EvolutionStage.CHILD: (EvolutionStage.TEEN, 120),
    EvolutionStage.TEEN: (EvolutionStage.ADULT, None),
}


class ConditionResolver:
    """
    Reconciliation pass run after every mutation of the pet record.

    The steps run in a fixed order because later ones read what earlier
    ones just settled (e.g. hospital discharge clears sickness before the
    state is derived).
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def resolve(self, record: PetRecord, now: datetime) -> PetRecord:
        record.clamp_vitals()
        record.age = max(0, minutes_between(record.birth_time, now))
        self._update_loneliness(record, now)
        self._check_hospital(record, now)
        self._check_vacation(record, now)
        self._progress_sickness(record, now)
        self._roll_sickness(record)
        self._evolve(record)
        self._derive_state(record)
        record.clamp_vitals()
        return record

    def _update_loneliness(self, record: PetRecord, now: datetime):
        if record.last_interaction is None:
            record.loneliness = 0
            return
        minutes = max(0, minutes_between(record.last_interaction, now))
        record.loneliness = clamp(minutes * LONELINESS_PER_MINUTE)

    def _check_hospital(self, record: PetRecord, now: datetime):
        hospital = record.hospital
        if not hospital.is_in_hospital or hospital.admission_time is None:
            return
        if minutes_between(hospital.admission_time, now) < hospital.treatment_duration:
            return
        hospital.is_in_hospital = False
        hospital.admission_time = None
        record.sickness.clear()
        record.health = clamp(record.health + HOSPITAL_HEALTH_BONUS)
        record.transition(PetStatus.IDLE)
        log.info("pet_discharged_from_hospital", name=record.name, health=record.health)

    def _check_vacation(self, record: PetRecord, now: datetime):
        vacation = record.vacation
        if not vacation.is_on_vacation or vacation.start_time is None:
            return
        if minutes_between(vacation.start_time, now) < vacation.duration:
            return
        vacation.is_on_vacation = False
        vacation.start_time = None
        record.happiness = clamp(record.happiness + VACATION_HAPPINESS_BONUS)
        record.energy = clamp(record.energy + VACATION_ENERGY_BONUS)
        record.loneliness = clamp(record.loneliness - VACATION_LONELINESS_RELIEF)
        record.transition(PetStatus.IDLE)
        log.info("pet_returned_from_vacation", name=record.name, destination=vacation.destination)

    def _progress_sickness(self, record: PetRecord, now: datetime):
        sickness = record.sickness
        if record.is_away or not sickness.is_sick:
            return
        sickness.duration += 1
        penalty = SICKNESS_PENALTIES.get(sickness.type)
        if penalty:
            vital, delta = penalty
            setattr(record, vital, clamp(getattr(record, vital) + delta))

        if record.last_medicine is not None and now - record.last_medicine < MEDICINE_WINDOW:
            sickness.severity = max(0, sickness.severity - MEDICINE_SEVERITY_DROP)
            if sickness.severity <= 0:
                sickness.clear()
                log.info("pet_recovered", name=record.name)

    def _roll_sickness(self, record: PetRecord):
        if record.sickness.is_sick:
            return
        if self.rng.random() >= SICKNESS_ROLL_CHANCE:
            return
        risk = (100 - record.health) + (100 - record.cleanliness)
        if risk <= SICKNESS_RISK_THRESHOLD or self.rng.random() >= SICKNESS_ONSET_CHANCE:
            return
        sickness = record.sickness
        sickness.is_sick = True
        sickness.type = self.rng.choice(SICKNESS_TYPES)
        sickness.severity = self.rng.uniform(20, 80)
        sickness.duration = 0
        log.info("pet_fell_sick", name=record.name, sickness=sickness.type.value,
                 severity=round(sickness.severity, 1))

    def _evolve(self, record: PetRecord):
        evolution = record.evolution
        if evolution.next_evolution is None or record.age < evolution.next_evolution:
            return
        step = EVOLUTION_STEPS.get(evolution.stage)
        if step is None:
            evolution.next_evolution = None
            return
        next_stage, minutes_to_next = step
        evolution.stage = next_stage
        evolution.next_evolution = None if minutes_to_next is None else int(record.age) + minutes_to_next
        log.info("pet_evolved", name=record.name, stage=next_stage.value, age=record.age)

    def _derive_state(self, record: PetRecord):
        self._apply_state_rules(record)
        if record.active_action is not None and record.active_action != record.state:
            record.end_action()  # pre-empted by something else

    def _apply_state_rules(self, record: PetRecord):
        if record.is_away:
            record.transition(PetStatus.HOSPITAL if record.hospital.is_in_hospital else PetStatus.VACATION)
            return
        if record.state in (PetStatus.HOSPITAL, PetStatus.VACATION):
            record.transition(PetStatus.IDLE)

        if record.sickness.is_sick or record.health < 20:
            record.transition(PetStatus.SICK)
        elif record.energy < 20:
            record.transition(PetStatus.SLEEPING)
        elif record.action_in_progress:
            return
        elif record.state == PetStatus.SICK and record.health > 50:
            record.transition(PetStatus.IDLE)
        elif record.state == PetStatus.SLEEPING and record.energy > 50:
            record.transition(PetStatus.IDLE)
