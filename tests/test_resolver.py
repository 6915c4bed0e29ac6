import random
from datetime import timedelta

import pytest

from pocketpet.engine.resolver import ConditionResolver
from pocketpet.models.pet import VITALS, EvolutionStage, PetStatus, SicknessType


@pytest.fixture
def resolver(rng):
    return ConditionResolver(rng)


def make_sick(pet, kind=SicknessType.STOMACH, severity=30.0):
    pet.sickness.is_sick = True
    pet.sickness.type = kind
    pet.sickness.severity = severity


def test_vitals_are_clamped(pet, resolver, start):
    pet.hunger = 150
    pet.energy = -20
    pet.cleanliness = 100.5
    resolver.resolve(pet, start)
    assert pet.hunger == 100
    assert pet.energy == 0
    assert pet.cleanliness == 100
    for vital in VITALS:
        assert 0 <= getattr(pet, vital) <= 100


def test_age_is_derived_from_birth_time(pet, resolver, start):
    pet.age = 999
    resolver.resolve(pet, start + timedelta(minutes=12, seconds=40))
    assert pet.age == 12


def test_loneliness_is_recomputed_not_accumulated(pet, resolver, start):
    now = start + timedelta(minutes=30, seconds=20)
    pet.loneliness = 80
    resolver.resolve(pet, now)
    assert pet.loneliness == 15
    resolver.resolve(pet, now)
    assert pet.loneliness == 15


def test_loneliness_caps_at_100(pet, resolver, start):
    resolver.resolve(pet, start + timedelta(hours=10))
    assert pet.loneliness == 100


def test_hospital_stay_completes_after_treatment(pet, resolver, start):
    make_sick(pet, severity=55)
    pet.health = 40
    pet.hospital.is_in_hospital = True
    pet.hospital.admission_time = start
    pet.hospital.treatment_duration = 6
    pet.transition(PetStatus.HOSPITAL)

    resolver.resolve(pet, start + timedelta(minutes=5))
    assert pet.state == PetStatus.HOSPITAL
    assert pet.sickness.is_sick
    assert pet.sickness.duration == 0  # progression suspended while hospitalised

    resolver.resolve(pet, start + timedelta(minutes=6))
    assert not pet.hospital.is_in_hospital
    assert pet.hospital.admission_time is None
    assert not pet.sickness.is_sick
    assert pet.sickness.type == SicknessType.NONE
    assert pet.health == 90
    assert pet.state == PetStatus.IDLE


def test_hospital_health_bonus_is_capped(pet, resolver, start):
    make_sick(pet)
    pet.health = 80
    pet.hospital.is_in_hospital = True
    pet.hospital.admission_time = start
    pet.hospital.treatment_duration = 3
    pet.transition(PetStatus.HOSPITAL)
    resolver.resolve(pet, start + timedelta(minutes=3))
    assert pet.health == 100


def test_vacation_completes(pet, resolver, start):
    pet.happiness = 50
    pet.energy = 50
    pet.vacation.is_on_vacation = True
    pet.vacation.start_time = start
    pet.vacation.duration = 15
    pet.vacation.destination = "Forest Camp"
    pet.transition(PetStatus.VACATION)

    resolver.resolve(pet, start + timedelta(minutes=14))
    assert pet.state == PetStatus.VACATION
    assert pet.happiness == 50

    resolver.resolve(pet, start + timedelta(minutes=15))
    assert not pet.vacation.is_on_vacation
    assert pet.happiness == 80
    assert pet.energy == 70
    assert pet.state == PetStatus.IDLE


def test_sickness_progression_applies_type_penalty(pet, resolver, start):
    make_sick(pet, SicknessType.STOMACH)
    pet.hunger = 50
    resolver.resolve(pet, start)
    assert pet.hunger == 49
    assert pet.sickness.duration == 1
    assert pet.state == PetStatus.SICK


def test_cold_drains_energy(pet, resolver, start):
    make_sick(pet, SicknessType.COLD)
    resolver.resolve(pet, start)
    assert pet.energy == 79.5


def test_recent_medicine_reduces_severity_until_cured(pet, resolver, start):
    make_sick(pet, SicknessType.SADNESS, severity=3)
    pet.transition(PetStatus.SICK)
    pet.last_medicine = start - timedelta(minutes=1)
    resolver.resolve(pet, start)
    assert pet.sickness.severity == 1
    assert pet.sickness.is_sick

    resolver.resolve(pet, start)
    assert not pet.sickness.is_sick
    assert pet.sickness.severity == 0
    assert pet.state == PetStatus.IDLE  # health > 50 releases the sick state


def test_old_medicine_has_no_effect(pet, resolver, start):
    make_sick(pet, severity=30)
    pet.last_medicine = start - timedelta(minutes=10)
    resolver.resolve(pet, start)
    assert pet.sickness.severity == 30


def test_sickness_onset_needs_high_risk(pet, start, unlucky_rng):
    resolver = ConditionResolver(unlucky_rng)
    pet.health = 90
    pet.cleanliness = 80  # risk 30
    resolver.resolve(pet, start)
    assert not pet.sickness.is_sick

    pet.health = 60
    pet.cleanliness = 50  # risk 90
    resolver.resolve(pet, start)
    assert pet.sickness.is_sick
    assert pet.sickness.type in {SicknessType.COLD, SicknessType.STOMACH, SicknessType.SADNESS,
                                 SicknessType.FATIGUE}
    assert 20 <= pet.sickness.severity < 80
    assert pet.state == PetStatus.SICK


def test_sickness_type_covers_all_four_kinds(pet, start):
    class Unlucky(random.Random):
        getrandbits = random.Random.getrandbits

        def random(self):
            return 0.0

    seen = set()
    for seed in range(200):
        pet.sickness.clear()
        pet.health = 10
        ConditionResolver(Unlucky(seed)).resolve(pet, start)
        seen.add(pet.sickness.type)
    assert seen == {SicknessType.COLD, SicknessType.STOMACH, SicknessType.SADNESS, SicknessType.FATIGUE}


def test_evolution_advances_one_stage_per_pass(pet, resolver, start):
    resolver.resolve(pet, start + timedelta(minutes=30))
    assert pet.evolution.stage == EvolutionStage.CHILD
    assert pet.evolution.next_evolution == 90

    resolver.resolve(pet, start + timedelta(minutes=500))
    assert pet.evolution.stage == EvolutionStage.TEEN
    assert pet.evolution.next_evolution == 620

    resolver.resolve(pet, start + timedelta(minutes=620))
    assert pet.evolution.stage == EvolutionStage.ADULT
    assert pet.evolution.next_evolution is None

    resolver.resolve(pet, start + timedelta(days=30))
    assert pet.evolution.stage == EvolutionStage.ADULT


def test_evolution_never_reverts(pet, resolver, start):
    pet.evolution.stage = EvolutionStage.TEEN
    pet.evolution.next_evolution = 300
    resolver.resolve(pet, start)  # age 0
    assert pet.evolution.stage == EvolutionStage.TEEN


def test_low_energy_sends_pet_to_sleep(pet, resolver, start):
    pet.energy = 10
    resolver.resolve(pet, start)
    assert pet.state == PetStatus.SLEEPING

    pet.energy = 60
    resolver.resolve(pet, start)
    assert pet.state == PetStatus.IDLE


def test_low_health_makes_pet_sick(pet, resolver, start):
    pet.health = 10
    resolver.resolve(pet, start)
    assert pet.state == PetStatus.SICK

    pet.health = 45
    resolver.resolve(pet, start)
    assert pet.state == PetStatus.SICK  # needs health above 50 to recover
    pet.health = 55
    resolver.resolve(pet, start)
    assert pet.state == PetStatus.IDLE


def test_running_sleep_action_is_not_released_early(pet, resolver, start):
    pet.begin_action(PetStatus.SLEEPING)
    pet.energy = 70
    resolver.resolve(pet, start)
    assert pet.state == PetStatus.SLEEPING


def test_care_threshold_interrupts_running_action(pet, resolver, start):
    version = pet.begin_action(PetStatus.PLAYING)
    pet.energy = 10
    resolver.resolve(pet, start)
    assert pet.state == PetStatus.SLEEPING
    assert pet.state_version != version
    assert pet.active_action is None


def test_away_states_are_left_alone(pet, resolver, start):
    make_sick(pet)
    pet.health = 5
    pet.hospital.is_in_hospital = True
    pet.hospital.admission_time = start
    pet.hospital.treatment_duration = 8
    pet.transition(PetStatus.HOSPITAL)
    resolver.resolve(pet, start)
    assert pet.state == PetStatus.HOSPITAL
