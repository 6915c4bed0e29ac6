from datetime import timedelta

import pytest

from pocketpet.engine.decay import DecayScheduler, apply_decay_tick, apply_offline_decay
from pocketpet.models.pet import PetStatus


def test_decay_tick_applies_baseline_attrition(pet):
    assert apply_decay_tick(pet)
    assert pet.hunger == pytest.approx(78)
    assert pet.happiness == pytest.approx(78.5)
    assert pet.health == pytest.approx(99.5)
    assert pet.energy == pytest.approx(79)
    assert pet.cleanliness == pytest.approx(99.2)
    assert pet.loneliness == pytest.approx(1.2)
    assert pet.age == pytest.approx(0.5)


def test_sick_pet_loses_health_three_times_faster(pet):
    pet.sickness.is_sick = True
    pet.transition(PetStatus.SICK)
    assert apply_decay_tick(pet)
    assert pet.health == pytest.approx(98.5)


@pytest.mark.parametrize("status", [PetStatus.EATING, PetStatus.PLAYING, PetStatus.SLEEPING,
                                    PetStatus.HOSPITAL, PetStatus.VACATION])
def test_busy_or_away_pets_do_not_decay(pet, status):
    pet.transition(status)
    before = pet.snapshot()
    assert not apply_decay_tick(pet)
    assert pet.snapshot() == before


def test_decay_never_leaves_bounds(pet):
    pet.hunger = 1
    pet.cleanliness = 0.5
    apply_decay_tick(pet)
    assert pet.hunger == 0
    assert pet.cleanliness == 0


def test_offline_decay_is_proportional_to_minutes_away(pet):
    pet.hunger = 50
    assert apply_offline_decay(pet, 20)
    assert pet.hunger == pytest.approx(40)
    assert pet.happiness == pytest.approx(74)
    assert pet.energy == pytest.approx(76)
    assert pet.cleanliness == pytest.approx(98)
    assert pet.health == 100


def test_offline_neglect_costs_health(pet):
    pet.hunger = 15
    apply_offline_decay(pet, 10)
    assert pet.hunger == pytest.approx(10)
    assert pet.health == pytest.approx(95)


def test_no_offline_decay_without_time_away(pet):
    before = pet.snapshot()
    assert not apply_offline_decay(pet, 0)
    assert pet.snapshot() == before


def test_scheduler_tick_commits_through_resolver(context, clock):
    commits = []
    context.on_commit = commits.append
    scheduler = DecayScheduler(context, interval_seconds=30)
    context.record.hunger = 150
    scheduler.tick()
    assert commits == [context.record]
    assert context.record.hunger == 100


def test_scheduler_tick_resolves_even_without_decay(context, clock, start):
    pet = context.record
    pet.sickness.is_sick = True
    pet.hospital.is_in_hospital = True
    pet.hospital.admission_time = start - timedelta(minutes=10)
    pet.hospital.treatment_duration = 5
    pet.transition(PetStatus.HOSPITAL)

    assert not DecayScheduler(context).tick()
    assert not pet.hospital.is_in_hospital
    assert pet.state == PetStatus.IDLE


async def test_scheduler_runs_on_its_period(context, clock):
    commits = []
    context.on_commit = commits.append
    scheduler = DecayScheduler(context, interval_seconds=30)
    task = context.spawn(scheduler.run(), name="decay")

    await clock.advance(95)
    assert len(commits) == 3
    assert context.record.hunger == pytest.approx(74)

    await context.cancel_all()
    assert task.cancelled()
