import random
from datetime import datetime, timezone

import pytest

from pocketpet.core.clock import ManualClock
from pocketpet.core.settings import Settings
from pocketpet.engine.context import SimulationContext
from pocketpet.models.pet import create_new_pet
from pocketpet.services.persistence import MemoryStore, PetRepository
from pocketpet.services.session import PetSession

START = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class CalmRandom(random.Random):
    """random() never lands under the sickness roll, everything else stays seeded."""

    getrandbits = random.Random.getrandbits  # keep choice/randint on the seeded bit stream

    def random(self):
        return 0.5


class UnluckyRandom(random.Random):
    getrandbits = random.Random.getrandbits

    def random(self):
        return 0.0


@pytest.fixture
def clock():
    return ManualClock(START)


@pytest.fixture
def rng():
    return CalmRandom(1234)


@pytest.fixture
def pet(rng):
    return create_new_pet(START, rng)


@pytest.fixture
def context(pet, clock, rng):
    return SimulationContext(pet, clock, rng=rng)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def repository(store, clock, rng):
    return PetRepository(store, clock, rng)


@pytest.fixture
def test_settings():
    return Settings(STORAGE_BACKEND="memory")


@pytest.fixture
async def session(repository, clock, rng, test_settings):
    session = PetSession(repository, clock, rng, test_settings)
    await session.start()
    yield session
    await session.dispose()


@pytest.fixture
def start():
    return START


@pytest.fixture
def unlucky_rng():
    return UnluckyRandom(1234)
