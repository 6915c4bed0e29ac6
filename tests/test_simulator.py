import random

import pytest

from pocketpet.models.pet import VITALS, create_new_pet
from simulation.agents import NeglectfulAgent, NurturingAgent, RandomAgent
from simulation.simulator import calculate_reward, run_episode


@pytest.mark.parametrize("agent_class", [NurturingAgent, RandomAgent, NeglectfulAgent])
async def test_episode_keeps_vitals_in_bounds(agent_class):
    agent = agent_class(agent_id="test", rng=random.Random(7))
    rows = await run_episode(agent, "SimPet", max_steps=60, step_seconds=30, seed=7)
    assert len(rows) == 60
    for row in rows:
        for vital in VITALS:
            assert 0 <= row["next_state"][vital] <= 100
        assert row["next_state"]["money"] >= 0


async def test_nurturing_agent_feeds_a_hungry_pet():
    rows = await run_episode(NurturingAgent(agent_id="n", rng=random.Random(1)), "Hungry", max_steps=1, seed=1)
    assert rows[0]["action"] is None  # a fresh pet needs nothing

    agent = NurturingAgent(agent_id="n", rng=random.Random(1))
    pet = create_new_pet()
    pet.hunger = 20
    pet.money = 10
    assert agent.choose_action(pet) == ("feed", {})


def test_reward_prefers_improvement():
    before = create_new_pet()
    before.hunger = 40
    after = before.model_copy(deep=True)
    after.hunger = 70
    assert calculate_reward(before, after) > calculate_reward(after, before)
