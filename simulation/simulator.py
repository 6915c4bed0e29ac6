# simulation/simulator.py
import asyncio
import json
import random
from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog

from pocketpet.core.clock import ManualClock
from pocketpet.core.settings import Settings
from pocketpet.models.pet import PetRecord, PetStatus
from pocketpet.services.persistence import MemoryStore, PetRepository
from pocketpet.services.session import PetSession
from simulation.agents import BaseAgent, NeglectfulAgent, NurturingAgent, RandomAgent

log = structlog.get_logger(__name__)

AGENT_TYPES = {
    "nurturing": NurturingAgent,
    "random": RandomAgent,
    "neglectful": NeglectfulAgent,
}


# --- Reward Function Definition ---
# Vitals are "higher is better" across the board, loneliness excepted.
def calculate_reward(previous: PetRecord, current: PetRecord) -> float:
    reward = 0.0

    for vital in ("hunger", "happiness", "health", "energy", "cleanliness"):
        before, after = getattr(previous, vital), getattr(current, vital)
        if after > before:
            reward += (after - before) * 0.2
        elif after < 15 and after < before:  # Penalize if critical and getting worse
            reward -= (before - after) * 0.4

    if current.loneliness > 50:
        reward -= 0.5
    if current.sickness.is_sick:
        reward -= 1.0
    if current.state == PetStatus.SICK:
        reward -= 1.0

    # Small reward for a pet in good shape
    if min(current.hunger, current.happiness, current.health, current.energy) > 50:
        reward += 1.0

    return round(reward, 2)


async def run_episode(agent: BaseAgent, pet_name: str, max_steps: int = 200, step_seconds: float = 30,
                      seed: Optional[int] = None) -> List[Dict]:
    rng = random.Random(seed)
    clock = ManualClock()
    repository = PetRepository(MemoryStore(), clock, rng, pet_name=pet_name)
    session = PetSession(repository, clock, rng, Settings(STORAGE_BACKEND="memory"))
    await session.start()
    episode_data = []
    log.info("Starting new simulation episode", pet_name=pet_name, agent_type=type(agent).__name__,
             max_steps=max_steps)

    try:
        for step in range(max_steps):
            current = session.record.model_copy(deep=True)  # S_t
            action_tuple = agent.choose_action(current)

            action_name = None
            action_params = None
            accepted = False
            if action_tuple:
                action_name, action_params = action_tuple
                action_method = getattr(session, action_name, None)
                if action_method is None:
                    log.warning("Agent chose invalid action", pet_name=pet_name, step=step, action=action_name)
                    action_name = "invalid_action"
                else:
                    accepted = action_method(**action_params)

            await clock.advance(step_seconds)  # Let time pass
            next_record = session.record

            record = {
                "step": step,
                "state": current.snapshot(),  # S_t
                "action": action_name,  # A_t
                "action_params": action_params,
                "accepted": accepted,
                "reward": calculate_reward(current, next_record),  # R_{t+1}
                "next_state": next_record.snapshot(),  # S_{t+1}
                "timestamp": clock.now().isoformat(),
            }
            episode_data.append(record)
    finally:
        await session.dispose()

    log.info("Episode finished.", pet_name=pet_name, total_steps=len(episode_data),
             final_happiness=session.record.happiness, stage=session.record.evolution.stage.value)
    return episode_data


def generate_synthetic_data(num_episodes: int, agent_type: str = "random", output_file_prefix: str = "synthetic_data",
                            max_steps: int = 500) -> Optional[str]:
    agent_class = AGENT_TYPES.get(agent_type)
    if agent_class is None:
        log.error(f"Unknown agent type: {agent_type}")
        return None

    all_episodes_data = []
    for i in range(num_episodes):
        agent = agent_class(agent_id=f"{agent_type}_{i + 1}", rng=random.Random(i))
        episode_data = asyncio.run(run_episode(agent, f"SimPet_{i + 1}", max_steps=max_steps, seed=i))
        all_episodes_data.extend(episode_data)

    stamp = datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S')
    output_filename = f"{output_file_prefix}_{agent_type}_{num_episodes}_episodes_{stamp}.jsonl"
    with open(output_filename, 'w') as f:
        for record in all_episodes_data:
            f.write(json.dumps(record) + '\n')
    log.info(f"Synthetic data generated and saved to {output_filename}", total_records=len(all_episodes_data))
    return output_filename


if __name__ == "__main__":
    from pocketpet.core.logging_config import setup_logging

    setup_logging(log_level_str="INFO")  # Ensure logging is configured if run directly

    generate_synthetic_data(num_episodes=10, agent_type="nurturing", output_file_prefix="sim_nurturing")
